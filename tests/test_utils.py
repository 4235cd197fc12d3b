from datetime import datetime

import pytest
import requests

from unboxd_engine import utils
from unboxd_engine.config import GeoConfig
from unboxd_engine.errors import InvalidInputError
from unboxd_engine.models import GeoPoint

from factories import ORIGIN, north_of

LAGOS = GeoPoint(6.5244, 3.3792)
IBADAN = GeoPoint(7.3775, 3.9470)


def test_distance_is_symmetric_and_zero_on_identity():
    assert utils.get_distance(LAGOS, IBADAN) == pytest.approx(utils.get_distance(IBADAN, LAGOS))
    assert utils.get_distance(LAGOS, LAGOS) == 0.0
    assert utils.haversine_distance(7.5, 4.5, 7.5, 4.5) == pytest.approx(0.0)


def test_distance_along_meridian_matches_earth_radius():
    assert utils.get_distance(ORIGIN, north_of(ORIGIN, 2.0)) == pytest.approx(2.0)
    # Lagos to Ibadan is roughly 113 km as the crow flies
    assert 105 < utils.get_distance(LAGOS, IBADAN) < 125


def test_travel_time_uses_traffic_slowdown():
    ten_km = north_of(ORIGIN, 10.0)
    assert utils.get_travel_time(ORIGIN, ten_km, 0.0) == 20
    assert utils.get_travel_time(ORIGIN, ten_km, 1.0) == 30
    assert utils.get_travel_time(ORIGIN, ten_km, 0.5) == 25
    assert utils.get_travel_time(ORIGIN, ORIGIN, 0.8) == 0


def test_travel_time_rejects_out_of_range_traffic():
    with pytest.raises(InvalidInputError):
        utils.get_travel_time(ORIGIN, north_of(ORIGIN, 1.0), 1.5)


def test_traffic_level_by_time_of_day():
    monday_rush = datetime(2024, 5, 6, 8, 30)
    monday_midday = datetime(2024, 5, 6, 14, 0)
    saturday_midday = datetime(2024, 5, 11, 14, 0)
    saturday_evening_rush = datetime(2024, 5, 11, 18, 0)

    assert utils.get_traffic_level(ORIGIN, LAGOS, monday_rush) == 0.8
    assert utils.get_traffic_level(ORIGIN, LAGOS, monday_midday) == 0.5
    assert utils.get_traffic_level(ORIGIN, LAGOS, saturday_midday) == 0.3
    assert utils.get_traffic_level(ORIGIN, LAGOS, saturday_evening_rush) == 0.8


def test_round_half_up():
    assert utils.round_half_up(2.5) == 3
    assert utils.round_half_up(12.5) == 13
    assert utils.round2(1.005) == 1.01
    assert utils.round2(19.999) == 20.0


def test_format_duration():
    assert utils.format_duration(45) == "45m"
    assert utils.format_duration(83) == "1h 23m"


class _FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


def test_road_distance_uses_osrm_when_enabled(monkeypatch):
    utils.clear_osrm_cache()
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return _FakeResponse({"code": "Ok", "routes": [{"distance": 4200.0, "duration": 600.0}]})

    monkeypatch.setattr(utils.requests, "get", fake_get)
    geo = GeoConfig(use_road_distance=True)
    b = north_of(ORIGIN, 3.0)

    assert utils.get_distance(ORIGIN, b, geo) == pytest.approx(4.2)
    # Second lookup in either direction is served from the cache
    assert utils.get_distance(b, ORIGIN, geo) == pytest.approx(4.2)
    assert len(calls) == 1
    assert utils.clear_osrm_cache() == 1


def test_road_distance_falls_back_to_haversine(monkeypatch):
    utils.clear_osrm_cache()

    def failing_get(url, timeout):
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(utils.requests, "get", failing_get)
    geo = GeoConfig(use_road_distance=True)

    assert utils.get_distance(ORIGIN, north_of(ORIGIN, 5.0), geo) == pytest.approx(5.0 * 1.4)
