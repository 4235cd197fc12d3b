import pytest

from unboxd_engine import config
from unboxd_engine.config import GeoConfig, MatchingConfig, PricingConfig, RoutingConfig


def test_matching_weights_sum_to_one():
    cfg = MatchingConfig()
    total = cfg.w_proximity + cfg.w_rating + cfg.w_reliability + cfg.w_vehicle_fit + cfg.w_availability
    assert total == pytest.approx(1.0)


def test_defaults_when_environment_is_empty(monkeypatch):
    for name in (
        "UNBOXD_BASE_SPEED_KMH",
        "UNBOXD_USE_ROAD_DISTANCE",
        "UNBOXD_MAX_MATCH_DISTANCE_KM",
        "UNBOXD_FUEL_PRICE_PER_LITER",
        "UNBOXD_MINIMUM_FARE",
    ):
        monkeypatch.delenv(name, raising=False)

    assert GeoConfig.from_env() == GeoConfig()
    assert MatchingConfig.from_env() == MatchingConfig()
    assert RoutingConfig.from_env() == RoutingConfig()
    assert PricingConfig.from_env() == PricingConfig()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("UNBOXD_USE_ROAD_DISTANCE", "yes")
    monkeypatch.setenv("UNBOXD_OSRM_SERVER_URL", "http://localhost:5000")
    monkeypatch.setenv("UNBOXD_MAX_MATCH_DISTANCE_KM", "25")
    monkeypatch.setenv("UNBOXD_DRIVER_COST_PER_HOUR", "650")
    monkeypatch.setenv("UNBOXD_MINIMUM_FARE", "20")
    monkeypatch.setenv("UNBOXD_MARKET_DATA_MAX_AGE_S", "")

    geo = GeoConfig.from_env()
    assert geo.use_road_distance is True
    assert geo.osrm_server_url == "http://localhost:5000"
    assert MatchingConfig.from_env().max_distance_km == 25.0
    assert RoutingConfig.from_env().driver_cost_per_hour == 650.0

    pricing = PricingConfig.from_env()
    assert pricing.minimum_fare == 20.0
    assert pricing.market_data_max_age_s == config.MARKET_DATA_MAX_AGE_S


def test_bad_numeric_environment_value_fails_loudly(monkeypatch):
    monkeypatch.setenv("UNBOXD_BASE_SPEED_KMH", "fast")
    with pytest.raises(ValueError):
        GeoConfig.from_env()


def test_configs_are_immutable():
    cfg = PricingConfig()
    with pytest.raises(AttributeError):
        cfg.minimum_fare = 1.0


def test_multiplier_tables_are_read_only():
    pricing = PricingConfig()
    with pytest.raises(TypeError):
        pricing.time_multipliers["rush"] = 9.0
    with pytest.raises(TypeError):
        MatchingConfig().vehicle_cost_multipliers["truck"] = 9.0
    assert config.TIME_MULTIPLIERS["rush"] == 1.6


def test_caller_tables_are_copied_on_construction():
    areas = {"lekki": 1.5}
    pricing = PricingConfig(location_multipliers=areas)
    areas["lekki"] = 3.0
    assert pricing.location_multipliers["lekki"] == 1.5


def test_configs_are_hashable_and_compare_by_value():
    assert hash(PricingConfig()) == hash(PricingConfig())
    assert hash(MatchingConfig()) == hash(MatchingConfig())
    assert PricingConfig() == PricingConfig()
    assert PricingConfig(weather_multipliers={"clear": 1.0}) != PricingConfig()
    assert len({PricingConfig(), PricingConfig()}) == 1
