from dataclasses import replace

import pandas as pd
import pytest

import main
from unboxd_engine import samples
from unboxd_engine.errors import MarketDataError

START = "2024-05-06T14:00"


def test_match_command(capsys):
    assert main.main(["match", "--start", START]) == 0
    out = capsys.readouterr().out
    assert "Driver matching for req-1001" in out
    assert "Sarah Okafor" in out


def test_route_command_writes_csv(tmp_path, capsys):
    target = tmp_path / "waypoints.csv"
    assert main.main(["route", "--start", START, "--csv", str(target)]) == 0
    assert "Fuel savings" in capsys.readouterr().out
    assert len(pd.read_csv(target)) == 6


def test_quote_command_is_reproducible(capsys):
    assert main.main(["quote", "--start", START, "--seed", "7"]) == 0
    first = capsys.readouterr().out
    assert main.main(["quote", "--start", START, "--seed", "7"]) == 0
    assert capsys.readouterr().out == first
    assert "Quote: NGN" in first


def test_invalid_input_exit_code(monkeypatch, capsys):
    original = samples.sample_request
    monkeypatch.setattr(samples, "sample_request", lambda when: replace(original(when), budget=-5.0))
    assert main.main(["match", "--start", START]) == 1
    assert "Invalid input" in capsys.readouterr().out


def test_market_failure_exit_code(monkeypatch, capsys):
    class Offline:
        def __init__(self, seed=None, clock=None):
            pass

        async def fetch(self, location):
            raise MarketDataError("telemetry offline")

    monkeypatch.setattr(main, "SimulatedMarketConditionsProvider", Offline)
    assert main.main(["quote", "--start", START]) == 2
    assert "Market data unavailable" in capsys.readouterr().out


def test_unknown_command_is_rejected():
    with pytest.raises(SystemExit):
        main.main(["dispatch"])
