# unboxd-engine/unboxd_engine/config.py
"""
Configuration parameters for the Unboxd decision engines.

This module centralizes all tunable parameters, making it easy to:
- Adjust the geometry and traffic model shared by matching and routing
- Fine-tune the driver matching weights and cost model
- Swap pricing tables per region or currency

Module-level constants are the defaults. Engines never read them directly;
they receive one of the frozen config dataclasses below, so several
configurations can coexist (and tests can pass their own).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Final, Mapping

# =============================================================================
# GEO-KERNEL PARAMETERS
# =============================================================================

EARTH_RADIUS_KM: Final[float] = 6371.0
"""Mean Earth radius used by the Haversine formula."""

BASE_SPEED_KMH: float = 30.0
"""Free-flow city speed. Effective speed is BASE_SPEED_KMH / (1 + traffic * 0.5)."""

TRAFFIC_SLOWDOWN_FACTOR: float = 0.5
"""How strongly traffic (0-1) slows vehicles down. 0.5 means heavy traffic = 1.5x slower."""

RUSH_HOUR_TRAFFIC: float = 0.8
"""Traffic level during rush hours (07:00-09:59 and 17:00-19:59)."""

WEEKEND_TRAFFIC: float = 0.3
"""Traffic level on Saturdays and Sundays outside rush hours."""

NORMAL_TRAFFIC: float = 0.5
"""Traffic level at any other time."""

# =============================================================================
# ROAD DISTANCE (OSRM) CONFIGURATION
# =============================================================================

USE_ROAD_DISTANCE: bool = False
"""
Enable real road distance calculation via OSRM.
When True, uses actual road network distances instead of straight-line.
When False, uses Haversine (great-circle) distance.
"""

OSRM_SERVER_URL: str = "https://router.project-osrm.org"
"""
OSRM server URL. Options:
- "https://router.project-osrm.org" (public demo, rate-limited)
- "http://localhost:5000" (local Docker instance)
"""

OSRM_TIMEOUT_SECONDS: float = 5.0
"""Timeout for OSRM API requests. Fail fast so a quote never hangs on routing."""

OSRM_CACHE_SIZE: int = 10000
"""Maximum number of route results to cache. Prevents repeated API calls."""

HAVERSINE_FALLBACK_MULTIPLIER: float = 1.4
"""
Multiplier applied to Haversine distance when OSRM fails.
Typical city roads are 1.3-1.5x longer than straight-line distance.
"""

# =============================================================================
# MATCHING PARAMETERS
# =============================================================================

MAX_MATCH_DISTANCE_KM: float = 50.0
"""Agents further than this from the pickup are never considered."""

W_PROXIMITY: float = 0.40
W_RATING: float = 0.25
W_RELIABILITY: float = 0.20
W_VEHICLE_FIT: float = 0.10
W_AVAILABILITY: float = 0.05
"""Scoring weights. They must sum to 1.0 so the total score stays in [0, 1]."""

PREP_TIME_MINS: float = 5.0
"""Fixed preparation time added to every arrival estimate."""

RESPONSE_TIME_WEIGHT: float = 0.5
"""Share of the agent's average response time added to the arrival estimate."""

EXPERIENCED_AGENT_JOBS: int = 10
"""Agents with more completed jobs than this get full confidence."""

NEW_AGENT_CONFIDENCE_FACTOR: float = 0.8
"""Confidence multiplier for agents with little history."""

MAX_MATCH_CONFIDENCE: float = 0.95
"""Upper bound on any match confidence."""

INSTANT_MATCH_MIN_CONFIDENCE: float = 0.7
INSTANT_MATCH_MAX_ARRIVAL_MINS: float = 30.0
"""An instant match is only offered above this confidence and below this ETA."""

MATCH_RATE_PER_KM: float = 2.5
MATCH_MINIMUM_FEE: float = 15.0
"""Estimated job cost: max(MINIMUM_FEE, RATE_PER_KM * distance) before multipliers."""

FRAGILE_COST_MULTIPLIER: float = 1.2
SPECIAL_REQUIREMENTS_COST_MULTIPLIER: float = 1.1
LARGE_VOLUME_COST_MULTIPLIER: float = 1.3
LARGE_VOLUME_THRESHOLD: float = 50.0
"""Item surcharges. Volume is measured in cubic feet."""

VEHICLE_COST_MULTIPLIERS: Dict[str, float] = {
    "small": 1.0,
    "medium": 1.2,
    "large": 1.4,
    "truck": 1.6,
}
"""Cost multiplier per vehicle class. Bigger vehicles cost more to run."""

# =============================================================================
# ROUTING PARAMETERS
# =============================================================================

FUEL_PRICE_PER_LITER: float = 200.0
"""Fuel price in naira per liter."""

DRIVER_COST_PER_HOUR: float = 500.0
"""Driver time cost in naira per hour."""

SERVICE_VOLUME_PROXY: float = 0.1
"""
Cargo volume estimate per minute of stop service time.
Stops carry no explicit volume, so service time stands in for load size.
"""

EXCELLENT_SAVINGS_PCT: float = 20.0
"""Fuel savings above this earn an "excellent optimization" recommendation."""

LOW_EFFICIENCY_THRESHOLD: float = 0.7
"""Routes below this efficiency get a "consider splitting" recommendation."""

TARGET_SAVINGS_PCT: float = 30.0
"""Fuel savings that map to a full savings score in the confidence metric."""

# =============================================================================
# PRICING PARAMETERS
# =============================================================================

BASE_RATE_PER_KM: float = 2.5
MINIMUM_FARE: float = 15.0
MAXIMUM_FARE: float = 500.0
"""Every quote lands in [MINIMUM_FARE, MAXIMUM_FARE]."""

PRICE_RANGE_SPREAD: float = 0.2
"""Quoted range is final price +/- this share."""

TIME_MULTIPLIERS: Dict[str, float] = {
    "weekend": 1.1,
    "rush": 1.6,
    "peak": 1.4,
    "late_night": 1.2,
    "normal": 1.0,
}
"""
Time-of-day multipliers. Rush hours are 08:00-09:59 and 18:00-19:59,
peak hours 07:00-09:59 and 17:00-19:59, late night 23:00-05:59.
"""

WEATHER_MULTIPLIERS: Dict[str, float] = {
    "clear": 1.0,
    "rainy": 1.3,
    "stormy": 1.5,
}

URGENCY_MULTIPLIERS: Dict[str, float] = {
    "low": 1.0,
    "medium": 1.2,
    "high": 1.5,
}

LOCATION_MULTIPLIERS: Dict[str, float] = {
    "oau campus": 1.0,
    "city center": 1.3,
    "airport": 1.4,
    "remote area": 1.1,
}
"""Premium areas. Keys are normalized area names; unknown areas price at 1.0."""

EXPLANATION_THRESHOLD: float = 1.2
"""Multipliers above this are called out in the price explanation."""

MAX_PRICE_CONFIDENCE: float = 0.95
BASE_PRICE_CONFIDENCE: float = 0.7
"""Quote confidence = min(MAX, BASE + 0.25 * market data freshness)."""

MARKET_DATA_MAX_AGE_S: float = 900.0
"""Market data older than this contributes no freshness to the quote confidence."""

PRICE_UPDATE_INTERVAL_MS: int = 30000
"""Default re-quote interval for price subscriptions."""


def _float_env(name: str, default: float) -> float:
    """Parse a float env var with a fallback."""
    raw = os.getenv(name, "")
    if raw == "":
        return default
    return float(raw)


def _bool_env(name: str, default: bool) -> bool:
    """Parse a boolean env var ("1", "true", "yes" are truthy)."""
    raw = os.getenv(name, "")
    if raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _frozen_table(values: Mapping[str, float]) -> Mapping[str, float]:
    """Read-only copy of a multiplier table."""
    return MappingProxyType(dict(values))


def _table_field(defaults: Mapping[str, float]):
    # Tables take part in equality but not in the hash
    return field(default_factory=lambda: _frozen_table(defaults), hash=False)


@dataclass(frozen=True)
class GeoConfig:
    """Distance and travel-time model shared by matching and routing."""
    base_speed_kmh: float = BASE_SPEED_KMH
    traffic_slowdown: float = TRAFFIC_SLOWDOWN_FACTOR
    rush_hour_traffic: float = RUSH_HOUR_TRAFFIC
    weekend_traffic: float = WEEKEND_TRAFFIC
    normal_traffic: float = NORMAL_TRAFFIC
    use_road_distance: bool = USE_ROAD_DISTANCE
    osrm_server_url: str = OSRM_SERVER_URL
    osrm_timeout_s: float = OSRM_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "GeoConfig":
        return cls(
            base_speed_kmh=_float_env("UNBOXD_BASE_SPEED_KMH", BASE_SPEED_KMH),
            use_road_distance=_bool_env("UNBOXD_USE_ROAD_DISTANCE", USE_ROAD_DISTANCE),
            osrm_server_url=os.getenv("UNBOXD_OSRM_SERVER_URL", OSRM_SERVER_URL),
            osrm_timeout_s=_float_env("UNBOXD_OSRM_TIMEOUT_S", OSRM_TIMEOUT_SECONDS),
        )


@dataclass(frozen=True)
class MatchingConfig:
    """Weights, thresholds and cost model for driver matching."""
    max_distance_km: float = MAX_MATCH_DISTANCE_KM
    w_proximity: float = W_PROXIMITY
    w_rating: float = W_RATING
    w_reliability: float = W_RELIABILITY
    w_vehicle_fit: float = W_VEHICLE_FIT
    w_availability: float = W_AVAILABILITY
    prep_time_mins: float = PREP_TIME_MINS
    response_time_weight: float = RESPONSE_TIME_WEIGHT
    experienced_agent_jobs: int = EXPERIENCED_AGENT_JOBS
    new_agent_confidence_factor: float = NEW_AGENT_CONFIDENCE_FACTOR
    max_confidence: float = MAX_MATCH_CONFIDENCE
    instant_min_confidence: float = INSTANT_MATCH_MIN_CONFIDENCE
    instant_max_arrival_mins: float = INSTANT_MATCH_MAX_ARRIVAL_MINS
    rate_per_km: float = MATCH_RATE_PER_KM
    minimum_fee: float = MATCH_MINIMUM_FEE
    fragile_multiplier: float = FRAGILE_COST_MULTIPLIER
    special_requirements_multiplier: float = SPECIAL_REQUIREMENTS_COST_MULTIPLIER
    large_volume_multiplier: float = LARGE_VOLUME_COST_MULTIPLIER
    large_volume_threshold: float = LARGE_VOLUME_THRESHOLD
    vehicle_cost_multipliers: Mapping[str, float] = _table_field(VEHICLE_COST_MULTIPLIERS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "vehicle_cost_multipliers", _frozen_table(self.vehicle_cost_multipliers))

    @classmethod
    def from_env(cls) -> "MatchingConfig":
        return cls(
            max_distance_km=_float_env("UNBOXD_MAX_MATCH_DISTANCE_KM", MAX_MATCH_DISTANCE_KM),
            instant_min_confidence=_float_env(
                "UNBOXD_INSTANT_MIN_CONFIDENCE", INSTANT_MATCH_MIN_CONFIDENCE
            ),
            instant_max_arrival_mins=_float_env(
                "UNBOXD_INSTANT_MAX_ARRIVAL_MINS", INSTANT_MATCH_MAX_ARRIVAL_MINS
            ),
        )


@dataclass(frozen=True)
class RoutingConfig:
    """Cost constants and recommendation thresholds for route optimization."""
    fuel_price_per_liter: float = FUEL_PRICE_PER_LITER
    driver_cost_per_hour: float = DRIVER_COST_PER_HOUR
    service_volume_proxy: float = SERVICE_VOLUME_PROXY
    excellent_savings_pct: float = EXCELLENT_SAVINGS_PCT
    low_efficiency_threshold: float = LOW_EFFICIENCY_THRESHOLD
    target_savings_pct: float = TARGET_SAVINGS_PCT

    @classmethod
    def from_env(cls) -> "RoutingConfig":
        return cls(
            fuel_price_per_liter=_float_env("UNBOXD_FUEL_PRICE_PER_LITER", FUEL_PRICE_PER_LITER),
            driver_cost_per_hour=_float_env("UNBOXD_DRIVER_COST_PER_HOUR", DRIVER_COST_PER_HOUR),
        )


@dataclass(frozen=True)
class PricingConfig:
    """Fare limits and multiplier tables for dynamic pricing."""
    base_rate_per_km: float = BASE_RATE_PER_KM
    minimum_fare: float = MINIMUM_FARE
    maximum_fare: float = MAXIMUM_FARE
    price_range_spread: float = PRICE_RANGE_SPREAD
    time_multipliers: Mapping[str, float] = _table_field(TIME_MULTIPLIERS)
    weather_multipliers: Mapping[str, float] = _table_field(WEATHER_MULTIPLIERS)
    urgency_multipliers: Mapping[str, float] = _table_field(URGENCY_MULTIPLIERS)
    location_multipliers: Mapping[str, float] = _table_field(LOCATION_MULTIPLIERS)
    explanation_threshold: float = EXPLANATION_THRESHOLD
    base_confidence: float = BASE_PRICE_CONFIDENCE
    max_confidence: float = MAX_PRICE_CONFIDENCE
    market_data_max_age_s: float = MARKET_DATA_MAX_AGE_S

    def __post_init__(self) -> None:
        for name in ("time_multipliers", "weather_multipliers", "urgency_multipliers", "location_multipliers"):
            object.__setattr__(self, name, _frozen_table(getattr(self, name)))

    @classmethod
    def from_env(cls) -> "PricingConfig":
        return cls(
            base_rate_per_km=_float_env("UNBOXD_BASE_RATE_PER_KM", BASE_RATE_PER_KM),
            minimum_fare=_float_env("UNBOXD_MINIMUM_FARE", MINIMUM_FARE),
            maximum_fare=_float_env("UNBOXD_MAXIMUM_FARE", MAXIMUM_FARE),
            market_data_max_age_s=_float_env("UNBOXD_MARKET_DATA_MAX_AGE_S", MARKET_DATA_MAX_AGE_S),
        )
