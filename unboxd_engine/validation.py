# unboxd-engine/unboxd_engine/validation.py
"""
Input validation at the engine boundary.

Each engine validates everything it is handed before computing anything,
so a bad agent profile or a NaN coordinate surfaces as an
InvalidInputError naming the offending entity instead of a silently
wrong score deep inside an algorithm.
"""

from __future__ import annotations

import math
from typing import Iterable

from .errors import InvalidInputError
from .models import (
    Agent,
    CustomerRequest,
    GeoPoint,
    Location,
    PricingFactors,
    Vehicle,
)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidInputError(message)


def _finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def validate_geo_point(point: GeoPoint, what: str = "point") -> None:
    """Reject NaN, infinite or out-of-range coordinates."""
    _require(_finite(point.lat) and _finite(point.lng), f"{what}: coordinates must be finite numbers, got {point!r}")
    _require(-90.0 <= point.lat <= 90.0, f"{what}: latitude {point.lat} outside [-90, 90]")
    _require(-180.0 <= point.lng <= 180.0, f"{what}: longitude {point.lng} outside [-180, 180]")


def validate_agent(agent: Agent) -> None:
    what = f"agent {agent.agent_id!r}"
    validate_geo_point(agent.location, f"{what} location")
    _require(_finite(agent.rating) and 0.0 <= agent.rating <= 5.0, f"{what}: rating {agent.rating} outside [0, 5]")
    _require(agent.total_jobs >= 0, f"{what}: total_jobs must be >= 0, got {agent.total_jobs}")
    _require(
        _finite(agent.reliability_score) and 0.0 <= agent.reliability_score <= 1.0,
        f"{what}: reliability_score {agent.reliability_score} outside [0, 1]",
    )
    _require(
        _finite(agent.response_time_mins) and agent.response_time_mins >= 0,
        f"{what}: response_time_mins must be >= 0, got {agent.response_time_mins}",
    )
    _require(
        _finite(agent.vehicle.capacity_volume) and agent.vehicle.capacity_volume > 0,
        f"{what}: vehicle capacity must be > 0, got {agent.vehicle.capacity_volume}",
    )


def validate_agents(agents: Iterable[Agent]) -> None:
    for agent in agents:
        validate_agent(agent)


def validate_request(request: CustomerRequest) -> None:
    what = f"request {request.request_id!r}" if request.request_id else "request"
    validate_geo_point(request.pickup.point, f"{what} pickup")
    validate_geo_point(request.delivery.point, f"{what} delivery")
    items = request.items
    _require(items.count > 0, f"{what}: item count must be > 0, got {items.count}")
    _require(_finite(items.volume) and items.volume > 0, f"{what}: item volume must be > 0, got {items.volume}")
    _require(_finite(items.weight_kg) and items.weight_kg >= 0, f"{what}: weight must be >= 0, got {items.weight_kg}")
    _require(_finite(request.budget) and request.budget >= 0, f"{what}: budget must be >= 0, got {request.budget}")


def validate_location(location: Location) -> None:
    what = f"location {location.location_id!r}"
    validate_geo_point(location.point, what)
    priority = location.priority
    _require(
        isinstance(priority, int) and not isinstance(priority, bool) and 1 <= priority <= 5,
        f"{what}: priority must be an integer 1-5, got {priority!r}",
    )
    _require(
        _finite(location.estimated_service_mins) and location.estimated_service_mins >= 0,
        f"{what}: estimated_service_mins must be >= 0, got {location.estimated_service_mins}",
    )
    window = location.time_window
    if window is not None:
        _require(window.end >= window.start, f"{what}: time window ends before it starts")


def validate_vehicle(vehicle: Vehicle) -> None:
    what = f"vehicle {vehicle.vehicle_id!r}"
    validate_geo_point(vehicle.current_location, f"{what} location")
    _require(
        _finite(vehicle.capacity_volume) and vehicle.capacity_volume > 0,
        f"{what}: capacity must be > 0, got {vehicle.capacity_volume}",
    )
    _require(
        _finite(vehicle.fuel_efficiency_km_per_liter) and vehicle.fuel_efficiency_km_per_liter > 0,
        f"{what}: fuel efficiency must be > 0, got {vehicle.fuel_efficiency_km_per_liter}",
    )
    _require(
        _finite(vehicle.max_range_km) and vehicle.max_range_km > 0,
        f"{what}: max range must be > 0, got {vehicle.max_range_km}",
    )


def validate_pricing_factors(factors: PricingFactors) -> None:
    _require(
        _finite(factors.distance_km) and factors.distance_km >= 0,
        f"pricing: distance must be >= 0, got {factors.distance_km}",
    )
    _require(
        _finite(factors.item_complexity) and 0.0 <= factors.item_complexity <= 1.0,
        f"pricing: item complexity {factors.item_complexity} outside [0, 1]",
    )
    validate_geo_point(factors.location, "pricing location")


def validate_max_results(max_results: int) -> None:
    _require(max_results > 0, f"max_results must be > 0, got {max_results}")
