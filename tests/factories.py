"""Builders for test fixtures."""

import math
from datetime import datetime

from unboxd_engine.config import EARTH_RADIUS_KM
from unboxd_engine.models import (
    Agent,
    AgentVehicle,
    CustomerRequest,
    GeoPoint,
    Items,
    Location,
    Place,
    StopKind,
    Urgency,
    Vehicle,
    VehicleType,
)

ORIGIN = GeoPoint(7.5, 4.5)
# Monday afternoon: normal traffic (0.5), no rush, no weekend
MIDDAY = datetime(2024, 5, 6, 14, 0)
KM_PER_DEGREE = EARTH_RADIUS_KM * math.pi / 180


def north_of(origin, km):
    """A point exactly `km` north of origin along the meridian."""
    return GeoPoint(origin.lat + km / KM_PER_DEGREE, origin.lng)


def make_agent(agent_id="a1", km=2.0, rating=4.9, reliability=0.98, capacity=100.0,
               total_jobs=50, online=True, current_job_id=None, response=6.0,
               vehicle_type=VehicleType.MEDIUM):
    return Agent(
        agent_id=agent_id,
        location=north_of(ORIGIN, km),
        rating=rating,
        total_jobs=total_jobs,
        vehicle=AgentVehicle(vehicle_type, capacity),
        online=online,
        current_job_id=current_job_id,
        response_time_mins=response,
        reliability_score=reliability,
    )


def make_request(volume=100.0, fragile=False, special=frozenset(), when=MIDDAY,
                 urgency=Urgency.LOW):
    return CustomerRequest(
        request_id="req-1",
        pickup=Place(ORIGIN, "Pickup"),
        delivery=Place(north_of(ORIGIN, -10.0), "Delivery"),
        items=Items(count=5, volume=volume, weight_kg=100.0, fragile=fragile,
                    special_requirements=special),
        preferred_time=when,
        budget=100.0,
        urgency=urgency,
    )


def make_stop(stop_id, km, kind=StopKind.PICKUP, priority=1, service=10.0, window=None):
    return Location(
        location_id=stop_id,
        point=north_of(ORIGIN, km),
        kind=kind,
        priority=priority,
        estimated_service_mins=service,
        address=f"{stop_id} street",
        time_window=window,
    )


def make_vehicle(vehicle_id="v1", capacity=100.0, efficiency=10.0, max_range=500.0,
                 start=ORIGIN):
    return Vehicle(
        vehicle_id=vehicle_id,
        type=VehicleType.MEDIUM,
        capacity_volume=capacity,
        fuel_efficiency_km_per_liter=efficiency,
        current_location=start,
        max_range_km=max_range,
    )
