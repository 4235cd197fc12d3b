# unboxd-engine/unboxd_engine/samples.py
"""
Built-in demo scenario around OAU campus, Ile-Ife.

Used by the CLI so the engines can be exercised without a database.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

from .models import (
    Agent,
    AgentVehicle,
    CustomerRequest,
    GeoPoint,
    Items,
    Location,
    Place,
    PricingFactors,
    StopKind,
    TimeWindow,
    Urgency,
    Vehicle,
    VehicleType,
)

OAU_CAMPUS = GeoPoint(7.5186, 4.5224)
ILE_IFE_TOWN = GeoPoint(7.4951, 4.5156)
MODAKEKE = GeoPoint(7.4713, 4.5411)
ONDO_ROAD = GeoPoint(7.4822, 4.5633)


def sample_agents() -> List[Agent]:
    return [
        Agent(
            agent_id="driver-1",
            name="John Adebayo",
            location=ILE_IFE_TOWN,
            rating=4.8,
            total_jobs=156,
            vehicle=AgentVehicle(VehicleType.MEDIUM, 120.0, frozenset({"GPS", "Climate Control", "Insurance"})),
            response_time_mins=8,
            reliability_score=0.95,
            specialties=("Furniture", "Electronics"),
        ),
        Agent(
            agent_id="driver-2",
            name="Sarah Okafor",
            location=MODAKEKE,
            rating=4.9,
            total_jobs=203,
            vehicle=AgentVehicle(
                VehicleType.LARGE, 180.0, frozenset({"GPS", "Climate Control", "Insurance", "Fragile Handling"})
            ),
            response_time_mins=6,
            reliability_score=0.98,
            specialties=("Furniture", "Electronics", "Fragile Items"),
        ),
        Agent(
            agent_id="driver-3",
            name="Tunde Bakare",
            location=OAU_CAMPUS,
            rating=4.1,
            total_jobs=7,
            vehicle=AgentVehicle(VehicleType.SMALL, 60.0),
            response_time_mins=12,
            reliability_score=0.82,
        ),
        Agent(
            agent_id="driver-4",
            name="Ngozi Eze",
            location=ONDO_ROAD,
            rating=4.6,
            total_jobs=88,
            vehicle=AgentVehicle(VehicleType.TRUCK, 400.0),
            online=False,
            response_time_mins=10,
            reliability_score=0.9,
        ),
    ]


def sample_request(preferred_time: datetime) -> CustomerRequest:
    return CustomerRequest(
        request_id="req-1001",
        pickup=Place(OAU_CAMPUS, "Moremi Hall, OAU Campus"),
        delivery=Place(MODAKEKE, "Oduduwa Estate, Modakeke"),
        items=Items(count=14, volume=95.0, weight_kg=320.0, fragile=True),
        preferred_time=preferred_time,
        budget=120.0,
        urgency=Urgency.MEDIUM,
    )


def sample_fleet() -> List[Vehicle]:
    return [
        Vehicle("van-1", VehicleType.MEDIUM, 120.0, 9.5, ILE_IFE_TOWN, 180.0),
        Vehicle("truck-1", VehicleType.TRUCK, 400.0, 5.0, OAU_CAMPUS, 400.0),
    ]


def sample_stops(start_time: datetime) -> List[Location]:
    window = TimeWindow(start_time, start_time + timedelta(hours=2))
    return [
        Location("p1", GeoPoint(7.5180, 4.5260), StopKind.PICKUP, 1, 20, "Angola Hall, OAU"),
        Location("p2", GeoPoint(7.5090, 4.5300), StopKind.PICKUP, 1, 15, "Awolowo Hall, OAU"),
        Location("d1", GeoPoint(7.4720, 4.5420), StopKind.DELIVERY, 1, 25, "Modakeke Junction", window),
        Location("d2", GeoPoint(7.4960, 4.5150), StopKind.DELIVERY, 1, 20, "Lagere, Ile-Ife"),
        Location("p3", GeoPoint(7.4830, 4.5620), StopKind.PICKUP, 2, 30, "Ondo Road Warehouse"),
        Location("d3", GeoPoint(7.5200, 4.5230), StopKind.DELIVERY, 2, 30, "OAU Staff Quarters"),
    ]


def sample_pricing_factors(time_of_day: datetime) -> PricingFactors:
    return PricingFactors(
        distance_km=12.5,
        time_of_day=time_of_day,
        item_complexity=0.65,
        urgency=Urgency.MEDIUM,
        location=OAU_CAMPUS,
        area="OAU Campus",
    )
