# unboxd-engine/unboxd_engine/models.py
"""
Core domain models for the Unboxd decision engines.

This module defines the value objects passed in and out of the engines:
- GeoPoint / Place: coordinates, optionally with a street address
- Agent, CustomerRequest, MatchResult: driver matching
- Location, Vehicle, Route, OptimizationResult: route optimization
- PricingFactors, MarketConditions, PricingResult: dynamic pricing

Everything here is immutable. Engines build fresh results on every call
and never patch an existing one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class VehicleType(Enum):
    """Vehicle size classes offered on the marketplace."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    TRUCK = "truck"


class Urgency(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StopKind(Enum):
    """Whether a stop loads or unloads cargo."""
    PICKUP = "pickup"
    DELIVERY = "delivery"


class Weather(Enum):
    CLEAR = "clear"
    RAINY = "rainy"
    STORMY = "stormy"


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 coordinate in decimal degrees."""
    lat: float
    lng: float

    def __repr__(self) -> str:
        return f"GeoPoint({self.lat:.5f}, {self.lng:.5f})"


@dataclass(frozen=True)
class Place:
    """A point with the human-readable address shown to customers."""
    point: GeoPoint
    address: str = ""


# =============================================================================
# MATCHING
# =============================================================================

@dataclass(frozen=True)
class AgentVehicle:
    """
    The vehicle an agent drives.

    Attributes:
        type: Size class, drives the cost multiplier
        capacity_volume: Cargo capacity in cubic feet
        features: Equipment such as 'GPS' or 'Fragile Handling'
    """
    type: VehicleType
    capacity_volume: float
    features: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Agent:
    """
    A driver or worker that can be matched to a customer request.

    Agents are owned by the profile service; the matching engine only reads
    a snapshot handed to it for the duration of one call.

    Attributes:
        agent_id: Unique identifier
        location: Last known position
        rating: Average customer rating, 0-5
        total_jobs: Completed jobs, used to temper confidence for newcomers
        vehicle: The agent's vehicle
        online: Whether the agent is accepting work
        current_job_id: Set while the agent is busy on another job
        response_time_mins: Average time to respond to an offer
        reliability_score: Completion and punctuality rate, 0-1
    """
    agent_id: str
    location: GeoPoint
    rating: float
    total_jobs: int
    vehicle: AgentVehicle
    online: bool = True
    current_job_id: Optional[str] = None
    response_time_mins: float = 0.0
    reliability_score: float = 1.0
    name: str = ""
    specialties: Tuple[str, ...] = ()

    @property
    def is_available(self) -> bool:
        return self.online and not self.current_job_id

    def __repr__(self) -> str:
        return f"Agent({self.agent_id}, {self.vehicle.type.value}, rating={self.rating})"


@dataclass(frozen=True)
class Items:
    """
    The cargo a customer wants moved.

    Attributes:
        count: Number of pieces
        volume: Total volume in cubic feet
        weight_kg: Total weight
        fragile: Needs careful handling
        special_requirements: e.g. 'Piano', 'Disassembly'
    """
    count: int
    volume: float
    weight_kg: float = 0.0
    fragile: bool = False
    special_requirements: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class CustomerRequest:
    """A booking request from pickup to delivery."""
    pickup: Place
    delivery: Place
    items: Items
    preferred_time: datetime
    budget: float = 0.0
    urgency: Urgency = Urgency.LOW
    request_id: str = ""


@dataclass(frozen=True)
class MatchResult:
    """
    A scored candidate for one customer request.

    Attributes:
        agent: The candidate agent
        score: Weighted score in [0, 1], higher is better
        estimated_arrival_mins: Minutes until the agent reaches the pickup
        estimated_cost: Estimated job cost in naira
        confidence: Trust in this match in [0, 1]
        reasons: Human-readable explanations, they never affect the score
    """
    agent: Agent
    score: float
    estimated_arrival_mins: int
    estimated_cost: float
    confidence: float
    reasons: Tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"MatchResult({self.agent.agent_id}, score={self.score:.3f}, eta={self.estimated_arrival_mins}m)"


@dataclass(frozen=True)
class Mover:
    """A crew member on the job board, ranked by performance only."""
    mover_id: str
    is_available: bool
    performance_score: float
    location: str = ""
    skills: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Job:
    """A job board listing."""
    job_id: str
    title: str
    location: str
    job_size: str
    price: float


# =============================================================================
# ROUTING
# =============================================================================

@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class Location:
    """
    A pickup or delivery stop.

    Attributes:
        location_id: Unique identifier
        point: Stop coordinates
        kind: PICKUP or DELIVERY
        priority: 1 (highest) to 5 (lowest); each priority is routed separately
        estimated_service_mins: Time spent loading or unloading
        address: Street address
        time_window: Optional window the customer expects the visit in
    """
    location_id: str
    point: GeoPoint
    kind: StopKind
    priority: int = 3
    estimated_service_mins: float = 0.0
    address: str = ""
    time_window: Optional[TimeWindow] = None

    def __repr__(self) -> str:
        return f"Location({self.kind.value}:{self.location_id})"


@dataclass(frozen=True)
class Vehicle:
    """A fleet vehicle available for multi-stop routes."""
    vehicle_id: str
    type: VehicleType
    capacity_volume: float
    fuel_efficiency_km_per_liter: float
    current_location: GeoPoint
    max_range_km: float


@dataclass(frozen=True)
class Waypoint:
    """A time-stamped visit in a route."""
    location_id: str
    point: GeoPoint
    address: str
    kind: StopKind
    estimated_arrival: datetime
    estimated_departure: datetime


@dataclass(frozen=True)
class RouteOptimization:
    """
    Quality metrics for a single route.

    Savings are measured against the naive baseline route; they can be
    negative when the heuristic does worse than the baseline.
    """
    fuel_savings_pct: float
    time_savings_pct: float
    efficiency: float


@dataclass(frozen=True)
class Route:
    """An ordered visit plan for one vehicle."""
    route_id: str
    vehicle: Vehicle
    stops: Tuple[Location, ...]
    total_distance_km: float
    total_time_mins: float
    total_fuel_liters: float
    estimated_cost: float
    waypoints: Tuple[Waypoint, ...]
    optimization: RouteOptimization

    @property
    def stop_ids(self) -> Tuple[str, ...]:
        return tuple(s.location_id for s in self.stops)

    def __repr__(self) -> str:
        return f"Route({self.route_id}, stops={len(self.stops)}, dist={self.total_distance_km:.2f}km)"


@dataclass(frozen=True)
class TotalSavings:
    fuel_pct: float = 0.0
    time_pct: float = 0.0
    cost: float = 0.0


@dataclass(frozen=True)
class OptimizationResult:
    routes: Tuple[Route, ...] = ()
    total_savings: TotalSavings = field(default_factory=TotalSavings)
    recommendations: Tuple[str, ...] = ()
    confidence: float = 0.0


# =============================================================================
# PRICING
# =============================================================================

@dataclass(frozen=True)
class PricingFactors:
    """
    The static and contextual attributes of a trip to be quoted.

    Attributes:
        distance_km: Trip distance
        time_of_day: When the move takes place
        item_complexity: 0 (simple boxes) to 1 (pianos, antiques)
        urgency: Requested urgency
        location: Where the job starts, used to fetch market conditions
        area: Named area, e.g. 'Airport' or 'City Center'
    """
    distance_km: float
    time_of_day: datetime
    item_complexity: float = 0.0
    urgency: Urgency = Urgency.LOW
    location: GeoPoint = GeoPoint(0.0, 0.0)
    area: str = ""


@dataclass(frozen=True)
class MarketConditions:
    """
    A snapshot of live market signals around a location.

    Attributes:
        demand_level: 0 (quiet) to 1 (very busy)
        supply_level: 0 (no drivers) to 1 (plenty of drivers)
        fuel_cost_per_liter: Local pump price in naira
        weather: Current weather
        traffic_level: 0 (empty roads) to 1 (gridlock)
        observed_at: When the snapshot was taken, drives quote confidence
    """
    demand_level: float
    supply_level: float
    fuel_cost_per_liter: float
    weather: Weather
    traffic_level: float
    observed_at: datetime


@dataclass(frozen=True)
class PricingBreakdown:
    """Every multiplier that went into a quote, by name."""
    distance_cost: float
    time_multiplier: float
    demand_multiplier: float
    supply_multiplier: float
    weather_multiplier: float
    traffic_multiplier: float
    complexity_multiplier: float
    urgency_multiplier: float
    location_multiplier: float

    def applied_multipliers(self) -> Dict[str, float]:
        """The multipliers whose product is the dynamic multiplier."""
        return {
            "time": self.time_multiplier,
            "demand": self.demand_multiplier,
            "weather": self.weather_multiplier,
            "traffic": self.traffic_multiplier,
            "complexity": self.complexity_multiplier,
            "urgency": self.urgency_multiplier,
            "location": self.location_multiplier,
        }


@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float


@dataclass(frozen=True)
class PricingResult:
    base_price: float
    dynamic_multiplier: float
    final_price: float
    breakdown: PricingBreakdown
    confidence: float
    price_range: PriceRange
    explanation: str
    quoted_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"PricingResult(final={self.final_price:.2f}, x{self.dynamic_multiplier:.2f})"
