# unboxd-engine/unboxd_engine/__init__.py

from .models import (
    Agent,
    AgentVehicle,
    CustomerRequest,
    GeoPoint,
    Items,
    Location,
    MarketConditions,
    MatchResult,
    OptimizationResult,
    Place,
    PricingFactors,
    PricingResult,
    Route,
    StopKind,
    TimeWindow,
    Urgency,
    Vehicle,
    VehicleType,
    Weather,
)
from .config import GeoConfig, MatchingConfig, PricingConfig, RoutingConfig
from .errors import InvalidInputError, MarketDataError, UnboxdError
from .utils import get_distance, get_traffic_level, get_travel_time, haversine_distance
from .matching import MatchingEngine, find_best_matches, get_instant_match, match_job_to_mover
from .routing import InputOrderBaseline, NaiveBaselineRouter, RoutingEngine, optimize_routes
from .pricing import PriceQuoteHistory, PricingEngine, calculate_dynamic_price
from .market import (
    MarketConditionsProvider,
    SimulatedMarketConditionsProvider,
    StaticMarketConditionsProvider,
)

__version__ = "1.0.0"
__author__ = "Unboxd Engineering"

__all__ = [
    # Models
    "Agent",
    "AgentVehicle",
    "CustomerRequest",
    "GeoPoint",
    "Items",
    "Location",
    "MarketConditions",
    "MatchResult",
    "OptimizationResult",
    "Place",
    "PricingFactors",
    "PricingResult",
    "Route",
    "StopKind",
    "TimeWindow",
    "Urgency",
    "Vehicle",
    "VehicleType",
    "Weather",
    # Engines
    "MatchingEngine",
    "RoutingEngine",
    "PricingEngine",
    "InputOrderBaseline",
    "NaiveBaselineRouter",
    "PriceQuoteHistory",
    "MarketConditionsProvider",
    "SimulatedMarketConditionsProvider",
    "StaticMarketConditionsProvider",
    # Functions
    "haversine_distance",
    "get_distance",
    "get_traffic_level",
    "get_travel_time",
    "find_best_matches",
    "get_instant_match",
    "match_job_to_mover",
    "optimize_routes",
    "calculate_dynamic_price",
    # Config
    "GeoConfig",
    "MatchingConfig",
    "RoutingConfig",
    "PricingConfig",
    # Errors
    "UnboxdError",
    "InvalidInputError",
    "MarketDataError",
]
