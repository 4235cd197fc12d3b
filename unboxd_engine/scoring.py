# unboxd-engine/unboxd_engine/scoring.py
"""
Scoring functions for driver matching.

This module implements the multi-factor score that ranks agents for a
customer request, along with the cost and arrival estimates shown on each
match card.

Key Design Principles:
1. Higher score = better candidate, every sub-score lives in [0, 1]
2. Weights sum to 1.0 so the total score also lives in [0, 1]
3. Reasons explain a score but never change it
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from . import utils
from .config import GeoConfig, MatchingConfig
from .models import Agent, AgentVehicle, CustomerRequest, Items


@dataclass(frozen=True)
class ScoreBreakdown:
    """Normalized sub-scores for one agent, before weighting."""
    proximity: float
    rating: float
    reliability: float
    vehicle_fit: float
    availability: float

    def weighted_total(self, cfg: MatchingConfig) -> float:
        return (
            self.proximity * cfg.w_proximity
            + self.rating * cfg.w_rating
            + self.reliability * cfg.w_reliability
            + self.vehicle_fit * cfg.w_vehicle_fit
            + self.availability * cfg.w_availability
        )


def get_vehicle_multiplier(vehicle_type: str, cfg: MatchingConfig) -> float:
    """
    Get the cost multiplier for a vehicle class.

    Args:
        vehicle_type: One of 'small', 'medium', 'large', 'truck'

    Returns:
        Multiplier (1.0 for small vans, higher for bigger vehicles)
    """
    return cfg.vehicle_cost_multipliers.get(vehicle_type.lower(), 1.0)


def vehicle_fit_score(vehicle: AgentVehicle, items: Items) -> float:
    """
    Score how well the cargo fills the vehicle.

    A close-but-not-overfull load scores best. Oversized vehicles still get
    the job done, so running over capacity by a lot (0.7) is penalized less
    than a vehicle that would be mostly empty (0.6).
    """
    capacity_ratio = items.volume / vehicle.capacity_volume

    if capacity_ratio <= 0.5:
        return 0.6
    if capacity_ratio <= 0.8:
        return 0.8
    if capacity_ratio <= 1.0:
        return 1.0
    if capacity_ratio <= 1.2:
        return 0.9
    return 0.7


def score_agent(
    agent: Agent,
    request: CustomerRequest,
    distance_km: float,
    cfg: MatchingConfig,
) -> ScoreBreakdown:
    """Compute the normalized sub-scores for an agent at a known pickup distance."""
    return ScoreBreakdown(
        proximity=max(0.0, (cfg.max_distance_km - distance_km) / cfg.max_distance_km),
        rating=agent.rating / 5,
        reliability=agent.reliability_score,
        vehicle_fit=vehicle_fit_score(agent.vehicle, request.items),
        availability=1.0 if agent.online else 0.0,
    )


def explain_score(agent: Agent, distance_km: float, breakdown: ScoreBreakdown) -> Tuple[str, ...]:
    """Build the ordered list of human-readable reasons for a match card."""
    reasons: List[str] = []

    if distance_km < 5:
        reasons.append("Very close location")
    elif distance_km < 15:
        reasons.append("Nearby driver")

    if agent.rating >= 4.5:
        reasons.append("Excellent rating")
    elif agent.rating >= 4.0:
        reasons.append("High rating")

    if agent.reliability_score >= 0.9:
        reasons.append("Highly reliable")
    elif agent.reliability_score >= 0.8:
        reasons.append("Reliable driver")

    if breakdown.vehicle_fit >= 0.8:
        reasons.append("Perfect vehicle size")
    elif breakdown.vehicle_fit >= 0.6:
        reasons.append("Suitable vehicle")

    if agent.online:
        reasons.append("Currently available")

    return tuple(reasons)


def estimate_arrival_minutes(
    agent: Agent,
    request: CustomerRequest,
    cfg: MatchingConfig,
    geo: GeoConfig,
) -> int:
    """
    Estimate minutes until the agent reaches the pickup.

    Travel time under the traffic expected at the preferred time, plus half
    the agent's usual response time, plus a fixed preparation time.
    """
    pickup = request.pickup.point
    traffic = utils.get_traffic_level(agent.location, pickup, request.preferred_time, geo)
    travel = utils.get_travel_time(agent.location, pickup, traffic, geo)
    return utils.round_half_up(
        travel + agent.response_time_mins * cfg.response_time_weight + cfg.prep_time_mins
    )


def estimate_job_cost(
    distance_km: float,
    items: Items,
    vehicle: AgentVehicle,
    cfg: MatchingConfig,
) -> float:
    """
    Estimate the job cost in naira.

    The distance cost has a minimum fee, then vehicle class and item
    surcharges multiply in.
    """
    cost = max(cfg.minimum_fee, distance_km * cfg.rate_per_km)
    cost *= get_vehicle_multiplier(vehicle.type.value, cfg)

    if items.fragile:
        cost *= cfg.fragile_multiplier
    if items.special_requirements:
        cost *= cfg.special_requirements_multiplier
    if items.volume > cfg.large_volume_threshold:
        cost *= cfg.large_volume_multiplier

    return utils.round2(cost)


def match_confidence(score: float, agent: Agent, cfg: MatchingConfig) -> float:
    """Confidence grows with the score; newcomers are tempered."""
    history_factor = 1.0 if agent.total_jobs > cfg.experienced_agent_jobs else cfg.new_agent_confidence_factor
    return min(cfg.max_confidence, score * history_factor)
