# unboxd-engine/unboxd_engine/matching.py
"""
Matching Engine for the Unboxd marketplace.

Ranks a pool of available agents (drivers and crew) against a single
customer request. For each eligible agent the engine computes a weighted
score, an arrival estimate, a cost estimate and a confidence, and explains
the score with a list of reasons.

Eligibility:
- The agent is online
- The agent is not busy on another job
- The agent is within MAX_MATCH_DISTANCE_KM of the pickup

Finding nobody is a normal outcome: callers get an empty list (or None for
an instant match) and should offer a "try again later" path.
"""

from __future__ import annotations

from typing import Awaitable, Callable, List, Optional, Sequence

from . import scoring, utils, validation
from .config import GeoConfig, MatchingConfig
from .models import Agent, CustomerRequest, Job, MatchResult, Mover
from .subscriptions import PollingSubscription, Unsubscribe


class MatchingEngine:
    """
    Scores agents for customer requests.

    The engine holds configuration only. Every call works on the snapshot of
    agents it is handed and keeps nothing between calls.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        geo: Optional[GeoConfig] = None,
    ) -> None:
        self.config = config or MatchingConfig()
        self.geo = geo or GeoConfig()

    def _match_agent(self, agent: Agent, request: CustomerRequest) -> Optional[MatchResult]:
        """Score one agent, or return None if the agent is not eligible."""
        if not agent.is_available:
            return None

        distance = utils.get_distance(agent.location, request.pickup.point, self.geo)
        if distance > self.config.max_distance_km:
            return None

        breakdown = scoring.score_agent(agent, request, distance, self.config)
        score = breakdown.weighted_total(self.config)

        return MatchResult(
            agent=agent,
            score=score,
            estimated_arrival_mins=scoring.estimate_arrival_minutes(agent, request, self.config, self.geo),
            estimated_cost=scoring.estimate_job_cost(distance, request.items, agent.vehicle, self.config),
            confidence=scoring.match_confidence(score, agent, self.config),
            reasons=scoring.explain_score(agent, distance, breakdown),
        )

    def find_best_matches(
        self,
        request: CustomerRequest,
        pool: Sequence[Agent],
        max_results: int = 5,
    ) -> List[MatchResult]:
        """
        Rank eligible agents for a request.

        Args:
            request: The customer request
            pool: Snapshot of candidate agents
            max_results: Maximum number of matches to return

        Returns:
            Matches ordered by score, highest first. Agents with equal scores
            keep their pool order. Empty when nobody is eligible.

        Raises:
            InvalidInputError: if the request, an agent or max_results is invalid
        """
        validation.validate_max_results(max_results)
        validation.validate_request(request)
        validation.validate_agents(pool)

        matches: List[MatchResult] = []
        for agent in pool:
            match = self._match_agent(agent, request)
            if match is not None:
                matches.append(match)

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:max_results]

    def get_instant_match(
        self,
        request: CustomerRequest,
        pool: Sequence[Agent],
    ) -> Optional[MatchResult]:
        """
        Return the top match if it can be booked on the spot.

        Only offered when the best candidate is both trusted enough and close
        enough in time. Otherwise None, and the caller should fall back to
        find_best_matches.
        """
        matches = self.find_best_matches(request, pool, max_results=1)
        if not matches:
            return None

        best = matches[0]
        if (
            best.confidence >= self.config.instant_min_confidence
            and best.estimated_arrival_mins <= self.config.instant_max_arrival_mins
        ):
            return best
        return None

    def subscribe_to_matches(
        self,
        request: CustomerRequest,
        fetch_available_drivers: Callable[[], Awaitable[Sequence[Agent]]],
        on_match_found: Callable[[MatchResult], None],
        on_no_match: Callable[[], None],
        interval_ms: int = 5000,
    ) -> Unsubscribe:
        """
        Keep looking for an instant match until one is found.

        Polls the agent pool immediately and then every interval_ms. Stops
        after the first instant match. A failed fetch, or an on_match_found that
        raises, reports on_no_match and ends the subscription. Must be called from a running event loop.

        Returns:
            Idempotent cancel function
        """
        async def poll() -> Optional[MatchResult]:
            pool = await fetch_available_drivers()
            return self.get_instant_match(request, pool)

        subscription: PollingSubscription[MatchResult]

        def on_error(exc: Exception) -> None:
            subscription.cancel()
            on_no_match()

        subscription = PollingSubscription(
            poll,
            on_match_found,
            interval_ms / 1000,
            on_error=on_error,
            stop_after_result=True,
            name=f"match-subscription:{request.request_id or 'anonymous'}",
        )
        return subscription.start()


def rank_movers(movers: Sequence[Mover]) -> List[Mover]:
    """Available movers ordered by performance score, best first."""
    available = [m for m in movers if m.is_available]
    return sorted(available, key=lambda m: m.performance_score, reverse=True)


def match_job_to_mover(movers: Sequence[Mover], job: Job) -> Optional[str]:
    """
    Pick the crew member for a job board listing.

    Job board listings carry no coordinates, so the best available performer
    wins regardless of the job.

    Returns:
        The chosen mover's id, or None when nobody is available
    """
    ranked = rank_movers(movers)
    return ranked[0].mover_id if ranked else None


_default_engine = MatchingEngine()


def find_best_matches(
    request: CustomerRequest,
    pool: Sequence[Agent],
    max_results: int = 5,
) -> List[MatchResult]:
    """Module-level shortcut using the default configuration."""
    return _default_engine.find_best_matches(request, pool, max_results)


def get_instant_match(request: CustomerRequest, pool: Sequence[Agent]) -> Optional[MatchResult]:
    """Module-level shortcut using the default configuration."""
    return _default_engine.get_instant_match(request, pool)
