# unboxd-engine/unboxd_engine/routing.py
"""
Routing Engine for multi-pickup / multi-drop moves.

Builds a visiting order per vehicle for a set of pickup and delivery stops
and reports distance, time, fuel, cost and time-stamped waypoints.

Algorithm:
1. Group stops by priority (1-5). Each group is an independent sub-problem
   served by its own route, processed in order of first appearance.
2. Pick the vehicle for each group: enough capacity for the group's load,
   then the best fuel efficiency. Groups no vehicle can carry are skipped
   with a recommendation.
3. Order the stops with a nearest-neighbor heuristic, all pickups before
   any delivery.
4. Walk the ordered stops from the vehicle's position to accumulate
   distance, time and waypoints. Traffic for each leg is read at the leg's
   departure time, so results depend only on the inputs and start time.

This is a greedy heuristic, not an optimal solver; vehicles are never
reassigned across priority groups. Quality is measured against two
independent references:
- Savings: the same stops visited in a naive baseline order
- Efficiency: a minimum spanning tree lower bound on the route distance
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from . import utils, validation
from .config import GeoConfig, RoutingConfig
from .models import (
    GeoPoint,
    Location,
    OptimizationResult,
    Route,
    RouteOptimization,
    StopKind,
    TotalSavings,
    Vehicle,
    Waypoint,
)
from .subscriptions import PollingSubscription, Unsubscribe


class NaiveBaselineRouter(Protocol):
    """Produces the unoptimized visiting order that savings are measured against."""

    def order(self, vehicle: Vehicle, stops: Sequence[Location]) -> Sequence[Location]:
        ...


class InputOrderBaseline:
    """Visit the stops exactly in the order they were submitted."""

    def order(self, vehicle: Vehicle, stops: Sequence[Location]) -> Sequence[Location]:
        return list(stops)


@dataclass(frozen=True)
class RouteWalk:
    """Totals and waypoints from driving a fixed stop order."""
    distance_km: float
    time_mins: float
    waypoints: Tuple[Waypoint, ...]


def group_locations_by_priority(locations: Sequence[Location]) -> Dict[int, List[Location]]:
    """Group stops by priority, keeping first-appearance order of the groups."""
    groups: Dict[int, List[Location]] = {}
    for location in locations:
        groups.setdefault(location.priority, []).append(location)
    return groups


def required_volume(locations: Sequence[Location], cfg: RoutingConfig) -> float:
    """Load estimate for a group; service time stands in for cargo volume."""
    return sum(loc.estimated_service_mins * cfg.service_volume_proxy for loc in locations)


def find_best_vehicle(
    vehicles: Sequence[Vehicle],
    locations: Sequence[Location],
    cfg: RoutingConfig,
) -> Optional[Vehicle]:
    """
    The most fuel-efficient vehicle that can carry the group.

    Ties go to the vehicle listed first. None if no vehicle has the capacity.
    """
    needed = required_volume(locations, cfg)
    suitable = [v for v in vehicles if v.capacity_volume >= needed]
    if not suitable:
        return None
    return max(suitable, key=lambda v: v.fuel_efficiency_km_per_liter)


def find_nearest_location(
    current: GeoPoint,
    candidates: Sequence[Location],
    geo: GeoConfig,
) -> Location:
    """Closest candidate to the current position; the earliest wins ties."""
    nearest = candidates[0]
    min_distance = utils.get_distance(current, nearest.point, geo)

    for location in candidates[1:]:
        distance = utils.get_distance(current, location.point, geo)
        if distance < min_distance:
            nearest = location
            min_distance = distance

    return nearest


def nearest_neighbor_order(
    start: GeoPoint,
    locations: Sequence[Location],
    geo: GeoConfig,
) -> List[Location]:
    """
    Greedy visiting order: all pickups first, then all deliveries.

    Within each phase the next stop is always the closest unvisited one.
    """
    ordered: List[Location] = []
    current = start

    for kind in (StopKind.PICKUP, StopKind.DELIVERY):
        remaining = [loc for loc in locations if loc.kind == kind]
        while remaining:
            nearest = find_nearest_location(current, remaining, geo)
            ordered.append(nearest)
            remaining.remove(nearest)
            current = nearest.point

    return ordered


def walk_route(
    start: GeoPoint,
    ordered: Sequence[Location],
    start_time: datetime,
    geo: GeoConfig,
) -> RouteWalk:
    """
    Drive a fixed stop order and time-stamp every visit.

    arrival = previous departure + travel time, departure = arrival + service
    time. Total time is travel plus service for every stop.
    """
    waypoints: List[Waypoint] = []
    total_distance = 0.0
    clock = start_time
    position = start

    for location in ordered:
        traffic = utils.get_traffic_level(position, location.point, clock, geo)
        total_distance += utils.get_distance(position, location.point, geo)
        travel = utils.get_travel_time(position, location.point, traffic, geo)

        arrival = utils.add_minutes(clock, travel)
        departure = utils.add_minutes(arrival, location.estimated_service_mins)
        waypoints.append(Waypoint(
            location_id=location.location_id,
            point=location.point,
            address=location.address,
            kind=location.kind,
            estimated_arrival=arrival,
            estimated_departure=departure,
        ))

        clock = departure
        position = location.point

    total_time = (clock - start_time).total_seconds() / 60
    return RouteWalk(distance_km=total_distance, time_mins=total_time, waypoints=tuple(waypoints))


def minimum_spanning_tree_km(points: Sequence[GeoPoint], geo: GeoConfig) -> float:
    """
    Weight of a minimum spanning tree over the points (Prim, O(n^2)).

    Any route through all the points is itself a spanning tree, so this is a
    lower bound on the distance of every possible visiting order.
    """
    if len(points) < 2:
        return 0.0

    best: List[float] = [utils.get_distance(points[0], p, geo) for p in points]
    in_tree = [False] * len(points)
    in_tree[0] = True
    total = 0.0

    for _ in range(len(points) - 1):
        next_idx = -1
        for idx, flag in enumerate(in_tree):
            if not flag and (next_idx < 0 or best[idx] < best[next_idx]):
                next_idx = idx
        in_tree[next_idx] = True
        total += best[next_idx]
        for idx, flag in enumerate(in_tree):
            if not flag:
                best[idx] = min(best[idx], utils.get_distance(points[next_idx], points[idx], geo))

    return total


def _savings_pct(baseline: float, actual: float) -> float:
    if baseline <= 0:
        return 0.0
    return (baseline - actual) / baseline * 100


class RoutingEngine:
    """
    Optimizes multi-stop routes for a fleet.

    Attributes:
        config: Cost constants and recommendation thresholds
        geo: Distance and traffic model
        baseline: Naive router that savings are measured against
    """

    def __init__(
        self,
        config: Optional[RoutingConfig] = None,
        geo: Optional[GeoConfig] = None,
        baseline: Optional[NaiveBaselineRouter] = None,
    ) -> None:
        self.config = config or RoutingConfig()
        self.geo = geo or GeoConfig()
        self.baseline = baseline or InputOrderBaseline()

    def _route_cost(self, distance_km: float, time_mins: float, vehicle: Vehicle) -> Tuple[float, float]:
        """Return (fuel liters, cost in naira) for a drive."""
        fuel = distance_km / vehicle.fuel_efficiency_km_per_liter
        cost = fuel * self.config.fuel_price_per_liter + (time_mins / 60) * self.config.driver_cost_per_hour
        return fuel, cost

    def optimize_route(
        self,
        vehicle: Vehicle,
        locations: Sequence[Location],
        start_time: datetime,
        route_id: str = "",
    ) -> Tuple[Route, float]:
        """
        Build one route for one vehicle.

        Returns:
            Tuple of (route, cost saved against the baseline order)
        """
        start = vehicle.current_location
        ordered = nearest_neighbor_order(start, locations, self.geo)
        walk = walk_route(start, ordered, start_time, self.geo)
        fuel, cost = self._route_cost(walk.distance_km, walk.time_mins, vehicle)

        baseline_walk = walk_route(start, self.baseline.order(vehicle, locations), start_time, self.geo)
        _, baseline_cost = self._route_cost(baseline_walk.distance_km, baseline_walk.time_mins, vehicle)

        lower_bound = minimum_spanning_tree_km([start] + [loc.point for loc in ordered], self.geo)
        if walk.distance_km > 0:
            efficiency = min(1.0, lower_bound / walk.distance_km)
        else:
            efficiency = 1.0

        route = Route(
            route_id=route_id or f"route-{vehicle.vehicle_id}",
            vehicle=vehicle,
            stops=tuple(ordered),
            total_distance_km=walk.distance_km,
            total_time_mins=walk.time_mins,
            total_fuel_liters=fuel,
            estimated_cost=cost,
            waypoints=walk.waypoints,
            optimization=RouteOptimization(
                fuel_savings_pct=_savings_pct(baseline_walk.distance_km, walk.distance_km),
                time_savings_pct=_savings_pct(baseline_walk.time_mins, walk.time_mins),
                efficiency=efficiency,
            ),
        )
        return route, baseline_cost - cost

    def _recommend(self, route: Route, priority: int) -> List[str]:
        cfg = self.config
        notes: List[str] = []

        if route.optimization.fuel_savings_pct > cfg.excellent_savings_pct:
            notes.append(f"Excellent route optimization achieved for priority {priority} group")
        if route.optimization.efficiency < cfg.low_efficiency_threshold:
            notes.append(f"Consider splitting priority {priority} group for better efficiency")
        if route.total_distance_km > route.vehicle.max_range_km:
            notes.append(
                f"Priority {priority} route ({route.total_distance_km:.1f} km) exceeds "
                f"vehicle {route.vehicle.vehicle_id} range of {route.vehicle.max_range_km:.0f} km"
            )

        windows = {loc.location_id: loc.time_window for loc in route.stops if loc.time_window is not None}
        for waypoint in route.waypoints:
            window = windows.get(waypoint.location_id)
            if window is None or window.contains(waypoint.estimated_arrival):
                continue
            if waypoint.estimated_arrival > window.end:
                notes.append(f"Stop {waypoint.location_id} arrives after its time window")
            else:
                notes.append(f"Stop {waypoint.location_id} arrives before its time window opens")

        return notes

    def optimize_routes(
        self,
        vehicles: Sequence[Vehicle],
        stops: Sequence[Location],
        start_time: datetime,
    ) -> OptimizationResult:
        """
        Build one route per priority group.

        Args:
            vehicles: Fleet snapshot
            stops: Pickup and delivery stops
            start_time: When the vehicles set off

        Returns:
            OptimizationResult. Empty stops give an empty result with zero
            confidence; groups without a suitable vehicle are skipped with a
            recommendation.

        Raises:
            InvalidInputError: if a vehicle or stop is invalid
        """
        for vehicle in vehicles:
            validation.validate_vehicle(vehicle)
        for stop in stops:
            validation.validate_location(stop)

        if not stops:
            return OptimizationResult()

        routes: List[Route] = []
        cost_savings: List[float] = []
        recommendations: List[str] = []

        for priority, group in group_locations_by_priority(stops).items():
            if not group:
                continue

            vehicle = find_best_vehicle(vehicles, group, self.config)
            if vehicle is None:
                recommendations.append(f"No suitable vehicle found for priority {priority} locations")
                continue

            route, saved = self.optimize_route(
                vehicle, group, start_time, route_id=f"route-{vehicle.vehicle_id}-p{priority}"
            )
            routes.append(route)
            cost_savings.append(saved)
            recommendations.extend(self._recommend(route, priority))

        return OptimizationResult(
            routes=tuple(routes),
            total_savings=self._total_savings(routes, cost_savings),
            recommendations=tuple(recommendations),
            confidence=self._confidence(routes),
        )

    @staticmethod
    def _total_savings(routes: Sequence[Route], cost_savings: Sequence[float]) -> TotalSavings:
        if not routes:
            return TotalSavings()
        return TotalSavings(
            fuel_pct=sum(r.optimization.fuel_savings_pct for r in routes) / len(routes),
            time_pct=sum(r.optimization.time_savings_pct for r in routes) / len(routes),
            cost=sum(cost_savings),
        )

    def _confidence(self, routes: Sequence[Route]) -> float:
        """Mean of an efficiency score and a savings score, both capped at 1."""
        if not routes:
            return 0.0
        avg_efficiency = sum(r.optimization.efficiency for r in routes) / len(routes)
        avg_savings = sum(r.optimization.fuel_savings_pct for r in routes) / len(routes)

        efficiency_score = min(1.0, avg_efficiency * 1.2)
        savings_score = min(1.0, max(0.0, avg_savings / self.config.target_savings_pct))
        return (efficiency_score + savings_score) / 2

    def subscribe_to_route_updates(
        self,
        route_id: str,
        fetch_route: Callable[[str], Awaitable[Optional[Route]]],
        on_update: Callable[[Route], None],
        interval_ms: int = 60000,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Unsubscribe:
        """
        Poll a route store for changes to a dispatched route.

        Delivers every route the fetcher returns; None means no update.
        Must be called from a running event loop.
        """
        subscription = PollingSubscription(
            lambda: fetch_route(route_id),
            on_update,
            interval_ms / 1000,
            on_error=on_error,
            name=f"route-subscription:{route_id}",
        )
        return subscription.start()


_default_engine = RoutingEngine()


def optimize_routes(
    vehicles: Sequence[Vehicle],
    stops: Sequence[Location],
    start_time: datetime,
) -> OptimizationResult:
    """Module-level shortcut using the default configuration."""
    return _default_engine.optimize_routes(vehicles, stops, start_time)
