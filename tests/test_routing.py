import asyncio
from datetime import timedelta

import pytest

from unboxd_engine.config import GeoConfig, RoutingConfig
from unboxd_engine.errors import InvalidInputError
from unboxd_engine.models import OptimizationResult, StopKind, TimeWindow
from unboxd_engine.routing import (
    RoutingEngine,
    find_best_vehicle,
    group_locations_by_priority,
    minimum_spanning_tree_km,
    nearest_neighbor_order,
    optimize_routes,
)

from factories import MIDDAY, ORIGIN, make_stop, make_vehicle, north_of


def three_stops(window=None):
    """Submitted in a poor order: the far pickup first."""
    return [
        make_stop("p-far", 6.0),
        make_stop("p-near", 2.0),
        make_stop("d", 4.0, kind=StopKind.DELIVERY, window=window),
    ]


def test_no_stops_gives_empty_result():
    result = optimize_routes([make_vehicle()], [], MIDDAY)
    assert result == OptimizationResult()
    assert result.confidence == 0.0
    assert result.routes == ()


def test_route_totals_and_waypoints():
    result = RoutingEngine().optimize_routes([make_vehicle()], three_stops(), MIDDAY)
    [route] = result.routes

    assert route.route_id == "route-v1-p1"
    assert route.stop_ids == ("p-near", "p-far", "d")
    assert route.total_distance_km == pytest.approx(8.0)
    # 20 min driving at 24 km/h plus 3 x 10 min service
    assert route.total_time_mins == pytest.approx(50.0)
    assert route.total_fuel_liters == pytest.approx(0.8)
    assert route.estimated_cost == pytest.approx(0.8 * 200 + 50 / 60 * 500)

    arrivals = [w.estimated_arrival for w in route.waypoints]
    assert arrivals == [
        MIDDAY + timedelta(minutes=5),
        MIDDAY + timedelta(minutes=25),
        MIDDAY + timedelta(minutes=40),
    ]
    for prev, nxt in zip(route.waypoints, route.waypoints[1:]):
        assert nxt.estimated_arrival >= prev.estimated_departure
    assert route.waypoints[-1].estimated_departure == MIDDAY + timedelta(minutes=route.total_time_mins)


def test_savings_are_measured_against_submitted_order():
    result = RoutingEngine().optimize_routes([make_vehicle()], three_stops(), MIDDAY)
    [route] = result.routes

    # baseline drives 6 + 4 + 2 = 12 km in 60 minutes
    assert route.optimization.fuel_savings_pct == pytest.approx((12 - 8) / 12 * 100)
    assert route.optimization.time_savings_pct == pytest.approx((60 - 50) / 60 * 100)
    assert result.total_savings.cost == pytest.approx((12 / 10 * 200 + 500) - route.estimated_cost)

    # all stops lie on one line, so the tree spans 6 km
    assert route.optimization.efficiency == pytest.approx(6.0 / 8.0)
    assert result.confidence == pytest.approx((0.75 * 1.2 + 1.0) / 2)
    assert "Excellent route optimization achieved for priority 1 group" in result.recommendations


def test_greedy_order_can_lose_to_submitted_order():
    stops = [
        make_stop("south", -1.5),
        make_stop("near", 1.0),
        make_stop("far", 5.0),
    ]
    result = RoutingEngine().optimize_routes([make_vehicle()], stops, MIDDAY)
    [route] = result.routes

    assert route.stop_ids == ("near", "south", "far")
    assert route.total_distance_km == pytest.approx(10.0)
    assert route.optimization.fuel_savings_pct == pytest.approx(-25.0)
    assert route.optimization.efficiency == pytest.approx(0.65)
    assert "Consider splitting priority 1 group for better efficiency" in result.recommendations
    # negative savings contribute nothing, they do not drag confidence down
    assert result.confidence == pytest.approx(min(1.0, 0.65 * 1.2) / 2)


def test_efficiency_never_exceeds_one():
    stops = [make_stop("a", 3.0), make_stop("b", -3.0, kind=StopKind.DELIVERY)]
    result = RoutingEngine().optimize_routes([make_vehicle()], stops, MIDDAY)
    for route in result.routes:
        assert 0.0 <= route.optimization.efficiency <= 1.0
    assert 0.0 <= result.confidence <= 1.0


def test_pickups_come_before_deliveries():
    stops = [
        make_stop("d-close", 0.5, kind=StopKind.DELIVERY),
        make_stop("p-far", 8.0),
        make_stop("p-mid", 4.0),
    ]
    [route] = RoutingEngine().optimize_routes([make_vehicle()], stops, MIDDAY).routes
    kinds = [stop.kind for stop in route.stops]
    assert kinds == [StopKind.PICKUP, StopKind.PICKUP, StopKind.DELIVERY]
    assert route.stop_ids == ("p-mid", "p-far", "d-close")


def test_nearest_neighbor_breaks_ties_by_input_order():
    stops = [make_stop("first", 2.0), make_stop("second", 2.0)]
    ordered = nearest_neighbor_order(ORIGIN, stops, GeoConfig())
    assert [s.location_id for s in ordered] == ["first", "second"]


def test_vehicle_selection_prefers_fuel_efficiency_among_capable():
    fleet = [
        make_vehicle("tiny", capacity=1.0, efficiency=20.0),
        make_vehicle("big", capacity=100.0, efficiency=8.0),
        make_vehicle("frugal", capacity=100.0, efficiency=12.0),
        make_vehicle("frugal-2", capacity=100.0, efficiency=12.0),
    ]
    # three stops x 10 service minutes x 0.1 = 3 units of load
    chosen = find_best_vehicle(fleet, three_stops(), RoutingConfig())
    assert chosen.vehicle_id == "frugal"


def test_group_without_capable_vehicle_is_skipped():
    result = RoutingEngine().optimize_routes([make_vehicle(capacity=1.0)], three_stops(), MIDDAY)
    assert result.routes == ()
    assert result.recommendations == ("No suitable vehicle found for priority 1 locations",)
    assert result.confidence == 0.0


def test_one_route_per_priority_group_in_first_appearance_order():
    stops = [
        make_stop("late-1", 3.0, priority=2),
        make_stop("urgent-1", 1.0, priority=1),
        make_stop("late-2", 5.0, priority=2, kind=StopKind.DELIVERY),
    ]
    assert list(group_locations_by_priority(stops)) == [2, 1]

    result = RoutingEngine().optimize_routes([make_vehicle()], stops, MIDDAY)
    assert [r.route_id for r in result.routes] == ["route-v1-p2", "route-v1-p1"]
    assert result.routes[0].stop_ids == ("late-1", "late-2")
    assert result.routes[1].stop_ids == ("urgent-1",)


def test_out_of_range_route_is_flagged():
    result = RoutingEngine().optimize_routes([make_vehicle(max_range=5.0)], three_stops(), MIDDAY)
    assert any("exceeds vehicle v1 range" in note for note in result.recommendations)


def test_time_window_violations_are_flagged():
    closes_early = TimeWindow(MIDDAY, MIDDAY + timedelta(minutes=30))
    result = RoutingEngine().optimize_routes([make_vehicle()], three_stops(closes_early), MIDDAY)
    assert "Stop d arrives after its time window" in result.recommendations

    opens_late = TimeWindow(MIDDAY + timedelta(hours=1), MIDDAY + timedelta(hours=2))
    result = RoutingEngine().optimize_routes([make_vehicle()], three_stops(opens_late), MIDDAY)
    assert "Stop d arrives before its time window opens" in result.recommendations

    fits = TimeWindow(MIDDAY, MIDDAY + timedelta(hours=2))
    result = RoutingEngine().optimize_routes([make_vehicle()], three_stops(fits), MIDDAY)
    assert not any("time window" in note for note in result.recommendations)


def test_custom_baseline_changes_reported_savings():
    class GreedyBaseline:
        def order(self, vehicle, stops):
            return nearest_neighbor_order(vehicle.current_location, stops, GeoConfig())

    result = RoutingEngine(baseline=GreedyBaseline()).optimize_routes([make_vehicle()], three_stops(), MIDDAY)
    assert result.total_savings.fuel_pct == pytest.approx(0.0)
    assert result.total_savings.time_pct == pytest.approx(0.0)
    assert result.total_savings.cost == pytest.approx(0.0)


def test_results_are_deterministic():
    first = RoutingEngine().optimize_routes([make_vehicle()], three_stops(), MIDDAY)
    second = RoutingEngine().optimize_routes([make_vehicle()], three_stops(), MIDDAY)
    assert first == second


def test_spanning_tree_lower_bound():
    points = [ORIGIN, north_of(ORIGIN, 2.0), north_of(ORIGIN, -3.0)]
    assert minimum_spanning_tree_km(points, GeoConfig()) == pytest.approx(5.0)
    assert minimum_spanning_tree_km([ORIGIN], GeoConfig()) == 0.0


def test_invalid_stop_is_rejected():
    with pytest.raises(InvalidInputError, match="priority"):
        optimize_routes([make_vehicle()], [make_stop("x", 1.0, priority=6)], MIDDAY)
    with pytest.raises(InvalidInputError, match="fuel efficiency"):
        optimize_routes([make_vehicle(efficiency=0.0)], three_stops(), MIDDAY)


def test_route_updates_are_delivered_until_cancelled():
    [route] = RoutingEngine().optimize_routes([make_vehicle()], three_stops(), MIDDAY).routes
    updates = []
    requested = []

    async def fetch(route_id):
        requested.append(route_id)
        return route

    async def scenario():
        engine = RoutingEngine()
        unsubscribe = engine.subscribe_to_route_updates(route.route_id, fetch, updates.append, interval_ms=5)
        while len(updates) < 2:
            await asyncio.sleep(0.005)
        unsubscribe()
        unsubscribe()
        seen = len(updates)
        await asyncio.sleep(0.05)
        return seen

    seen = asyncio.run(scenario())
    assert seen >= 2
    assert len(updates) == seen
    assert set(requested) == {"route-v1-p1"}


@pytest.mark.parametrize("priority", [0, 6, 2.5, True, "1"])
def test_priority_must_be_an_integer_between_one_and_five(priority):
    with pytest.raises(InvalidInputError, match="priority"):
        optimize_routes([make_vehicle()], [make_stop("x", 1.0, priority=priority)], MIDDAY)
