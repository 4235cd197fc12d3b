# unboxd-engine/unboxd_engine/report.py
"""
Tabular views of engine results.

Dashboards show match cards, waypoint tables and price breakdowns as
tables; these helpers flatten the result objects into pandas DataFrames
with the column names and units used on screen (km, minutes, naira).
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import pandas as pd

from .models import MatchResult, OptimizationResult, PricingResult

MATCH_COLUMNS = [
    "Agent", "Vehicle", "Score", "ETA (min)", "Est. Cost (NGN)", "Confidence", "Reasons",
]
WAYPOINT_COLUMNS = [
    "Route", "Vehicle", "Seq", "Stop", "Type", "Address", "Arrival", "Departure",
]
ROUTE_COLUMNS = [
    "Route", "Vehicle", "Stops", "Distance (km)", "Time (min)", "Fuel (L)",
    "Cost (NGN)", "Fuel Savings %", "Time Savings %", "Efficiency",
]


def matches_to_frame(matches: Sequence[MatchResult]) -> pd.DataFrame:
    """One row per match card, best first."""
    rows: List[Dict[str, Any]] = [
        {
            "Agent": m.agent.name or m.agent.agent_id,
            "Vehicle": m.agent.vehicle.type.value,
            "Score": round(m.score, 3),
            "ETA (min)": m.estimated_arrival_mins,
            "Est. Cost (NGN)": m.estimated_cost,
            "Confidence": round(m.confidence, 2),
            "Reasons": ", ".join(m.reasons),
        }
        for m in matches
    ]
    return pd.DataFrame(rows, columns=MATCH_COLUMNS)


def routes_to_frame(result: OptimizationResult) -> pd.DataFrame:
    """One summary row per route."""
    rows = [
        {
            "Route": r.route_id,
            "Vehicle": r.vehicle.vehicle_id,
            "Stops": len(r.stops),
            "Distance (km)": round(r.total_distance_km, 2),
            "Time (min)": round(r.total_time_mins, 1),
            "Fuel (L)": round(r.total_fuel_liters, 2),
            "Cost (NGN)": round(r.estimated_cost, 2),
            "Fuel Savings %": round(r.optimization.fuel_savings_pct, 1),
            "Time Savings %": round(r.optimization.time_savings_pct, 1),
            "Efficiency": round(r.optimization.efficiency, 3),
        }
        for r in result.routes
    ]
    return pd.DataFrame(rows, columns=ROUTE_COLUMNS)


def waypoints_to_frame(result: OptimizationResult) -> pd.DataFrame:
    """Every time-stamped visit across all routes, in driving order."""
    rows = []
    for route in result.routes:
        for seq, wp in enumerate(route.waypoints, start=1):
            rows.append({
                "Route": route.route_id,
                "Vehicle": route.vehicle.vehicle_id,
                "Seq": seq,
                "Stop": wp.location_id,
                "Type": wp.kind.value,
                "Address": wp.address,
                "Arrival": pd.Timestamp(wp.estimated_arrival),
                "Departure": pd.Timestamp(wp.estimated_departure),
            })
    return pd.DataFrame(rows, columns=WAYPOINT_COLUMNS)


def pricing_to_frame(result: PricingResult) -> pd.DataFrame:
    """The price breakdown panel: one row per named factor."""
    b = result.breakdown
    rows = [("Distance cost (NGN)", b.distance_cost)]
    rows += [(f"{name.title()} multiplier", value) for name, value in b.applied_multipliers().items()]
    rows += [
        ("Dynamic multiplier", result.dynamic_multiplier),
        ("Final price (NGN)", result.final_price),
        ("Range min (NGN)", result.price_range.min),
        ("Range max (NGN)", result.price_range.max),
        ("Confidence", result.confidence),
    ]
    frame = pd.DataFrame(rows, columns=["Factor", "Value"])
    frame["Value"] = frame["Value"].round(3)
    return frame
