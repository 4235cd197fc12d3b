#!/usr/bin/env python3
# unboxd-engine/main.py
"""
Command-Line Interface for the Unboxd decision engines.

Runs the matching, routing and pricing engines on the built-in Ile-Ife
demo scenario and prints the tables a dashboard would show.

Usage:
    python main.py match                      # Rank drivers for a sample booking
    python main.py route --start 2024-05-06T14:00
    python main.py quote --seed 7             # Reproducible simulated market
    python main.py route --csv routes.csv     # Save the waypoint table

Exit Codes:
    0: Success
    1: Invalid input
    2: Upstream (market data) failure
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import Optional

import pandas as pd

from unboxd_engine import report, samples
from unboxd_engine.config import GeoConfig, MatchingConfig, PricingConfig, RoutingConfig
from unboxd_engine.errors import InvalidInputError, MarketDataError
from unboxd_engine.market import SimulatedMarketConditionsProvider
from unboxd_engine.matching import MatchingEngine
from unboxd_engine.pricing import PricingEngine
from unboxd_engine.routing import RoutingEngine
from unboxd_engine.utils import format_duration

logger = logging.getLogger("unboxd")


def print_header(title: str) -> None:
    """Print the CLI header."""
    print("\n" + "=" * 60)
    print("  UNBOXD - Smart Moving Engine")
    print(f"  {title}")
    print("=" * 60 + "\n")


def emit(frame: pd.DataFrame, csv_path: Optional[str]) -> None:
    """Print a table and optionally save it as CSV."""
    if frame.empty:
        print("  (no rows)")
    else:
        print(frame.to_string(index=False))
    if csv_path:
        frame.to_csv(csv_path, index=False)
        logger.info(f"Wrote {len(frame)} rows to {csv_path}")


def run_match(when: datetime, csv_path: Optional[str]) -> int:
    engine = MatchingEngine(MatchingConfig.from_env(), GeoConfig.from_env())
    request = samples.sample_request(when)
    pool = samples.sample_agents()

    print_header(f"Driver matching for {request.request_id}")
    matches = engine.find_best_matches(request, pool, max_results=5)
    emit(report.matches_to_frame(matches), csv_path)

    instant = engine.get_instant_match(request, pool)
    if instant is None:
        print("\n  No instant match. Offer the ranked list or try again later.")
    else:
        print(f"\n  Instant match: {instant.agent.name} in {format_duration(instant.estimated_arrival_mins)}")
    return 0


def run_route(when: datetime, csv_path: Optional[str]) -> int:
    engine = RoutingEngine(RoutingConfig.from_env(), GeoConfig.from_env())

    print_header("Multi-stop route optimization")
    result = engine.optimize_routes(samples.sample_fleet(), samples.sample_stops(when), when)
    print(report.routes_to_frame(result).to_string(index=False))
    print()
    emit(report.waypoints_to_frame(result), csv_path)

    print(f"\n  Fuel savings: {result.total_savings.fuel_pct:.1f}%")
    print(f"  Time savings: {result.total_savings.time_pct:.1f}%")
    print(f"  Cost savings: NGN {result.total_savings.cost:,.2f}")
    print(f"  Confidence:   {result.confidence:.2f}")
    for note in result.recommendations:
        print(f"  - {note}")
    return 0


def run_quote(when: datetime, csv_path: Optional[str], seed: Optional[int]) -> int:
    engine = PricingEngine(
        PricingConfig.from_env(),
        SimulatedMarketConditionsProvider(seed=seed, clock=lambda: when),
        clock=lambda: when,
    )

    print_header("Dynamic price quote")
    result = asyncio.run(engine.calculate_dynamic_price(samples.sample_pricing_factors(when)))
    emit(report.pricing_to_frame(result), csv_path)
    print(f"\n  {result.explanation}")
    print(f"  Quote: NGN {result.final_price:,.2f} (NGN {result.price_range.min:,.2f} - {result.price_range.max:,.2f})")
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="Unboxd matching, routing and pricing CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py match                        # Rank drivers now
  python main.py route --start 2024-05-06T08:30
  python main.py quote --seed 42 --csv quote.csv
        """
    )

    parser.add_argument(
        "command",
        choices=["match", "route", "quote"],
        help="Engine to run on the demo scenario"
    )

    parser.add_argument(
        "--start", "-t",
        type=datetime.fromisoformat,
        default=None,
        help="Booking / departure time in ISO format (default: now)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for simulated market conditions (quote only)"
    )

    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Also write the main table to this CSV file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    when = args.start or datetime.now()

    try:
        if args.command == "match":
            return run_match(when, args.csv)
        if args.command == "route":
            return run_route(when, args.csv)
        return run_quote(when, args.csv, args.seed)
    except InvalidInputError as e:
        print(f"ERROR: Invalid input: {e}")
        return 1
    except MarketDataError as e:
        print(f"ERROR: Market data unavailable: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
