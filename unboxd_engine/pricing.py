# unboxd-engine/unboxd_engine/pricing.py
"""
Dynamic Pricing Engine for the Unboxd marketplace.

Quotes a move with a multiplicative model:

    final price = base price x time x demand/supply x weather x traffic
                  x item complexity x urgency x location

The base price is distance times a per-km rate with a minimum fare, and
the final price is always clamped to [minimum fare, maximum fare]. The
multipliers are independent of each other, so the order they are applied
in does not matter.

Live market conditions (demand, supply, weather, traffic) are fetched from
an injected MarketConditionsProvider. A quote's confidence reflects how
fresh those conditions were when the quote was made.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Deque, List, Optional

from . import utils, validation
from .config import PRICE_UPDATE_INTERVAL_MS, PricingConfig
from .errors import MarketDataError
from .market import Clock, MarketConditionsProvider, SimulatedMarketConditionsProvider
from .models import (
    MarketConditions,
    PriceRange,
    PricingBreakdown,
    PricingFactors,
    PricingResult,
    Urgency,
    Weather,
)
from .subscriptions import PollingSubscription, Unsubscribe

EXPLANATION_CLAUSES = (
    ("time", "Peak hour pricing applies"),
    ("demand", "High demand in your area"),
    ("weather", "Weather conditions affecting pricing"),
    ("traffic", "Heavy traffic in the area"),
    ("complexity", "Complex items require special handling"),
    ("urgency", "Urgent delivery requested"),
    ("location", "Premium location pricing"),
)
STANDARD_PRICING = "Standard pricing applies"


def get_time_multiplier(moment: datetime, cfg: PricingConfig) -> float:
    """
    Time-of-day multiplier.

    Checked in order: weekend, rush (08-09h, 18-19h), peak (07-09h,
    17-19h), late night (23-05h). Rush hours fall inside peak hours and win
    because they are checked first.
    """
    table = cfg.time_multipliers
    hour = moment.hour

    if moment.weekday() >= 5:
        return table["weekend"]
    if 8 <= hour <= 9 or 18 <= hour <= 19:
        return table["rush"]
    if 7 <= hour <= 9 or 17 <= hour <= 19:
        return table["peak"]
    if hour >= 23 or hour <= 5:
        return table["late_night"]
    return table["normal"]


def get_demand_supply_multiplier(demand_level: float, supply_level: float) -> float:
    """High demand against low supply raises prices, the reverse lowers them."""
    ratio = demand_level / max(supply_level, 0.1)

    if ratio > 2.0:
        return 1.8
    if ratio > 1.5:
        return 1.5
    if ratio > 1.2:
        return 1.2
    if ratio < 0.5:
        return 0.8
    if ratio < 0.8:
        return 0.9
    return 1.0


def _level_multiplier(level: float) -> float:
    if level > 0.8:
        return 1.4
    if level > 0.6:
        return 1.2
    if level > 0.4:
        return 1.1
    return 1.0


def get_traffic_multiplier(traffic_level: float) -> float:
    return _level_multiplier(traffic_level)


def get_complexity_multiplier(item_complexity: float) -> float:
    return _level_multiplier(item_complexity)


def get_weather_multiplier(weather: Weather, cfg: PricingConfig) -> float:
    return cfg.weather_multipliers.get(weather.value, 1.0)


def get_urgency_multiplier(urgency: Urgency, cfg: PricingConfig) -> float:
    return cfg.urgency_multipliers.get(urgency.value, 1.0)


def normalize_area(area: str) -> str:
    """'City-Center', 'city_center' and ' City Center ' all become 'city center'."""
    return " ".join(area.replace("-", " ").replace("_", " ").lower().split())


def get_location_multiplier(area: str, cfg: PricingConfig) -> float:
    """Premium for known areas, 1.0 for anywhere else."""
    return cfg.location_multipliers.get(normalize_area(area), 1.0)


def generate_price_explanation(breakdown: PricingBreakdown, cfg: PricingConfig) -> str:
    """
    Explain which multipliers pushed the price up.

    Depends only on the multiplier values, so identical breakdowns always
    read the same.
    """
    multipliers = breakdown.applied_multipliers()
    clauses = [
        text for name, text in EXPLANATION_CLAUSES
        if multipliers[name] > cfg.explanation_threshold
    ]
    if not clauses:
        return STANDARD_PRICING
    return ", ".join(clauses)


def quote_confidence(observed_at: datetime, quoted_at: datetime, cfg: PricingConfig) -> float:
    """
    Confidence from market data freshness.

    Brand-new data gives the maximum; data older than market_data_max_age_s
    gives the base confidence.
    """
    age_s = max(0.0, (quoted_at - observed_at).total_seconds())
    freshness = max(0.0, 1.0 - age_s / cfg.market_data_max_age_s)
    return min(cfg.max_confidence, cfg.base_confidence + 0.25 * freshness)


@dataclass(frozen=True)
class PriceHistoryEntry:
    timestamp: datetime
    result: PricingResult

    @property
    def price(self) -> float:
        return self.result.final_price


class PriceQuoteHistory:
    """
    Bounded in-memory record of quotes.

    The engines never persist anything; a caller that wants a price chart
    passes one of these to subscribe_to_price_updates.
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self._entries: Deque[PriceHistoryEntry] = deque(maxlen=max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, result: PricingResult, timestamp: Optional[datetime] = None) -> None:
        stamp = timestamp or result.quoted_at or datetime.now()
        self._entries.append(PriceHistoryEntry(timestamp=stamp, result=result))

    def get_price_history(self, days: int = 7, now: Optional[datetime] = None) -> List[PriceHistoryEntry]:
        """Quotes from the last `days` days, newest first."""
        cutoff = (now or datetime.now()) - timedelta(days=days)
        recent = [e for e in self._entries if e.timestamp >= cutoff]
        return sorted(recent, key=lambda e: e.timestamp, reverse=True)


class PricingEngine:
    """
    Quotes moves from trip factors and live market conditions.

    Attributes:
        config: Fare limits and multiplier tables
        market: Source of demand, supply, weather and traffic
        clock: Time source used to stamp quotes and age market data
    """

    def __init__(
        self,
        config: Optional[PricingConfig] = None,
        market: Optional[MarketConditionsProvider] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.config = config or PricingConfig()
        self.market = market or SimulatedMarketConditionsProvider()
        self.clock = clock

    async def _fetch_conditions(self, factors: PricingFactors) -> MarketConditions:
        try:
            return await self.market.fetch(factors.location)
        except MarketDataError:
            raise
        except Exception as exc:
            raise MarketDataError(f"market conditions unavailable: {exc}") from exc

    def price_with_conditions(
        self,
        factors: PricingFactors,
        conditions: MarketConditions,
        quoted_at: Optional[datetime] = None,
    ) -> PricingResult:
        """
        Quote a trip against known market conditions.

        This is the synchronous core of calculate_dynamic_price.
        """
        validation.validate_pricing_factors(factors)
        cfg = self.config
        quoted_at = quoted_at or self.clock()

        base_price = max(cfg.minimum_fare, factors.distance_km * cfg.base_rate_per_km)

        demand_multiplier = get_demand_supply_multiplier(conditions.demand_level, conditions.supply_level)
        breakdown = PricingBreakdown(
            distance_cost=base_price,
            time_multiplier=get_time_multiplier(factors.time_of_day, cfg),
            demand_multiplier=demand_multiplier,
            supply_multiplier=1 / demand_multiplier,
            weather_multiplier=get_weather_multiplier(conditions.weather, cfg),
            traffic_multiplier=get_traffic_multiplier(conditions.traffic_level),
            complexity_multiplier=get_complexity_multiplier(factors.item_complexity),
            urgency_multiplier=get_urgency_multiplier(factors.urgency, cfg),
            location_multiplier=get_location_multiplier(factors.area, cfg),
        )
        dynamic_multiplier = math.prod(breakdown.applied_multipliers().values())

        final_price = min(cfg.maximum_fare, utils.round2(base_price * dynamic_multiplier))
        final_price = max(cfg.minimum_fare, final_price)

        return PricingResult(
            base_price=base_price,
            dynamic_multiplier=dynamic_multiplier,
            final_price=final_price,
            breakdown=breakdown,
            confidence=quote_confidence(conditions.observed_at, quoted_at, cfg),
            price_range=PriceRange(
                min=utils.round2(final_price * (1 - cfg.price_range_spread)),
                max=utils.round2(final_price * (1 + cfg.price_range_spread)),
            ),
            explanation=generate_price_explanation(breakdown, cfg),
            quoted_at=quoted_at,
        )

    async def calculate_dynamic_price(self, factors: PricingFactors) -> PricingResult:
        """
        Quote a trip using current market conditions.

        Raises:
            InvalidInputError: if the factors are invalid (checked before any fetch)
            MarketDataError: if market conditions could not be fetched
        """
        validation.validate_pricing_factors(factors)
        conditions = await self._fetch_conditions(factors)
        return self.price_with_conditions(factors, conditions)

    def subscribe_to_price_updates(
        self,
        factors: PricingFactors,
        callback: Callable[[PricingResult], None],
        interval_ms: int = PRICE_UPDATE_INTERVAL_MS,
        on_error: Optional[Callable[[Exception], None]] = None,
        history: Optional[PriceQuoteHistory] = None,
    ) -> Unsubscribe:
        """
        Re-quote immediately and then every interval_ms.

        Each new quote replaces the previous one wholesale. Failed quotes and
        exceptions raised by callback go to on_error (or the log) and polling
        carries on. Must be called from
        a running event loop.

        Returns:
            Idempotent cancel function; no quote is delivered after it is called
        """
        validation.validate_pricing_factors(factors)

        def deliver(result: PricingResult) -> None:
            if history is not None:
                history.record(result)
            callback(result)

        subscription = PollingSubscription(
            lambda: self.calculate_dynamic_price(factors),
            deliver,
            interval_ms / 1000,
            on_error=on_error,
            name="price-subscription",
        )
        return subscription.start()


_default_engine = PricingEngine()


async def calculate_dynamic_price(factors: PricingFactors) -> PricingResult:
    """Module-level shortcut using default configuration and simulated market data."""
    return await _default_engine.calculate_dynamic_price(factors)
