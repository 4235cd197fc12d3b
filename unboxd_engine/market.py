# unboxd-engine/unboxd_engine/market.py
"""
Market condition providers for dynamic pricing.

Live demand, supply, fuel price, weather and traffic come from outside the
pricing engine. The engine only depends on the MarketConditionsProvider
protocol, so production code can plug in real telemetry while tests and
offline quoting use fixed or simulated conditions.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, Optional, Protocol

from .models import GeoPoint, MarketConditions, Weather

Clock = Callable[[], datetime]


class MarketConditionsProvider(Protocol):
    """Anything that can report current market conditions around a point."""

    async def fetch(self, location: GeoPoint) -> MarketConditions:
        ...


class StaticMarketConditionsProvider:
    """
    Always reports the same conditions.

    Useful for tests and for quoting when telemetry is unavailable and the
    operator has decided on fixed conditions. observed_at defaults to "now"
    on every fetch so fixed conditions never look stale.
    """

    def __init__(
        self,
        demand_level: float = 0.5,
        supply_level: float = 0.5,
        fuel_cost_per_liter: float = 200.0,
        weather: Weather = Weather.CLEAR,
        traffic_level: float = 0.3,
        observed_at: Optional[datetime] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.demand_level = demand_level
        self.supply_level = supply_level
        self.fuel_cost_per_liter = fuel_cost_per_liter
        self.weather = weather
        self.traffic_level = traffic_level
        self.observed_at = observed_at
        self._clock = clock

    async def fetch(self, location: GeoPoint) -> MarketConditions:
        return MarketConditions(
            demand_level=self.demand_level,
            supply_level=self.supply_level,
            fuel_cost_per_liter=self.fuel_cost_per_liter,
            weather=self.weather,
            traffic_level=self.traffic_level,
            observed_at=self.observed_at or self._clock(),
        )


class SimulatedMarketConditionsProvider:
    """
    Simulates market conditions from the calendar and the clock.

    - Demand is high during the May-July move-out season
    - Supply is higher during the day (06:00-22:59) when drivers are out
    - Fuel costs NGN 180-220 per liter
    - Traffic peaks in the morning and evening rush

    Driven by a seeded random generator so demos are reproducible.
    """

    WEATHER_OPTIONS = (Weather.CLEAR, Weather.RAINY, Weather.STORMY)

    def __init__(self, seed: Optional[int] = None, clock: Clock = datetime.now) -> None:
        self._rng = random.Random(seed)
        self._clock = clock

    async def fetch(self, location: GeoPoint) -> MarketConditions:
        now = self._clock()
        rng = self._rng
        hour = now.hour

        is_move_out_season = 5 <= now.month <= 7
        if is_move_out_season:
            demand = 0.8 + rng.random() * 0.2
        else:
            demand = 0.3 + rng.random() * 0.4

        if 6 <= hour <= 22:
            supply = 0.6 + rng.random() * 0.3
        else:
            supply = 0.2 + rng.random() * 0.3

        fuel_cost = 180 + rng.random() * 40
        weather = rng.choice(self.WEATHER_OPTIONS)

        if 7 <= hour <= 9:
            traffic = 0.8 + rng.random() * 0.2
        elif 17 <= hour <= 19:
            traffic = 0.7 + rng.random() * 0.3
        else:
            traffic = 0.2 + rng.random() * 0.4

        return MarketConditions(
            demand_level=demand,
            supply_level=supply,
            fuel_cost_per_liter=fuel_cost,
            weather=weather,
            traffic_level=traffic,
            observed_at=now,
        )
