# unboxd-engine/unboxd_engine/utils.py
"""
Geo-kernel and small helpers shared by the decision engines.

Provides geographic calculations, the time-of-day traffic model and
time/number formatting utilities. Includes optional OSRM integration for
real road distances.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple, Union

import requests

from . import config
from .config import GeoConfig
from .errors import InvalidInputError
from .models import GeoPoint

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_GEO = GeoConfig()

# Module-level cache for OSRM results, keyed by rounded coordinates
_osrm_cache: Dict[Tuple[float, float, float, float], Tuple[float, float]] = {}


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Uses the Haversine formula to compute the distance between two GPS coordinates.
    This accounts for Earth's curvature, making it accurate for city-scale moves.

    Args:
        lat1: Latitude of point 1 in decimal degrees
        lon1: Longitude of point 1 in decimal degrees
        lat2: Latitude of point 2 in decimal degrees
        lon2: Longitude of point 2 in decimal degrees

    Returns:
        Distance in kilometers between the two points

    Example:
        >>> haversine_distance(7.5186, 4.5224, 7.4951, 4.5156)
        2.72  # ~OAU campus gate to Ile-Ife town
    """
    # Convert decimal degrees to radians
    lon1, lat1, lon2, lat2 = map(math.radians, [lon1, lat1, lon2, lat2])

    # Haversine formula
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2)**2
    # Clamp guards against rounding pushing a past 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * config.EARTH_RADIUS_KM


def _get_cache_key(lat1: float, lon1: float, lat2: float, lon2: float) -> Tuple[float, float, float, float]:
    """Create a cache key with rounded coordinates (5 decimal places ~ 1m precision)."""
    return (round(lat1, 5), round(lon1, 5), round(lat2, 5), round(lon2, 5))


def osrm_route(
    lat1: float, lon1: float,
    lat2: float, lon2: float,
    geo: GeoConfig = DEFAULT_GEO,
) -> Optional[Tuple[float, float]]:
    """
    Get road distance and duration from OSRM routing service.

    Queries the OSRM API for the actual driving route between two points.
    Results are cached to minimize API calls.

    Returns:
        Tuple of (distance_km, duration_minutes) if successful, None if failed

    Note:
        OSRM expects coordinates in lon,lat order (not lat,lon).
    """
    cache_key = _get_cache_key(lat1, lon1, lat2, lon2)
    if cache_key in _osrm_cache:
        return _osrm_cache[cache_key]

    # Roads are usually bidirectional with the same distance
    reverse_key = _get_cache_key(lat2, lon2, lat1, lon1)
    if reverse_key in _osrm_cache:
        return _osrm_cache[reverse_key]

    try:
        url = (
            f"{geo.osrm_server_url}/route/v1/driving/"
            f"{lon1},{lat1};{lon2},{lat2}"
            f"?overview=false"
        )

        response = requests.get(url, timeout=geo.osrm_timeout_s)
        response.raise_for_status()

        data = response.json()

        if data.get("code") != "Ok" or not data.get("routes"):
            logger.warning(f"OSRM returned no route: {data.get('code')}")
            return None

        route = data["routes"][0]
        distance_km = route["distance"] / 1000
        duration_min = route["duration"] / 60

        result = (distance_km, duration_min)

        if len(_osrm_cache) >= config.OSRM_CACHE_SIZE:
            # Drop the oldest 10% of entries
            keys_to_remove = list(_osrm_cache.keys())[:config.OSRM_CACHE_SIZE // 10]
            for key in keys_to_remove:
                del _osrm_cache[key]

        _osrm_cache[cache_key] = result
        return result

    except requests.exceptions.Timeout:
        logger.warning("OSRM request timed out")
        return None
    except requests.exceptions.RequestException as e:
        logger.warning(f"OSRM request failed: {e}")
        return None
    except (KeyError, ValueError, TypeError) as e:
        logger.warning(f"OSRM response parsing failed: {e}")
        return None


def clear_osrm_cache() -> int:
    """
    Clear the OSRM route cache.

    Returns:
        Number of cached entries that were cleared
    """
    count = len(_osrm_cache)
    _osrm_cache.clear()
    return count


def get_distance(a: GeoPoint, b: GeoPoint, geo: GeoConfig = DEFAULT_GEO) -> float:
    """
    Get the distance in km between two points using the configured method.

    This is the distance function used throughout the engines. It uses OSRM
    road distance when enabled, falling back to Haversine distance (with a
    multiplier) when OSRM fails. With road distance disabled the result is
    symmetric and zero for identical points.
    """
    if a == b:
        return 0.0

    if geo.use_road_distance:
        result = osrm_route(a.lat, a.lng, b.lat, b.lng, geo)
        if result is not None:
            return result[0]

        logger.debug("Falling back to Haversine distance with multiplier")
        return haversine_distance(a.lat, a.lng, b.lat, b.lng) * config.HAVERSINE_FALLBACK_MULTIPLIER

    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def get_traffic_level(
    a: GeoPoint,
    b: GeoPoint,
    at_time: datetime,
    geo: GeoConfig = DEFAULT_GEO,
) -> float:
    """
    Estimate the traffic level (0-1) for a trip between two points.

    A time-of-day heuristic: rush hours (07:00-09:59, 17:00-19:59) are heavy,
    weekends light, everything else medium. The endpoints are accepted so a
    live traffic source can slot in behind the same signature.
    """
    hour = at_time.hour
    if 7 <= hour <= 9 or 17 <= hour <= 19:
        return geo.rush_hour_traffic
    if at_time.weekday() >= 5:
        return geo.weekend_traffic
    return geo.normal_traffic


def calculate_travel_time_minutes(
    distance_km: float,
    traffic_level: float,
    geo: GeoConfig = DEFAULT_GEO,
) -> float:
    """
    Calculate the unrounded travel time for a given distance.

    Example:
        >>> calculate_travel_time_minutes(10.0, 0.0)  # 10km at 30km/h
        20.0
    """
    if not 0.0 <= traffic_level <= 1.0:
        raise InvalidInputError(f"traffic_level must be within [0, 1], got {traffic_level}")
    if distance_km <= 0:
        return 0.0
    effective_speed = geo.base_speed_kmh / (1 + traffic_level * geo.traffic_slowdown)
    return (distance_km / effective_speed) * 60


def get_travel_time(
    a: GeoPoint,
    b: GeoPoint,
    traffic_level: float,
    geo: GeoConfig = DEFAULT_GEO,
) -> int:
    """
    Get the travel time in whole minutes between two points.

    Never negative; identical points take zero minutes.
    """
    if a == b:
        return 0
    return round_half_up(calculate_travel_time_minutes(get_distance(a, b, geo), traffic_level, geo))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero, like a cashier would.

    Python's round() uses banker's rounding, which would quote 12.5 as 12.

    Example:
        >>> round_half_up(2.675, 2)
        2.68
    """
    factor = 10 ** digits
    scaled = abs(value) * factor
    # Nudge by a few ulps so values like 1.005 (stored as 1.00499...) round up
    rounded = math.floor(scaled + 0.5 + 1e-9) / factor
    result = math.copysign(rounded, value)
    return int(result) if digits == 0 else result


def round2(value: float) -> float:
    """Round a currency amount to kobo precision."""
    return round_half_up(value, 2)


def add_minutes(base_time: datetime, minutes_to_add: Union[int, float]) -> datetime:
    """
    Add a number of minutes to a datetime.

    Example:
        >>> add_minutes(datetime(2024, 5, 6, 18, 30), 45)
        datetime.datetime(2024, 5, 6, 19, 15)
    """
    return base_time + timedelta(minutes=minutes_to_add)


def format_duration(minutes: float) -> str:
    """
    Format a duration in minutes as a human-readable string.

    Returns:
        Formatted string like "1h 23m" or "45m"
    """
    if minutes < 60:
        return f"{minutes:.0f}m"
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    return f"{hours}h {mins}m"
