"""Geographic utility functions."""

import math
import time
from typing import Any, Callable, Iterable, Optional, Union

from .config import CONFIG

Coordinates = tuple[float, float]
PointLike = Union[Coordinates, Any]  # (lat, lon) or anything with .lat/.lon


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    R = CONFIG["earth_radius"]

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def as_coordinates(point: PointLike) -> Coordinates:
    """Accept a (lat, lon) pair or an object exposing lat/lon"""
    if hasattr(point, "lat") and hasattr(point, "lon"):
        return (point.lat, point.lon)
    lat, lon = point
    return (lat, lon)


def distance_meters(a: PointLike, b: PointLike) -> float:
    """Great-circle distance between two points in meters"""
    lat1, lon1 = as_coordinates(a)
    lat2, lon2 = as_coordinates(b)
    return haversine_distance(lat1, lon1, lat2, lon2)


def is_valid_coordinates(point: PointLike) -> bool:
    lat, lon = as_coordinates(point)
    return (isinstance(lat, (int, float)) and isinstance(lon, (int, float))
            and math.isfinite(lat) and math.isfinite(lon))


def padded_bounds(points: Iterable[PointLike], pad: float = 0.2) -> Optional[list[list[float]]]:
    """Bounding box [[south, west], [north, east]] grown by pad on every side.

    Returns None for an empty input.
    """
    coords = [as_coordinates(p) for p in points]
    if not coords:
        return None
    lats = [c[0] for c in coords]
    lons = [c[1] for c in coords]
    lat_pad = (max(lats) - min(lats)) * pad
    lon_pad = (max(lons) - min(lons)) * pad
    return [[min(lats) - lat_pad, min(lons) - lon_pad],
            [max(lats) + lat_pad, max(lons) + lon_pad]]


def retry_with_backoff(func: Callable, max_time: float = 30.0, initial_delay: float = 1.0,
                       max_delay: float = 8.0, description: str = "operation"):
    """Retry a function with exponential backoff.

    Args:
        func: Function that returns a truthy value on success, falsy on failure
        max_time: Maximum total time to retry (seconds)
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        description: Description for logging

    Returns:
        The result of func() on success, or None if all retries failed
    """
    start_time = time.time()
    delay = initial_delay
    attempt = 1

    while True:
        result = func()
        if result:
            return result

        elapsed = time.time() - start_time
        if elapsed >= max_time:
            print(f"Gave up on {description} after {elapsed:.1f}s ({attempt} attempts)")
            return None

        sleep_time = min(delay, max_time - elapsed, max_delay)
        if sleep_time > 0:
            print(f"Retrying {description} in {sleep_time:.1f}s (attempt {attempt})...")
            time.sleep(sleep_time)

        delay = min(delay * 2, max_delay)
        attempt += 1
