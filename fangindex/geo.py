"""Great-circle distance and user location resolution."""

import logging
import math
from typing import Callable, NamedTuple, Optional, Tuple

from .errors import LocationUnavailable, PermissionDenied

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class Coordinates(NamedTuple):
    lat: float
    lon: float


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two points in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Guard against a > 1 from floating point error on antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def resolve_user_location(
    provider: Optional[Callable[[], Tuple[float, float]]],
    fallback: Tuple[float, float],
) -> Coordinates:
    """Ask the location provider for the user's position.

    A denied permission or an unavailable fix is not fatal: the configured
    fallback coordinate is returned instead.
    """
    if provider is None:
        return Coordinates(*fallback)

    try:
        lat, lon = provider()
    except PermissionDenied:
        logger.info(f"Location permission denied, using fallback {fallback}")
        return Coordinates(*fallback)
    except LocationUnavailable as e:
        logger.warning(f"Location unavailable ({e}), using fallback {fallback}")
        return Coordinates(*fallback)

    return Coordinates(float(lat), float(lon))
