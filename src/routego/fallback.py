import logging

from .calcDist import LatLon, calcDist, validate_coord
from .config import DEFAULT_FALLBACK_SPEED_KMH
from .models import Congestion, Route

logger = logging.getLogger(__name__)


def estimate_duration_s(distance_m: float, speed_kmh: float = DEFAULT_FALLBACK_SPEED_KMH) -> float:
    """Travel time in seconds at a constant speed."""
    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be > 0")
    return (distance_m / 1000.0) / speed_kmh * 3600.0


def fallback_route(origin: LatLon,
                   destination: LatLon,
                   speed_kmh: float = DEFAULT_FALLBACK_SPEED_KMH) -> Route:
    """
    Straight-line route used when the road network gives no answer.

    Args:
        origin: (lat, lon) of the start point
        destination: (lat, lon) of the end point
        speed_kmh: Reference speed for the duration estimate

    Returns:
        Two-point Route flagged as an estimate, toll 0, congestion unknown
    """
    origin = validate_coord(*origin)
    destination = validate_coord(*destination)
    distance = calcDist(origin, destination)
    logger.info("Using straight-line fallback route: %.0fm", distance)
    return Route(
        distance=distance,
        duration=estimate_duration_s(distance, speed_kmh),
        geometry=((origin[1], origin[0]), (destination[1], destination[0])),
        toll=0.0,
        congestion=Congestion.UNKNOWN,
        is_estimate=True,
    )
