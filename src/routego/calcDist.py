# calcDist.py
import math
from typing import Tuple

from .config import EARTH_RADIUS_M

LatLon = Tuple[float, float]
BBox = Tuple[float, float, float, float]  # (south, west, north, east)


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    # rounding can push a slightly above 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def calcDist(p1: LatLon, p2: LatLon) -> float:
    """Wrapper: p1,p2 are (lat, lon) tuples, returns meters."""
    return haversine_m(p1[0], p1[1], p2[0], p2[1])


def validate_coord(lat: float, lon: float) -> LatLon:
    """
    Reject coordinates that cannot be a WGS84 position.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees

    Returns:
        (lat, lon) as floats

    Raises:
        ValueError: If either value is non-finite or out of range
    """
    lat = float(lat)
    lon = float(lon)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"Non-finite coordinate: ({lat}, {lon})")
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise ValueError(f"Coordinate out of range: ({lat}, {lon})")
    return lat, lon


def bounding_box(p1: LatLon, p2: LatLon, padding_deg: float) -> BBox:
    """Envelope around both points expanded by padding_deg on every side."""
    south = max(-90.0, min(p1[0], p2[0]) - padding_deg)
    north = min(90.0, max(p1[0], p2[0]) + padding_deg)
    west = max(-180.0, min(p1[1], p2[1]) - padding_deg)
    east = min(180.0, max(p1[1], p2[1]) + padding_deg)
    return south, west, north, east
