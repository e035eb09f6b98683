import logging
import re
import time
from typing import Dict, Optional, Tuple

from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeopyError
from geopy.geocoders import Nominatim

from .calcDist import validate_coord
from .config import GEOCODING_RETRIES, GEOCODING_TIMEOUT, GEOCODING_USER_AGENT

logger = logging.getLogger(__name__)

_COORD_RE = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)\s*[, ]\s*([+-]?\d+(?:\.\d+)?)\s*$")


def make_geocoder(user_agent: str = GEOCODING_USER_AGENT, timeout: float = GEOCODING_TIMEOUT) -> Nominatim:
    return Nominatim(user_agent=user_agent, timeout=timeout)


def is_coordinate_string(input_str: str) -> bool:
    """Check if input is in 'lat,lon' (or 'lat lon') format."""
    return bool(_COORD_RE.match(input_str or ""))


def parse_coordinates(coord_str: str) -> Tuple[float, float]:
    """Parse 'lat,lon' string to (lat, lon) tuple."""
    m = _COORD_RE.match(coord_str or "")
    if not m:
        raise ValueError(f"Invalid coordinate format: {coord_str}")
    return validate_coord(float(m.group(1)), float(m.group(2)))


def geocode_address(address: str,
                    geocoder=None,
                    retries: int = GEOCODING_RETRIES,
                    retry_delay_s: float = 1.0) -> Optional[Tuple[float, float]]:
    """
    Convert address to (lat, lon) coordinates using Nominatim.

    Args:
        address: Address string to geocode
        geocoder: Object with a geopy-style ``geocode(query)`` method
        retries: Number of attempts if the service times out
        retry_delay_s: Pause between attempts

    Returns:
        (lat, lon) tuple or None if the place could not be resolved
    """
    geocoder = geocoder or make_geocoder()
    logger.debug("Geocoding: %r", address)

    for attempt in range(retries):
        try:
            location = geocoder.geocode(address)
        except GeocoderTimedOut:
            if attempt < retries - 1:
                logger.warning("Geocoding timeout, retrying (%d/%d)", attempt + 1, retries)
                time.sleep(retry_delay_s)
                continue
            logger.warning("Geocoding %r failed after %d attempts (timeout)", address, retries)
            return None
        except GeocoderServiceError as e:
            logger.warning("Geocoding service error for %r: %s", address, e)
            return None
        except GeopyError as e:
            logger.warning("Geocoding failed for %r: %s", address, e)
            return None

        if not location:
            logger.info("No geocoding results for %r", address)
            return None
        lat, lon = location.latitude, location.longitude
        logger.debug("  -> Found: %.6f, %.6f", lat, lon)
        try:
            return validate_coord(lat, lon)
        except ValueError as e:
            logger.warning("Geocoder returned an invalid coordinate for %r: %s", address, e)
            return None

    return None


def resolve_location(input_str: str,
                     geocoder=None,
                     aliases: Optional[Dict[str, Tuple[float, float]]] = None) -> Optional[Tuple[float, float]]:
    """
    Smart parser: handles coordinate strings, known aliases and address names.

    Args:
        input_str: "lat,lon", an alias key, or a free-text address
        geocoder: Optional geocoder passed to geocode_address
        aliases: Optional name -> (lat, lon) mapping checked before geocoding

    Returns:
        (lat, lon) tuple, or None when the place cannot be resolved

    Raises:
        ValueError: If the input looks like coordinates but is out of range
    """
    text = (input_str or "").strip()
    if not text:
        return None

    if is_coordinate_string(text):
        return parse_coordinates(text)

    if aliases:
        key = text.lower()
        for name, coords in aliases.items():
            if name.strip().lower() == key:
                logger.debug("Using alias for %r: %s", name, coords)
                return validate_coord(*coords)

    return geocode_address(text, geocoder=geocoder)
