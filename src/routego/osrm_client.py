#Purpose: the OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return validated Route objects.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts and error handling
#parsing response JSON into Route / RouteStep
#It does not rank or enrich routes (see enrich.py).

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from .calcDist import LatLon, validate_coord
from .config import DEFAULT_FETCH_TIMEOUT_S, OSRM_BASE_URL, VEHICLE_PROFILES
from .models import Route, RouteStep

logger = logging.getLogger(__name__)


class OSRMError(Exception):
    """OSRM answered with an error code or an unusable payload."""
    pass


def profile_for_vehicle(vehicle: str) -> str:
    """Map a trip-form vehicle id (car/bike/walking) to an OSRM profile."""
    key = (vehicle or "").strip().lower()
    if key in VEHICLE_PROFILES:
        return VEHICLE_PROFILES[key]
    if key in VEHICLE_PROFILES.values():
        return key
    raise ValueError(f"Unknown vehicle {vehicle!r}; expected one of {sorted(VEHICLE_PROFILES)}")


def step_instruction(step: Dict[str, Any]) -> str:
    """Readable text for one OSRM step.

    OSRM itself only returns maneuver type/modifier, so the sentence is
    composed here unless the server already supplied one.
    """
    maneuver = step.get("maneuver") or {}
    text = maneuver.get("instruction")
    if text:
        return str(text)

    kind = maneuver.get("type") or "continue"
    modifier = maneuver.get("modifier")
    name = step.get("name")

    if kind == "arrive":
        return "Arrive at destination"
    if kind == "depart":
        base = "Depart"
    else:
        base = kind.replace("_", " ").capitalize()
        if modifier:
            base += f" {modifier}"
    if name:
        base += f" onto {name}"
    return base


class OSRMClient:
    """
    OSRM Adapter / Client

    - Talk to OSRM via HTTP
    - Convert internal (lat, lon) -> OSRM (lon,lat)
    - Return validated Route objects with turn instructions
    """
    def __init__(self,
                 base_url: str = OSRM_BASE_URL,
                 profile: str = "driving",
                 timeout: float = DEFAULT_FETCH_TIMEOUT_S,
                 session: Optional[requests.Session] = None):
        if not base_url:
            raise ValueError("OSRM base URL not set.")
        self.base_url = base_url.rstrip("/")
        self.profile = profile  # driving, walking, cycling
        self.timeout = timeout  # seconds to wait for OSRM before giving up
        self.s = session or requests.Session()

    def format_coordinates(self, coords: List[LatLon]) -> str:
        """Convert list of (lat, lon) to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join([f"{lon},{lat}" for lat, lon in coords])

    def route_url(self, origin: LatLon, destination: LatLon, profile: Optional[str] = None) -> str:
        coordinates = self.format_coordinates([origin, destination])
        return f"{self.base_url}/route/v1/{profile or self.profile}/{coordinates}"

    def compute_routes(self,
                       origin: LatLon,
                       destination: LatLon,
                       profile: Optional[str] = None,
                       alternatives: bool = True) -> List[Route]:
        """
        Calls the OSRM /route endpoint and returns every route it offers,
        best first, with full geometry and step instructions.

        Raises:
            OSRMError: If OSRM reports an error or no usable route
            requests.RequestException: On HTTP / network failure
        """
        origin = validate_coord(*origin)
        destination = validate_coord(*destination)
        url = self.route_url(origin, destination, profile)

        response = self.s.get(
            url,
            params={
                "overview": "full",
                "geometries": "geojson",
                "alternatives": "true" if alternatives else "false",
                "steps": "true",
            },
            timeout=self.timeout,
        )
        try:
            data = response.json()
        except ValueError as ex:
            raise OSRMError(f"OSRM returned non-JSON response (HTTP {response.status_code})") from ex

        if not isinstance(data, dict) or data.get("code") != "Ok":
            message = data.get("message", "Unknown error") if isinstance(data, dict) else "Unknown error"
            raise OSRMError(f"OSRM error: {message}")

        routes = []
        for i, raw in enumerate(data.get("routes") or []):
            try:
                routes.append(self.parse_route(raw))
            except (KeyError, IndexError, AttributeError, TypeError, ValueError) as ex:
                logger.warning("Skipping malformed OSRM route #%d: %s", i, ex)

        if not routes:
            raise OSRMError("OSRM returned no usable routes")
        logger.info("OSRM returned %d route(s)", len(routes))
        return routes

    @staticmethod
    def parse_route(raw: Dict[str, Any]) -> Route:
        """Validate one OSRM route object. Anything off-shape raises ValueError."""
        if not isinstance(raw, dict) or not isinstance(raw.get("geometry"), dict):
            raise ValueError("route has no geometry object")
        coords: List[Tuple[float, float]] = []
        for c in raw["geometry"].get("coordinates") or []:
            if not isinstance(c, (list, tuple)) or len(c) != 2:
                raise ValueError(f"geometry point must be [lon, lat], got {c!r}")
            coords.append((float(c[0]), float(c[1])))

        steps = []
        for leg in raw.get("legs") or []:
            if not isinstance(leg, dict):
                raise ValueError(f"route leg must be an object, got {leg!r}")
            for step in leg.get("steps") or []:
                if not isinstance(step, dict):
                    raise ValueError(f"route step must be an object, got {step!r}")
                steps.append(RouteStep(step_instruction(step), float(step.get("distance", 0.0))))
        return Route(
            distance=float(raw["distance"]),
            duration=float(raw["duration"]),
            geometry=tuple(coords),
            steps=tuple(steps),
        )
