import os
from dataclasses import dataclass, field
from typing import Dict, Tuple


EARTH_RADIUS_M = 6371000.0


# Road classes requested from the map-feature source. Side streets are left
# out so the graph stays small enough for an interactive request.
MAJOR_ROAD_CLASSES: Tuple[str, ...] = ("motorway", "trunk", "primary", "secondary")



def road_filter(classes: Tuple[str, ...] = MAJOR_ROAD_CLASSES) -> str:
    """Overpass/osmnx tag filter matching the given classes and their _link ramps."""
    return '["highway"~"^(' + "|".join(classes) + ')(_link)?$"]'


OVERPASS_URL = "https://overpass-api.de/api/interpreter"
OSRM_BASE_URL = "http://router.project-osrm.org"

DEFAULT_PADDING_DEG = 0.02  # ~2km
DEFAULT_FALLBACK_SPEED_KMH = 40.0
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_TOLL_THRESHOLD_M = 10000.0
DEFAULT_TOLL_UNIT_M = 10000.0


# Vehicle ids from the trip form -> OSRM profiles
VEHICLE_PROFILES: Dict[str, str] = {
    "car": "driving",
    "bike": "cycling",
    "walking": "walking",
}


# Nominatim geocoder settings
GEOCODING_USER_AGENT = "routego_trip_planner"
GEOCODING_TIMEOUT = 5
GEOCODING_RETRIES = 3


VISUALIZATION_SETTINGS = {
    'zoom_start': 13,
    'tiles': "OpenStreetMap",
    'route_colors': ("#00bcd4", "#4caf50", "#ff9800"),
    'selected_weight': 6,
    'selected_opacity': 1.0,
    'alternative_weight': 4,
    'alternative_opacity': 0.7,
    'alternative_dash': "5, 10",
    'origin_color': "green",
    'destination_color': "red",
}

DEFAULT_MAP_FILENAME = "routego_route.html"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}")


def _env_flag(name: str) -> bool:
    return os.getenv(name, 'False').lower() in ('true', '1', 'yes')


@dataclass(frozen=True)
class RoutingSettings:
    """Tunable constants of the routing engine.

    None of these are fixed by the algorithms; they are heuristics picked to
    keep one request interactive.
    """
    padding_deg: float = DEFAULT_PADDING_DEG
    fallback_speed_kmh: float = DEFAULT_FALLBACK_SPEED_KMH
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    toll_threshold_m: float = DEFAULT_TOLL_THRESHOLD_M
    toll_unit_m: float = DEFAULT_TOLL_UNIT_M
    overpass_url: str = OVERPASS_URL
    osrm_base_url: str = OSRM_BASE_URL
    road_classes: Tuple[str, ...] = field(default=MAJOR_ROAD_CLASSES)

    def __post_init__(self):
        if self.padding_deg < 0:
            raise ValueError("padding_deg must be >= 0")
        if self.fallback_speed_kmh <= 0:
            raise ValueError("fallback_speed_kmh must be > 0")
        if self.fetch_timeout_s <= 0:
            raise ValueError("fetch_timeout_s must be > 0")
        if self.toll_threshold_m < 0 or self.toll_unit_m <= 0:
            raise ValueError("toll settings must be positive")

    @classmethod
    def from_env(cls) -> "RoutingSettings":
        """
        Build settings from ROUTEGO_* environment variables.

        Returns:
            RoutingSettings with defaults for every variable that is unset
        """
        return cls(
            padding_deg=_env_float("ROUTEGO_PADDING_DEG", DEFAULT_PADDING_DEG),
            fallback_speed_kmh=_env_float("ROUTEGO_FALLBACK_SPEED_KMH", DEFAULT_FALLBACK_SPEED_KMH),
            fetch_timeout_s=_env_float("ROUTEGO_FETCH_TIMEOUT_S", DEFAULT_FETCH_TIMEOUT_S),
            toll_threshold_m=_env_float("ROUTEGO_TOLL_THRESHOLD_M", DEFAULT_TOLL_THRESHOLD_M),
            toll_unit_m=_env_float("ROUTEGO_TOLL_UNIT_M", DEFAULT_TOLL_UNIT_M),
            overpass_url=os.getenv("ROUTEGO_OVERPASS_URL", OVERPASS_URL),
            osrm_base_url=os.getenv("ROUTEGO_OSRM_BASE_URL", OSRM_BASE_URL),
        )


# Enable debug mode (can be overridden by environment variable)
DEBUG = _env_flag('DEBUG')

# Verbose logging
VERBOSE = _env_flag('VERBOSE')

LOG_LEVEL = os.getenv('ROUTEGO_LOG_LEVEL')
