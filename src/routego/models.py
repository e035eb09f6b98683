from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

LonLat = Tuple[float, float]


class Congestion(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


def _check_non_negative(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be a finite number >= 0, got {value}")
    return value


@dataclass(frozen=True)
class RouteStep:
    """One turn instruction and the length of the stretch it covers."""
    instruction: str
    distance: float  # meters

    def __post_init__(self):
        object.__setattr__(self, "distance", _check_non_negative("step distance", self.distance))


@dataclass(frozen=True)
class Route:
    """
    A candidate route.

    geometry holds (lon, lat) pairs. is_estimate marks a straight-line
    fallback that did not come from a road network; toll and congestion are
    heuristic values either way.
    """
    distance: float  # meters
    duration: float  # seconds
    geometry: Tuple[LonLat, ...]
    toll: Optional[float] = None
    congestion: Optional[Congestion] = None
    steps: Tuple[RouteStep, ...] = field(default_factory=tuple)
    is_estimate: bool = False

    def __post_init__(self):
        object.__setattr__(self, "distance", _check_non_negative("distance", self.distance))
        object.__setattr__(self, "duration", _check_non_negative("duration", self.duration))

        geometry = tuple((float(lon), float(lat)) for lon, lat in self.geometry)
        if len(geometry) < 2:
            raise ValueError(f"Route geometry needs at least 2 points, got {len(geometry)}")
        for lon, lat in geometry:
            if not (math.isfinite(lon) and math.isfinite(lat)):
                raise ValueError(f"Non-finite point in route geometry: ({lon}, {lat})")
        object.__setattr__(self, "geometry", geometry)

        if self.toll is not None:
            object.__setattr__(self, "toll", _check_non_negative("toll", self.toll))
        if self.congestion is not None:
            object.__setattr__(self, "congestion", Congestion(self.congestion))
        object.__setattr__(self, "steps", tuple(self.steps))

    def latlon(self) -> List[Tuple[float, float]]:
        """Geometry as (lat, lon) pairs, the order map widgets expect."""
        return [(lat, lon) for lon, lat in self.geometry]

    def with_estimates(self, toll: float, congestion: Congestion) -> "Route":
        return replace(self, toll=toll, congestion=congestion)


class RouteSet:
    """Ranked candidate routes from one computation plus the selected one."""

    def __init__(self, routes: Iterable[Route] = ()):
        self.routes: Tuple[Route, ...] = tuple(routes)
        self._selected: Optional[int] = 0 if self.routes else None

    def __len__(self) -> int:
        return len(self.routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self.routes)

    def __getitem__(self, index: int) -> Route:
        return self.routes[index]

    def __repr__(self) -> str:
        return f"RouteSet(routes={len(self.routes)}, selected={self._selected})"

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected

    @property
    def selected(self) -> Optional[Route]:
        if self._selected is None:
            return None
        return self.routes[self._selected]

    @property
    def is_degraded(self) -> bool:
        return any(r.is_estimate for r in self.routes)

    def select(self, index: int) -> Route:
        """Make routes[index] the selected route.

        Raises:
            IndexError: If index is not a position in the set; the previous
                selection is kept.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexError(f"Route index must be an int, got {index!r}")
        if not 0 <= index < len(self.routes):
            raise IndexError(f"Route index {index} out of range for {len(self.routes)} routes")
        self._selected = index
        return self.routes[index]
