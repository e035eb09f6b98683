"""
Route planning pipeline.

resolve places -> build graph -> snap endpoints -> Dijkstra -> (fallback),
or, for method "osrm", ask the turn-by-turn service first, enrich its
candidates, and fall back to the Dijkstra strategy when it fails. Every
computation gets its own graph and RouteSet; starting a new one cancels the
one in flight.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import requests

from .calcDist import LatLon, calcDist, validate_coord
from .config import RoutingSettings
from .Dijkstra import dijkstra, nearest_node_by_coord
from .enrich import enrich_routes
from .fallback import estimate_duration_s, fallback_route
from .geocode_address import resolve_location
from .load_map import GraphCache, MapSource, build_road_graph
from .models import Congestion, Route, RouteSet
from .osrm_client import OSRMClient, OSRMError, profile_for_vehicle

logger = logging.getLogger(__name__)

METHODS = ("dijkstra", "osrm")


class RoutePlanner:
    def __init__(self,
                 settings: Optional[RoutingSettings] = None,
                 source: Optional[MapSource] = None,
                 geocoder=None,
                 osrm_client: Optional[OSRMClient] = None,
                 cache: Optional[GraphCache] = None,
                 aliases: Optional[Dict[str, LatLon]] = None):
        self.settings = settings or RoutingSettings()
        self.source = source
        self.geocoder = geocoder
        self.osrm_client = osrm_client
        self.cache = cache
        self.aliases = aliases
        self._lock = threading.Lock()
        self._cancel_event: Optional[threading.Event] = None

    # ----------------
    # cancellation
    # ----------------
    def _begin(self) -> threading.Event:
        """Start a new computation, cancelling the previous one if it is still running."""
        event = threading.Event()
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()
            self._cancel_event = event
        return event

    def cancel(self) -> None:
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()

    # ----------------
    # stages
    # ----------------
    def resolve(self, origin_text: str, destination_text: str) -> Optional[Tuple[LatLon, LatLon]]:
        """Geocode both places concurrently. None if either cannot be resolved."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="geocode") as pool:
            f_origin = pool.submit(resolve_location, origin_text, self.geocoder, self.aliases)
            f_dest = pool.submit(resolve_location, destination_text, self.geocoder, self.aliases)
            origin, destination = f_origin.result(), f_dest.result()

        if origin is None or destination is None:
            missing = [t for t, c in ((origin_text, origin), (destination_text, destination)) if c is None]
            logger.warning("Could not resolve %s; not building a route", ", ".join(repr(m) for m in missing))
            return None
        return origin, destination

    def dijkstra_route(self,
                       origin: LatLon,
                       destination: LatLon,
                       cancel_event: Optional[threading.Event] = None) -> Route:
        """Road-network route between two points, or the straight-line fallback."""
        speed = self.settings.fallback_speed_kmh
        graph = build_road_graph(origin, destination, source=self.source, settings=self.settings,
                                 cancel_event=cancel_event, cache=self.cache)
        if graph.is_empty or graph.edge_count == 0:
            logger.info("No road network data available")
            return fallback_route(origin, destination, speed)

        start_node = nearest_node_by_coord(graph, origin[0], origin[1])
        goal_node = nearest_node_by_coord(graph, destination[0], destination[1])
        if start_node is None or goal_node is None:
            logger.info("Could not snap endpoints to the graph")
            return fallback_route(origin, destination, speed)
        logger.debug("Start node: %s, goal node: %s", start_node, goal_node)

        path, cost_m = dijkstra(graph, start_node, goal_node)
        if not path or math.isinf(cost_m):
            logger.info("No path found between %s and %s", start_node, goal_node)
            return fallback_route(origin, destination, speed)

        coords = graph.coordinates(path)
        if len(coords) < 2:
            # both endpoints snapped to the same node
            logger.info("Endpoints share nearest node %s", start_node)
            return fallback_route(origin, destination, speed)

        straight = calcDist(origin, destination)
        logger.info("Path found: %d nodes, %.1fm (detour ratio %.2fx)",
                    len(path), cost_m, cost_m / straight if straight > 0 else float('nan'))
        # the single road-graph path is the primary route: no toll, low congestion
        return Route(
            distance=cost_m,
            duration=estimate_duration_s(cost_m, speed),
            geometry=tuple(coords),
            toll=0.0,
            congestion=Congestion.LOW,
        )

    def osrm_routes(self, origin: LatLon, destination: LatLon, vehicle: str) -> List[Route]:
        """Candidates from the turn-by-turn service; [] when it is unavailable."""
        client = self.osrm_client or OSRMClient(self.settings.osrm_base_url,
                                                timeout=self.settings.fetch_timeout_s)
        try:
            return client.compute_routes(origin, destination, profile=profile_for_vehicle(vehicle))
        except (OSRMError, requests.RequestException) as ex:
            logger.warning("Turn-by-turn routing failed, using road graph instead: %s: %s",
                           type(ex).__name__, ex)
            return []

    # ----------------
    # entry points
    # ----------------
    def _plan(self,
              origin: LatLon,
              destination: LatLon,
              method: str,
              vehicle: str,
              cancel_event: threading.Event) -> RouteSet:
        routes: List[Route] = []
        if method == "osrm":
            candidates = self.osrm_routes(origin, destination, vehicle)
            routes = enrich_routes(candidates, self.settings.toll_threshold_m, self.settings.toll_unit_m)
        if not routes:
            routes = [self.dijkstra_route(origin, destination, cancel_event)]

        route_set = RouteSet(routes)
        if route_set.is_degraded:
            logger.info("Returning an estimated straight-line route")
        return route_set

    def plan_between(self,
                     origin: LatLon,
                     destination: LatLon,
                     method: str = "dijkstra",
                     vehicle: str = "car") -> RouteSet:
        """
        Plan between two coordinates. Always returns at least one route.

        Raises:
            ValueError: For invalid coordinates, method or vehicle
        """
        if method not in METHODS:
            raise ValueError(f"Unknown routing method {method!r}; expected one of {METHODS}")
        profile_for_vehicle(vehicle)
        origin = validate_coord(*origin)
        destination = validate_coord(*destination)
        event = self._begin()
        return self._plan(origin, destination, method, vehicle, event)

    def plan(self,
             origin_text: str,
             destination_text: str,
             method: str = "dijkstra",
             vehicle: str = "car") -> RouteSet:
        """Plan between two free-text places. Empty RouteSet when a place is unknown."""
        if method not in METHODS:
            raise ValueError(f"Unknown routing method {method!r}; expected one of {METHODS}")
        profile_for_vehicle(vehicle)
        event = self._begin()
        resolved = self.resolve(origin_text, destination_text)
        if resolved is None:
            return RouteSet()
        if event.is_set():
            logger.info("Planning for %r -> %r superseded", origin_text, destination_text)
            return RouteSet()
        return self._plan(resolved[0], resolved[1], method, vehicle, event)
