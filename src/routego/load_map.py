"""
Build a road graph around an origin/destination pair from OSM data.

Usage:
    from routego.load_map import build_road_graph
    graph = build_road_graph((lat1, lon1), (lat2, lon2))

The default source queries the Overpass API directly; ``OsmnxSource`` goes
through osmnx instead. Any failure of the source yields an empty graph, which
callers treat as "no map data" rather than an error.
"""

import json
import logging
import math
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import osmnx as ox
import requests

from .calcDist import BBox, LatLon, bounding_box, validate_coord
from .config import MAJOR_ROAD_CLASSES, RoutingSettings, road_filter
from .graph import RoadGraph

logger = logging.getLogger(__name__)

Elements = List[Dict[str, Any]]
MapSource = Callable[[BBox], Elements]


class MapDataError(Exception):
    """The map-feature source returned something that is not usable."""
    pass


def overpass_query(bbox: BBox,
                   road_classes: Tuple[str, ...] = MAJOR_ROAD_CLASSES,
                   timeout_s: float = 10.0) -> str:
    south, west, north, east = bbox
    return (
        f"[out:json][timeout:{int(math.ceil(timeout_s))}];\n"
        f"(\n"
        f"  way{road_filter(road_classes)}({south:.6f},{west:.6f},{north:.6f},{east:.6f});\n"
        f");\n"
        f"out body;\n"
        f">;\n"
        f"out skel qt;\n"
    )


class OverpassSource:
    """Fetch major-road ways and their nodes from an Overpass interpreter."""

    def __init__(self,
                 url: str,
                 timeout: float = 10.0,
                 road_classes: Tuple[str, ...] = MAJOR_ROAD_CLASSES,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.road_classes = road_classes
        self.s = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: RoutingSettings, session: Optional[requests.Session] = None):
        return cls(settings.overpass_url, settings.fetch_timeout_s, settings.road_classes, session)

    def __call__(self, bbox: BBox) -> Elements:
        """
        POST the query and parse the response body.

        requests' timeout only bounds each socket read, so the body is read in
        chunks against a total deadline of ``self.timeout`` seconds. A request
        already on the wire cannot be interrupted by cancellation; it is only
        bounded by this deadline.

        Raises:
            requests.Timeout: When the whole exchange exceeds the deadline
            requests.RequestException: On HTTP / network failure
            ValueError: On a body that is not JSON
            MapDataError: On JSON without an ``elements`` list
        """
        query = overpass_query(bbox, self.road_classes, self.timeout)
        deadline = time.monotonic() + self.timeout
        r = self.s.post(self.url, data={"data": query}, timeout=self.timeout, stream=True)
        try:
            r.raise_for_status()
            chunks = []
            for chunk in r.iter_content(chunk_size=65536):
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"Overpass response exceeded {self.timeout}s")
                chunks.append(chunk)
        finally:
            r.close()
        data = json.loads(b"".join(chunks))
        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise MapDataError("Overpass response has no 'elements' list")
        return elements


def elements_from_networkx(G) -> Elements:
    """Flatten an osmnx/networkx road graph into Overpass-style node and way elements.

    Each graph edge becomes a two-node way; the reverse edge of a two-way
    road is emitted only once.
    """
    elements: Elements = []
    for nid, data in G.nodes(data=True):
        elements.append({"type": "node", "id": nid, "lat": data.get("y"), "lon": data.get("x")})

    seen = set()
    for u, v, data in G.edges(data=True):
        key = frozenset((u, v))
        if key in seen:
            continue
        seen.add(key)
        elements.append({
            "type": "way",
            "id": data.get("osmid"),
            "nodes": [u, v],
            "tags": {"highway": data.get("highway")},
        })
    return elements


class OsmnxSource:
    """Fetch the same road classes through osmnx (unsimplified, so every OSM vertex is kept)."""

    def __init__(self, timeout: float = 10.0, road_classes: Tuple[str, ...] = MAJOR_ROAD_CLASSES):
        self.timeout = timeout
        self.road_classes = road_classes

    @classmethod
    def from_settings(cls, settings: RoutingSettings):
        return cls(settings.fetch_timeout_s, settings.road_classes)

    def __call__(self, bbox: BBox) -> Elements:
        south, west, north, east = bbox
        ox.settings.use_cache = False
        ox.settings.log_console = False
        ox.settings.requests_timeout = self.timeout
        try:
            G = ox.graph_from_bbox(
                (west, south, east, north),
                custom_filter=road_filter(self.road_classes),
                simplify=False,
                retain_all=True,
            )
        except Exception as ex:
            raise MapDataError(f"osmnx download failed: {type(ex).__name__}: {ex}") from ex
        return elements_from_networkx(G)


def parse_elements(elements: Iterable[Dict[str, Any]]) -> RoadGraph:
    """
    Assemble a RoadGraph from Overpass-style elements.

    Nodes without usable coordinates and way references to unknown nodes are
    skipped, so partial responses still produce a (smaller) graph.
    """
    graph = RoadGraph()
    ways = []
    bad_nodes = 0

    for el in elements:
        if not isinstance(el, dict):
            continue
        kind = el.get("type")
        if kind == "node":
            if el.get("id") is None:
                bad_nodes += 1
                continue
            try:
                lat, lon = validate_coord(el.get("lat"), el.get("lon"))
            except (TypeError, ValueError):
                bad_nodes += 1
                continue
            graph.add_node(el["id"], lat, lon)
        elif kind == "way":
            ways.append(el)

    dropped = 0
    for way in ways:
        refs = way.get("nodes")
        if not isinstance(refs, list):
            continue
        for a, b in zip(refs, refs[1:]):
            if a == b:
                continue
            if not graph.add_segment(a, b):
                dropped += 1

    if bad_nodes or dropped:
        logger.debug("Skipped %d malformed nodes and %d dangling segments", bad_nodes, dropped)
    return graph


class GraphCache:
    """In-process cache of built graphs keyed by rounded bounding box.

    A per-key lock makes concurrent computations for the same box wait for a
    single build instead of racing to populate the entry.
    """

    def __init__(self, precision: int = 4, max_entries: int = 16):
        self.precision = precision
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: "OrderedDict[BBox, RoadGraph]" = OrderedDict()
        self._key_locks: Dict[BBox, threading.Lock] = {}

    def key(self, bbox: BBox) -> BBox:
        return tuple(round(x, self.precision) for x in bbox)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, bbox: BBox) -> Optional[RoadGraph]:
        k = self.key(bbox)
        with self._lock:
            graph = self._entries.get(k)
            if graph is not None:
                self._entries.move_to_end(k)
            return graph

    def put(self, bbox: BBox, graph: RoadGraph) -> None:
        k = self.key(bbox)
        with self._lock:
            self._entries[k] = graph
            self._entries.move_to_end(k)
            while len(self._entries) > self.max_entries:
                old, _ = self._entries.popitem(last=False)
                self._key_locks.pop(old, None)

    def get_or_build(self, bbox: BBox, build: Callable[[], RoadGraph]) -> RoadGraph:
        k = self.key(bbox)
        with self._lock:
            key_lock = self._key_locks.setdefault(k, threading.Lock())
        with key_lock:
            graph = self.get(bbox)
            if graph is not None:
                logger.debug("Graph cache hit for %s", k)
                return graph
            cached = False
            try:
                graph = build()
                # empty graphs mean "no data right now", not worth remembering
                if not graph.is_empty:
                    self.put(bbox, graph)
                    cached = True
            finally:
                if not cached:
                    self._release_key_lock(k, key_lock)
            return graph

    def _release_key_lock(self, k: BBox, key_lock: threading.Lock) -> None:
        # a key with no entry keeps no lock; a waiter still holding this one
        # re-checks the cache after acquiring it
        with self._lock:
            if self._key_locks.get(k) is key_lock:
                del self._key_locks[k]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _fetch_and_parse(bbox: BBox,
                     source: MapSource,
                     cancel_event: Optional[threading.Event]) -> RoadGraph:
    if _cancelled(cancel_event):
        logger.info("Graph build cancelled before fetch")
        return RoadGraph()

    start_time = time.perf_counter()
    try:
        elements = source(bbox)
    except (requests.RequestException, ValueError, MapDataError) as ex:
        logger.warning("Map data unavailable for bbox %s: %s: %s", bbox, type(ex).__name__, ex)
        return RoadGraph()

    if _cancelled(cancel_event):
        logger.info("Graph build cancelled after fetch, discarding %d elements", len(elements))
        return RoadGraph()

    graph = parse_elements(elements)
    elapsed = time.perf_counter() - start_time
    logger.info("Graph built in %.1fs. Nodes: %d, Edges: %d", elapsed, len(graph), graph.edge_count)
    return graph


def build_road_graph(origin: LatLon,
                     destination: LatLon,
                     source: Optional[MapSource] = None,
                     settings: Optional[RoutingSettings] = None,
                     cancel_event: Optional[threading.Event] = None,
                     cache: Optional[GraphCache] = None) -> RoadGraph:
    """
    Fetch major roads around both endpoints and build the routing graph.

    Args:
        origin: (lat, lon) of the start point
        destination: (lat, lon) of the end point
        source: Callable returning map elements for a bbox (Overpass by default)
        settings: Padding, timeout and road classes
        cancel_event: When set, the build gives up and returns an empty graph
        cache: Optional in-process cache of graphs per bounding box

    Returns:
        RoadGraph, empty when the data source failed or returned nothing

    Raises:
        ValueError: If an endpoint is not a valid coordinate
    """
    settings = settings or RoutingSettings()
    origin = validate_coord(*origin)
    destination = validate_coord(*destination)
    bbox = bounding_box(origin, destination, settings.padding_deg)
    source = source or OverpassSource.from_settings(settings)

    logger.debug("Requesting road network for bbox S=%.4f W=%.4f N=%.4f E=%.4f", *bbox)
    if cache is not None:
        return cache.get_or_build(bbox, lambda: _fetch_and_parse(bbox, source, cancel_event))
    return _fetch_and_parse(bbox, source, cancel_event)
