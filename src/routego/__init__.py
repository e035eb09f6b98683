"""RouteGo: trip route planning over an OpenStreetMap road graph."""

from .calcDist import calcDist, haversine_m
from .config import RoutingSettings
from .Dijkstra import dijkstra, nearest_node_by_coord
from .enrich import congestion_for_rank, enrich_routes, estimate_toll
from .fallback import fallback_route
from .graph import GraphEdge, GraphNode, RoadGraph
from .load_map import GraphCache, OsmnxSource, OverpassSource, build_road_graph
from .models import Congestion, Route, RouteSet, RouteStep
from .osrm_client import OSRMClient, OSRMError
from .planner import RoutePlanner

__version__ = "1.0.0"

__all__ = [
    "calcDist",
    "haversine_m",
    "RoutingSettings",
    "dijkstra",
    "nearest_node_by_coord",
    "congestion_for_rank",
    "enrich_routes",
    "estimate_toll",
    "fallback_route",
    "GraphEdge",
    "GraphNode",
    "RoadGraph",
    "GraphCache",
    "OsmnxSource",
    "OverpassSource",
    "build_road_graph",
    "Congestion",
    "Route",
    "RouteSet",
    "RouteStep",
    "OSRMClient",
    "OSRMError",
    "RoutePlanner",
]
