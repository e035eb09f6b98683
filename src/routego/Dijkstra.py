# Dijkstra.py
import heapq
import itertools
import logging
from typing import List, Optional, Tuple

from .calcDist import haversine_m
from .graph import NodeId, RoadGraph

logger = logging.getLogger(__name__)


def dijkstra(graph: RoadGraph, start: NodeId, goal: NodeId) -> Tuple[List[NodeId], float]:
    """Dijkstra on the graph's adjacency list. Returns (path_node_list, total_cost_m).

    Stops as soon as the goal is settled. When the goal cannot be reached the
    result is ([], inf).

    Ties are resolved deterministically: heap entries are ordered by
    (distance, push order), so among equal tentative distances the node that
    got its distance first is settled first, and a predecessor is only
    replaced by a strictly shorter distance. The same graph always yields the
    same path.
    """
    if start not in graph.nodes or goal not in graph.nodes:
        logger.debug("Unknown start or goal node: %s -> %s", start, goal)
        return [], float('inf')
    if start == goal:
        return [start], 0.0

    dist = {start: 0.0}
    came_from = {}
    settled = set()
    counter = itertools.count()
    open_heap = [(0.0, next(counter), start)]

    while open_heap:
        d, _, current = heapq.heappop(open_heap)

        # skip outdated heap entries
        if current in settled:
            continue
        settled.add(current)

        if current == goal:
            path = [current]
            while path[-1] in came_from:
                path.append(came_from[path[-1]])
            path.reverse()
            return path, d

        for neighbor, weight in graph.neighbors(current):
            if neighbor in settled:
                continue
            tentative = d + weight
            if tentative < dist.get(neighbor, float('inf')):
                dist[neighbor] = tentative
                came_from[neighbor] = current
                heapq.heappush(open_heap, (tentative, next(counter), neighbor))

    logger.debug("Goal %s unreachable from %s (%d nodes settled)", goal, start, len(settled))
    return [], float('inf')


def nearest_node_by_coord(graph: RoadGraph, lat: float, lon: float) -> Optional[NodeId]:
    """Closest node by great-circle distance, first one wins on ties. None for an empty graph."""
    best = None
    best_d = float('inf')
    for nid, p in graph.nodes.items():
        d = haversine_m(lat, lon, p.lat, p.lon)
        if d < best_d:
            best_d = d
            best = nid
    return best
