"""
Road network graph used by the router.

Nodes are keyed by string ids (OSM ids arrive as integers and are converted).
The graph is logically undirected but stored as directed arcs in an adjacency
list, so every segment appears twice with the same weight.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import networkx as nx

from .calcDist import haversine_m

logger = logging.getLogger(__name__)

NodeId = str


@dataclass(frozen=True)
class GraphNode:
    """Represents a geographic node with id and coordinates."""
    id: NodeId
    lat: float
    lon: float

    def to_tuple(self):
        return (self.lat, self.lon)

    def to_lonlat(self):
        return (self.lon, self.lat)


@dataclass(frozen=True)
class GraphEdge:
    source: NodeId
    target: NodeId
    weight: float  # meters


class RoadGraph:
    def __init__(self):
        self.nodes: Dict[NodeId, GraphNode] = {}
        self.adj: Dict[NodeId, List[Tuple[NodeId, float]]] = {}
        self._edge_count = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id) -> bool:
        return str(node_id) in self.nodes

    def __repr__(self) -> str:
        return f"RoadGraph(nodes={len(self.nodes)}, edges={self._edge_count})"

    @property
    def edge_count(self) -> int:
        return self._edge_count

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def add_node(self, node_id, lat: float, lon: float) -> GraphNode:
        """Insert a node; an id seen before keeps its first coordinates."""
        nid = str(node_id)
        existing = self.nodes.get(nid)
        if existing is not None:
            return existing
        node = GraphNode(id=nid, lat=float(lat), lon=float(lon))
        self.nodes[nid] = node
        return node

    def add_edge(self, source, target, weight: float) -> bool:
        """
        Insert one directed arc.

        Returns False (and inserts nothing) when an endpoint is not a known
        node. A negative or non-finite weight is a caller bug and raises.
        """
        weight = float(weight)
        if not math.isfinite(weight) or weight < 0:
            raise ValueError(f"Edge weight must be a finite non-negative number, got {weight}")
        u, v = str(source), str(target)
        if u not in self.nodes or v not in self.nodes:
            logger.debug("Dropping arc %s -> %s: endpoint not in node set", u, v)
            return False
        self.adj.setdefault(u, []).append((v, weight))
        self._edge_count += 1
        return True

    def add_segment(self, a, b, weight: Optional[float] = None) -> bool:
        """Insert a road segment as two mirrored arcs.

        Without an explicit weight the great-circle distance between the two
        nodes is used.
        """
        u, v = str(a), str(b)
        if u not in self.nodes or v not in self.nodes:
            logger.debug("Dropping segment %s - %s: endpoint not in node set", u, v)
            return False
        if weight is None:
            pu, pv = self.nodes[u], self.nodes[v]
            weight = haversine_m(pu.lat, pu.lon, pv.lat, pv.lon)
        self.add_edge(u, v, weight)
        self.add_edge(v, u, weight)
        return True

    def neighbors(self, node_id: NodeId) -> List[Tuple[NodeId, float]]:
        return self.adj.get(node_id, [])

    def edges(self) -> Iterator[GraphEdge]:
        for u, out in self.adj.items():
            for v, w in out:
                yield GraphEdge(u, v, w)

    def coordinates(self, path: List[NodeId]) -> List[Tuple[float, float]]:
        """(lon, lat) pairs for a node path, skipping ids that are not in the graph."""
        return [self.nodes[nid].to_lonlat() for nid in path if nid in self.nodes]

    def to_networkx(self) -> nx.DiGraph:
        G = nx.DiGraph()
        for nid, p in self.nodes.items():
            G.add_node(nid, x=p.lon, y=p.lat)
        for e in self.edges():
            # parallel arcs collapse to the lighter one
            if G.has_edge(e.source, e.target) and G[e.source][e.target]["weight"] <= e.weight:
                continue
            G.add_edge(e.source, e.target, weight=e.weight)
        return G
