import json
from types import SimpleNamespace

import pytest
import requests

from routego.graph import RoadGraph


def node(nid, lat, lon):
    return {"type": "node", "id": nid, "lat": lat, "lon": lon}


def way(wid, refs, highway="primary"):
    return {"type": "way", "id": wid, "nodes": refs, "tags": {"highway": highway}}


class FakeSource:
    """Map source stub: records requested boxes and returns canned elements."""

    def __init__(self, elements=None, exc=None):
        self.elements = elements or []
        self.exc = exc
        self.calls = []

    def __call__(self, bbox):
        self.calls.append(bbox)
        if self.exc is not None:
            raise self.exc
        return list(self.elements)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.closed = False

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    def iter_content(self, chunk_size=1):
        body = b"not json" if isinstance(self.payload, Exception) else json.dumps(self.payload).encode()
        for i in range(0, len(body), chunk_size):
            yield body[i:i + chunk_size]

    def close(self):
        self.closed = True

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def _do(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response

    def get(self, url, **kwargs):
        return self._do("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._do("POST", url, **kwargs)


class FakeGeocoder:
    def __init__(self, places):
        self.places = places
        self.queries = []

    def geocode(self, query):
        self.queries.append(query)
        hit = self.places.get(query)
        if hit is None:
            return None
        return SimpleNamespace(latitude=hit[0], longitude=hit[1])


@pytest.fixture
def equator_elements():
    # three nodes on a primary road along the equator, ~11.1km end to end
    return [
        node(1, 0.0, 0.0),
        node(2, 0.0, 0.05),
        node(3, 0.0, 0.1),
        way(10, [1, 2, 3]),
    ]


@pytest.fixture
def five_node_graph():
    """
    A --4-- B --5-- D
     \\     |      / \\
      2    1     8   2
       \\   |   /     \\
         C ---10----- E

    Shortest A -> E is A, C, B, D, E with cost 10.
    """
    g = RoadGraph()
    for nid, lat, lon in [("A", 0.0, 0.0), ("B", 0.0, 0.01), ("C", -0.01, 0.005),
                          ("D", 0.0, 0.02), ("E", -0.01, 0.03)]:
        g.add_node(nid, lat, lon)
    g.add_segment("A", "B", 4)
    g.add_segment("A", "C", 2)
    g.add_segment("B", "C", 1)
    g.add_segment("B", "D", 5)
    g.add_segment("C", "D", 8)
    g.add_segment("C", "E", 10)
    g.add_segment("D", "E", 2)
    return g
