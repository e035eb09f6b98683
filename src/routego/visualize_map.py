# visualize_map.py
from enum import Enum
from typing import List, Optional, Tuple

import folium

from .calcDist import LatLon
from .config import VISUALIZATION_SETTINGS
from .models import Route, RouteSet


class LayerKind(Enum):
    ORIGIN = "origin"
    DESTINATION = "destination"
    SELECTED_ROUTE = "selected_route"
    ALTERNATIVE_ROUTE = "alternative_route"


def route_color(rank: int) -> str:
    colors = VISUALIZATION_SETTINGS['route_colors']
    return colors[min(rank, len(colors) - 1)]


def route_style(rank: int, selected: bool) -> dict:
    s = VISUALIZATION_SETTINGS
    if selected:
        return {"color": route_color(rank), "weight": s['selected_weight'],
                "opacity": s['selected_opacity'], "dash_array": None}
    return {"color": route_color(rank), "weight": s['alternative_weight'],
            "opacity": s['alternative_opacity'], "dash_array": s['alternative_dash']}


def _route_layer(route: Route, rank: int, selected: bool):
    kind = LayerKind.SELECTED_ROUTE if selected else LayerKind.ALTERNATIVE_ROUTE
    tooltip = f"Route {rank + 1}" + (" (estimate)" if route.is_estimate else "")
    return kind, folium.PolyLine(route.latlon(), tooltip=tooltip, **route_style(rank, selected))


def map_layers(route_set: RouteSet,
               origin: Optional[LatLon] = None,
               destination: Optional[LatLon] = None) -> List[Tuple[LayerKind, object]]:
    """Drawable layers for a route set, alternatives first so the selected route is on top."""
    s = VISUALIZATION_SETTINGS
    layers = []
    for rank, route in enumerate(route_set):
        if rank != route_set.selected_index:
            layers.append(_route_layer(route, rank, selected=False))
    if route_set.selected is not None:
        layers.append(_route_layer(route_set.selected, route_set.selected_index, selected=True))
    if origin is not None:
        layers.append((LayerKind.ORIGIN, folium.Marker(
            location=origin, tooltip="Origin", icon=folium.Icon(color=s['origin_color']))))
    if destination is not None:
        layers.append((LayerKind.DESTINATION, folium.Marker(
            location=destination, tooltip="Destination", icon=folium.Icon(color=s['destination_color']))))
    return layers


def build_route_map(route_set: RouteSet,
                    origin: Optional[LatLon] = None,
                    destination: Optional[LatLon] = None,
                    show_markers: bool = True) -> folium.Map:
    s = VISUALIZATION_SETTINGS
    points = [p for route in route_set for p in route.latlon()]
    if origin is not None:
        points.append(origin)
    if destination is not None:
        points.append(destination)
    if points:
        center = (sum(p[0] for p in points) / len(points), sum(p[1] for p in points) / len(points))
    else:
        center = (0.0, 0.0)

    m = folium.Map(location=center, zoom_start=s['zoom_start'], control_scale=True, tiles=s['tiles'])
    for kind, layer in map_layers(route_set,
                                  origin if show_markers else None,
                                  destination if show_markers else None):
        layer.add_to(m)

    if len(points) >= 2:
        lats = [p[0] for p in points]
        lons = [p[1] for p in points]
        m.fit_bounds([[min(lats), min(lons)], [max(lats), max(lons)]])
    return m


def save_route_map(route_set: RouteSet, filepath: str,
                   origin: Optional[LatLon] = None,
                   destination: Optional[LatLon] = None) -> str:
    build_route_map(route_set, origin, destination).save(filepath)
    return filepath
