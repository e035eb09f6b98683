from typing import List

from .models import Route, RouteSet

ESTIMATE_NOTE = "Straight-line estimate: no road path could be computed for this trip."
HEURISTIC_NOTE = "Tolls and congestion are rough estimates, not official tariff or traffic data."


def format_distance(meters: float) -> str:
    return f"{meters / 1000.0:.1f} km" if meters >= 1000 else f"{meters:.0f} m"


def format_duration(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def route_label(route: Route, rank: int, method: str) -> str:
    if route.is_estimate:
        return "Estimated Route"
    if method == "dijkstra":
        return "Shortest Route"
    return "Fastest Route" if rank == 0 else f"Alternative {rank + 1}"


def describe_route(route: Route, rank: int, method: str, with_steps: bool = False) -> List[str]:
    lines = [
        route_label(route, rank, method),
        f"  Duration: {format_duration(route.duration)}  Distance: {format_distance(route.distance)}",
    ]
    if route.toll:
        lines.append(f"  Est. tolls: {route.toll:.2f} units")
    congestion = route.congestion.value if route.congestion is not None else "unknown"
    lines.append(f"  Congestion (est.): {congestion}")

    if with_steps:
        if route.steps:
            for i, step in enumerate(route.steps, start=1):
                lines.append(f"  {i}. {step.instruction} ({format_distance(step.distance)})")
        else:
            lines.append("  No navigation instructions available.")
    return lines


def describe_route_set(route_set: RouteSet, method: str) -> List[str]:
    """Text block listing every candidate, the selected one marked with '*' and expanded."""
    if not route_set.routes:
        return ["No routes available."]

    lines = []
    for rank, route in enumerate(route_set):
        selected = rank == route_set.selected_index
        block = describe_route(route, rank, method, with_steps=selected)
        block[0] = ("* " if selected else "  ") + block[0]
        lines.extend(block)
    if route_set.is_degraded:
        lines.append(ESTIMATE_NOTE)
    lines.append(HEURISTIC_NOTE)
    return lines
