# run_path.py
"""
Run example:
routego --start "51.5074,-0.1278" --goal "51.4545,-0.9781"
Or:
routego --start "Trafalgar Square, London" --goal "Reading Station" --method osrm
"""

import argparse
import sys
from typing import List, Optional

from .config import DEFAULT_MAP_FILENAME, VEHICLE_PROFILES, RoutingSettings
from .load_map import GraphCache, OsmnxSource, OverpassSource
from .logging_config import configure_logging
from .planner import METHODS, RoutePlanner
from .summary import describe_route_set, format_distance
from .visualize_map import save_route_map


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="routego",
        description='Plan a route between two locations (coordinates or addresses)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Using coordinates
  routego --start "51.5074,-0.1278" --goal "51.4545,-0.9781"

  # Using addresses and the turn-by-turn service
  routego --start "Trafalgar Square, London" --goal "Reading Station" --method osrm

  # Pick the second alternative and write a map
  routego --start "..." --goal "..." --method osrm --select 1 --save-html trip.html
        """
    )
    parser.add_argument('--start', type=str, required=True,
                        help='Start location: "lat,lon" or address name')
    parser.add_argument('--goal', type=str, required=True,
                        help='Goal location: "lat,lon" or address name')
    parser.add_argument('--method', choices=METHODS, default="dijkstra")
    parser.add_argument('--vehicle', choices=sorted(VEHICLE_PROFILES), default="car")
    parser.add_argument('--source', choices=("overpass", "osmnx"), default="overpass",
                        help='Where the road network is downloaded from')
    parser.add_argument('--select', type=int, default=0, help='Index of the route to select')
    parser.add_argument('--save-html', type=str, nargs='?', const=DEFAULT_MAP_FILENAME, default=None,
                        help='Write a folium map of the routes')
    parser.add_argument('--log-level', type=str, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = RoutingSettings.from_env()
    if args.source == "osmnx":
        source = OsmnxSource.from_settings(settings)
    else:
        source = OverpassSource.from_settings(settings)
    planner = RoutePlanner(settings=settings, source=source, cache=GraphCache())

    print("=" * 60)
    print("Route planning")
    print("=" * 60)

    resolved = planner.resolve(args.start, args.goal)
    if resolved is None:
        print("✗ Could not resolve the start or goal location.")
        return 1
    origin, goal = resolved
    print(f"Start: {origin[0]:.6f}, {origin[1]:.6f}")
    print(f"Goal:  {goal[0]:.6f}, {goal[1]:.6f}")

    route_set = planner.plan_between(origin, goal, method=args.method, vehicle=args.vehicle)

    try:
        route_set.select(args.select)
    except IndexError:
        print(f"✗ --select {args.select} is out of range ({len(route_set)} route(s) found)")
        return 2

    print()
    for line in describe_route_set(route_set, args.method):
        print(line)
    print(f"\nSelected route: {format_distance(route_set.selected.distance)}")

    if args.save_html:
        save_route_map(route_set, args.save_html, origin, goal)
        print(f"✓ Saved map to: {args.save_html}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
