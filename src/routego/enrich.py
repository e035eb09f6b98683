"""
Toll and congestion estimates for candidate routes.

Both values are placeholders derived only from distance and rank; they are not
looked up from any tariff or traffic source and must be shown as estimates.
"""

from typing import Iterable, List

from .config import DEFAULT_TOLL_THRESHOLD_M, DEFAULT_TOLL_UNIT_M
from .models import Congestion, Route


def estimate_toll(distance_m: float,
                  rank: int,
                  threshold_m: float = DEFAULT_TOLL_THRESHOLD_M,
                  unit_m: float = DEFAULT_TOLL_UNIT_M) -> float:
    """0 up to threshold_m, then (distance / unit_m) * (rank + 1) abstract currency units."""
    if rank < 0:
        raise ValueError(f"rank must be >= 0, got {rank}")
    if distance_m <= threshold_m:
        return 0.0
    return (distance_m / unit_m) * (rank + 1)


def congestion_for_rank(rank: int) -> Congestion:
    if rank == 0:
        return Congestion.LOW
    if rank == 1:
        return Congestion.MEDIUM
    return Congestion.HIGH


def enrich_route(route: Route,
                 rank: int,
                 threshold_m: float = DEFAULT_TOLL_THRESHOLD_M,
                 unit_m: float = DEFAULT_TOLL_UNIT_M) -> Route:
    # a straight-line estimate keeps toll 0 / unknown so it stays recognizable
    if route.is_estimate:
        return route.with_estimates(0.0, Congestion.UNKNOWN)
    return route.with_estimates(
        estimate_toll(route.distance, rank, threshold_m, unit_m),
        congestion_for_rank(rank),
    )


def enrich_routes(routes: Iterable[Route],
                  threshold_m: float = DEFAULT_TOLL_THRESHOLD_M,
                  unit_m: float = DEFAULT_TOLL_UNIT_M) -> List[Route]:
    """Attach estimates to each route by its position; output order matches input order."""
    return [enrich_route(r, rank, threshold_m, unit_m) for rank, r in enumerate(routes)]
