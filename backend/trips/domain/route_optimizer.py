"""Day route ordering by geographic proximity.

Greedy nearest-neighbour over haversine distances, O(n^2) in the number of
stops on a day.
"""

import math
import uuid
from dataclasses import dataclass

from backend.trips.models.common import Geo

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class RouteStop:
    """One activity in day order, with coordinates when known."""

    activity_id: uuid.UUID
    geo: Geo | None


def haversine_km(a: Geo, b: Geo) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    lat1, lon1 = math.radians(a.lat), math.radians(a.lon)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def route_distance_km(stops: list[RouteStop]) -> float:
    """Total leg distance visiting the coordinate-bearing stops in order."""
    points = [s.geo for s in stops if s.geo is not None]
    return sum(haversine_km(points[i], points[i + 1]) for i in range(len(points) - 1))


def optimize_order(stops: list[RouteStop]) -> list[uuid.UUID]:
    """Reorder a day's stops to shorten total travel distance.

    Stops without coordinates are anchors: they keep their index. The
    coordinate-bearing stops are visited nearest-first starting from the
    first of them in input order and written back into the remaining slots.
    Ties go to the stop that came first in the input.

    Args:
        stops: Day activities in their current order

    Returns:
        Activity ids in the new order (same length, same members)
    """
    routable = [i for i, s in enumerate(stops) if s.geo is not None]
    if len(routable) < 2:
        return [s.activity_id for s in stops]

    current = routable[0]
    visited = [current]
    remaining = routable[1:]

    while remaining:
        here = stops[current].geo
        best_pos = 0
        best_dist = math.inf
        for pos, idx in enumerate(remaining):
            dist = haversine_km(here, stops[idx].geo)  # type: ignore[arg-type]
            if dist < best_dist:
                best_pos, best_dist = pos, dist
        current = remaining.pop(best_pos)
        visited.append(current)

    order = [s.activity_id for s in stops]
    for slot, idx in zip(routable, visited):
        order[slot] = stops[idx].activity_id

    return order
