from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from app.domain.geometry import Coordinate, distance


NodeT = TypeVar("NodeT", bound=Coordinate)
DistanceCallable = Callable[[Coordinate, Coordinate], float]


def nearest_neighbor_order(
    nodes: Sequence[NodeT],
    distance_fn: DistanceCallable = distance,
) -> tuple[list[int], list[float]]:
    """
    Build a closed tour with the nearest-neighbor heuristic.

    The tour starts at ``nodes[0]`` and always extends to the closest
    unvisited node. Ties go to the first candidate in the scan, which keeps
    the remaining nodes in input order.

    Args:
        nodes: Points to visit; the first one is the fixed start.
        distance_fn: Metric used to compare candidates.

    Returns:
        A pair ``(visit_order, legs)``. ``visit_order`` lists input indices
        in visiting order. ``legs[i]`` is the distance from the i-th visited
        node to the next one; the last entry is the closing leg back to the
        start.
    """
    if not nodes:
        return [], []

    start = nodes[0]
    unvisited: list[tuple[int, NodeT]] = list(enumerate(nodes))[1:]
    visit_order = [0]
    legs: list[float] = []
    current = start

    while unvisited:
        best_position = -1
        best_distance = float("inf")
        for position, (_, candidate) in enumerate(unvisited):
            candidate_distance = distance_fn(current, candidate)
            if candidate_distance < best_distance:
                best_distance = candidate_distance
                best_position = position

        # Only NaN coordinates can leave every comparison false.
        if best_position < 0:
            best_position = 0
            best_distance = distance_fn(current, unvisited[0][1])

        index, current = unvisited.pop(best_position)
        visit_order.append(index)
        legs.append(best_distance)

    legs.append(distance_fn(current, start))
    return visit_order, legs
