from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from app.core.logging import get_logger
from app.domain.optimization import nearest_neighbor_order
from app.schemas.tours import Coordinates, TourPoint, TourResponse, TourStop


_logger = get_logger(__name__)

MIN_TOUR_POINTS = 2


class TourPreconditionError(ValueError):
    """Raised when a tour cannot be solved for the given input."""


class InsufficientPointsError(TourPreconditionError):
    """Raised when fewer points than a tour needs are supplied."""

    def __init__(self, received: int, required: int = MIN_TOUR_POINTS) -> None:
        super().__init__(
            f"At least {required} points are required to solve a tour, got {received}"
        )
        self.received = received
        self.required = required


@dataclass(slots=True)
class TourResult:
    stops: list[TourStop]
    total_distance_km: float
    path: list[Coordinates]

    def to_response(self) -> TourResponse:
        return TourResponse(
            stops=self.stops,
            total_distance_km=self.total_distance_km,
            path=self.path,
        )


def solve(points: Sequence[TourPoint]) -> TourResult:
    """Order the points into a short closed tour starting at the first one."""

    if len(points) < MIN_TOUR_POINTS:
        _logger.warning(
            "Tour computation rejected",
            points=len(points),
            required=MIN_TOUR_POINTS,
        )
        raise InsufficientPointsError(len(points))

    _logger.info("Tour computation started", points=len(points))

    result = build_tour(points)

    _logger.info(
        "Tour computation finished",
        stops=len(result.stops),
        total_distance_km=result.total_distance_km,
    )
    return result


def build_tour(points: Sequence[TourPoint]) -> TourResult:
    """Run the nearest-neighbor ordering and annotate each stop.

    No size guard is applied here; a single point yields a self-loop with a
    closing leg of zero.
    """
    visit_order, legs = nearest_neighbor_order(points)

    stops: list[TourStop] = []
    path: list[Coordinates] = []
    total_distance = 0.0

    for order, (input_index, leg) in enumerate(zip(visit_order, legs)):
        point = points[input_index]
        total_distance += leg
        stops.append(
            TourStop(
                order=order,
                input_index=input_index,
                latitude=point.latitude,
                longitude=point.longitude,
                label=point.label,
                distance_to_next_km=leg,
            )
        )
        path.append((point.latitude, point.longitude))

    if stops:
        path.append(path[0])

    return TourResult(stops=stops, total_distance_km=total_distance, path=path)
