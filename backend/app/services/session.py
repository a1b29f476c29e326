from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence

from app.core.config import get_settings
from app.core.logging import get_logger
from app.routing.optimizer import (
    MIN_TOUR_POINTS,
    InsufficientPointsError,
    TourResult,
    solve,
)
from app.schemas.tours import SessionPoint, SessionResponse, SessionState, TourPoint
from app.services.geocoding import coordinate_label, reverse_geocode


LabelerCallable = Callable[[float, float], Awaitable[str | None]]
SolverCallable = Callable[[Sequence[TourPoint]], TourResult]


_logger = get_logger(__name__)


class SessionStateError(RuntimeError):
    """Raised when a transition is not allowed in the current session state."""

    def __init__(self, action: str, state: SessionState) -> None:
        super().__init__(f"Cannot {action} while the tour is {state}")
        self.action = action
        self.state = state


class TourSession:
    """Interactive point set: accumulate, solve once, reset."""

    def __init__(
        self,
        *,
        labeler: LabelerCallable | None = reverse_geocode,
        solver: SolverCallable = solve,
    ) -> None:
        self._points: list[TourPoint] = []
        self._generation = 0
        self._result: TourResult | None = None
        self._lock = asyncio.Lock()
        self._labeler = labeler
        self._solver = solver

    @property
    def state(self) -> SessionState:
        if self._result is not None:
            return "solved"
        if self._points:
            return "accumulating"
        return "empty"

    async def add_point(
        self,
        latitude: float,
        longitude: float,
        label: str | None = None,
    ) -> SessionResponse:
        point = TourPoint(latitude=latitude, longitude=longitude, label=label)

        async with self._lock:
            self._ensure_open("add a point")
            self._points.append(point)
            index = len(self._points) - 1
            generation = self._generation
            response = self._snapshot()

        _logger.info(
            "Tour point added",
            latitude=latitude,
            longitude=longitude,
            index=index,
        )

        if point.label is not None:
            return response

        resolved = await self._resolve_label(latitude, longitude)

        async with self._lock:
            if generation != self._generation:
                _logger.info("Tour point label discarded", index=index)
                return self._snapshot()
            point.label = resolved
            if self._result is not None:
                for stop in self._result.stops:
                    if stop.input_index == index:
                        stop.label = resolved
            response = self._snapshot()

        _logger.info("Tour point labelled", index=index, label=resolved)
        return response

    async def solve(self) -> SessionResponse:
        async with self._lock:
            state = self.state
            if state != "accumulating":
                _logger.warning("Tour solve rejected", state=state)
                raise SessionStateError("solve", state)
            if len(self._points) < MIN_TOUR_POINTS:
                raise InsufficientPointsError(len(self._points))
            points = list(self._points)

            result = await asyncio.to_thread(self._solver, points)
            self._result = result
            response = self._snapshot()

        _logger.info(
            "Tour solved",
            stops=len(result.stops),
            total_distance_km=result.total_distance_km,
        )
        return response

    async def reset(self) -> SessionResponse:
        async with self._lock:
            cleared = len(self._points)
            self._points = []
            self._result = None
            self._generation += 1
            response = self._snapshot()

        _logger.info("Tour reset", cleared=cleared)
        return response

    async def snapshot(self) -> SessionResponse:
        async with self._lock:
            return self._snapshot()

    def _ensure_open(self, action: str) -> None:
        state = self.state
        if state == "solved":
            _logger.warning("Tour point rejected", state=state)
            raise SessionStateError(action, state)

    async def _resolve_label(self, latitude: float, longitude: float) -> str:
        label: str | None = None
        if self._labeler is not None:
            label = await self._labeler(latitude, longitude)
        return label or coordinate_label(latitude, longitude)

    def _snapshot(self) -> SessionResponse:
        orders: dict[int, int] = {}
        if self._result is not None:
            orders = {stop.input_index: stop.order for stop in self._result.stops}

        points = [
            SessionPoint(
                latitude=point.latitude,
                longitude=point.longitude,
                label=point.label,
                order=orders.get(index),
            )
            for index, point in enumerate(self._points)
        ]
        return SessionResponse(
            state=self.state,
            points=points,
            tour=self._result.to_response() if self._result is not None else None,
        )


_tour_session: TourSession | None = None


def get_tour_session() -> TourSession:
    global _tour_session
    if _tour_session is None:
        settings = get_settings()
        labeler = reverse_geocode if settings.reverse_geocoding else None
        _tour_session = TourSession(labeler=labeler)
    return _tour_session
