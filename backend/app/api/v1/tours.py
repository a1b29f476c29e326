from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.routing.optimizer import InsufficientPointsError
from app.schemas.tours import SessionResponse, TourPoint
from app.services.session import SessionStateError, TourSession, get_tour_session

router = APIRouter()


def get_session() -> TourSession:
    return get_tour_session()


@router.get("/", response_model=SessionResponse)
async def get_tour(session: TourSession = Depends(get_session)) -> SessionResponse:
    return await session.snapshot()


@router.post(
    "/points", response_model=SessionResponse, status_code=status.HTTP_201_CREATED
)
async def add_point(
    payload: TourPoint, session: TourSession = Depends(get_session)
) -> SessionResponse:
    try:
        return await session.add_point(
            payload.latitude, payload.longitude, label=payload.label
        )
    except SessionStateError as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, str(exc)) from exc


@router.post("/solve", response_model=SessionResponse)
async def solve_tour(session: TourSession = Depends(get_session)) -> SessionResponse:
    try:
        return await session.solve()
    except InsufficientPointsError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
    except SessionStateError as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, str(exc)) from exc


@router.post("/reset", response_model=SessionResponse)
async def reset_tour(session: TourSession = Depends(get_session)) -> SessionResponse:
    return await session.reset()
