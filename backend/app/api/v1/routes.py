from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, status

from app.domain.geometry import distance
from app.routing.optimizer import InsufficientPointsError, solve
from app.schemas.tours import (
    DistanceRequest,
    DistanceResponse,
    TourRequest,
    TourResponse,
)


router = APIRouter()


@router.post(
    "/",
    response_model=TourResponse,
    status_code=status.HTTP_200_OK,
)
async def create_route(payload: TourRequest) -> TourResponse:
    try:
        result = await asyncio.to_thread(solve, payload.points)
    except InsufficientPointsError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc

    return result.to_response()


@router.post("/distance", response_model=DistanceResponse)
async def measure_distance(payload: DistanceRequest) -> DistanceResponse:
    return DistanceResponse(
        distance_km=distance(payload.origin, payload.destination)
    )
