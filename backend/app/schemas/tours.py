from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


SessionState = Literal["empty", "accumulating", "solved"]
Coordinates = tuple[float, float]


class TourPoint(BaseModel):
    latitude: float
    longitude: float
    label: str | None = None

    @field_validator("label", mode="before")
    def _normalize_label(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class TourStop(BaseModel):
    order: int
    input_index: int
    latitude: float
    longitude: float
    label: str | None = None
    distance_to_next_km: float = 0.0


class TourRequest(BaseModel):
    points: list[TourPoint] = Field(default_factory=list)


class TourResponse(BaseModel):
    stops: list[TourStop] = Field(default_factory=list)
    total_distance_km: float = 0.0
    path: list[Coordinates] = Field(default_factory=list)


class DistanceRequest(BaseModel):
    origin: TourPoint
    destination: TourPoint


class DistanceResponse(BaseModel):
    distance_km: float


class SessionPoint(TourPoint):
    order: int | None = None


class SessionResponse(BaseModel):
    state: SessionState
    points: list[SessionPoint] = Field(default_factory=list)
    tour: TourResponse | None = None
