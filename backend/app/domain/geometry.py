from __future__ import annotations

from math import sqrt
from typing import Protocol


KM_PER_DEGREE = 111.32


class Coordinate(Protocol):
    latitude: float
    longitude: float


def planar_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Approximate the distance between two points in kilometers.

    Latitude and longitude degrees are treated as a flat Cartesian plane and
    the Euclidean distance is scaled by the length of one degree at the
    equator. This is only meaningful for city-scale tours; it is not a
    great-circle distance and drifts at large spans and high latitudes.
    """
    return sqrt((lat1 - lat2) ** 2 + (lon1 - lon2) ** 2) * KM_PER_DEGREE


def distance(a: Coordinate, b: Coordinate) -> float:
    """Return the flat-earth distance in kilometers between two points."""

    return planar_distance_km(a.latitude, a.longitude, b.latitude, b.longitude)
