from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt

from sqlalchemy import ColumnElement
from sqlalchemy.sql.elements import UnaryExpression


# Mean earth radius (IUGG), km
EARTH_RADIUS_KM = 6371.0088


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle (haversine) distance between two coordinates."""
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)
    h = sin(dlat / 2) ** 2 + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(h)))


def distance_key(reference: Coordinate, target: Coordinate) -> float:
    """
    Sort key for "nearest first" ordering.
    Only meant for ordering; callers must not present it as a validated distance.
    """
    return distance_km(reference, target)


def unit_vector(coord: Coordinate) -> tuple[float, float, float]:
    lat = radians(coord.lat)
    lng = radians(coord.lng)
    return cos(lat) * cos(lng), cos(lat) * sin(lng), sin(lat)


def distance_order_by(
    reference: Coordinate,
    x: ColumnElement,
    y: ColumnElement,
    z: ColumnElement,
) -> UnaryExpression:
    """
    SQL ordering clause equivalent to sorting by distance_key ascending.

    The dot product of two unit vectors is the cosine of the central angle
    between them, which strictly decreases as great-circle distance grows,
    so ordering by it descending is nearest-first. Plain arithmetic keeps it
    portable across SQL backends.
    """
    rx, ry, rz = unit_vector(reference)
    return (x * rx + y * ry + z * rz).desc()
