"""Geodesic helpers used to measure, interpolate and bound route paths."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

Coordinate = Tuple[float, float]


EARTH_RADIUS_M = 6371008.8


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Compute the great-circle distance between two lat/lng points in metres."""

    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    delta_lat = lat2 - lat1
    delta_lon = lon2 - lon1
    sin_lat = math.sin(delta_lat / 2.0)
    sin_lon = math.sin(delta_lon / 2.0)
    h = sin_lat**2 + math.cos(lat1) * math.cos(lat2) * sin_lon**2
    central_angle = 2.0 * math.asin(min(1.0, math.sqrt(h)))
    return EARTH_RADIUS_M * central_angle


def segment_lengths_m(coords: Sequence[Coordinate]) -> np.ndarray:
    """Return the great-circle length of every consecutive pair in ``coords``."""

    if len(coords) < 2:
        return np.zeros(0, dtype=float)
    radians = np.radians(np.asarray(coords, dtype=float))
    lat = radians[:, 0]
    lon = radians[:, 1]
    sin_lat = np.sin(np.diff(lat) / 2.0)
    sin_lon = np.sin(np.diff(lon) / 2.0)
    h = sin_lat**2 + np.cos(lat[:-1]) * np.cos(lat[1:]) * sin_lon**2
    return EARTH_RADIUS_M * 2.0 * np.arcsin(np.minimum(1.0, np.sqrt(h)))


def distances_from_m(origin: Coordinate, coords: Sequence[Coordinate]) -> np.ndarray:
    """Return the great-circle distance from ``origin`` to every coordinate."""

    radians = np.radians(np.asarray(coords, dtype=float))
    lat0, lon0 = map(math.radians, origin)
    sin_lat = np.sin((radians[:, 0] - lat0) / 2.0)
    sin_lon = np.sin((radians[:, 1] - lon0) / 2.0)
    h = sin_lat**2 + math.cos(lat0) * np.cos(radians[:, 0]) * sin_lon**2
    return EARTH_RADIUS_M * 2.0 * np.arcsin(np.minimum(1.0, np.sqrt(h)))


def cumulative_distances(coords: Sequence[Coordinate]) -> np.ndarray:
    """Return cumulative travel distance in metres along a sequence of coordinates."""

    distances = np.zeros(len(coords), dtype=float)
    if len(coords) > 1:
        np.cumsum(segment_lengths_m(coords), out=distances[1:])
    return distances


def interpolate_great_circle(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Interpolate along the great-circle path between two coordinates."""

    if fraction <= 0.0:
        return a
    if fraction >= 1.0:
        return b

    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)

    delta = 2.0 * math.asin(
        min(
            1.0,
            math.sqrt(
                math.sin((lat2 - lat1) / 2.0) ** 2
                + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2.0) ** 2
            ),
        )
    )

    if delta == 0.0:
        return a

    sin_delta = math.sin(delta)
    factor_a = math.sin((1 - fraction) * delta) / sin_delta
    factor_b = math.sin(fraction * delta) / sin_delta

    x = factor_a * math.cos(lat1) * math.cos(lon1) + factor_b * math.cos(lat2) * math.cos(lon2)
    y = factor_a * math.cos(lat1) * math.sin(lon1) + factor_b * math.cos(lat2) * math.sin(lon2)
    z = factor_a * math.sin(lat1) + factor_b * math.sin(lat2)

    lat = math.atan2(z, math.sqrt(x**2 + y**2))
    lon = math.atan2(y, x)

    return math.degrees(lat), math.degrees(lon)


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Return the initial bearing from coordinate ``a`` to coordinate ``b`` in degrees."""

    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    delta_lon = lon2 - lon1
    x = math.sin(delta_lon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(delta_lon)
    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360.0) % 360.0


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> Coordinate:
        return (self.south + self.north) / 2.0, (self.west + self.east) / 2.0


def bounding_box(coords: Sequence[Coordinate]) -> BoundingBox:
    """Return the lat/lng box enclosing every coordinate."""

    if not coords:
        raise ValueError("Cannot compute the bounds of an empty coordinate list.")
    array = np.asarray(coords, dtype=float)
    south, west = array.min(axis=0)
    north, east = array.max(axis=0)
    return BoundingBox(south=float(south), west=float(west), north=float(north), east=float(east))
