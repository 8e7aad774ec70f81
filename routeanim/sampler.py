"""Turn routed legs into a bounded, arc-length parameterised path."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import SamplingBucket, SamplingConfig
from .errors import DegenerateRouteError, EmptyRouteError
from .geometry import (
    Coordinate,
    bearing_degrees,
    cumulative_distances,
    distances_from_m,
    haversine_m,
    interpolate_great_circle,
)
from .logging import get_logger
from .route import DensePath, GeoPoint, LegRange, RawLeg, route_identity

logger = get_logger(__name__)


@dataclass(frozen=True)
class PathPosition:
    point: GeoPoint
    path_index: int


class PathSampler:
    """Build :class:`DensePath` values from raw routing output.

    Raw directions can carry tens of thousands of points on a long trip while
    a short walk may only have a handful of widely spaced vertices. Sampling
    first thins raw points to a minimum spacing derived from the route length,
    then fills any edge longer than the bucket's maximum spacing with
    great-circle interpolated points. Both steps respect the bucket's point
    budget, so the output size is bounded regardless of the input size.
    """

    def __init__(self, config: Optional[SamplingConfig] = None) -> None:
        self.config = config or SamplingConfig()

    def sample(self, legs: Sequence[RawLeg]) -> DensePath:
        usable: List[Tuple[int, RawLeg]] = []
        for leg_index, leg in enumerate(legs):
            if len(leg.points) >= 2:
                usable.append((leg_index, leg))
            else:
                logger.warning("Skipping leg without a path", leg_index=leg_index, points=len(leg.points))
        if not usable:
            raise EmptyRouteError("The route needs at least one leg with two or more points.")

        leg_coords = [[point.coordinate for point in leg.points] for _, leg in usable]
        raw_coords = [coordinate for coords in leg_coords for coordinate in coords]
        total_m = float(cumulative_distances(raw_coords)[-1])
        if round(total_m) == 0:
            raise DegenerateRouteError("Every point of the route coincides; there is nothing to animate.")

        bucket = self.config.bucket_for(total_m / 1000.0)
        min_spacing_m = total_m / (bucket.max_total_points * self.config.decimation_share)
        kept_legs = [_decimate(coords, min_spacing_m) for coords in leg_coords]
        budget = max(0, bucket.max_total_points - sum(len(kept) for kept in kept_legs))

        emitted: List[Coordinate] = []
        leg_ranges: List[LegRange] = []
        for (leg_index, leg), kept in zip(usable, kept_legs):
            start_index = len(emitted)
            budget = _emit_leg(kept, bucket, budget, emitted)
            leg_ranges.append(LegRange(start_index, len(emitted), leg.mode, leg_index))

        points = tuple(GeoPoint.from_coordinate(coordinate) for coordinate in emitted)
        distances = cumulative_distances([point.coordinate for point in points])
        path = DensePath(
            points=points,
            cumulative_distance_meters=distances,
            leg_ranges=tuple(leg_ranges),
            route_id=route_identity(legs),
        )
        logger.info(
            "Sampled route",
            total_km=round(total_m / 1000.0, 3),
            raw_points=len(raw_coords),
            points=len(points),
            legs=len(leg_ranges),
        )
        return path


def _decimate(coords: Sequence[Coordinate], min_spacing_m: float) -> List[Coordinate]:
    """Keep the first point entering each ``min_spacing_m`` slot of the leg's arc length."""

    slots = np.floor(cumulative_distances(coords) / min_spacing_m)
    keep = np.ones(len(coords), dtype=bool)
    keep[1:] = slots[1:] != slots[:-1]
    keep[-1] = True
    return [coords[index] for index in np.flatnonzero(keep)]


def _emit_leg(kept: Sequence[Coordinate], bucket: SamplingBucket, budget: int, out: List[Coordinate]) -> int:
    out.append(kept[0])
    for start, end in zip(kept[:-1], kept[1:]):
        gap = haversine_m(start, end)
        if gap > bucket.max_spacing_m and budget > 0:
            wanted = min(bucket.max_points_per_gap, math.ceil(gap / bucket.max_spacing_m) - 1)
            count = min(wanted, budget)
            for step in range(1, count + 1):
                out.append(interpolate_great_circle(start, end, step / (count + 1)))
            budget -= count
        out.append(end)
    return budget


def sample(legs: Sequence[RawLeg], config: Optional[SamplingConfig] = None) -> DensePath:
    """Shortcut for ``PathSampler(config).sample(legs)``."""

    return PathSampler(config).sample(legs)


def _check_distance(distance_meters: float) -> float:
    distance_meters = float(distance_meters)
    if math.isnan(distance_meters):
        raise ValueError("Distance along the path must be a number.")
    return distance_meters


def index_at_distance(path: DensePath, distance_meters: float) -> int:
    """Return the lower bracketing path index for a distance from the route start."""

    distance_meters = _check_distance(distance_meters)
    distances = path.cumulative_distance_meters
    if distance_meters <= 0.0:
        return 0
    if distance_meters >= distances[-1]:
        return len(path) - 1
    # side="right" skips past zero-length segments such as shared leg endpoints
    index = int(np.searchsorted(distances, distance_meters, side="right")) - 1
    return min(max(index, 0), len(path) - 2)


def position_at_distance(path: DensePath, distance_meters: float) -> PathPosition:
    """Return the point ``distance_meters`` along the path and its lower bracketing index."""

    distance_meters = _check_distance(distance_meters)
    distances = path.cumulative_distance_meters
    if distance_meters <= 0.0:
        return PathPosition(point=path.points[0], path_index=0)
    if distance_meters >= distances[-1]:
        return PathPosition(point=path.points[-1], path_index=len(path) - 1)

    index = index_at_distance(path, distance_meters)
    segment = float(distances[index + 1] - distances[index])
    fraction = (distance_meters - float(distances[index])) / segment if segment > 0.0 else 0.0
    if fraction <= 0.0:
        return PathPosition(point=path.points[index], path_index=index)
    coordinate = interpolate_great_circle(path.coordinates[index], path.coordinates[index + 1], fraction)
    return PathPosition(point=GeoPoint.from_coordinate(coordinate), path_index=index)


def heading_at_distance(path: DensePath, distance_meters: float) -> float:
    """Return the bearing of travel at ``distance_meters``, for rotating the marker."""

    coords = path.coordinates
    index = min(index_at_distance(path, distance_meters), len(path) - 2)
    # Look forward, then backward, for a segment with a non-zero length.
    for start in list(range(index, len(path) - 1)) + list(range(index - 1, -1, -1)):
        if coords[start] != coords[start + 1]:
            return bearing_degrees(coords[start], coords[start + 1])
    return 0.0


def progress_at_point(path: DensePath, point: GeoPoint) -> float:
    """Return the progress percentage of the path vertex nearest to ``point``.

    Used to turn a click on the drawn route into a seek target.
    """

    nearest = int(np.argmin(distances_from_m(point.coordinate, path.coordinates)))
    return 100.0 * float(path.cumulative_distance_meters[nearest]) / path.total_distance_meters
