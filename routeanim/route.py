"""Route data model shared by every engine component."""
from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import Coordinate


class TransportMode(enum.Enum):
    """How a leg is travelled, with the marker styling used for it."""

    WALK = "walk"
    BIKE = "bike"
    BUS = "bus"
    CAR = "car"

    @property
    def color(self) -> str:
        return _MODE_COLOURS[self]

    @property
    def icon(self) -> str:
        return _MODE_ICONS[self]

    @classmethod
    def parse(cls, value: Any) -> "TransportMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            known = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Unknown transport mode {value!r}; expected one of: {known}.") from exc


_MODE_COLOURS: Dict[TransportMode, str] = {
    TransportMode.WALK: "#3b82f6",
    TransportMode.BIKE: "#22c55e",
    TransportMode.BUS: "#ef4444",
    TransportMode.CAR: "#f59e0b",
}

_MODE_ICONS: Dict[TransportMode, str] = {
    TransportMode.WALK: "🚶",
    TransportMode.BIKE: "🚴",
    TransportMode.BUS: "🚌",
    TransportMode.CAR: "🚗",
}


class ViewMode(enum.Enum):
    FOLLOW = "follow"
    WHOLE_ROUTE = "whole_route"


class PlaybackMultiplier(enum.Enum):
    SLOW = 0.5
    MEDIUM = 1.0
    FAST = 2.0


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 position in decimal degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.lng}")

    @property
    def coordinate(self) -> Coordinate:
        return self.lat, self.lng

    @staticmethod
    def from_coordinate(coordinate: Coordinate) -> "GeoPoint":
        lat, lng = coordinate
        # Great-circle interpolation can overshoot the antimeridian by an ulp.
        if lng > 180.0:
            lng -= 360.0
        elif lng < -180.0:
            lng += 360.0
        return GeoPoint(lat=float(lat), lng=float(lng))

    @staticmethod
    def from_mapping(data: Any) -> "GeoPoint":
        if isinstance(data, GeoPoint):
            return data
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"Point sequences must be (lat, lng) pairs, got {data!r}.")
            return GeoPoint(lat=float(data[0]), lng=float(data[1]))
        try:
            lat = float(data["lat"] if "lat" in data else data["latitude"])
            if "lng" in data:
                lng = float(data["lng"])
            elif "lon" in data:
                lng = float(data["lon"])
            else:
                lng = float(data["longitude"])
        except KeyError as exc:
            raise ValueError(f"Point mapping missing field: {exc.args[0]}") from exc
        return GeoPoint(lat=lat, lng=lng)


@dataclass(frozen=True)
class RawLeg:
    """One routed origin to destination hop, as supplied by the routing provider."""

    mode: TransportMode
    points: Tuple[GeoPoint, ...]

    def __init__(self, mode: Any, points: Iterable[Any]) -> None:
        object.__setattr__(self, "mode", TransportMode.parse(mode))
        object.__setattr__(self, "points", tuple(GeoPoint.from_mapping(point) for point in points))

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "RawLeg":
        if "mode" not in data:
            raise ValueError("Leg configuration missing field: mode")
        points = data.get("points") or data.get("path") or []
        if isinstance(points, (str, bytes)) or not isinstance(points, Iterable):
            raise ValueError("Leg points must be provided as a list.")
        return RawLeg(mode=data["mode"], points=points)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "points": [[point.lat, point.lng] for point in self.points],
        }


def legs_from_mapping(data: Any) -> List[RawLeg]:
    """Parse either a bare list of legs or a mapping with a ``legs`` key."""

    if isinstance(data, dict):
        data = data.get("legs")
    if data is None or isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
        raise ValueError("Legs must be provided as a list of mappings.")
    return [leg if isinstance(leg, RawLeg) else RawLeg.from_mapping(leg) for leg in data]


def route_identity(legs: Sequence[RawLeg]) -> str:
    """Return a content hash identifying a route independently of object identity."""

    payload = [leg.to_mapping() for leg in legs]
    data = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return "sha256:" + hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class LegRange:
    """Half-open index range ``[start_index, end_index)`` of one leg in a dense path."""

    start_index: int
    end_index: int
    mode: TransportMode
    leg_index: int = 0

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start_index <= index < self.end_index


@dataclass(frozen=True, eq=False)
class DensePath:
    """Animation-ready path with its arc-length table and leg partition."""

    points: Tuple[GeoPoint, ...]
    cumulative_distance_meters: np.ndarray
    leg_ranges: Tuple[LegRange, ...]
    route_id: str = ""
    _coordinates: Tuple[Coordinate, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError("A dense path needs at least two points.")
        distances = np.array(self.cumulative_distance_meters, dtype=float)
        if distances.shape != (len(self.points),):
            raise ValueError("cumulative_distance_meters must have one entry per point.")
        if distances[0] != 0.0 or np.any(np.diff(distances) < 0.0):
            raise ValueError("cumulative_distance_meters must start at 0 and never decrease.")
        expected_start = 0
        for leg_range in self.leg_ranges:
            if leg_range.start_index != expected_start or leg_range.end_index <= leg_range.start_index:
                raise ValueError("Leg ranges must partition the path without gaps or overlaps.")
            expected_start = leg_range.end_index
        if expected_start != len(self.points):
            raise ValueError("Leg ranges must cover every point of the path.")
        distances.flags.writeable = False
        object.__setattr__(self, "cumulative_distance_meters", distances)
        object.__setattr__(self, "leg_ranges", tuple(self.leg_ranges))
        object.__setattr__(self, "_coordinates", tuple(point.coordinate for point in self.points))

    @property
    def total_distance_meters(self) -> float:
        return float(self.cumulative_distance_meters[-1])

    @property
    def coordinates(self) -> Tuple[Coordinate, ...]:
        return self._coordinates

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class PlaybackSettings:
    """Host-owned settings the engine reads on every tick."""

    view_mode: ViewMode = ViewMode.FOLLOW
    playback_multiplier: PlaybackMultiplier = PlaybackMultiplier.MEDIUM
    zoom_level: float = 15.0

    @staticmethod
    def from_mapping(data: Optional[Dict[str, Any]]) -> "PlaybackSettings":
        if not data:
            return PlaybackSettings()
        multiplier = data.get("playback_multiplier", data.get("speed", "medium"))
        if isinstance(multiplier, str):
            try:
                multiplier = PlaybackMultiplier[multiplier.strip().upper()]
            except KeyError as exc:
                known = ", ".join(member.name.lower() for member in PlaybackMultiplier)
                raise ValueError(f"Unknown playback multiplier {multiplier!r}; expected one of: {known}.") from exc
        else:
            multiplier = PlaybackMultiplier(float(multiplier))
        return PlaybackSettings(
            view_mode=ViewMode(data.get("view_mode", "follow")),
            playback_multiplier=multiplier,
            zoom_level=float(data.get("zoom_level", data.get("zoom", 15.0))),
        )
