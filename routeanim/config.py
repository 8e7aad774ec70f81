"""Configuration loading utilities for the route animation engine."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .route import RawLeg, legs_from_mapping


@dataclass(frozen=True)
class SamplingBucket:
    """Sampling density used for routes longer than ``min_total_km``."""

    min_total_km: float
    max_spacing_m: float
    max_points_per_gap: int
    max_total_points: int

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "SamplingBucket":
        try:
            bucket = SamplingBucket(
                min_total_km=float(data.get("min_total_km", 0.0)),
                max_spacing_m=float(data["max_spacing_m"]),
                max_points_per_gap=int(data["max_points_per_gap"]),
                max_total_points=int(data["max_total_points"]),
            )
        except KeyError as exc:
            raise ValueError(f"Sampling bucket missing field: {exc.args[0]}") from exc
        if bucket.max_spacing_m <= 0 or bucket.max_points_per_gap < 0 or bucket.max_total_points < 2:
            raise ValueError(f"Invalid sampling bucket: {data!r}")
        return bucket


@dataclass(frozen=True)
class SpeedBucket:
    """Base traversal speed for routes longer than ``min_total_km``."""

    min_total_km: float
    meters_per_second: float

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "SpeedBucket":
        try:
            bucket = SpeedBucket(
                min_total_km=float(data.get("min_total_km", 0.0)),
                meters_per_second=float(data["meters_per_second"]),
            )
        except KeyError as exc:
            raise ValueError(f"Speed bucket missing field: {exc.args[0]}") from exc
        if bucket.meters_per_second <= 0:
            raise ValueError("Base speeds must be positive.")
        return bucket


@dataclass(frozen=True)
class ZoomBucket:
    """Follow-mode camera zoom for routes shorter than ``max_total_km``."""

    max_total_km: float
    zoom: float

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "ZoomBucket":
        try:
            return ZoomBucket(
                max_total_km=float(data.get("max_total_km", float("inf"))),
                zoom=float(data["zoom"]),
            )
        except KeyError as exc:
            raise ValueError(f"Zoom bucket missing field: {exc.args[0]}") from exc


DEFAULT_SAMPLING_BUCKETS: Tuple[SamplingBucket, ...] = (
    SamplingBucket(min_total_km=2000.0, max_spacing_m=50000.0, max_points_per_gap=1, max_total_points=400),
    SamplingBucket(min_total_km=1000.0, max_spacing_m=20000.0, max_points_per_gap=2, max_total_points=500),
    SamplingBucket(min_total_km=100.0, max_spacing_m=5000.0, max_points_per_gap=3, max_total_points=1000),
    SamplingBucket(min_total_km=10.0, max_spacing_m=500.0, max_points_per_gap=10, max_total_points=2000),
    SamplingBucket(min_total_km=0.0, max_spacing_m=100.0, max_points_per_gap=20, max_total_points=3000),
)

DEFAULT_WHOLE_ROUTE_SPEEDS: Tuple[SpeedBucket, ...] = (
    SpeedBucket(min_total_km=2000.0, meters_per_second=20000.0),
    SpeedBucket(min_total_km=1000.0, meters_per_second=10000.0),
    SpeedBucket(min_total_km=500.0, meters_per_second=5000.0),
    SpeedBucket(min_total_km=100.0, meters_per_second=2000.0),
    SpeedBucket(min_total_km=50.0, meters_per_second=800.0),
    SpeedBucket(min_total_km=10.0, meters_per_second=400.0),
    SpeedBucket(min_total_km=0.0, meters_per_second=150.0),
)

DEFAULT_FOLLOW_SPEEDS: Tuple[SpeedBucket, ...] = (
    SpeedBucket(min_total_km=1000.0, meters_per_second=500.0),
    SpeedBucket(min_total_km=100.0, meters_per_second=200.0),
    SpeedBucket(min_total_km=10.0, meters_per_second=100.0),
    SpeedBucket(min_total_km=0.0, meters_per_second=60.0),
)

DEFAULT_FOLLOW_ZOOMS: Tuple[ZoomBucket, ...] = (
    ZoomBucket(max_total_km=50.0, zoom=12.0),
    ZoomBucket(max_total_km=500.0, zoom=11.0),
    ZoomBucket(max_total_km=float("inf"), zoom=10.0),
)


def _parse_buckets(data: Any, parser, default: Tuple[Any, ...], name: str) -> Tuple[Any, ...]:
    if data is None:
        return default
    if isinstance(data, (str, bytes, dict)) or not isinstance(data, Iterable):
        raise ValueError(f"{name} must be provided as a list of mappings.")
    buckets = tuple(parser(item) for item in data)
    if not buckets:
        raise ValueError(f"{name} must contain at least one bucket.")
    return buckets


@dataclass
class SamplingConfig:
    """Controls how raw routing output is thinned and densified."""

    buckets: Tuple[SamplingBucket, ...] = DEFAULT_SAMPLING_BUCKETS
    decimation_share: float = 0.5

    def bucket_for(self, total_km: float) -> SamplingBucket:
        ordered = sorted(self.buckets, key=lambda bucket: bucket.min_total_km, reverse=True)
        for bucket in ordered:
            if total_km > bucket.min_total_km:
                return bucket
        return ordered[-1]

    @staticmethod
    def from_mapping(data: Optional[Dict[str, Any]]) -> "SamplingConfig":
        if not data:
            return SamplingConfig()
        share = float(data.get("decimation_share", 0.5))
        if not 0.0 < share <= 1.0:
            raise ValueError("decimation_share must be within (0, 1].")
        return SamplingConfig(
            buckets=_parse_buckets(data.get("buckets"), SamplingBucket.from_mapping, DEFAULT_SAMPLING_BUCKETS, "Sampling buckets"),
            decimation_share=share,
        )


@dataclass
class SpeedConfig:
    """Base speeds and the zoom correction applied on top of them."""

    whole_route_speeds: Tuple[SpeedBucket, ...] = DEFAULT_WHOLE_ROUTE_SPEEDS
    follow_speeds: Tuple[SpeedBucket, ...] = DEFAULT_FOLLOW_SPEEDS
    neutral_zoom: float = 15.0
    zoom_base: float = 1.15
    min_zoom: float = 0.0
    max_zoom: float = 22.0
    min_zoom_multiplier: float = 0.3
    max_zoom_multiplier: float = 5.0

    @staticmethod
    def from_mapping(data: Optional[Dict[str, Any]]) -> "SpeedConfig":
        if not data:
            return SpeedConfig()
        config = SpeedConfig(
            whole_route_speeds=_parse_buckets(
                data.get("whole_route_speeds"), SpeedBucket.from_mapping, DEFAULT_WHOLE_ROUTE_SPEEDS, "Whole-route speeds"
            ),
            follow_speeds=_parse_buckets(
                data.get("follow_speeds"), SpeedBucket.from_mapping, DEFAULT_FOLLOW_SPEEDS, "Follow speeds"
            ),
            neutral_zoom=float(data.get("neutral_zoom", 15.0)),
            zoom_base=float(data.get("zoom_base", 1.15)),
            min_zoom=float(data.get("min_zoom", 0.0)),
            max_zoom=float(data.get("max_zoom", 22.0)),
            min_zoom_multiplier=float(data.get("min_zoom_multiplier", 0.3)),
            max_zoom_multiplier=float(data.get("max_zoom_multiplier", 5.0)),
        )
        if config.zoom_base <= 1.0:
            raise ValueError("zoom_base must be greater than 1 so zooming out speeds the marker up.")
        if not 0.0 < config.min_zoom_multiplier <= config.max_zoom_multiplier:
            raise ValueError("Zoom multiplier bounds must satisfy 0 < min <= max.")
        if config.min_zoom > config.max_zoom:
            raise ValueError("min_zoom must not exceed max_zoom.")
        return config


@dataclass
class CameraConfig:
    """Camera framing and marker sizing."""

    follow_zooms: Tuple[ZoomBucket, ...] = DEFAULT_FOLLOW_ZOOMS
    whole_route_padding_px: int = 100
    marker_base_zoom: float = 13.0
    marker_zoom_factor: float = 0.15
    marker_min_scale: float = 0.5
    marker_max_scale: float = 1.2

    @staticmethod
    def from_mapping(data: Optional[Dict[str, Any]]) -> "CameraConfig":
        if not data:
            return CameraConfig()
        config = CameraConfig(
            follow_zooms=_parse_buckets(data.get("follow_zooms"), ZoomBucket.from_mapping, DEFAULT_FOLLOW_ZOOMS, "Follow zooms"),
            whole_route_padding_px=int(data.get("whole_route_padding_px", data.get("padding", 100))),
            marker_base_zoom=float(data.get("marker_base_zoom", 13.0)),
            marker_zoom_factor=float(data.get("marker_zoom_factor", 0.15)),
            marker_min_scale=float(data.get("marker_min_scale", 0.5)),
            marker_max_scale=float(data.get("marker_max_scale", 1.2)),
        )
        if config.marker_min_scale > config.marker_max_scale:
            raise ValueError("marker_min_scale must not exceed marker_max_scale.")
        return config


@dataclass
class ClockConfig:
    """Frame timing safeguards for the animation clock."""

    max_frame_delta_seconds: float = 0.2
    nominal_frame_seconds: float = 1.0 / 60.0

    @staticmethod
    def from_mapping(data: Optional[Dict[str, Any]]) -> "ClockConfig":
        if not data:
            return ClockConfig()
        config = ClockConfig(
            max_frame_delta_seconds=float(data.get("max_frame_delta_seconds", 0.2)),
            nominal_frame_seconds=float(data.get("nominal_frame_seconds", 1.0 / 60.0)),
        )
        if config.nominal_frame_seconds <= 0 or config.max_frame_delta_seconds < config.nominal_frame_seconds:
            raise ValueError("Clock timing must satisfy 0 < nominal_frame_seconds <= max_frame_delta_seconds.")
        return config


@dataclass
class EngineConfig:
    """Top-level configuration for the route animation engine."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    speed: SpeedConfig = field(default_factory=SpeedConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "EngineConfig":
        return EngineConfig(
            sampling=SamplingConfig.from_mapping(data.get("sampling")),
            speed=SpeedConfig.from_mapping(data.get("speed")),
            camera=CameraConfig.from_mapping(data.get("camera")),
            clock=ClockConfig.from_mapping(data.get("clock")),
        )


def _read_document(path: Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    with path.open("r", encoding="utf8") as handle:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(handle)
        return json.load(handle)


def load_config(path: Path) -> EngineConfig:
    """Load an :class:`EngineConfig` from a JSON or YAML file."""

    raw = _read_document(path)
    if raw is None:
        return EngineConfig()
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level.")

    return EngineConfig.from_mapping(raw)


def load_route(path: Path) -> List[RawLeg]:
    """Load the routed legs of a trip from a JSON or YAML file."""

    return legs_from_mapping(_read_document(path))
