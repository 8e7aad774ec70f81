"""Traversal speed that stays perceptually constant across route lengths and zoom levels."""
from __future__ import annotations

from typing import Optional, Sequence

from .config import SpeedBucket, SpeedConfig
from .route import PlaybackMultiplier, ViewMode


def _bucket_speed(buckets: Sequence[SpeedBucket], total_km: float) -> float:
    ordered = sorted(buckets, key=lambda bucket: bucket.min_total_km, reverse=True)
    for bucket in ordered:
        if total_km > bucket.min_total_km:
            return bucket.meters_per_second
    return ordered[-1].meters_per_second


class SpeedModel:
    """Pure speed calculator; holds configuration only, never animation state."""

    def __init__(self, config: Optional[SpeedConfig] = None) -> None:
        self.config = config or SpeedConfig()

    def base_speed(self, total_distance_meters: float, view_mode: ViewMode) -> float:
        """Return the bucketed base speed in m/s before zoom and playback corrections."""

        if total_distance_meters <= 0:
            raise ValueError("Route length must be positive to derive a speed.")
        buckets = self.config.follow_speeds if view_mode is ViewMode.FOLLOW else self.config.whole_route_speeds
        return _bucket_speed(buckets, total_distance_meters / 1000.0)

    def zoom_multiplier(self, zoom_level: float) -> float:
        """Return the speed factor for a camera zoom: 1.0 at the neutral zoom, faster when zoomed out."""

        config = self.config
        zoom = min(max(float(zoom_level), config.min_zoom), config.max_zoom)
        multiplier = config.zoom_base ** (config.neutral_zoom - zoom)
        return min(max(multiplier, config.min_zoom_multiplier), config.max_zoom_multiplier)

    def speed_meters_per_second(
        self,
        total_distance_meters: float,
        view_mode: ViewMode,
        zoom_level: float,
        playback_multiplier: PlaybackMultiplier,
    ) -> float:
        return (
            self.base_speed(total_distance_meters, view_mode)
            * self.zoom_multiplier(zoom_level)
            * PlaybackMultiplier(playback_multiplier).value
        )


_DEFAULT_MODEL = SpeedModel()


def speed_meters_per_second(
    total_distance_meters: float,
    view_mode: ViewMode,
    zoom_level: float,
    playback_multiplier: PlaybackMultiplier = PlaybackMultiplier.MEDIUM,
) -> float:
    """Speed in m/s for the default configuration."""

    return _DEFAULT_MODEL.speed_meters_per_second(total_distance_meters, view_mode, zoom_level, playback_multiplier)
