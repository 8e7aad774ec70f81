"""Camera commands for following the marker or framing the whole route."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .config import CameraConfig
from .geometry import BoundingBox, bounding_box
from .logging import get_logger
from .route import DensePath, GeoPoint, ViewMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class FollowCommand:
    center: GeoPoint
    zoom: float


@dataclass(frozen=True)
class BoundsCommand:
    bounds: BoundingBox
    padding_px: int = 0


CameraCommand = Union[FollowCommand, BoundsCommand]


def zoom_for_route_length(total_distance_meters: float, config: Optional[CameraConfig] = None) -> float:
    """Return a fixed follow zoom for the route so the camera does not re-zoom every frame."""

    config = config or CameraConfig()
    total_km = total_distance_meters / 1000.0
    ordered = sorted(config.follow_zooms, key=lambda bucket: bucket.max_total_km)
    for bucket in ordered:
        if total_km < bucket.max_total_km:
            return bucket.zoom
    return ordered[-1].zoom


def marker_scale(zoom_level: float, config: Optional[CameraConfig] = None) -> float:
    """Return the marker size factor for a zoom level; markers shrink as the map zooms out."""

    config = config or CameraConfig()
    scale = 2.0 ** ((zoom_level - config.marker_base_zoom) * config.marker_zoom_factor)
    return max(config.marker_min_scale, min(config.marker_max_scale, scale))


class CameraController:
    """Derive camera commands for one route.

    Follow mode re-centres on every call. Whole-route mode emits the route
    bounds once and then returns ``None`` until the mode changes or the
    controller is reset, since the box never moves.
    """

    def __init__(self, path: DensePath, view_mode: ViewMode = ViewMode.FOLLOW, config: Optional[CameraConfig] = None) -> None:
        self.path = path
        self.config = config or CameraConfig()
        self._view_mode = view_mode
        self._follow_zoom = zoom_for_route_length(path.total_distance_meters, self.config)
        self._bounds = bounding_box(path.coordinates)
        self._bounds_emitted = False

    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    @property
    def bounds(self) -> BoundingBox:
        return self._bounds

    def command_for(self, position: GeoPoint) -> Optional[CameraCommand]:
        if self._view_mode is ViewMode.FOLLOW:
            return FollowCommand(center=position, zoom=self._follow_zoom)
        if self._bounds_emitted:
            return None
        self._bounds_emitted = True
        return BoundsCommand(bounds=self._bounds, padding_px=self.config.whole_route_padding_px)

    def set_view_mode(self, view_mode: ViewMode, position: GeoPoint) -> Optional[CameraCommand]:
        """Switch modes and return the command for the marker's current position."""

        view_mode = ViewMode(view_mode)
        if view_mode is not self._view_mode:
            logger.debug("Camera view mode changed", previous=self._view_mode.value, current=view_mode.value)
            self._view_mode = view_mode
            self._bounds_emitted = False
        return self.command_for(position)

    def reset(self) -> None:
        self._bounds_emitted = False
