"""Route animation engine package."""

from .camera import BoundsCommand, CameraController, FollowCommand, marker_scale, zoom_for_route_length
from .clock import AnimationClock, AnimationPhase, AnimationState, TickResult
from .config import EngineConfig, load_config, load_route
from .engine import FrameUpdate, RouteAnimator
from .errors import (
    DegenerateRouteError,
    EmptyRouteError,
    InvalidStateTransitionError,
    RouteAnimationError,
    StaleRouteError,
)
from .geometry import BoundingBox
from .route import (
    DensePath,
    GeoPoint,
    LegRange,
    PlaybackMultiplier,
    PlaybackSettings,
    RawLeg,
    TransportMode,
    ViewMode,
)
from .sampler import PathPosition, PathSampler, index_at_distance, position_at_distance
from .segments import SegmentTracker, did_cross_boundary, mode_at
from .speed import SpeedModel, speed_meters_per_second

__all__ = [
    "AnimationClock",
    "AnimationPhase",
    "AnimationState",
    "BoundingBox",
    "BoundsCommand",
    "CameraController",
    "DegenerateRouteError",
    "DensePath",
    "EmptyRouteError",
    "EngineConfig",
    "FollowCommand",
    "FrameUpdate",
    "GeoPoint",
    "InvalidStateTransitionError",
    "LegRange",
    "PathPosition",
    "PathSampler",
    "PlaybackMultiplier",
    "PlaybackSettings",
    "RawLeg",
    "RouteAnimationError",
    "RouteAnimator",
    "SegmentTracker",
    "SpeedModel",
    "StaleRouteError",
    "TickResult",
    "TransportMode",
    "ViewMode",
    "did_cross_boundary",
    "index_at_distance",
    "load_config",
    "load_route",
    "marker_scale",
    "mode_at",
    "position_at_distance",
    "speed_meters_per_second",
    "zoom_for_route_length",
]
