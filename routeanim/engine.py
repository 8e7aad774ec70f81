"""Renderer and UI facing entry point that drives every engine component."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .camera import CameraCommand, CameraController, marker_scale
from .clock import AnimationClock, AnimationPhase, TickResult
from .config import EngineConfig
from .errors import InvalidStateTransitionError
from .logging import get_logger
from .route import (
    DensePath,
    GeoPoint,
    PlaybackMultiplier,
    PlaybackSettings,
    RawLeg,
    TransportMode,
    ViewMode,
    route_identity,
)
from .sampler import PathSampler, heading_at_distance, progress_at_point
from .segments import SegmentTracker
from .speed import SpeedModel

logger = get_logger(__name__)


@dataclass(frozen=True)
class FrameUpdate:
    """Everything a renderer needs to draw one frame of the animation."""

    position: GeoPoint
    progress_percent: float
    distance_traveled_meters: float
    path_index: int
    active_mode: TransportMode
    mode_changed: bool
    camera_command: Optional[CameraCommand]
    heading_degrees: float
    marker_scale: float
    phase: AnimationPhase


FrameListener = Callable[[FrameUpdate], None]


class RouteAnimator:
    """Own one route's animation and expose the playback controls.

    A renderer subscribes with :meth:`add_listener` and receives a
    :class:`FrameUpdate` from every tick, seek, play and view-mode change.
    Listeners belong to the current animation and are dropped by :meth:`stop`.
    """

    def __init__(self, config: Optional[EngineConfig] = None, settings: Optional[PlaybackSettings] = None) -> None:
        self.config = config or EngineConfig()
        self.settings = settings or PlaybackSettings()
        self._sampler = PathSampler(self.config.sampling)
        self._speed_model = SpeedModel(self.config.speed)
        self._path: Optional[DensePath] = None
        self._clock: Optional[AnimationClock] = None
        self._camera: Optional[CameraController] = None
        self._segments: Optional[SegmentTracker] = None
        self._listeners: List[FrameListener] = []

    # ------------------------------------------------------------------
    # Route lifecycle
    # ------------------------------------------------------------------

    @property
    def path(self) -> Optional[DensePath]:
        return self._path

    @property
    def phase(self) -> AnimationPhase:
        return self._clock.phase if self._clock else AnimationPhase.IDLE

    @property
    def progress_percent(self) -> float:
        return self._clock.progress_percent if self._clock else 0.0

    def load_route(self, legs: Sequence[RawLeg]) -> DensePath:
        """Sample ``legs`` into the active path; an identical route keeps the current animation."""

        if self._path is not None and self._path.route_id == route_identity(legs):
            logger.debug("Route unchanged; keeping current animation", route_id=self._path.route_id)
            return self._path

        self.stop()
        self._path = self._clock = self._camera = self._segments = None
        path = self._sampler.sample(legs)
        self._path = path
        self._clock = AnimationClock(path, self.settings, self._speed_model, self.config.clock)
        self._camera = CameraController(path, self.settings.view_mode, self.config.camera)
        self._segments = SegmentTracker(path)
        logger.info(
            "Route loaded",
            route_id=path.route_id,
            points=len(path),
            legs=len(path.leg_ranges),
            total_km=round(path.total_distance_meters / 1000.0, 3),
        )
        return path

    def _require_clock(self, operation: str) -> AnimationClock:
        if self._clock is None:
            logger.error("Animation control used before a route was loaded", operation=operation)
            raise InvalidStateTransitionError(operation, "without a route")
        return self._clock

    # ------------------------------------------------------------------
    # Playback controls
    # ------------------------------------------------------------------

    def play(self, restart: bool = True) -> FrameUpdate:
        clock = self._require_clock("play")
        result = clock.play(restart)
        self._camera.reset()
        self._segments.reset()
        return self._publish(result)

    def pause(self) -> None:
        self._require_clock("pause").pause()

    def resume(self) -> None:
        self._require_clock("resume").resume()

    def seek(self, progress_percent: float) -> FrameUpdate:
        result = self._require_clock("seek").seek(progress_percent)
        return self._publish(result)

    def seek_to_point(self, point: GeoPoint) -> FrameUpdate:
        """Seek to the route vertex nearest ``point``, e.g. where the user clicked the route."""

        clock = self._require_clock("seek")
        return self.seek(progress_at_point(clock.path, point))

    def stop(self) -> None:
        """Reset to Idle and release listeners; safe to call repeatedly or from a listener."""

        if self._clock is not None:
            self._clock.stop()
        if self._camera is not None:
            self._camera.reset()
        if self._segments is not None:
            self._segments.reset()
        if self._clock is not None and self._listeners:
            logger.debug("Released frame listeners", count=len(self._listeners))
            self._listeners.clear()

    def tick(self, now: float, route_id: Optional[str] = None) -> Optional[FrameUpdate]:
        """Advance one frame; a ``route_id`` from the host must match the loaded route."""

        if self._clock is None:
            return None
        result = self._clock.tick(now, route_id=route_id)
        if result is None:
            return None
        return self._publish(result)

    # ------------------------------------------------------------------
    # Host settings
    # ------------------------------------------------------------------

    def set_view_mode(self, view_mode: ViewMode) -> Optional[FrameUpdate]:
        """Switch camera mode; while animating, re-frame immediately at the current position."""

        self.settings.view_mode = ViewMode(view_mode)
        if self._clock is None or self._clock.phase is AnimationPhase.IDLE:
            return None
        return self._publish(self._clock.snapshot())

    def set_playback_multiplier(self, multiplier: PlaybackMultiplier) -> None:
        self.settings.playback_multiplier = PlaybackMultiplier(multiplier)

    def set_zoom_level(self, zoom_level: float) -> None:
        self.settings.zoom_level = float(zoom_level)

    def add_listener(self, listener: FrameListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ------------------------------------------------------------------
    # Frame assembly
    # ------------------------------------------------------------------

    def _publish(self, result: TickResult) -> FrameUpdate:
        mode, changed = self._segments.update(result.path_index)
        command = self._camera.set_view_mode(self.settings.view_mode, result.position)
        update = FrameUpdate(
            position=result.position,
            progress_percent=result.progress_percent,
            distance_traveled_meters=result.distance_traveled_meters,
            path_index=result.path_index,
            active_mode=mode,
            mode_changed=changed,
            camera_command=command,
            heading_degrees=heading_at_distance(self._path, result.distance_traveled_meters),
            marker_scale=marker_scale(self.settings.zoom_level, self.config.camera),
            phase=result.phase,
        )
        for listener in tuple(self._listeners):
            # A listener may stop the animation, which releases the others.
            if listener in self._listeners:
                listener(update)
        return update
