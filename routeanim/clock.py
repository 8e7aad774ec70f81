"""Frame-driven integrator that advances the marker along a dense path."""
from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Optional

from .config import ClockConfig
from .errors import InvalidStateTransitionError, StaleRouteError
from .logging import get_logger
from .route import DensePath, GeoPoint, PlaybackSettings
from .sampler import position_at_distance
from .speed import SpeedModel

logger = get_logger(__name__)


class AnimationPhase(enum.Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


@dataclass
class AnimationState:
    phase: AnimationPhase = AnimationPhase.IDLE
    distance_traveled_meters: float = 0.0
    last_tick_timestamp: Optional[float] = None


@dataclass(frozen=True)
class TickResult:
    distance_traveled_meters: float
    progress_percent: float
    position: GeoPoint
    path_index: int
    phase: AnimationPhase


class AnimationClock:
    """Advance distance travelled from host-supplied frame timestamps.

    The host owns scheduling and calls :meth:`tick` once per rendered frame
    with a monotonic timestamp in seconds. The clock owns the only copy of the
    :class:`AnimationState`; callers see snapshots through :attr:`state`.
    """

    def __init__(
        self,
        path: DensePath,
        settings: Optional[PlaybackSettings] = None,
        speed_model: Optional[SpeedModel] = None,
        config: Optional[ClockConfig] = None,
    ) -> None:
        self.path = path
        self.settings = settings or PlaybackSettings()
        self.speed_model = speed_model or SpeedModel()
        self.config = config or ClockConfig()
        self._state = AnimationState()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> AnimationState:
        return dataclasses.replace(self._state)

    @property
    def phase(self) -> AnimationPhase:
        return self._state.phase

    @property
    def total_distance_meters(self) -> float:
        return self.path.total_distance_meters

    @property
    def progress_percent(self) -> float:
        return 100.0 * self._state.distance_traveled_meters / self.total_distance_meters

    def snapshot(self) -> TickResult:
        """Return the current position without advancing the clock."""

        distance = self._state.distance_traveled_meters
        position = position_at_distance(self.path, distance)
        return TickResult(
            distance_traveled_meters=distance,
            progress_percent=self.progress_percent,
            position=position.point,
            path_index=position.path_index,
            phase=self._state.phase,
        )

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    def _require(self, operation: str, *allowed: AnimationPhase) -> None:
        if self._state.phase not in allowed:
            logger.error(
                "Rejected animation state transition",
                operation=operation,
                phase=self._state.phase.value,
                route_id=self.path.route_id,
            )
            raise InvalidStateTransitionError(operation, self._state.phase)

    def _enter(self, phase: AnimationPhase) -> None:
        if phase is not self._state.phase:
            logger.debug(
                "Animation phase changed",
                previous=self._state.phase.value,
                current=phase.value,
                distance_m=round(self._state.distance_traveled_meters, 3),
            )
        self._state.phase = phase

    def play(self, restart: bool = True) -> TickResult:
        """Start playback from Idle or Completed; ``restart=False`` keeps the Completed distance."""

        self._require("play", AnimationPhase.IDLE, AnimationPhase.COMPLETED)
        if restart or self._state.phase is AnimationPhase.IDLE:
            self._state.distance_traveled_meters = 0.0
        self._state.last_tick_timestamp = None
        self._enter(AnimationPhase.PLAYING)
        return self.snapshot()

    def pause(self) -> None:
        self._require("pause", AnimationPhase.PLAYING)
        self._enter(AnimationPhase.PAUSED)

    def resume(self) -> None:
        self._require("resume", AnimationPhase.PAUSED)
        # The paused interval must not count as travel time.
        self._state.last_tick_timestamp = None
        self._enter(AnimationPhase.PLAYING)

    def seek(self, progress_percent: float) -> TickResult:
        """Jump to a progress percentage; playback is paused so scrubbing never races the integrator."""

        self._require("seek", AnimationPhase.PLAYING, AnimationPhase.PAUSED, AnimationPhase.COMPLETED)
        progress_percent = float(progress_percent)
        if not 0.0 <= progress_percent <= 100.0:
            raise ValueError(f"Seek target must be within [0, 100], got {progress_percent}.")
        self._state.distance_traveled_meters = progress_percent / 100.0 * self.total_distance_meters
        self._state.last_tick_timestamp = None
        self._enter(AnimationPhase.PAUSED)
        return self.snapshot()

    def stop(self) -> None:
        """Return to Idle at distance zero; safe to call repeatedly and from inside a tick."""

        state = self._state
        if state.phase is AnimationPhase.IDLE and state.distance_traveled_meters == 0.0:
            return
        self._enter(AnimationPhase.IDLE)
        state.distance_traveled_meters = 0.0
        state.last_tick_timestamp = None

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def _frame_delta(self, now: float) -> float:
        last = self._state.last_tick_timestamp
        self._state.last_tick_timestamp = now
        if last is None:
            return 0.0
        delta = now - last
        if delta < 0.0:
            return 0.0
        if delta > self.config.max_frame_delta_seconds:
            logger.debug("Clamped frame delta", delta_s=round(delta, 4), nominal_s=self.config.nominal_frame_seconds)
            return self.config.nominal_frame_seconds
        return delta

    def current_speed(self) -> float:
        settings = self.settings
        return self.speed_model.speed_meters_per_second(
            self.total_distance_meters,
            settings.view_mode,
            settings.zoom_level,
            settings.playback_multiplier,
        )

    def tick(self, now: float, route_id: Optional[str] = None) -> Optional[TickResult]:
        """Advance by the time since the previous tick; returns ``None`` unless playing."""

        if route_id is not None and route_id != self.path.route_id:
            raise StaleRouteError(self.path.route_id, route_id)
        if self._state.phase is not AnimationPhase.PLAYING:
            return None

        delta = self._frame_delta(float(now))
        total = self.total_distance_meters
        distance = self._state.distance_traveled_meters + self.current_speed() * delta
        distance = min(max(distance, 0.0), total)
        self._state.distance_traveled_meters = distance
        if distance >= total:
            self._state.distance_traveled_meters = total
            self._enter(AnimationPhase.COMPLETED)
            logger.info("Animation completed", route_id=self.path.route_id, total_m=round(total, 3))
        return self.snapshot()
