"""Behaviour tests for the renderer-facing RouteAnimator."""

import pytest

from routeanim.camera import BoundsCommand, FollowCommand
from routeanim.clock import AnimationPhase
from routeanim.engine import RouteAnimator
from routeanim.errors import EmptyRouteError, InvalidStateTransitionError, StaleRouteError
from routeanim.route import GeoPoint, PlaybackMultiplier, RawLeg, TransportMode, ViewMode


@pytest.fixture
def animator(two_leg_legs) -> RouteAnimator:
    animator = RouteAnimator()
    animator.load_route(two_leg_legs)
    return animator


class TestLoadRoute:
    """Test route lifecycle."""

    def test_controls_require_a_route(self):
        """Should fail fast when controls are used before a route is loaded."""
        animator = RouteAnimator()

        with pytest.raises(InvalidStateTransitionError):
            animator.play()
        assert animator.tick(0.0) is None
        assert animator.phase is AnimationPhase.IDLE

    def test_listener_added_before_the_first_route(self, equator_point):
        """Should keep listeners that subscribe before any route is loaded."""
        animator = RouteAnimator()
        frames = []
        animator.add_listener(frames.append)

        animator.load_route([RawLeg("walk", [equator_point(0.0), equator_point(1000.0)])])
        frame = animator.play()

        assert frames == [frame]

    def test_identical_content_keeps_the_animation(self, animator, equator_point):
        """Should compare routes by content and keep playing an unchanged route."""
        path = animator.path
        animator.play()
        animator.tick(0.0)
        animator.tick(0.1)
        same_route = [
            RawLeg("walk", [equator_point(0.0), equator_point(300.0), equator_point(600.0)]),
            RawLeg("car", [equator_point(600.0), equator_point(1000.0)]),
        ]

        assert animator.load_route(same_route) is path
        assert animator.phase is AnimationPhase.PLAYING
        assert animator.progress_percent > 0.0

    def test_new_route_stops_the_old_animation(self, animator, equator_point):
        """Should stop the running clock and release listeners before swapping routes."""
        frames = []
        animator.add_listener(frames.append)
        animator.play()
        old_path = animator.path

        new_path = animator.load_route([RawLeg("bike", [equator_point(0.0), equator_point(250.0)])])
        animator.play()

        assert new_path is not old_path
        assert new_path.route_id != old_path.route_id
        assert len(frames) == 1
        assert animator.phase is AnimationPhase.PLAYING

    def test_failed_load_leaves_no_route(self, animator):
        """Should surface sampling errors and not keep animating a stale route."""
        with pytest.raises(EmptyRouteError):
            animator.load_route([])

        assert animator.path is None
        with pytest.raises(InvalidStateTransitionError):
            animator.play()


class TestFrames:
    """Test the frames emitted to the renderer."""

    def test_play_emits_the_start_frame(self, animator):
        """Should publish the start position, mode and camera as soon as playback starts."""
        frames = []
        animator.add_listener(frames.append)

        frame = animator.play()

        assert frames == [frame]
        assert frame.position == animator.path.points[0]
        assert frame.progress_percent == 0.0
        assert frame.active_mode is TransportMode.WALK
        assert frame.mode_changed is True
        assert frame.camera_command == FollowCommand(center=frame.position, zoom=12.0)
        assert frame.heading_degrees == pytest.approx(90.0)
        assert frame.marker_scale == pytest.approx(2.0 ** (2 * 0.15))
        assert frame.phase is AnimationPhase.PLAYING

    def test_tick_frames_follow_the_marker(self, animator):
        """Should emit each tick's position with a follow camera."""
        animator.play()
        animator.tick(0.0)

        frame = animator.tick(0.1)

        assert frame.distance_traveled_meters == pytest.approx(6.0)
        assert frame.camera_command == FollowCommand(center=frame.position, zoom=12.0)
        assert frame.mode_changed is False

    def test_mode_change_is_flagged_once(self, animator):
        """Should flag the walk-to-car transition exactly once across a full playback."""
        animator.play()
        frames = []
        now = 0.0
        while animator.phase is AnimationPhase.PLAYING:
            frame = animator.tick(now)
            frames.append(frame)
            now += 0.05

        changes = [frame for frame in frames if frame.mode_changed]

        assert len(changes) == 1
        assert changes[0].active_mode is TransportMode.CAR
        assert frames[-1].phase is AnimationPhase.COMPLETED
        assert frames[-1].position == animator.path.points[-1]

    def test_tick_rejects_a_stale_route_token(self, animator):
        """Should refuse ticks the host scheduled for a previously loaded route."""
        animator.play()
        animator.tick(0.0, route_id=animator.path.route_id)

        with pytest.raises(StaleRouteError):
            animator.tick(0.1, route_id="sha256:previous-route")
        assert animator.tick(0.1, route_id=animator.path.route_id).distance_traveled_meters > 0.0

    def test_seek_publishes_synchronously(self, animator):
        """Should push the new position to listeners without waiting for a tick."""
        frames = []
        animator.add_listener(frames.append)
        animator.play()

        frame = animator.seek(80.0)

        assert frames[-1] is frame
        assert frame.progress_percent == pytest.approx(80.0)
        assert frame.active_mode is TransportMode.CAR
        assert frame.phase is AnimationPhase.PAUSED

    def test_seek_to_clicked_point(self, animator, lng_east):
        """Should seek to the vertex nearest a click on the route."""
        animator.play()

        frame = animator.seek_to_point(GeoPoint(0.0001, lng_east(301.0)))

        assert frame.progress_percent == pytest.approx(30.0, abs=1e-6)


class TestViewMode:
    """Test camera mode switches."""

    def test_switch_to_whole_route_reframes_immediately(self, animator):
        """Should emit route bounds at the current position, then stop re-emitting them."""
        animator.play()
        animator.tick(0.0)
        before = animator.tick(0.5)

        switched = animator.set_view_mode(ViewMode.WHOLE_ROUTE)
        after = animator.tick(0.6)

        assert isinstance(switched.camera_command, BoundsCommand)
        assert switched.position == before.position
        assert after.camera_command is None

    def test_switch_back_to_follow_centres_on_current_position(self, animator):
        """Should not jump the camera back to the route start."""
        animator.set_view_mode(ViewMode.WHOLE_ROUTE)
        animator.play()
        animator.seek(50.0)

        switched = animator.set_view_mode(ViewMode.FOLLOW)

        assert isinstance(switched.camera_command, FollowCommand)
        assert switched.camera_command.center == switched.position
        assert switched.progress_percent == pytest.approx(50.0)

    def test_switch_while_idle_emits_nothing(self, animator):
        """Should just record the mode when nothing is animating."""
        assert animator.set_view_mode(ViewMode.WHOLE_ROUTE) is None
        assert animator.settings.view_mode is ViewMode.WHOLE_ROUTE

    def test_whole_route_speed_is_used(self, animator):
        """Should move at the whole-route base speed in whole-route mode."""
        animator.set_view_mode(ViewMode.WHOLE_ROUTE)
        animator.set_playback_multiplier(PlaybackMultiplier.FAST)
        animator.play()
        animator.tick(0.0)

        frame = animator.tick(0.1)

        assert frame.distance_traveled_meters == pytest.approx(150.0 * 2.0 * 0.1)

    def test_zoom_level_drives_marker_scale(self, animator):
        """Should size the marker from the host-supplied zoom."""
        animator.set_zoom_level(30.0)

        frame = animator.play()

        assert frame.marker_scale == 1.2


class TestStop:
    """Test cancellation."""

    def test_stop_is_idempotent(self, animator):
        """Should return to Idle and tolerate repeated calls."""
        animator.play()
        animator.tick(0.0)
        animator.tick(0.1)

        animator.stop()
        animator.stop()

        assert animator.phase is AnimationPhase.IDLE
        assert animator.progress_percent == 0.0

    def test_stop_releases_listeners(self, animator):
        """Should not call listeners registered for a previous animation."""
        frames = []
        animator.add_listener(frames.append)
        animator.play()
        animator.stop()

        animator.play()

        assert len(frames) == 1

    def test_stop_from_inside_a_listener(self, animator):
        """Should allow a listener to stop the animation mid-frame."""
        later = []

        def stopper(frame):
            if frame.progress_percent > 0.0:
                animator.stop()

        animator.add_listener(stopper)
        animator.add_listener(later.append)
        animator.play()
        animator.tick(0.0)

        animator.tick(0.1)

        assert animator.phase is AnimationPhase.IDLE
        assert all(frame.progress_percent == 0.0 for frame in later)
        assert animator.tick(0.2) is None

    def test_remove_listener(self, animator):
        """Should stop notifying a listener once it is removed."""
        frames = []
        remove = animator.add_listener(frames.append)

        remove()
        animator.play()

        assert frames == []
