"""Tests for camera commands."""

import pytest

from routeanim.camera import BoundsCommand, CameraController, FollowCommand, marker_scale, zoom_for_route_length
from routeanim.route import GeoPoint, ViewMode


class TestZoomForRouteLength:
    """Test follow-mode zoom buckets."""

    @pytest.mark.parametrize(
        "total_m,expected",
        [(1_000.0, 12.0), (49_999.0, 12.0), (100_000.0, 11.0), (499_999.0, 11.0), (5_000_000.0, 10.0)],
    )
    def test_buckets(self, total_m, expected):
        """Should zoom out further for longer routes."""
        assert zoom_for_route_length(total_m) == expected


class TestMarkerScale:
    """Test marker sizing."""

    def test_base_zoom_is_full_size(self):
        """Should draw the marker at full size at the base zoom."""
        assert marker_scale(13.0) == 1.0

    def test_is_clamped(self):
        """Should stay within the configured scale range."""
        assert marker_scale(30.0) == 1.2
        assert marker_scale(0.0) == 0.5


class TestCameraController:
    """Test follow and whole-route camera behaviour."""

    def test_follow_centres_on_position(self, two_leg_path):
        """Should centre on the marker with the route's fixed zoom."""
        camera = CameraController(two_leg_path, ViewMode.FOLLOW)
        position = GeoPoint(0.0, 0.003)

        command = camera.command_for(position)

        assert command == FollowCommand(center=position, zoom=12.0)
        assert camera.command_for(position) == command

    def test_whole_route_emits_bounds_once(self, two_leg_path):
        """Should emit the route bounds once and nothing on later ticks."""
        camera = CameraController(two_leg_path, ViewMode.WHOLE_ROUTE)

        first = camera.command_for(two_leg_path.points[0])
        second = camera.command_for(two_leg_path.points[3])

        assert isinstance(first, BoundsCommand)
        assert first.padding_px == 100
        assert first.bounds.west == two_leg_path.points[0].lng
        assert first.bounds.east == two_leg_path.points[-1].lng
        assert second is None

    def test_mode_switch_reframes_at_current_position(self, two_leg_path):
        """Should re-derive a command for the current position on every mode switch."""
        camera = CameraController(two_leg_path, ViewMode.WHOLE_ROUTE)
        camera.command_for(two_leg_path.points[0])
        current = two_leg_path.points[5]

        follow = camera.set_view_mode(ViewMode.FOLLOW, current)
        whole = camera.set_view_mode(ViewMode.WHOLE_ROUTE, current)

        assert follow == FollowCommand(center=current, zoom=12.0)
        assert isinstance(whole, BoundsCommand)
        assert camera.view_mode is ViewMode.WHOLE_ROUTE

    def test_reset_re_emits_bounds(self, two_leg_path):
        """Should emit the bounds again after a reset."""
        camera = CameraController(two_leg_path, ViewMode.WHOLE_ROUTE)
        camera.command_for(two_leg_path.points[0])

        camera.reset()

        assert isinstance(camera.command_for(two_leg_path.points[0]), BoundsCommand)
