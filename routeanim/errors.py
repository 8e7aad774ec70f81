"""Exceptions raised by the route animation engine."""
from __future__ import annotations


class RouteAnimationError(Exception):
    """Base class for every error raised by :mod:`routeanim`."""


class EmptyRouteError(RouteAnimationError):
    """The supplied legs do not contain a single leg with two or more points."""


class DegenerateRouteError(RouteAnimationError):
    """Every point of the route coincides, so there is no distance to travel."""


class InvalidStateTransitionError(RouteAnimationError):
    """A clock operation was called in a phase that does not allow it."""

    def __init__(self, operation: str, phase: object) -> None:
        self.operation = operation
        self.phase = phase
        super().__init__(f"Cannot {operation} while the animation is {phase}.")


class StaleRouteError(RouteAnimationError):
    """A tick referenced a route other than the one the clock was built for."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Clock is bound to route {expected[:12]} but was ticked for {actual[:12]}.")
