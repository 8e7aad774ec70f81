import math
from typing import Callable, List

import pytest

from routeanim.geometry import EARTH_RADIUS_M
from routeanim.logging import configure_logging
from routeanim.route import DensePath, GeoPoint, RawLeg, TransportMode
from routeanim.sampler import sample


def pytest_configure(config: pytest.Config) -> None:  # noqa: ARG001
    """Configure pytest with our structured logging."""
    configure_logging(level="INFO", format_json=False)


def _lng_east(meters: float) -> float:
    return math.degrees(meters / EARTH_RADIUS_M)


@pytest.fixture
def lng_east() -> Callable[[float], float]:
    """Longitude reached by travelling ``meters`` east along the equator from 0°."""
    return _lng_east


@pytest.fixture
def equator_point(lng_east) -> Callable[[float], GeoPoint]:
    def build(meters: float) -> GeoPoint:
        return GeoPoint(lat=0.0, lng=lng_east(meters))

    return build


@pytest.fixture
def two_leg_legs(equator_point) -> List[RawLeg]:
    """Walk 0-600 m, then drive 600-1000 m, along the equator."""
    return [
        RawLeg(TransportMode.WALK, [equator_point(0.0), equator_point(300.0), equator_point(600.0)]),
        RawLeg(TransportMode.CAR, [equator_point(600.0), equator_point(1000.0)]),
    ]


@pytest.fixture
def two_leg_path(two_leg_legs) -> DensePath:
    return sample(two_leg_legs)


@pytest.fixture
def european_legs() -> List[RawLeg]:
    """A non-axis-aligned multi-leg trip with curvature."""
    return [
        RawLeg("car", [GeoPoint(48.8566, 2.3522), GeoPoint(49.6116, 6.1319), GeoPoint(50.1109, 8.6821)]),
        RawLeg("bus", [GeoPoint(50.1109, 8.6821), GeoPoint(51.3397, 12.3731), GeoPoint(52.5200, 13.4050)]),
        RawLeg("bike", [GeoPoint(52.5200, 13.4050), GeoPoint(52.5300, 13.4200)]),
    ]
