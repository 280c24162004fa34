import pytest

from routing.matrix_adapter import RoutingError
from trips.models import RiderSegment, Trip


class ManhattanTimeMatrix:
    """
    Deterministic stub: |dlng| + |dlat| degrees, 3600 seconds per degree.
    Records every coordinate list it is asked for.
    """
    def __init__(self, seconds_per_degree=3600.0, failing_points=()):
        self.seconds_per_degree = seconds_per_degree
        self.failing_points = set(failing_points)
        self.calls = []

    def __call__(self, coordinates):
        self.calls.append(list(coordinates))
        if self.failing_points.intersection(coordinates):
            raise RoutingError("stub lookup failure")
        return [
            [(abs(a[0] - b[0]) + abs(a[1] - b[1])) * self.seconds_per_degree for b in coordinates]
            for a in coordinates
        ]


class FixedTimeMatrix:
    """Stub that returns the same prepared matrix for any coordinate list."""
    def __init__(self, matrix):
        self.matrix = matrix
        self.calls = 0

    def __call__(self, coordinates):
        self.calls += 1
        return self.matrix


def _unreachable(coordinates):
    raise AssertionError("time matrix provider must not be called")


@pytest.fixture
def manhattan_provider():
    return ManhattanTimeMatrix()


@pytest.fixture
def provider_factory():
    return ManhattanTimeMatrix


@pytest.fixture
def fixed_provider_factory():
    return FixedTimeMatrix


@pytest.fixture
def unreachable_provider():
    return _unreachable


@pytest.fixture
def make_trip():
    """
    Factory for a north-bound trip (0,0) -> (0,1): one degree, 3600 s with the
    Manhattan stub, 10 minutes of detour allowed.
    """
    def factory(trip_id="trip_1", passengers=None, **overrides):
        fields = dict(
            id=trip_id,
            driver=f"driver_{trip_id}",
            origin=(0.0, 0.0),
            destination=(0.0, 1.0),
            seats_available=3,
            max_detour_minutes=10,
            base_trip_duration=3600.0,
            current_route_duration=3600.0,
            passengers=list(passengers or []),
        )
        fields.update(overrides)
        return Trip(**fields)
    return factory


@pytest.fixture
def rider():
    def factory(username, pickup, dropoff, seats_requested=1):
        return RiderSegment(username=username, pickup=pickup, dropoff=dropoff, seats_requested=seats_requested)
    return factory
