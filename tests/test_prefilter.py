import pytest

from trips.matching.prefilter import filter_by_seats, is_within_bounding_box, prefilter_trips
from trips.models import Trip

PADDING = 0.045
EPSILON = 1e-6


def make_trip(trip_id, origin, destination, seats_available=3):
    return Trip(
        id=trip_id,
        driver=f"driver_{trip_id}",
        origin=origin,
        destination=destination,
        seats_available=seats_available,
        max_detour_minutes=10,
        base_trip_duration=1800,
    )


@pytest.fixture
def anchors():
    # (lng, lat) driver origin / destination
    return (31.00, -17.90), (31.10, -17.80)


def test_anchor_points_are_always_inside(anchors):
    origin, destination = anchors
    for padding in (0.0, PADDING):
        assert is_within_bounding_box(origin, origin, destination, padding)
        assert is_within_bounding_box(destination, origin, destination, padding)


def test_point_on_padded_edge_is_inside(anchors):
    origin, destination = anchors
    assert is_within_bounding_box((31.10 + PADDING - EPSILON, -17.85), origin, destination, PADDING)


@pytest.mark.parametrize(
    "point",
    [
        (31.00 - PADDING - 1e-3, -17.85),  # west
        (31.10 + PADDING + 1e-3, -17.85),  # east
        (31.05, -17.90 - PADDING - 1e-3),  # south
        (31.05, -17.80 + PADDING + 1e-3),  # north
    ],
)
def test_point_outside_padding_is_excluded(anchors, point):
    origin, destination = anchors
    assert not is_within_bounding_box(point, origin, destination, PADDING)


def test_anchor_order_does_not_matter(anchors):
    origin, destination = anchors
    point = (31.05, -17.85)
    assert is_within_bounding_box(point, origin, destination) == is_within_bounding_box(point, destination, origin)


def test_prefilter_requires_both_endpoints():
    inside = make_trip("inside", (31.00, -17.90), (31.10, -17.80))
    far_away = make_trip("far", (32.00, -18.90), (32.10, -18.80))
    partial = make_trip("partial", (31.00, -17.90), (31.02, -17.88))

    rider_origin, rider_dest = (31.01, -17.89), (31.09, -17.81)
    kept = prefilter_trips(rider_origin, rider_dest, [inside, far_away, partial])

    assert [trip.id for trip in kept] == ["inside"]


def test_prefilter_preserves_order():
    trips = [make_trip(str(i), (31.00, -17.90), (31.10, -17.80)) for i in range(5)]
    kept = prefilter_trips((31.05, -17.85), (31.06, -17.84), trips)
    assert [trip.id for trip in kept] == ["0", "1", "2", "3", "4"]


def test_filter_by_seats():
    trips = [
        make_trip("full", (0.0, 0.0), (0.0, 1.0), seats_available=0),
        make_trip("one", (0.0, 0.0), (0.0, 1.0), seats_available=1),
        make_trip("three", (0.0, 0.0), (0.0, 1.0), seats_available=3),
    ]
    assert [t.id for t in filter_by_seats(trips)] == ["one", "three"]
    assert [t.id for t in filter_by_seats(trips, seats_requested=2)] == ["three"]

    with pytest.raises(ValueError):
        filter_by_seats(trips, seats_requested=0)
