import pytest

from routing.geometry import point_to_polyline_distance
from trips.matching.route_match import find_matching_trips, is_pickup_before_destination, match_route
from trips.models import Trip


def make_trip(route_geometry=None, origin=(0.0, 0.0), destination=(0.0, 1.0), trip_id="t1"):
    return Trip(
        id=trip_id,
        driver="driver",
        origin=origin,
        destination=destination,
        seats_available=3,
        max_detour_minutes=10,
        base_trip_duration=3600,
        route_geometry=route_geometry,
    )


@pytest.fixture
def north_trip():
    # straight north along the prime meridian, 1 degree
    return make_trip(route_geometry=[(0.0, 0.0), (0.0, 0.25), (0.0, 0.5), (0.0, 0.75), (0.0, 1.0)])


def test_rider_on_route_same_direction(north_trip):
    assert match_route((0.005, 0.2), (0.005, 0.7), north_trip)


def test_direction_mismatch_rejected_regardless_of_proximity(north_trip):
    # rider heading nearly due south (~170 deg), right on top of the route
    assert not match_route((0.0, 0.7), (0.035, 0.5), north_trip)


def test_pickup_too_far_from_route(north_trip):
    # ~5.5 km east of the route
    assert not match_route((0.05, 0.2), (0.0, 0.7), north_trip)


def test_destination_too_far_from_route(north_trip):
    assert not match_route((0.0, 0.2), (0.05, 0.7), north_trip)


def test_threshold_is_configurable(north_trip):
    assert match_route((0.03, 0.2), (0.03, 0.7), north_trip, threshold_km=5)
    assert not match_route((0.03, 0.2), (0.03, 0.7), north_trip, threshold_km=2)


def test_ordering_rejects_backwards_projection():
    # Route doubles back: north to lat 1, then back south along lng 0.01.
    # Overall trip bearing is east, so a north-east rider passes the
    # direction check, but both of their points project onto the return leg
    # where the dropoff comes before the pickup.
    route = [(0.0, 0.0), (0.0, 1.0), (0.01, 1.0), (0.01, 0.0)]
    trip = make_trip(route_geometry=route, origin=(0.0, 0.0), destination=(0.01, 0.0))

    rider_origin, rider_dest = (0.011, 0.3), (0.015, 0.304)
    pickup = point_to_polyline_distance(rider_origin, route)
    destination = point_to_polyline_distance(rider_dest, route)

    assert pickup.distance_km <= 2 and destination.distance_km <= 2
    assert not is_pickup_before_destination(route, pickup, destination)
    assert not match_route(rider_origin, rider_dest, trip)


def test_pickup_before_destination_on_same_segment():
    route = [(0.0, 0.0), (0.0, 1.0)]
    pickup = point_to_polyline_distance((0.0, 0.2), route)
    destination = point_to_polyline_distance((0.0, 0.6), route)

    assert is_pickup_before_destination(route, pickup, destination)
    assert not is_pickup_before_destination(route, destination, pickup)
    # same point is not "before"
    assert not is_pickup_before_destination(route, pickup, pickup)


@pytest.mark.parametrize("geometry", [None, [], [(0.0, 0.0)]])
def test_legacy_trip_uses_endpoint_distance(geometry):
    trip = make_trip(route_geometry=geometry)

    assert match_route((0.01, 0.0), (0.0, 0.99), trip)
    # close to the route's middle but far from both endpoints
    assert not match_route((0.0, 0.4), (0.0, 0.6), trip)


def test_find_matching_trips_filters_in_order(north_trip):
    other = make_trip(route_geometry=[(1.0, 0.0), (1.0, 1.0)], origin=(1.0, 0.0), destination=(1.0, 1.0), trip_id="t2")
    legacy = make_trip(trip_id="t3")

    matched = find_matching_trips((0.0, 0.01), (0.0, 0.99), [north_trip, other, legacy])
    assert [trip.id for trip in matched] == ["t1", "t3"]
