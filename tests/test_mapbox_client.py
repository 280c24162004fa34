import pytest
import requests

from routing import mapbox_client
from routing.mapbox_client import MAX_MATRIX_COORDINATES, MapboxClient, MapboxError
from routing.matrix_adapter import RoutingError, time_matrix_provider_from_mapbox_client
from trips.matching.engine import search_trips
from trips.matching.policy import MatchingPolicy


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def json(self):
        return self.payload


@pytest.fixture
def client():
    return MapboxClient(access_token="pk.test", base_url="https://mapbox.example/")


@pytest.fixture
def fake_get(monkeypatch):
    """Replace requests.get; returns the list of recorded calls."""
    calls = []
    responses = []

    def _get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return FakeResponse(response)

    monkeypatch.setattr(mapbox_client.requests, "get", _get)
    return calls, responses


def test_requires_access_token(monkeypatch):
    monkeypatch.setattr(mapbox_client, "ACCESS_TOKEN", None)
    with pytest.raises(ValueError):
        MapboxClient()


def test_format_coordinates(client):
    assert client.format_coordinates([(31.05, -17.82), (31.1, -17.9)]) == "31.05,-17.82;31.1,-17.9"


def test_compute_route(client, fake_get):
    calls, responses = fake_get
    responses.append({
        "code": "Ok",
        "routes": [{
            "distance": 12000.5,
            "duration": 900.2,
            "geometry": {"type": "LineString", "coordinates": [[31.05, -17.82], [31.07, -17.85], [31.1, -17.9]]},
        }],
    })

    route = client.compute_route([(31.05, -17.82), (31.1, -17.9)])

    assert route["duration"] == 900.2
    assert route["distance"] == 12000.5
    assert route["geometry"] == [(31.05, -17.82), (31.07, -17.85), (31.1, -17.9)]
    assert calls[0]["url"] == "https://mapbox.example/directions/v5/mapbox/driving/31.05,-17.82;31.1,-17.9"
    assert calls[0]["params"]["access_token"] == "pk.test"
    assert calls[0]["params"]["geometries"] == "geojson"
    assert calls[0]["timeout"] == 5


def test_get_route_duration(client, fake_get):
    _, responses = fake_get
    responses.append({"code": "Ok", "routes": [{"distance": 1.0, "duration": 42, "geometry": {}}]})
    assert client.get_route_duration((0.0, 0.0), (0.0, 1.0)) == 42.0


def test_compute_route_needs_two_points(client):
    with pytest.raises(ValueError):
        client.compute_route([(0.0, 0.0)])


def test_no_route_found(client, fake_get):
    _, responses = fake_get
    responses.append({"code": "Ok", "routes": []})
    with pytest.raises(MapboxError):
        client.compute_route([(0.0, 0.0), (0.0, 1.0)])


def test_compute_table(client, fake_get):
    calls, responses = fake_get
    responses.append({"code": "Ok", "durations": [[0, 10], [12, 0]]})

    table = client.compute_table([(0.0, 0.0), (0.0, 1.0)])

    assert table == {"durations": [[0, 10], [12, 0]]}
    assert calls[0]["url"] == "https://mapbox.example/directions-matrix/v1/mapbox/driving/0.0,0.0;0.0,1.0"
    assert calls[0]["params"]["annotations"] == "duration"


def test_compute_table_empty(client, fake_get):
    calls, _ = fake_get
    assert client.compute_table([]) == {"durations": []}
    assert calls == []


def test_compute_table_coordinate_limit(client, fake_get):
    calls, _ = fake_get
    too_many = [(0.0, i * 0.01) for i in range(MAX_MATRIX_COORDINATES + 1)]
    with pytest.raises(MapboxError):
        client.compute_table(too_many)
    assert calls == []


def test_oversized_trip_is_skipped_by_search(client, fake_get, make_trip, rider):
    calls, responses = fake_get
    # 11 passengers + 1 prospective rider -> 26 coordinates
    passengers = [rider(f"r{i}", (0.0, 0.1 + i * 0.01), (0.0, 0.5 + i * 0.01)) for i in range(11)]
    trips = [make_trip("crowded", passengers=passengers), make_trip("empty")]
    provider = time_matrix_provider_from_mapbox_client(client)
    responses.append({"code": "Ok", "durations": [[0, 3600, 1800, 2160], [3600, 0, 1800, 1440],
                                                  [1800, 1800, 0, 360], [2160, 1440, 360, 0]]})

    result = search_trips((0.0, 0.5), (0.0, 0.6), trips, time_matrix_provider=provider,
                          policy=MatchingPolicy(max_riders=12))

    assert result.skipped_trip_ids == ["crowded"]
    assert [t.id for t in result.trips] == ["empty"]
    assert len(calls) == 1


def test_api_error_code(client, fake_get):
    _, responses = fake_get
    responses.append({"code": "InvalidInput", "message": "Coordinate is invalid"})

    with pytest.raises(MapboxError) as exc_info:
        client.compute_table([(0.0, 0.0), (0.0, 1.0)])
    assert "InvalidInput" in str(exc_info.value)


def test_transport_error_is_routing_error(client, fake_get):
    _, responses = fake_get
    responses.append(requests.ConnectionError("connection refused"))

    with pytest.raises(RoutingError):
        client.compute_table([(0.0, 0.0), (0.0, 1.0)])
