import csv
import logging
import os
import time
from datetime import date
from typing import List

from routing.geometry import haversine_distance
from routing.mapbox_client import ACCESS_TOKEN, MapboxClient
from routing.matrix_adapter import HaversineTimeMatrixProvider, RoutingError, time_matrix_provider_from_mapbox_client
from trips.lifecycle import TripStateError, accept_request, create_trip, reject_request, request_to_join
from trips.matching.engine import browse_trips, search_trips
from trips.matching.feasibility import TooManyRidersError
from trips.matching.policy import default_policy
from trips.models import RiderSegment, Trip

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class OfflineRoutingClient:
    """
    Stands in for MapboxClient when no access token is configured:
    straight-line geometry, haversine-based duration.
    """
    def __init__(self, provider: HaversineTimeMatrixProvider):
        self.provider = provider

    def compute_route(self, coordinates):
        origin, destination = coordinates[0], coordinates[-1]
        return {
            "distance": haversine_distance(origin, destination) * 1000,
            "duration": self.provider([origin, destination])[0][1],
            "geometry": [origin, destination],
        }


def load_trips(routing_client, filepath="sampledata/trips.csv") -> List[Trip]:
    trips = []
    absolute_path = os.path.join(BASE_DIR, filepath)
    with open(absolute_path, 'r') as file:
        reader = csv.DictReader(file)
        for row in reader:
            departure = date.fromisoformat(row['departure_date'])
            trip = create_trip(
                row['driver'],
                (float(row['origin_lng']), float(row['origin_lat'])),
                (float(row['dest_lng']), float(row['dest_lat'])),
                seats_available=int(row['seats_available']),
                max_detour_minutes=float(row['max_detour_minutes']),
                routing_client=routing_client,
                departure_date=departure,
                today=min(departure, date.today()),
            )
            trip.id = row['trip_id']
            trips.append(trip)
    return trips


def load_riders(filepath="sampledata/riders.csv") -> List[RiderSegment]:
    riders = []
    absolute_path = os.path.join(BASE_DIR, filepath)
    with open(absolute_path, 'r') as file:
        reader = csv.DictReader(file)
        for row in reader:
            riders.append(
                RiderSegment(
                    username=row['username'],
                    pickup=(float(row['origin_lng']), float(row['origin_lat'])),
                    dropoff=(float(row['dest_lng']), float(row['dest_lat'])),
                    seats_requested=int(row['seats_requested']),
                )
            )
    return riders


def join_trip(trip: Trip, rider: RiderSegment, matrix_provider, policy) -> bool:
    """
    Request a seat and accept it straight away. A failed join is logged and
    leaves no pending request behind, so the simulation can move on.
    """
    try:
        request_to_join(trip, rider)
        accept_request(trip, rider.username, matrix_provider, policy=policy)
    except (RoutingError, TooManyRidersError, TripStateError) as exc:
        logger.warning(f"Could not add {rider.username} to trip {trip.id}: {exc}")
        if trip.find_request(rider.username) is not None:
            reject_request(trip, rider.username)
        return False
    return True


def run_simulation():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print("=== STARTING END-TO-END MATCHING SIMULATION ===")

    # 1. Configure routing: Mapbox if a token is set, offline estimate otherwise
    if ACCESS_TOKEN:
        routing_client = MapboxClient()
        matrix_provider = time_matrix_provider_from_mapbox_client(routing_client)
        print("Using Mapbox Directions/Matrix APIs.")
    else:
        matrix_provider = HaversineTimeMatrixProvider(speed_kmh=40.0)
        routing_client = OfflineRoutingClient(matrix_provider)
        print("MAPBOX_ACCESS_TOKEN not set - using offline haversine estimates.")

    # 2. Load Data
    trips = load_trips(routing_client)
    riders = load_riders()
    print(f"Loaded {len(trips)} Trips and {len(riders)} Riders.\n")

    policy = default_policy()
    output_path = os.path.join(BASE_DIR, "matching_results.csv")

    matched = 0
    start_time = time.time()
    with open(output_path, "w", newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["username", "browse_matches", "feasible_trips", "skipped_trips",
                         "joined_trip", "route_duration_s", "added_s"])

        for rider in riders:
            browsed = browse_trips(rider.pickup, rider.dropoff, trips,
                                   seats_requested=rider.seats_requested, policy=policy)
            result = search_trips(rider.pickup, rider.dropoff, trips,
                                  time_matrix_provider=matrix_provider,
                                  seats_requested=rider.seats_requested, policy=policy)

            if not result.trips:
                writer.writerow([rider.username, len(browsed), 0, len(result.skipped_trip_ids), "NONE", "", ""])
                print(f"[NO MATCH] {rider.username}")
                continue

            # Simulation: the rider asks the first feasible trip and the driver accepts
            trip = result.trips[0]
            if not join_trip(trip, rider, matrix_provider, policy):
                writer.writerow([rider.username, len(browsed), len(result.trips), len(result.skipped_trip_ids),
                                 "FAILED", "", ""])
                print(f"[FAILED] {rider.username} -> {trip.id}")
                continue
            matched += 1

            added = trip.current_route_duration - trip.base_trip_duration
            writer.writerow([rider.username, len(browsed), len(result.trips), len(result.skipped_trip_ids),
                             trip.id, round(trip.current_route_duration), round(added)])
            print(f"[MATCHED] {rider.username} -> {trip.id} (+{added:.0f}s, {trip.seats_available} seats left)")

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Riders matched: {matched} / {len(riders)} in {time.time() - start_time:.2f}s")
    print(f"Results written to '{output_path}'.")


if __name__ == "__main__":
    run_simulation()
