import os
import uuid
from datetime import date, timedelta

import numpy as np
import pandas as pd

# Center around Harare, Zimbabwe
CENTER_LAT = -17.824858
CENTER_LON = 31.053028


def generate_mock_trips(num_trips=200, num_riders=50, trips_file="sampledata/trips.csv",
                        riders_file="sampledata/riders.csv", seed=None):
    """
    Generates a dataset of carpool trips and prospective riders for the
    matching simulation.
    Drivers commute from a ring of suburbs towards the centre, and riders are
    placed along those corridors so that a fair share of them have a feasible
    trip to join.
    """
    rng = np.random.default_rng(seed)
    today = date.today()

    # 1. Generate trips: suburb (~10-20km out) -> centre (within ~3km)
    trips = []
    for trip_index in range(num_trips):
        angle = rng.uniform(0, 2 * np.pi)
        radius = rng.uniform(0.09, 0.18)
        origin_lng = CENTER_LON + radius * np.cos(angle)
        origin_lat = CENTER_LAT + radius * np.sin(angle)
        dest_lng = CENTER_LON + rng.uniform(-0.03, 0.03)
        dest_lat = CENTER_LAT + rng.uniform(-0.03, 0.03)

        trips.append({
            "trip_id": f"t_{str(trip_index + 1).zfill(5)}",
            "driver": f"driver_{str(uuid.uuid4())[:8]}",
            "origin_lng": np.round(origin_lng, 6),
            "origin_lat": np.round(origin_lat, 6),
            "dest_lng": np.round(dest_lng, 6),
            "dest_lat": np.round(dest_lat, 6),
            "seats_available": int(rng.integers(1, 5)),
            "max_detour_minutes": int(rng.choice([5, 10, 15, 20])),
            "departure_date": (today + timedelta(days=int(rng.integers(0, 7)))).isoformat(),
        })

    # 2. Generate riders: somewhere along a random trip's straight line, heading in
    riders = []
    for rider_index in range(num_riders):
        trip = trips[int(rng.integers(0, num_trips))]
        start, end = sorted(rng.uniform(0.0, 1.0, size=2))
        jitter = rng.uniform(-0.01, 0.01, size=4)

        riders.append({
            "username": f"rider_{str(rider_index + 1).zfill(4)}",
            "origin_lng": np.round(trip["origin_lng"] + start * (trip["dest_lng"] - trip["origin_lng"]) + jitter[0], 6),
            "origin_lat": np.round(trip["origin_lat"] + start * (trip["dest_lat"] - trip["origin_lat"]) + jitter[1], 6),
            "dest_lng": np.round(trip["origin_lng"] + end * (trip["dest_lng"] - trip["origin_lng"]) + jitter[2], 6),
            "dest_lat": np.round(trip["origin_lat"] + end * (trip["dest_lat"] - trip["origin_lat"]) + jitter[3], 6),
            "seats_requested": int(rng.choice([1, 1, 1, 2])),
        })

    # 3. Save to CSV
    for path in (trips_file, riders_file):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    trips_df = pd.DataFrame(trips)
    riders_df = pd.DataFrame(riders)
    trips_df.to_csv(trips_file, index=False)
    riders_df.to_csv(riders_file, index=False)
    print(f"Generated {num_trips} trips -> '{trips_file}' and {num_riders} riders -> '{riders_file}'")

    # Quick look at capacity
    print("\nSeats available distribution:")
    for seats, count in trips_df["seats_available"].value_counts().sort_index().items():
        print(f"  {seats} seats: {count} trips")

    return trips_df, riders_df


if __name__ == "__main__":
    generate_mock_trips(num_trips=200, num_riders=50)
