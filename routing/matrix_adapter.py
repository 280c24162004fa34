from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from .geometry import LngLat, haversine_distance

# Provide a function that returns an NxN duration matrix (seconds)
# for the given list of coordinates in the same order.
# Implementations raise RoutingError when the lookup fails.
TimeMatrixProvider = Callable[[List[LngLat]], List[List[float]]]


class RoutingError(Exception):
    """A travel-time lookup could not be completed for a coordinate set."""
    pass


class CachingTimeMatrixProvider:
    """
    Adapts routing.mapbox_client.MapboxClient into a time-matrix provider
    that caches pairwise durations and supports bulk prefetching.

    Fails closed: an unroutable pair (null duration) raises RoutingError
    instead of being silently treated as zero or infinite.
    """
    def __init__(self, client):
        self.client = client
        self._cache: Dict[Tuple[float, float, float, float], float] = {}

    def _fetch(self, coordinates: List[LngLat]) -> List[List[float]]:
        table = self.client.compute_table(coordinates)
        durations = table.get("durations", [])
        if len(durations) != len(coordinates):
            raise RoutingError("invalid time matrix (row count)")

        matrix: List[List[float]] = []
        for src_idx, src in enumerate(coordinates):
            row = durations[src_idx]
            if len(row) != len(coordinates):
                raise RoutingError("invalid time matrix (col count)")
            values = []
            for dest_idx, dest in enumerate(coordinates):
                duration = row[dest_idx]
                if duration is None:
                    raise RoutingError(f"no route between {src} and {dest}")
                value = float(duration)
                self._cache[(src[0], src[1], dest[0], dest[1])] = value
                values.append(value)
            matrix.append(values)
        return matrix

    def prefetch(self, coordinates: List[LngLat]) -> None:
        """
        Fetch the whole NxN table for a list of coordinates once so later
        lookups over any subset are served from memory.
        """
        if not coordinates:
            return
        self._fetch(coordinates)

    def __call__(self, coordinates: List[LngLat]) -> List[List[float]]:
        num_coordinates = len(coordinates)
        if num_coordinates == 0:
            return []

        matrix = [[0.0 for _ in range(num_coordinates)] for _ in range(num_coordinates)]
        for src_idx, src in enumerate(coordinates):
            for dest_idx, dest in enumerate(coordinates):
                key = (src[0], src[1], dest[0], dest[1])
                if key not in self._cache:
                    # one miss is enough to refetch the full table for this set
                    return self._fetch(coordinates)
                matrix[src_idx][dest_idx] = self._cache[key]
        return matrix

    def clear(self) -> None:
        self._cache.clear()


class HaversineTimeMatrixProvider:
    """
    Offline estimate: straight-line distance at a constant speed, stretched by
    a detour factor to approximate the road network. Useful for simulations
    and tests where no routing service is reachable.
    """
    def __init__(self, speed_kmh: float = 40.0, detour_factor: float = 1.3):
        if speed_kmh <= 0:
            raise ValueError("speed_kmh must be > 0")
        if detour_factor < 1.0:
            raise ValueError("detour_factor must be >= 1.0")
        self.speed_kmh = speed_kmh
        self.detour_factor = detour_factor

    def __call__(self, coordinates: List[LngLat]) -> List[List[float]]:
        seconds_per_km = 3600.0 / self.speed_kmh
        return [
            [haversine_distance(src, dest) * self.detour_factor * seconds_per_km for dest in coordinates]
            for src in coordinates
        ]


def time_matrix_provider_from_mapbox_client(client) -> CachingTimeMatrixProvider:
    return CachingTimeMatrixProvider(client)
