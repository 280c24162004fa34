#Marks routing as a package.
#Re-exports the public API (geometry, MapboxClient, matrix providers) so other
#modules import from routing without knowing internal file names.
#No business logic.

from .geometry import (
    LngLat,
    Polyline,
    PolylineError,
    bearing,
    distance_along_polyline,
    haversine_distance,
    point_to_polyline_distance,
    point_to_segment_distance,
)
from .matrix_adapter import (
    CachingTimeMatrixProvider,
    HaversineTimeMatrixProvider,
    RoutingError,
    TimeMatrixProvider,
    time_matrix_provider_from_mapbox_client,
)
from .mapbox_client import MapboxClient, MapboxError

__all__ = [
    "LngLat",
    "Polyline",
    "PolylineError",
    "bearing",
    "distance_along_polyline",
    "haversine_distance",
    "point_to_polyline_distance",
    "point_to_segment_distance",
    "CachingTimeMatrixProvider",
    "HaversineTimeMatrixProvider",
    "RoutingError",
    "TimeMatrixProvider",
    "time_matrix_provider_from_mapbox_client",
    "MapboxClient",
    "MapboxError",
]
