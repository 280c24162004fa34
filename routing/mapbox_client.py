#Purpose: The Mapbox "adapter/client".
#Sole responsibility: talk to the Mapbox Directions and Matrix APIs over HTTP
#and return normalized outputs.
#Encapsulates Mapbox-specific details:
#coordinate formatting (lng,lat)
#URL construction (/directions, /directions-matrix)
#timeouts and error handling
#parsing response JSON into our internal shape
#It should not contain matching rules or detour logic.

import logging
import os
from typing import Any, Dict, List

import requests
from dotenv import load_dotenv

from .geometry import LngLat
from .matrix_adapter import RoutingError

# Read Mapbox settings from environment
# Example in .env:
# MAPBOX_ACCESS_TOKEN=pk.xxxx
# MAPBOX_BASE_URL=https://api.mapbox.com
load_dotenv()
ACCESS_TOKEN = os.getenv("MAPBOX_ACCESS_TOKEN")
BASE_URL = os.getenv("MAPBOX_BASE_URL", "https://api.mapbox.com")

# Matrix API hard limit for the driving profile
MAX_MATRIX_COORDINATES = 25

logger = logging.getLogger(__name__)


class MapboxError(RoutingError):
    """Custom exception for Mapbox client errors."""
    pass


class MapboxClient:
    """
    Mapbox Adapter / Client

    Sole responsibility:
    - Talk to Mapbox via HTTP
    - Format internal (lng, lat) tuples for the URL path
    - Return normalized outputs
    """
    def __init__(self, profile: str = "driving", timeout: int = 5,
                 access_token: str = None, base_url: str = None):
        self.access_token = access_token or ACCESS_TOKEN
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout #seconds to wait for Mapbox before giving up
        self.profile = profile #driving, driving-traffic, walking, cycling

        if not self.access_token:
            raise ValueError("Mapbox access token not set. Please set MAPBOX_ACCESS_TOKEN in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, coords: List[LngLat]) -> str:
        """Convert list of (lng, lat) to Mapbox format 'lng,lat;lng,lat;...'"""
        return ';'.join(f"{lng},{lat}" for lng, lat in coords)

    def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(params, access_token=self.access_token)
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise MapboxError(f"Mapbox request failed: {exc}") from exc

        if data.get("code") != "Ok":
            raise MapboxError(f"Mapbox error: {data.get('code')} {data.get('message', '')}".strip())
        return data

    #----------------
    # Directions
    #----------------
    def compute_route(self, coordinates: List[LngLat]) -> Dict[str, Any]:
        """
        Calls the Directions API through the given coordinates.

        Returns:
            {
                "distance": float,  # meters
                "duration": float,  # seconds
                "geometry": [(lng, lat), ...],
            }
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/directions/v5/mapbox/{self.profile}/{self.format_coordinates(coordinates)}"
        data = self._get(url, {"geometries": "geojson", "overview": "full"})

        routes = data.get("routes") or []
        if not routes:
            raise MapboxError("No route found between origin and destination.")

        route = routes[0] #first route is the recommended one
        geometry = route.get("geometry") or {}
        return {
            "distance": route["distance"],
            "duration": route["duration"],
            "geometry": [(point[0], point[1]) for point in geometry.get("coordinates", [])],
        }

    def get_route_duration(self, origin: LngLat, destination: LngLat) -> float:
        """Driving duration in seconds from origin to destination."""
        return float(self.compute_route([origin, destination])["duration"])

    #----------------
    # Matrix (NxN travel times)
    #----------------
    def compute_table(self, coordinates: List[LngLat]) -> Dict[str, List[List[float]]]:
        """
        Calls the Matrix API for every pair of the given coordinates.

        Returns:
            {"durations": [[seconds, ...], ...]}  # durations[i][j] = i -> j, None if unroutable
        """
        if not coordinates:
            return {"durations": []}
        if len(coordinates) > MAX_MATRIX_COORDINATES:
            raise MapboxError(f"Mapbox Matrix API accepts at most {MAX_MATRIX_COORDINATES} coordinates.")

        url = f"{self.base_url}/directions-matrix/v1/mapbox/{self.profile}/{self.format_coordinates(coordinates)}"
        data = self._get(url, {"annotations": "duration"})

        durations = data.get("durations")
        if durations is None:
            raise MapboxError("Mapbox matrix response has no durations.")

        logger.debug(f"Mapbox matrix fetched for {len(coordinates)} coordinates")
        return {"durations": durations}
