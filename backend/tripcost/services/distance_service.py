"""Distance service: GraphHopper road distance with a Haversine fallback."""

import logging
import math

import httpx

from tripcost.config import Settings, settings as default_settings
from tripcost.exceptions import RoutingError
from tripcost.schemas.cost import CityCoordinate

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
ROAD_DISTANCE_FACTOR = 1.3


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def estimated_road_distance_km(origin: CityCoordinate, destination: CityCoordinate) -> float:
    """Haversine distance scaled to approximate road distance, rounded to 2 decimals."""
    straight = haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
    road = round(straight * ROAD_DISTANCE_FACTOR, 2)
    logger.debug(f"Haversine distance: {straight:.2f} km straight-line, {road} km estimated road")
    return road


class DistanceService:
    """Computes travel distance between coordinates."""

    def __init__(self, settings: Settings | None = None, http_client: httpx.AsyncClient | None = None):
        self.settings = settings or default_settings
        self._client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.routing_timeout)
        return self._client

    async def route_distance_km(self, origin: CityCoordinate, destination: CityCoordinate) -> float:
        """Road distance from GraphHopper. Raises RoutingError on any failure or empty route."""
        if not self.settings.graphhopper_api_key:
            raise RoutingError("GRAPHHOPPER_API_KEY not set")

        client = await self._get_client()
        params = [
            ("point", f"{origin.latitude},{origin.longitude}"),
            ("point", f"{destination.latitude},{destination.longitude}"),
            ("profile", "car"),
            ("locale", "en"),
            ("points_encoded", "false"),
            ("key", self.settings.graphhopper_api_key),
        ]
        try:
            resp = await client.get(self.settings.graphhopper_base_url, params=params)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RoutingError(f"GraphHopper request failed: {e}") from e

        paths = body.get("paths") if isinstance(body, dict) else None
        if not paths or not isinstance(paths, list):
            raise RoutingError("GraphHopper returned no route")

        try:
            meters = float(paths[0]["distance"])
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingError("GraphHopper route has no distance") from e
        if not math.isfinite(meters) or meters < 0:
            raise RoutingError(f"GraphHopper returned an invalid distance: {meters}")

        return round(meters / 1000, 2)

    async def distance_km(self, origin: CityCoordinate, destination: CityCoordinate) -> float:
        """Routing service first; a single Haversine fallback on any routing error."""
        try:
            distance = await self.route_distance_km(origin, destination)
            logger.debug(f"GraphHopper distance: {distance} km")
            return distance
        except RoutingError as e:
            logger.warning(f"{e}, falling back to Haversine calculation")
            return estimated_road_distance_km(origin, destination)

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
