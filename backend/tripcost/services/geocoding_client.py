"""OpenCage geocoding client: forward (city → coordinates) and reverse (→ country) lookups."""

import logging

import httpx

from tripcost.config import Settings, settings as default_settings
from tripcost.exceptions import ResolutionError
from tripcost.schemas.cost import CityCoordinate

logger = logging.getLogger(__name__)


class GeocodingClient:
    """Adapter for the OpenCage geocoding API."""

    def __init__(self, settings: Settings | None = None, http_client: httpx.AsyncClient | None = None):
        self.settings = settings or default_settings
        self._client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.opencage_api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.geocoding_timeout)
        return self._client

    async def _search(self, query: str) -> list[dict]:
        client = await self._get_client()
        resp = await client.get(
            self.settings.opencage_base_url,
            params={"q": query, "key": self.settings.opencage_api_key, "limit": 1},
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError(f"unexpected OpenCage payload: {type(body).__name__}")
        results = body.get("results")
        return results if isinstance(results, list) else []

    async def geocode(self, city: str) -> CityCoordinate:
        """Resolve a free-text city name. Raises ResolutionError on no result or failure."""
        if not self.is_configured:
            raise ResolutionError(
                f"City '{city}' is not in the bundled datasets and OPENCAGE_API_KEY is not set"
            )

        logger.info(f"City '{city}' not bundled, querying OpenCage")
        try:
            results = await self._search(city)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error geocoding city {city}: {e}")
            raise ResolutionError(f"Failed to geocode city: {city}") from e

        if not results:
            raise ResolutionError(f"No results found for city: {city}")

        try:
            geometry = results[0]["geometry"]
            return CityCoordinate(
                name=city.strip(),
                latitude=float(geometry["lat"]),
                longitude=float(geometry["lng"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ResolutionError(f"Malformed geocoding result for city: {city}") from e

    async def reverse_country(self, latitude: float, longitude: float) -> str | None:
        """Country name for a coordinate pair, or None when unavailable."""
        if not self.is_configured:
            return None
        try:
            results = await self._search(f"{latitude},{longitude}")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reverse geocoding failed for {latitude},{longitude}: {e}")
            return None

        components = results[0].get("components") if results and isinstance(results[0], dict) else None
        if not isinstance(components, dict):
            return None
        country = components.get("country")
        return country if isinstance(country, str) and country.strip() else None

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
