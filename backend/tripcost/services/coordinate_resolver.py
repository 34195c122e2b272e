"""Coordinate resolver: bundled cost dataset, then coordinate dataset, then geocoding."""

import logging

from tripcost.exceptions import ChainExhausted, ResolutionError
from tripcost.schemas.cost import CityCoordinate, TripType
from tripcost.services.dataset_loader import ReferenceData
from tripcost.services.fallback import FallbackChain
from tripcost.services.geocoding_client import GeocodingClient

logger = logging.getLogger(__name__)


def _normalize_country(country: str | None) -> str | None:
    if country is None:
        return None
    normalized = country.strip().lower()
    return normalized or None


def classify_trip(origin_country: str | None, destination_country: str | None) -> TripType:
    """International iff both countries are known and differ (case-insensitive, trimmed)."""
    origin = _normalize_country(origin_country)
    destination = _normalize_country(destination_country)
    if origin and destination and origin != destination:
        return TripType.INTERNATIONAL
    return TripType.DOMESTIC


class CoordinateResolver:
    """Resolves city names to coordinates, hitting the network only for unbundled cities."""

    def __init__(self, reference: ReferenceData, geocoder: GeocodingClient):
        self.reference = reference
        self.geocoder = geocoder

    def _chain(self, city: str) -> FallbackChain[CityCoordinate]:
        async def from_cost_dataset():
            profile = self.reference.cost_profile(city)
            return profile.coordinate if profile else None

        async def from_city_dataset():
            return self.reference.coordinate(city)

        async def from_geocoding():
            return await self.geocoder.geocode(city)

        return FallbackChain(
            f"coordinates[{city.strip()}]",
            [
                ("cost_dataset", from_cost_dataset),
                ("city_dataset", from_city_dataset),
                ("geocoding", from_geocoding),
            ],
        )

    async def resolve(self, city: str) -> CityCoordinate:
        """Raises ResolutionError when no tier knows the city."""
        try:
            resolved = await self._chain(city).resolve()
        except ChainExhausted as e:
            logger.error(f"Could not resolve coordinates for '{city}'")
            raise ResolutionError(str(e)) from e
        return resolved.value

    async def resolve_country(
        self, coordinate: CityCoordinate, provided: str | None = None
    ) -> str | None:
        """Caller-provided country, then the bundled dataset, then reverse geocoding."""
        if _normalize_country(provided):
            return provided.strip()
        bundled = self.reference.country(coordinate.name)
        if bundled:
            return bundled
        return await self.geocoder.reverse_country(coordinate.latitude, coordinate.longitude)
