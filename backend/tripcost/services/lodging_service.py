"""Lodging and meal cost resolver: bundled profile, pricing API, country default."""

import asyncio
import logging
from dataclasses import dataclass

from tripcost.config import Settings, settings as default_settings
from tripcost.data.pricing_tables import (
    ABROAD_HOTEL_PER_NIGHT,
    ABROAD_MEAL_PER_DAY,
    HOME_COUNTRY_HOTEL_PER_NIGHT,
    HOME_COUNTRY_MEAL_PER_DAY,
)
from tripcost.schemas.cost import CityCoordinate, MealPlan, StayPreference
from tripcost.services.dataset_loader import ReferenceData
from tripcost.services.fallback import FallbackChain, constant
from tripcost.services.pricing_client import PricingClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LodgingCosts:
    hotel_per_night: float
    meal_per_person_per_day: float
    hotel_source: str
    meal_source: str


class LodgingService:
    """Per-night hotel and per-day meal costs in INR. Always answers."""

    def __init__(
        self,
        reference: ReferenceData,
        pricing_client: PricingClient,
        settings: Settings | None = None,
    ):
        self.reference = reference
        self.pricing = pricing_client
        self.settings = settings or default_settings

    def is_home_country(self, country: str | None) -> bool:
        """Unknown countries count as home."""
        if not country or not country.strip():
            return True
        return country.strip().lower() == self.settings.home_country.lower()

    def country_defaults(self, country: str | None) -> tuple[float, float]:
        if self.is_home_country(country):
            return HOME_COUNTRY_HOTEL_PER_NIGHT, HOME_COUNTRY_MEAL_PER_DAY
        return ABROAD_HOTEL_PER_NIGHT, ABROAD_MEAL_PER_DAY

    def _hotel_chain(
        self, city: str, country: str | None, stay: StayPreference, coordinate: CityCoordinate | None
    ) -> FallbackChain[float]:
        async def from_dataset():
            profile = self.reference.cost_profile(city)
            return profile.hotel_for(stay) if profile else None

        async def from_pricing_api():
            return await self.pricing.hotel_price(city, coordinate)

        hotel_default, _ = self.country_defaults(country)
        return FallbackChain(
            f"hotel[{city.strip()}]",
            [
                ("cost_dataset", from_dataset),
                ("pricing_api", from_pricing_api),
                ("country_default", constant(hotel_default)),
            ],
        )

    def _meal_chain(
        self, city: str, country: str | None, meal: MealPlan, coordinate: CityCoordinate | None
    ) -> FallbackChain[float]:
        async def from_dataset():
            profile = self.reference.cost_profile(city)
            return profile.meals_for(meal) if profile else None

        async def from_pricing_api():
            return await self.pricing.meal_price(city, coordinate)

        _, meal_default = self.country_defaults(country)
        return FallbackChain(
            f"meal[{city.strip()}]",
            [
                ("cost_dataset", from_dataset),
                ("pricing_api", from_pricing_api),
                ("country_default", constant(meal_default)),
            ],
        )

    async def resolve(
        self,
        city: str,
        country: str | None = None,
        stay: StayPreference = StayPreference.COMFORT_STAY,
        meal: MealPlan = MealPlan.CASUAL_DINING,
        coordinate: CityCoordinate | None = None,
    ) -> LodgingCosts:
        """Hotel and meal lookups run in parallel."""
        hotel, meals = await asyncio.gather(
            self._hotel_chain(city, country, stay, coordinate).resolve(),
            self._meal_chain(city, country, meal, coordinate).resolve(),
        )
        logger.info(
            f"Lodging for {city}: hotel {hotel.value} ({hotel.source}), "
            f"meals {meals.value} ({meals.source})"
        )
        return LodgingCosts(
            hotel_per_night=round(hotel.value, 2),
            meal_per_person_per_day=round(meals.value, 2),
            hotel_source=hotel.source,
            meal_source=meals.source,
        )
