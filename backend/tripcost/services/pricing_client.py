"""Generic hotel/meal pricing API client."""

import logging

import httpx

from tripcost.config import Settings, settings as default_settings
from tripcost.data.currency import convert_to_inr, is_supported
from tripcost.exceptions import PricingUnavailable
from tripcost.schemas.cost import CityCoordinate

logger = logging.getLogger(__name__)

# Field names seen across pricing providers, checked in order
PRICE_KEYS = ("averagePrice", "average_price", "avgPrice", "price")


def extract_average_price(payload) -> tuple[float, str] | None:
    """Pull (amount, currency) out of a pricing payload, looking inside `data` too."""
    if not isinstance(payload, dict):
        return None

    candidates = [payload]
    if isinstance(payload.get("data"), dict):
        candidates.insert(0, payload["data"])

    for body in candidates:
        for key in PRICE_KEYS:
            if body.get(key) is None:
                continue
            try:
                amount = float(body[key])
            except (TypeError, ValueError):
                continue
            currency = str(body.get("currency") or payload.get("currency") or "INR").upper()
            return amount, currency
    return None


class PricingClient:
    """Looks up average hotel and meal prices for a city."""

    def __init__(self, settings: Settings | None = None, http_client: httpx.AsyncClient | None = None):
        self.settings = settings or default_settings
        self._client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.pricing_api_base_url)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.pricing_timeout)
        return self._client

    async def _average_price(self, resource: str, city: str, coordinate: CityCoordinate | None) -> float:
        if not self.is_configured:
            raise PricingUnavailable("PRICING_API_BASE_URL not set")

        params = {"city": city}
        if coordinate:
            params["lat"] = coordinate.latitude
            params["lon"] = coordinate.longitude
        headers = {}
        if self.settings.pricing_api_key:
            headers["Authorization"] = f"Bearer {self.settings.pricing_api_key}"

        url = f"{self.settings.pricing_api_base_url.rstrip('/')}/{resource}"
        try:
            client = await self._get_client()
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PricingUnavailable(f"{resource} pricing for {city} failed: {e}") from e

        extracted = extract_average_price(payload)
        if extracted is None:
            raise PricingUnavailable(f"{resource} pricing for {city} has no average price")

        amount, currency = extracted
        if amount < 0 or not is_supported(currency):
            raise PricingUnavailable(f"Unusable {resource} price for {city}: {amount} {currency}")

        price = convert_to_inr(amount, currency)
        logger.info(f"Pricing API {resource} for {city}: {price} INR")
        return price

    async def hotel_price(self, city: str, coordinate: CityCoordinate | None = None) -> float:
        """Average nightly hotel price in INR. Raises PricingUnavailable."""
        return await self._average_price("hotels", city, coordinate)

    async def meal_price(self, city: str, coordinate: CityCoordinate | None = None) -> float:
        """Average per-person daily meal cost in INR. Raises PricingUnavailable."""
        return await self._average_price("meals", city, coordinate)

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
