"""Amadeus API client: OAuth2 token management and live flight prices."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from tripcost.config import Settings, settings as default_settings
from tripcost.data.airports import resolve_airport_code
from tripcost.data.currency import convert_to_inr, is_supported
from tripcost.exceptions import AuthError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/security/oauth2/token"
FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
DEFAULT_TOKEN_TTL_SECONDS = 1799
REFRESH_MARGIN = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenCredential:
    access_token: str
    expires_at: datetime
    base_url: str

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at - REFRESH_MARGIN


class TokenManager:
    """Owns the client-credentials token; one refresh at a time under an asyncio lock."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or default_settings
        self._client = http_client
        self._clock = clock
        self._credential: TokenCredential | None = None
        self._lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.amadeus_client_id and self.settings.amadeus_client_secret)

    @property
    def credential(self) -> TokenCredential | None:
        return self._credential

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.amadeus_auth_timeout)
        return self._client

    async def get_valid_token(self) -> TokenCredential:
        """Return a fresh credential, exchanging client credentials when needed."""
        credential = self._credential
        if credential and credential.is_fresh(self._clock()):
            return credential

        async with self._lock:
            # Another request may have refreshed while we waited
            credential = self._credential
            if credential and credential.is_fresh(self._clock()):
                return credential
            self._credential = await self._exchange()
            return self._credential

    def invalidate(self):
        self._credential = None

    @staticmethod
    def _is_rejection(resp: httpx.Response) -> bool:
        if resp.status_code == 401:
            return True
        if 400 <= resp.status_code < 500:
            try:
                return resp.json().get("error") == "invalid_client"
            except ValueError:
                return False
        return False

    async def _exchange(self) -> TokenCredential:
        if not self.is_configured:
            raise AuthError("Amadeus credentials not configured")

        client = await self._get_client()
        errors = []
        for base_url in self.settings.amadeus_base_urls:
            try:
                resp = await client.post(
                    f"{base_url}{TOKEN_PATH}",
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.settings.amadeus_client_id,
                        "client_secret": self.settings.amadeus_client_secret,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.RequestError as e:
                logger.warning(f"Amadeus auth at {base_url} unreachable: {e}")
                errors.append(f"{base_url}: {e}")
                continue

            if self._is_rejection(resp):
                logger.error(f"Amadeus rejected credentials at {base_url} (HTTP {resp.status_code})")
                raise AuthError(f"Invalid Amadeus credentials (HTTP {resp.status_code})")

            try:
                resp.raise_for_status()
                data = resp.json()
                token = data["access_token"]
                ttl = int(data.get("expires_in") or DEFAULT_TOKEN_TTL_SECONDS)
            except (httpx.HTTPStatusError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Amadeus auth at {base_url} failed: {e}")
                errors.append(f"{base_url}: {e}")
                continue

            logger.info(f"Amadeus token refreshed via {base_url}")
            return TokenCredential(
                access_token=token,
                expires_at=self._clock() + timedelta(seconds=ttl),
                base_url=base_url,
            )

        raise AuthError(f"All Amadeus auth endpoints failed: {'; '.join(errors)}")

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


class AmadeusClient:
    """Optional live flight pricing. Every failure yields None, never an exception."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        token_manager: TokenManager | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or default_settings
        self._client = http_client
        self._clock = clock
        self.tokens = token_manager or TokenManager(self.settings, http_client=http_client, clock=clock)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.amadeus_search_timeout)
        return self._client

    async def fetch_flight_price(self, origin_city: str, dest_city: str, travelers: int) -> float | None:
        """Average one-way offer price for all travelers, in INR, or None."""
        try:
            return await self._fetch_flight_price(origin_city, dest_city, travelers)
        except Exception as e:
            logger.error(f"Amadeus flight pricing failed unexpectedly: {e}", exc_info=True)
            return None

    async def _fetch_flight_price(self, origin_city: str, dest_city: str, travelers: int) -> float | None:
        if not self.tokens.is_configured:
            logger.debug("Amadeus credentials not set, skipping live flight price")
            return None

        origin = resolve_airport_code(origin_city)
        destination = resolve_airport_code(dest_city)
        if not origin or not destination or origin == destination:
            logger.warning(f"No distinct airports for {origin_city} -> {dest_city} ({origin}/{destination})")
            return None

        try:
            credential = await self.tokens.get_valid_token()
        except AuthError as e:
            logger.warning(f"Amadeus auth failed, using heuristic pricing: {e}")
            return None

        departure = (self._clock() + timedelta(days=self.settings.flight_departure_offset_days)).date()
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure.isoformat(),
            "adults": travelers,
            "max": self.settings.amadeus_max_offers,
        }

        try:
            client = await self._get_client()
            resp = await client.get(
                f"{credential.base_url}{FLIGHT_OFFERS_PATH}",
                params=params,
                headers={"Authorization": f"Bearer {credential.access_token}"},
                timeout=self.settings.amadeus_search_timeout,
            )
            if resp.status_code == 401:
                self.tokens.invalidate()
            resp.raise_for_status()
            offers = resp.json().get("data", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Amadeus flight search {origin}->{destination} failed: {e}")
            return None

        price = self._average_price_inr(offers)
        if price is None:
            logger.warning(f"No usable Amadeus offers for {origin}->{destination}")
            return None

        logger.info(f"Amadeus price {origin}->{destination} for {travelers}: {price} INR (avg of {len(offers)} offers)")
        return price

    @staticmethod
    def _average_price_inr(offers: list[dict]) -> float | None:
        prices = []
        for offer in offers:
            try:
                total = float(offer["price"]["total"])
                currency = offer["price"].get("currency", "INR")
            except (KeyError, TypeError, ValueError):
                continue
            if not is_supported(currency):
                logger.debug(f"Skipping offer priced in unsupported currency {currency}")
                continue
            prices.append(convert_to_inr(total, currency))

        if not prices:
            return None
        return round(sum(prices) / len(prices), 2)

    async def close(self):
        await self.tokens.close()
        if self._client:
            await self._client.aclose()
            self._client = None
