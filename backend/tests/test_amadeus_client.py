"""Tests for the Amadeus token manager and flight price resolver."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from conftest import failing_client, mock_client
from tripcost.exceptions import AuthError
from tripcost.services.amadeus_client import AmadeusClient, TokenManager

TEST_HOST = "test.api.amadeus.com"
PROD_HOST = "api.amadeus.com"


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeAmadeus:
    """Records calls and answers token and flight-offer requests."""

    def __init__(self, token_status: dict[str, int] | None = None, offers=None, offers_status: int = 200):
        self.token_status = token_status or {}
        self.offers = offers if offers is not None else [{"price": {"total": "5000.00", "currency": "INR"}}]
        self.offers_status = offers_status
        self.token_calls: list[str] = []
        self.offer_requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth2/token"):
            host = request.url.host
            self.token_calls.append(host)
            status = self.token_status.get(host, 200)
            if status != 200:
                return httpx.Response(status, json={"error": "server_error"})
            return httpx.Response(
                200,
                json={"access_token": f"token-{len(self.token_calls)}", "expires_in": 1799},
            )

        self.offer_requests.append(request)
        if self.offers_status != 200:
            return httpx.Response(self.offers_status)
        return httpx.Response(200, json={"data": self.offers})


@pytest.fixture
def amadeus_settings(settings):
    return settings.model_copy(update={"amadeus_client_id": "id", "amadeus_client_secret": "secret"})


@pytest.fixture
def clock():
    return FakeClock()


def _client(cfg, fake, clock) -> AmadeusClient:
    return AmadeusClient(cfg, http_client=mock_client(fake), clock=clock)


async def test_token_reused_within_validity(amadeus_settings, clock):
    fake = FakeAmadeus()
    client = _client(amadeus_settings, fake, clock)

    await client.fetch_flight_price("Delhi", "Mumbai", 1)
    clock.advance(minutes=24)
    await client.fetch_flight_price("Delhi", "Mumbai", 1)

    assert fake.token_calls == [TEST_HOST]
    assert len(fake.offer_requests) == 2


async def test_token_refreshed_once_near_expiry(amadeus_settings, clock):
    fake = FakeAmadeus()
    client = _client(amadeus_settings, fake, clock)

    await client.fetch_flight_price("Delhi", "Mumbai", 1)
    clock.advance(minutes=26)
    await client.fetch_flight_price("Delhi", "Mumbai", 1)
    await client.fetch_flight_price("Delhi", "Mumbai", 1)

    assert len(fake.token_calls) == 2


async def test_invalidate_forces_one_new_exchange(amadeus_settings, clock):
    fake = FakeAmadeus()
    tokens = TokenManager(amadeus_settings, http_client=mock_client(fake), clock=clock)

    first = await tokens.get_valid_token()
    tokens.invalidate()
    second = await tokens.get_valid_token()
    third = await tokens.get_valid_token()

    assert first.access_token == "token-1"
    assert second.access_token == third.access_token == "token-2"
    assert len(fake.token_calls) == 2


async def test_concurrent_requests_share_one_refresh(amadeus_settings, clock):
    fake = FakeAmadeus()
    tokens = TokenManager(amadeus_settings, http_client=mock_client(fake), clock=clock)

    credentials = await asyncio.gather(*(tokens.get_valid_token() for _ in range(5)))

    assert {c.access_token for c in credentials} == {"token-1"}
    assert fake.token_calls == [TEST_HOST]


async def test_rejected_credentials_do_not_try_production(amadeus_settings, clock):
    fake = FakeAmadeus(token_status={TEST_HOST: 401})
    tokens = TokenManager(amadeus_settings, http_client=mock_client(fake), clock=clock)

    with pytest.raises(AuthError):
        await tokens.get_valid_token()
    assert fake.token_calls == [TEST_HOST]


async def test_invalid_client_body_is_a_rejection(amadeus_settings, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_client"})

    tokens = TokenManager(amadeus_settings, http_client=mock_client(handler), clock=clock)

    with pytest.raises(AuthError, match="Invalid"):
        await tokens.get_valid_token()


async def test_server_error_falls_through_to_production(amadeus_settings, clock):
    fake = FakeAmadeus(token_status={TEST_HOST: 500})
    client = _client(amadeus_settings, fake, clock)

    price = await client.fetch_flight_price("Delhi", "Mumbai", 1)

    assert price == 5000.0
    assert fake.token_calls == [TEST_HOST, PROD_HOST]
    assert client.tokens.credential.base_url == amadeus_settings.amadeus_production_base_url
    assert fake.offer_requests[0].url.host == PROD_HOST


async def test_all_auth_endpoints_down(amadeus_settings, clock):
    fake = FakeAmadeus(token_status={TEST_HOST: 503, PROD_HOST: 502})
    client = _client(amadeus_settings, fake, clock)

    assert await client.fetch_flight_price("Delhi", "Mumbai", 1) is None
    assert fake.offer_requests == []


async def test_offer_request_parameters(amadeus_settings, clock):
    fake = FakeAmadeus()
    client = _client(amadeus_settings, fake, clock)

    await client.fetch_flight_price("Delhi", "Mumbai", 3)

    request = fake.offer_requests[0]
    assert request.url.path == "/v2/shopping/flight-offers"
    assert request.url.params["originLocationCode"] == "DEL"
    assert request.url.params["destinationLocationCode"] == "BOM"
    assert request.url.params["departureDate"] == "2026-03-31"
    assert request.url.params["adults"] == "3"
    assert request.url.params["max"] == "10"
    assert request.headers["Authorization"] == "Bearer token-1"


async def test_offers_averaged_in_inr_skipping_unknown_currencies(amadeus_settings, clock):
    fake = FakeAmadeus(
        offers=[
            {"price": {"total": "100.00", "currency": "USD"}},
            {"price": {"total": "9000", "currency": "INR"}},
            {"price": {"total": "50", "currency": "XYZ"}},
            {"price": {}},
            {"itineraries": []},
        ]
    )
    client = _client(amadeus_settings, fake, clock)

    assert await client.fetch_flight_price("Delhi", "London", 1) == 8650.0


async def test_no_usable_offers_returns_none(amadeus_settings, clock):
    fake = FakeAmadeus(offers=[])
    client = _client(amadeus_settings, fake, clock)

    assert await client.fetch_flight_price("Delhi", "Mumbai", 1) is None


@pytest.mark.parametrize("status", [400, 500])
async def test_search_error_returns_none(amadeus_settings, clock, status):
    fake = FakeAmadeus(offers_status=status)
    client = _client(amadeus_settings, fake, clock)

    assert await client.fetch_flight_price("Delhi", "Mumbai", 1) is None


async def test_search_timeout_returns_none(amadeus_settings, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth2/token"):
            return httpx.Response(200, json={"access_token": "t", "expires_in": 1799})
        raise httpx.ReadTimeout("timed out", request=request)

    client = AmadeusClient(amadeus_settings, http_client=mock_client(handler), clock=clock)

    assert await client.fetch_flight_price("Delhi", "Mumbai", 1) is None


async def test_unauthorized_search_invalidates_token(amadeus_settings, clock):
    fake = FakeAmadeus(offers_status=401)
    client = _client(amadeus_settings, fake, clock)

    assert await client.fetch_flight_price("Delhi", "Mumbai", 1) is None
    assert client.tokens.credential is None


async def test_unconfigured_client_makes_no_calls(settings, clock):
    client = AmadeusClient(settings, http_client=failing_client(), clock=clock)

    assert await client.fetch_flight_price("Delhi", "Mumbai", 1) is None


async def test_same_airport_returns_none(amadeus_settings, clock):
    client = AmadeusClient(amadeus_settings, http_client=failing_client(), clock=clock)

    assert await client.fetch_flight_price("Delhi", "New Delhi", 1) is None
