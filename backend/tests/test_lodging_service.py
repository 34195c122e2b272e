"""Tests for the pricing API client and lodging/meal resolver."""

import httpx
import pytest

from conftest import failing_client, mock_client
from tripcost.exceptions import PricingUnavailable
from tripcost.schemas.cost import CityCoordinate, MealPlan, StayPreference
from tripcost.services.lodging_service import LodgingService
from tripcost.services.pricing_client import PricingClient, extract_average_price

HUA_HIN = CityCoordinate(name="Hua Hin", latitude=12.57, longitude=99.96)


@pytest.fixture
def pricing_settings(settings):
    return settings.model_copy(update={"pricing_api_base_url": "https://pricing.example.com/v1/"})


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"averagePrice": 1200}, (1200.0, "INR")),
        ({"average_price": "35.5", "currency": "usd"}, (35.5, "USD")),
        ({"data": {"avgPrice": 20, "currency": "EUR"}}, (20.0, "EUR")),
        ({"data": {"price": 10}, "currency": "GBP"}, (10.0, "GBP")),
        ({"averagePrice": "n/a", "price": 99}, (99.0, "INR")),
        ({"count": 3}, None),
        ([1, 2, 3], None),
    ],
)
def test_extract_average_price(payload, expected):
    assert extract_average_price(payload) == expected


async def test_pricing_client_converts_currency(pricing_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"averagePrice": 50, "currency": "USD"}})

    client = PricingClient(pricing_settings, http_client=mock_client(handler))

    assert await client.hotel_price("Hua Hin", HUA_HIN) == 4150.0
    assert seen[0].url.path == "/v1/hotels"
    assert seen[0].url.params["city"] == "Hua Hin"
    assert seen[0].url.params["lat"] == "12.57"


async def test_pricing_client_unconfigured(settings):
    client = PricingClient(settings, http_client=failing_client())

    with pytest.raises(PricingUnavailable):
        await client.meal_price("Hua Hin")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, json={"nothing": "here"}),
        httpx.Response(200, json={"price": 10, "currency": "XYZ"}),
        httpx.Response(200, json={"price": -5}),
    ],
)
async def test_pricing_client_failures(pricing_settings, response):
    client = PricingClient(pricing_settings, http_client=mock_client(lambda request: response))

    with pytest.raises(PricingUnavailable):
        await client.meal_price("Hua Hin")


async def test_bundled_profile_wins(settings, reference):
    service = LodgingService(reference, PricingClient(settings, http_client=failing_client()), settings)
    manali = reference.cost_profile("Manali")

    costs = await service.resolve("Manali", stay=StayPreference.LUXURY, meal=MealPlan.BUDGET_FRIENDLY)

    assert costs.hotel_per_night == round(manali.hotel_luxury, 2)
    assert costs.meal_per_person_per_day == round(manali.meals_basic, 2)
    assert (costs.hotel_source, costs.meal_source) == ("cost_dataset", "cost_dataset")


async def test_pricing_api_used_for_unbundled_city(pricing_settings, reference):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/hotels"):
            return httpx.Response(200, json={"averagePrice": 3100})
        return httpx.Response(200, json={"averagePrice": 650})

    pricing = PricingClient(pricing_settings, http_client=mock_client(handler))
    service = LodgingService(reference, pricing, pricing_settings)

    costs = await service.resolve("Hua Hin", "Thailand", coordinate=HUA_HIN)

    assert (costs.hotel_per_night, costs.meal_per_person_per_day) == (3100.0, 650.0)
    assert costs.hotel_source == "pricing_api"


@pytest.mark.parametrize(
    "country, expected",
    [
        ("India", (4000.0, 800.0)),
        (" india ", (4000.0, 800.0)),
        (None, (4000.0, 800.0)),
        ("Thailand", (5000.0, 1500.0)),
    ],
)
async def test_country_defaults(settings, reference, country, expected):
    service = LodgingService(reference, PricingClient(settings, http_client=failing_client()), settings)

    costs = await service.resolve("Hua Hin", country)

    assert (costs.hotel_per_night, costs.meal_per_person_per_day) == expected
    assert costs.hotel_source == "country_default"


async def test_pricing_api_failure_falls_back_to_default(pricing_settings, reference):
    pricing = PricingClient(pricing_settings, http_client=mock_client(lambda request: httpx.Response(502)))
    service = LodgingService(reference, pricing, pricing_settings)

    costs = await service.resolve("Hua Hin", "Thailand")

    assert (costs.hotel_per_night, costs.meal_per_person_per_day) == (5000.0, 1500.0)
