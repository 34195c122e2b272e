"""Tests for bundled dataset loading."""

import pytest

from tripcost.schemas.cost import MealPlan, StayPreference
from tripcost.services.dataset_loader import (
    ReferenceData,
    load_city_coordinates,
    load_city_countries,
    load_city_costs,
)


def test_bundled_datasets_load(reference):
    assert len(reference.cost_profiles) > 20
    assert len(reference.coordinates) > 50


def test_cost_profile_converted_from_usd(reference, settings):
    delhi = reference.cost_profile("Delhi")
    assert delhi is not None
    assert delhi.hotel_medium == pytest.approx(45 * settings.usd_to_inr)
    assert delhi.meals_medium == pytest.approx(15 * settings.usd_to_inr)
    assert delhi.hotel_for(StayPreference.LUXURY) == delhi.hotel_luxury
    assert delhi.meals_for(MealPlan.BUDGET_FRIENDLY) == delhi.meals_basic


def test_lookup_is_case_and_whitespace_insensitive(reference):
    assert reference.cost_profile("  MANALI ") == reference.cost_profile("manali")
    assert reference.coordinate("New Delhi") is not None


def test_unknown_city_returns_none(reference):
    assert reference.cost_profile("Atlantis") is None
    assert reference.coordinate("Atlantis") is None


def test_malformed_and_negative_cost_rows_skipped(tmp_path):
    path = tmp_path / "costs.csv"
    path.write_text(
        "cityName,lat,lon,mealsBasic,mealsMedium,mealsLuxury,hotelBasic,hotelMedium,hotelLuxury\n"
        "Goodtown,10.0,20.0,1,2,3,4,5,6\n"
        "Badtown,ten,20.0,1,2,3,4,5,6\n"
        "Negtown,10.0,20.0,1,-2,3,4,5,6\n"
        "Shorttown,10.0,20.0,1,2\n"
        "\n",
        encoding="utf-8",
    )
    profiles = load_city_costs(path, usd_to_inr=10)

    assert list(profiles) == ["goodtown"]
    assert profiles["goodtown"].hotel_luxury == 60


def test_coordinate_rows_parsed(tmp_path):
    path = tmp_path / "cities.csv"
    path.write_text("city,lat,lon\nSomewhere,1.5,-2.5\nNowhere,,\n", encoding="utf-8")
    coords = load_city_coordinates(path)

    assert set(coords) == {"somewhere"}
    assert coords["somewhere"].latitude == 1.5
    assert coords["somewhere"].longitude == -2.5


def test_missing_file_yields_empty_map(tmp_path):
    assert load_city_coordinates(tmp_path / "missing.csv") == {}
    assert load_city_costs(tmp_path / "missing.csv", usd_to_inr=83) == {}


def test_key_normalization():
    assert ReferenceData.key("  Kuala Lumpur ") == "kuala lumpur"


def test_country_column_is_optional(tmp_path):
    path = tmp_path / "cities.csv"
    path.write_text(
        "city,lat,lon,country\nSomewhere,1.5,-2.5,Freedonia\nElsewhere,3.0,4.0\nNoplace,5.0,6.0,\n",
        encoding="utf-8",
    )

    assert load_city_countries(path) == {"somewhere": "Freedonia"}
    assert set(load_city_coordinates(path)) == {"somewhere", "elsewhere", "noplace"}


def test_bundled_countries(reference):
    assert reference.country(" delhi ") == "India"
    assert reference.country("London") == "United Kingdom"
    assert reference.country("Atlantis") is None
    assert set(reference.countries) == set(reference.coordinates)
