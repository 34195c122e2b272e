"""Pricing policy tables: travel rates, surcharges, AI cost bands and multipliers.

These are policy constants, not market data. Amounts are in INR unless the
name says USD.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateTier:
    """Per-km rate and fixed per-traveler overhead for distances below `upper_km`."""
    upper_km: float
    rate_per_km: float
    overhead: float


@dataclass(frozen=True)
class CostBand:
    """Valid USD range for an AI-estimated cost."""
    min: float
    max: float

    def scaled(self, multiplier: float) -> "CostBand":
        return CostBand(self.min * multiplier, self.max * multiplier)

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


_INF = float("inf")

# Travel rate tiers, walked in order; the first tier with distance < upper_km applies
INTERNATIONAL_TIERS: tuple[RateTier, ...] = (
    RateTier(3000, 4.0, 1500),
    RateTier(6000, 6.0, 2000),
    RateTier(_INF, 8.0, 3000),
)

DOMESTIC_TRAIN_TIERS: tuple[RateTier, ...] = (
    RateTier(300, 0.5, 30),
    RateTier(1000, 0.7, 50),
    RateTier(_INF, 0.9, 80),
)

DOMESTIC_BUS_TIERS: tuple[RateTier, ...] = (
    RateTier(300, 0.8, 20),
    RateTier(_INF, 1.0, 40),
)

DOMESTIC_FLIGHT_TIERS: tuple[RateTier, ...] = (
    RateTier(500, 4.0, 300),
    RateTier(1500, 3.0, 400),
    RateTier(_INF, 2.5, 500),
)

# Travel mode selection thresholds (km, domestic only)
BUS_MAX_KM = 200
TRAIN_MAX_KM = 800

# Per-traveler surcharge when either city is in EXPENSIVE_CITIES
EXPENSIVE_CITIES: tuple[str, ...] = (
    "new york", "london", "paris", "tokyo", "singapore", "zurich", "geneva",
)
INTERNATIONAL_CITY_SURCHARGE = 500
DOMESTIC_CITY_SURCHARGE = 100

# Country-level lodging/meal defaults (INR), used when no other source answers
HOME_COUNTRY_HOTEL_PER_NIGHT = 4000.0
HOME_COUNTRY_MEAL_PER_DAY = 800.0
ABROAD_HOTEL_PER_NIGHT = 5000.0
ABROAD_MEAL_PER_DAY = 1500.0

# AI cost bands (USD), full variant, keyed by enum value
HOTEL_COST_BANDS_USD: dict[str, CostBand] = {
    "budget": CostBand(15, 35),
    "mid_range": CostBand(35, 80),
    "luxury": CostBand(80, 200),
    "hostel": CostBand(8, 25),
    "boutique": CostBand(60, 150),
}

MEAL_COST_BANDS_USD: dict[str, CostBand] = {
    "local_street_food": CostBand(5, 15),
    "casual_dining": CostBand(15, 35),
    "fine_dining": CostBand(35, 80),
    "fast_food": CostBand(8, 20),
    "vegetarian": CostBand(10, 25),
    "vegan": CostBand(12, 30),
}

# AI cost bands (USD), brief variant
BRIEF_HOTEL_BAND_USD = CostBand(10, 500)
BRIEF_MEAL_BAND_USD = CostBand(5, 200)

# Values used when the LLM response has no usable numbers (USD)
DEFAULT_AI_HOTEL_USD = 40.0
DEFAULT_AI_MEAL_USD = 20.0

# Cost-of-living multipliers, checked in order; first substring match wins
DESTINATION_MULTIPLIERS: tuple[tuple[float, tuple[str, ...]], ...] = (
    (1.8, ("switzerland", "norway", "iceland", "singapore", "monaco", "luxembourg")),
    (1.5, ("new york", "london", "paris", "tokyo", "dubai", "hong kong")),
    (0.6, ("india", "thailand", "vietnam", "nepal", "sri lanka", "indonesia")),
    (0.4, ("bangladesh", "cambodia", "laos", "myanmar")),
)
DEFAULT_DESTINATION_MULTIPLIER = 1.0


def destination_multiplier(destination: str) -> float:
    """Cost-of-living multiplier for a destination name."""
    name = destination.lower()
    for multiplier, places in DESTINATION_MULTIPLIERS:
        if any(place in name for place in places):
            return multiplier
    return DEFAULT_DESTINATION_MULTIPLIER


def is_expensive_city(city: str) -> bool:
    name = city.lower()
    return any(c in name for c in EXPENSIVE_CITIES)
