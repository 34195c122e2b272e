"""Travel mode selection and heuristic (table-driven) travel pricing."""

import logging

from tripcost.data.pricing_tables import (
    BUS_MAX_KM,
    DOMESTIC_BUS_TIERS,
    DOMESTIC_CITY_SURCHARGE,
    DOMESTIC_FLIGHT_TIERS,
    DOMESTIC_TRAIN_TIERS,
    INTERNATIONAL_CITY_SURCHARGE,
    INTERNATIONAL_TIERS,
    TRAIN_MAX_KM,
    RateTier,
    is_expensive_city,
)
from tripcost.schemas.cost import TravelMode, TravelModeChoice

logger = logging.getLogger(__name__)


def select_travel_mode(distance_km: float, is_international: bool) -> TravelMode:
    """International → flight; domestic <200 km bus, 200–800 km train, >800 km flight."""
    if is_international:
        return TravelMode.FLIGHT
    if distance_km < BUS_MAX_KM:
        return TravelMode.BUS
    if distance_km <= TRAIN_MAX_KM:
        return TravelMode.TRAIN
    return TravelMode.FLIGHT


def choose_travel_mode(choice: TravelModeChoice, distance_km: float, is_international: bool) -> TravelMode:
    """Honour an explicit caller mode; `auto` defers to select_travel_mode."""
    if choice is TravelModeChoice.AUTO:
        return select_travel_mode(distance_km, is_international)
    return TravelMode(choice.value)


def _tiers_for(mode: TravelMode, is_international: bool) -> tuple[RateTier, ...]:
    if is_international:
        return INTERNATIONAL_TIERS
    match mode:
        case TravelMode.TRAIN:
            return DOMESTIC_TRAIN_TIERS
        case TravelMode.BUS:
            return DOMESTIC_BUS_TIERS
        case TravelMode.FLIGHT:
            return DOMESTIC_FLIGHT_TIERS


def rate_tier(distance_km: float, mode: TravelMode, is_international: bool) -> RateTier:
    for tier in _tiers_for(mode, is_international):
        if distance_km < tier.upper_km:
            return tier
    raise ValueError(f"No rate tier for {distance_km} km")


def city_surcharge(origin_city: str, destination_city: str, is_international: bool) -> float:
    """Per-traveler surcharge when either city is on the expensive list."""
    if not (is_expensive_city(origin_city) or is_expensive_city(destination_city)):
        return 0.0
    return float(INTERNATIONAL_CITY_SURCHARGE if is_international else DOMESTIC_CITY_SURCHARGE)


class HeuristicTravelPricer:
    """Deterministic one-way travel cost from the pricing policy table."""

    def price(
        self,
        distance_km: float,
        travelers: int,
        mode: TravelMode,
        is_international: bool,
        origin_city: str = "",
        destination_city: str = "",
    ) -> float:
        tier = rate_tier(distance_km, mode, is_international)
        surcharge = city_surcharge(origin_city, destination_city, is_international)

        cost = (
            tier.rate_per_km * distance_km * travelers
            + tier.overhead * travelers
            + surcharge * travelers
        )
        cost = round(cost, 2)
        logger.debug(
            f"Heuristic {mode.value} fare: {distance_km} km x {travelers} travelers "
            f"@ {tier.rate_per_km}/km + {tier.overhead} overhead + {surcharge} surcharge = {cost}"
        )
        return cost


travel_pricer = HeuristicTravelPricer()
