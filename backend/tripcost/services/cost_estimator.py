"""Trip cost aggregator: combines route, travel, lodging and meal costs into one estimate."""

import logging
from dataclasses import dataclass

from tripcost.exceptions import LLMUnavailable
from tripcost.schemas.cost import (
    AiEnhancedCostEstimate,
    AiTripCostRequest,
    CityCoordinate,
    CostEstimate,
    CostMethod,
    TravelMode,
    TripCostRequest,
    TripType,
)
from tripcost.services.ai_cost_service import AiCostService
from tripcost.services.amadeus_client import AmadeusClient
from tripcost.services.coordinate_resolver import CoordinateResolver, classify_trip
from tripcost.services.distance_service import DistanceService
from tripcost.services.fallback import FallbackChain, Resolved
from tripcost.services.lodging_service import LodgingCosts, LodgingService
from tripcost.services.travel_pricing import HeuristicTravelPricer, choose_travel_mode, travel_pricer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutePlan:
    origin: CityCoordinate
    destination: CityCoordinate
    destination_country: str | None
    distance_km: float
    trip_type: TripType
    mode: TravelMode

    @property
    def is_international(self) -> bool:
        return self.trip_type is TripType.INTERNATIONAL


class CostEstimator:
    """Entry point of the pipeline. Only ResolutionError escapes to callers."""

    def __init__(
        self,
        resolver: CoordinateResolver,
        distance_service: DistanceService,
        lodging: LodgingService,
        amadeus: AmadeusClient,
        ai_costs: AiCostService,
        pricer: HeuristicTravelPricer = travel_pricer,
    ):
        self.resolver = resolver
        self.distance = distance_service
        self.lodging = lodging
        self.amadeus = amadeus
        self.ai_costs = ai_costs
        self.pricer = pricer

    async def plan_route(self, request: TripCostRequest) -> RoutePlan:
        origin = await self.resolver.resolve(request.origin_city)
        destination = await self.resolver.resolve(request.destination_city)
        distance_km = await self.distance.distance_km(origin, destination)

        origin_country = await self.resolver.resolve_country(origin, request.origin_country)
        destination_country = await self.resolver.resolve_country(destination, request.destination_country)
        trip_type = classify_trip(origin_country, destination_country)
        mode = choose_travel_mode(request.travel_mode, distance_km, trip_type is TripType.INTERNATIONAL)

        logger.info(
            f"Route {request.origin_city} -> {request.destination_city}: {distance_km} km, "
            f"{trip_type.value}, {mode.value}"
        )
        return RoutePlan(
            origin=origin,
            destination=destination,
            destination_country=destination_country,
            distance_km=distance_km,
            trip_type=trip_type,
            mode=mode,
        )

    async def travel_cost(self, request: TripCostRequest, route: RoutePlan) -> Resolved[float]:
        """Live flight price for flights, heuristic tables otherwise (and as the flight fallback)."""
        async def from_heuristic():
            return self.pricer.price(
                route.distance_km,
                request.travelers,
                route.mode,
                route.is_international,
                request.origin_city,
                request.destination_city,
            )

        async def from_amadeus():
            return await self.amadeus.fetch_flight_price(
                request.origin_city, request.destination_city, request.travelers
            )

        strategies = [("heuristic", from_heuristic)]
        if route.mode is TravelMode.FLIGHT:
            strategies.insert(0, ("amadeus", from_amadeus))

        return await FallbackChain(f"travel[{route.mode.value}]", strategies).resolve()

    async def _lodging(self, request: TripCostRequest, route: RoutePlan) -> LodgingCosts:
        return await self.lodging.resolve(
            request.destination_city,
            route.destination_country,
            request.stay_preference,
            request.meal_plan,
            route.destination,
        )

    @staticmethod
    def _totals(request: TripCostRequest, travel: float, hotel_per_night: float, meal_per_day: float) -> dict:
        hotel_cost = round(hotel_per_night * request.days, 2)
        meal_cost = round(meal_per_day * request.days * request.travelers, 2)
        return {
            "travel_cost": round(travel, 2),
            "hotel_cost": hotel_cost,
            "meal_cost": meal_cost,
            "total_cost": round(travel + hotel_cost + meal_cost, 2),
            "hotel_cost_per_night": round(hotel_per_night, 2),
            "meal_cost_per_person_per_day": round(meal_per_day, 2),
        }

    def _base_fields(self, request: TripCostRequest, route: RoutePlan, travel: Resolved[float]) -> dict:
        return {
            "origin_city": request.origin_city.strip(),
            "destination_city": request.destination_city.strip(),
            "days": request.days,
            "travelers": request.travelers,
            "distance_km": route.distance_km,
            "selected_travel_mode": route.mode,
            "trip_type": route.trip_type,
            "travel_cost_source": travel.source,
        }

    async def estimate_trip_cost(self, request: TripCostRequest) -> CostEstimate:
        """Deterministic estimate from datasets, APIs and policy tables."""
        route = await self.plan_route(request)
        travel = await self.travel_cost(request, route)
        lodging = await self._lodging(request, route)

        estimate = CostEstimate(
            **self._base_fields(request, route, travel),
            **self._totals(request, travel.value, lodging.hotel_per_night, lodging.meal_per_person_per_day),
        )
        logger.info(
            f"Estimate {estimate.origin_city} -> {estimate.destination_city}: total {estimate.total_cost} "
            f"(travel {estimate.travel_cost} via {travel.source})"
        )
        return estimate

    async def estimate_ai_enhanced_trip_cost(self, request: AiTripCostRequest) -> AiEnhancedCostEstimate:
        """Estimate with LLM lodging/meal costs, falling back to the deterministic resolver."""
        route = await self.plan_route(request)
        travel = await self.travel_cost(request, route)

        try:
            ai = await self.ai_costs.get_brief_estimate(
                request.destination_city.strip(),
                request.stay_preference,
                request.meal_plan,
                request.additional_context,
            )
            hotel, meal = ai.hotel_cost_per_night, ai.meal_cost_per_person_per_day
            insights = ai.narrative_insights
            method = CostMethod.AI_POWERED
        except LLMUnavailable as e:
            logger.warning(f"AI cost estimate unavailable, using dataset costs: {e}")
            lodging = await self._lodging(request, route)
            hotel, meal = lodging.hotel_per_night, lodging.meal_per_person_per_day
            insights = (
                f"AI estimate unavailable; hotel cost from {lodging.hotel_source}, "
                f"meal cost from {lodging.meal_source}."
            )
            method = CostMethod.CSV_FALLBACK

        estimate = AiEnhancedCostEstimate(
            **self._base_fields(request, route, travel),
            **self._totals(request, travel.value, hotel, meal),
            accommodation_preference=request.stay_preference,
            meal_preference=request.meal_plan,
            ai_hotel_cost_per_night=hotel,
            ai_meal_cost_per_person_per_day=meal,
            ai_insights=insights,
            cost_method=method,
        )
        logger.info(
            f"AI-enhanced estimate {estimate.origin_city} -> {estimate.destination_city}: "
            f"total {estimate.total_cost} ({method.value})"
        )
        return estimate

    async def close(self):
        await self.resolver.geocoder.close()
        await self.distance.close()
        await self.lodging.pricing.close()
        await self.amadeus.close()
        await self.ai_costs.llm.close()
