"""AI cost estimator: LLM prompt, three-stage response parsing, band validation.

Two variants share the parser:
- brief: destination + stay/meal tier, loose sanity bands
- detailed: accommodation type + meal preference, category bands scaled by the
  destination's cost-of-living multiplier, with totals and a breakdown
"""

import json
import logging
import math
import re
from dataclasses import dataclass

from tripcost.config import Settings, settings as default_settings
from tripcost.data.currency import format_inr
from tripcost.data.pricing_tables import (
    BRIEF_HOTEL_BAND_USD,
    BRIEF_MEAL_BAND_USD,
    DEFAULT_AI_HOTEL_USD,
    DEFAULT_AI_MEAL_USD,
    HOTEL_COST_BANDS_USD,
    MEAL_COST_BANDS_USD,
    CostBand,
    destination_multiplier,
)
from tripcost.exceptions import AiParseError
from tripcost.schemas.cost import (
    AccommodationType,
    AiCostEstimate,
    CostOnlyResult,
    DetailedAiCostEstimate,
    MealPlan,
    MealPreference,
    StayPreference,
)
from tripcost.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r"\{[\s\S]*\}")
HOTEL_NUMBER = re.compile(r"hotel.*?(\d+(?:\.\d+)?)", re.IGNORECASE)
MEAL_NUMBER = re.compile(r"meal.*?(\d+(?:\.\d+)?)", re.IGNORECASE)

HOTEL_KEYS = ("hotelCostPerNight", "hotelCost")
MEAL_KEYS = ("mealCostPerPersonPerDay", "mealCost")

CONFIDENCE_LABELS = {"json": "high", "regex": "medium", "default": "low"}

BRIEF_SYSTEM_PROMPT = """You are a professional travel cost analyst with real-world knowledge of accommodation and dining prices worldwide.
Estimate what travelers actually pay, considering local cost of living, tourism infrastructure and seasonal demand.
Never inflate prices."""

BRIEF_PROMPT = """Estimate accommodation and dining costs for "{destination}".

ACCOMMODATION: {stay}
DINING: {meal}

Accommodation categories:
- budget friendly: basic hotels, guesthouses, hostels
- comfort stay: mid-range 3-4 star hotels
- luxury: 5-star hotels and resorts

Dining categories:
- budget friendly: local eateries, street food, food courts
- casual dining: mid-range restaurants and cafes
- fine dining: upscale restaurants

Respond ONLY with valid JSON, no markdown, no preamble:
{{
    "hotelCost": <USD per night>,
    "mealCost": <USD per person per day>,
    "aiSummary": "One or two sentences on the cost factors in {destination}"
}}"""

DETAILED_SYSTEM_PROMPT = """You are a professional travel cost estimation expert.
Provide accurate, realistic estimates based on current market rates.
Always stay within the cost ranges you are given."""

DETAILED_PROMPT = """Estimate accommodation and meal costs in {destination}{season}.

DESTINATION: {destination}
DURATION: {days} days
TRAVELERS: {travelers} people
ACCOMMODATION TYPE: {accommodation}
MEAL PREFERENCE: {meal}{requirements}

Cost guidelines:
- Hotel cost must be between ${hotel_min} and ${hotel_max} per night for {accommodation}
- Meal cost must be between ${meal_min} and ${meal_max} per person per day for {meal}
- Meals cover breakfast, lunch, dinner and snacks
- Consider local cost of living and typical tourist spending

Respond ONLY with valid JSON, no markdown, no preamble:
{{
    "hotelCostPerNight": <USD within the range>,
    "mealCostPerPersonPerDay": <USD within the range>,
    "currency": "USD",
    "costBreakdown": "Why these numbers, regional pricing factors",
    "recommendations": "Specific places to stay and eat with prices",
    "localInsights": "Best value areas, food culture, money-saving tips"
}}"""


@dataclass
class ParsedCosts:
    """USD amounts pulled from an LLM response, plus which parser stage produced them."""
    hotel: float
    meal: float
    source: str
    summary: str = ""
    cost_breakdown: str = ""
    recommendations: str = ""
    local_insights: str = ""

    @property
    def confidence_label(self) -> str:
        return CONFIDENCE_LABELS[self.source]


def _number(value, default: float) -> float:
    """Float from an LLM field; missing, zero or non-numeric values give the default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or number == 0:
        return default
    return number


def _first(data: dict, keys: tuple[str, ...]):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_json_block(text: str) -> ParsedCosts:
    """Stage 1: the outermost {...} block. Raises AiParseError when there is none."""
    match = JSON_BLOCK.search(text or "")
    if not match:
        raise AiParseError("No JSON block in LLM response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AiParseError(f"Invalid JSON in LLM response: {e}") from e
    if not isinstance(data, dict):
        raise AiParseError("LLM JSON payload is not an object")

    return ParsedCosts(
        hotel=_number(_first(data, HOTEL_KEYS), DEFAULT_AI_HOTEL_USD),
        meal=_number(_first(data, MEAL_KEYS), DEFAULT_AI_MEAL_USD),
        source="json",
        summary=_text(data.get("aiSummary")),
        cost_breakdown=_text(data.get("costBreakdown")),
        recommendations=_text(data.get("recommendations")),
        local_insights=_text(data.get("localInsights")),
    )


def _extract_section(text: str, keyword: str) -> str:
    match = re.search(rf"{keyword}s?:?\s*([\s\S]*?)(?=\n\n|\n[A-Z]|$)", text, re.IGNORECASE)
    return match.group(1).strip() if match else ""


def parse_regex(text: str) -> ParsedCosts | None:
    """Stage 2: first number after 'hotel' / 'meal' on the same line."""
    hotel = HOTEL_NUMBER.search(text or "")
    meal = MEAL_NUMBER.search(text or "")
    if not hotel and not meal:
        return None

    return ParsedCosts(
        hotel=float(hotel.group(1)) if hotel else DEFAULT_AI_HOTEL_USD,
        meal=float(meal.group(1)) if meal else DEFAULT_AI_MEAL_USD,
        source="regex",
        cost_breakdown=_extract_section(text, "breakdown"),
        recommendations=_extract_section(text, "recommendation"),
        local_insights=_extract_section(text, "insight"),
    )


def default_estimate() -> ParsedCosts:
    """Stage 3: fixed defaults."""
    return ParsedCosts(hotel=DEFAULT_AI_HOTEL_USD, meal=DEFAULT_AI_MEAL_USD, source="default")


def parse_ai_response(text: str) -> ParsedCosts:
    try:
        return parse_json_block(text)
    except AiParseError as e:
        logger.warning(f"{e}, trying regex extraction")

    parsed = parse_regex(text)
    if parsed:
        return parsed

    logger.warning("No cost figures in LLM response, using defaults")
    return default_estimate()


def validate_cost(value: float, band: CostBand) -> float:
    """Out-of-band (or NaN) values are replaced by the band midpoint, not clipped."""
    if math.isnan(value) or not band.contains(value):
        return band.midpoint
    return value


def generate_brief_summary(
    destination: str, hotel_inr: float, meal_inr: float, stay: StayPreference, meal: MealPlan
) -> str:
    stay_text = stay.value.replace("_", " ")
    meal_text = meal.value.replace("_", " ")
    return (
        f"AI Analysis: {destination} offers {stay_text} accommodation at {format_inr(hotel_inr)} per night "
        f"and {meal_text} dining at {format_inr(meal_inr)} per person daily."
    )


def format_cost_breakdown(original: str, hotel_inr: float, meal_inr: float) -> str:
    """INR breakdown with a typical split of the daily meal budget."""
    def share(low: float, high: float) -> str:
        return f"{format_inr(meal_inr * low)} - {format_inr(meal_inr * high)}"

    lines = [
        "COST BREAKDOWN (in Indian Rupees):",
        "",
        "ACCOMMODATION:",
        f"- Hotel cost per night: {format_inr(hotel_inr)}",
        "- Service charges & taxes: usually 12-18% GST included",
        "",
        "MEALS:",
        f"- Meal cost per person per day: {format_inr(meal_inr)}",
        f"- Breakfast: {share(0.25, 0.35)}",
        f"- Lunch: {share(0.35, 0.45)}",
        f"- Dinner: {share(0.35, 0.45)}",
        f"- Snacks & beverages: {share(0.15, 0.25)}",
    ]
    if original:
        lines += ["", original]
    return "\n".join(lines)


class AiCostService:
    """LLM-backed hotel and meal estimates. Raises LLMUnavailable when no provider answers."""

    def __init__(self, llm: LLMClient, settings: Settings | None = None):
        self.llm = llm
        self.settings = settings or default_settings

    def to_inr(self, usd: float) -> float:
        return float(round(usd * self.settings.usd_to_inr))

    def current_exchange_rate(self) -> float:
        return self.settings.usd_to_inr

    @staticmethod
    def get_cost_ranges() -> dict:
        """USD bands per accommodation type and meal preference."""
        return {
            "hotel_ranges": {k: {"min": b.min, "max": b.max} for k, b in HOTEL_COST_BANDS_USD.items()},
            "meal_ranges": {k: {"min": b.min, "max": b.max} for k, b in MEAL_COST_BANDS_USD.items()},
        }

    async def _ask(self, system: str, prompt: str, *, max_tokens: int, temperature: float) -> ParsedCosts:
        raw = await self.llm.complete(system=system, user=prompt, max_tokens=max_tokens, temperature=temperature)
        return parse_ai_response(raw)

    async def get_brief_estimate(
        self,
        destination: str,
        stay: StayPreference = StayPreference.COMFORT_STAY,
        meal: MealPlan = MealPlan.CASUAL_DINING,
        additional_context: str | None = None,
    ) -> AiCostEstimate:
        prompt = BRIEF_PROMPT.format(
            destination=destination,
            stay=stay.value.replace("_", " "),
            meal=meal.value.replace("_", " "),
        )
        if additional_context:
            prompt += f"\n\nADDITIONAL CONTEXT: {additional_context}"

        parsed = await self._ask(BRIEF_SYSTEM_PROMPT, prompt, max_tokens=300, temperature=0.3)
        hotel_usd = validate_cost(parsed.hotel, BRIEF_HOTEL_BAND_USD)
        meal_usd = validate_cost(parsed.meal, BRIEF_MEAL_BAND_USD)
        if (hotel_usd, meal_usd) != (parsed.hotel, parsed.meal):
            logger.warning(
                f"Adjusted brief AI costs for {destination}: hotel {parsed.hotel} -> {hotel_usd}, "
                f"meal {parsed.meal} -> {meal_usd}"
            )

        hotel_inr = self.to_inr(hotel_usd)
        meal_inr = self.to_inr(meal_usd)
        return AiCostEstimate(
            destination=destination,
            hotel_cost_per_night=hotel_inr,
            meal_cost_per_person_per_day=meal_inr,
            narrative_insights=parsed.summary or generate_brief_summary(destination, hotel_inr, meal_inr, stay, meal),
            confidence_label=parsed.confidence_label,
            stay_preference=stay,
            meal_plan=meal,
        )

    async def get_detailed_estimate(
        self,
        destination: str,
        days: int,
        travelers: int,
        accommodation_type: AccommodationType = AccommodationType.MID_RANGE,
        meal_preference: MealPreference = MealPreference.CASUAL_DINING,
        specific_requirements: str | None = None,
        season: str | None = None,
    ) -> DetailedAiCostEstimate:
        multiplier = destination_multiplier(destination)
        hotel_band = HOTEL_COST_BANDS_USD[accommodation_type.value].scaled(multiplier)
        meal_band = MEAL_COST_BANDS_USD[meal_preference.value].scaled(multiplier)

        prompt = DETAILED_PROMPT.format(
            destination=destination,
            season=f" during {season} season" if season else "",
            days=days,
            travelers=travelers,
            accommodation=accommodation_type.value,
            meal=meal_preference.value,
            requirements=f"\nADDITIONAL REQUIREMENTS: {specific_requirements}" if specific_requirements else "",
            hotel_min=round(hotel_band.min),
            hotel_max=round(hotel_band.max),
            meal_min=round(meal_band.min),
            meal_max=round(meal_band.max),
        )
        parsed = await self._ask(DETAILED_SYSTEM_PROMPT, prompt, max_tokens=1500, temperature=0.2)

        hotel_usd = validate_cost(parsed.hotel, hotel_band)
        if hotel_usd != parsed.hotel:
            logger.warning(f"Adjusted hotel cost for {destination} from {parsed.hotel} to {hotel_usd}")
        meal_usd = validate_cost(parsed.meal, meal_band)
        if meal_usd != parsed.meal:
            logger.warning(f"Adjusted meal cost for {destination} from {parsed.meal} to {meal_usd}")

        hotel_inr = hotel_usd * self.settings.usd_to_inr
        meal_inr = meal_usd * self.settings.usd_to_inr
        total_hotel = hotel_inr * days
        total_meal = meal_inr * travelers * days

        return DetailedAiCostEstimate(
            destination=destination,
            days=days,
            travelers=travelers,
            hotel_cost_per_night=round(hotel_inr),
            total_hotel_cost=round(total_hotel),
            meal_cost_per_person_per_day=round(meal_inr),
            total_meal_cost=round(total_meal),
            total_accommodation_and_meal_cost=round(total_hotel + total_meal),
            accommodation_type=accommodation_type,
            meal_preference=meal_preference,
            recommendations=parsed.recommendations or "Recommendations not available",
            cost_breakdown=format_cost_breakdown(parsed.cost_breakdown, hotel_inr, meal_inr),
            local_insights=parsed.local_insights or "Local insights not available",
            confidence_label=parsed.confidence_label,
        )

    async def get_cost_only(
        self,
        destination: str,
        days: int,
        travelers: int,
        accommodation_type: AccommodationType = AccommodationType.MID_RANGE,
        meal_preference: MealPreference = MealPreference.CASUAL_DINING,
    ) -> CostOnlyResult:
        estimate = await self.get_detailed_estimate(
            destination, days, travelers, accommodation_type, meal_preference
        )
        return CostOnlyResult(
            destination=destination,
            days=days,
            travelers=travelers,
            hotel_cost_per_night=estimate.hotel_cost_per_night,
            total_hotel_cost=estimate.total_hotel_cost,
            meal_cost_per_person_per_day=estimate.meal_cost_per_person_per_day,
            total_meal_cost=estimate.total_meal_cost,
            total_cost=estimate.total_accommodation_and_meal_cost,
        )

    async def get_hotel_cost_only(
        self,
        destination: str,
        days: int,
        accommodation_type: AccommodationType = AccommodationType.MID_RANGE,
    ) -> dict:
        costs = await self.get_cost_only(destination, days, 1, accommodation_type=accommodation_type)
        return {
            "hotel_cost_per_night": costs.hotel_cost_per_night,
            "total_hotel_cost": costs.total_hotel_cost,
        }

    async def get_meal_cost_only(
        self,
        destination: str,
        days: int,
        travelers: int,
        meal_preference: MealPreference = MealPreference.CASUAL_DINING,
    ) -> dict:
        costs = await self.get_cost_only(destination, days, travelers, meal_preference=meal_preference)
        return {
            "meal_cost_per_person_per_day": costs.meal_cost_per_person_per_day,
            "total_meal_cost": costs.total_meal_cost,
        }
