from enum import Enum

from pydantic import BaseModel, Field, field_validator


class TravelMode(str, Enum):
    TRAIN = "train"
    BUS = "bus"
    FLIGHT = "flight"


class TravelModeChoice(str, Enum):
    AUTO = "auto"
    TRAIN = "train"
    BUS = "bus"
    FLIGHT = "flight"


class TripType(str, Enum):
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"


class StayPreference(str, Enum):
    BUDGET_FRIENDLY = "budget_friendly"
    COMFORT_STAY = "comfort_stay"
    LUXURY = "luxury"


class MealPlan(str, Enum):
    BUDGET_FRIENDLY = "budget_friendly"
    CASUAL_DINING = "casual_dining"
    FINE_DINING = "fine_dining"


class AccommodationType(str, Enum):
    BUDGET = "budget"
    MID_RANGE = "mid_range"
    LUXURY = "luxury"
    HOSTEL = "hostel"
    BOUTIQUE = "boutique"


class MealPreference(str, Enum):
    LOCAL_STREET_FOOD = "local_street_food"
    CASUAL_DINING = "casual_dining"
    FINE_DINING = "fine_dining"
    FAST_FOOD = "fast_food"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"


class CostMethod(str, Enum):
    AI_POWERED = "AI_POWERED"
    CSV_FALLBACK = "CSV_FALLBACK"


class CityCoordinate(BaseModel):
    name: str
    latitude: float
    longitude: float

    model_config = {"frozen": True}


class CityCostProfile(BaseModel):
    """Bundled cost-of-living row; money already converted to the base currency."""
    city_name: str
    latitude: float
    longitude: float
    meals_basic: float = Field(ge=0)
    meals_medium: float = Field(ge=0)
    meals_luxury: float = Field(ge=0)
    hotel_basic: float = Field(ge=0)
    hotel_medium: float = Field(ge=0)
    hotel_luxury: float = Field(ge=0)

    model_config = {"frozen": True}

    @property
    def coordinate(self) -> CityCoordinate:
        return CityCoordinate(name=self.city_name, latitude=self.latitude, longitude=self.longitude)

    def hotel_for(self, stay: StayPreference) -> float:
        match stay:
            case StayPreference.BUDGET_FRIENDLY:
                return self.hotel_basic
            case StayPreference.COMFORT_STAY:
                return self.hotel_medium
            case StayPreference.LUXURY:
                return self.hotel_luxury

    def meals_for(self, meal: MealPlan) -> float:
        match meal:
            case MealPlan.BUDGET_FRIENDLY:
                return self.meals_basic
            case MealPlan.CASUAL_DINING:
                return self.meals_medium
            case MealPlan.FINE_DINING:
                return self.meals_luxury


class TripCostRequest(BaseModel):
    origin_city: str = Field(min_length=1)
    destination_city: str = Field(min_length=1)
    days: int = Field(ge=1)
    travelers: int = Field(ge=1)
    travel_mode: TravelModeChoice = TravelModeChoice.AUTO
    origin_country: str | None = None
    destination_country: str | None = None
    stay_preference: StayPreference = StayPreference.COMFORT_STAY
    meal_plan: MealPlan = MealPlan.CASUAL_DINING

    @field_validator("origin_city", "destination_city")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("city name must not be blank")
        return value


class AiTripCostRequest(TripCostRequest):
    additional_context: str | None = None


class CostEstimate(BaseModel):
    origin_city: str
    destination_city: str
    days: int
    travelers: int
    distance_km: float = Field(ge=0)
    travel_cost: float = Field(ge=0)
    hotel_cost: float = Field(ge=0)
    meal_cost: float = Field(ge=0)
    total_cost: float = Field(ge=0)
    hotel_cost_per_night: float = Field(ge=0)
    meal_cost_per_person_per_day: float = Field(ge=0)
    selected_travel_mode: TravelMode
    trip_type: TripType
    travel_cost_source: str


class AiEnhancedCostEstimate(CostEstimate):
    accommodation_preference: StayPreference
    meal_preference: MealPlan
    ai_hotel_cost_per_night: float = Field(ge=0)
    ai_meal_cost_per_person_per_day: float = Field(ge=0)
    ai_insights: str
    cost_method: CostMethod


class AiCostEstimate(BaseModel):
    destination: str
    hotel_cost_per_night: float = Field(ge=0)
    meal_cost_per_person_per_day: float = Field(ge=0)
    narrative_insights: str
    confidence_label: str
    stay_preference: StayPreference | None = None
    meal_plan: MealPlan | None = None


class DetailedAiCostEstimate(BaseModel):
    destination: str
    days: int
    travelers: int
    hotel_cost_per_night: float = Field(ge=0)
    total_hotel_cost: float = Field(ge=0)
    meal_cost_per_person_per_day: float = Field(ge=0)
    total_meal_cost: float = Field(ge=0)
    total_accommodation_and_meal_cost: float = Field(ge=0)
    accommodation_type: AccommodationType
    meal_preference: MealPreference
    recommendations: str
    cost_breakdown: str
    local_insights: str
    confidence_label: str
    currency: str = "INR"


class CostOnlyResult(BaseModel):
    destination: str
    days: int
    travelers: int
    hotel_cost_per_night: float = Field(ge=0)
    total_hotel_cost: float = Field(ge=0)
    meal_cost_per_person_per_day: float = Field(ge=0)
    total_meal_cost: float = Field(ge=0)
    total_cost: float = Field(ge=0)
