from pathlib import Path

from pydantic_settings import BaseSettings

_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    # Reference datasets
    cities_csv_path: Path = _DATA_DIR / "top_travel_cities.csv"
    city_costs_csv_path: Path = _DATA_DIR / "city_costs.csv"

    # Currency
    base_currency: str = "INR"
    usd_to_inr: float = 83.0
    home_country: str = "India"

    # OpenCage geocoding
    opencage_api_key: str = ""
    opencage_base_url: str = "https://api.opencagedata.com/geocode/v1/json"
    geocoding_timeout: float = 10.0

    # GraphHopper routing
    graphhopper_api_key: str = ""
    graphhopper_base_url: str = "https://graphhopper.com/api/1/route"
    routing_timeout: float = 15.0

    # Amadeus
    amadeus_client_id: str = ""
    amadeus_client_secret: str = ""
    amadeus_test_base_url: str = "https://test.api.amadeus.com"
    amadeus_production_base_url: str = "https://api.amadeus.com"
    amadeus_auth_timeout: float = 15.0
    amadeus_search_timeout: float = 30.0
    amadeus_max_offers: int = 10
    flight_departure_offset_days: int = 30

    # Hotel / meal pricing API
    pricing_api_key: str = ""
    pricing_api_base_url: str = ""
    pricing_timeout: float = 10.0

    # LLM, OpenAI-compatible chat completions (Groq by default)
    llm_api_key: str = ""
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.1-8b-instant"
    llm_timeout: float = 30.0

    # Anthropic (fallback provider)
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"

    @property
    def amadeus_base_urls(self) -> list[str]:
        return [self.amadeus_test_base_url, self.amadeus_production_base_url]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
