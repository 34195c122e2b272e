import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tripcost.config import Settings, settings as default_settings
from tripcost.services.ai_cost_service import AiCostService
from tripcost.services.amadeus_client import AmadeusClient
from tripcost.services.coordinate_resolver import CoordinateResolver
from tripcost.services.cost_estimator import CostEstimator
from tripcost.services.dataset_loader import load_reference_data
from tripcost.services.distance_service import DistanceService
from tripcost.services.geocoding_client import GeocodingClient
from tripcost.services.llm_client import LLMClient
from tripcost.services.lodging_service import LodgingService
from tripcost.services.pricing_client import PricingClient

_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"

logger = logging.getLogger(__name__)


def configure_logging(log_dir: Path = _LOG_DIR):
    """Console + rotating file logging, level from LOG_LEVEL."""
    log_dir.mkdir(exist_ok=True)
    log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(),
            RotatingFileHandler(
                log_dir / "tripcost.log",
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            ),
        ],
    )

    # Quiet noisy libraries
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_cost_estimator(settings: Settings | None = None) -> CostEstimator:
    """Load the bundled datasets and wire every service. Call once at startup."""
    cfg = settings or default_settings
    reference = load_reference_data(cfg)
    if not reference.cost_profiles and not reference.coordinates:
        logger.warning("No bundled city data loaded; every city will need geocoding")

    estimator = CostEstimator(
        resolver=CoordinateResolver(reference, GeocodingClient(cfg)),
        distance_service=DistanceService(cfg),
        lodging=LodgingService(reference, PricingClient(cfg), cfg),
        amadeus=AmadeusClient(cfg),
        ai_costs=AiCostService(LLMClient(cfg), cfg),
    )
    logger.info(
        f"Cost estimator ready: {len(reference.cost_profiles)} cost profiles, "
        f"{len(reference.coordinates)} city coordinates"
    )
    return estimator
