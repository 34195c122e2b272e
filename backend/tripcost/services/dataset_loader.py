"""Reference dataset loader: bundled city coordinates and cost-of-living tables."""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path

from tripcost.config import Settings, settings as default_settings
from tripcost.data.currency import usd_to_base
from tripcost.schemas.cost import CityCoordinate, CityCostProfile

logger = logging.getLogger(__name__)

COST_COLUMNS = (
    "meals_basic", "meals_medium", "meals_luxury",
    "hotel_basic", "hotel_medium", "hotel_luxury",
)


@dataclass
class ReferenceData:
    """In-memory lookup maps keyed by lower-cased city name."""
    coordinates: dict[str, CityCoordinate] = field(default_factory=dict)
    cost_profiles: dict[str, CityCostProfile] = field(default_factory=dict)
    countries: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def key(city: str) -> str:
        return city.strip().lower()

    def cost_profile(self, city: str) -> CityCostProfile | None:
        return self.cost_profiles.get(self.key(city))

    def coordinate(self, city: str) -> CityCoordinate | None:
        return self.coordinates.get(self.key(city))

    def country(self, city: str) -> str | None:
        return self.countries.get(self.key(city))


def _read_rows(path: Path) -> list[list[str]]:
    """Read CSV rows after the header. Missing files yield no rows."""
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            rows = list(csv.reader(fh))
    except OSError as e:
        logger.error(f"Error loading dataset {path}: {e}")
        return []
    return [[cell.strip() for cell in row] for row in rows[1:] if any(c.strip() for c in row)]


def load_city_coordinates(path: Path) -> dict[str, CityCoordinate]:
    """Parse `city,lat,lon[,country]` rows."""
    coords: dict[str, CityCoordinate] = {}
    for row in _read_rows(path):
        if len(row) < 3 or not row[0]:
            continue
        try:
            lat, lon = float(row[1]), float(row[2])
        except ValueError:
            logger.debug(f"Skipping malformed coordinate row: {row}")
            continue
        coords[ReferenceData.key(row[0])] = CityCoordinate(name=row[0], latitude=lat, longitude=lon)

    logger.info(f"Loaded {len(coords)} cities from {path.name}")
    return coords


def load_city_countries(path: Path) -> dict[str, str]:
    """Country column of the coordinate dataset. Rows without one are left out."""
    return {
        ReferenceData.key(row[0]): row[3]
        for row in _read_rows(path)
        if len(row) >= 4 and row[0] and row[3]
    }


def load_city_costs(path: Path, usd_to_inr: float) -> dict[str, CityCostProfile]:
    """Parse cost-profile rows, converting USD amounts to the base currency."""
    profiles: dict[str, CityCostProfile] = {}
    for row in _read_rows(path):
        if len(row) < 9 or not row[0]:
            continue
        try:
            lat, lon = float(row[1]), float(row[2])
            amounts = [usd_to_base(float(v), usd_to_inr) for v in row[3:9]]
        except ValueError:
            logger.debug(f"Skipping malformed cost row: {row}")
            continue
        if any(a < 0 for a in amounts):
            logger.debug(f"Skipping cost row with negative values: {row}")
            continue

        profiles[ReferenceData.key(row[0])] = CityCostProfile(
            city_name=row[0],
            latitude=lat,
            longitude=lon,
            **dict(zip(COST_COLUMNS, amounts)),
        )

    logger.info(f"Loaded {len(profiles)} city cost profiles from {path.name}")
    return profiles


def load_reference_data(settings: Settings | None = None) -> ReferenceData:
    """Load both bundled datasets synchronously. Call once at startup."""
    cfg = settings or default_settings
    cities_path = Path(cfg.cities_csv_path)
    return ReferenceData(
        coordinates=load_city_coordinates(cities_path),
        cost_profiles=load_city_costs(Path(cfg.city_costs_csv_path), cfg.usd_to_inr),
        countries=load_city_countries(cities_path),
    )
