from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class EnforcementConfig:
    weekdays: tuple[str, ...] = ("monday", "tuesday", "wednesday", "thursday", "friday")
    # Half-open window: start is enforced, end is not.
    start: str = "08:00"
    end: str = "19:00"


@dataclass(frozen=True)
class RulesConfig:
    affordable_lot_min: float = 8.0
    premium_min: float = 20.0
    surface_lot_min_walk_miles: float = 0.5
    # 0 keeps the per-facility hourly rate from the catalog
    meter_hourly_rate: float = float(os.getenv("VISIT_METER_HOURLY_RATE", "0") or 0)
    max_cards: int = 3


@dataclass(frozen=True)
class CatalogConfig:
    """
    Location of the static venue catalog.
    """

    data_dir: Path = Path(os.getenv("VISIT_DATA_DIR", str(_PACKAGE_DATA_DIR)))
    venues_filename: str = "venues.csv"
    facilities_filename: str = "facilities.csv"

    @property
    def venues_path(self) -> Path:
        return self.data_dir / self.venues_filename

    @property
    def facilities_path(self) -> Path:
        return self.data_dir / self.facilities_filename


DEFAULT_ENFORCEMENT_CONFIG = EnforcementConfig()
DEFAULT_RULES_CONFIG = RulesConfig()
DEFAULT_CATALOG_CONFIG = CatalogConfig()
