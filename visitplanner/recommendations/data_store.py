from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import FacilityKind, ParkingFacility, Venue

logger = logging.getLogger(__name__)

_NUMERIC_VENUE_COLUMNS = [
    "rideshare_fare",
    "transit_walk_miles",
    "transit_fare",
    "shuttle_walk_miles",
]
_NUMERIC_FACILITY_COLUMNS = ["walk_miles", "flat_rate", "hourly_rate"]

# Loaded frames keyed by data directory
_frames: dict[Path, tuple[pd.DataFrame, pd.DataFrame]] = {}


def _load(config: CatalogConfig) -> tuple[pd.DataFrame, pd.DataFrame]:
    venues = pd.read_csv(config.venues_path, dtype=str).fillna("")
    for col in _NUMERIC_VENUE_COLUMNS:
        venues[col] = pd.to_numeric(venues[col], errors="coerce").fillna(0.0)
    venues["id"] = venues["id"].str.strip().str.lower()

    facilities = pd.read_csv(config.facilities_path, dtype=str).fillna("")
    for col in _NUMERIC_FACILITY_COLUMNS:
        facilities[col] = pd.to_numeric(facilities[col], errors="coerce").fillna(0.0)
    facilities["venue_id"] = facilities["venue_id"].str.strip().str.lower()

    # Rows with an unknown kind would never match a rule
    known_kinds = {k.value for k in FacilityKind}
    unknown = ~facilities["kind"].isin(known_kinds)
    if unknown.any():
        logger.warning(
            "Skipping %d facilities with unknown kind: %s",
            int(unknown.sum()),
            sorted(facilities.loc[unknown, "kind"].unique().tolist()),
        )
        facilities = facilities.loc[~unknown]

    logger.info(
        "Loaded venue catalog from %s (%d venues, %d facilities)",
        config.data_dir,
        len(venues),
        len(facilities),
    )
    return venues, facilities


def get_frames(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return the in-memory (venues, facilities) frames, loading them on first call."""
    key = config.data_dir.resolve()
    if key not in _frames:
        _frames[key] = _load(config)
    return _frames[key]


def clear_catalog() -> None:
    _frames.clear()


def list_venues(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[Venue]:
    venues, _ = get_frames(config)
    return [Venue(**row) for row in venues.to_dict(orient="records")]


def get_venue(venue_id: str, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> Venue | None:
    venues, _ = get_frames(config)
    match = venues.loc[venues["id"] == (venue_id or "").strip().lower()]
    if match.empty:
        return None
    return Venue(**match.iloc[0].to_dict())


def get_facilities(
    venue_id: str,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> list[ParkingFacility]:
    """Parking facilities for *venue_id*, nearest first."""
    _, facilities = get_frames(config)
    rows = facilities.loc[facilities["venue_id"] == (venue_id or "").strip().lower()]
    rows = rows.sort_values(["walk_miles", "flat_rate"], kind="stable")
    return [ParkingFacility(**row) for row in rows.to_dict(orient="records")]
