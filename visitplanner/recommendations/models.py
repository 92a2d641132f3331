from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..fragment.models import ControlChanges, TripPreferences


# ── Catalog ──────────────────────────────────────────────────────────────


class FacilityKind(str, Enum):
    metered_street = "metered_street"
    free_street = "free_street"
    surface_lot = "surface_lot"
    garage = "garage"


class Venue(BaseModel):
    id: str
    name: str
    address: str
    rideshare_dropoff: str
    rideshare_fare: float
    transit_route: str
    transit_stop: str
    transit_walk_miles: float
    transit_fare: float
    park_ride_lot: str
    shuttle_name: str
    shuttle_stop: str
    shuttle_walk_miles: float
    bike_racks: str
    scooter_corral: str


class ParkingFacility(BaseModel):
    venue_id: str
    id: str
    kind: FacilityKind
    title: str
    name: str
    walk_miles: float = Field(ge=0.0)
    flat_rate: float = Field(default=0.0, ge=0.0)
    hourly_rate: float = Field(default=0.0, ge=0.0)
    note: str = ""


# ── Recommendation ───────────────────────────────────────────────────────


class StrategyKind(str, Enum):
    rideshare = "rideshare"
    drive_park = "drive_park"
    park_and_ride = "park_and_ride"
    transit = "transit"
    shuttle = "shuttle"
    micromobility = "micromobility"
    bike = "bike"
    unknown = "unknown"


class RecommendationStatus(str, Enum):
    incomplete = "incomplete"
    recommended = "recommended"
    unknown = "unknown"


class StrategyStep(BaseModel):
    title: str
    detail: str | None = None


class StrategyCard(BaseModel):
    index: int = Field(default=1, ge=1, description="1-based position, matches option=")
    kind: StrategyKind
    title: str
    summary: str
    cost_dollars: float | None = None
    walk_miles: float | None = None
    steps: list[StrategyStep] = Field(default_factory=list)
    expanded: bool = False


class Recommendation(BaseModel):
    destination: str
    destination_name: str | None = None
    status: RecommendationStatus
    strategy: StrategyKind = StrategyKind.unknown
    cards: list[StrategyCard] = Field(default_factory=list)
    reason: str | None = None
    parking_enforced: bool | None = None
    missing: list[str] = Field(default_factory=list)


# ── API bodies ───────────────────────────────────────────────────────────


class PlanRequest(BaseModel):
    fragment: str = Field(default="", max_length=2000)


class ControlChangeRequest(PlanRequest):
    changes: ControlChanges


class OptionToggleRequest(PlanRequest):
    option: int = Field(..., ge=1)


class PlanResponse(BaseModel):
    fragment: str
    preferences: TripPreferences
    recommendation: Recommendation
    can_reset: bool = False


class EnforcementResponse(BaseModel):
    day: str
    time: str
    enforced: bool
    window: str
