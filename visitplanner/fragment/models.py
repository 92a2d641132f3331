from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .config import DEFAULT_FRAGMENT_CONFIG


class Mode(str, Enum):
    drive = "drive"
    rideshare = "rideshare"
    transit = "transit"
    micromobility = "micromobility"
    shuttle = "shuttle"
    bike = "bike"


class Day(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


MODE_VALUES: tuple[str, ...] = tuple(m.value for m in Mode)
DAY_VALUES: tuple[str, ...] = tuple(d.value for d in Day)


class TripPreferences(BaseModel):
    """Resolved trip preferences; always a projection of the current fragment."""

    destination: str = DEFAULT_FRAGMENT_CONFIG.default_destination
    modes: list[Mode] = Field(default_factory=list)
    day: str = ""
    time: str = Field(default="", description='24h "HH:MM" or empty')
    # Upper bound is enforced by parse_people against the active FragmentConfig
    people: int = Field(default=DEFAULT_FRAGMENT_CONFIG.default_people, ge=1)
    walk_miles: float = Field(default=0.0, ge=0.0)
    cost_dollars: float = Field(default=0.0, ge=0.0)
    expanded_options: list[int] = Field(default_factory=list)

    def has_mode(self, mode: Mode) -> bool:
        return mode in self.modes


class ControlChanges(BaseModel):
    """Partial update coming from UI controls; ``None`` means untouched."""

    destination: str | None = None
    modes: list[str] | None = None
    day: str | None = None
    time: str | None = Field(default=None, description='24h "HH:MM" select value, "" clears')
    people: int | None = None
    walk_miles: float | None = None
    cost_dollars: float | None = None
