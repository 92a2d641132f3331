from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .fragment.config import DEFAULT_FRAGMENT_CONFIG
from .fragment.models import DAY_VALUES, MODE_VALUES
from .fragment.resolver import parse_day, parse_time, split_hhmm
from .recommendations.config import DEFAULT_ENFORCEMENT_CONFIG
from .recommendations.data_store import list_venues
from .recommendations.enforcement import clock_label, is_parking_enforced
from .recommendations.models import (
    ControlChangeRequest,
    EnforcementResponse,
    OptionToggleRequest,
    PlanRequest,
    PlanResponse,
)
from .sync.session import TripSession

app = FastAPI(title="Venue Visit Planner API", version="1.0.0")

_STATIC_DIR = Path(__file__).resolve().parent / "static"


def _plan_response(session: TripSession) -> PlanResponse:
    return PlanResponse(
        fragment=session.fragment,
        preferences=session.preferences,
        recommendation=session.recommendation,
        can_reset=session.can_reset,
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    cfg = DEFAULT_FRAGMENT_CONFIG
    return {
        "modes": list(MODE_VALUES),
        "days": list(DAY_VALUES),
        "people": {"min": cfg.min_people, "max": cfg.max_people, "default": cfg.default_people},
        "default_destination": cfg.default_destination,
        "destinations": [{"id": v.id, "name": v.name} for v in list_venues()],
    }


@app.get("/api/enforcement", response_model=EnforcementResponse)
def enforcement(day: str, time: str) -> EnforcementResponse:
    resolved_day = parse_day(day)
    # Accept both the "HH:MM" select value and URL shorthand like 830
    parts = split_hhmm(time)
    resolved_time = f"{parts[0]:02d}:{parts[1]:02d}" if parts else parse_time(time)
    if not resolved_day or not resolved_time:
        raise HTTPException(status_code=400, detail="A valid day and time are required")

    cfg = DEFAULT_ENFORCEMENT_CONFIG
    return EnforcementResponse(
        day=resolved_day,
        time=resolved_time,
        enforced=is_parking_enforced(resolved_day, resolved_time),
        window=f"{clock_label(cfg.start)} to {clock_label(cfg.end)}",
    )


# ── Plan endpoints ───────────────────────────────────────────────────────


@app.post("/api/plan", response_model=PlanResponse)
def plan(body: PlanRequest) -> PlanResponse:
    return _plan_response(TripSession.from_fragment(body.fragment))


@app.post("/api/plan/controls", response_model=PlanResponse)
def plan_controls(body: ControlChangeRequest) -> PlanResponse:
    session = TripSession.from_fragment(body.fragment)
    session.on_control_change(body.changes)
    return _plan_response(session)


@app.post("/api/plan/options", response_model=PlanResponse)
def plan_options(body: OptionToggleRequest) -> PlanResponse:
    session = TripSession.from_fragment(body.fragment)
    card_count = len(session.recommendation.cards)
    if body.option > card_count:
        raise HTTPException(
            status_code=400,
            detail=f"Option {body.option} does not exist ({card_count} cards shown)",
        )
    session.toggle_option(body.option)
    return _plan_response(session)


@app.post("/api/plan/reset", response_model=PlanResponse)
def plan_reset(body: PlanRequest) -> PlanResponse:
    session = TripSession.from_fragment(body.fragment)
    session.reset_where_when()
    return _plan_response(session)


# ── Static ───────────────────────────────────────────────────────────────


app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")


@app.get("/")
def root():
    return FileResponse(str(_STATIC_DIR / "index.html"))
