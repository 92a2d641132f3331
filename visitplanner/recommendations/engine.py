from __future__ import annotations

import logging
import sys
from typing import Callable

from ..fragment.models import Mode, TripPreferences
from ..fragment.resolver import parse_fragment
from .config import (
    DEFAULT_CATALOG_CONFIG,
    DEFAULT_ENFORCEMENT_CONFIG,
    DEFAULT_RULES_CONFIG,
    CatalogConfig,
    EnforcementConfig,
    RulesConfig,
)
from .data_store import get_facilities, get_venue
from .enforcement import (
    clock_label,
    enforcement_end_label,
    is_parking_enforced,
    required_meter_cost,
)
from .models import (
    FacilityKind,
    ParkingFacility,
    Recommendation,
    RecommendationStatus,
    StrategyCard,
    StrategyKind,
    StrategyStep,
    Venue,
)

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Strategy"
NO_OPTIONS = "No options available"

_EPSILON = 1e-9

# Facility preference per budget band; lower sorts first.
_MID_BAND_RANK = {
    FacilityKind.surface_lot: 0,
    FacilityKind.garage: 1,
    FacilityKind.metered_street: 2,
    FacilityKind.free_street: 3,
}
_HIGH_BAND_RANK = {
    FacilityKind.garage: 0,
    FacilityKind.surface_lot: 1,
    FacilityKind.metered_street: 2,
    FacilityKind.free_street: 3,
}

# (cards, failure reason); an empty card list means the strategy is not viable
Evaluation = tuple[list[StrategyCard], str | None]


def _miles(value: float) -> str:
    return f"{value:g} mile" + ("" if value == 1 else "s")


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _within(distance: float, budget: float) -> bool:
    return distance <= budget + _EPSILON


# ---------------------------------------------------------------------------
# Drive and park
# ---------------------------------------------------------------------------


def _facility_cost(
    facility: ParkingFacility,
    prefs: TripPreferences,
    rules: RulesConfig,
    enforcement: EnforcementConfig,
) -> float:
    if facility.kind == FacilityKind.metered_street:
        rate = rules.meter_hourly_rate or facility.hourly_rate
        return required_meter_cost(prefs.day, prefs.time, rate, config=enforcement)
    if facility.kind == FacilityKind.free_street:
        return 0.0
    return facility.flat_rate


def _parking_card(
    facility: ParkingFacility,
    cost: float,
    prefs: TripPreferences,
    venue: Venue,
    enforcement: EnforcementConfig,
) -> StrategyCard:
    title, name = facility.title, facility.name
    walk = _miles(facility.walk_miles)
    end = enforcement_end_label(enforcement)

    if facility.kind == FacilityKind.metered_street and cost == 0:
        title, name = "Park at free street parking", "free street parking"
        summary = f"Meters are off at {clock_label(prefs.time)}, so {facility.note} are free. Walk {walk}."
        pay = StrategyStep(title="No payment needed", detail=f"Meters are only enforced until {end} on weekdays.")
    elif facility.kind == FacilityKind.metered_street:
        summary = f"Meters are enforced until {end}; plan on {_money(cost)} at {facility.note}, then walk {walk}."
        pay = StrategyStep(
            title="Pay the meter",
            detail=f"Feed {_money(cost)} to cover the time until {end}; meters are free after that.",
        )
    elif cost == 0:
        summary = f"No charge on {facility.note}. Walk {walk} to {venue.name}."
        pay = StrategyStep(title="No payment needed", detail="These streets are not metered.")
    else:
        summary = f"Event rate {_money(cost)} at {facility.note}. Walk {walk} to {venue.name}."
        pay = StrategyStep(title="Pay on entry", detail=f"Expect the {_money(cost)} event rate.")

    return StrategyCard(
        kind=StrategyKind.drive_park,
        title=title,
        summary=summary,
        cost_dollars=cost,
        walk_miles=facility.walk_miles,
        steps=[
            StrategyStep(title=f"Drive to the {name}", detail=f"Head for {facility.note}."),
            pay,
            StrategyStep(title=f"Walk to {venue.name}", detail=f"About {walk} on foot."),
        ],
    )


def _drive_park(
    prefs: TripPreferences,
    venue: Venue,
    facilities: list[ParkingFacility],
    rules: RulesConfig,
    enforcement: EnforcementConfig,
) -> Evaluation:
    in_range: list[tuple[ParkingFacility, float]] = []
    for facility in facilities:
        if not _within(facility.walk_miles, prefs.walk_miles):
            continue
        if (
            facility.kind == FacilityKind.surface_lot
            and prefs.walk_miles < rules.surface_lot_min_walk_miles
        ):
            continue
        in_range.append((facility, _facility_cost(facility, prefs, rules, enforcement)))

    if not in_range:
        return [], f"no parking is within {_miles(prefs.walk_miles)} of {venue.name}"

    budget = prefs.cost_dollars
    viable = [(f, cost) for f, cost in in_range if cost <= budget + _EPSILON]
    if not viable:
        cheapest, cost = min(in_range, key=lambda fc: (fc[1], fc[0].walk_miles))
        if budget <= 0:
            return [], "you're not willing to pay for parking and no free parking is within walking distance"
        if cheapest.kind == FacilityKind.metered_street:
            return [], (
                f"your {_money(budget)} budget doesn't cover the {_money(cost)} of metered parking "
                f"required until {enforcement_end_label(enforcement)}"
            )
        return [], (
            f"your {_money(budget)} budget doesn't cover the cheapest parking in range "
            f"({cheapest.name}, {_money(cost)})"
        )

    if budget >= rules.premium_min:
        viable.sort(key=lambda fc: (_HIGH_BAND_RANK[fc[0].kind], fc[0].walk_miles, fc[1]))
    elif budget >= rules.affordable_lot_min:
        viable.sort(key=lambda fc: (_MID_BAND_RANK[fc[0].kind], fc[1], fc[0].walk_miles))
    else:
        viable.sort(key=lambda fc: (fc[1], fc[0].walk_miles))

    return [_parking_card(f, cost, prefs, venue, enforcement) for f, cost in viable], None


def _park_and_ride(prefs: TripPreferences, venue: Venue) -> Evaluation:
    if prefs.walk_miles <= 0 or not _within(venue.transit_walk_miles, prefs.walk_miles):
        return [], f"park-and-ride needs a {_miles(venue.transit_walk_miles)} walk from {venue.transit_stop}"
    fare = round(venue.transit_fare * prefs.people, 2)
    return [
        StrategyCard(
            kind=StrategyKind.park_and_ride,
            title=f"Park and ride {venue.transit_route}",
            summary=(
                f"Leave the car at {venue.park_ride_lot} for free and ride {venue.transit_route} "
                f"to {venue.transit_stop}; fares total {_money(fare)}."
            ),
            cost_dollars=fare,
            walk_miles=venue.transit_walk_miles,
            steps=[
                StrategyStep(title=f"Drive to {venue.park_ride_lot}", detail="The lot is free."),
                StrategyStep(
                    title=f"Ride {venue.transit_route}",
                    detail=f"{_money(venue.transit_fare)} per rider, get off at {venue.transit_stop}.",
                ),
                StrategyStep(
                    title=f"Walk to {venue.name}",
                    detail=f"About {_miles(venue.transit_walk_miles)} on foot.",
                ),
            ],
        )
    ], None


# ---------------------------------------------------------------------------
# Other modes
# ---------------------------------------------------------------------------


def _rideshare(prefs: TripPreferences, venue: Venue) -> Evaluation:
    large_party = prefs.people > 4
    fare = round(venue.rideshare_fare * (1.5 if large_party else 1.0), 2)
    request = "an UberXL or Lyft XL" if large_party else "an Uber or Lyft"
    detail = f"Open Uber or Lyft and set {venue.name} as the destination."
    if large_party:
        detail += f" Pick an XL vehicle so all {prefs.people} of you fit."
    return [
        StrategyCard(
            kind=StrategyKind.rideshare,
            title="Take a rideshare",
            summary=f"Request {request} to {venue.rideshare_dropoff}; about {_money(fare)} each way.",
            cost_dollars=fare,
            walk_miles=0.0,
            steps=[
                StrategyStep(title="Request your ride", detail=detail),
                StrategyStep(
                    title="Get dropped off",
                    detail=f"Drivers stop at {venue.rideshare_dropoff}, steps from the entrance.",
                ),
                StrategyStep(
                    title="Head home",
                    detail="Walk a block away from the doors before requesting a pickup to skip the crowd.",
                ),
            ],
        )
    ], None


def _transit(prefs: TripPreferences, venue: Venue) -> Evaluation:
    if not _within(venue.transit_walk_miles, prefs.walk_miles) or prefs.walk_miles <= 0:
        return [], f"transit needs a {_miles(venue.transit_walk_miles)} walk from {venue.transit_stop}"
    fare = round(venue.transit_fare * prefs.people, 2)
    return [
        StrategyCard(
            kind=StrategyKind.transit,
            title=f"Ride {venue.transit_route}",
            summary=f"Take {venue.transit_route} to {venue.transit_stop}; fares total {_money(fare)}.",
            cost_dollars=fare,
            walk_miles=venue.transit_walk_miles,
            steps=[
                StrategyStep(
                    title=f"Board {venue.transit_route}",
                    detail=f"{_money(venue.transit_fare)} per rider.",
                ),
                StrategyStep(title=f"Get off at {venue.transit_stop}"),
                StrategyStep(
                    title=f"Walk to {venue.name}",
                    detail=f"About {_miles(venue.transit_walk_miles)} on foot.",
                ),
            ],
        )
    ], None


def _shuttle(prefs: TripPreferences, venue: Venue) -> Evaluation:
    if not _within(venue.shuttle_walk_miles, prefs.walk_miles) or prefs.walk_miles <= 0:
        return [], f"the {venue.shuttle_name} needs a {_miles(venue.shuttle_walk_miles)} walk"
    return [
        StrategyCard(
            kind=StrategyKind.shuttle,
            title=f"Ride the {venue.shuttle_name}",
            summary=f"The free {venue.shuttle_name} stops at {venue.shuttle_stop}.",
            cost_dollars=0.0,
            walk_miles=venue.shuttle_walk_miles,
            steps=[
                StrategyStep(title=f"Catch the {venue.shuttle_name}", detail="Rides are free."),
                StrategyStep(title=f"Get off at {venue.shuttle_stop}"),
                StrategyStep(
                    title=f"Walk to {venue.name}",
                    detail=f"About {_miles(venue.shuttle_walk_miles)} on foot.",
                ),
            ],
        )
    ], None


def _micromobility(prefs: TripPreferences, venue: Venue) -> Evaluation:
    vehicles = "a scooter" if prefs.people == 1 else f"{prefs.people} scooters"
    return [
        StrategyCard(
            kind=StrategyKind.micromobility,
            title="Ride a scooter or e-bike",
            summary=f"Unlock {vehicles} in the app and ride to {venue.scooter_corral}.",
            walk_miles=0.0,
            steps=[
                StrategyStep(title="Unlock your ride", detail=f"Each rider needs their own; unlock {vehicles}."),
                StrategyStep(title="Ride downtown", detail="Use the bike lanes where you can."),
                StrategyStep(title="End your ride", detail=f"Leave it at {venue.scooter_corral}."),
            ],
        )
    ], None


def _bike(prefs: TripPreferences, venue: Venue) -> Evaluation:
    return [
        StrategyCard(
            kind=StrategyKind.bike,
            title="Bike to the venue",
            summary=f"Ride your own bike and lock up at {venue.bike_racks}.",
            cost_dollars=0.0,
            walk_miles=0.0,
            steps=[
                StrategyStep(title="Bring a lock"),
                StrategyStep(title=f"Lock up at {venue.bike_racks}"),
            ],
        )
    ], None


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


def _suggestions(prefs: TripPreferences) -> list[StrategyStep]:
    steps = [StrategyStep(title="Walk a little farther", detail="More options open up within half a mile.")]
    if Mode.drive in prefs.modes:
        steps.append(
            StrategyStep(title="Raise your budget", detail="Lots and garages start around $8 for events.")
        )
    steps.append(
        StrategyStep(title="Add another way to get there", detail="Rideshare works at any time of day.")
    )
    return steps


def _unknown(
    prefs: TripPreferences,
    venue: Venue | None,
    reason: str,
    enforced: bool | None,
) -> Recommendation:
    card = StrategyCard(
        kind=StrategyKind.unknown,
        title=UNKNOWN_TITLE,
        summary=f"{NO_OPTIONS}: {reason}.",
        steps=_suggestions(prefs),
        expanded=1 in prefs.expanded_options,
    )
    return Recommendation(
        destination=prefs.destination,
        destination_name=venue.name if venue else None,
        status=RecommendationStatus.unknown,
        cards=[card],
        reason=reason,
        parking_enforced=enforced,
    )


def recommend(
    prefs: TripPreferences,
    *,
    rules: RulesConfig = DEFAULT_RULES_CONFIG,
    enforcement: EnforcementConfig = DEFAULT_ENFORCEMENT_CONFIG,
    catalog: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> Recommendation:
    """
    Evaluate the strategy rule table for *prefs*.

    Strategies are evaluated in a fixed order; viable ones become cards
    (first card wins, the rest are alternatives). Rideshare beats drive:
    when both are selected every drive-based strategy is skipped.
    """
    missing = [
        name
        for name, value in (("modes", prefs.modes), ("day", prefs.day), ("time", prefs.time))
        if not value
    ]
    enforced = (
        is_parking_enforced(prefs.day, prefs.time, config=enforcement)
        if prefs.day and prefs.time
        else None
    )
    if missing:
        return Recommendation(
            destination=prefs.destination,
            status=RecommendationStatus.incomplete,
            reason=f"Choose {' and '.join(missing)} to see recommendations.",
            parking_enforced=enforced,
            missing=missing,
        )

    venue = get_venue(prefs.destination, config=catalog)
    if venue is None:
        logger.info("No catalog entry for destination %r", prefs.destination)
        return _unknown(prefs, None, "unknown destination", enforced)

    modes = set(prefs.modes)
    drive_allowed = Mode.drive in modes and Mode.rideshare not in modes
    if Mode.drive in modes and not drive_allowed:
        logger.debug("Rideshare selected alongside drive; skipping drive strategies")

    evaluators: list[Callable[[], Evaluation]] = []
    if Mode.rideshare in modes:
        evaluators.append(lambda: _rideshare(prefs, venue))
    if drive_allowed:
        facilities = get_facilities(venue.id, config=catalog)
        evaluators.append(lambda: _drive_park(prefs, venue, facilities, rules, enforcement))
        if Mode.transit in modes:
            evaluators.append(lambda: _park_and_ride(prefs, venue))
    if Mode.transit in modes:
        evaluators.append(lambda: _transit(prefs, venue))
    if Mode.shuttle in modes:
        evaluators.append(lambda: _shuttle(prefs, venue))
    if Mode.micromobility in modes:
        evaluators.append(lambda: _micromobility(prefs, venue))
    if Mode.bike in modes:
        evaluators.append(lambda: _bike(prefs, venue))

    cards: list[StrategyCard] = []
    reasons: list[str] = []
    for evaluate in evaluators:
        found, reason = evaluate()
        cards.extend(found)
        if reason:
            reasons.append(reason)

    if not cards:
        reason = reasons[0] if reasons else "none of the selected ways to get there work for this trip"
        logger.debug("No viable strategy for %s: %s", prefs.destination, reason)
        return _unknown(prefs, venue, reason, enforced)

    expanded = set(prefs.expanded_options)
    cards = [
        card.model_copy(update={"index": i, "expanded": i in expanded})
        for i, card in enumerate(cards[: rules.max_cards], start=1)
    ]
    return Recommendation(
        destination=prefs.destination,
        destination_name=venue.name,
        status=RecommendationStatus.recommended,
        strategy=cards[0].kind,
        cards=cards,
        parking_enforced=enforced,
    )


def render_text(recommendation: Recommendation) -> str:
    """Plain-text rendering of every card, steps included."""
    if recommendation.status == RecommendationStatus.incomplete:
        return recommendation.reason or ""
    lines: list[str] = []
    for card in recommendation.cards:
        lines.append(f"{card.index}. {card.title}")
        lines.append(f"   {card.summary}")
        for step in card.steps:
            lines.append(f"   - {step.title}" + (f": {step.detail}" if step.detail else ""))
    return "\n".join(lines)


if __name__ == "__main__":
    fragment = sys.argv[1] if len(sys.argv) > 1 else ""
    print(render_text(recommend(parse_fragment(fragment))))
