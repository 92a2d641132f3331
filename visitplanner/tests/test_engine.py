from __future__ import annotations

import pytest

from visitplanner.fragment.resolver import parse_fragment
from visitplanner.recommendations.config import RulesConfig
from visitplanner.recommendations.engine import UNKNOWN_TITLE, recommend, render_text
from visitplanner.recommendations.models import RecommendationStatus, StrategyKind

BASE = "#/visit/van-andel-arena"


def _plan(query: str, **kwargs):
    return recommend(parse_fragment(f"{BASE}?{query}"), **kwargs)


def _text(rec) -> str:
    return render_text(rec)


# ── Preconditions ────────────────────────────────────────────────────────


class TestPreconditions:
    def test_missing_inputs_are_incomplete(self):
        rec = _plan("modes=drive")
        assert rec.status == RecommendationStatus.incomplete
        assert rec.missing == ["day", "time"]
        assert rec.cards == []

    def test_no_modes(self):
        rec = _plan("day=monday&time=500")
        assert rec.status == RecommendationStatus.incomplete
        assert rec.missing == ["modes"]
        assert rec.parking_enforced is True

    def test_unknown_destination(self):
        rec = recommend(parse_fragment("#/visit/nowhere-hall?modes=drive&day=monday&time=500"))
        assert rec.status == RecommendationStatus.unknown
        assert rec.cards[0].title == UNKNOWN_TITLE
        assert rec.cards[0].summary == "No options available: unknown destination."


# ── Rideshare vs drive ───────────────────────────────────────────────────


class TestRideshare:
    def test_rideshare_beats_drive(self):
        rec = _plan("modes=rideshare,drive&day=monday&time=500&walk=0.5&pay=20")
        text = _text(rec)
        assert rec.strategy == StrategyKind.rideshare
        assert "rideshare" in text.lower()
        assert "Uber" in text
        assert "parking" not in text.lower()
        assert "Park at" not in text

    def test_order_of_modes_does_not_matter(self):
        rec = _plan("modes=drive,rideshare&day=saturday&time=1000")
        assert [c.kind for c in rec.cards] == [StrategyKind.rideshare]

    def test_drive_transit_without_walk_falls_back_to_rideshare(self):
        rec = _plan("modes=drive,transit,rideshare&day=friday&time=700")
        text = _text(rec)
        assert rec.status == RecommendationStatus.recommended
        assert rec.strategy == StrategyKind.rideshare
        assert "No options available" not in text
        assert "Unknown Strategy" not in text

    def test_large_party_gets_xl(self):
        rec = _plan("modes=rideshare&day=monday&time=500&people=5")
        assert "XL" in rec.cards[0].summary
        small = _plan("modes=rideshare&day=monday&time=500&people=2")
        assert "XL" not in small.cards[0].summary
        assert small.cards[0].cost_dollars < rec.cards[0].cost_dollars


# ── Drive and park ───────────────────────────────────────────────────────


class TestDrivePark:
    def test_mid_budget_prefers_surface_lot(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.5&pay=10")
        titles = [c.title for c in rec.cards]
        assert titles == [
            "Park at an affordable surface lot",
            "Park at the city parking garage",
            "Park at metered street parking",
        ]
        assert rec.cards[2].cost_dollars == 4.0

    def test_after_enforcement_meters_are_free(self):
        rec = _plan("modes=drive&day=tuesday&time=730&walk=0.5&pay=10")
        text = _text(rec)
        assert rec.parking_enforced is False
        assert "affordable surface lot" in text
        assert "parking garage" in text
        assert rec.cards[-1].title == "Park at free street parking"
        assert rec.cards[-1].cost_dollars == 0.0

    def test_short_walk_prefers_garage_with_meter_alternative(self):
        rec = _plan("modes=drive&day=friday&time=600&walk=0.2&pay=9")
        assert [c.title for c in rec.cards] == [
            "Park at the city parking garage",
            "Park at metered street parking",
        ]
        assert "surface lot" not in _text(rec)

    @pytest.mark.parametrize("walk", ["0.1", "0.2", "0.4"])
    def test_no_surface_lot_under_half_mile(self, walk):
        rec = _plan(f"modes=drive&day=monday&time=600&walk={walk}&pay=19")
        assert "surface lot" not in _text(rec)

    @pytest.mark.parametrize("pay", ["8", "12", "19"])
    def test_affordable_lot_in_mid_band(self, pay):
        rec = _plan(f"modes=drive&day=monday&time=600&walk=0.5&pay={pay}")
        assert "affordable surface lot" in _text(rec)

    def test_high_budget_prefers_nearest_garage(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.5&pay=25")
        assert rec.cards[0].title == "Park at the arena parking garage"
        assert len(rec.cards) == 3

    def test_low_budget_takes_free_street(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.8&pay=3")
        assert rec.cards[0].title == "Park at free street parking"
        assert rec.cards[0].cost_dollars == 0.0

    def test_weekend_meters_are_free(self):
        rec = _plan("modes=drive&day=saturday&time=600&walk=0.5&pay=5")
        assert rec.cards[0].title == "Park at free street parking"
        assert rec.parking_enforced is False

    def test_budget_below_meter_cost(self):
        rec = _plan("modes=drive&day=friday&time=600&walk=0.5&pay=2")
        assert rec.status == RecommendationStatus.unknown
        assert rec.cards[0].title == UNKNOWN_TITLE
        assert "No options available" in rec.cards[0].summary
        assert "$4.00 of metered parking" in rec.reason

    def test_not_willing_to_pay(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.5")
        assert rec.status == RecommendationStatus.unknown
        assert "not willing to pay for parking" in rec.cards[0].summary

    def test_nothing_within_walk(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.05&pay=50")
        assert rec.status == RecommendationStatus.unknown
        assert "no parking is within" in rec.reason

    def test_meter_rate_override(self):
        rules = RulesConfig(meter_hourly_rate=2.0)
        rec = _plan("modes=drive&day=monday&time=600&walk=0.2&pay=5", rules=rules)
        assert rec.cards[0].cost_dollars == 2.0


# ── Other modes ──────────────────────────────────────────────────────────


class TestOtherModes:
    def test_park_and_ride_needs_walk(self):
        rec = _plan("modes=drive,transit&day=monday&time=600&walk=0.2&pay=0")
        kinds = [c.kind for c in rec.cards]
        assert StrategyKind.park_and_ride in kinds
        assert StrategyKind.transit in kinds

    def test_transit_fare_per_rider(self):
        rec = _plan("modes=transit&day=monday&time=600&walk=0.5&people=2")
        assert rec.cards[0].cost_dollars == 3.5

    def test_shuttle_and_bike(self):
        rec = _plan("modes=bike,shuttle&day=friday&time=530&people=2&walk=0.1")
        assert [c.kind for c in rec.cards] == [StrategyKind.shuttle, StrategyKind.bike]

    def test_micromobility_counts_riders(self):
        rec = _plan("modes=micromobility&day=friday&time=530&people=3")
        assert "3 scooters" in rec.cards[0].summary

    def test_max_cards(self):
        rec = _plan("modes=rideshare,transit,shuttle,micromobility,bike&day=monday&time=600&walk=1")
        assert len(rec.cards) == 3
        assert [c.index for c in rec.cards] == [1, 2, 3]


class TestExpandedOptions:
    def test_expanded_flags_follow_options(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.5&pay=10&option=1,3")
        assert [c.expanded for c in rec.cards] == [True, False, True]

    def test_unknown_card_can_expand(self):
        rec = _plan("modes=drive&day=monday&time=600&walk=0.5&option=1")
        assert rec.cards[0].expanded is True
        assert rec.cards[0].steps
