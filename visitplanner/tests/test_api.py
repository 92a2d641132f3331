from __future__ import annotations

from fastapi.testclient import TestClient

from visitplanner.app import app

client = TestClient(app)

BASE = "#/visit/van-andel-arena"
RESULTS = f"{BASE}?modes=drive&day=monday&time=600&walk=0.5&pay=10"


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    body = client.get("/metadata").json()
    assert body["modes"] == ["drive", "rideshare", "transit", "micromobility", "shuttle", "bike"]
    assert body["days"][0] == "monday"
    assert body["people"] == {"min": 1, "max": 6, "default": 6}
    assert "van-andel-arena" in {d["id"] for d in body["destinations"]}


def test_root_serves_widget():
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'id="preferencesSection"' in resp.text


# ── Enforcement ──────────────────────────────────────────────────────────


def test_enforcement_accepts_select_value():
    body = client.get("/api/enforcement", params={"day": "Monday", "time": "12:00"}).json()
    assert body == {"day": "monday", "time": "12:00", "enforced": True, "window": "8:00 AM to 7:00 PM"}


def test_enforcement_accepts_shorthand():
    body = client.get("/api/enforcement", params={"day": "wednesday", "time": "0730"}).json()
    assert body["time"] == "07:30"
    assert body["enforced"] is False


def test_enforcement_rejects_bad_day():
    resp = client.get("/api/enforcement", params={"day": "funday", "time": "12:00"})
    assert resp.status_code == 400


# ── Plan ─────────────────────────────────────────────────────────────────


def test_plan_canonicalizes_fragment():
    resp = client.post("/api/plan", json={"fragment": f"{BASE}?time=1700&modes=rideshare,drive,bogus"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["fragment"] == f"{BASE}?modes=rideshare,drive&time=500"
    assert body["recommendation"]["status"] == "incomplete"
    assert body["can_reset"] is True


def test_plan_rideshare_over_drive():
    resp = client.post("/api/plan", json={"fragment": f"{BASE}?modes=rideshare,drive&day=monday&time=500"})
    rec = resp.json()["recommendation"]
    assert rec["strategy"] == "rideshare"
    assert all("parking" not in card["summary"].lower() for card in rec["cards"])


def test_plan_unknown_destination_is_not_an_error():
    resp = client.post("/api/plan", json={"fragment": "#/visit/nowhere?modes=bike&day=monday&time=500"})
    assert resp.status_code == 200
    assert resp.json()["recommendation"]["status"] == "unknown"


def test_plan_rejects_oversized_fragment():
    resp = client.post("/api/plan", json={"fragment": "#" + "a" * 3000})
    assert resp.status_code == 422


def test_controls_change():
    resp = client.post(
        "/api/plan/controls",
        json={"fragment": BASE, "changes": {"day": "monday", "time": "17:00", "modes": ["drive"]}},
    )
    assert resp.status_code == 200
    assert resp.json()["fragment"] == f"{BASE}?modes=drive&day=monday&time=500"


def test_controls_change_requires_changes():
    resp = client.post("/api/plan/controls", json={"fragment": BASE})
    assert resp.status_code == 422


def test_toggle_option():
    body = client.post("/api/plan/options", json={"fragment": f"{RESULTS}&option=1", "option": 2}).json()
    assert body["fragment"].endswith("&option=1,2")
    assert [c["expanded"] for c in body["recommendation"]["cards"]] == [True, True, False]


def test_toggle_option_out_of_range():
    resp = client.post("/api/plan/options", json={"fragment": RESULTS, "option": 7})
    assert resp.status_code == 400


def test_toggle_option_must_be_positive():
    resp = client.post("/api/plan/options", json={"fragment": RESULTS, "option": 0})
    assert resp.status_code == 422


def test_reset():
    body = client.post("/api/plan/reset", json={"fragment": RESULTS}).json()
    assert body["fragment"] == f"{BASE}?modes=drive&walk=0.5&pay=10"
    assert body["can_reset"] is False
    assert body["recommendation"]["status"] == "incomplete"


def test_plan_ignores_non_ascii_option():
    resp = client.post("/api/plan", json={"fragment": f"{RESULTS}&option=1,%C2%B2"})
    assert resp.status_code == 200
    assert resp.json()["fragment"].endswith("&option=1")
