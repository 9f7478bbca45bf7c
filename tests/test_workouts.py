from datetime import datetime, timedelta, timezone

from conftest import signup
from fitsync.services import workouts_service


def _iso(d: datetime) -> str:
    return d.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _payload(name="Push A", end=None, **extra):
    end = end or datetime.now(timezone.utc)
    body = {
        "workout_id": "push-a",
        "workout_name": name,
        "start_time": _iso(end - timedelta(hours=1)),
        "end_time": _iso(end),
        "duration_seconds": 3600,
        "exercises": [
            {
                "exerciseId": "bench",
                "exerciseName": "Bench Press",
                "sets": [
                    {"setNumber": 1, "weight": 60, "reps": 10},
                    {"setNumber": 2, "weight": 70, "reps": 8},
                ],
            }
        ],
        "user_weight": 80.5,
    }
    body.update(extra)
    return body


def test_create_then_get_workout(client, auth_headers):
    r = client.post("/workouts", json=_payload(), headers=auth_headers)
    assert r.status_code == 201
    created = r.json()["data"]
    wid = created["id"]
    assert created["exercises"][0]["exerciseName"] == "Bench Press"

    r = client.get(f"/workouts/{wid}", headers=auth_headers)
    assert r.status_code == 200
    got = r.json()["data"]
    assert got["workout_name"] == "Push A"
    assert got["duration_seconds"] == 3600
    assert got["exercises"][0]["sets"][1] == {"setNumber": 2, "weight": 70, "reps": 8}


def test_create_workout_missing_fields(client, auth_headers):
    body = _payload()
    del body["workout_name"]
    del body["exercises"]
    r = client.post("/workouts", json=body, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"].startswith("Missing required fields")


def test_workouts_require_auth(client):
    assert client.get("/workouts").status_code == 401


def test_list_is_newest_first(client, auth_headers):
    now = datetime.now(timezone.utc)
    client.post("/workouts", json=_payload("Old", end=now - timedelta(days=3)), headers=auth_headers)
    client.post("/workouts", json=_payload("New", end=now), headers=auth_headers)
    client.post("/workouts", json=_payload("Mid", end=now - timedelta(days=1)), headers=auth_headers)

    r = client.get("/workouts", headers=auth_headers)
    assert r.status_code == 200
    assert [w["workout_name"] for w in r.json()["data"]] == ["New", "Mid", "Old"]


def test_partial_update_only_touches_given_fields(client, auth_headers):
    created = client.post("/workouts", json=_payload(), headers=auth_headers).json()["data"]

    r = client.put(f"/workouts/{created['id']}", json={"user_weight": 79.0}, headers=auth_headers)
    assert r.status_code == 200
    updated = r.json()["data"]
    assert updated["user_weight"] == 79.0
    for field in ("workout_name", "workout_id", "exercises", "start_time", "end_time", "duration_seconds"):
        assert updated[field] == created[field]

    # explicit null clears the body weight
    r = client.put(f"/workouts/{created['id']}", json={"user_weight": None}, headers=auth_headers)
    assert r.json()["data"]["user_weight"] is None
    assert r.json()["data"]["workout_name"] == "Push A"


def test_update_rejects_null_for_required_column(client, auth_headers):
    created = client.post("/workouts", json=_payload(), headers=auth_headers).json()["data"]
    r = client.put(f"/workouts/{created['id']}", json={"workout_name": None}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "workout_name cannot be null"


def test_workouts_are_scoped_per_user(client, auth_headers):
    created = client.post("/workouts", json=_payload(), headers=auth_headers).json()["data"]

    _, other = signup(client)
    assert client.get(f"/workouts/{created['id']}", headers=other).status_code == 404
    assert client.put(f"/workouts/{created['id']}", json={"user_weight": 1}, headers=other).status_code == 404
    assert client.delete(f"/workouts/{created['id']}", headers=other).status_code == 404
    assert client.get("/workouts", headers=other).json()["data"] == []

    # still there for the owner
    assert client.get(f"/workouts/{created['id']}", headers=auth_headers).status_code == 200


def test_delete_workout(client, auth_headers):
    created = client.post("/workouts", json=_payload(), headers=auth_headers).json()["data"]

    r = client.delete(f"/workouts/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["success"] is True

    assert client.get(f"/workouts/{created['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/workouts/{created['id']}", headers=auth_headers).status_code == 404


def test_stats_counts_week_and_month(client, auth_headers):
    now = datetime.now(timezone.utc)
    client.post("/workouts", json=_payload("Today", end=now), headers=auth_headers)
    client.post("/workouts", json=_payload("Long ago", end=now - timedelta(days=40)), headers=auth_headers)

    r = client.get("/workouts/stats", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"] == {"totalWorkouts": 2, "thisWeek": 1, "thisMonth": 1}


def test_stats_for_new_user_are_zero(client, auth_headers):
    r = client.get("/workouts/stats", headers=auth_headers)
    assert r.json()["data"] == {"totalWorkouts": 0, "thisWeek": 0, "thisMonth": 0}


def _parse(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def test_timestamps_are_stored_as_utc_instants(client, auth_headers):
    body = _payload(start_time="2026-03-02T08:00:00+02:00", end_time="2026-03-02T07:30:00Z")
    created = client.post("/workouts", json=body, headers=auth_headers).json()["data"]

    got = client.get(f"/workouts/{created['id']}", headers=auth_headers).json()["data"]
    assert _parse(got["start_time"]) == datetime(2026, 3, 2, 6, 0, tzinfo=timezone.utc)
    assert _parse(got["end_time"]) == datetime(2026, 3, 2, 7, 30, tzinfo=timezone.utc)


def test_period_starts_are_utc_monday_and_first_of_month():
    now = datetime(2026, 10, 22, 15, 45, tzinfo=timezone.utc)  # a Thursday
    week_start, month_start = workouts_service._period_starts(now)
    assert week_start == datetime(2026, 10, 19, tzinfo=timezone.utc)
    assert month_start == datetime(2026, 10, 1, tzinfo=timezone.utc)
