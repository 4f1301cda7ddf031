from datetime import datetime, timedelta, timezone


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def test_create_and_fetch_entry(client, auth_headers):
    resp = client.post("/mood/entries", json={"mood": "Happy", "notes": "  Great workout  "}, headers=auth_headers)
    assert resp.status_code == 201
    entry = resp.json()
    assert entry["mood"] == "Happy"
    assert entry["notes"] == "Great workout"

    resp = client.get(f"/mood/entries/{entry['_id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["_id"] == entry["_id"]


def test_unknown_mood_is_rejected(client, auth_headers):
    resp = client.post("/mood/entries", json={"mood": "Elated"}, headers=auth_headers)
    assert resp.status_code == 422


def test_mood_routes_require_auth(client):
    assert client.get("/mood/entries").status_code == 401


def test_entry_lookup_errors(client, auth_headers):
    assert client.get("/mood/entries/not-an-id", headers=auth_headers).status_code == 400
    assert client.get("/mood/entries/0123456789abcdef01234567", headers=auth_headers).status_code == 404


def test_entries_are_scoped_to_user(client, auth_headers):
    entry = client.post("/mood/entries", json={"mood": "Sad"}, headers=auth_headers).json()

    other = client.post("/auth/anonymous").json()
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}
    assert client.get(f"/mood/entries/{entry['_id']}", headers=other_headers).status_code == 404
    assert client.get("/mood/entries", headers=other_headers).json() == []


def test_history_by_timeframe(client, auth_headers):
    now = utcnow()
    for days_ago, mood in ((1, "Calm"), (3, "Tired"), (20, "Sad"), (200, "Angry")):
        client.post("/mood/entries", json={
            "mood": mood,
            "date": (now - timedelta(days=days_ago)).isoformat(),
        }, headers=auth_headers)

    week = client.get("/mood/entries", params={"timeframe": "week"}, headers=auth_headers).json()
    assert [e["mood"] for e in week] == ["Calm", "Tired"]

    month = client.get("/mood/entries", params={"timeframe": "month"}, headers=auth_headers).json()
    assert len(month) == 3

    year = client.get("/mood/entries", params={"timeframe": "year"}, headers=auth_headers).json()
    assert len(year) == 4

    first = client.get("/mood/entries/first-date", headers=auth_headers).json()
    assert first["date"] == (now - timedelta(days=200)).date().isoformat()


def test_history_with_explicit_range(client, auth_headers):
    client.post("/mood/entries", json={"mood": "Calm", "date": "2024-03-02T10:00:00Z"}, headers=auth_headers)
    client.post("/mood/entries", json={"mood": "Sad", "date": "2024-03-05T10:00:00Z"}, headers=auth_headers)

    resp = client.get("/mood/entries", params={
        "start": "2024-03-01T00:00:00",
        "end": "2024-03-03T00:00:00",
    }, headers=auth_headers)
    assert [e["mood"] for e in resp.json()] == ["Calm"]

    resp = client.get("/mood/entries", params={
        "start": "2024-03-03T00:00:00",
        "end": "2024-03-01T00:00:00",
    }, headers=auth_headers)
    assert resp.status_code == 400


def test_insights(client, auth_headers):
    resp = client.get("/mood/insights", headers=auth_headers)
    assert [i["id"] for i in resp.json()] == ["no-data"]

    for _ in range(2):
        client.post("/mood/entries", json={"mood": "Anxious", "notes": "work pressure"}, headers=auth_headers)

    insights = client.get("/mood/insights", headers=auth_headers).json()
    ids = [i["id"] for i in insights]
    assert ids[0] == "common-mood"
    assert "trigger-work" in ids


def test_display_table(client, auth_headers):
    display = client.get("/mood/display", headers=auth_headers).json()
    assert len(display) == 10
    assert display["Happy"] == {"color": "#6A9FB5", "height": 90, "valence": 9}


def test_chart_points_in_date_order(client, auth_headers):
    now = utcnow()
    client.post("/mood/entries", json={"mood": "Calm", "date": (now - timedelta(days=1)).isoformat()},
                headers=auth_headers)
    client.post("/mood/entries", json={"mood": "Happy", "date": (now - timedelta(days=2)).isoformat()},
                headers=auth_headers)

    chart = client.get("/mood/chart", headers=auth_headers).json()
    assert chart["timeframe"] == "week"
    assert [(p["mood"], p["height"]) for p in chart["points"]] == [("Happy", 90), ("Calm", 70)]


def test_weekly_stats(client, auth_headers):
    today = utcnow().date()
    client.post("/mood/entries", json={"mood": "Happy"}, headers=auth_headers)
    client.post("/mood/entries", json={"mood": "Happy"}, headers=auth_headers)

    resp = client.get("/stats/weekly", params={"start_date": (today - timedelta(days=6)).isoformat()},
                      headers=auth_headers)
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["total_entries"] == 2
    assert stats["all_time_total"] == 2
    assert stats["current_streak"] == 1
    assert stats["active_days"][-1] is True
    assert stats["mood_counts"] == [{"mood": "Happy", "count": 2, "percentage": 100.0}]


def test_monthly_stats_rejects_reversed_range(client, auth_headers):
    resp = client.get("/stats/monthly", params={"start_date": "2024-05-10", "end_date": "2024-05-01"},
                      headers=auth_headers)
    assert resp.status_code == 400


def test_insights_use_client_timezone(client, auth_headers):
    today = utcnow().date()
    for days_ago in (1, 2, 3):
        day = today - timedelta(days=days_ago)
        client.post("/mood/entries", json={"mood": "Tired", "date": f"{day.isoformat()}T14:00:00+07:00"},
                    headers=auth_headers)

    utc_ids = [i["id"] for i in client.get("/mood/insights", headers=auth_headers).json()]
    assert "time-morning" in utc_ids

    resp = client.get("/mood/insights", params={"timezone_offset": 420}, headers=auth_headers)
    local_ids = [i["id"] for i in resp.json()]
    assert "time-afternoon" in local_ids
    assert "time-morning" not in local_ids
