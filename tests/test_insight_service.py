from datetime import datetime, timedelta, timezone

import pytest

from serenmind import config
from serenmind.services.insight_service import (
    ERROR_INSIGHT, NO_DATA_INSIGHT, generate_insights, get_mood_insights, time_of_day,
)


def entry(mood, hour=9, day=1, notes=None):
    doc = {"mood": mood, "date": datetime(2024, 5, day, hour, 0)}
    if notes is not None:
        doc["notes"] = notes
    return doc


def ids(insights):
    return [i.id for i in insights]


@pytest.mark.parametrize("hour, period", [
    (0, "Morning"), (11, "Morning"), (12, "Afternoon"),
    (16, "Afternoon"), (17, "Evening"), (23, "Evening"),
])
def test_time_of_day_boundaries(hour, period):
    assert time_of_day(hour) == period


def test_no_entries_gives_no_data_insight():
    assert generate_insights([]) == [NO_DATA_INSIGHT]


def test_most_common_mood():
    insights = generate_insights([entry("Happy", day=1), entry("Sad", day=2), entry("Happy", day=3)])

    common = insights[0]
    assert common.id == "common-mood"
    assert "happy" in common.description
    assert "2 times" in common.description


def test_most_common_mood_tie_keeps_first_seen():
    insights = generate_insights([entry("Calm", day=1), entry("Tired", day=2)])
    assert "calm" in insights[0].description


def test_time_pattern_needs_three_matching_entries():
    two = [entry("Tired", hour=8, day=d) for d in (1, 2)]
    assert "time-morning" not in ids(generate_insights(two))

    three = [entry("Tired", hour=8, day=d) for d in (1, 2, 3)]
    insights = generate_insights(three)
    morning = next(i for i in insights if i.id == "time-morning")
    assert morning.title == "Morning Mood Pattern"
    assert "tired" in morning.description


def test_trigger_pattern_from_notes():
    entries = [
        entry("Stressed", day=1, notes="Long day at WORK"),
        entry("Stressed", day=2, notes="work deadline again"),
        entry("Calm", day=3, notes="slept well"),
    ]
    insights = generate_insights(entries)

    trigger = next(i for i in insights if i.id == "trigger-work")
    assert trigger.type == "trigger"
    assert trigger.title == "Work Impact"
    assert "stressed" in trigger.description
    assert "trigger-sleep" not in ids(insights)


def test_improvement_when_recent_half_is_brighter():
    entries = [
        entry("Sad", day=1), entry("Anxious", day=2),
        entry("Calm", day=3), entry("Happy", day=4),
    ]
    assert "improvement" in ids(generate_insights(entries, config.DEFAULT_MOOD_DISPLAY))

    worse = [entry("Happy", day=1), entry("Calm", day=2), entry("Sad", day=3), entry("Sad", day=4)]
    assert "improvement" not in ids(generate_insights(worse, config.DEFAULT_MOOD_DISPLAY))


def test_insights_are_deterministic():
    entries = [entry("Happy", hour=h, day=d, notes="family dinner") for d, h in ((1, 9), (2, 13), (3, 19), (4, 9))]
    assert generate_insights(entries) == generate_insights(list(entries))


def test_get_mood_insights_reads_recent_entries(db):
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    db["mood_entries"].insert_many([
        {"user_id": "user-1", "mood": "Calm", "date": now - timedelta(days=1)},
        {"user_id": "user-1", "mood": "Calm", "date": now - timedelta(days=60)},
        {"user_id": "user-2", "mood": "Sad", "date": now - timedelta(days=1)},
    ])

    insights = get_mood_insights("user-1", days=30)
    assert insights[0].id == "common-mood"
    assert "1 times" in insights[0].description

    assert get_mood_insights("nobody") == [NO_DATA_INSIGHT]


def test_get_mood_insights_reports_malformed_entries(db):
    db["mood_entries"].insert_one({"user_id": "user-1", "date": datetime.now(timezone.utc).replace(tzinfo=None)})
    assert get_mood_insights("user-1") == [ERROR_INSIGHT]


def test_time_pattern_uses_client_local_hour():
    # 07:00 UTC is 14:00 at UTC+7
    entries = [entry("Tired", hour=7, day=d) for d in (1, 2, 3)]

    assert "time-morning" in ids(generate_insights(entries))
    local = ids(generate_insights(entries, timezone_offset=420))
    assert "time-afternoon" in local
    assert "time-morning" not in local
