from fastapi import APIRouter, Depends, Query, HTTPException
from datetime import datetime, timedelta, date, timezone
from typing import List, Tuple

from serenmind import config
from serenmind.db.database import get_mood_collection
from serenmind.models.stat import MoodStatsResponse, MoodCountStat, DailyMoodData
from serenmind.routers.auth_dependency import get_current_user_id

router = APIRouter(
    prefix="/stats",
    tags=["Statistics"],
    dependencies=[Depends(get_current_user_id)]
)


# ==========================================
# API ENDPOINTS
# ==========================================

@router.get("/weekly", response_model=MoodStatsResponse)
async def get_weekly_stats(
    start_date: date = Query(..., description="First day of the week"),
    timezone_offset: int = Query(0, description="Client timezone offset in minutes"),
    user_id: str = Depends(get_current_user_id)
):
    return build_stats(user_id, start_date, start_date + timedelta(days=6), timezone_offset)


@router.get("/monthly", response_model=MoodStatsResponse)
async def get_monthly_stats(
    start_date: date = Query(..., description="First day of the range"),
    end_date: date = Query(..., description="Last day of the range"),
    timezone_offset: int = Query(0, description="Client timezone offset in minutes"),
    user_id: str = Depends(get_current_user_id)
):
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    return build_stats(user_id, start_date, end_date, timezone_offset)


# ==========================================
# HELPER FUNCTIONS
# ==========================================

def build_stats(user_id: str, start_date: date, end_date: date, timezone_offset: int) -> MoodStatsResponse:
    # Pad the query by a day on each side; local dates are resolved afterwards
    window_start = datetime.combine(start_date, datetime.min.time()) - timedelta(days=1)
    window_end = datetime.combine(end_date, datetime.max.time()) + timedelta(days=1)

    collection = get_mood_collection()
    entries = list(collection.find({
        "user_id": user_id,
        "date": {"$gte": window_start, "$lte": window_end}
    }).sort("date", 1))

    mood_counts, active_days, daily_moods, in_range = process_mood_data(
        entries, start_date, end_date, timezone_offset
    )
    current, longest = calculate_streaks(user_id, timezone_offset)

    return MoodStatsResponse(
        mood_counts=mood_counts,
        current_streak=current,
        longest_streak=longest,
        total_entries=in_range,
        all_time_total=collection.count_documents({"user_id": user_id}),
        active_days=active_days,
        daily_moods=daily_moods
    )


def local_date(ts: datetime, timezone_offset: int) -> date:
    return (ts + timedelta(minutes=timezone_offset)).date()


def process_mood_data(
    entries: List[dict],
    start_date: date,
    end_date: date,
    timezone_offset: int = 0
) -> Tuple[List[MoodCountStat], List[bool], List[DailyMoodData], int]:
    """Bucket entries into local days of ``[start_date, end_date]``.

    Returns the per-mood distribution, a per-day activity flag, the last
    mood of each active day and the number of entries inside the range.
    """
    display = config.load_mood_display()
    span = (end_date - start_date).days + 1

    active = [False] * span
    last_of_day = {}
    per_mood = {}
    in_range = 0

    for entry in sorted(entries, key=lambda e: e["date"]):
        day = local_date(entry["date"], timezone_offset)
        index = (day - start_date).days
        if not 0 <= index < span:
            continue

        in_range += 1
        mood = entry.get("mood", "Neutral")
        style = display.get(mood, config.DEFAULT_MOOD_STYLE)
        active[index] = True
        # Last entry of the day wins
        last_of_day[index] = DailyMoodData(date=day, mood=mood, height=style["height"], color=style["color"])
        per_mood[mood] = per_mood.get(mood, 0) + 1

    distribution = [
        MoodCountStat(mood=mood, count=count, percentage=round(count * 100 / in_range, 1))
        for mood, count in per_mood.items()
    ]
    distribution.sort(key=lambda s: s.count, reverse=True)

    daily = [last_of_day[i] for i in sorted(last_of_day)]
    return distribution, active, daily, in_range


def calculate_streaks(user_id: str, timezone_offset: int) -> Tuple[int, int]:
    cursor = get_mood_collection().find({"user_id": user_id}, {"date": 1, "_id": 0})
    days = {local_date(doc["date"], timezone_offset) for doc in cursor}
    local_now = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(minutes=timezone_offset)
    return streaks_from_dates(days, local_now.date())


def streaks_from_dates(days: set, today: date) -> Tuple[int, int]:
    """(current, longest) runs of consecutive check-in days.

    The current streak is anchored on today, or on yesterday when there is
    no entry yet today.
    """
    if not days:
        return 0, 0

    ordered = sorted(days)
    longest = run = 1
    for previous, following in zip(ordered, ordered[1:]):
        run = run + 1 if (following - previous).days == 1 else 1
        longest = max(longest, run)

    anchor = today if today in days else today - timedelta(days=1)
    current = 0
    while anchor in days:
        current += 1
        anchor -= timedelta(days=1)

    return current, longest
