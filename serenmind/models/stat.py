from pydantic import BaseModel
from typing import List
from datetime import date


class DailyMoodData(BaseModel):
    date: date
    mood: str
    height: int
    color: str


class MoodCountStat(BaseModel):
    mood: str
    count: int
    percentage: float


class MoodStatsResponse(BaseModel):
    # Mood distribution for the period
    mood_counts: List[MoodCountStat]

    # Check-in streaks
    current_streak: int
    longest_streak: int
    total_entries: int
    all_time_total: int
    active_days: List[bool]

    # Last mood of each active day, for the line chart
    daily_moods: List[DailyMoodData]
