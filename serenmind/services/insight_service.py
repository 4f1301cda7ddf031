import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from pymongo.errors import PyMongoError

from serenmind import config
from serenmind.db.database import get_mood_collection
from serenmind.models.mood import MoodInsight

logger = logging.getLogger(__name__)

TRIGGER_KEYWORDS = ("work", "sleep", "exercise", "social", "family", "health")
TIME_PATTERN_MIN = 3
TRIGGER_MIN = 2
IMPROVEMENT_MIN_ENTRIES = 4

NO_DATA_INSIGHT = MoodInsight(
    id="no-data",
    title="No Data Available",
    description="Track your mood for a few days to receive personalized insights.",
    type="pattern",
)
ERROR_INSIGHT = MoodInsight(
    id="error",
    title="Analysis Error",
    description="Unable to generate insights at this time. Please try again later.",
    type="pattern",
)


def time_of_day(hour: int) -> str:
    if hour < 12:
        return "Morning"
    if hour < 17:
        return "Afternoon"
    return "Evening"


def local_hour(ts: datetime, timezone_offset: int) -> int:
    # Stored dates are naive UTC; the offset is the client's, in minutes
    return (ts + timedelta(minutes=timezone_offset)).hour


def _most_frequent(freq: Dict[str, int]) -> Tuple[str, int]:
    # max() keeps the first-seen label on ties
    return max(freq.items(), key=lambda kv: kv[1])


def mood_frequency(entries: List[dict]) -> Dict[str, int]:
    frequency: Dict[str, int] = {}
    for entry in entries:
        frequency[entry["mood"]] = frequency.get(entry["mood"], 0) + 1
    return frequency


def time_patterns(entries: List[dict], timezone_offset: int = 0) -> List[Tuple[str, str, int]]:
    buckets: Dict[str, Dict[str, int]] = {}
    for entry in entries:
        bucket = buckets.setdefault(time_of_day(local_hour(entry["date"], timezone_offset)), {})
        bucket[entry["mood"]] = bucket.get(entry["mood"], 0) + 1

    patterns = []
    for period, freq in buckets.items():
        mood, count = _most_frequent(freq)
        patterns.append((period, mood, count))
    return patterns


def trigger_patterns(entries: List[dict]) -> List[Tuple[str, str, int]]:
    triggers: Dict[str, Dict[str, int]] = {}
    for entry in entries:
        notes = entry.get("notes")
        if not notes:
            continue
        note = notes.lower()
        for keyword in TRIGGER_KEYWORDS:
            if keyword in note:
                freq = triggers.setdefault(keyword, {})
                freq[entry["mood"]] = freq.get(entry["mood"], 0) + 1

    patterns = []
    for keyword, freq in triggers.items():
        mood, count = _most_frequent(freq)
        patterns.append((keyword, mood, count))
    return patterns


def mood_improved(entries: List[dict], mood_display: Dict[str, dict]) -> bool:
    if len(entries) < IMPROVEMENT_MIN_ENTRIES:
        return False
    ordered = sorted(entries, key=lambda e: e["date"])
    half = len(ordered) // 2
    default = config.DEFAULT_MOOD_STYLE["valence"]

    def mean_valence(items):
        return sum(mood_display.get(e["mood"], {}).get("valence", default) for e in items) / len(items)

    return mean_valence(ordered[half:]) > mean_valence(ordered[:half])


def generate_insights(
    entries: List[dict],
    mood_display: Optional[Dict[str, dict]] = None,
    timezone_offset: int = 0,
) -> List[MoodInsight]:
    """Derive advisory insights from mood entries by frequency counting.

    Pure function of its input: the same entries always give the same
    insights. Time-of-day buckets use the client's local hour, given as
    ``timezone_offset`` minutes from UTC.
    """
    if not entries:
        return [NO_DATA_INSIGHT]
    if mood_display is None:
        mood_display = config.load_mood_display()

    insights: List[MoodInsight] = []

    mood, count = _most_frequent(mood_frequency(entries))
    insights.append(MoodInsight(
        id="common-mood",
        title="Most Common Mood",
        description=(
            f"You most frequently feel {mood.lower()}. "
            f"This mood appears {count} times in your recent entries."
        ),
        type="pattern",
    ))

    for period, mood, count in time_patterns(entries, timezone_offset):
        if count >= TIME_PATTERN_MIN:
            insights.append(MoodInsight(
                id=f"time-{period.lower()}",
                title=f"{period} Mood Pattern",
                description=(
                    f"You tend to feel {mood.lower()} during {period.lower()} hours. "
                    "Consider scheduling activities accordingly."
                ),
                type="pattern",
            ))

    for keyword, mood, count in trigger_patterns(entries):
        if count >= TRIGGER_MIN:
            label = keyword.capitalize()
            insights.append(MoodInsight(
                id=f"trigger-{keyword}",
                title=f"{label} Impact",
                description=f"{label}-related situations often lead to feeling {mood.lower()}.",
                type="trigger",
            ))

    if mood_improved(entries, mood_display):
        insights.append(MoodInsight(
            id="improvement",
            title="Mood Improvement",
            description=(
                "Your recent entries show a brighter mood than earlier in this period. "
                "Keep doing what's working for you."
            ),
            type="improvement",
        ))

    return insights


def fetch_entries_for_analysis(user_id: str, days: int = 30) -> List[dict]:
    start_date = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days)
    cursor = get_mood_collection().find({
        "user_id": user_id,
        "date": {"$gte": start_date},
    }).sort("date", -1)
    return list(cursor)


def get_mood_insights(user_id: str, days: int = 30, timezone_offset: int = 0) -> List[MoodInsight]:
    try:
        entries = fetch_entries_for_analysis(user_id, days)
        return generate_insights(entries, timezone_offset=timezone_offset)
    except (PyMongoError, KeyError, AttributeError) as e:
        logger.exception("Error generating mood insights for %s: %s", user_id, e)
        return [ERROR_INSIGHT]
