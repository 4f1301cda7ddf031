from typing import List, Optional

from serenmind.models.recommendation import Activity, MusicTrack, QuickRecommendation, RecommendationBundle
from serenmind.services.recommendation_data import ACTIVITIES, MUSIC, QUICK, FALLBACK_MOOD


def _bucket(table: dict, mood: Optional[str]) -> list:
    """Unknown or missing moods fall back to the Neutral bucket."""
    return table.get(mood or FALLBACK_MOOD) or table[FALLBACK_MOOD]


def get_activity_recommendations(mood: Optional[str] = None) -> List[Activity]:
    return [Activity(**item) for item in _bucket(ACTIVITIES, mood)]


def get_music_recommendations(mood: Optional[str] = None) -> List[MusicTrack]:
    return [MusicTrack(**item) for item in _bucket(MUSIC, mood)]


def get_quick_recommendations(mood: Optional[str] = None) -> List[QuickRecommendation]:
    return [QuickRecommendation(**item) for item in _bucket(QUICK, mood)]


def get_recommendations(mood: Optional[str] = None) -> RecommendationBundle:
    return RecommendationBundle(
        mood=mood if mood in ACTIVITIES or mood in QUICK else FALLBACK_MOOD,
        activities=get_activity_recommendations(mood),
        music=get_music_recommendations(mood),
        quick=get_quick_recommendations(mood),
    )
