import math
from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator

from serenmind.models.mood import PyObjectId

DEFAULT_TOPIC = "general"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class MentalMetricCreate(BaseModel):
    mood_score: float
    sentiment: str = "neutral"
    topics: List[str] = []

    @field_validator("mood_score")
    @classmethod
    def clamp_score(cls, v: float) -> int:
        if math.isnan(v):
            raise ValueError("mood_score must be a number")
        # Clamp first so infinite scores still round
        return round_half_up(max(0.0, min(10.0, v)))

    @field_validator("sentiment")
    @classmethod
    def strip_sentiment(cls, v: str) -> str:
        return v.strip() or "neutral"

    @field_validator("topics")
    @classmethod
    def default_topics(cls, v: List[str]) -> List[str]:
        cleaned = [t.strip().lower() for t in v if t and t.strip()]
        return cleaned or [DEFAULT_TOPIC]


class MentalMetric(BaseModel):
    id: Optional[PyObjectId] = Field(None, alias="_id")
    user_id: str
    mood_score: int
    sentiment: str
    topics: List[str]
    timestamp: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class MoodTrendPoint(BaseModel):
    timestamp: datetime
    mood_score: int


class WellnessMetrics(BaseModel):
    """Topic aggregate over a user's metric records.

    ``topics`` counts records, not mentions: a label repeated within one
    record is counted once, so every percentage stays within 0..100.
    """

    topics: Dict[str, int] = {}
    percentages: Dict[str, int] = {}
    total_entries: int = 0
    top_topics: List[str] = []
    wellness_score: int = 0
    mood_trend: List[MoodTrendPoint] = []
