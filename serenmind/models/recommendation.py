from pydantic import BaseModel, Field, ConfigDict
from typing import List


class Activity(BaseModel):
    id: str
    title: str
    description: str
    duration: str
    category: str
    benefits: List[str] = []
    steps: List[str] = []
    icon: str = "meditation"


class MusicTrack(BaseModel):
    id: str
    title: str
    artist: str
    duration: str
    cover_url: str = Field(alias="coverUrl")
    audio_url: str = Field(alias="audioUrl")
    mood: str

    model_config = ConfigDict(populate_by_name=True)


class QuickRecommendation(BaseModel):
    id: str
    title: str
    description: str
    type: str
    duration: str


class RecommendationBundle(BaseModel):
    mood: str
    activities: List[Activity]
    music: List[MusicTrack]
    quick: List[QuickRecommendation]
