from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from serenmind.models.recommendation import Activity, MusicTrack, QuickRecommendation, RecommendationBundle
from serenmind.routers.auth_dependency import get_current_user_id
from serenmind.services import recommendation_service

router = APIRouter(
    prefix="/recommendations",
    tags=["Recommendations"],
    dependencies=[Depends(get_current_user_id)]
)


@router.get("", response_model=RecommendationBundle)
async def get_recommendations(mood: Optional[str] = Query(None, max_length=40)):
    return recommendation_service.get_recommendations(mood)


@router.get("/activities", response_model=List[Activity])
async def get_activities(mood: Optional[str] = Query(None, max_length=40)):
    return recommendation_service.get_activity_recommendations(mood)


@router.get("/music", response_model=List[MusicTrack])
async def get_music(mood: Optional[str] = Query(None, max_length=40)):
    return recommendation_service.get_music_recommendations(mood)


@router.get("/quick", response_model=List[QuickRecommendation])
async def get_quick(mood: Optional[str] = Query(None, max_length=40)):
    return recommendation_service.get_quick_recommendations(mood)
