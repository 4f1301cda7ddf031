from datetime import datetime, timedelta, timezone
from typing import Dict, List, Literal, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query, status

from serenmind import config
from serenmind.db.database import get_mood_collection
from serenmind.models.mood import (
    MoodChartPoint, MoodChartResponse, MoodEntryCreate, MoodEntryResponse, MoodInsight, MoodStyle
)
from serenmind.routers.auth_dependency import get_current_user_id
from serenmind.services.insight_service import get_mood_insights

ID_INVALID_MESSAGE = "Invalid entry id"

TIMEFRAME_DAYS = {"week": 7, "month": 30, "year": 365}

Timeframe = Literal["week", "month", "year"]

router = APIRouter(
    prefix="/mood",
    tags=["Mood"],
    dependencies=[Depends(get_current_user_id)]
)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def query_entries(user_id: str, start: datetime, end: Optional[datetime] = None, newest_first: bool = True) -> List[dict]:
    date_filter = {"$gte": start}
    if end is not None:
        date_filter["$lt"] = end
    cursor = get_mood_collection().find({
        "user_id": user_id,
        "date": date_filter,
    }).sort("date", -1 if newest_first else 1)
    return list(cursor)


def timeframe_start(timeframe: str) -> datetime:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now - timedelta(days=TIMEFRAME_DAYS[timeframe])


@router.post("/entries", response_model=MoodEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_mood_entry(
    request: MoodEntryCreate,
    user_id: str = Depends(get_current_user_id)
):
    entry_date = to_naive_utc(request.date) if request.date else datetime.now(timezone.utc).replace(tzinfo=None)
    new_entry = {
        "user_id": user_id,
        "date": entry_date,
        "mood": request.mood.value,
    }
    if request.notes:
        new_entry["notes"] = request.notes

    collection = get_mood_collection()
    result = collection.insert_one(new_entry)
    return collection.find_one({"_id": result.inserted_id})


@router.get("/entries", response_model=List[MoodEntryResponse])
async def get_mood_history(
    timeframe: Timeframe = Query("week"),
    start: Optional[datetime] = Query(None, description="Overrides timeframe when given"),
    end: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id)
):
    range_start = to_naive_utc(start) if start else timeframe_start(timeframe)
    range_end = to_naive_utc(end) if end else None
    if range_end is not None and range_end <= range_start:
        raise HTTPException(status_code=400, detail="end must be after start")
    return query_entries(user_id, range_start, range_end)


@router.get("/entries/first-date", response_model=dict)
async def get_first_entry_date(user_id: str = Depends(get_current_user_id)):
    first_entry = get_mood_collection().find_one(
        {"user_id": user_id},
        sort=[("date", 1)]
    )
    if first_entry:
        return {"date": first_entry["date"].date()}
    return {"date": None}


@router.get("/entries/{entry_id}", response_model=MoodEntryResponse)
async def get_mood_entry(entry_id: str, user_id: str = Depends(get_current_user_id)):
    if not ObjectId.is_valid(entry_id):
        raise HTTPException(status_code=400, detail=ID_INVALID_MESSAGE)

    entry = get_mood_collection().find_one({"_id": ObjectId(entry_id), "user_id": user_id})
    if entry:
        return entry
    raise HTTPException(status_code=404, detail="Mood entry not found")


@router.get("/insights", response_model=List[MoodInsight])
async def get_insights(
    days: int = Query(30, ge=1, le=365),
    timezone_offset: int = Query(0, description="Client timezone offset in minutes"),
    user_id: str = Depends(get_current_user_id)
):
    return get_mood_insights(user_id, days, timezone_offset)


@router.get("/display", response_model=Dict[str, MoodStyle])
async def get_mood_display():
    return config.load_mood_display()


@router.get("/chart", response_model=MoodChartResponse)
async def get_mood_chart(
    timeframe: Timeframe = Query("week"),
    user_id: str = Depends(get_current_user_id)
):
    display = config.load_mood_display()
    points = []
    for entry in query_entries(user_id, timeframe_start(timeframe), newest_first=False):
        style = display.get(entry["mood"], config.DEFAULT_MOOD_STYLE)
        points.append(MoodChartPoint(
            date=entry["date"],
            mood=entry["mood"],
            color=style["color"],
            height=style["height"],
        ))
    return MoodChartResponse(timeframe=timeframe, points=points)
