from enum import Enum
from typing import Optional, Any, List, Literal
from datetime import datetime
from pydantic import BaseModel, Field, GetCoreSchemaHandler, GetJsonSchemaHandler, ConfigDict, field_validator
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from bson import ObjectId


class PyObjectId(ObjectId):

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:

        def validate_object_id(v: Any) -> ObjectId:
            if not ObjectId.is_valid(v):
                raise ValueError("Invalid objectid")
            return ObjectId(v)

        from_input_schema = core_schema.no_info_plain_validator_function(validate_object_id)

        return core_schema.json_or_python_schema(
            json_schema=from_input_schema,
            python_schema=core_schema.union_schema([
                core_schema.is_instance_schema(ObjectId),
                from_input_schema,
            ]),
            serialization=core_schema.to_string_ser_schema()
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {'type': 'string'}


class Mood(str, Enum):
    HAPPY = "Happy"
    CALM = "Calm"
    NEUTRAL = "Neutral"
    ANXIOUS = "Anxious"
    STRESSED = "Stressed"
    SAD = "Sad"
    ANGRY = "Angry"
    TIRED = "Tired"
    CONFUSED = "Confused"
    HOPEFUL = "Hopeful"


MOOD_LABELS = [m.value for m in Mood]


class MoodEntryCreate(BaseModel):
    mood: Mood
    notes: Optional[str] = Field(None, max_length=2000)
    # Defaults to now on the server
    date: Optional[datetime] = None

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class MoodEntryResponse(BaseModel):
    id: PyObjectId = Field(alias="_id")
    user_id: str
    date: datetime
    mood: Mood
    notes: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class MoodInsight(BaseModel):
    id: str
    title: str
    description: str
    type: Literal["pattern", "trigger", "improvement"]


class MoodStyle(BaseModel):
    color: str
    height: int
    valence: int


class MoodChartPoint(BaseModel):
    date: datetime
    mood: str
    color: str
    height: int


class MoodChartResponse(BaseModel):
    timeframe: str
    points: List[MoodChartPoint]
