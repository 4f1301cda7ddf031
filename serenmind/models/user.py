from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal
from datetime import datetime


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=80)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class SignInRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class GoogleSignInRequest(BaseModel):
    google_token: str


class Session(BaseModel):
    jti: str
    user_id: str
    is_anonymous: bool = False
    issued_at: datetime
    expires_at: datetime


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    is_anonymous: bool
    expires_at: datetime


class UserProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    photo_url: Optional[str] = None


class UserProfileResponse(BaseModel):
    id: str = Field(alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    provider: Literal["password", "google", "anonymous"] = "password"
    is_anonymous: bool = False
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)
