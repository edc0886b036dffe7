# user models: auth, profile, preferences and trusted contact schemas

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from app.services.auth_service import password_problem

Language = Literal["en", "si", "ta"]


# auth

class UserRegister(BaseModel):
    email: EmailStr = Field(..., description="user email address")
    password: str = Field(..., description="plaintext password")
    confirm_password: str = Field(..., alias="confirmPassword")
    name: Optional[str] = Field(None, max_length=100)

    model_config = {"populate_by_name": True}

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        problem = password_problem(value)
        if problem:
            raise ValueError(problem)
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise ValueError("Please confirm your password")
        # password already failed its own check, don't pile on
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords do not match")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class GoogleAuth(BaseModel):
    """profile fields come from the client, the id token proves them"""

    id_token: str = Field(..., alias="idToken", min_length=1)
    google_id: Optional[str] = Field(None, alias="googleId")
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, alias="firstName", max_length=50)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=50)
    avatar: Optional[str] = Field(None, max_length=500)

    model_config = {"populate_by_name": True}


# preferences

class TrustedContact(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)


class Preferences(BaseModel):
    language: Language = "en"
    ai_summarization: bool = Field(True, alias="aiSummarization")
    anonymous_mode: bool = Field(False, alias="anonymousMode")
    data_consent: bool = Field(True, alias="dataConsent")
    trusted_contact: Optional[TrustedContact] = Field(None, alias="trustedContact")

    model_config = {"populate_by_name": True}


class PreferencesUpdate(BaseModel):
    language: Optional[Language] = None
    ai_summarization: Optional[bool] = Field(None, alias="aiSummarization")
    anonymous_mode: Optional[bool] = Field(None, alias="anonymousMode")
    data_consent: Optional[bool] = Field(None, alias="dataConsent")

    model_config = {"populate_by_name": True}


class PreferencesBody(BaseModel):
    preferences: PreferencesUpdate


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    preferences: Optional[PreferencesUpdate] = None


# responses

class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    preferences: Preferences = Field(default_factory=Preferences)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    avatar: Optional[str] = None
    last_login_at: Optional[datetime] = Field(None, alias="lastLoginAt")

    model_config = {"populate_by_name": True}


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class UserEnvelope(BaseModel):
    user: UserResponse


# goals

class Goal(BaseModel):
    id: str
    title: str
    description: str
    completed: bool = False
    progress: int = Field(0, ge=0, le=100)


class GoalUpdate(BaseModel):
    completed: Optional[bool] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
