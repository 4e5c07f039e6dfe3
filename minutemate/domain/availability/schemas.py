"""Availability domain schemas - session setup and pricing"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_user_id

DEFAULT_SESSION_DURATION = 30
DEFAULT_SESSION_PRICE = 75.0
DEFAULT_SESSION_TITLE = "Expert Consultation"
DEFAULT_SESSION_DESCRIPTION = "Professional consultation session"


class CalendlySetupRequest(BaseModel):
    """Saved from the Calendly step of onboarding"""

    user_id: str
    calendly_connected: bool
    calendly_url: Optional[str] = Field(None, max_length=500)
    session_duration: int = DEFAULT_SESSION_DURATION
    session_price: float = DEFAULT_SESSION_PRICE
    title: str = Field(DEFAULT_SESSION_TITLE, max_length=100)
    description: str = Field(DEFAULT_SESSION_DESCRIPTION, max_length=500)
    is_active: bool = True

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        return validate_user_id(v)


class AvailabilityConfirmRequest(BaseModel):
    """Sent once the expert's Calendly account has bookable event types"""

    user_id: str
    has_active_event_types: bool
    scheduling_url: Optional[str] = Field(None, max_length=500)

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        return validate_user_id(v)


class SessionDetailsUpdate(BaseModel):
    user_id: str
    session_duration: int = Field(..., ge=15, le=60)
    session_price: float = Field(..., ge=0, le=200)
    title: str
    description: str
    calendly_event_type_uri: Optional[str] = None
    event_type_name: Optional[str] = None

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        if not v:
            raise ValueError("Valid user ID is required")
        return validate_user_id(v)

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Session title is required")
        if len(v) > 100:
            raise ValueError("Title cannot exceed 100 characters")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Session description is required")
        if len(v) > 500:
            raise ValueError("Description cannot exceed 500 characters")
        return v


class AvailabilityResponse(BaseModel):
    id: str
    user_id: str
    session_duration: int
    session_price: float
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    booking_url: Optional[str] = None
    calendly_event_type_uri: Optional[str] = None
    event_type_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvailabilityEnvelope(BaseModel):
    availability: Optional[AvailabilityResponse] = None


class SessionDetailsValidation(BaseModel):
    availability: Optional[AvailabilityResponse] = None
    is_valid: bool
    errors: list[str]


class AvailabilityMessageResponse(BaseModel):
    success: bool
    message: str
