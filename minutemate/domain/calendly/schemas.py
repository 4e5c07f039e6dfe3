"""Calendly domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_user_id


class CalendlyOAuthResponse(BaseModel):
    authorization_url: str
    state: str


class CalendlyIntegrationDetails(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    status: str
    connected_at: Optional[datetime] = None
    scheduling_url: Optional[str] = None
    timezone: Optional[str] = None


class CalendlyIntegrationStatus(BaseModel):
    connected: bool
    integration: Optional[CalendlyIntegrationDetails] = None


class CalendlyTokenRefreshRequest(BaseModel):
    user_id: str

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        return validate_user_id(v)


class CalendlyMessageResponse(BaseModel):
    success: bool
    message: str


class CalendlyAvailabilityResponse(BaseModel):
    has_active_event_types: bool
    scheduling_url: Optional[str] = None
    total_event_types: int
    active_event_types: int
    last_fetched: datetime
