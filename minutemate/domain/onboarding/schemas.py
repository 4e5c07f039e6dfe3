"""Onboarding domain schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_user_id
from .steps import COMPLETED_STEP, PROFILE_STEP


class OnboardingStep(BaseModel):
    id: str
    step: int
    title: str
    path: str


class OnboardingStatusResponse(BaseModel):
    user_id: str
    user_type: str
    onboarding_step: Optional[int] = None
    onboarding_completed: bool
    redirect_to: str
    steps: list[OnboardingStep]


class OnboardingStatusUpdate(BaseModel):
    user_id: str
    step: Optional[int] = Field(None, ge=PROFILE_STEP, le=COMPLETED_STEP)
    completed: Optional[bool] = None

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        return validate_user_id(v)
