"""Profile domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_user_id


class ProfileUpdate(BaseModel):
    """Fields editable from the onboarding profile step"""

    user_id: str
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    professional_headline: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = Field(None, max_length=500)

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        return validate_user_id(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("professional_headline")
    @classmethod
    def validate_headline(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Headline should be at least 10 characters")
        if len(v) > 100:
            raise ValueError("Headline should not exceed 100 characters")
        return v

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < 50:
            raise ValueError("Bio should be at least 50 characters")
        if len(v) > 300:
            raise ValueError("Bio should not exceed 300 characters")
        return v


class ProfileResponse(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    user_type: str
    onboarding_completed: bool
    onboarding_step: Optional[int] = None
    professional_headline: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    linkedin_pdf_url: Optional[str] = None
    linkedin_pdf_uploaded: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UploadResponse(BaseModel):
    success: bool
    message: str
    url: Optional[str] = None


class LinkedInPdfStatus(BaseModel):
    uploaded: bool
    url: Optional[str] = None
