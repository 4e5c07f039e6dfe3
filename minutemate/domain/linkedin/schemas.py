"""LinkedIn processing schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_user_id


class ProcessLinkedInRequest(BaseModel):
    user_id: str

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v):
        return validate_user_id(v)


class ExtractedProfileSummary(BaseModel):
    name: str
    title: Optional[str] = None
    company: Optional[str] = None


class ProcessLinkedInResponse(BaseModel):
    success: bool
    message: str
    data: ExtractedProfileSummary


class ProcessingStatusResponse(BaseModel):
    processing_status: str
    pdf_processed: bool
    last_processed_at: Optional[datetime] = None
    processing_error: Optional[str] = None
