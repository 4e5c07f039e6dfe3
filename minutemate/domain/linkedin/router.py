"""LinkedIn router - expert profile extraction endpoints"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import get_current_expert, verify_user_access
from ...database import get_db
from ...models import UserProfile
from ...services.linkedin_extractor import LinkedInExtractor, get_linkedin_extractor
from ...services.supabase_service import SupabaseService, get_supabase_service
from .schemas import ProcessingStatusResponse, ProcessLinkedInRequest, ProcessLinkedInResponse
from .service import LinkedInProcessingError, LinkedInProcessingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expert", tags=["LinkedIn"])


def get_linkedin_processing_service(
    db: Session = Depends(get_db),
    storage: SupabaseService = Depends(get_supabase_service),
    extractor: LinkedInExtractor = Depends(get_linkedin_extractor),
) -> LinkedInProcessingService:
    """Dependency injection for LinkedInProcessingService"""
    return LinkedInProcessingService(db, storage, extractor)


@router.post("/process-linkedin", response_model=ProcessLinkedInResponse)
def process_linkedin(
    data: ProcessLinkedInRequest,
    current_user: UserProfile = Depends(get_current_expert),
    service: LinkedInProcessingService = Depends(get_linkedin_processing_service),
):
    """
    Extract the expert profile from the uploaded LinkedIn PDF.
    Runs in the threadpool since PDF parsing and the OpenAI call block.
    """
    verify_user_access(data.user_id, current_user)
    try:
        return service.process(data.user_id)
    except LinkedInProcessingError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process LinkedIn profile", "message": str(e)},
        )


@router.get("/process-linkedin", response_model=ProcessingStatusResponse)
async def get_processing_status(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_expert),
    service: LinkedInProcessingService = Depends(get_linkedin_processing_service),
):
    verify_user_access(user_id, current_user)
    return service.get_status(user_id)
