"""Profile router - FastAPI endpoints for profile and file uploads"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user, verify_user_access
from ...database import get_db
from ...models import UserProfile
from ...services.supabase_service import SupabaseService, get_supabase_service
from .schemas import LinkedInPdfStatus, ProfileResponse, ProfileUpdate, UploadResponse
from .service import ProfileService, ensure_pdf_size, ensure_picture_size

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


def get_profile_service(
    db: Session = Depends(get_db),
    storage: SupabaseService = Depends(get_supabase_service),
) -> ProfileService:
    """Dependency injection for ProfileService"""
    return ProfileService(db, storage)


# ============================================================================
# PROFILE FIELDS
# ============================================================================


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    verify_user_access(user_id, current_user)
    return service.get_profile(user_id)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    """Update name, headline, bio or picture URL"""
    verify_user_access(data.user_id, current_user)
    return service.update_profile(data)


# ============================================================================
# PROFILE PICTURE
# ============================================================================


@router.post("/picture", response_model=UploadResponse)
async def upload_profile_picture(
    user_id: str = Form(...),
    file: UploadFile = File(...),
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    verify_user_access(user_id, current_user)
    logger.info(f"📤 Uploading profile picture for user {user_id}")
    # Reject on the declared size before buffering the body
    ensure_picture_size(file.size)
    content = await file.read()
    url = service.upload_profile_picture(user_id, content, file.content_type, file.filename)
    return UploadResponse(success=True, message="Profile picture uploaded successfully", url=url)


@router.delete("/picture", response_model=UploadResponse)
async def delete_profile_picture(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    verify_user_access(user_id, current_user)
    service.delete_profile_picture(user_id)
    return UploadResponse(success=True, message="Profile picture deleted successfully")


# ============================================================================
# LINKEDIN PDF
# ============================================================================


@router.get("/linkedin-pdf", response_model=LinkedInPdfStatus)
async def get_linkedin_pdf_status(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    verify_user_access(user_id, current_user)
    return service.get_linkedin_pdf_status(user_id)


@router.post("/linkedin-pdf", response_model=UploadResponse)
async def upload_linkedin_pdf(
    user_id: str = Form(...),
    file: UploadFile = File(...),
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    verify_user_access(user_id, current_user)
    logger.info(f"📤 Uploading LinkedIn PDF for user {user_id}")
    ensure_pdf_size(file.size)
    content = await file.read()
    url = service.upload_linkedin_pdf(user_id, content, file.content_type)
    return UploadResponse(success=True, message="LinkedIn PDF uploaded successfully", url=url)


@router.delete("/linkedin-pdf", response_model=UploadResponse)
async def delete_linkedin_pdf(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    verify_user_access(user_id, current_user)
    service.delete_linkedin_pdf(user_id)
    return UploadResponse(success=True, message="LinkedIn PDF deleted successfully")
