"""Profile service - profile fields, profile pictures and LinkedIn PDF uploads"""

import logging
import time
from typing import Optional
from urllib.parse import urlparse

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import config
from ...models import UserProfile
from ...services.supabase_service import SupabaseService
from ..onboarding.service import OnboardingService
from ..onboarding.steps import CALENDLY_STEP, PROFILE_STEP
from .repository import UserProfileRepository
from .schemas import ProfileUpdate

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
MAX_PDF_SIZE = 10 * 1024 * 1024  # 10MB
LINKEDIN_PDF_FILENAME = "linkedin_profile.pdf"

IMAGE_EXTENSIONS = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp"}
DANGEROUS_FILENAME_CHARS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]


def storage_path_from_url(url: str) -> Optional[str]:
    """Public URLs end in <user_id>/<file>; that pair is the object path"""
    parts = [p for p in urlparse(url).path.split("/") if p]
    if len(parts) < 2:
        return None
    return "/".join(parts[-2:])


def linkedin_pdf_path(user_id: str) -> str:
    return f"{user_id}/{LINKEDIN_PDF_FILENAME}"


def ensure_picture_size(size: Optional[int]) -> None:
    if size is not None and size > MAX_IMAGE_SIZE:
        raise HTTPException(status_code=400, detail="File size must be less than 5MB")


def ensure_pdf_size(size: Optional[int]) -> None:
    if size is not None and size > MAX_PDF_SIZE:
        raise HTTPException(status_code=400, detail="PDF file size must be less than 10MB")


class ProfileService:
    """Service layer for profile business logic"""

    def __init__(self, db: Session, storage: SupabaseService):
        self.db = db
        self.storage = storage
        self.repo = UserProfileRepository()

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self.repo.get_by_id(self.db, user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User profile not found")
        return profile

    def update_profile(self, data: ProfileUpdate) -> UserProfile:
        profile = self.get_profile(data.user_id)
        updates = data.model_dump(exclude={"user_id"}, exclude_unset=True, exclude_none=True)

        profile = self.repo.update(self.db, profile, **updates)
        logger.info(f"✅ Profile updated for user {data.user_id}: {sorted(updates)}")

        if profile.onboarding_step == PROFILE_STEP:
            OnboardingService(self.db).advance(profile.id, CALENDLY_STEP)
            self.db.refresh(profile)
        return profile

    # ------------------------------------------------------------------
    # Profile picture
    # ------------------------------------------------------------------

    def upload_profile_picture(
        self, user_id: str, content: bytes, content_type: Optional[str], filename: Optional[str]
    ) -> str:
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=400, detail="Please upload a valid image file (JPEG, PNG, or WebP)"
            )
        ensure_picture_size(len(content))

        if filename:
            for char in DANGEROUS_FILENAME_CHARS:
                if char in filename:
                    logger.warning(f"❌ Dangerous character '{char}' detected in filename: '{filename}'")
                    raise HTTPException(status_code=400, detail="Invalid filename")

        profile = self.get_profile(user_id)

        # Only one picture per user is kept
        if profile.profile_picture_url:
            self._remove_picture_object(profile.profile_picture_url)

        ext = IMAGE_EXTENSIONS[content_type]
        if filename and "." in filename:
            filename_ext = filename.rsplit(".", 1)[-1].lower()
            if filename_ext in ("jpg", "jpeg", "png", "webp"):
                ext = filename_ext
        path = f"{user_id}/{int(time.time() * 1000)}.{ext}"

        try:
            self.storage.upload_file(config.PROFILE_PICTURES_BUCKET, path, content, content_type)
        except Exception as e:
            logger.error(f"❌ Profile picture upload failed for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}") from e

        public_url = self.storage.get_public_url(config.PROFILE_PICTURES_BUCKET, path)

        try:
            self.repo.update(self.db, profile, profile_picture_url=public_url)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save profile picture URL, removing upload: {e}")
            self.storage.remove_files(config.PROFILE_PICTURES_BUCKET, [path])
            raise HTTPException(status_code=500, detail="Failed to update profile") from e

        logger.info(f"✅ Profile picture uploaded for user {user_id}: {path}")
        return public_url

    def _remove_picture_object(self, url: str) -> None:
        path = storage_path_from_url(url)
        if not path:
            return
        try:
            self.storage.remove_files(config.PROFILE_PICTURES_BUCKET, [path])
        except Exception as e:
            # A stale object is not worth failing the new upload for
            logger.warning(f"⚠️ Could not delete old profile picture {path}: {e}")

    def delete_profile_picture(self, user_id: str) -> None:
        profile = self.get_profile(user_id)
        if not profile.profile_picture_url:
            raise HTTPException(status_code=404, detail="No profile picture to delete")

        path = storage_path_from_url(profile.profile_picture_url)
        if path:
            try:
                self.storage.remove_files(config.PROFILE_PICTURES_BUCKET, [path])
            except Exception as e:
                logger.error(f"❌ Failed to delete profile picture for user {user_id}: {e}")
                raise HTTPException(status_code=500, detail="Failed to delete profile picture") from e

        self.repo.update(self.db, profile, profile_picture_url=None)
        logger.info(f"🗑️ Profile picture deleted for user {user_id}")

    # ------------------------------------------------------------------
    # LinkedIn PDF
    # ------------------------------------------------------------------

    def upload_linkedin_pdf(self, user_id: str, content: bytes, content_type: Optional[str]) -> str:
        if content_type != "application/pdf":
            raise HTTPException(status_code=400, detail="Please upload a PDF file only")
        ensure_pdf_size(len(content))

        profile = self.get_profile(user_id)
        path = linkedin_pdf_path(user_id)

        try:
            self.storage.upload_file(
                config.LINKEDIN_PDFS_BUCKET, path, content, "application/pdf", upsert=True
            )
        except Exception as e:
            logger.error(f"❌ LinkedIn PDF upload failed for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}") from e

        public_url = self.storage.get_public_url(config.LINKEDIN_PDFS_BUCKET, path)
        self.repo.update(self.db, profile, linkedin_pdf_url=public_url, linkedin_pdf_uploaded=True)
        logger.info(f"✅ LinkedIn PDF uploaded for user {user_id}")
        return public_url

    def delete_linkedin_pdf(self, user_id: str) -> None:
        profile = self.get_profile(user_id)
        if not profile.linkedin_pdf_uploaded:
            raise HTTPException(status_code=404, detail="No LinkedIn PDF to delete")

        try:
            self.storage.remove_files(config.LINKEDIN_PDFS_BUCKET, [linkedin_pdf_path(user_id)])
        except Exception as e:
            logger.error(f"❌ Failed to delete LinkedIn PDF for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete LinkedIn PDF") from e

        self.repo.update(self.db, profile, linkedin_pdf_url=None, linkedin_pdf_uploaded=False)
        logger.info(f"🗑️ LinkedIn PDF deleted for user {user_id}")

    def get_linkedin_pdf_status(self, user_id: str) -> dict:
        profile = self.get_profile(user_id)
        uploaded = bool(profile.linkedin_pdf_uploaded)
        return {"uploaded": uploaded, "url": profile.linkedin_pdf_url if uploaded else None}
