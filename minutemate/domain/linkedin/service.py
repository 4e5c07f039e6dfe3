"""
LinkedIn processing service
Downloads the uploaded LinkedIn PDF, runs AI extraction and stores the
expert profile used for client matching. Finishing this step completes
expert onboarding.
"""

import logging
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import config
from ...services.linkedin_extractor import LinkedInExtractor
from ...services.supabase_service import SupabaseService
from ..onboarding.service import OnboardingService
from ..profiles.repository import UserProfileRepository
from ..profiles.service import linkedin_pdf_path
from .repository import ExpertProfileRepository

logger = logging.getLogger(__name__)


class LinkedInProcessingError(Exception):
    """Any failure after processing started; the row is left in `error`"""


class LinkedInProcessingService:
    """Service layer for the LinkedIn extraction step"""

    def __init__(self, db: Session, storage: SupabaseService, extractor: LinkedInExtractor):
        self.db = db
        self.storage = storage
        self.extractor = extractor
        self.repo = ExpertProfileRepository()

    def process(self, user_id: str) -> dict:
        profile = UserProfileRepository.get_by_id(self.db, user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User profile not found")
        if not profile.linkedin_pdf_uploaded:
            raise HTTPException(
                status_code=400,
                detail="No LinkedIn PDF found. Please upload your LinkedIn PDF first.",
            )

        logger.info(f"📄 Processing LinkedIn PDF for user {user_id}")
        self.repo.set_status(self.db, user_id, "processing")

        try:
            pdf_bytes = self.storage.download_file(config.LINKEDIN_PDFS_BUCKET, linkedin_pdf_path(user_id))
            extracted = self.extractor.extract(pdf_bytes)

            extracted["processing_error"] = None
            extracted["last_processed_at"] = datetime.utcnow()
            expert = self.repo.upsert(self.db, user_id, **extracted)

            OnboardingService(self.db).complete(user_id)
            self.repo.set_status(self.db, user_id, "completed")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ LinkedIn processing failed for user {user_id}: {e}")
            self.repo.set_status(self.db, user_id, "error", str(e))
            raise LinkedInProcessingError(str(e) or "Unknown error") from e

        logger.info(f"✅ LinkedIn profile processed for user {user_id}")
        return {
            "success": True,
            "message": "LinkedIn profile processed successfully",
            "data": {
                "name": expert.full_name,
                "title": expert.current_job_title,
                "company": expert.current_company,
            },
        }

    def get_status(self, user_id: str) -> dict:
        expert = self.repo.get_by_user(self.db, user_id)
        if not expert:
            return {"processing_status": "pending", "pdf_processed": False}
        return {
            "processing_status": expert.processing_status,
            "pdf_processed": expert.pdf_processed,
            "last_processed_at": expert.last_processed_at,
            "processing_error": expert.processing_error,
        }
