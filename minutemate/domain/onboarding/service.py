"""Onboarding service - wizard progress for experts"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import UserProfile
from ..profiles.repository import UserProfileRepository
from .steps import COMPLETED_STEP, ONBOARDING_STEPS, get_redirect_path

logger = logging.getLogger(__name__)


class OnboardingService:
    """Service layer for onboarding progress"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserProfileRepository()

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self.repo.get_by_id(self.db, user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User profile not found")
        return profile

    def get_status(self, user_id: str) -> dict:
        profile = self.get_profile(user_id)
        return {
            "user_id": profile.id,
            "user_type": profile.user_type,
            "onboarding_step": profile.onboarding_step,
            "onboarding_completed": profile.onboarding_completed,
            "redirect_to": get_redirect_path(
                profile.user_type, profile.onboarding_completed, profile.onboarding_step
            ),
            "steps": ONBOARDING_STEPS,
        }

    def update_status(
        self, user_id: str, step: Optional[int] = None, completed: Optional[bool] = None
    ) -> UserProfile:
        """Set step and/or completed exactly as given"""
        profile = self.get_profile(user_id)
        updates = {}
        if step is not None:
            updates["onboarding_step"] = step
        if completed is not None:
            updates["onboarding_completed"] = completed

        if not updates:
            return profile

        logger.info(f"🧭 Onboarding update for user {user_id}: {updates}")
        return self.repo.update(self.db, profile, **updates)

    def advance(self, user_id: str, step: int) -> Optional[UserProfile]:
        """Move an expert forward to `step`; revisiting an earlier page never rewinds progress"""
        profile = self.repo.get_by_id(self.db, user_id)
        if not profile or profile.user_type != "expert":
            return profile
        if profile.onboarding_step is not None and profile.onboarding_step >= step:
            return profile
        return self.update_status(user_id, step=step)

    def complete(self, user_id: str) -> UserProfile:
        return self.update_status(user_id, step=COMPLETED_STEP, completed=True)
