"""Onboarding router - wizard progress endpoints"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, verify_user_access
from ...database import get_db
from ...models import UserProfile
from .schemas import OnboardingStatusResponse, OnboardingStatusUpdate
from .service import OnboardingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


def get_onboarding_service(db: Session = Depends(get_db)) -> OnboardingService:
    """Dependency injection for OnboardingService"""
    return OnboardingService(db)


@router.get("/status", response_model=OnboardingStatusResponse)
async def get_onboarding_status(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service),
):
    """Current wizard step and where the frontend should send the user"""
    verify_user_access(user_id, current_user)
    return service.get_status(user_id)


@router.put("/status", response_model=OnboardingStatusResponse)
async def update_onboarding_status(
    data: OnboardingStatusUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service),
):
    verify_user_access(data.user_id, current_user)
    service.update_status(data.user_id, step=data.step, completed=data.completed)
    return service.get_status(data.user_id)
