"""Availability router - expert session setup endpoints"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_expert, verify_user_access
from ...database import get_db
from ...models import UserProfile
from .schemas import (
    AvailabilityConfirmRequest,
    AvailabilityEnvelope,
    AvailabilityMessageResponse,
    AvailabilityResponse,
    CalendlySetupRequest,
    SessionDetailsUpdate,
    SessionDetailsValidation,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expert", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.post("/calendly", response_model=AvailabilityMessageResponse)
async def save_calendly_setup(
    data: CalendlySetupRequest,
    current_user: UserProfile = Depends(get_current_expert),
    service: AvailabilityService = Depends(get_availability_service),
):
    verify_user_access(data.user_id, current_user)
    return service.save_calendly_setup(data)


@router.get("/availability", response_model=AvailabilityEnvelope)
async def get_availability(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_expert),
    service: AvailabilityService = Depends(get_availability_service),
):
    verify_user_access(user_id, current_user)
    return {"availability": service.get_availability(user_id)}


@router.post("/availability", response_model=AvailabilityMessageResponse)
async def confirm_availability(
    data: AvailabilityConfirmRequest,
    current_user: UserProfile = Depends(get_current_expert),
    service: AvailabilityService = Depends(get_availability_service),
):
    verify_user_access(data.user_id, current_user)
    return service.confirm_availability(data)


@router.put("/availability", response_model=AvailabilityMessageResponse)
async def update_session_details(
    data: SessionDetailsUpdate,
    current_user: UserProfile = Depends(get_current_expert),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Save duration, price, title and description from the rates step"""
    verify_user_access(data.user_id, current_user)
    return service.update_session_details(data)


@router.get("/session-details", response_model=SessionDetailsValidation)
async def get_session_details(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_expert),
    service: AvailabilityService = Depends(get_availability_service),
):
    verify_user_access(user_id, current_user)
    return service.get_session_details_with_validation(user_id)


@router.put("/session-details", response_model=AvailabilityResponse)
async def upsert_session_details(
    data: SessionDetailsUpdate,
    current_user: UserProfile = Depends(get_current_expert),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Same fields as PUT /availability, creating the row when it is missing"""
    verify_user_access(data.user_id, current_user)
    return service.upsert_session_details(data)
