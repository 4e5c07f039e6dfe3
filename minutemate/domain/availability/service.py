"""Availability service - expert session setup, defaults and pricing rules"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ExpertAvailability
from ..onboarding.service import OnboardingService
from ..onboarding.steps import AVAILABILITY_STEP, PROCESSING_STEP, SESSION_DETAILS_STEP
from .repository import ExpertAvailabilityRepository
from .schemas import (
    DEFAULT_SESSION_DESCRIPTION,
    DEFAULT_SESSION_DURATION,
    DEFAULT_SESSION_PRICE,
    DEFAULT_SESSION_TITLE,
    AvailabilityConfirmRequest,
    CalendlySetupRequest,
    SessionDetailsUpdate,
)

logger = logging.getLogger(__name__)

VALID_SESSION_DURATIONS = [15, 30, 45, 60]
MAX_SESSION_PRICE = 200


def validate_session_pricing(session_price: float, is_free_session: bool) -> tuple[bool, Optional[str]]:
    if is_free_session and session_price != 0:
        return False, "Free sessions must have $0 price"
    if not is_free_session and session_price <= 0:
        return False, "Paid sessions must have a price greater than $0"
    if session_price > MAX_SESSION_PRICE:
        return False, "Session price cannot exceed $200"
    return True, None


def validate_session_duration(duration: int) -> tuple[bool, Optional[str]]:
    if duration not in VALID_SESSION_DURATIONS:
        return False, "Session duration must be 15, 30, 45, or 60 minutes"
    return True, None


def session_details_errors(availability: ExpertAvailability) -> list[str]:
    errors = []

    price = availability.session_price
    _, pricing_error = validate_session_pricing(price, price == 0)
    if pricing_error:
        errors.append(pricing_error)

    _, duration_error = validate_session_duration(availability.session_duration)
    if duration_error:
        errors.append(duration_error)

    if not (availability.title or "").strip():
        errors.append("Session title is required")
    if not (availability.description or "").strip():
        errors.append("Session description is required")
    return errors


class AvailabilityService:
    """Service layer for expert availability"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ExpertAvailabilityRepository()

    def get_availability(self, user_id: str) -> Optional[ExpertAvailability]:
        return self.repo.get_by_user(self.db, user_id)

    def save_calendly_setup(self, data: CalendlySetupRequest) -> dict:
        if not data.calendly_connected:
            raise HTTPException(status_code=400, detail="Calendly must be connected")

        self.repo.upsert(
            self.db,
            data.user_id,
            session_duration=data.session_duration,
            session_price=data.session_price,
            title=data.title,
            description=data.description,
            is_active=data.is_active,
            booking_url=data.calendly_url,
        )
        OnboardingService(self.db).advance(data.user_id, AVAILABILITY_STEP)
        logger.info(f"✅ Availability settings saved for user {data.user_id}")
        return {"success": True, "message": "Availability settings saved successfully"}

    def confirm_availability(self, data: AvailabilityConfirmRequest) -> dict:
        """Create the availability row with defaults; pricing is set in the next step"""
        if not data.has_active_event_types:
            raise HTTPException(status_code=400, detail="User must have active event types configured")

        defaults = {
            "session_duration": DEFAULT_SESSION_DURATION,
            "session_price": DEFAULT_SESSION_PRICE,
            "title": DEFAULT_SESSION_TITLE,
            "description": DEFAULT_SESSION_DESCRIPTION,
            "is_active": True,
        }
        if data.scheduling_url:
            defaults["booking_url"] = data.scheduling_url

        self.repo.upsert(self.db, data.user_id, **defaults)
        OnboardingService(self.db).advance(data.user_id, SESSION_DETAILS_STEP)
        logger.info(f"✅ Basic availability record created for user {data.user_id}")
        return {"success": True, "message": "Basic availability record created successfully"}

    @staticmethod
    def _session_fields(data: SessionDetailsUpdate) -> dict:
        fields = data.model_dump(
            include={"session_duration", "session_price", "title", "description"}
        )
        if data.calendly_event_type_uri:
            fields["calendly_event_type_uri"] = data.calendly_event_type_uri
        if data.event_type_name:
            fields["event_type_name"] = data.event_type_name
        return fields

    def update_session_details(self, data: SessionDetailsUpdate) -> dict:
        availability = self.repo.get_by_user(self.db, data.user_id)
        if not availability:
            raise HTTPException(status_code=404, detail="Availability record not found")

        logger.info(
            f"📝 Updating session details for user {data.user_id}: "
            f"{data.session_duration} min, ${data.session_price}"
        )
        self.repo.update(self.db, availability, **self._session_fields(data))
        OnboardingService(self.db).advance(data.user_id, PROCESSING_STEP)
        return {"success": True, "message": "Session details updated successfully"}

    def upsert_session_details(self, data: SessionDetailsUpdate) -> ExpertAvailability:
        availability = self.repo.get_by_user(self.db, data.user_id)
        if availability:
            return self.repo.update(self.db, availability, **self._session_fields(data))
        return self.repo.create(self.db, data.user_id, is_active=True, **self._session_fields(data))

    def get_session_details_with_validation(self, user_id: str) -> dict:
        availability = self.repo.get_by_user(self.db, user_id)
        errors = session_details_errors(availability) if availability else []
        return {"availability": availability, "is_valid": len(errors) == 0, "errors": errors}
