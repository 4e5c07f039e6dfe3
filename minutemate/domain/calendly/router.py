"""Calendly router - OAuth connection and integration endpoints"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from ... import config
from ...auth import get_current_user, verify_user_access
from ...database import get_db
from ...models import UserProfile
from ...services.calendly_service import CalendlyService, get_calendly_client
from .schemas import (
    CalendlyAvailabilityResponse,
    CalendlyIntegrationStatus,
    CalendlyMessageResponse,
    CalendlyOAuthResponse,
    CalendlyTokenRefreshRequest,
)
from .service import CalendlyAvailabilityError, CalendlyIntegrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendly", tags=["Calendly"])


def get_calendly_integration_service(
    db: Session = Depends(get_db),
    client: CalendlyService = Depends(get_calendly_client),
) -> CalendlyIntegrationService:
    """Dependency injection for CalendlyIntegrationService"""
    return CalendlyIntegrationService(db, client)


def onboarding_redirect(**params) -> RedirectResponse:
    return RedirectResponse(f"{config.FRONTEND_URL}/expert/onboarding/calendly?{urlencode(params)}")


# ============================================================================
# OAUTH
# ============================================================================


@router.get("/oauth", response_model=CalendlyOAuthResponse)
async def get_calendly_oauth_url(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: CalendlyIntegrationService = Depends(get_calendly_integration_service),
):
    """Authorization URL for the Calendly consent screen"""
    verify_user_access(user_id, current_user)
    return service.get_oauth_url(user_id)


@router.get("/callback")
async def calendly_oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    service: CalendlyIntegrationService = Depends(get_calendly_integration_service),
):
    """
    Calendly redirects the browser here after consent.
    The signed state identifies the user, so no bearer token is expected.
    """
    logger.info(f"📥 Calendly OAuth callback received: code={bool(code)}, error={error}")

    if error:
        logger.error(f"❌ Calendly OAuth error: {error}")
        return onboarding_redirect(error="oauth_failed")

    if not code or not state:
        logger.error("❌ Calendly callback missing code or state")
        return onboarding_redirect(error="callback_failed")

    try:
        await service.handle_callback(code, state)
    except Exception as e:
        logger.error(f"❌ Calendly callback failed: {e}")
        return onboarding_redirect(error="callback_failed")

    return onboarding_redirect(calendly_connected="true")


# ============================================================================
# INTEGRATION
# ============================================================================


@router.get("/integration", response_model=CalendlyIntegrationStatus)
async def get_calendly_integration(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: CalendlyIntegrationService = Depends(get_calendly_integration_service),
):
    verify_user_access(user_id, current_user)
    return service.get_integration_status(user_id)


@router.delete("/integration", response_model=CalendlyMessageResponse)
async def disconnect_calendly_integration(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: CalendlyIntegrationService = Depends(get_calendly_integration_service),
):
    verify_user_access(user_id, current_user)
    return service.disconnect(user_id)


@router.post("/integration/refresh", response_model=CalendlyMessageResponse)
async def refresh_calendly_token(
    data: CalendlyTokenRefreshRequest,
    current_user: UserProfile = Depends(get_current_user),
    service: CalendlyIntegrationService = Depends(get_calendly_integration_service),
):
    verify_user_access(data.user_id, current_user)
    return await service.refresh_token(data.user_id)


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/availability", response_model=CalendlyAvailabilityResponse)
async def get_calendly_availability(
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: CalendlyIntegrationService = Depends(get_calendly_integration_service),
):
    """Whether the expert has bookable event types, and the link to use"""
    verify_user_access(user_id, current_user)
    try:
        return await service.get_availability(user_id)
    except CalendlyAvailabilityError as e:
        return JSONResponse(status_code=e.status_code, content=e.body)
