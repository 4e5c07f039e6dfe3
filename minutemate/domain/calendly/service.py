"""Calendly integration service - OAuth connection, token refresh and event types"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CalendlyIntegration
from ...security_utils import create_oauth_state, decrypt_token, encrypt_token, verify_oauth_state
from ...services.calendly_service import CalendlyConfigError, CalendlyService
from ..availability.repository import ExpertAvailabilityRepository
from .repository import CalendlyIntegrationRepository

logger = logging.getLogger(__name__)

NO_INTEGRATION_MESSAGE = "No active Calendly integration found"
REFRESH_FAILED_MESSAGE = "Failed to refresh token - user may need to reconnect"


class CalendlyAvailabilityError(Exception):
    """Availability lookup failed; body is returned to the client as-is"""

    def __init__(self, status_code: int, body: dict[str, Any]):
        super().__init__(body.get("last_error") or body.get("error"))
        self.status_code = status_code
        self.body = body


def token_expiry(expires_in: Optional[int]) -> Optional[datetime]:
    if not expires_in:
        return None
    return datetime.utcnow() + timedelta(seconds=int(expires_in))


def summarize_event_types(data: dict[str, Any], fallback_url: Optional[str]) -> dict[str, Any]:
    """Reduce the event type listing to what onboarding needs"""
    event_types = data.get("collection", [])
    active = [et for et in event_types if et.get("active")]
    return {
        "has_active_event_types": len(active) > 0,
        "scheduling_url": active[0].get("scheduling_url") if active else fallback_url,
        "total_event_types": len(event_types),
        "active_event_types": len(active),
        "last_fetched": datetime.utcnow(),
    }


class CalendlyIntegrationService:
    """Service layer for the Calendly connection of an expert"""

    def __init__(self, db: Session, client: CalendlyService):
        self.db = db
        self.client = client
        self.repo = CalendlyIntegrationRepository()

    def get_oauth_url(self, user_id: str) -> dict:
        state = create_oauth_state(user_id)
        try:
            url = self.client.get_authorization_url(state)
        except CalendlyConfigError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        return {"authorization_url": url, "state": state}

    async def handle_callback(self, code: str, state: str) -> CalendlyIntegration:
        """Exchange the OAuth code and store the connection for the user named in `state`"""
        user_id = verify_oauth_state(state)
        if not user_id:
            raise ValueError("Invalid OAuth state")

        token_data = await self.client.exchange_code_for_token(code)
        profile_data = await self.client.get_user_info(token_data["access_token"])
        calendly_user = profile_data["resource"]

        integration = self.repo.upsert(
            self.db,
            user_id,
            calendly_user_uri=calendly_user.get("uri"),
            calendly_username=calendly_user.get("slug"),
            calendly_email=calendly_user.get("email"),
            calendly_name=calendly_user.get("name"),
            access_token=encrypt_token(token_data["access_token"]),
            refresh_token=encrypt_token(token_data.get("refresh_token")),
            token_expires_at=token_expiry(token_data.get("expires_in")),
            scheduling_url=calendly_user.get("scheduling_url"),
            timezone=calendly_user.get("timezone"),
            integration_status="active",
        )
        logger.info(f"✅ Stored Calendly integration for user {user_id}")
        return integration

    def get_integration_status(self, user_id: str) -> dict:
        integration = self.repo.get_active(self.db, user_id)
        if not integration:
            return {"connected": False, "integration": None}
        return {
            "connected": True,
            "integration": {
                "username": integration.calendly_username,
                "email": integration.calendly_email,
                "name": integration.calendly_name,
                "status": integration.integration_status,
                "connected_at": integration.created_at,
                "scheduling_url": integration.scheduling_url,
                "timezone": integration.timezone,
            },
        }

    def disconnect(self, user_id: str) -> dict:
        integration = self.repo.get_by_user(self.db, user_id)
        if integration:
            self.repo.update(self.db, integration, integration_status="disabled")

        # Bookings stop with the connection
        ExpertAvailabilityRepository.deactivate(self.db, user_id)
        logger.info(f"🔌 Disconnected Calendly integration for user {user_id}")
        return {"success": True, "message": "Integration disconnected successfully"}

    async def refresh_token(self, user_id: str) -> dict:
        integration = self.repo.get_active(self.db, user_id)
        if not integration or not integration.refresh_token:
            raise HTTPException(status_code=404, detail="No active integration found")

        try:
            current_refresh_token = decrypt_token(integration.refresh_token)
            token_data = await self.client.refresh_access_token(current_refresh_token)
        except CalendlyConfigError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Calendly token refresh failed for user {user_id}: {e}")
            self.repo.update(self.db, integration, integration_status="error")
            raise HTTPException(status_code=502, detail=REFRESH_FAILED_MESSAGE) from e

        new_refresh_token = token_data.get("refresh_token")
        self.repo.update(
            self.db,
            integration,
            access_token=encrypt_token(token_data["access_token"]),
            refresh_token=encrypt_token(new_refresh_token) if new_refresh_token else integration.refresh_token,
            token_expires_at=token_expiry(token_data.get("expires_in")),
            integration_status="active",
            last_sync_at=datetime.utcnow(),
        )
        logger.info(f"🔄 Refreshed Calendly tokens for user {user_id}")
        return {"success": True, "message": "Token refreshed successfully"}

    async def _list_event_types(self, integration: CalendlyIntegration) -> dict[str, Any]:
        access_token = decrypt_token(integration.access_token)
        try:
            return await self.client.list_event_types(access_token, integration.calendly_user_uri)
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 401:
                raise

        logger.info(f"🔄 Calendly access token expired for user {integration.user_id}, refreshing")
        await self.refresh_token(integration.user_id)
        self.db.refresh(integration)

        try:
            return await self.client.list_event_types(
                decrypt_token(integration.access_token), integration.calendly_user_uri
            )
        except httpx.HTTPStatusError as e:
            raise ValueError("Failed to fetch event types after token refresh") from e

    async def get_availability(self, user_id: str) -> dict[str, Any]:
        integration = self.repo.get_active(self.db, user_id)
        if not integration:
            raise CalendlyAvailabilityError(
                404,
                {
                    "error": NO_INTEGRATION_MESSAGE,
                    "has_active_event_types": False,
                    "scheduling_url": None,
                    "last_error": NO_INTEGRATION_MESSAGE,
                },
            )

        fallback_url = integration.scheduling_url
        try:
            data = await self._list_event_types(integration)
        except httpx.HTTPStatusError as e:
            last_error = f"Calendly API error: {e.response.status_code}"
        except HTTPException as e:
            last_error = str(e.detail)
        except (httpx.HTTPError, ValueError) as e:
            last_error = str(e)
        else:
            return summarize_event_types(data, integration.scheduling_url)

        logger.error(f"❌ Failed to fetch Calendly availability for user {user_id}: {last_error}")
        raise CalendlyAvailabilityError(
            500,
            {
                "error": "Failed to fetch availability from Calendly",
                "has_active_event_types": False,
                "scheduling_url": fallback_url,
                "last_error": last_error,
            },
        )
