import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from .. import config

logger = logging.getLogger(__name__)


class CalendlyConfigError(ValueError):
    """Raised when the Calendly OAuth app settings are missing"""


class CalendlyService:
    """Service for interacting with Calendly API"""

    BASE_URL = "https://api.calendly.com"
    AUTH_URL = "https://auth.calendly.com/oauth/authorize"
    TOKEN_URL = "https://auth.calendly.com/oauth/token"  # noqa: S105 - OAuth endpoint URL
    TIMEOUT = 15.0

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id or config.CALENDLY_CLIENT_ID
        self.client_secret = client_secret or config.CALENDLY_CLIENT_SECRET
        self.redirect_uri = redirect_uri or config.CALENDLY_REDIRECT_URI
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.TIMEOUT)

    def get_authorization_url(self, state: str) -> str:
        """Generate OAuth authorization URL"""
        if not self.client_id or not self.redirect_uri:
            logger.error("❌ CALENDLY_CLIENT_ID or CALENDLY_REDIRECT_URI not configured")
            raise CalendlyConfigError("Missing Calendly configuration")

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "default",
            "state": state,
        }
        auth_url = f"{self.AUTH_URL}?{urlencode(params)}"
        logger.info(f"🔗 Generated Calendly authorization URL with redirect_uri: {self.redirect_uri}")
        return auth_url

    async def exchange_code_for_token(self, code: str) -> dict[str, Any]:
        """Exchange authorization code for access token"""
        if not self.client_id or not self.client_secret or not self.redirect_uri:
            raise CalendlyConfigError("Missing Calendly environment variables")

        async with self._client() as client:
            payload = {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            }

            logger.info("🔄 Exchanging Calendly OAuth code for token...")
            response = await client.post(self.TOKEN_URL, data=payload)

            if response.status_code != 200:
                logger.error(f"❌ Calendly token exchange failed: {response.status_code}")
                logger.error(f"❌ Error response: {response.text}")

            response.raise_for_status()
            return response.json()

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]:
        """Refresh expired access token"""
        if not self.client_id or not self.client_secret:
            raise CalendlyConfigError("Missing Calendly environment variables for token refresh")

        async with self._client() as client:
            response = await client.post(
                self.TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": refresh_token,
                    "grant_type": "refresh_token",
                },
            )
            if response.status_code != 200:
                logger.error(f"❌ Calendly token refresh failed: {response.status_code} {response.text}")
            response.raise_for_status()
            return response.json()

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        """Get current user information"""
        async with self._client() as client:
            response = await client.get(
                f"{self.BASE_URL}/users/me", headers={"Authorization": f"Bearer {access_token}"}
            )
            if response.status_code != 200:
                logger.error(f"❌ Calendly profile fetch failed: {response.status_code} {response.text}")
            response.raise_for_status()
            return response.json()

    async def list_event_types(self, access_token: str, user_uri: str) -> dict[str, Any]:
        """List user's event types"""
        async with self._client() as client:
            response = await client.get(
                f"{self.BASE_URL}/event_types",
                headers={"Authorization": f"Bearer {access_token}"},
                params={"user": user_uri},
            )
            response.raise_for_status()
            return response.json()


_calendly_client: Optional[CalendlyService] = None


def get_calendly_client() -> CalendlyService:
    """FastAPI dependency returning the shared Calendly API client"""
    global _calendly_client
    if _calendly_client is None:
        _calendly_client = CalendlyService()
    return _calendly_client
