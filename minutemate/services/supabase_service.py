"""
Supabase auth and storage client
Two clients are kept: the anon client drives end-user auth flows, the
service-role client bypasses storage policies for server-side uploads.
"""

import logging
from typing import Any, Optional

from supabase import Client, create_client
from supabase.client import ClientOptions

from .. import config

logger = logging.getLogger(__name__)


class SupabaseNotConfiguredError(RuntimeError):
    pass


class SupabaseService:
    """Thin wrapper over supabase-py used by the auth, profile and LinkedIn flows"""

    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        service_key: Optional[str] = None,
    ):
        self.url = url or config.SUPABASE_URL
        self.anon_key = anon_key or config.SUPABASE_ANON_KEY
        self.service_key = service_key or config.SUPABASE_SERVICE_ROLE_KEY
        self._public: Optional[Client] = None
        self._admin: Optional[Client] = None

    def _create(self, key: Optional[str]) -> Client:
        if not self.url or not key:
            logger.error("❌ SUPABASE_URL or Supabase API key not configured")
            raise SupabaseNotConfiguredError("Supabase not configured")
        return create_client(
            self.url,
            key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )

    @property
    def public(self) -> Client:
        if self._public is None:
            self._public = self._create(self.anon_key)
        return self._public

    @property
    def admin(self) -> Client:
        if self._admin is None:
            self._admin = self._create(self.service_key)
        return self._admin

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def sign_up(self, email: str, password: str, metadata: dict[str, Any], redirect_to: str):
        logger.info(f"📤 Creating Supabase auth user for {email}")
        return self.public.auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"data": metadata, "email_redirect_to": redirect_to},
            }
        )

    def sign_in(self, email: str, password: str):
        return self.public.auth.sign_in_with_password({"email": email, "password": password})

    def resend_confirmation(self, email: str, redirect_to: str):
        logger.info(f"📤 Resending confirmation email to {email}")
        return self.public.auth.resend(
            {"type": "signup", "email": email, "options": {"email_redirect_to": redirect_to}}
        )

    def verify_email(self, token_hash: str, otp_type: str = "email"):
        return self.public.auth.verify_otp({"token_hash": token_hash, "type": otp_type})

    def get_user(self, user_id: str):
        """Fetch the auth user (service role) to read email_confirmed_at"""
        response = self.admin.auth.admin.get_user_by_id(user_id)
        return response.user if response else None

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload_file(
        self, bucket: str, path: str, content: bytes, content_type: str, upsert: bool = False
    ) -> str:
        self.admin.storage.from_(bucket).upload(
            path,
            content,
            file_options={
                "content-type": content_type,
                "cache-control": "3600",
                "x-upsert": "true" if upsert else "false",
            },
        )
        logger.info(f"✅ Uploaded {bucket}/{path} ({len(content)} bytes)")
        return path

    def remove_files(self, bucket: str, paths: list[str]) -> None:
        self.admin.storage.from_(bucket).remove(paths)
        logger.info(f"🗑️ Removed {len(paths)} object(s) from {bucket}")

    def get_public_url(self, bucket: str, path: str) -> str:
        return self.admin.storage.from_(bucket).get_public_url(path)

    def download_file(self, bucket: str, path: str) -> bytes:
        logger.info(f"📥 Downloading {bucket}/{path}")
        return self.admin.storage.from_(bucket).download(path)


_supabase_service: Optional[SupabaseService] = None


def get_supabase_service() -> SupabaseService:
    """FastAPI dependency returning the process-wide Supabase wrapper"""
    global _supabase_service
    if _supabase_service is None:
        _supabase_service = SupabaseService()
    return _supabase_service
