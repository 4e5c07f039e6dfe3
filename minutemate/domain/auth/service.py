"""Auth service - Supabase sign-up/sign-in and email confirmation"""

import logging
from urllib.parse import urlencode

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import config
from ...models import UserProfile
from ...services.supabase_service import SupabaseNotConfiguredError, SupabaseService
from ...shared.validators import is_valid_email
from ..onboarding.steps import PROFILE_STEP, get_redirect_path
from ..profiles.repository import UserProfileRepository
from .schemas import SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please check your credentials and try again."
EMAIL_NOT_CONFIRMED_MESSAGE = "Please check your email and click the confirmation link before signing in."
RESEND_RATE_LIMITED_MESSAGE = "Too many requests. Please wait a few minutes before requesting another email."
RESEND_NOT_FOUND_MESSAGE = "Email address not found. Please sign up first."
RESEND_ALREADY_CONFIRMED_MESSAGE = "This email has already been confirmed. You can sign in now."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def auth_callback_url() -> str:
    return f"{config.FRONTEND_URL}/auth/callback"


def confirm_email_path(email: str, user_type: str) -> str:
    return f"/confirm-email?{urlencode({'email': email, 'type': user_type})}"


def classify_resend_error(error: Exception) -> tuple[int, str]:
    """Map a Supabase resend failure to (status_code, user-facing message)"""
    message = str(error)
    lowered = message.lower()
    status = getattr(error, "status", None)

    if status == 429 or any(s in lowered for s in ("too_many_requests", "too many requests", "rate limit")):
        return 429, RESEND_RATE_LIMITED_MESSAGE
    if any(s in lowered for s in ("not_found", "not found")):
        return 404, RESEND_NOT_FOUND_MESSAGE
    if any(s in lowered for s in ("already_confirmed", "already confirmed")):
        return 409, RESEND_ALREADY_CONFIRMED_MESSAGE
    return 500, message or UNEXPECTED_ERROR_MESSAGE


class AuthService:
    """Service layer for authentication flows"""

    def __init__(self, db: Session, supabase: SupabaseService):
        self.db = db
        self.supabase = supabase
        self.repo = UserProfileRepository()

    def _redirect_for(self, profile: UserProfile) -> str:
        return get_redirect_path(profile.user_type, profile.onboarding_completed, profile.onboarding_step)

    def sign_up(self, data: SignUpRequest) -> dict:
        logger.info(f"📥 Sign-up for {data.email} as {data.user_type}")
        try:
            response = self.supabase.sign_up(
                data.email,
                data.password,
                metadata={
                    "first_name": data.first_name,
                    "last_name": data.last_name,
                    "user_type": data.user_type,
                },
                redirect_to=auth_callback_url(),
            )
        except SupabaseNotConfiguredError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except Exception as e:
            logger.error(f"❌ Sign-up failed for {data.email}: {e}")
            raise HTTPException(status_code=400, detail=str(e)) from e

        user = getattr(response, "user", None)
        if not user:
            raise HTTPException(status_code=400, detail="Failed to create user account")

        is_expert = data.user_type == "expert"
        try:
            profile = self.repo.get_by_id(self.db, user.id)
            if not profile:
                profile = self.repo.create(
                    self.db,
                    user.id,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email,
                    user_type=data.user_type,
                    onboarding_completed=not is_expert,
                    onboarding_step=PROFILE_STEP if is_expert else None,
                )
        except Exception as e:
            # The profile row is recreated from token metadata on first authenticated request
            self.db.rollback()
            logger.error(f"❌ Profile creation failed for user {user.id}: {e}")

        requires_confirmation = not getattr(user, "email_confirmed_at", None)
        if requires_confirmation:
            redirect_to = confirm_email_path(data.email, data.user_type)
            message = "Account created. Please check your email to confirm your address."
        else:
            redirect_to = get_redirect_path(data.user_type, not is_expert, PROFILE_STEP if is_expert else None)
            message = "Account created successfully"

        logger.info(f"✅ Sign-up successful for user {user.id}")
        return {
            "success": True,
            "user_id": user.id,
            "requires_email_confirmation": requires_confirmation,
            "redirect_to": redirect_to,
            "message": message,
        }

    def sign_in(self, data: SignInRequest) -> dict:
        try:
            response = self.supabase.sign_in(data.email, data.password)
        except SupabaseNotConfiguredError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except Exception as e:
            message = str(e)
            logger.warning(f"⚠️ Sign-in failed for {data.email}: {message}")
            if message == "Invalid login credentials":
                raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS_MESSAGE) from e
            if message == "Email not confirmed":
                raise HTTPException(status_code=403, detail=EMAIL_NOT_CONFIRMED_MESSAGE) from e
            raise HTTPException(status_code=401, detail=message or UNEXPECTED_ERROR_MESSAGE) from e

        user = getattr(response, "user", None)
        if not user:
            raise HTTPException(status_code=401, detail="Sign in failed. Please try again.")

        profile = self.repo.get_by_id(self.db, user.id)
        session = getattr(response, "session", None)

        if not getattr(user, "email_confirmed_at", None):
            user_type = profile.user_type if profile else "client"
            return {
                "success": True,
                "user_id": user.id,
                "requires_email_confirmation": True,
                "redirect_to": confirm_email_path(data.email, user_type),
            }

        redirect_to = self._redirect_for(profile) if profile else "/"
        logger.info(f"✅ Sign-in successful for user {user.id}, redirecting to {redirect_to}")
        return {
            "success": True,
            "user_id": user.id,
            "access_token": session.access_token if session else None,
            "refresh_token": session.refresh_token if session else None,
            "expires_in": session.expires_in if session else None,
            "redirect_to": redirect_to,
        }

    def resend_confirmation(self, email) -> dict:
        if not email:
            raise HTTPException(status_code=400, detail="Email address is required")
        if not isinstance(email, str) or not is_valid_email(email):
            raise HTTPException(status_code=400, detail="Please provide a valid email address")

        try:
            self.supabase.resend_confirmation(email.strip(), redirect_to=auth_callback_url())
        except SupabaseNotConfiguredError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except Exception as e:
            status_code, message = classify_resend_error(e)
            logger.error(f"❌ Failed to resend confirmation email to {email}: {e}")
            raise HTTPException(status_code=status_code, detail=message) from e

        logger.info(f"✅ Confirmation email resent to {email}")
        return {
            "success": True,
            "message": "Confirmation email sent successfully. Please check your inbox.",
        }

    def confirm_email(self, token_hash: str, otp_type: str) -> dict:
        try:
            response = self.supabase.verify_email(token_hash, otp_type)
        except SupabaseNotConfiguredError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except Exception as e:
            logger.error(f"❌ Email confirmation failed: {e}")
            raise HTTPException(
                status_code=400, detail="Email confirmation failed. Please try again."
            ) from e

        user = getattr(response, "user", None)
        if not user:
            raise HTTPException(status_code=400, detail="Authentication failed. Please try signing in again.")
        if not getattr(user, "email_confirmed_at", None):
            raise HTTPException(
                status_code=400, detail="Email confirmation incomplete. Please check your email again."
            )

        profile = self.repo.get_by_id(self.db, user.id)
        redirect_to = self._redirect_for(profile) if profile else "/"
        logger.info(f"✅ Email confirmed for user {user.id}")
        return {
            "success": True,
            "message": "Email confirmed successfully! Redirecting...",
            "redirect_to": redirect_to,
        }

    def confirmation_status(self, profile: UserProfile) -> dict:
        """Polled by the confirm-email page every few seconds"""
        try:
            auth_user = self.supabase.get_user(profile.id)
        except Exception as e:
            logger.error(f"❌ Could not load auth user {profile.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to check email confirmation status") from e

        email_confirmed = bool(auth_user and getattr(auth_user, "email_confirmed_at", None))
        return {
            "user_id": profile.id,
            "email": profile.email or getattr(auth_user, "email", None),
            "user_type": profile.user_type,
            "email_confirmed": email_confirmed,
            "needs_email_confirmation": not email_confirmed,
            "onboarding_step": profile.onboarding_step,
            "onboarding_completed": profile.onboarding_completed,
            "redirect_to": self._redirect_for(profile),
        }
