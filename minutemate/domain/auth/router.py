"""Auth router - sign-up, sign-in and email confirmation endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from ...rate_limiter import create_rate_limiter
from ...services.supabase_service import SupabaseService, get_supabase_service
from .schemas import (
    ConfirmationStatusResponse,
    EmailConfirmRequest,
    EmailConfirmResponse,
    MessageResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
)
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

sign_up_limiter = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="sign_up")
sign_in_limiter = create_rate_limiter(limit=10, window_seconds=300, key_prefix="sign_in")
resend_limiter = create_rate_limiter(limit=3, window_seconds=300, key_prefix="resend_confirmation")


def get_auth_service(
    db: Session = Depends(get_db),
    supabase: SupabaseService = Depends(get_supabase_service),
) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db, supabase)


@router.post("/sign-up", response_model=SignUpResponse)
async def sign_up(
    data: SignUpRequest,
    _: None = Depends(sign_up_limiter),
    service: AuthService = Depends(get_auth_service),
):
    return service.sign_up(data)


@router.post("/sign-in", response_model=SignInResponse)
async def sign_in(
    data: SignInRequest,
    _: None = Depends(sign_in_limiter),
    service: AuthService = Depends(get_auth_service),
):
    return service.sign_in(data)


@router.post("/resend-confirmation", response_model=MessageResponse)
async def resend_confirmation(
    request: Request,
    _: None = Depends(resend_limiter),
    service: AuthService = Depends(get_auth_service),
):
    """Resend the sign-up confirmation email"""
    try:
        body = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid request format") from e

    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request format")

    return service.resend_confirmation(body.get("email"))


@router.post("/confirm", response_model=EmailConfirmResponse)
async def confirm_email(data: EmailConfirmRequest, service: AuthService = Depends(get_auth_service)):
    return service.confirm_email(data.token_hash, data.type)


@router.get("/me", response_model=ConfirmationStatusResponse)
async def get_me(
    current_user: UserProfile = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return service.confirmation_status(current_user)
