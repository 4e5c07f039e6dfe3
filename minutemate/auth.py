import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .models import UserProfile

logger = logging.getLogger(__name__)

security = HTTPBearer()


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token.
    Supabase signs session JWTs with the project's HS256 JWT secret.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    if len(token.split(".")) != 3:
        logger.error("❌ Invalid token format: wrong number of parts")
        raise HTTPException(status_code=401, detail="Invalid token format")

    try:
        payload = jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        logger.warning("⚠️ Token expired")
        raise HTTPException(status_code=401, detail="Token expired") from e
    except JWTError as e:
        logger.error(f"❌ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid authentication token") from e

    if not payload.get("sub"):
        logger.error("❌ Token missing subject claim")
        raise HTTPException(status_code=401, detail="Invalid token payload")

    logger.debug(f"✅ Token verified for user {payload['sub']}")
    return payload


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> UserProfile:
    """Resolve the bearer token to a user profile, creating the row on first sight"""
    payload = verify_supabase_token(credentials.credentials)
    user_id = payload["sub"]

    user = db.query(UserProfile).filter(UserProfile.id == user_id).first()
    if user:
        return user

    # Profile insert during sign-up can fail after the auth user was created
    metadata = payload.get("user_metadata") or {}
    user_type = metadata.get("user_type", "client")
    logger.info(f"📥 Creating missing profile for user {user_id} ({user_type})")
    user = UserProfile(
        id=user_id,
        email=payload.get("email"),
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
        user_type=user_type,
        onboarding_completed=user_type == "client",
        onboarding_step=1 if user_type == "expert" else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def verify_user_access(user_id: str, current_user: UserProfile) -> None:
    """Requests may only name the authenticated user"""
    if str(user_id) != str(current_user.id):
        logger.warning(f"⚠️ User {current_user.id} attempted to access data of {user_id}")
        raise HTTPException(status_code=403, detail="You can only access your own data")


async def get_current_expert(current_user: UserProfile = Depends(get_current_user)) -> UserProfile:
    if current_user.user_type != "expert":
        raise HTTPException(status_code=403, detail="Only experts can access this resource")
    return current_user
