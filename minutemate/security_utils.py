"""
Security utilities
Token encryption at rest and signed OAuth state values
"""

import base64
import hashlib
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import SECRET_KEY, TOKEN_ENCRYPTION_KEY

logger = logging.getLogger(__name__)

OAUTH_STATE_SALT = "calendly-oauth-state"
OAUTH_STATE_MAX_AGE = 600  # 10 minutes to complete the Calendly consent screen


# ============================================================================
# TOKEN ENCRYPTION
# ============================================================================


def _build_cipher() -> Fernet:
    if TOKEN_ENCRYPTION_KEY:
        return Fernet(TOKEN_ENCRYPTION_KEY.encode())
    # Fernet needs 32 url-safe base64 encoded bytes
    derived = base64.urlsafe_b64encode(hashlib.sha256(SECRET_KEY.encode()).digest())
    return Fernet(derived)


cipher_suite = _build_cipher()


def encrypt_token(token: Optional[str]) -> Optional[str]:
    """Encrypt a token for storage"""
    if not token:
        return token
    return cipher_suite.encrypt(token.encode()).decode()


def decrypt_token(encrypted_token: Optional[str]) -> Optional[str]:
    """Decrypt a stored token"""
    if not encrypted_token:
        return encrypted_token
    try:
        return cipher_suite.decrypt(encrypted_token.encode()).decode()
    except InvalidToken as e:
        logger.error("❌ Stored token could not be decrypted (key rotated?)")
        raise ValueError("Stored token could not be decrypted") from e


# ============================================================================
# SIGNED OAUTH STATE
# ============================================================================


def create_oauth_state(user_id: str) -> str:
    """Sign the user id so the OAuth callback can trust it"""
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    return serializer.dumps({"user_id": user_id}, salt=OAUTH_STATE_SALT)


def verify_oauth_state(state: str, max_age: int = OAUTH_STATE_MAX_AGE) -> Optional[str]:
    """
    Verify a signed OAuth state

    Returns:
        The user id if the state is valid, None if invalid or expired
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    try:
        data = serializer.loads(state, salt=OAUTH_STATE_SALT, max_age=max_age)
    except SignatureExpired:
        logger.warning("⚠️ OAuth state expired")
        return None
    except BadSignature:
        logger.warning("⚠️ Invalid OAuth state signature")
        return None
    return data.get("user_id")
