"""
Password hashing and JWT issuance.
Tokens carry the user id as subject; roles are re-read from the database on
every request so a role change takes effect without re-login.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from hrportal.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in the database
        logger.warning("Password verification failed: unrecognised hash format")
        return False


def _encode(data: Dict[str, Any], expires_delta: timedelta, token_type: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **data,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Unique per token so rotated refresh tokens never collide
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        data,
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
        "access",
    )


def create_refresh_token(data: Dict[str, Any]) -> str:
    return _encode(data, timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Returns the payload, {"error": "TOKEN_EXPIRED"} for expired tokens,
    or None for anything that fails verification.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except jwt.PyJWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None
