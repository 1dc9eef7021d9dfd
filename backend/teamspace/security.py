"""
Teamspace Backend — Password Hashing and Bearer Tokens
========================================================

What:  bcrypt password hashing (passlib) and HS256 JWT issue/verify (python-jose).
Who:   UserService (register, login, change password, sample teammates) and
       the `get_current_user` dependency.

Token payload:
    {"sub": "<user_id>", "user_id": <int>, "email": "...", "role": "user"|"admin",
     "exp": <unix time>}
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from teamspace.config import settings
from teamspace.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """False for a wrong password and for a stored value that is not a bcrypt hash."""
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(user_id: int, email: str, role: str) -> str:
    """Signs a token valid for JWT_EXPIRE_HOURS."""
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    payload = {
        "sub": str(user_id),
        "user_id": user_id,
        "email": email,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifies signature and expiry.

    Raises:
        PermissionDeniedError: bad signature, malformed token, or expired (→ 403)
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected bearer token: %s", str(e))
        raise PermissionDeniedError(message="Invalid or expired token")
