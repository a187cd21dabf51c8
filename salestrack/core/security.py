from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from salestrack.core.config import settings


def create_access_token(subject: Any, extra_claims: Optional[Dict[str, Any]] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Issue an access token (used by the identity bridge, scripts and tests)."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(subject),
        "type": "access",
        "exp": int(expire.timestamp()),
        "iat": int(datetime.utcnow().timestamp()),
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate access token"""
    payload = verify_token(token)
    if payload is None:
        return None

    # Check token type
    if payload.get("type") != "access":
        return None

    return payload
