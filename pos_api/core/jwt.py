# pos_api/core/jwt.py

from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

from pos_api.core.config import settings

REQUIRED_CLAIMS = ("sub", "email", "role")


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    claims = {
        "sub": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "exp": expire,
    }

    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Return the claims of a valid access token, or None.

    Expired, tampered, non-access and incomplete tokens are all treated
    the same way so callers only need one failure branch.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None

    if any(not payload.get(claim) for claim in REQUIRED_CLAIMS):
        return None

    return payload
