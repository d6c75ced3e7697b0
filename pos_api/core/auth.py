# pos_api/core/auth.py

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.models.users import User
from pos_api.core.config import settings
from pos_api.core.jwt import decode_access_token
from pos_api.schemas.auth import Principal

# Header token is optional: the browser front end sends the cookie instead
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def _extract_token(request: Request, header_token: str | None):
    cookie_token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    return cookie_token or header_token


def get_current_user(
    request: Request,
    header_token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    token = _extract_token(request, header_token)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user = db.query(User).filter(User.id == payload["sub"]).first()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    # Role is re-read from the database so a demoted admin loses access
    # without waiting for the token to expire
    return Principal(user_id=user.id, email=user.email, role=user.role)


def get_admin_user(
    current_user: Principal = Depends(get_current_user),
) -> Principal:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
