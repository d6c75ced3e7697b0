import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.models.users import User
from pos_api.schemas.auth import LoginRequest, LoginResponse, Principal
from pos_api.core.auth import get_current_user
from pos_api.core.hashing import verify_password
from pos_api.core.jwt import create_access_token
from pos_api.core.rate_limiter import limiter
from pos_api.core.config import settings

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger("app")


# ---------------- LOGIN (COOKIE + TOKEN) ----------------
@router.post("/login", response_model=LoginResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == credentials.email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login attempt for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = create_access_token(user.id, user.email, user.role.value)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    logger.info("User %s logged in", user.id)

    return {
        "message": "Login successful",
        "access_token": token,
        "token_type": "bearer",
        "user": user,
    }


# ---------------- LOGOUT ----------------
@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"message": "Logged out successfully"}


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=Principal)
def me(current_user: Principal = Depends(get_current_user)):
    return current_user
