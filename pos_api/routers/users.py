# pos_api/routers/users.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.core.auth import get_admin_user, get_current_user
from pos_api.core.hashing import hash_password
from pos_api.models.categories import Category
from pos_api.models.customers import Customer
from pos_api.models.products import Product
from pos_api.models.sales import Sale
from pos_api.models.users import User, UserRole
from pos_api.schemas.auth import Principal
from pos_api.schemas.user import (
    PasswordReset,
    PasswordResetResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["Users"])

logger = logging.getLogger("app")

COMMON_PASSWORDS = {
    "password",
    "password123",
    "12345678",
    "qwerty123",
    "admin123",
}


def _ensure_strong_password(password: str):
    if password.lower() in COMMON_PASSWORDS:
        raise HTTPException(
            status_code=400,
            detail="Password is too common. Please choose a stronger password.",
        )


def _ensure_email_available(db: Session, email: str, user_id: str | None = None):
    query = db.query(User).filter(User.email == email)
    if user_id:
        query = query.filter(User.id != user_id)

    if query.first():
        raise HTTPException(status_code=409, detail="Email already exists")


def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Unable to %s user", action)
        raise HTTPException(status_code=500, detail=f"Unable to {action} user")


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_admin_user),
):
    return db.query(User).order_by(User.created_at.desc(), User.email).all()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_admin_user),
):
    _ensure_strong_password(user_data.password)
    _ensure_email_available(db, user_data.email)

    user = User(
        email=user_data.email,
        name=user_data.name,
        role=user_data.role,
        password_hash=hash_password(user_data.password),
    )

    db.add(user)
    _commit(db, "create")
    db.refresh(user)

    return user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_admin_user),
):
    return _get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_admin_user),
):
    user = _get_user(db, user_id)
    changes = user_data.model_dump(exclude_unset=True, exclude_none=True)

    if user.id == admin.user_id and changes.get("role", UserRole.ADMIN) != UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="Cannot remove your own admin role")

    if "email" in changes:
        _ensure_email_available(db, changes["email"], user.id)

    if "password" in changes:
        _ensure_strong_password(changes["password"])
        user.password_hash = hash_password(changes.pop("password"))

    for field, value in changes.items():
        setattr(user, field, value)

    _commit(db, "update")
    db.refresh(user)

    logger.info("User %s updated by %s", user.id, admin.user_id)

    return user


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_admin_user),
):
    user = _get_user(db, user_id)

    if user.id == admin.user_id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    # Sales history and catalog rows reference their owner
    for model in (Sale, Product, Customer, Category):
        if db.query(model).filter(model.user_id == user.id).first():
            raise HTTPException(
                status_code=400,
                detail="Cannot delete user with existing records",
            )

    db.delete(user)
    _commit(db, "delete")

    logger.info("User %s deleted by %s", user_id, admin.user_id)

    return {"message": "User deleted successfully"}


@router.post("/{user_id}/reset-password", response_model=PasswordResetResponse)
def reset_password(
    user_id: str,
    reset_data: PasswordReset,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    if current_user.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only reset your own password",
        )

    _ensure_strong_password(reset_data.new_password)

    user = _get_user(db, user_id)
    user.password_hash = hash_password(reset_data.new_password)
    _commit(db, "update")

    logger.info("Password reset for user %s", user.id)

    return {"message": "Password reset successful", "user": user}
