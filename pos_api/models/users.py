# pos_api/models/users.py

import enum

from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.sql import func

from pos_api.database import Base, generate_id


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CASHIER = "CASHIER"


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)

    # Admins see every user's records, cashiers only their own
    role = Column(
        Enum(UserRole, name="user_role"),
        default=UserRole.CASHIER,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
