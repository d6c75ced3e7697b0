# pos_api/models/categories.py

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pos_api.database import Base, generate_id


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)

    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    products = relationship("Product", back_populates="category")

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_user_category_name"),
    )
