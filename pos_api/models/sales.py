# models/sales.py

import enum

from sqlalchemy import CheckConstraint, Column, Index, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pos_api.database import Base, generate_id


class PaymentType(str, enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    MOBILE_PAY = "MOBILE_PAY"


class Sale(Base):
    __tablename__ = "sales"

    id = Column(String(32), primary_key=True, default=generate_id)

    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    customer_id = Column(String(32), ForeignKey("customers.id"), nullable=True, index=True)

    total = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    payment_type = Column(
        Enum(PaymentType, name="payment_type"),
        nullable=False,
        default=PaymentType.CASH,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
    )
    customer = relationship("Customer")
    user = relationship("User")

    # Composite index for owner and date filtering
    __table_args__ = (
        Index("ix_sales_user_created", "user_id", "created_at"),
        CheckConstraint("total >= 0", name="ck_sale_total_non_negative"),
        CheckConstraint("discount >= 0", name="ck_sale_discount_non_negative"),
    )
