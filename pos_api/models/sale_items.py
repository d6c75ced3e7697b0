# models/sale_items.py

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, ForeignKey, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pos_api.database import Base, generate_id


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(String(32), primary_key=True, default=generate_id)

    sale_id = Column(String(32), ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(String(32), ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    # Unit price at the time of sale, independent of later catalog changes
    price = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_item_quantity_positive"),
        CheckConstraint("price > 0", name="ck_sale_item_price_positive"),
    )
