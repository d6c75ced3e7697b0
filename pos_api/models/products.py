# pos_api/models/products.py

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, ForeignKey, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pos_api.database import Base, generate_id


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    sku = Column(String, unique=True, index=True, nullable=False)
    barcode = Column(String, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    cost = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    category_id = Column(String(32), ForeignKey("categories.id"), nullable=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    category = relationship("Category", back_populates="products")

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_product_price_positive"),
        CheckConstraint("cost > 0", name="ck_product_cost_positive"),
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )
