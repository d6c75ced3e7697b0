# Import every model so Base.metadata knows all tables before create_all

from pos_api.models.users import User, UserRole
from pos_api.models.categories import Category
from pos_api.models.customers import Customer
from pos_api.models.products import Product
from pos_api.models.sales import Sale, PaymentType
from pos_api.models.sale_items import SaleItem

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Customer",
    "Product",
    "Sale",
    "PaymentType",
    "SaleItem",
]
