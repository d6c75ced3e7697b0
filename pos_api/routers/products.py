# pos_api/routers/products.py

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from pos_api.database import get_db
from pos_api.core.auth import get_current_user
from pos_api.models.categories import Category
from pos_api.models.products import Product
from pos_api.models.sale_items import SaleItem
from pos_api.schemas.auth import Principal
from pos_api.schemas.imports import ImportResponse
from pos_api.schemas.pagination import paginate
from pos_api.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from pos_api.services import csv_import

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)

# Only these may be cleared by sending null in an update
NULLABLE_FIELDS = {"description", "barcode", "category_id"}


def _get_product(db: Session, current_user: Principal, product_id: str) -> Product:
    query = db.query(Product).filter(Product.id == product_id)

    if not current_user.is_admin:
        query = query.filter(Product.user_id == current_user.user_id)

    product = query.first()

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    return product


def _ensure_category_exists(db: Session, current_user: Principal, category_id: Optional[str]):
    if not category_id:
        return

    query = db.query(Category).filter(Category.id == category_id)
    if not current_user.is_admin:
        query = query.filter(Category.user_id == current_user.user_id)

    if not query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category not found",
        )


def _ensure_sku_available(db: Session, sku: str, product_id: Optional[str] = None):
    query = db.query(Product).filter(Product.sku == sku)
    if product_id:
        query = query.filter(Product.id != product_id)

    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product with this SKU already exists",
        )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    _ensure_sku_available(db, product_data.sku)
    _ensure_category_exists(db, current_user, product_data.category_id)

    product = Product(
        **product_data.model_dump(),
        user_id=current_user.user_id,
    )

    db.add(product)
    db.commit()
    db.refresh(product)

    return product


@router.post("/import", response_model=ImportResponse)
def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    rows = csv_import.read_csv_rows(file)
    return csv_import.import_products(db, current_user, rows)


@router.get("", response_model=ProductListResponse)
def list_products(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
    search: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    query = db.query(Product).options(joinedload(Product.category))

    if not current_user.is_admin:
        query = query.filter(Product.user_id == current_user.user_id)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    if category and category != "all":
        query = query.join(Product.category).filter(Category.name == category)

    total = query.count()

    products = (
        query
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "products": products,
        "pagination": paginate(page, limit, total),
    }


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    return _get_product(db, current_user, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    product = _get_product(db, current_user, product_id)

    changes = {
        field: value
        for field, value in product_data.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }

    if changes.get("sku") and changes["sku"] != product.sku:
        _ensure_sku_available(db, changes["sku"], product.id)

    if "category_id" in changes:
        _ensure_category_exists(db, current_user, changes["category_id"])

    for field, value in changes.items():
        setattr(product, field, value)

    db.commit()
    db.refresh(product)

    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    product = _get_product(db, current_user, product_id)

    # Sold products keep their history; they can be restocked to zero instead
    sales_count = (
        db.query(SaleItem)
        .filter(SaleItem.product_id == product.id)
        .count()
    )
    if sales_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete product that has been sold",
        )

    db.delete(product)
    db.commit()

    return None
