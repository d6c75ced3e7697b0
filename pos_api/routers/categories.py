# pos_api/routers/categories.py

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.core.auth import get_current_user
from pos_api.models.categories import Category
from pos_api.models.products import Product
from pos_api.schemas.auth import Principal
from pos_api.schemas.category import CategoryCreate, CategoryResponse
from pos_api.schemas.imports import ImportResponse
from pos_api.services import csv_import

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


def _categories_with_counts(db: Session, current_user: Principal):
    query = (
        db.query(Category, func.count(Product.id).label("product_count"))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
    )

    if not current_user.is_admin:
        query = query.filter(Category.user_id == current_user.user_id)

    return query


def _to_response(category: Category, product_count: int) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        created_at=category.created_at,
        product_count=product_count,
    )


def _get_category(db: Session, current_user: Principal, category_id: str):
    row = (
        _categories_with_counts(db, current_user)
        .filter(Category.id == category_id)
        .first()
    )

    if not row:
        raise HTTPException(status_code=404, detail="Category not found")

    return row


def _ensure_name_available(db: Session, user_id: str, name: str):
    existing_category = (
        db.query(Category)
        .filter(Category.user_id == user_id, Category.name == name)
        .first()
    )
    if existing_category:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category with this name already exists",
        )


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    rows = _categories_with_counts(db, current_user).order_by(Category.name).all()

    return [_to_response(category, product_count) for category, product_count in rows]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    _ensure_name_available(db, current_user.user_id, category_data.name)

    category = Category(name=category_data.name, user_id=current_user.user_id)

    db.add(category)
    db.commit()
    db.refresh(category)

    return category


@router.post("/import", response_model=ImportResponse)
def import_categories(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    rows = csv_import.read_csv_rows(file)
    return csv_import.import_categories(db, current_user, rows)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    category, product_count = _get_category(db, current_user, category_id)
    return _to_response(category, product_count)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    category, product_count = _get_category(db, current_user, category_id)

    if category_data.name != category.name:
        # Names are unique per owner, not per caller
        _ensure_name_available(db, category.user_id, category_data.name)

    category.name = category_data.name

    db.commit()
    db.refresh(category)

    return _to_response(category, product_count)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    category, product_count = _get_category(db, current_user, category_id)

    if product_count:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete category with existing products",
        )

    db.delete(category)
    db.commit()

    return None
