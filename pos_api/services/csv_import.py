# =========================================================
# CSV BULK IMPORT
#
# The first line of the file is the header; column names match
# the import row schemas. Every row is validated on its own:
# bad rows are reported and skipped, good rows are written
# in a single commit.
#
# Products are matched on SKU and updated in place; unknown
# category names are created for the importing user.
# =========================================================

import csv
import io
import logging

from fastapi import HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pos_api.models.categories import Category
from pos_api.models.products import Product
from pos_api.schemas.auth import Principal
from pos_api.schemas.imports import CategoryImportRow, ProductImportRow

logger = logging.getLogger("app")


def read_csv_rows(upload: UploadFile) -> list[dict]:
    if not (upload.filename or "").lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File must be a CSV",
        )

    try:
        text = upload.file.read().decode("utf-8-sig")
        reader = csv.DictReader(io.StringIO(text))

        rows = []
        for row in reader:
            # Blank cells fall back to the schema defaults
            cleaned = {
                key.strip(): value.strip()
                for key, value in row.items()
                if isinstance(key, str) and isinstance(value, str) and value.strip()
            }
            if cleaned:
                rows.append(cleaned)

    except (UnicodeDecodeError, csv.Error):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is not a readable UTF-8 CSV",
        )

    if not rows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid records found in CSV",
        )

    return rows


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


def _result(rows: list[dict], success: int, errors: list[str]) -> dict:
    return {
        "summary": {
            "total": len(rows),
            "success": success,
            "errors": len(errors),
        },
        "errors": errors,
    }


def _find_or_create_category(db: Session, principal: Principal, name: str) -> Category:
    category = (
        db.query(Category)
        .filter(Category.user_id == principal.user_id, Category.name == name)
        .first()
    )

    if not category:
        category = Category(name=name, user_id=principal.user_id)
        db.add(category)
        db.flush()

    return category


# =========================================================
# PRODUCTS
# =========================================================
def import_products(db: Session, principal: Principal, rows: list[dict]) -> dict:
    success = 0
    errors = []

    try:
        for row_number, row in enumerate(rows, start=1):
            try:
                data = ProductImportRow.model_validate(row)
            except ValidationError as exc:
                errors.append(f"Row {row_number}: {_describe(exc)}")
                continue

            product = db.query(Product).filter(Product.sku == data.sku).first()

            if product and not principal.is_admin and product.user_id != principal.user_id:
                errors.append(f"Row {row_number}: SKU {data.sku} is already in use")
                continue

            category = _find_or_create_category(db, principal, data.category)
            fields = data.model_dump(exclude={"category"})

            if product:
                for field, value in fields.items():
                    setattr(product, field, value)
            else:
                product = Product(**fields, user_id=principal.user_id)
                db.add(product)

            product.category_id = category.id
            db.flush()
            success += 1

        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Product import failed for user %s", principal.user_id)
        raise HTTPException(status_code=500, detail="Failed to import products")

    logger.info(
        "Imported %d/%d products for user %s",
        success,
        len(rows),
        principal.user_id,
    )

    return _result(rows, success, errors)


# =========================================================
# CATEGORIES
# =========================================================
def import_categories(db: Session, principal: Principal, rows: list[dict]) -> dict:
    success = 0
    errors = []

    try:
        for row_number, row in enumerate(rows, start=1):
            try:
                data = CategoryImportRow.model_validate(row)
            except ValidationError as exc:
                errors.append(f"Row {row_number}: {_describe(exc)}")
                continue

            # Existing names are left as they are and still count
            _find_or_create_category(db, principal, data.name)
            success += 1

        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Category import failed for user %s", principal.user_id)
        raise HTTPException(status_code=500, detail="Failed to import categories")

    logger.info(
        "Imported %d/%d categories for user %s",
        success,
        len(rows),
        principal.user_id,
    )

    return _result(rows, success, errors)
