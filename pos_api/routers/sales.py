# =========================================================
# SALES ROUTER
#
# - Create: validated cart -> atomic sale + stock decrement
# - Delete: atomic stock restore + line item removal
# - List / get: own sales only, admins see everything
#
# The caller's Principal is resolved once by get_current_user
# and handed to the sale processor explicitly
# =========================================================

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.core.auth import get_current_user
from pos_api.core.rate_limiter import limiter
from pos_api.schemas.auth import Principal
from pos_api.schemas.sale import (
    MessageResponse,
    SaleCreate,
    SaleListResponse,
    SaleResponse,
)
from pos_api.services import sale_processor

router = APIRouter(prefix="/sales", tags=["Sales"])


# =========================================================
# CREATE SALE
# =========================================================
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    return sale_processor.create_sale(db, current_user, sale_data)


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=SaleListResponse)
def list_sales(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    return sale_processor.list_sales(
        db,
        current_user,
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
    )


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    return sale_processor.get_sale(db, current_user, sale_id)


# =========================================================
# DELETE SALE (RESTOCKS PRODUCTS)
# =========================================================
@router.delete("/{sale_id}", response_model=MessageResponse)
def delete_sale(
    sale_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    sale_processor.delete_sale(db, current_user, sale_id)

    return {"message": "Sale deleted successfully"}
