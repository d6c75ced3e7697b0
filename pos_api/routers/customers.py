# pos_api/routers/customers.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.core.auth import get_current_user
from pos_api.models.customers import Customer
from pos_api.models.sales import Sale
from pos_api.schemas.auth import Principal
from pos_api.schemas.pagination import paginate
from pos_api.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
)

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
)


def _get_customer(db: Session, current_user: Principal, customer_id: str) -> Customer:
    query = db.query(Customer).filter(Customer.id == customer_id)

    if not current_user.is_admin:
        query = query.filter(Customer.user_id == current_user.user_id)

    customer = query.first()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    return customer


def _ensure_phone_available(db: Session, user_id: str, phone: str, customer_id: Optional[str] = None):
    query = db.query(Customer).filter(
        Customer.user_id == user_id,
        Customer.phone == phone,
    )
    if customer_id:
        query = query.filter(Customer.id != customer_id)

    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer with this phone number already exists",
        )


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    _ensure_phone_available(db, current_user.user_id, customer_data.phone)

    customer = Customer(
        **customer_data.model_dump(),
        user_id=current_user.user_id,
    )

    db.add(customer)
    db.commit()
    db.refresh(customer)

    return customer


@router.get("", response_model=CustomerListResponse)
def list_customers(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    query = db.query(Customer)

    if not current_user.is_admin:
        query = query.filter(Customer.user_id == current_user.user_id)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.email.ilike(pattern),
            )
        )

    total = query.count()

    customers = (
        query
        .order_by(Customer.created_at.desc(), Customer.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "customers": customers,
        "pagination": paginate(page, limit, total),
    }


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    return _get_customer(db, current_user, customer_id)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    customer = _get_customer(db, current_user, customer_id)

    if customer_data.phone != customer.phone:
        _ensure_phone_available(db, customer.user_id, customer_data.phone, customer.id)

    for field, value in customer_data.model_dump().items():
        setattr(customer, field, value)

    db.commit()
    db.refresh(customer)

    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    customer = _get_customer(db, current_user, customer_id)

    if db.query(Sale).filter(Sale.customer_id == customer.id).count():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete customer with existing sales",
        )

    db.delete(customer)
    db.commit()

    return None
