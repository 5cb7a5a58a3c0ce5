from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from bookkeeper.core.dependencies import get_db, get_current_active_user, require_reauth
from bookkeeper.models.user import User
from bookkeeper.services import customer_service
from bookkeeper.schemas.auth import DeleteResponse, ReauthRequest
from bookkeeper.schemas.customer import (
    CreditAdjustRequest,
    CustomerCreate,
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
    PaymentCreate,
    PaymentListResponse,
    PaymentRecord,
    ReconcileResponse,
)
from bookkeeper.schemas.sale import SaleListResponse, SaleResponse
from bookkeeper.utils.datetimes import total_pages
from bookkeeper.logger_config import logger

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
def get_customers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    sort: Optional[str] = Query(None, description="recent | oldest | credit"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all customers with optional name search and sorting.
    """
    if sort and sort not in customer_service.SORT_OPTIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"sort must be one of {', '.join(customer_service.SORT_OPTIONS)}"
        )
    try:
        customers, total = customer_service.get_all_customers(
            db, skip=skip, limit=limit, search=search, sort=sort
        )
        return CustomerListResponse(
            total=total,
            customers=[CustomerResponse.model_validate(c) for c in customers]
        )
    except Exception as e:
        logger.error(f"Error fetching customers: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch customers"
        )


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_new_customer(
    customer_data: CustomerCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        customer = customer_service.create_customer(
            db,
            name=customer_data.name,
            contact=customer_data.contact,
            credit=customer_data.credit,
        )
        logger.info(f"Customer {customer.id} created by {current_user.user_id}")
        return CustomerResponse.model_validate(customer)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating customer: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add customer"
        )


@router.post("/sale", response_model=CustomerResponse)
def add_to_credit(
    adjust_data: CreditAdjustRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Add an amount to a customer's credit and stamp last_purchase with now.
    """
    try:
        customer = customer_service.adjust_credit(db, adjust_data.customer_id, adjust_data.amount)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerResponse.model_validate(customer)


@router.post("/reconcile-last-purchase", response_model=ReconcileResponse)
def reconcile_last_purchase(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Maintenance: re-derive every customer's last_purchase from their sales.
    """
    try:
        corrected = customer_service.reconcile_all_customers(db)
        return ReconcileResponse(
            message=f"Reconciled last purchase for {corrected} customers",
            corrected=corrected
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    customer = customer_service.get_customer_by_id(db, customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return CustomerDetailResponse.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer_info(
    customer_id: str,
    customer_data: CustomerUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        customer = customer_service.update_customer(
            db,
            customer_id=customer_id,
            name=customer_data.name,
            contact=customer_data.contact,
            credit=customer_data.credit,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerResponse.model_validate(customer)


@router.delete("/{customer_id}", response_model=DeleteResponse)
def delete_customer_by_id(
    customer_id: str,
    credentials: Optional[ReauthRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a customer. The body must carry mobile and password.
    """
    require_reauth(db, credentials)
    try:
        deleted = customer_service.delete_customer(db, customer_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")

    logger.info(f"Customer {customer_id} deleted by {current_user.user_id}")
    return DeleteResponse(message="Customer deleted successfully")


@router.post("/{customer_id}/payments", response_model=CustomerDetailResponse)
def record_customer_payment(
    customer_id: str,
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Record a payment; credit is reduced and never goes below zero.
    """
    try:
        customer = customer_service.record_payment(
            db,
            customer_id=customer_id,
            amount_received=payment_data.amount_received,
            other_amount=payment_data.other_amount,
            description=payment_data.description,
            payment_date=payment_data.date,
            payment_method=payment_data.payment_method,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerDetailResponse.model_validate(customer)


@router.get("/{customer_id}/payments", response_model=PaymentListResponse)
def get_customer_payments(
    customer_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    result = customer_service.get_customer_payments(db, customer_id, page=page, limit=limit)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")

    payments, total = result
    return PaymentListResponse(
        total=total,
        page=page,
        total_pages=total_pages(total, limit),
        payments=[PaymentRecord(**p) for p in payments],
    )


@router.get("/{customer_id}/sales", response_model=SaleListResponse)
def get_customer_sales(
    customer_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    result = customer_service.get_customer_sales(db, customer_id, page=page, limit=limit)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")

    sales, total = result
    return SaleListResponse(
        total=total,
        page=page,
        total_pages=total_pages(total, limit),
        sales=[SaleResponse.model_validate(s) for s in sales],
    )
