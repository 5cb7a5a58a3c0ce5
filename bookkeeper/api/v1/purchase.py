"""
Purchase routes: stock bought from vendors. Creating or updating a purchase
also sets the vendor's outstanding credit.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.core.dependencies import get_db, get_current_active_user, require_reauth
from bookkeeper.models.user import User
from bookkeeper.services import purchase_service
from bookkeeper.schemas.auth import DeleteResponse, ReauthRequest
from bookkeeper.schemas.vendor import (
    PurchaseCreate,
    PurchaseListResponse,
    PurchaseResponse,
    PurchaseUpdate,
)
from bookkeeper.logger_config import logger


router = APIRouter()


@router.get("", response_model=PurchaseListResponse)
def get_purchases(
    vendor_id: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        purchases, total, total_amount = purchase_service.get_all_purchases(
            db, current_user.id, vendor_id=vendor_id, skip=skip, limit=limit
        )
        return PurchaseListResponse(
            total=total,
            total_amount=total_amount,
            purchases=[PurchaseResponse.model_validate(p) for p in purchases],
        )
    except Exception as e:
        logger.error(f"Error fetching purchases: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch purchases"
        )


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(
    purchase_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    purchase = purchase_service.get_purchase_by_id(db, purchase_id, current_user.id)
    if not purchase:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase not found")
    return PurchaseResponse.model_validate(purchase)


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    purchase_data: PurchaseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        purchase = purchase_service.create_purchase(
            db,
            owner_id=current_user.id,
            item=purchase_data.item,
            vendor_id=purchase_data.vendor_id,
            vendor_name=purchase_data.vendor_name,
            quantity=purchase_data.quantity,
            unit=purchase_data.unit,
            price_per_unit=purchase_data.price_per_unit,
            total_price=purchase_data.total_price,
            amount_paid=purchase_data.amount_paid,
            updated_credit=purchase_data.updated_credit,
            purchase_date=purchase_data.date,
        )
        return PurchaseResponse.model_validate(purchase)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating purchase: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create purchase"
        )


@router.put("/{purchase_id}", response_model=PurchaseResponse)
def update_purchase(
    purchase_id: str,
    purchase_data: PurchaseUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        purchase = purchase_service.update_purchase(
            db, current_user.id, purchase_id, **purchase_data.model_dump()
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not purchase:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase not found")
    return PurchaseResponse.model_validate(purchase)


@router.delete("/{purchase_id}", response_model=DeleteResponse)
def delete_purchase(
    purchase_id: str,
    credentials: Optional[ReauthRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a purchase. The body must carry mobile and password.
    """
    require_reauth(db, credentials)
    try:
        deleted = purchase_service.delete_purchase(db, current_user.id, purchase_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase not found")
    return DeleteResponse(message="Purchase removed")
