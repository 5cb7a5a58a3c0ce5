from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.core.dependencies import get_db, get_current_active_user
from bookkeeper.models.user import User
from bookkeeper.services import sale_service
from bookkeeper.schemas.auth import DeleteResponse
from bookkeeper.schemas.customer import CustomerResponse
from bookkeeper.schemas.sale import (
    SaleCreate,
    SaleListResponse,
    SaleRecordedResponse,
    SaleResponse,
    SaleSummaryResponse,
    SaleUpdate,
)
from bookkeeper.utils.datetimes import total_pages
from bookkeeper.logger_config import logger

router = APIRouter()


def _filters(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    sale_type: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    customer_name: Optional[str] = Query(None),
) -> dict:
    return {
        "from_date": from_date,
        "to_date": to_date,
        "sale_type": sale_type,
        "payment_method": payment_method,
        "customer_id": customer_id,
        "customer_name": customer_name,
    }


@router.post("", response_model=SaleRecordedResponse, status_code=status.HTTP_201_CREATED)
def record_sale(
    sale_data: SaleCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Record a sale, embed it on the customer and update their credit and last purchase.
    """
    try:
        sale, customer = sale_service.record_sale(
            db,
            customer_id=sale_data.customer_id,
            products=sale_data.products,
            total_price=sale_data.total_price,
            amount_received=sale_data.amount_received,
            sale_type=sale_data.sale_type,
            payment_method=sale_data.payment_method,
            sale_date=sale_data.date,
            updated_credit=sale_data.updated_credit,
            last_purchase=sale_data.last_purchase,
        )
        return SaleRecordedResponse(
            message="Sale recorded successfully",
            sale=SaleResponse.model_validate(sale),
            customer=CustomerResponse.model_validate(customer) if customer else None,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error recording sale: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record sale"
        )


@router.get("", response_model=SaleListResponse)
def get_sales(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    filters: dict = Depends(_filters),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Sales newest first, filtered by date range, type, payment method or customer.
    """
    try:
        sales, total = sale_service.get_all_sales(db, page=page, limit=limit, **filters)
        return SaleListResponse(
            total=total,
            page=page,
            total_pages=total_pages(total, limit),
            sales=[SaleResponse.model_validate(s) for s in sales],
        )
    except Exception as e:
        logger.error(f"Error fetching sales: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch sales"
        )


@router.get("/summary", response_model=SaleSummaryResponse)
def get_sales_summary(
    filters: dict = Depends(_filters),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Totals overall and grouped by payment method and sale type."""
    try:
        return SaleSummaryResponse(**sale_service.get_sales_summary(db, **filters))
    except Exception as e:
        logger.error(f"Error building sales summary: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch sales summary"
        )


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    sale = sale_service.get_sale_by_id(db, sale_id)
    if not sale:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return SaleResponse.model_validate(sale)


@router.put("/{sale_id}", response_model=SaleResponse)
def update_sale(
    sale_id: str,
    sale_data: SaleUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a sale; the customer's embedded copy and credit follow.
    """
    try:
        sale = sale_service.update_sale(
            db,
            sale_id,
            sale_type=sale_data.sale_type,
            products=sale_data.products,
            total_price=sale_data.total_price,
            payment_method=sale_data.payment_method,
            amount_received=sale_data.amount_received,
            sale_date=sale_data.date,
            updated_credit=sale_data.updated_credit,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not sale:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return SaleResponse.model_validate(sale)


@router.delete("/{sale_id}", response_model=DeleteResponse)
def delete_sale(
    sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a sale row. The copy embedded on the customer stays.
    """
    try:
        deleted = sale_service.delete_sale(db, sale_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return DeleteResponse(message="Sale deleted successfully")
