from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from bookkeeper.core.dependencies import get_db, get_current_active_user
from bookkeeper.models.user import User
from bookkeeper.services import product_service
from bookkeeper.schemas.product import (
    PriceHistoryResponse,
    PriceUpdateRequest,
    PriceUpdateResponse,
    ProductResponse,
)
from bookkeeper.logger_config import logger

router = APIRouter()


@router.post("/update-price", response_model=PriceUpdateResponse)
def update_product_price(
    price_data: PriceUpdateRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Change a product's prices and record the change in its price history.
    """
    try:
        result = product_service.update_price(
            db,
            product_id=price_data.product_id,
            new_price_per_pack=price_data.new_price_per_pack,
            new_price_per_kg=price_data.new_price_per_kg,
            reason=price_data.reason,
            updated_by_id=current_user.id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating product price: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    product, history = result
    return PriceUpdateResponse(
        message="Product price updated successfully",
        product=ProductResponse.model_validate(product),
        price_history=PriceHistoryResponse.model_validate(history),
    )


@router.get("/{product_id}", response_model=List[PriceHistoryResponse])
def get_price_history(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Latest 50 price changes of a product, newest first."""
    try:
        history = product_service.get_price_history(db, product_id)
        return [PriceHistoryResponse.model_validate(h) for h in history]
    except Exception as e:
        logger.error(f"Error fetching price history: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )
