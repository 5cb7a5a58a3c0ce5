from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from bookkeeper.core.cache import cache
from bookkeeper.core.dependencies import get_db, get_current_active_user, require_reauth
from bookkeeper.models.user import User
from bookkeeper.services import product_service
from bookkeeper.schemas.auth import DeleteResponse, ReauthRequest
from bookkeeper.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from bookkeeper.logger_config import logger

router = APIRouter()


@router.get("", response_model=ProductListResponse)
def get_products(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    All products. Served from the response cache when it is enabled.
    """
    def compute():
        products, total = product_service.get_all_products(db)
        return ProductListResponse(
            total=total,
            products=[ProductResponse.model_validate(p) for p in products],
        )

    try:
        return cache.get_or_compute(product_service.PRODUCTS_LIST_KEY, compute)
    except Exception as e:
        logger.error(f"Error fetching products: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch products"
        )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        product = product_service.create_product(
            db,
            product_name=product_data.product_name,
            price_per_pack=product_data.price_per_pack,
            kgs_per_pack=product_data.kgs_per_pack,
            price_per_kg=product_data.price_per_kg,
        )
        logger.info(f"Product {product.id} created by {current_user.user_id}")
        return ProductResponse.model_validate(product)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating product: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add product"
        )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = product_service.get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        product = product_service.update_product(db, product_id, **product_data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", response_model=DeleteResponse)
def delete_product(
    product_id: str,
    credentials: Optional[ReauthRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a product. The body must carry mobile and password.
    """
    require_reauth(db, credentials)
    try:
        deleted = product_service.delete_product(db, product_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    logger.info(f"Product {product_id} deleted by {current_user.user_id}")
    return DeleteResponse(message="Product deleted successfully")
