from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from bookkeeper.core.dependencies import get_db, get_current_active_user, require_reauth
from bookkeeper.models.user import User
from bookkeeper.services import vendor_service
from bookkeeper.schemas.auth import DeleteResponse, ReauthRequest
from bookkeeper.schemas.vendor import VendorCreate, VendorListResponse, VendorResponse, VendorUpdate
from bookkeeper.logger_config import logger

router = APIRouter()


@router.get("", response_model=VendorListResponse)
def get_vendors(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        vendors, total = vendor_service.get_all_vendors(db, current_user.id)
        return VendorListResponse(
            total=total,
            vendors=[VendorResponse.model_validate(v) for v in vendors],
        )
    except Exception as e:
        logger.error(f"Error fetching vendors: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch vendors"
        )


@router.get("/{vendor_id}", response_model=VendorResponse)
def get_vendor(
    vendor_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    vendor = vendor_service.get_vendor_by_id(db, vendor_id, current_user.id)
    if not vendor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return VendorResponse.model_validate(vendor)


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
def create_vendor(
    vendor_data: VendorCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        vendor = vendor_service.create_vendor(
            db,
            owner_id=current_user.id,
            name=vendor_data.name,
            contact=vendor_data.contact,
            credit=vendor_data.credit,
            items=vendor_data.items,
        )
        return VendorResponse.model_validate(vendor)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating vendor: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create vendor"
        )


@router.put("/{vendor_id}", response_model=VendorResponse)
def update_vendor(
    vendor_id: str,
    vendor_data: VendorUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        vendor = vendor_service.update_vendor(
            db,
            owner_id=current_user.id,
            vendor_id=vendor_id,
            name=vendor_data.name,
            contact=vendor_data.contact,
            credit=vendor_data.credit,
            items=vendor_data.items,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not vendor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return VendorResponse.model_validate(vendor)


@router.delete("/{vendor_id}", response_model=DeleteResponse)
def delete_vendor(
    vendor_id: str,
    credentials: Optional[ReauthRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a vendor. The body must carry mobile and password.
    """
    require_reauth(db, credentials)
    try:
        deleted = vendor_service.delete_vendor(db, current_user.id, vendor_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return DeleteResponse(message="Vendor removed")
