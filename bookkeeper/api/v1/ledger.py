"""
Routers for the four ledger kinds (savings, income, payables, money lent).

Each kind gets a `<kind>-types` router and a `<kind>-entries` router with the
same shape; build_type_router / build_entry_router bind them to a LedgerKind.
"""
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from bookkeeper.common.exceptions import InsufficientBalanceError, NotFoundError
from bookkeeper.core.dependencies import get_db, get_current_active_user
from bookkeeper.models.ledger import LedgerKind
from bookkeeper.models.user import User
from bookkeeper.services import ledger_service
from bookkeeper.schemas.auth import DeleteResponse
from bookkeeper.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryListResponse,
    LedgerEntryResponse,
    LedgerEntryUpdate,
    LedgerTypeCreate,
    LedgerTypeDetailResponse,
    LedgerTypeListResponse,
    LedgerTypeResponse,
    LedgerTypeUpdate,
)
from bookkeeper.logger_config import logger


def insufficient_balance(e: InsufficientBalanceError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "message": str(e),
            "code": e.code,
            "available": str(e.available),
            "requested": str(e.requested),
        },
    )


def build_type_router(kind: LedgerKind) -> APIRouter:
    router = APIRouter()
    label = ledger_service.KIND_LABELS[kind]

    @router.get("", response_model=LedgerTypeListResponse)
    def list_types(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        """All types of this ledger with their entries and totals."""
        try:
            types, grand_total = ledger_service.get_all_types(db, kind, current_user.id)
            return LedgerTypeListResponse(
                total=len(types),
                total_amount=grand_total,
                types=[LedgerTypeDetailResponse.model_validate(t) for t in types],
            )
        except Exception as e:
            logger.error(f"Error fetching {kind.value} types: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch {label.lower()} types"
            )

    @router.post("", response_model=LedgerTypeResponse, status_code=status.HTTP_201_CREATED)
    def create_type(
        type_data: LedgerTypeCreate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        try:
            ledger_type = ledger_service.create_type(db, kind, current_user.id, type_data.name)
            logger.info(f"{label} type {ledger_type.id} created by {current_user.user_id}")
            return LedgerTypeResponse.model_validate(ledger_type)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except Exception as e:
            logger.error(f"Error creating {kind.value} type: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create {label.lower()} type"
            )

    @router.put("/{type_id}", response_model=LedgerTypeResponse)
    def rename_type(
        type_id: str,
        type_data: LedgerTypeUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        try:
            ledger_type = ledger_service.rename_type(db, kind, current_user.id, type_id, type_data.name)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not ledger_type:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} type not found")
        return LedgerTypeResponse.model_validate(ledger_type)

    @router.delete("/{type_id}", response_model=DeleteResponse)
    def delete_type(
        type_id: str,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        """Delete the type and every entry in it."""
        try:
            deleted = ledger_service.delete_type(db, kind, current_user.id, type_id)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} type not found")
        return DeleteResponse(message=f"{label} type and its entries deleted successfully")

    return router


def build_entry_router(kind: LedgerKind) -> APIRouter:
    router = APIRouter()
    label = ledger_service.KIND_LABELS[kind]

    @router.get("", response_model=LedgerEntryListResponse)
    def list_entries(
        type_id: Optional[str] = Query(None),
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        """Entries newest first, each with its type name."""
        try:
            rows, total, total_amount = ledger_service.get_all_entries(
                db, kind, current_user.id,
                skip=skip, limit=limit, type_id=type_id,
                start_date=start_date, end_date=end_date,
            )
            return LedgerEntryListResponse(
                total=total,
                total_amount=total_amount,
                entries=[LedgerEntryResponse.model_validate(r) for r in rows],
            )
        except Exception as e:
            logger.error(f"Error fetching {kind.value} entries: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch {label.lower()} entries"
            )

    @router.post("", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
    def create_entry(
        entry_data: LedgerEntryCreate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        try:
            entry = ledger_service.create_entry(
                db, kind, current_user.id,
                type_id=entry_data.type_id,
                amount=entry_data.amount,
                entry_date=entry_data.date,
                is_from_savings=entry_data.is_from_savings,
                savings_type_id=entry_data.savings_type_id,
            )
            return LedgerEntryResponse.model_validate(entry)
        except InsufficientBalanceError as e:
            raise insufficient_balance(e)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except Exception as e:
            logger.error(f"Error creating {kind.value} entry: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create {label.lower()} entry"
            )

    @router.put("/{entry_id}", response_model=LedgerEntryResponse)
    def update_entry(
        entry_id: str,
        entry_data: LedgerEntryUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        """Update amount, date or type; both affected type totals are recomputed."""
        try:
            entry = ledger_service.update_entry(
                db, kind, current_user.id, entry_id,
                type_id=entry_data.type_id,
                amount=entry_data.amount,
                entry_date=entry_data.date,
            )
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not entry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} entry not found")
        return LedgerEntryResponse.model_validate(entry)

    @router.delete("/{entry_id}", response_model=DeleteResponse)
    def delete_entry(
        entry_id: str,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
    ):
        try:
            deleted = ledger_service.delete_entry(db, kind, current_user.id, entry_id)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} entry not found")
        return DeleteResponse(message=f"{label} entry deleted successfully")

    return router


LEDGER_PREFIXES = {
    LedgerKind.savings: "savings",
    LedgerKind.income: "income",
    LedgerKind.payable: "payable",
    LedgerKind.money_lent: "money-lent",
}
