from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ledger.core.dependencies import get_ledger_service
from ledger.schemas.report import CashInventory, PeriodSummary
from ledger.services.ledger_service import LedgerService
from ledger.utils.filteration import day_bounds

router = APIRouter()


@router.get("/cash-inventory", response_model=CashInventory)
def get_cash_inventory(
    base_unit: Optional[str] = Query(None),
    service: LedgerService = Depends(get_ledger_service)
):
    """Customer credit and debt per currency plus every treasury balance."""
    return service.cash_inventory(base_unit)


@router.get("/period-summary", response_model=PeriodSummary)
def get_period_summary(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    base_unit: Optional[str] = Query(None),
    service: LedgerService = Depends(get_ledger_service)
):
    """Money and goods moved between two dates, both days included."""
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )
    start, end = day_bounds(start_date, end_date)
    return service.period_summary(start, end, base_unit)
