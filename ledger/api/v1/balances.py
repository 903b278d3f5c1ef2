from typing import Optional

from fastapi import APIRouter, Depends, Query

from ledger.core.dependencies import get_ledger_service
from ledger.schemas.balance import AccountBalances, StatementResponse
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("/{account_id}", response_model=AccountBalances)
def get_balances(
    account_id: str,
    base_unit: Optional[str] = Query(None),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Cash per currency and goods per product type for a customer, a bank
    account, the cash box or the warehouse. An account without records has
    empty balances.
    """
    return service.balances(account_id, base_unit)


@router.get("/{account_id}/statement", response_model=StatementResponse)
def get_statement(
    account_id: str,
    base_unit: Optional[str] = Query(None),
    service: LedgerService = Depends(get_ledger_service)
):
    return service.statement(account_id, base_unit)
