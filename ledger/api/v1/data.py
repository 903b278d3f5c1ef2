from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ledger.core.dependencies import get_ledger_service
from ledger.schemas.reference import LedgerSnapshot
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=LedgerSnapshot)
def export_data(service: LedgerService = Depends(get_ledger_service)):
    """The complete stored snapshot."""
    return service.export_snapshot()


@router.post("", response_model=LedgerSnapshot)
def import_data(
    data: Dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Merge the posted top-level keys into the stored snapshot.
    Keys that are not posted keep their stored value.
    """
    return service.import_snapshot(data)
