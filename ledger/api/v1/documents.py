from fastapi import APIRouter, Depends

from ledger.core.dependencies import get_ledger_service
from ledger.schemas.posting import RepairResponse
from ledger.schemas.transaction import DocumentNumberResponse, TransactionListResponse
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("/next-number", response_model=DocumentNumberResponse)
def get_next_document_number(service: LedgerService = Depends(get_ledger_service)):
    return DocumentNumberResponse(document_number=service.next_document_number())


@router.get("/orphans", response_model=TransactionListResponse)
def get_orphans(service: LedgerService = Depends(get_ledger_service)):
    """Children whose main document no longer exists."""
    orphans = service.find_orphans()
    return TransactionListResponse(total=len(orphans), transactions=orphans)


@router.post("/repair", response_model=RepairResponse)
def repair_orphans(service: LedgerService = Depends(get_ledger_service)):
    removed = service.repair_orphans()
    return RepairResponse(removed=len(removed), removed_ids=removed)
