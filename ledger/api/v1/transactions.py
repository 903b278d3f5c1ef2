from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ledger.core.dependencies import get_ledger_service
from ledger.logger_config import logger
from ledger.schemas.posting import BatchPostingRequest, PostingRequest, PostingResponse
from ledger.schemas.reference import DeleteResponse
from ledger.schemas.report import SubdocumentTotals
from ledger.schemas.transaction import TransactionListResponse, TransactionRecord, TransactionType
from ledger.services.ledger_service import LedgerService
from ledger.utils.filteration import day_bounds

router = APIRouter()


@router.post("", response_model=PostingResponse, status_code=status.HTTP_201_CREATED)
def post_transaction(
    request: PostingRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Post one user action.
    Cash and goods movements are stored as a main document with two legs.
    """
    records = service.post(request)
    return PostingResponse(message=f"Document {records[0].document_number} posted", records=records)


@router.post("/batch", response_model=PostingResponse, status_code=status.HTTP_201_CREATED)
def post_transaction_batch(
    batch: BatchPostingRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """Commit pending line items of one customer as a single document."""
    records = service.post_batch(batch)
    return PostingResponse(message=f"Document {records[0].document_number} posted", records=records)


@router.get("", response_model=TransactionListResponse)
def get_transactions(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    type: Optional[TransactionType] = Query(None),
    customer_id: Optional[str] = Query(None),
    product_type_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: LedgerService = Depends(get_ledger_service)
):
    """Top-level documents, newest first. A document matches when it or any of its children does."""
    start, end = day_bounds(start_date, end_date)
    documents, total = service.list_documents(
        skip=skip,
        limit=limit,
        search=search,
        transaction_type=type,
        customer_id=customer_id,
        product_type_id=product_type_id,
        start_date=start,
        end_date=end,
    )
    return TransactionListResponse(total=total, transactions=documents)


@router.get("/{document_id}", response_model=TransactionRecord)
def get_transaction(
    document_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    document = service.get_document(document_id)
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return document


@router.get("/{document_id}/subdocuments", response_model=TransactionListResponse)
def get_subdocuments(
    document_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    children = service.subdocuments(document_id)
    if children is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return TransactionListResponse(total=len(children), transactions=children)


@router.get("/{document_id}/totals", response_model=SubdocumentTotals)
def get_subdocument_totals(
    document_id: str,
    base_unit: Optional[str] = Query(None),
    service: LedgerService = Depends(get_ledger_service)
):
    """Goods and money totals of a main document's children."""
    totals = service.subdocument_totals(document_id, base_unit)
    if totals is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document has no subdocuments"
        )
    return totals


@router.put("/{document_id}", response_model=PostingResponse)
def update_transaction(
    document_id: str,
    request: PostingRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Rewrite a document from a new request.
    Ids, document numbers and creation times are kept.
    """
    records = service.edit(document_id, request)
    if records is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return PostingResponse(message=f"Document {records[0].document_number} updated", records=records)


@router.delete("/{document_id}", response_model=DeleteResponse)
def delete_transaction(
    document_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    """Delete a document together with its children and linked partner."""
    if not service.delete(document_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    logger.info(f"Document {document_id} deleted through the API")
    return DeleteResponse(message="Document deleted successfully")
