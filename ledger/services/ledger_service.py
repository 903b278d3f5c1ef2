# ledger/services/ledger_service.py

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic.alias_generators import to_camel

from ledger.common.exceptions import MalformedRecordError, SnapshotImportError
from ledger.core.config import settings
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository, validate_snapshot
from ledger.schemas.balance import AccountBalances, StatementResponse
from ledger.schemas.posting import BatchPostingRequest, PostingRequest
from ledger.schemas.reference import LedgerSnapshot
from ledger.schemas.report import CashInventory, PeriodSummary, SubdocumentTotals
from ledger.schemas.transaction import TransactionRecord, TransactionType
from ledger.services import integrity_service, report_service
from ledger.services.balance_service import derive_balances, running_statement, sort_by_date
from ledger.services.numbering_service import next_document_number
from ledger.services.posting_service import (
    IdFactory,
    delete_document,
    edit_document,
    new_record_id,
    post_action,
    post_batch,
)
from ledger.utils.dates import local_now
from ledger.utils.filteration import filter_documents


Clock = Callable[[], datetime]


class LedgerService:
    """
    Every ledger operation as load, pure core function, save.

    Posting, editing and deleting validate and build the complete new record
    list before anything is written; a rejected request leaves the store as it was.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        clock: Optional[Clock] = None,
        id_factory: IdFactory = new_record_id,
    ):
        self.repository = repository
        self.clock = clock or local_now
        self.id_factory = id_factory

    # ==================== HELPERS ====================

    def _base_unit(self, snapshot: LedgerSnapshot, base_unit: Optional[str] = None) -> str:
        return base_unit or snapshot.settings.base_weight_unit or settings.BASE_WEIGHT_UNIT

    def _document_records(self, records: List[TransactionRecord], document_id: str) -> List[TransactionRecord]:
        target = next((r for r in records if r.id == document_id), None)
        if target is None:
            return []
        return [
            r for r in records
            if r.id == document_id
            or r.parent_document_id == document_id
            or r.id == target.linked_transaction_id
        ]

    # ==================== POSTING ====================

    def post(self, request: PostingRequest) -> List[TransactionRecord]:
        snapshot = self.repository.load_all()
        records = post_action(snapshot, request, self.clock(), self.id_factory)
        snapshot.transactions = snapshot.transactions + records
        self.repository.save_all(snapshot)
        logger.info(f"Posted {request.type.value} as document {records[0].document_number} ({len(records)} record(s))")
        return records

    def post_batch(self, batch: BatchPostingRequest) -> List[TransactionRecord]:
        snapshot = self.repository.load_all()
        records = post_batch(snapshot, batch, self.clock(), self.id_factory)
        snapshot.transactions = snapshot.transactions + records
        self.repository.save_all(snapshot)
        logger.info(f"Committed batch document {records[0].document_number} with {len(records) - 1} item(s)")
        return records

    def edit(self, document_id: str, request: PostingRequest) -> Optional[List[TransactionRecord]]:
        """Returns the rewritten document with its children, or None if it does not exist."""
        snapshot = self.repository.load_all()
        updated = edit_document(snapshot, document_id, request, self.id_factory)
        if updated is None:
            return None
        snapshot.transactions = updated
        self.repository.save_all(snapshot)
        logger.info(f"Edited document {document_id}")
        return self._document_records(updated, document_id)

    def delete(self, document_id: str) -> bool:
        snapshot = self.repository.load_all()
        remaining, removed = delete_document(snapshot.transactions, document_id)
        if not removed:
            return False
        snapshot.transactions = remaining
        self.repository.save_all(snapshot)
        logger.info(f"Deleted document {document_id} and {len(removed) - 1} related record(s)")
        return True

    # ==================== QUERIES ====================

    def list_documents(
        self,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        customer_id: Optional[str] = None,
        product_type_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[TransactionRecord], int]:
        snapshot = self.repository.load_all()
        documents = filter_documents(
            snapshot.transactions,
            search=search,
            transaction_type=transaction_type,
            customer_id=customer_id,
            product_type_id=product_type_id,
            start_date=start_date,
            end_date=end_date,
        )
        return documents[skip:skip + limit], len(documents)

    def get_document(self, document_id: str) -> Optional[TransactionRecord]:
        snapshot = self.repository.load_all()
        return next((r for r in snapshot.transactions if r.id == document_id), None)

    def subdocuments(self, document_id: str) -> Optional[List[TransactionRecord]]:
        snapshot = self.repository.load_all()
        if not any(r.id == document_id for r in snapshot.transactions):
            return None
        children = [r for r in snapshot.transactions if r.parent_document_id == document_id]
        return sorted(children, key=lambda r: (len(r.document_number), r.document_number))

    def next_document_number(self) -> str:
        snapshot = self.repository.load_all()
        return next_document_number(snapshot.transactions, self.clock().year)

    # ==================== BALANCES ====================

    def balances(self, account_id: str, base_unit: Optional[str] = None) -> AccountBalances:
        snapshot = self.repository.load_all()
        return derive_balances(snapshot.transactions, account_id, self._base_unit(snapshot, base_unit))

    def statement(self, account_id: str, base_unit: Optional[str] = None) -> StatementResponse:
        snapshot = self.repository.load_all()
        lines, closing = running_statement(
            snapshot.transactions, account_id, self._base_unit(snapshot, base_unit)
        )
        return StatementResponse(account_id=account_id, lines=lines, closing=closing)

    # ==================== INTEGRITY ====================

    def find_orphans(self) -> List[TransactionRecord]:
        snapshot = self.repository.load_all()
        return sort_by_date(integrity_service.find_orphans(snapshot.transactions))

    def repair_orphans(self) -> List[str]:
        snapshot = self.repository.load_all()
        kept, removed = integrity_service.repair_orphans(snapshot.transactions)
        if removed:
            snapshot.transactions = kept
            self.repository.save_all(snapshot)
            logger.info(f"Removed {len(removed)} orphaned record(s)")
        return removed

    # ==================== REPORTS ====================

    def subdocument_totals(self, document_id: str, base_unit: Optional[str] = None) -> Optional[SubdocumentTotals]:
        snapshot = self.repository.load_all()
        return report_service.subdocument_totals(
            snapshot.transactions, document_id, self._base_unit(snapshot, base_unit)
        )

    def cash_inventory(self, base_unit: Optional[str] = None) -> CashInventory:
        snapshot = self.repository.load_all()
        return report_service.cash_inventory(snapshot, self._base_unit(snapshot, base_unit))

    def period_summary(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        base_unit: Optional[str] = None,
    ) -> PeriodSummary:
        snapshot = self.repository.load_all()
        return report_service.period_summary(
            snapshot.transactions, start_date, end_date, self._base_unit(snapshot, base_unit)
        )

    # ==================== SNAPSHOT ====================

    def export_snapshot(self) -> LedgerSnapshot:
        return self.repository.load_all()

    def import_snapshot(self, data: Dict[str, Any]) -> LedgerSnapshot:
        """Replace the given top-level keys of the stored snapshot, keep the rest."""
        current = self.repository.load_all().model_dump(by_alias=True)
        current.update({to_camel(key) if "_" in key else key: value for key, value in data.items()})
        try:
            snapshot = validate_snapshot(current)
        except MalformedRecordError as e:
            raise SnapshotImportError(f"Imported snapshot is invalid: {e.__cause__}", e.record_id) from e
        self.repository.save_all(snapshot)
        logger.info(f"Imported snapshot keys: {', '.join(sorted(data))}")
        return snapshot
