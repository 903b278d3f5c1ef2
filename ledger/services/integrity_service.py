from typing import Iterable, List, Tuple

from ledger.common.exceptions import ErrorKind
from ledger.logger_config import logger
from ledger.schemas.transaction import TransactionRecord


def find_orphans(records: Iterable[TransactionRecord]) -> List[TransactionRecord]:
    """Children whose parentDocumentId points at a record that no longer exists."""
    records = list(records)
    known_ids = {record.id for record in records}
    orphans = [
        record for record in records
        if record.parent_document_id and record.parent_document_id not in known_ids
    ]
    for orphan in orphans:
        logger.warning(
            f"{ErrorKind.ORPHANED_CHILD.value}: {orphan.document_number} ({orphan.id}) "
            f"references missing parent {orphan.parent_document_id}"
        )
    return orphans


def repair_orphans(records: Iterable[TransactionRecord]) -> Tuple[List[TransactionRecord], List[str]]:
    """
    Drop every orphaned child and keep everything else untouched.

    Returns (kept records, removed ids).
    """
    records = list(records)
    orphan_ids = {orphan.id for orphan in find_orphans(records)}
    kept = [record for record in records if record.id not in orphan_ids]
    removed = [record.id for record in records if record.id in orphan_ids]
    return kept, removed
