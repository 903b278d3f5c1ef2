from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional, Tuple

from ledger.logger_config import logger
from ledger.schemas.transaction import TransactionRecord, TransactionType


def _matches(
    record: TransactionRecord,
    search: Optional[str],
    transaction_type: Optional[TransactionType],
    customer_id: Optional[str],
    product_type_id: Optional[str],
    start_date: Optional[datetime],
    end_date: Optional[datetime],
) -> bool:
    if search:
        needle = search.lower()
        if needle not in record.document_number.lower() and needle not in (record.description or "").lower():
            return False
    if transaction_type and record.type != transaction_type:
        return False
    if customer_id and record.customer_id != customer_id:
        return False
    if product_type_id and record.product_type_id != product_type_id:
        return False
    if start_date and record.date < start_date:
        return False
    if end_date and record.date > end_date:
        return False
    return True


def filter_documents(
    records: Iterable[TransactionRecord],
    search: Optional[str] = None,
    transaction_type: Optional[TransactionType] = None,
    customer_id: Optional[str] = None,
    product_type_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[TransactionRecord]:
    """
    Top-level documents (no parent) where the document itself or any of its
    children matches every given filter, newest first.
    """
    logger.debug(
        f"Filtering documents: search={search}, type={transaction_type}, customer={customer_id}, "
        f"product_type={product_type_id}, start={start_date}, end={end_date}"
    )
    records = list(records)
    children: Dict[str, List[TransactionRecord]] = {}
    for record in records:
        if record.parent_document_id:
            children.setdefault(record.parent_document_id, []).append(record)

    filters = (search, transaction_type, customer_id, product_type_id, start_date, end_date)
    matched = [
        record for record in records
        if not record.parent_document_id and (
            _matches(record, *filters)
            or any(_matches(child, *filters) for child in children.get(record.id, []))
        )
    ]
    return sorted(matched, key=lambda r: (r.date, r.created_at), reverse=True)


def day_bounds(start: Optional[date], end: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Calendar days to an inclusive datetime range: start of the first day to end of the last."""
    return (
        datetime.combine(start, time.min) if start else None,
        datetime.combine(end, time.max) if end else None,
    )
