import re
from typing import Iterable, Optional, Tuple

from ledger.schemas.transaction import TransactionRecord


SEQUENCE_WIDTH = 4
_NUMBER_PATTERN = re.compile(r"^(\d{4})-(\d+)$")


def parse_document_number(number: Optional[str]) -> Optional[Tuple[int, int]]:
    """Split `{year}-{seq}` into its parts; child numbers and free text give None."""
    if not number:
        return None
    match = _NUMBER_PATTERN.match(number.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def format_document_number(year: int, sequence: int) -> str:
    return f"{year}-{str(sequence).zfill(SEQUENCE_WIDTH)}"


def child_document_number(parent_number: str, child_index: int) -> str:
    """Children are numbered from 1 under their parent: `2024-0007-1`, `2024-0007-2`."""
    return f"{parent_number}-{child_index}"


def next_document_number(records: Iterable[TransactionRecord], year: int) -> str:
    """
    Next `{year}-{seq}` for a main or standalone document.

    Scans every record without a parent whose number belongs to `year` and
    takes the highest sequence + 1. This is a full rescan on every call.
    """
    highest = 0
    for record in records:
        if record.parent_document_id:
            continue
        parsed = parse_document_number(record.document_number)
        if parsed and parsed[0] == year and parsed[1] > highest:
            highest = parsed[1]
    return format_document_number(year, highest + 1)
