import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    MISSING_CUSTOMER = "MissingCustomer"
    AMBIGUOUS_MEASURE = "AmbiguousMeasure"
    CURRENCY_MISMATCH = "CurrencyMismatch"
    UNKNOWN_ACCOUNT = "UnknownAccount"
    NOTHING_TO_POST = "NothingToPost"
    MISSING_PRODUCT_TYPE = "MissingProductType"
    UNSUPPORTED_BATCH_ITEM = "UnsupportedBatchItem"
    INVALID_EDIT = "InvalidEdit"
    ORPHANED_CHILD = "OrphanedChild"


class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class PostingValidationError(LedgerError, ValueError):
    """
    Raised before any record is built when a posting request is rejected.
    The stored ledger is never touched when this is raised.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self):
        return f"<PostingValidationError(kind='{self.kind.value}', message='{self.message}')>"


class MalformedRecordError(LedgerError, ValueError):
    """Stored data that does not decode into valid ledger records."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


class StorageError(LedgerError):
    """The snapshot could not be written."""


class SnapshotImportError(LedgerError, ValueError):
    """An imported snapshot does not decode into valid ledger data. Nothing is saved."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
