from abc import ABC, abstractmethod
from typing import Any, Dict

from pydantic import ValidationError

from ledger.common.exceptions import MalformedRecordError
from ledger.schemas.reference import LedgerSnapshot


class LedgerRepository(ABC):
    """Loads and saves the whole ledger snapshot at once."""

    @abstractmethod
    def load_all(self) -> LedgerSnapshot:
        ...

    @abstractmethod
    def save_all(self, snapshot: LedgerSnapshot) -> None:
        ...


def validate_snapshot(data: Dict[str, Any]) -> LedgerSnapshot:
    """
    Decode persisted data into a snapshot.

    Raises:
        MalformedRecordError: naming the offending transaction when there is one
    """
    try:
        return LedgerSnapshot.model_validate(data)
    except ValidationError as e:
        record_id = None
        for error in e.errors():
            loc = error.get("loc", ())
            if len(loc) >= 2 and loc[0] == "transactions" and isinstance(loc[1], int):
                transactions = data.get("transactions") or []
                if loc[1] < len(transactions) and isinstance(transactions[loc[1]], dict):
                    record_id = transactions[loc[1]].get("id")
                break
        raise MalformedRecordError(f"Stored ledger data is invalid: {e}", record_id=record_id) from e
