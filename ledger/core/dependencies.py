from fastapi import Depends

from ledger.core.config import settings
from ledger.core.database import SessionLocal
from ledger.repositories.base import LedgerRepository
from ledger.repositories.json_file import JsonFileRepository
from ledger.repositories.sql import SqlRepository
from ledger.services.ledger_service import LedgerService


def get_repository() -> LedgerRepository:
    """Dependency to get the configured ledger store."""
    if settings.STORAGE_BACKEND == "sql":
        return SqlRepository(SessionLocal)
    return JsonFileRepository(settings.DATA_FILE)


def get_ledger_service(
    repository: LedgerRepository = Depends(get_repository)
) -> LedgerService:
    return LedgerService(repository)
