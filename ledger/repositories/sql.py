import time
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from ledger.common.exceptions import StorageError
from ledger.core.database import Base
from ledger.logger_config import logger
from ledger.models import (
    BankAccount,
    Currency,
    Customer,
    CustomerGroup,
    LedgerSettingsRow,
    ProductType,
    Transaction,
)
from ledger.repositories.base import LedgerRepository, validate_snapshot
from ledger.schemas.reference import LedgerSnapshot


# snapshot key -> ORM model
TABLES = {
    "customer_groups": CustomerGroup,
    "customers": Customer,
    "product_types": ProductType,
    "currencies": Currency,
    "bank_accounts": BankAccount,
    "transactions": Transaction,
}


def _row_to_dict(row) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


class SqlRepository(LedgerRepository):
    """
    The ledger in relational tables. A save replaces the content of every
    table inside a single transaction, so the stored data always matches one
    complete snapshot.
    """

    def __init__(self, session_factory, create_tables: bool = False):
        self.session_factory = session_factory
        if create_tables:
            session = session_factory()
            try:
                Base.metadata.create_all(bind=session.get_bind())
            finally:
                session.close()

    def load_all(self) -> LedgerSnapshot:
        session = self.session_factory()
        try:
            data: Dict[str, Any] = {}
            for key, model in TABLES.items():
                data[key] = [_row_to_dict(row) for row in session.query(model).all()]

            settings_row = session.get(LedgerSettingsRow, 1)
            if settings_row:
                data["settings"] = {
                    "base_currency_id": settings_row.base_currency_id,
                    "base_weight_unit": settings_row.base_weight_unit,
                    "company_info": settings_row.company_info,
                }
                data["last_updated"] = settings_row.last_updated
        except SQLAlchemyError as e:
            logger.exception("Error loading ledger tables")
            raise StorageError(f"Failed to load ledger: {e}") from e
        finally:
            session.close()

        return validate_snapshot(data)

    def save_all(self, snapshot: LedgerSnapshot) -> None:
        snapshot.last_updated = int(time.time() * 1000)
        session = self.session_factory()
        try:
            for model in TABLES.values():
                session.query(model).delete()
            session.query(LedgerSettingsRow).delete()

            for key, model in TABLES.items():
                items: List = getattr(snapshot, key)
                session.add_all([
                    model(**{name: _enum_value(value) for name, value in item.model_dump().items()})
                    for item in items
                ])

            session.add(LedgerSettingsRow(
                id=1,
                base_currency_id=snapshot.settings.base_currency_id,
                base_weight_unit=snapshot.settings.base_weight_unit,
                company_info=snapshot.settings.company_info,
                last_updated=snapshot.last_updated,
            ))
            session.commit()
            logger.debug(f"Saved {len(snapshot.transactions)} transaction(s) to the database")
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Error saving ledger tables")
            raise StorageError(f"Failed to save ledger: {e}") from e
        finally:
            session.close()
