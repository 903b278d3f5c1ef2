"""
Pytest fixtures for the ledger test suite.

Provides:
- a reference snapshot with a protected and a regular customer group, two
  customers, a protected customer, two currencies, one USD bank account
  and two product types
- a JSON file repository in a temporary directory seeded with that snapshot
- a LedgerService with a fixed clock and deterministic ids
- a FastAPI TestClient wired to the same repository
"""

from datetime import datetime
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient

from ledger.core.dependencies import get_ledger_service, get_repository
from ledger.main import app
from ledger.repositories.json_file import JsonFileRepository
from ledger.schemas.reference import (
    BankAccount,
    Currency,
    Customer,
    CustomerGroup,
    LedgerSettings,
    LedgerSnapshot,
    MeasurementType,
    ProductType,
)
from ledger.schemas.transaction import TransactionRecord, TransactionType
from ledger.services.ledger_service import LedgerService


FIXED_NOW = datetime(2024, 5, 10, 12, 0, 0)
CREATED = datetime(2024, 1, 1, 9, 0, 0)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def id_factory():
    counter = count(1)
    return lambda: f"rec-{next(counter)}"


@pytest.fixture
def snapshot():
    return LedgerSnapshot(
        customer_groups=[
            CustomerGroup(id="G0", name="System Accounts", is_protected=True, created_at=CREATED),
            CustomerGroup(id="G1", name="Wholesale", created_at=CREATED),
        ],
        customers=[
            Customer(id="C1", name="Ali Hassan", created_at=CREATED),
            Customer(id="C2", name="Sara Karim", group_id="G1", created_at=CREATED),
            Customer(id="CP", name="Profit Account", group_id="G0", is_protected=True, created_at=CREATED),
        ],
        product_types=[
            ProductType(id="P1", name="Flour", measurement_type=MeasurementType.weight, created_at=CREATED),
            ProductType(id="P2", name="Sacks", measurement_type=MeasurementType.quantity, created_at=CREATED),
        ],
        currencies=[
            Currency(id="IQD", name="Iraqi Dinar", symbol="IQD", is_base=True, created_at=CREATED),
            Currency(id="USD", name="US Dollar", symbol="$", created_at=CREATED),
        ],
        bank_accounts=[
            BankAccount(
                id="B1",
                bank_name="Rafidain",
                account_number="001",
                initial_balance=Decimal("1000"),
                currency_id="USD",
                created_at=CREATED,
            ),
        ],
        settings=LedgerSettings(base_currency_id="IQD", base_weight_unit="ton"),
    )


@pytest.fixture
def make_record():
    """Build a stored record with sensible defaults for fold and filter tests."""
    counter = count(1)

    def _make(**fields) -> TransactionRecord:
        number = next(counter)
        defaults = dict(
            id=f"r{number}",
            document_number=f"2024-{number:04}",
            type=TransactionType.expense,
            customer_id="C1",
            currency_id="IQD",
            date=datetime(2024, 3, 1),
            created_at=datetime(2024, 3, 1),
        )
        defaults.update(fields)
        return TransactionRecord(**defaults)

    return _make


@pytest.fixture
def repository(tmp_path, snapshot):
    repo = JsonFileRepository(str(tmp_path / "ledger" / "app-data.json"))
    repo.save_all(snapshot)
    return repo


@pytest.fixture
def service(repository, id_factory):
    return LedgerService(repository, clock=lambda: FIXED_NOW, id_factory=id_factory)


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_ledger_service] = lambda: LedgerService(repository, clock=lambda: FIXED_NOW)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
