import json
import os
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from ledger.common.exceptions import MalformedRecordError, StorageError
from ledger.core.database import build_engine
from ledger.models import Transaction
from ledger.repositories import json_file
from ledger.repositories.json_file import JsonFileRepository
from ledger.repositories.sql import SqlRepository
from ledger.schemas.posting import PostingRequest
from ledger.schemas.reference import LedgerSnapshot
from ledger.schemas.transaction import LegRole, TransactionType as T
from ledger.services.posting_service import post_action


@pytest.fixture
def posted_snapshot(snapshot, now, id_factory):
    for request in (
        PostingRequest(type=T.cash_in, customer_id="C1", amount=Decimal("500.25")),
        PostingRequest(type=T.product_in, customer_id="C2", product_type_id="P1", weight=Decimal("2.5"), weight_unit="kg"),
        PostingRequest(type=T.payable, customer_id="C1", amount=Decimal("300")),
    ):
        snapshot.transactions = snapshot.transactions + post_action(snapshot, request, now, id_factory)
    return snapshot


class TestJsonFileRepository:

    def test_missing_file_loads_as_empty_snapshot(self, tmp_path):
        repo = JsonFileRepository(str(tmp_path / "absent.json"))

        snapshot = repo.load_all()

        assert snapshot == LedgerSnapshot()

    def test_round_trip_keeps_records_and_camel_case_keys(self, tmp_path, posted_snapshot):
        path = tmp_path / "nested" / "app-data.json"
        repo = JsonFileRepository(str(path))

        repo.save_all(posted_snapshot)
        loaded = repo.load_all()

        assert [r.model_dump() for r in loaded.transactions] == [r.model_dump() for r in posted_snapshot.transactions]
        assert loaded.settings.base_currency_id == "IQD"
        assert loaded.last_updated is not None
        assert not os.path.exists(str(path) + ".tmp")

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert set(raw) >= {
            "customerGroups", "customers", "productTypes", "currencies", "bankAccounts", "transactions", "settings",
        }
        assert "documentNumber" in raw["transactions"][0]
        assert "isMainDocument" in raw["transactions"][0]
        assert raw["settings"]["baseWeightUnit"] == "ton"

    def test_unknown_transaction_type_is_rejected_on_load(self, tmp_path, posted_snapshot):
        path = tmp_path / "app-data.json"
        repo = JsonFileRepository(str(path))
        repo.save_all(posted_snapshot)
        raw = json.loads(path.read_text(encoding="utf-8"))
        raw["transactions"][1]["type"] = "transfer"
        path.write_text(json.dumps(raw), encoding="utf-8")

        with pytest.raises(MalformedRecordError) as exc_info:
            repo.load_all()

        assert exc_info.value.record_id == raw["transactions"][1]["id"]

    def test_invalid_json_is_rejected(self, tmp_path):
        path = tmp_path / "app-data.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(MalformedRecordError):
            JsonFileRepository(str(path)).load_all()

    def test_extra_top_level_keys_are_ignored(self, tmp_path):
        path = tmp_path / "app-data.json"
        path.write_text(json.dumps({"bulkTransactions": [], "foreignTransactions": []}), encoding="utf-8")

        assert JsonFileRepository(str(path)).load_all().transactions == []

    def test_write_is_retried_then_reported(self, tmp_path, monkeypatch, snapshot):
        attempts = []

        def failing_replace(src, dst):
            attempts.append(dst)
            raise OSError("file is locked")

        monkeypatch.setattr(json_file.os, "replace", failing_replace)
        monkeypatch.setattr(json_file.time, "sleep", lambda seconds: None)
        path = tmp_path / "app-data.json"

        with pytest.raises(StorageError):
            JsonFileRepository(str(path)).save_all(snapshot)

        assert len(attempts) == json_file.WRITE_ATTEMPTS
        assert not path.exists()
        assert not os.path.exists(str(path) + ".tmp")


class TestSqlRepository:

    @pytest.fixture
    def session_factory(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
        yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
        engine.dispose()

    def test_empty_database_loads_as_empty_snapshot(self, session_factory):
        repo = SqlRepository(session_factory, create_tables=True)

        snapshot = repo.load_all()

        assert snapshot.transactions == []
        assert snapshot.customers == []

    def test_round_trip_keeps_every_table(self, session_factory, posted_snapshot):
        repo = SqlRepository(session_factory, create_tables=True)

        repo.save_all(posted_snapshot)
        loaded = repo.load_all()

        assert {c.id for c in loaded.customers} == {"C1", "C2", "CP"}
        assert {(g.id, g.is_protected) for g in loaded.customer_groups} == {("G0", True), ("G1", False)}
        assert loaded.find_customer("C2").group_id == "G1"
        assert loaded.bank_accounts[0].initial_balance == Decimal("1000")
        assert loaded.settings.base_currency_id == "IQD"
        assert loaded.last_updated == posted_snapshot.last_updated

        saved = {r.id: r for r in posted_snapshot.transactions}
        assert len(loaded.transactions) == len(saved)
        for record in loaded.transactions:
            original = saved[record.id]
            assert record.type == original.type
            assert record.role == original.role
            assert record.document_number == original.document_number
            assert record.amount == original.amount
            assert record.weight == original.weight
            assert record.is_main_document == original.is_main_document
            assert record.parent_document_id == original.parent_document_id
            assert record.date == original.date

    def test_save_replaces_previous_content(self, session_factory, posted_snapshot):
        repo = SqlRepository(session_factory, create_tables=True)
        repo.save_all(posted_snapshot)

        posted_snapshot.transactions = [r for r in posted_snapshot.transactions if r.role != LegRole.counterparty_leg]
        repo.save_all(posted_snapshot)

        loaded = repo.load_all()
        assert all(r.role != LegRole.counterparty_leg for r in loaded.transactions)
        assert len(loaded.transactions) == len(posted_snapshot.transactions)

    def test_unknown_transaction_type_is_rejected_on_load(self, session_factory, posted_snapshot, now):
        repo = SqlRepository(session_factory, create_tables=True)
        repo.save_all(posted_snapshot)
        session = session_factory()
        session.add(Transaction(
            id="bad", document_number="2024-0099", type="transfer", customer_id="C1",
            amount=Decimal("1"), description="", date=now, created_at=now, is_main_document=False,
        ))
        session.commit()
        session.close()

        with pytest.raises(MalformedRecordError) as exc_info:
            repo.load_all()

        assert exc_info.value.record_id == "bad"
