import random
from datetime import datetime
from decimal import Decimal

from ledger.schemas.transaction import CASH_BOX_ID, WAREHOUSE_ID, LegRole, TransactionType as T
from ledger.services.balance_service import derive_balances, running_statement


class TestCustomerBalances:

    def test_product_purchase_moves_cash_down_and_goods_up(self, make_record):
        records = [make_record(
            type=T.product_purchase, amount=Decimal("2000"), weight=Decimal("10"),
            weight_unit="ton", unit_price=Decimal("200"), product_type_id="P1",
        )]

        balances = derive_balances(records, "C1")

        assert balances.cash_balances == {"IQD": Decimal("-2000")}
        assert balances.product_balances == {"P1": Decimal("10")}

    def test_product_sale_moves_cash_up_and_goods_down(self, make_record):
        records = [make_record(
            type=T.product_sale, amount=Decimal("500"), quantity=5, product_type_id="P2",
        )]

        balances = derive_balances(records, "C1")

        assert balances.cash_balances == {"IQD": Decimal("500")}
        assert balances.product_balances == {"P2": Decimal("-5")}

    def test_receivable_and_payable_use_their_stored_sign(self, make_record):
        records = [
            make_record(type=T.receivable, amount=Decimal("100")),
            make_record(type=T.payable, amount=Decimal("-300"), weight=Decimal("-2"), product_type_id="P1"),
        ]

        balances = derive_balances(records, "C1")

        assert balances.cash_balances == {"IQD": Decimal("-200")}
        assert balances.product_balances == {"P1": Decimal("-2")}

    def test_main_documents_are_not_counted(self, make_record):
        records = [make_record(
            type=T.cash_in, amount=Decimal("-500"), account_id=CASH_BOX_ID, is_main_document=True,
        )]

        balances = derive_balances(records, "C1")

        assert balances.cash_balances == {}
        assert balances.product_balances == {}

    def test_unknown_account_has_empty_balances(self, make_record):
        records = [make_record(type=T.product_sale, amount=Decimal("10"))]

        balances = derive_balances(records, "nobody")

        assert balances.account_id == "nobody"
        assert balances.cash_balances == {}
        assert balances.product_balances == {}

    def test_balances_are_kept_per_currency(self, make_record):
        records = [
            make_record(type=T.product_sale, amount=Decimal("100"), currency_id="IQD"),
            make_record(type=T.product_sale, amount=Decimal("7"), currency_id="USD"),
            make_record(type=T.product_sale, amount=Decimal("3"), currency_id=None),
        ]

        balances = derive_balances(records, "C1")

        assert balances.cash_balances == {
            "IQD": Decimal("100"),
            "USD": Decimal("7"),
            "default": Decimal("3"),
        }


class TestTreasuryBalances:

    def test_expense_reduces_the_paying_account_only(self, make_record):
        records = [make_record(type=T.expense, amount=Decimal("50"), account_id=CASH_BOX_ID)]

        assert derive_balances(records, CASH_BOX_ID).cash_balances == {"IQD": Decimal("-50")}
        assert derive_balances(records, "C1").cash_balances == {}

    def test_income_increases_a_bank_account(self, make_record):
        records = [make_record(type=T.income, amount=Decimal("70"), account_id="B1", currency_id="USD")]

        assert derive_balances(records, "B1").cash_balances == {"USD": Decimal("70")}

    def test_legs_only_touch_the_account_they_are_posted_against(self, make_record):
        records = [
            make_record(
                type=T.cash_in, amount=Decimal("-500"), account_id=CASH_BOX_ID,
                parent_document_id="m1", role=LegRole.customer_leg,
            ),
            make_record(
                type=T.cash_in, amount=Decimal("500"), customer_id=CASH_BOX_ID, account_id=CASH_BOX_ID,
                parent_document_id="m1", role=LegRole.counterparty_leg,
            ),
        ]

        assert derive_balances(records, "C1").cash_balances == {"IQD": Decimal("-500")}
        assert derive_balances(records, CASH_BOX_ID).cash_balances == {"IQD": Decimal("500")}


class TestWarehouseAndUnits:

    def test_warehouse_tracks_physical_stock(self, make_record):
        records = [
            make_record(
                type=T.product_in, customer_id=WAREHOUSE_ID, account_id=WAREHOUSE_ID,
                weight=Decimal("10"), product_type_id="P1", role=LegRole.counterparty_leg,
                parent_document_id="m1",
            ),
            make_record(
                type=T.product_out, customer_id=WAREHOUSE_ID, account_id=WAREHOUSE_ID,
                weight=Decimal("-4"), product_type_id="P1", role=LegRole.counterparty_leg,
                parent_document_id="m2",
            ),
        ]

        balances = derive_balances(records, WAREHOUSE_ID)

        assert balances.product_balances == {"P1": Decimal("6")}
        assert balances.cash_balances == {}

    def test_mixed_units_are_normalized_to_the_base_unit(self, make_record):
        records = [
            make_record(type=T.product_purchase, weight=Decimal("500"), weight_unit="kg", product_type_id="P1"),
            make_record(type=T.product_purchase, weight=Decimal("1"), weight_unit="ton", product_type_id="P1"),
        ]

        assert derive_balances(records, "C1", "ton").product_balances == {"P1": Decimal("1.5")}
        assert derive_balances(records, "C1", "kg").product_balances == {"P1": Decimal("1500")}

    def test_missing_unit_counts_as_tons(self, make_record):
        records = [make_record(type=T.product_purchase, weight=Decimal("2"), product_type_id="P1")]

        assert derive_balances(records, "C1", "kg").product_balances == {"P1": Decimal("2000")}


class TestFoldProperties:

    def _records(self, make_record):
        return [
            make_record(type=T.product_purchase, amount=Decimal("2000"), weight=Decimal("10"),
                        product_type_id="P1", date=datetime(2024, 3, 2)),
            make_record(type=T.product_sale, amount=Decimal("300"), weight=Decimal("1"),
                        product_type_id="P1", date=datetime(2024, 3, 1)),
            make_record(type=T.cash_out, amount=Decimal("150"), account_id=CASH_BOX_ID,
                        date=datetime(2024, 3, 3)),
            make_record(type=T.receivable, amount=Decimal("25"), currency_id="USD",
                        date=datetime(2024, 2, 28)),
        ]

    def test_folding_twice_gives_the_same_result(self, make_record):
        records = self._records(make_record)

        assert derive_balances(records, "C1") == derive_balances(records, "C1")

    def test_input_order_does_not_change_the_result(self, make_record):
        records = self._records(make_record)
        expected = derive_balances(records, "C1")

        for seed in range(5):
            shuffled = list(records)
            random.Random(seed).shuffle(shuffled)
            assert derive_balances(shuffled, "C1") == expected


class TestRunningStatement:

    def test_lines_follow_date_order_and_close_on_the_derived_balance(self, make_record):
        records = [
            make_record(type=T.product_purchase, amount=Decimal("2000"), weight=Decimal("10"),
                        product_type_id="P1", date=datetime(2024, 3, 2)),
            make_record(type=T.cash_in, amount=Decimal("100"), account_id=CASH_BOX_ID,
                        date=datetime(2024, 3, 1)),
        ]

        lines, closing = running_statement(records, "C1")

        assert [line.record.type for line in lines] == [T.cash_in, T.product_purchase]
        assert [line.cash_balance for line in lines] == [Decimal("-100"), Decimal("-2100")]
        assert lines[1].goods_delta == Decimal("10")
        assert lines[1].product_balance == Decimal("10")
        assert lines[0].product_balance is None
        assert closing == derive_balances(records, "C1")
