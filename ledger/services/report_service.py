from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ledger.schemas.reference import LedgerSnapshot
from ledger.schemas.report import (
    CashInventory,
    CurrencyPosition,
    GoodsTotals,
    PeriodSummary,
    SubdocumentTotals,
    TreasuryBalance,
)
from ledger.schemas.transaction import CASH_BOX_ID, LegRole, TransactionRecord, TransactionType as T
from ledger.services.balance_service import ZERO, currency_of, derive_balances, measure_in_base_unit
from ledger.utils.units import DEFAULT_WEIGHT_UNIT, convert_weight


# ==================== SUBDOCUMENT TOTALS ====================

GOODS_BUCKETS = {
    "goods_in": (T.product_in, T.income),
    "goods_out": (T.product_out, T.expense),
    "goods_credit": (T.product_purchase, T.payable),
    "goods_debit": (T.product_sale, T.receivable),
}

MONEY_BUCKETS = {
    "money_in": (T.cash_in, T.income),
    "money_out": (T.cash_out, T.expense),
    "money_credit": (T.product_purchase, T.payable),
    "money_debit": (T.product_sale, T.receivable),
}


def _add_goods(target: GoodsTotals, record: TransactionRecord, base_unit: str) -> None:
    if record.weight:
        target.weight += abs(convert_weight(record.weight, record.weight_unit or DEFAULT_WEIGHT_UNIT, base_unit))
    if record.quantity:
        target.quantity += abs(record.quantity)


def subdocument_totals(
    records: Iterable[TransactionRecord],
    document_id: str,
    base_unit: str = DEFAULT_WEIGHT_UNIT,
) -> Optional[SubdocumentTotals]:
    """
    Absolute goods and money totals of a main document's children, bucketed
    by type. The counterparty leg of a posting group mirrors the customer leg
    and is not counted again.
    """
    children = [r for r in records if r.parent_document_id == document_id]
    if not children:
        return None

    totals = SubdocumentTotals(document_id=document_id, weight_unit=base_unit)
    for child in children:
        if child.role == LegRole.counterparty_leg:
            continue
        for bucket, types in GOODS_BUCKETS.items():
            if child.type in types and (child.weight or child.quantity):
                _add_goods(getattr(totals, bucket), child, base_unit)
        for bucket, types in MONEY_BUCKETS.items():
            if child.type in types and child.amount:
                money = getattr(totals, bucket)
                currency_id = currency_of(child)
                money[currency_id] = money.get(currency_id, ZERO) + abs(child.amount)
    return totals


# ==================== CASH INVENTORY ====================

def cash_inventory(snapshot: LedgerSnapshot, base_unit: str = DEFAULT_WEIGHT_UNIT) -> CashInventory:
    """
    What customers owe us and what we owe them, per currency, plus the
    balance of every treasury account.
    """
    records = snapshot.transactions
    positions: Dict[str, CurrencyPosition] = {}

    for customer in snapshot.customers:
        if customer.is_protected:
            continue
        balances = derive_balances(records, customer.id, base_unit)
        for currency_id, balance in balances.cash_balances.items():
            position = positions.setdefault(currency_id, CurrencyPosition(currency_id=currency_id))
            if balance > 0:
                position.total_cash_credit += balance
            elif balance < 0:
                position.total_cash_debt += abs(balance)

    treasury: List[TreasuryBalance] = []
    cash_box = derive_balances(records, CASH_BOX_ID, base_unit).cash_balances
    if not cash_box and snapshot.settings.base_currency_id:
        cash_box = {snapshot.settings.base_currency_id: ZERO}
    for currency_id, balance in sorted(cash_box.items()):
        treasury.append(TreasuryBalance(
            account_id=CASH_BOX_ID, label="Cash Box", currency_id=currency_id, balance=balance
        ))

    for bank_account in snapshot.bank_accounts:
        derived = derive_balances(records, bank_account.id, base_unit).cash_balances
        treasury.append(TreasuryBalance(
            account_id=bank_account.id,
            label=bank_account.label,
            currency_id=bank_account.currency_id,
            balance=bank_account.initial_balance + derived.get(bank_account.currency_id, ZERO),
        ))

    return CashInventory(
        positions=[positions[key] for key in sorted(positions)],
        treasury=treasury,
    )


# ==================== PERIOD SUMMARY ====================

def period_summary(
    records: Iterable[TransactionRecord],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    base_unit: str = DEFAULT_WEIGHT_UNIT,
) -> PeriodSummary:
    """
    Money and goods that moved in an inclusive date range.
    Each posting counts once: main documents and counterparty legs are skipped.
    """
    cash_in: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    cash_out: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    goods_in: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    goods_out: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    count = 0

    for record in records:
        if record.is_main_document or record.role == LegRole.counterparty_leg:
            continue
        if start_date and record.date < start_date:
            continue
        if end_date and record.date > end_date:
            continue
        count += 1

        amount = abs(record.amount or ZERO)
        if record.type in (T.cash_in, T.income):
            cash_in[currency_of(record)] += amount
        elif record.type in (T.cash_out, T.expense):
            cash_out[currency_of(record)] += amount

        if record.product_type_id:
            measure = measure_in_base_unit(record, base_unit)
            if record.type in (T.product_in, T.product_purchase):
                goods_in[record.product_type_id] += measure
            elif record.type in (T.product_out, T.product_sale):
                goods_out[record.product_type_id] += measure

    currencies = set(cash_in) | set(cash_out)
    products = set(goods_in) | set(goods_out)
    return PeriodSummary(
        start_date=start_date,
        end_date=end_date,
        weight_unit=base_unit,
        cash_in=dict(cash_in),
        cash_out=dict(cash_out),
        net_cash={c: cash_in.get(c, ZERO) - cash_out.get(c, ZERO) for c in currencies},
        goods_in=dict(goods_in),
        goods_out=dict(goods_out),
        net_goods={p: goods_in.get(p, ZERO) - goods_out.get(p, ZERO) for p in products},
        record_count=count,
    )
