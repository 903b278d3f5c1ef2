# ledger/services/balance_service.py

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ledger.schemas.balance import AccountBalances, StatementLine
from ledger.schemas.transaction import (
    WAREHOUSE_ID,
    LegRole,
    TransactionRecord,
    TransactionType as T,
)
from ledger.utils.units import DEFAULT_WEIGHT_UNIT, convert_weight


DEFAULT_CURRENCY = "default"
ZERO = Decimal("0")

# ==================== SIGN TABLES ====================
# Positive on a customer means the customer owes us (debt), negative means we owe them.

# cash effect when the record's customerId is the target account
CUSTOMER_CASH_SIGN = {
    T.product_purchase: -1,
    T.product_sale: 1,
    T.cash_in: -1,
    T.cash_out: 1,
}

# cash effect when the record's accountId is the target (treasury side)
ACCOUNT_CASH_SIGN = {
    T.cash_in: 1,
    T.cash_out: -1,
    T.expense: -1,
    T.income: 1,
}

# goods effect on a customer, product records only
CUSTOMER_GOODS_SIGN = {
    T.product_purchase: 1,
    T.product_sale: -1,
    T.product_in: -1,
    T.product_out: 1,
    T.receivable: 1,
    T.payable: -1,
}

# the warehouse tracks physical stock, independent of customer debt
WAREHOUSE_GOODS_SIGN = {
    T.product_in: 1,
    T.income: 1,
    T.product_out: -1,
    T.expense: -1,
}

# receivable/payable post their stored (already sign-normalized) amount as is
SIGNED_AMOUNT_TYPES = (T.receivable, T.payable)


# ==================== HELPER FUNCTIONS ====================

def sort_by_date(records: Iterable[TransactionRecord]) -> List[TransactionRecord]:
    """Ascending by logical date; creation time and id break ties."""
    return sorted(records, key=lambda r: (r.date, r.created_at, r.id))


def measure_in_base_unit(record: TransactionRecord, base_unit: str) -> Decimal:
    """Unsigned goods measure; weights are normalized to the base unit through grams."""
    if record.weight:
        return abs(convert_weight(record.weight, record.weight_unit or DEFAULT_WEIGHT_UNIT, base_unit))
    if record.quantity:
        return Decimal(abs(record.quantity))
    return ZERO


def currency_of(record: TransactionRecord) -> str:
    return record.currency_id or DEFAULT_CURRENCY


def _customer_side_cash(record: TransactionRecord) -> Decimal:
    if record.type in SIGNED_AMOUNT_TYPES:
        return record.amount or ZERO
    sign = CUSTOMER_CASH_SIGN.get(record.type)
    if sign is None:
        return ZERO
    return sign * abs(record.amount or ZERO)


def _account_side_cash(record: TransactionRecord) -> Decimal:
    sign = ACCOUNT_CASH_SIGN.get(record.type)
    if sign is None:
        return ZERO
    return sign * abs(record.amount or ZERO)


def cash_effect(record: TransactionRecord, account_id: str) -> Decimal:
    """
    Net cash effect of one posted record on one account.

    Legs of a posting group only touch the account they are posted against:
    the customer leg through the customer column of the sign table, the
    counterparty leg through the treasury column. Standalone records affect
    whichever of customerId/accountId matches.
    """
    if record.is_main_document or account_id == WAREHOUSE_ID:
        return ZERO

    if record.role == LegRole.customer_leg:
        return _customer_side_cash(record) if record.customer_id == account_id else ZERO
    if record.role == LegRole.counterparty_leg:
        return _account_side_cash(record) if record.customer_id == account_id else ZERO

    effect = ZERO
    if record.customer_id == account_id:
        effect += _customer_side_cash(record)
    if record.account_id == account_id:
        effect += _account_side_cash(record)
    return effect


def goods_effect(
    record: TransactionRecord,
    account_id: str,
    base_unit: str = DEFAULT_WEIGHT_UNIT,
) -> Decimal:
    """Net goods effect of one posted record on one account, in the base unit."""
    if record.is_main_document or not record.product_type_id:
        return ZERO
    if record.customer_id != account_id:
        return ZERO

    table = WAREHOUSE_GOODS_SIGN if account_id == WAREHOUSE_ID else CUSTOMER_GOODS_SIGN
    sign = table.get(record.type)
    if sign is None:
        return ZERO
    return sign * measure_in_base_unit(record, base_unit)


# ==================== BALANCE DERIVATION ====================

def iter_effects(
    records: Iterable[TransactionRecord],
    account_id: str,
    base_unit: str = DEFAULT_WEIGHT_UNIT,
) -> Iterator[Tuple[TransactionRecord, Decimal, Decimal]]:
    """Yield (record, cash delta, goods delta) for every record touching the account, in date order."""
    for record in sort_by_date(records):
        if record.is_main_document:
            continue
        cash = cash_effect(record, account_id)
        goods = goods_effect(record, account_id, base_unit)
        if cash or goods or record.customer_id == account_id:
            yield record, cash, goods


def derive_balances(
    records: Iterable[TransactionRecord],
    account_id: str,
    base_unit: str = DEFAULT_WEIGHT_UNIT,
) -> AccountBalances:
    """
    Fold the record list into the account's balances.

    Args:
        records: every stored record, in any order
        account_id: a customer, bank account, the cash box or the warehouse
        base_unit: unit product weights are reported in

    Returns:
        AccountBalances with cash per currency and goods per product type.
        Main documents are summaries of their legs and never counted.
    """
    cash_balances: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    product_balances: Dict[str, Decimal] = defaultdict(lambda: ZERO)

    for record, cash, goods in iter_effects(records, account_id, base_unit):
        if cash:
            cash_balances[currency_of(record)] += cash
        if goods:
            product_balances[record.product_type_id] += goods

    return AccountBalances(
        account_id=account_id,
        base_weight_unit=base_unit,
        cash_balances=dict(cash_balances),
        product_balances=dict(product_balances),
    )


def running_statement(
    records: Iterable[TransactionRecord],
    account_id: str,
    base_unit: str = DEFAULT_WEIGHT_UNIT,
) -> Tuple[List[StatementLine], AccountBalances]:
    """Same fold as derive_balances, keeping the running value after every record."""
    cash_balances: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    product_balances: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    lines: List[StatementLine] = []

    for record, cash, goods in iter_effects(records, account_id, base_unit):
        currency_id = currency_of(record)
        if cash:
            cash_balances[currency_id] += cash
        product_balance: Optional[Decimal] = None
        if record.product_type_id and goods:
            product_balances[record.product_type_id] += goods
            product_balance = product_balances[record.product_type_id]
        elif record.product_type_id:
            product_balance = product_balances.get(record.product_type_id, ZERO)

        lines.append(StatementLine(
            record=record,
            currency_id=currency_id,
            cash_delta=cash,
            goods_delta=goods,
            cash_balance=cash_balances.get(currency_id, ZERO),
            product_balance=product_balance,
        ))

    closing = AccountBalances(
        account_id=account_id,
        base_weight_unit=base_unit,
        cash_balances=dict(cash_balances),
        product_balances=dict(product_balances),
    )
    return lines, closing
