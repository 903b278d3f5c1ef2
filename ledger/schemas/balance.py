from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ledger.schemas.transaction import TransactionRecord


class BalanceModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AccountBalances(BalanceModel):
    account_id: str
    base_weight_unit: str
    cash_balances: Dict[str, Decimal] = Field(default_factory=dict)
    product_balances: Dict[str, Decimal] = Field(default_factory=dict)


class StatementLine(BalanceModel):
    record: TransactionRecord
    currency_id: str
    cash_delta: Decimal
    goods_delta: Decimal
    cash_balance: Decimal
    product_balance: Optional[Decimal] = None


class StatementResponse(BalanceModel):
    account_id: str
    lines: List[StatementLine]
    closing: AccountBalances
