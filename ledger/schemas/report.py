from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class GoodsTotals(ReportModel):
    weight: Decimal = Decimal("0")
    quantity: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.weight and not self.quantity


class SubdocumentTotals(ReportModel):
    document_id: str
    weight_unit: str
    goods_in: GoodsTotals = Field(default_factory=GoodsTotals)
    goods_out: GoodsTotals = Field(default_factory=GoodsTotals)
    goods_credit: GoodsTotals = Field(default_factory=GoodsTotals)
    goods_debit: GoodsTotals = Field(default_factory=GoodsTotals)
    money_in: Dict[str, Decimal] = Field(default_factory=dict)
    money_out: Dict[str, Decimal] = Field(default_factory=dict)
    money_credit: Dict[str, Decimal] = Field(default_factory=dict)
    money_debit: Dict[str, Decimal] = Field(default_factory=dict)


class CurrencyPosition(ReportModel):
    currency_id: str
    total_cash_credit: Decimal = Decimal("0")
    total_cash_debt: Decimal = Decimal("0")


class TreasuryBalance(ReportModel):
    account_id: str
    label: str
    currency_id: str
    balance: Decimal


class CashInventory(ReportModel):
    positions: List[CurrencyPosition] = Field(default_factory=list)
    treasury: List[TreasuryBalance] = Field(default_factory=list)


class PeriodSummary(ReportModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    weight_unit: str
    cash_in: Dict[str, Decimal] = Field(default_factory=dict)
    cash_out: Dict[str, Decimal] = Field(default_factory=dict)
    net_cash: Dict[str, Decimal] = Field(default_factory=dict)
    goods_in: Dict[str, Decimal] = Field(default_factory=dict)
    goods_out: Dict[str, Decimal] = Field(default_factory=dict)
    net_goods: Dict[str, Decimal] = Field(default_factory=dict)
    record_count: int = 0
