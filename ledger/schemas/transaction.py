import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ledger.utils.dates import to_local_naive


# Synthetic accounts every ledger has
CASH_BOX_ID = "default-cash-safe"
WAREHOUSE_ID = "default-warehouse"
SYNTHETIC_PREFIX = "default-"


class TransactionType(str, enum.Enum):
    product_in = "product_in"
    product_out = "product_out"
    product_purchase = "product_purchase"
    product_sale = "product_sale"
    cash_in = "cash_in"
    cash_out = "cash_out"
    expense = "expense"
    income = "income"
    receivable = "receivable"
    payable = "payable"


CASH_MOVEMENT_TYPES = (TransactionType.cash_in, TransactionType.cash_out)
GOODS_MOVEMENT_TYPES = (TransactionType.product_in, TransactionType.product_out)
PRODUCT_TYPES = (
    TransactionType.product_in,
    TransactionType.product_out,
    TransactionType.product_purchase,
    TransactionType.product_sale,
)
ADJUSTMENT_TYPES = (TransactionType.receivable, TransactionType.payable)
SIMPLE_TYPES = (
    TransactionType.product_purchase,
    TransactionType.product_sale,
    TransactionType.expense,
    TransactionType.income,
    TransactionType.receivable,
    TransactionType.payable,
)


class LegRole(str, enum.Enum):
    customer_leg = "customer_leg"
    counterparty_leg = "counterparty_leg"


class TransactionRecord(BaseModel):
    id: str
    document_number: str
    type: TransactionType
    customer_id: str
    account_id: Optional[str] = None

    amount: Decimal = Decimal("0")
    weight: Optional[Decimal] = None
    quantity: Optional[int] = None
    weight_unit: Optional[str] = None
    unit_price: Optional[Decimal] = None

    product_type_id: Optional[str] = None
    currency_id: Optional[str] = None
    description: str = ""

    date: datetime
    created_at: datetime

    is_main_document: bool = False
    parent_document_id: Optional[str] = None
    linked_transaction_id: Optional[str] = None
    role: Optional[LegRole] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    @field_validator("date", "created_at")
    @classmethod
    def to_local_time(cls, value):
        return to_local_naive(value)

    @field_validator("is_main_document", mode="before")
    @classmethod
    def main_flag_default(cls, value):
        return bool(value)

    @model_validator(mode="after")
    def check_linkage(self):
        if self.is_main_document and self.parent_document_id:
            raise ValueError("a main document cannot have a parentDocumentId")
        if self.weight is not None and self.quantity is not None:
            raise ValueError("weight and quantity are mutually exclusive")
        return self

    @property
    def is_child(self) -> bool:
        return self.parent_document_id is not None


class TransactionListResponse(BaseModel):
    total: int
    transactions: List[TransactionRecord] = Field(default_factory=list)


class DocumentNumberResponse(BaseModel):
    document_number: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True
