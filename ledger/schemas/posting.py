from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from ledger.schemas.transaction import TransactionRecord, TransactionType
from ledger.utils.dates import to_local_naive


class PostingLine(BaseModel):
    """The measure/amount part of a user entry, shared by single and batch postings."""

    type: TransactionType
    amount: Optional[Decimal] = None
    weight: Optional[Decimal] = None
    quantity: Optional[int] = None
    weight_unit: Optional[str] = None
    unit_price: Optional[Decimal] = None
    product_type_id: Optional[str] = None
    description: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PostingRequest(PostingLine):
    """One logical user action, e.g. "cash in 500 to the cash box from customer C"."""

    customer_id: Optional[str] = None
    account_id: Optional[str] = None
    currency_id: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def to_local_time(cls, value):
        return to_local_naive(value)


class BatchPostingRequest(BaseModel):
    """Pending line items accumulated under one customer and committed together."""

    customer_id: Optional[str] = None
    currency_id: Optional[str] = None
    date: Optional[datetime] = None
    description: str = ""
    items: List[PostingLine] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("date")
    @classmethod
    def to_local_time(cls, value):
        return to_local_naive(value)


class PostingResponse(BaseModel):
    message: str
    records: List[TransactionRecord]


class RepairResponse(BaseModel):
    removed: int
    removed_ids: List[str]

    class Config:
        alias_generator = to_camel
        populate_by_name = True
