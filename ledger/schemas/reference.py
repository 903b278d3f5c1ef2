import enum
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ledger.schemas.transaction import TransactionRecord


class MeasurementType(str, enum.Enum):
    quantity = "quantity"
    weight = "weight"


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class CustomerGroup(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    is_protected: bool = False
    created_at: datetime


class Customer(CamelModel):
    id: str
    name: str
    phone: str = ""
    customer_code: Optional[str] = None
    group_id: Optional[str] = None
    is_protected: bool = False
    created_at: datetime


class ProductType(CamelModel):
    id: str
    name: str
    product_code: Optional[str] = None
    description: Optional[str] = None
    measurement_type: Optional[MeasurementType] = None
    created_at: datetime


class Currency(CamelModel):
    id: str
    name: str
    symbol: str
    is_base: bool = False
    created_at: datetime


class BankAccount(CamelModel):
    id: str
    bank_name: str
    account_number: str
    account_holder: str = ""
    initial_balance: Decimal = Decimal("0")
    currency_id: str
    group_id: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    @property
    def label(self) -> str:
        return f"{self.bank_name} - {self.account_number}"


class LedgerSettings(CamelModel):
    base_currency_id: Optional[str] = None
    base_weight_unit: str = "ton"
    company_info: Optional[Dict[str, Any]] = None


class LedgerSnapshot(CamelModel):
    """The whole persisted data set: reference tables plus every transaction record."""

    customer_groups: List[CustomerGroup] = Field(default_factory=list)
    customers: List[Customer] = Field(default_factory=list)
    product_types: List[ProductType] = Field(default_factory=list)
    currencies: List[Currency] = Field(default_factory=list)
    bank_accounts: List[BankAccount] = Field(default_factory=list)
    transactions: List[TransactionRecord] = Field(default_factory=list)
    settings: LedgerSettings = Field(default_factory=LedgerSettings)
    last_updated: Optional[int] = None

    def find_bank_account(self, account_id: Optional[str]) -> Optional[BankAccount]:
        return next((acc for acc in self.bank_accounts if acc.id == account_id), None)

    def find_customer(self, customer_id: Optional[str]) -> Optional[Customer]:
        return next((c for c in self.customers if c.id == customer_id), None)

    def find_customer_group(self, group_id: Optional[str]) -> Optional[CustomerGroup]:
        return next((g for g in self.customer_groups if g.id == group_id), None)


# ==================== REQUEST / RESPONSE SCHEMAS ====================

class CustomerGroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CustomerGroupListResponse(CamelModel):
    total: int
    customer_groups: List[CustomerGroup]


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field("", max_length=20)
    customer_code: Optional[str] = Field(None, max_length=50)
    group_id: Optional[str] = None


class CustomerListResponse(CamelModel):
    total: int
    customers: List[Customer]


class CurrencyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    symbol: str = Field(..., min_length=1, max_length=10)
    is_base: bool = False


class CurrencyListResponse(CamelModel):
    total: int
    currencies: List[Currency]


class BankAccountCreate(CamelModel):
    bank_name: str = Field(..., min_length=1, max_length=100)
    account_number: str = Field(..., min_length=1, max_length=50)
    account_holder: str = ""
    initial_balance: Decimal = Decimal("0")
    currency_id: str
    description: Optional[str] = None


class BankAccountListResponse(CamelModel):
    total: int
    bank_accounts: List[BankAccount]


class ProductTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    product_code: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    measurement_type: Optional[MeasurementType] = None


class ProductTypeListResponse(CamelModel):
    total: int
    product_types: List[ProductType]


class DeleteResponse(BaseModel):
    message: str
