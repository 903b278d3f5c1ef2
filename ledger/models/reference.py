from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, Integer, Numeric, String, Text

from ledger.core.database import Base


class CustomerGroup(Base):
    __tablename__ = "customer_groups"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_protected = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False, default="")
    customer_code = Column(String(50), nullable=True, unique=True)
    group_id = Column(String(64), nullable=True)
    is_protected = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)


class ProductType(Base):
    __tablename__ = "product_types"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    product_code = Column(String(50), nullable=True, unique=True)
    description = Column(Text, nullable=True)
    measurement_type = Column(String(20), nullable=True)  # quantity / weight
    created_at = Column(DateTime, nullable=False)


class Currency(Base):
    __tablename__ = "currencies"

    id = Column(String(64), primary_key=True)
    name = Column(String(50), nullable=False)
    symbol = Column(String(10), nullable=False)
    is_base = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(String(64), primary_key=True)
    bank_name = Column(String(100), nullable=False)
    account_number = Column(String(50), nullable=False)
    account_holder = Column(String(255), nullable=False, default="")
    initial_balance = Column(Numeric(20, 4), nullable=False, default=0)
    currency_id = Column(String(64), nullable=False)
    group_id = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)


class LedgerSettingsRow(Base):
    """Single row holding the ledger-wide settings."""

    __tablename__ = "ledger_settings"

    id = Column(Integer, primary_key=True, default=1)
    base_currency_id = Column(String(64), nullable=True)
    base_weight_unit = Column(String(20), nullable=False, default="ton")
    company_info = Column(JSON, nullable=True)
    last_updated = Column(BigInteger, nullable=True)  # epoch ms
