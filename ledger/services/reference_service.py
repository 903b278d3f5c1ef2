import secrets
import string
from typing import Callable, List, Optional, Tuple

from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository
from ledger.schemas.reference import (
    BankAccount,
    BankAccountCreate,
    Currency,
    CurrencyCreate,
    Customer,
    CustomerCreate,
    CustomerGroup,
    CustomerGroupCreate,
    LedgerSnapshot,
    ProductType,
    ProductTypeCreate,
)
from ledger.utils.dates import local_now


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase) for _ in range(length))
    return f"{prefix}-{random_part}"


def _generate_unique_id(prefix: str, existing_ids: List[str]) -> str:
    for _ in range(15):
        new_id = generate_custom_id(prefix)
        if new_id not in existing_ids:
            return new_id
    raise ValueError(f"Failed to generate unique {prefix} ID")


def _is_referenced(snapshot: LedgerSnapshot, predicate: Callable) -> bool:
    return any(predicate(record) for record in snapshot.transactions)


def _search(items: list, search: Optional[str], *fields: str) -> list:
    if not search:
        return items
    needle = search.lower()
    return [
        item for item in items
        if any(needle in (getattr(item, field) or "").lower() for field in fields)
    ]


# ==================== CUSTOMER GROUPS ====================

def get_all_customer_groups(repository: LedgerRepository, search: Optional[str] = None) -> List[CustomerGroup]:
    return _search(repository.load_all().customer_groups, search, "name", "description")


def create_customer_group(repository: LedgerRepository, data: CustomerGroupCreate) -> CustomerGroup:
    snapshot = repository.load_all()
    group = CustomerGroup(
        id=_generate_unique_id("GRP", [g.id for g in snapshot.customer_groups]),
        name=data.name,
        description=data.description,
        created_at=local_now(),
    )
    snapshot.customer_groups.append(group)
    repository.save_all(snapshot)
    logger.info(f"Customer group {group.name} created with id {group.id}")
    return group


def delete_customer_group(repository: LedgerRepository, group_id: str) -> bool:
    """
    Delete a customer group. Returns False if it does not exist.

    Raises:
        ValueError: the group is protected or still holds customers or bank accounts
    """
    snapshot = repository.load_all()
    group = snapshot.find_customer_group(group_id)
    if not group:
        return False
    if group.is_protected:
        raise ValueError(f"Customer group {group.name} is protected and cannot be deleted")
    if any(c.group_id == group_id for c in snapshot.customers) or any(
        acc.group_id == group_id for acc in snapshot.bank_accounts
    ):
        raise ValueError(f"Customer group {group.name} is in use and cannot be deleted")

    snapshot.customer_groups = [g for g in snapshot.customer_groups if g.id != group_id]
    repository.save_all(snapshot)
    logger.info(f"Customer group {group_id} deleted")
    return True


# ==================== CUSTOMERS ====================

def get_all_customers(
    repository: LedgerRepository,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> Tuple[List[Customer], int]:
    customers = _search(repository.load_all().customers, search, "name", "phone", "customer_code")
    return customers[skip:skip + limit], len(customers)


def create_customer(repository: LedgerRepository, data: CustomerCreate) -> Customer:
    """Create a customer. customerCode, when given, must be unique."""
    snapshot = repository.load_all()
    if data.customer_code and any(c.customer_code == data.customer_code for c in snapshot.customers):
        raise ValueError(f"Customer code {data.customer_code} already exists")
    if data.group_id and not snapshot.find_customer_group(data.group_id):
        raise ValueError(f"Customer group {data.group_id} not found")

    customer = Customer(
        id=_generate_unique_id("CUS", [c.id for c in snapshot.customers]),
        name=data.name,
        phone=data.phone,
        customer_code=data.customer_code,
        group_id=data.group_id,
        created_at=local_now(),
    )
    snapshot.customers.append(customer)
    repository.save_all(snapshot)
    logger.info(f"Customer {customer.name} created with id {customer.id}")
    return customer


def delete_customer(repository: LedgerRepository, customer_id: str) -> bool:
    """
    Delete a customer. Returns False if it does not exist.

    Raises:
        ValueError: the customer is protected or has transactions
    """
    snapshot = repository.load_all()
    customer = snapshot.find_customer(customer_id)
    if not customer:
        return False
    if customer.is_protected:
        raise ValueError(f"Customer {customer.name} is protected and cannot be deleted")
    if _is_referenced(snapshot, lambda r: customer_id in (r.customer_id, r.account_id)):
        raise ValueError(f"Customer {customer.name} has transactions and cannot be deleted")

    snapshot.customers = [c for c in snapshot.customers if c.id != customer_id]
    repository.save_all(snapshot)
    logger.info(f"Customer {customer_id} deleted")
    return True


# ==================== CURRENCIES ====================

def get_all_currencies(repository: LedgerRepository) -> List[Currency]:
    return repository.load_all().currencies


def create_currency(repository: LedgerRepository, data: CurrencyCreate) -> Currency:
    """Create a currency; marking it as base clears the flag everywhere else."""
    snapshot = repository.load_all()
    currency = Currency(
        id=_generate_unique_id("CUR", [c.id for c in snapshot.currencies]),
        name=data.name,
        symbol=data.symbol,
        is_base=data.is_base or not snapshot.currencies,
        created_at=local_now(),
    )
    if currency.is_base:
        for existing in snapshot.currencies:
            existing.is_base = False
        snapshot.settings.base_currency_id = currency.id

    snapshot.currencies.append(currency)
    repository.save_all(snapshot)
    logger.info(f"Currency {currency.symbol} created with id {currency.id}")
    return currency


def delete_currency(repository: LedgerRepository, currency_id: str) -> bool:
    snapshot = repository.load_all()
    currency = next((c for c in snapshot.currencies if c.id == currency_id), None)
    if not currency:
        return False
    if currency.is_base:
        raise ValueError("The base currency cannot be deleted")
    if any(acc.currency_id == currency_id for acc in snapshot.bank_accounts):
        raise ValueError(f"Currency {currency.symbol} is used by a bank account")
    if _is_referenced(snapshot, lambda r: r.currency_id == currency_id):
        raise ValueError(f"Currency {currency.symbol} has transactions and cannot be deleted")

    snapshot.currencies = [c for c in snapshot.currencies if c.id != currency_id]
    repository.save_all(snapshot)
    logger.info(f"Currency {currency_id} deleted")
    return True


# ==================== BANK ACCOUNTS ====================

def get_all_bank_accounts(repository: LedgerRepository) -> List[BankAccount]:
    return repository.load_all().bank_accounts


def create_bank_account(repository: LedgerRepository, data: BankAccountCreate) -> BankAccount:
    snapshot = repository.load_all()
    if not any(c.id == data.currency_id for c in snapshot.currencies):
        raise ValueError(f"Currency {data.currency_id} not found")

    bank_account = BankAccount(
        id=_generate_unique_id("BNK", [acc.id for acc in snapshot.bank_accounts]),
        bank_name=data.bank_name,
        account_number=data.account_number,
        account_holder=data.account_holder,
        initial_balance=data.initial_balance,
        currency_id=data.currency_id,
        description=data.description,
        created_at=local_now(),
    )
    snapshot.bank_accounts.append(bank_account)
    repository.save_all(snapshot)
    logger.info(f"Bank account {bank_account.label} created with id {bank_account.id}")
    return bank_account


def delete_bank_account(repository: LedgerRepository, account_id: str) -> bool:
    snapshot = repository.load_all()
    bank_account = snapshot.find_bank_account(account_id)
    if not bank_account:
        return False
    if _is_referenced(snapshot, lambda r: account_id in (r.customer_id, r.account_id)):
        raise ValueError(f"Bank account {bank_account.label} has transactions and cannot be deleted")

    snapshot.bank_accounts = [acc for acc in snapshot.bank_accounts if acc.id != account_id]
    repository.save_all(snapshot)
    logger.info(f"Bank account {account_id} deleted")
    return True


# ==================== PRODUCT TYPES ====================

def get_all_product_types(repository: LedgerRepository, search: Optional[str] = None) -> List[ProductType]:
    return _search(repository.load_all().product_types, search, "name", "product_code")


def create_product_type(repository: LedgerRepository, data: ProductTypeCreate) -> ProductType:
    snapshot = repository.load_all()
    if data.product_code and any(p.product_code == data.product_code for p in snapshot.product_types):
        raise ValueError(f"Product code {data.product_code} already exists")

    product_type = ProductType(
        id=_generate_unique_id("PRD", [p.id for p in snapshot.product_types]),
        name=data.name,
        product_code=data.product_code,
        description=data.description,
        measurement_type=data.measurement_type,
        created_at=local_now(),
    )
    snapshot.product_types.append(product_type)
    repository.save_all(snapshot)
    logger.info(f"Product type {product_type.name} created with id {product_type.id}")
    return product_type


def delete_product_type(repository: LedgerRepository, product_type_id: str) -> bool:
    snapshot = repository.load_all()
    product_type = next((p for p in snapshot.product_types if p.id == product_type_id), None)
    if not product_type:
        return False
    if _is_referenced(snapshot, lambda r: r.product_type_id == product_type_id):
        raise ValueError(f"Product type {product_type.name} has transactions and cannot be deleted")

    snapshot.product_types = [p for p in snapshot.product_types if p.id != product_type_id]
    repository.save_all(snapshot)
    logger.info(f"Product type {product_type_id} deleted")
    return True
