# ledger/models/__init__.py
from .transaction import Transaction
from .reference import CustomerGroup, Customer, ProductType, Currency, BankAccount, LedgerSettingsRow
