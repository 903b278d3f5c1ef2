from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledger import __version__
from ledger.api.v1 import (
    balances,
    bank_accounts,
    currencies,
    customer_groups,
    customers,
    data,
    documents,
    product_types,
    reports,
    transactions,
)
from ledger.common.error_handlers import register_error_handlers
from ledger.core.config import settings

app = FastAPI(title="Ledger", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(
    transactions.router, prefix="/api/v1/transactions", tags=["transactions"])
app.include_router(balances.router, prefix="/api/v1/balances", tags=["balances"])
app.include_router(documents.router, prefix="/api/v1/documents", tags=["documents"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])
app.include_router(
    customer_groups.router, prefix="/api/v1/customer-groups", tags=["customer groups"])
app.include_router(customers.router, prefix="/api/v1/customers", tags=["customers"])
app.include_router(
    currencies.router, prefix="/api/v1/currencies", tags=["currencies"])
app.include_router(
    bank_accounts.router, prefix="/api/v1/bank-accounts", tags=["bank accounts"])
app.include_router(
    product_types.router, prefix="/api/v1/product-types", tags=["product types"])
app.include_router(data.router, prefix="/api/v1/data", tags=["data"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the Ledger APIs!"}
