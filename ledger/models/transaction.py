from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text

from ledger.core.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True)
    document_number = Column(String(50), nullable=False, index=True)

    # validated against TransactionType on load, so unknown values are reported instead of dropped
    type = Column(String(30), nullable=False)

    customer_id = Column(String(64), nullable=False, index=True)
    account_id = Column(String(64), nullable=True)

    amount = Column(Numeric(20, 4), nullable=False, default=0)
    weight = Column(Numeric(20, 6), nullable=True)
    quantity = Column(Integer, nullable=True)
    weight_unit = Column(String(20), nullable=True)
    unit_price = Column(Numeric(20, 4), nullable=True)

    product_type_id = Column(String(64), nullable=True)
    currency_id = Column(String(64), nullable=True)
    description = Column(Text, nullable=False, default="")

    date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False)

    is_main_document = Column(Boolean, nullable=False, default=False)
    parent_document_id = Column(String(64), nullable=True, index=True)
    linked_transaction_id = Column(String(64), nullable=True)
    role = Column(String(30), nullable=True)

    def __repr__(self):
        return f"<Transaction(id='{self.id}', number='{self.document_number}', type='{self.type}')>"
