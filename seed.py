from decimal import Decimal
import random

from faker import Faker

from ledger.common.exceptions import PostingValidationError
from ledger.core.dependencies import get_repository
from ledger.schemas.posting import BatchPostingRequest, PostingLine, PostingRequest
from ledger.schemas.reference import (
    BankAccountCreate,
    CurrencyCreate,
    CustomerCreate,
    CustomerGroupCreate,
    LedgerSnapshot,
    MeasurementType,
    ProductTypeCreate,
)
from ledger.schemas.transaction import CASH_BOX_ID, TransactionType
from ledger.services import reference_service
from ledger.services.ledger_service import LedgerService

fake = Faker()
repository = get_repository()
service = LedgerService(repository)

try:
    print("🔄 Clearing existing data...")
    repository.save_all(LedgerSnapshot())
    print("✅ Data cleared.")

    print("🔄 Creating currencies, bank accounts and product types...")
    base = reference_service.create_currency(repository, CurrencyCreate(name="Iraqi Dinar", symbol="IQD", is_base=True))
    usd = reference_service.create_currency(repository, CurrencyCreate(name="US Dollar", symbol="$"))

    bank_accounts = [
        reference_service.create_bank_account(repository, BankAccountCreate(
            bank_name=fake.company(),
            account_number=fake.bban(),
            account_holder=fake.name(),
            initial_balance=Decimal(random.randint(0, 50) * 1000),
            currency_id=currency.id,
        ))
        for currency in (base, usd)
    ]

    product_types = [
        reference_service.create_product_type(repository, ProductTypeCreate(
            name=f"{fake.word().capitalize()} flour",
            product_code=f"P{index:03}",
            measurement_type=MeasurementType.weight,
        ))
        for index in range(1, 4)
    ]
    print(f"✅ Seeded 2 currencies, {len(bank_accounts)} bank accounts, {len(product_types)} product types")

    print("🔄 Creating customer groups and customers...")
    groups = [
        reference_service.create_customer_group(repository, CustomerGroupCreate(name=name))
        for name in ("Wholesale", "Retail", "Suppliers")
    ]
    customers = []
    for _ in range(random.randint(10, 15)):
        customers.append(reference_service.create_customer(repository, CustomerCreate(
            name=fake.name(),
            phone=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            group_id=random.choice(groups).id,
        )))
    print(f"✅ Seeded {len(groups)} groups and {len(customers)} customers")

    print("🔄 Posting transactions...")
    posted = 0
    for _ in range(40):
        customer = random.choice(customers)
        product = random.choice(product_types)
        action = random.choice(["cash", "goods", "trade", "batch"])
        try:
            if action == "cash":
                account = random.choice([CASH_BOX_ID, bank_accounts[0].id])
                service.post(PostingRequest(
                    type=random.choice([TransactionType.cash_in, TransactionType.cash_out]),
                    customer_id=customer.id,
                    account_id=account,
                    currency_id=base.id,
                    amount=Decimal(random.randint(1, 100) * 1000),
                    description=fake.sentence(nb_words=4),
                ))
            elif action == "goods":
                service.post(PostingRequest(
                    type=random.choice([TransactionType.product_in, TransactionType.product_out]),
                    customer_id=customer.id,
                    product_type_id=product.id,
                    weight=Decimal(random.randint(1, 30)),
                    weight_unit="ton",
                ))
            elif action == "trade":
                service.post(PostingRequest(
                    type=random.choice([TransactionType.product_purchase, TransactionType.product_sale]),
                    customer_id=customer.id,
                    product_type_id=product.id,
                    weight=Decimal(random.randint(1, 30)),
                    weight_unit="ton",
                    unit_price=Decimal(random.randint(150, 400)),
                ))
            else:
                service.post_batch(BatchPostingRequest(
                    customer_id=customer.id,
                    items=[
                        PostingLine(
                            type=TransactionType.product_sale,
                            product_type_id=product.id,
                            quantity=random.randint(1, 50),
                            unit_price=Decimal(random.randint(10, 40)),
                        ),
                        PostingLine(type=TransactionType.expense, amount=Decimal(random.randint(1, 20) * 500)),
                    ],
                ))
            posted += 1
        except PostingValidationError as e:
            print(f"⚠️ Posting rejected: {e.kind.value} {e.message}")

    print(f"✅ Posted {posted} documents")
except Exception as e:
    print(f"❌ Seeding failed: {e}")
    raise
