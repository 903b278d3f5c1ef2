# ledger/services/posting_service.py

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from ledger.common.exceptions import ErrorKind, PostingValidationError
from ledger.logger_config import logger
from ledger.schemas.posting import BatchPostingRequest, PostingLine, PostingRequest
from ledger.schemas.reference import LedgerSnapshot
from ledger.schemas.transaction import (
    ADJUSTMENT_TYPES,
    CASH_BOX_ID,
    CASH_MOVEMENT_TYPES,
    GOODS_MOVEMENT_TYPES,
    PRODUCT_TYPES,
    SIMPLE_TYPES,
    SYNTHETIC_PREFIX,
    WAREHOUSE_ID,
    LegRole,
    TransactionRecord,
    TransactionType as T,
)
from ledger.services.numbering_service import child_document_number, next_document_number


IdFactory = Callable[[], str]

ZERO = Decimal("0")
CASH_BOX_LABEL = "Cash Box"
WAREHOUSE_LABEL = "Warehouse"
UNKNOWN_LABEL = "Unknown"

# types that move money through a treasury account (cash box or bank)
TREASURY_TYPES = (T.cash_in, T.cash_out, T.expense, T.income)


def new_record_id() -> str:
    return str(uuid.uuid4())


# ==================== HELPER FUNCTIONS ====================

def posting_family(transaction_type: T) -> str:
    """cash and goods movements expand into groups, everything else posts alone."""
    if transaction_type in CASH_MOVEMENT_TYPES:
        return "cash"
    if transaction_type in GOODS_MOVEMENT_TYPES:
        return "goods"
    return "simple"


def account_label(snapshot: LedgerSnapshot, account_id: Optional[str]) -> str:
    if account_id == CASH_BOX_ID:
        return CASH_BOX_LABEL
    if account_id == WAREHOUSE_ID:
        return WAREHOUSE_LABEL
    bank_account = snapshot.find_bank_account(account_id)
    return bank_account.label if bank_account else UNKNOWN_LABEL


def party_label(snapshot: LedgerSnapshot, party_id: Optional[str]) -> str:
    customer = snapshot.find_customer(party_id)
    if customer:
        return customer.name
    return account_label(snapshot, party_id)


def is_known_party(snapshot: LedgerSnapshot, party_id: str) -> bool:
    return (
        party_id in (CASH_BOX_ID, WAREHOUSE_ID)
        or snapshot.find_customer(party_id) is not None
        or snapshot.find_bank_account(party_id) is not None
    )


def resolve_account(request: PostingRequest) -> Optional[str]:
    if request.type in TREASURY_TYPES:
        return request.account_id or CASH_BOX_ID
    return request.account_id


def resolve_currency(request: PostingRequest, snapshot: LedgerSnapshot) -> Optional[str]:
    return request.currency_id or snapshot.settings.base_currency_id


def resolve_weight_unit(line: PostingLine, snapshot: LedgerSnapshot) -> Optional[str]:
    if line.weight is None:
        return None
    return line.weight_unit or snapshot.settings.base_weight_unit


def compute_amount(line: PostingLine) -> Decimal:
    """
    Amount of one line. Product and adjustment lines with a unit price are
    priced as weight-or-quantity x unit price; goods movements carry no money.
    """
    if line.type in GOODS_MOVEMENT_TYPES:
        return ZERO
    if line.type in PRODUCT_TYPES or line.type in ADJUSTMENT_TYPES:
        measure = line.weight if line.weight is not None else line.quantity
        if line.unit_price is not None and measure is not None:
            return Decimal(measure) * line.unit_price
    return line.amount if line.amount is not None else ZERO


def normalize_adjustment(record: TransactionRecord) -> TransactionRecord:
    """receivable carries non-negative values, payable non-positive ones."""
    if record.type not in ADJUSTMENT_TYPES:
        return record
    sign = 1 if record.type == T.receivable else -1
    update = {"amount": sign * abs(record.amount or ZERO)}
    if record.weight is not None:
        update["weight"] = sign * abs(record.weight)
    if record.quantity is not None:
        update["quantity"] = sign * abs(record.quantity)
    return record.model_copy(update=update)


# ==================== VALIDATION ====================

def validate_request(request: PostingRequest, snapshot: LedgerSnapshot) -> None:
    """
    Reject a posting before anything is built.

    Raises:
        PostingValidationError with the matching ErrorKind.
    """
    if not request.customer_id:
        raise PostingValidationError(ErrorKind.MISSING_CUSTOMER, "A customer must be selected")
    if not is_known_party(snapshot, request.customer_id):
        raise PostingValidationError(
            ErrorKind.MISSING_CUSTOMER, f"Customer {request.customer_id} not found"
        )

    has_weight = request.weight is not None
    has_quantity = request.quantity is not None

    if request.type in PRODUCT_TYPES:
        if has_weight == has_quantity:
            raise PostingValidationError(
                ErrorKind.AMBIGUOUS_MEASURE, "Exactly one of quantity or weight must be set"
            )
        if not request.product_type_id:
            raise PostingValidationError(ErrorKind.MISSING_PRODUCT_TYPE, "A product type must be selected")

    if request.type in ADJUSTMENT_TYPES:
        if has_weight and has_quantity:
            raise PostingValidationError(
                ErrorKind.AMBIGUOUS_MEASURE, "Quantity and weight cannot both be set"
            )
        if (has_weight or has_quantity) and not request.product_type_id:
            raise PostingValidationError(ErrorKind.MISSING_PRODUCT_TYPE, "A product type must be selected")

    account_id = resolve_account(request)
    if account_id and not account_id.startswith(SYNTHETIC_PREFIX):
        bank_account = snapshot.find_bank_account(account_id)
        if not bank_account:
            raise PostingValidationError(ErrorKind.UNKNOWN_ACCOUNT, f"Account {account_id} not found")
        currency_id = resolve_currency(request, snapshot)
        if bank_account.currency_id != currency_id:
            raise PostingValidationError(
                ErrorKind.CURRENCY_MISMATCH,
                f"Account {bank_account.label} holds {bank_account.currency_id}, "
                f"transaction is in {currency_id}",
            )

    if request.type in ADJUSTMENT_TYPES:
        if not (has_weight or has_quantity) and not request.amount:
            raise PostingValidationError(
                ErrorKind.NOTHING_TO_POST, "Either a product measure or an amount is required"
            )
    elif request.type in TREASURY_TYPES and not request.amount:
        raise PostingValidationError(ErrorKind.NOTHING_TO_POST, "An amount is required")


# ==================== RECORD BUILDERS ====================

def _line_record(
    line: PostingLine,
    snapshot: LedgerSnapshot,
    *,
    record_id: str,
    document_number: str,
    customer_id: str,
    account_id: Optional[str],
    currency_id: Optional[str],
    date: datetime,
    created_at: datetime,
    **extra,
) -> TransactionRecord:
    record = TransactionRecord(
        id=record_id,
        document_number=document_number,
        type=line.type,
        customer_id=customer_id,
        account_id=account_id,
        amount=compute_amount(line),
        weight=line.weight,
        quantity=line.quantity,
        weight_unit=resolve_weight_unit(line, snapshot),
        unit_price=line.unit_price,
        product_type_id=line.product_type_id,
        currency_id=currency_id,
        description=line.description,
        date=date,
        created_at=created_at,
        **extra,
    )
    return normalize_adjustment(record)


def build_cash_group(
    request: PostingRequest,
    snapshot: LedgerSnapshot,
    *,
    main_id: str,
    leg_ids: Tuple[str, str],
    document_number: str,
    date: datetime,
    created_at: datetime,
) -> List[TransactionRecord]:
    """Main document plus customer leg (-1) and treasury leg (-2) netting to zero."""
    total = abs(compute_amount(request))
    signed = -total if request.type == T.cash_in else total
    account_id = resolve_account(request)
    currency_id = resolve_currency(request, snapshot)
    customer_name = party_label(snapshot, request.customer_id)
    account_name = account_label(snapshot, account_id)

    if request.type == T.cash_in:
        main_description = f"Received from {customer_name} → {account_name}"
        account_description = f"Deposit to {account_name}"
    else:
        main_description = f"Paid to {customer_name} → {account_name}"
        account_description = f"Withdrawal from {account_name}"

    common = dict(type=request.type, account_id=account_id, currency_id=currency_id, date=date, created_at=created_at)
    main = TransactionRecord(
        id=main_id,
        document_number=document_number,
        customer_id=request.customer_id,
        amount=signed,
        description=main_description,
        is_main_document=True,
        **common,
    )
    customer_leg = TransactionRecord(
        id=leg_ids[0],
        document_number=child_document_number(document_number, 1),
        customer_id=request.customer_id,
        amount=signed,
        description=request.description,
        parent_document_id=main_id,
        role=LegRole.customer_leg,
        **common,
    )
    account_leg = TransactionRecord(
        id=leg_ids[1],
        document_number=child_document_number(document_number, 2),
        customer_id=account_id,
        amount=-signed,
        description=account_description,
        parent_document_id=main_id,
        role=LegRole.counterparty_leg,
        **common,
    )
    return [main, customer_leg, account_leg]


def build_goods_group(
    request: PostingRequest,
    snapshot: LedgerSnapshot,
    *,
    main_id: str,
    leg_ids: Tuple[str, str],
    document_number: str,
    date: datetime,
    created_at: datetime,
) -> List[TransactionRecord]:
    """Summary main document plus customer leg (-1) and warehouse leg (-2), opposite signed."""
    sign = -1 if request.type == T.product_in else 1
    weight = sign * abs(request.weight) if request.weight is not None else None
    quantity = sign * abs(request.quantity) if request.quantity is not None else None
    opposite_weight = -weight if weight is not None else None
    opposite_quantity = -quantity if quantity is not None else None
    customer_name = party_label(snapshot, request.customer_id)

    if request.type == T.product_in:
        warehouse_description = f"Received from {customer_name}"
    else:
        warehouse_description = f"Sent to {customer_name}"

    common = dict(
        type=request.type,
        amount=ZERO,
        weight_unit=resolve_weight_unit(request, snapshot),
        unit_price=request.unit_price,
        product_type_id=request.product_type_id,
        currency_id=resolve_currency(request, snapshot),
        date=date,
        created_at=created_at,
    )
    main = TransactionRecord(
        id=main_id,
        document_number=document_number,
        customer_id=request.customer_id,
        account_id=WAREHOUSE_ID,
        weight=weight,
        quantity=quantity,
        description=f"{warehouse_description} ({WAREHOUSE_LABEL})",
        is_main_document=True,
        **common,
    )
    customer_leg = TransactionRecord(
        id=leg_ids[0],
        document_number=child_document_number(document_number, 1),
        customer_id=request.customer_id,
        weight=weight,
        quantity=quantity,
        description=request.description,
        parent_document_id=main_id,
        role=LegRole.customer_leg,
        **common,
    )
    warehouse_leg = TransactionRecord(
        id=leg_ids[1],
        document_number=child_document_number(document_number, 2),
        customer_id=WAREHOUSE_ID,
        account_id=WAREHOUSE_ID,
        weight=opposite_weight,
        quantity=opposite_quantity,
        description=warehouse_description,
        parent_document_id=main_id,
        role=LegRole.counterparty_leg,
        **common,
    )
    return [main, customer_leg, warehouse_leg]


GROUP_BUILDERS = {
    "cash": build_cash_group,
    "goods": build_goods_group,
}


# ==================== POSTING ====================

def post_action(
    snapshot: LedgerSnapshot,
    request: PostingRequest,
    now: datetime,
    id_factory: IdFactory = new_record_id,
) -> List[TransactionRecord]:
    """
    Expand one user action into the records to append to the ledger.

    Cash and goods movements produce a main document with two balanced legs,
    every other type produces one standalone record. Nothing is returned
    unless the whole group could be built.
    """
    validate_request(request, snapshot)

    document_number = next_document_number(snapshot.transactions, now.year)
    date = request.date or now
    family = posting_family(request.type)

    if family in GROUP_BUILDERS:
        records = GROUP_BUILDERS[family](
            request,
            snapshot,
            main_id=id_factory(),
            leg_ids=(id_factory(), id_factory()),
            document_number=document_number,
            date=date,
            created_at=now,
        )
    else:
        records = [_line_record(
            request,
            snapshot,
            record_id=id_factory(),
            document_number=document_number,
            customer_id=request.customer_id,
            account_id=resolve_account(request),
            currency_id=resolve_currency(request, snapshot),
            date=date,
            created_at=now,
        )]

    logger.debug(f"Built {len(records)} record(s) for {request.type.value} document {document_number}")
    return records


def post_batch(
    snapshot: LedgerSnapshot,
    batch: BatchPostingRequest,
    now: datetime,
    id_factory: IdFactory = new_record_id,
) -> List[TransactionRecord]:
    """
    Commit pending line items under one customer: one main document and one
    child per item, numbered `{main}-{index+1}`. Adjustment items are
    sign-normalized here, not when they were entered.
    """
    if not batch.items:
        raise PostingValidationError(ErrorKind.NOTHING_TO_POST, "There are no pending items to commit")

    requests = []
    for index, item in enumerate(batch.items):
        if item.type not in SIMPLE_TYPES:
            raise PostingValidationError(
                ErrorKind.UNSUPPORTED_BATCH_ITEM,
                f"Item {index + 1}: {item.type.value} cannot be committed in a batch",
            )
        request = PostingRequest(
            **item.model_dump(),
            customer_id=batch.customer_id,
            currency_id=batch.currency_id,
            date=batch.date,
        )
        validate_request(request, snapshot)
        requests.append(request)

    document_number = next_document_number(snapshot.transactions, now.year)
    date = batch.date or now
    main_id = id_factory()
    currency_id = resolve_currency(requests[0], snapshot)

    main = TransactionRecord(
        id=main_id,
        document_number=document_number,
        type=requests[0].type,
        customer_id=batch.customer_id,
        amount=ZERO,
        currency_id=currency_id,
        description=batch.description or f"{len(requests)} items for {party_label(snapshot, batch.customer_id)}",
        date=date,
        created_at=now,
        is_main_document=True,
    )
    children = [
        _line_record(
            request,
            snapshot,
            record_id=id_factory(),
            document_number=child_document_number(document_number, index + 1),
            customer_id=batch.customer_id,
            account_id=resolve_account(request),
            currency_id=currency_id,
            date=date,
            created_at=now,
            parent_document_id=main_id,
        )
        for index, request in enumerate(requests)
    ]

    logger.debug(f"Built batch document {document_number} with {len(children)} item(s)")
    return [main] + children


# ==================== EDIT ====================

def _replace(records: List[TransactionRecord], updated: List[TransactionRecord]) -> List[TransactionRecord]:
    by_id = {record.id: record for record in updated}
    replaced = [by_id.pop(record.id, record) for record in records]
    # legs missing from a damaged group are appended
    return replaced + list(by_id.values())


def _edit_group(
    snapshot: LedgerSnapshot,
    main: TransactionRecord,
    legs: Dict[LegRole, TransactionRecord],
    request: PostingRequest,
    id_factory: IdFactory,
) -> List[TransactionRecord]:
    family = posting_family(main.type)
    if posting_family(request.type) != family:
        raise PostingValidationError(
            ErrorKind.INVALID_EDIT, f"A {family} movement cannot be changed into {request.type.value}"
        )
    validate_request(request, snapshot)

    customer_leg = legs.get(LegRole.customer_leg)
    counterparty_leg = legs.get(LegRole.counterparty_leg)
    rebuilt = GROUP_BUILDERS[family](
        request,
        snapshot,
        main_id=main.id,
        leg_ids=(
            customer_leg.id if customer_leg else id_factory(),
            counterparty_leg.id if counterparty_leg else id_factory(),
        ),
        document_number=main.document_number,
        date=request.date or main.date,
        created_at=main.created_at,
    )
    # keep each leg's own creation time
    originals = {record.id: record for record in [main] + list(legs.values())}
    return [
        record.model_copy(update={"created_at": originals[record.id].created_at})
        if record.id in originals else record
        for record in rebuilt
    ]


def _edit_batch_main(
    snapshot: LedgerSnapshot,
    main: TransactionRecord,
    children: List[TransactionRecord],
    request: PostingRequest,
) -> List[TransactionRecord]:
    if request.type not in SIMPLE_TYPES:
        raise PostingValidationError(
            ErrorKind.INVALID_EDIT, "A batch document can only hold simple postings"
        )
    if not request.customer_id:
        raise PostingValidationError(ErrorKind.MISSING_CUSTOMER, "A customer must be selected")
    if not is_known_party(snapshot, request.customer_id):
        raise PostingValidationError(
            ErrorKind.MISSING_CUSTOMER, f"Customer {request.customer_id} not found"
        )

    date = request.date or main.date
    currency_id = resolve_currency(request, snapshot)
    shared = {"customer_id": request.customer_id, "date": date, "currency_id": currency_id}
    updated_main = main.model_copy(update={**shared, "type": request.type, "description": request.description or main.description})
    return [updated_main] + [child.model_copy(update=shared) for child in children]


def _edit_single(
    snapshot: LedgerSnapshot,
    target: TransactionRecord,
    partner: Optional[TransactionRecord],
    request: PostingRequest,
) -> List[TransactionRecord]:
    if posting_family(request.type) != posting_family(target.type):
        raise PostingValidationError(
            ErrorKind.INVALID_EDIT, f"{target.type.value} cannot be changed into {request.type.value}"
        )
    if target.parent_document_id and request.type not in SIMPLE_TYPES:
        raise PostingValidationError(
            ErrorKind.INVALID_EDIT, "A batch document can only hold simple postings"
        )
    validate_request(request, snapshot)

    account_id = resolve_account(request)
    currency_id = resolve_currency(request, snapshot)
    updated = _line_record(
        request,
        snapshot,
        record_id=target.id,
        document_number=target.document_number,
        customer_id=request.customer_id,
        account_id=account_id,
        currency_id=currency_id,
        date=request.date or target.date,
        created_at=target.created_at,
        parent_document_id=target.parent_document_id,
        linked_transaction_id=target.linked_transaction_id,
    )
    if partner is None:
        return [updated]

    # legacy linked pair: rewrite the other side of the same action
    if request.type in CASH_MOVEMENT_TYPES:
        account_name = account_label(snapshot, account_id)
        verb = "Deposit to" if request.type == T.cash_in else "Withdrawal from"
        partner = partner.model_copy(update={
            "type": request.type,
            "amount": updated.amount,
            "description": f"{verb} {account_name}",
            "date": updated.date,
            "currency_id": currency_id,
            "customer_id": account_id,
            "account_id": account_id,
        })
    elif request.type in GOODS_MOVEMENT_TYPES:
        customer_name = party_label(snapshot, request.customer_id)
        verb = "Received from" if request.type == T.product_in else "Sent to"
        partner = partner.model_copy(update={
            "type": request.type,
            "weight": request.weight,
            "quantity": request.quantity,
            "product_type_id": request.product_type_id,
            "description": f"{verb} {customer_name}",
            "date": updated.date,
            "weight_unit": updated.weight_unit,
        })
    return [updated, partner]


def edit_document(
    snapshot: LedgerSnapshot,
    document_id: str,
    request: PostingRequest,
    id_factory: IdFactory = new_record_id,
) -> Optional[List[TransactionRecord]]:
    """
    Rewrite a stored document from a new request.

    Returns the full, updated record list, or None when the document does not
    exist. Ids, document numbers and creation times are kept. Legs of a
    posting group are matched by their role, never by number suffix.
    """
    records = snapshot.transactions
    target = next((r for r in records if r.id == document_id), None)
    if target is None:
        return None

    if target.is_main_document:
        children = [r for r in records if r.parent_document_id == target.id]
        legs = {child.role: child for child in children if child.role is not None}
        if legs or posting_family(target.type) in GROUP_BUILDERS:
            updated = _edit_group(snapshot, target, legs, request, id_factory)
        else:
            updated = _edit_batch_main(snapshot, target, children, request)
    elif target.role is not None:
        raise PostingValidationError(
            ErrorKind.INVALID_EDIT,
            f"{target.document_number} is one leg of a posting group; edit its main document instead",
        )
    else:
        partner = None
        if target.linked_transaction_id:
            partner = next((r for r in records if r.id == target.linked_transaction_id), None)
        updated = _edit_single(snapshot, target, partner, request)

    logger.debug(f"Rewrote {len(updated)} record(s) for document {target.document_number}")
    return _replace(records, updated)


# ==================== DELETE ====================

def delete_document(
    records: List[TransactionRecord],
    document_id: str,
) -> Tuple[List[TransactionRecord], List[str]]:
    """
    Remove a document with everything that belongs to it: all children of a
    main document and the partner of a legacy linked pair.

    Returns (remaining records, removed ids); removed ids is empty when the
    document does not exist.
    """
    target = next((r for r in records if r.id == document_id), None)
    if target is None:
        return list(records), []

    doomed = {target.id}
    if target.is_main_document:
        doomed.update(r.id for r in records if r.parent_document_id == target.id)
    if target.linked_transaction_id:
        doomed.add(target.linked_transaction_id)

    remaining = [r for r in records if r.id not in doomed]
    removed = [r.id for r in records if r.id in doomed]
    return remaining, removed
