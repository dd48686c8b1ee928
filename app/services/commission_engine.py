"""Click tracking and commission ledger operations.

A tracked click is always persisted. When an agent is attributed and the
click carries a positive price, exactly one ``pending`` earnings transaction
is opened for ``price x rate``. Pending transactions only reach ``completed``
through an administrative approval, which is the single place an agent's
balance is credited.

Status transitions use conditional UPDATEs (``WHERE status = 'pending'``) and
balance credits are SQL-side increments, so concurrent approvals cannot
double-credit.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time as dtime
from typing import Any, Optional

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import COMMISSION_SETTINGS
from app.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.models.db import ProductClick, Transaction, User
from app.models.db.enums import ReferenceModel, TransactionStatus, TransactionType
from app.services.attribution import Attribution, attribute_agent
from app.services.category_resolution import CategoryResolution, resolve_category
from app.services.category_rules import load_rule_book
from app.utils import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)

ASIN_RE = re.compile(r"^[A-Z0-9]{10}$", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^0-9.]")

# Commission status reported for clicks without a transaction.
NO_COMMISSION = "none"


@dataclass
class ClickInput:
    asin: Optional[str]
    product_name: Optional[str]
    category: Optional[str] = None
    price: Any = 0
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    referral_code: Optional[str] = None


@dataclass
class TrackedClick:
    click: ProductClick
    resolution: CategoryResolution
    attribution: Optional[Attribution]
    transaction: Optional[Transaction]


@dataclass
class OverrideResult:
    click: ProductClick
    new_amount: float
    transaction: Optional[Transaction]


@dataclass
class ClickWithCommission:
    click: ProductClick
    commission_status: str
    commission_amount: float
    transaction_id: Optional[int]


def is_valid_asin(asin: Optional[str]) -> bool:
    return bool(asin) and ASIN_RE.match(asin or "") is not None


def _parse_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def sanitize_amount(value: Any) -> float:
    """Numeric value of a price-like input; currency symbols and separators are dropped.

    Junk, non-finite and negative values count as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        amount: Optional[float] = float(value)
    else:
        text = str(value).strip()
        amount = _parse_number(text)
        if amount is None:
            cleaned = _NON_NUMERIC.sub("", text)
            amount = _parse_number(cleaned) if cleaned else None
    if amount is None or not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def _describe(template_key: str, rate: float, product_name: str) -> str:
    template = str(COMMISSION_SETTINGS[template_key])
    return template.format(percent=rate * 100, product_name=product_name)


def _linked_transaction(session: Session, click_id: int) -> Optional[Transaction]:
    return (
        session.query(Transaction)
        .filter(
            Transaction.reference_model == ReferenceModel.PRODUCT_CLICK,
            Transaction.reference_id == click_id,
        )
        .order_by(Transaction.id)
        .first()
    )


def _pending_earnings(agent_id: int, amount: float, description: str, click_id: int) -> Transaction:
    return Transaction(
        user_id=agent_id,
        type=TransactionType.EARNINGS,
        amount=amount,
        status=TransactionStatus.PENDING,
        description=description,
        reference_id=click_id,
        reference_model=ReferenceModel.PRODUCT_CLICK,
    )


def track_click(session: Session, click_input: ClickInput, principal: Optional[User]) -> TrackedClick:
    """Record a product click and open its pending commission.

    Raises ValidationFailed for a missing/malformed ASIN or missing product name.
    Attribution and ledger failures are logged; the click is still stored.
    """
    asin = (click_input.asin or "").strip()
    product_name = (click_input.product_name or "").strip()
    if not asin or not product_name:
        raise ValidationFailed("ASIN and Product Name are required")
    if not is_valid_asin(asin):
        raise ValidationFailed(
            "Invalid ASIN format. ASIN must be 10 alphanumeric characters", field="asin"
        )

    price = sanitize_amount(click_input.price)
    resolution = resolve_category(click_input.category, product_name, load_rule_book(session))

    attribution: Optional[Attribution] = None
    try:
        attribution = attribute_agent(session, principal, click_input.referral_code)
    except SQLAlchemyError as e:
        logger.error("Agent attribution failed; recording click without agent", asin=asin, error=str(e), exc_info=True)
        session.rollback()

    click = ProductClick(
        user_id=principal.id if principal is not None else None,
        asin=asin,
        product_name=product_name,
        input_category=click_input.category,
        category=resolution.category,
        price=price,
        image_url=click_input.image_url,
        product_url=click_input.product_url,
        agent_id=attribution.agent_id if attribution else None,
        commission_rate=resolution.commission_rate,
        matched_by=resolution.matched_by,
    )
    session.add(click)
    session.flush()

    transaction: Optional[Transaction] = None
    if attribution is not None and price > 0:
        amount = price * resolution.commission_rate
        if amount > 0:
            try:
                with session.begin_nested():
                    transaction = _pending_earnings(
                        attribution.agent_id,
                        amount,
                        _describe("pending_description", resolution.commission_rate, product_name),
                        click.id,
                    )
                    session.add(transaction)
            except SQLAlchemyError as e:
                transaction = None
                logger.error(
                    "Pending commission could not be created; click kept",
                    click_id=click.id,
                    agent_id=attribution.agent_id,
                    error=str(e),
                    exc_info=True,
                )

    session.commit()
    session.refresh(click)
    if transaction is not None:
        session.refresh(transaction)

    logger.info(
        "Click tracked",
        click_id=click.id,
        asin=asin,
        category=resolution.category,
        matched_by=resolution.matched_by.value,
        commission_rate=resolution.commission_rate,
        agent_id=click.agent_id,
        attribution_source=attribution.source if attribution else None,
        transaction_id=transaction.id if transaction else None,
    )
    return TrackedClick(click=click, resolution=resolution, attribution=attribution, transaction=transaction)


def parse_rate_percent(value: Any) -> float:
    """Admin-entered percentage (``5`` or ``"5%"`` means 5%) -> validated float in [0, 100]."""
    if value is None or isinstance(value, bool):
        raise ValidationFailed("Invalid commission rate provided", field="commission_rate")
    if isinstance(value, (int, float)):
        percent: Optional[float] = float(value)
    else:
        percent = _parse_number(str(value).strip().rstrip("%").strip())
    if percent is None or not math.isfinite(percent):
        raise ValidationFailed("Invalid commission rate provided", field="commission_rate")
    if percent < 0 or percent > 100:
        raise ValidationFailed("Commission rate must be between 0 and 100", field="commission_rate")
    return percent


def record_commission_override(session: Session, click_id: int, new_rate_percent: Any) -> OverrideResult:
    """Overwrite a click's rate and re-price its ledger entry.

    Pending transaction -> amount updated (amount 0 marks it ``failed``).
    No transaction -> one is opened when the click has an agent and the new
    amount is positive. Completed/failed transaction -> ConflictError.
    """
    percent = parse_rate_percent(new_rate_percent)
    fraction = percent / 100

    click = session.get(ProductClick, click_id)
    if click is None:
        raise NotFoundError("Product click not found")

    transaction = _linked_transaction(session, click.id)
    if transaction is not None and transaction.status != TransactionStatus.PENDING:
        raise ConflictError(
            f"Commission for click {click.id} is already {transaction.status.value}; rate can no longer change"
        )

    old_rate = click.commission_rate
    click.commission_rate = fraction
    new_amount = (click.price or 0) * fraction

    if transaction is not None:
        if new_amount > 0:
            values = {
                Transaction.amount: new_amount,
                Transaction.description: _describe("override_description", fraction, click.product_name),
            }
        else:
            values = {
                Transaction.amount: 0.0,
                Transaction.status: TransactionStatus.FAILED,
                Transaction.processed_at: utc_now(),
            }
        updated = (
            session.query(Transaction)
            .filter(Transaction.id == transaction.id, Transaction.status == TransactionStatus.PENDING)
            .update(values, synchronize_session=False)
        )
        if updated == 0:
            session.rollback()
            raise ConflictError(f"Commission for click {click_id} was processed concurrently")
    elif new_amount > 0 and click.agent_id:
        transaction = _pending_earnings(
            click.agent_id,
            new_amount,
            _describe("manual_description", fraction, click.product_name),
            click.id,
        )
        session.add(transaction)

    session.commit()
    session.refresh(click)
    if transaction is not None:
        session.refresh(transaction)

    logger.info(
        "Commission rate overridden",
        click_id=click.id,
        old_rate=old_rate,
        new_rate=fraction,
        new_amount=new_amount,
        transaction_id=transaction.id if transaction else None,
    )
    return OverrideResult(click=click, new_amount=new_amount, transaction=transaction)


def create_transaction_for_click(session: Session, click_id: int) -> Transaction:
    """Open the missing pending commission for an attributed click."""
    click = session.get(ProductClick, click_id)
    if click is None:
        raise NotFoundError("Product click not found")
    if _linked_transaction(session, click.id) is not None:
        raise ConflictError(f"Click {click.id} already has a commission transaction")
    if not click.agent_id:
        raise ValidationFailed("Click has no attributed agent", field="click_id")

    amount = (click.price or 0) * (click.commission_rate or 0)
    if amount <= 0:
        raise ValidationFailed("Commission amount for this click is zero", field="click_id")

    transaction = _pending_earnings(
        click.agent_id,
        amount,
        _describe("backfill_description", click.commission_rate, click.product_name),
        click.id,
    )
    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    logger.info("Commission transaction created for click", click_id=click.id, transaction_id=transaction.id, amount=amount)
    return transaction


def update_transaction_status(
    session: Session,
    transaction_id: int,
    new_status: TransactionStatus,
    notes: Optional[str] = None,
) -> Transaction:
    """Move a pending transaction to completed/failed; completed earnings credit the owner."""
    if new_status not in (TransactionStatus.COMPLETED, TransactionStatus.FAILED):
        raise ValidationFailed("Status must be 'completed' or 'failed'", field="status")

    transaction = session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found")
    if transaction.status != TransactionStatus.PENDING:
        raise ConflictError(f"Transaction {transaction_id} is already {transaction.status.value}")

    values: dict[Any, Any] = {Transaction.status: new_status, Transaction.processed_at: utc_now()}
    if notes:
        values[Transaction.notes] = notes
    updated = (
        session.query(Transaction)
        .filter(Transaction.id == transaction_id, Transaction.status == TransactionStatus.PENDING)
        .update(values, synchronize_session=False)
    )
    if updated == 0:
        session.rollback()
        raise ConflictError(f"Transaction {transaction_id} was processed concurrently")

    credited = 0.0
    if new_status == TransactionStatus.COMPLETED and transaction.type == TransactionType.EARNINGS:
        credited = float(transaction.amount or 0)
        session.query(User).filter(User.id == transaction.user_id).update(
            {
                User.balance: User.balance + credited,
                User.total_earnings: User.total_earnings + credited,
            },
            synchronize_session=False,
        )

    session.commit()
    session.refresh(transaction)
    logger.info(
        "Transaction status updated",
        transaction_id=transaction.id,
        status=new_status.value,
        agent_id=transaction.user_id,
        credited=credited,
    )
    return transaction


def _end_of_day(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, dtime.max)


def _start_of_day(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, dtime.min)


def list_clicks(
    session: Session,
    *,
    agent_id: Optional[int] = None,
    user_id: Optional[int] = None,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    commission_status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[ClickWithCommission], int]:
    """Clicks (newest first) annotated with their commission status, plus the filtered total."""
    query = session.query(ProductClick, Transaction).outerjoin(
        Transaction,
        and_(
            Transaction.reference_model == ReferenceModel.PRODUCT_CLICK,
            Transaction.reference_id == ProductClick.id,
        ),
    )
    if agent_id is not None:
        query = query.filter(ProductClick.agent_id == agent_id)
    if user_id is not None:
        query = query.filter(ProductClick.user_id == user_id)
    if category and category != "All":
        query = query.filter(ProductClick.category == category)
    if start_date is not None:
        query = query.filter(ProductClick.created_at >= _start_of_day(start_date))
    if end_date is not None:
        query = query.filter(ProductClick.created_at <= _end_of_day(end_date))
    if commission_status:
        if commission_status in (NO_COMMISSION, "ineligible"):
            query = query.filter(Transaction.id.is_(None))
        else:
            try:
                wanted = TransactionStatus(commission_status)
            except ValueError:
                raise ValidationFailed(f"Unknown commission status '{commission_status}'", field="status")
            query = query.filter(Transaction.status == wanted)

    total = query.count()
    rows = (
        query.order_by(ProductClick.created_at.desc(), ProductClick.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    annotated = [
        ClickWithCommission(
            click=click,
            commission_status=tx.status.value if tx else NO_COMMISSION,
            commission_amount=float(tx.amount) if tx else 0.0,
            transaction_id=tx.id if tx else None,
        )
        for click, tx in rows
    ]
    return annotated, total


def list_transactions(
    session: Session,
    *,
    status: Optional[TransactionStatus] = None,
    user_id: Optional[int] = None,
    transaction_type: Optional[TransactionType] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Transaction], int]:
    query = session.query(Transaction)
    if status is not None:
        query = query.filter(Transaction.status == status)
    if user_id is not None:
        query = query.filter(Transaction.user_id == user_id)
    if transaction_type is not None:
        query = query.filter(Transaction.type == transaction_type)
    total = query.count()
    items = (
        query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def recent_clicks(session: Session, user_id: int, limit: int = 5) -> list[ProductClick]:
    return (
        session.query(ProductClick)
        .filter(ProductClick.user_id == user_id)
        .order_by(ProductClick.created_at.desc(), ProductClick.id.desc())
        .limit(limit)
        .all()
    )


__all__ = [
    "ASIN_RE",
    "NO_COMMISSION",
    "ClickInput",
    "TrackedClick",
    "OverrideResult",
    "ClickWithCommission",
    "is_valid_asin",
    "sanitize_amount",
    "parse_rate_percent",
    "track_click",
    "record_commission_override",
    "create_transaction_for_click",
    "update_transaction_status",
    "list_clicks",
    "list_transactions",
    "recent_clicks",
]
