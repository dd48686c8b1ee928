"""
Administrative endpoints: click report, commission overrides and ledger approvals.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.orm import Session
import time
from app.api.deps import get_db, require_admin, get_pagination_params
from app.api.errors import http_error
from app.exceptions import StorefrontError
from app.models.db import User
from app.models.db.enums import TransactionStatus, TransactionType
from app.models.schemas import (
    ResponseBase, ClickRead, CommissionOverride, Pagination,
    TransactionRead, TransactionStatusUpdate, TransactionForClick,
)
from app.services.commission_engine import (
    create_transaction_for_click,
    list_clicks,
    list_transactions,
    record_commission_override,
    update_transaction_status,
)
from app.api.v1.endpoints.analytics import serialize_click
from app.utils import get_logger, log_business_event, log_performance

router = APIRouter()
logger = get_logger(__name__)

@router.get(
    "/analytics/clicks",
    response_model=ResponseBase,
    summary="Click report",
    description="All tracked clicks with commission status; filter by category, agent, date range and status"
)
async def get_product_clicks(
    request: Request,
    category: Optional[str] = None,
    agent_id: Optional[int] = Query(None, alias="agentId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    commission_status: Optional[str] = Query(None, alias="status"),
    pagination: dict = Depends(get_pagination_params),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> ResponseBase:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    logger.info(
        "Click report requested",
        admin_id=admin.id,
        category=category,
        agent_id=agent_id,
        status=commission_status,
        request_id=request_id
    )
    try:
        rows, total = list_clicks(
            db,
            agent_id=agent_id,
            category=category,
            start_date=start_date,
            end_date=end_date,
            commission_status=commission_status,
            page=pagination["page"],
            limit=pagination["limit"],
        )
    except StorefrontError as e:
        raise http_error(e)

    log_performance(
        operation="get_product_clicks",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"returned": len(rows), "total": total}
    )
    return ResponseBase(
        message="Click data retrieved successfully",
        data={
            "clicks": [serialize_click(r) for r in rows],
            "pagination": Pagination.build(pagination["page"], pagination["limit"], total).model_dump(),
        },
    )

@router.put(
    "/analytics/clicks/{click_id}",
    response_model=ResponseBase,
    summary="Override click commission rate",
    description="Set a click's commission percentage and re-price its pending transaction"
)
async def update_click_commission(
    click_id: int,
    override: CommissionOverride,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> ResponseBase:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    try:
        result = record_commission_override(db, click_id, override.commission_rate)

        log_business_event(
            event_type="commission_rate_overridden",
            details={
                "click_id": click_id,
                "new_rate": result.click.commission_rate,
                "new_amount": result.new_amount,
                "transaction_id": result.transaction.id if result.transaction else None,
                "transaction_status": result.transaction.status.value if result.transaction else None,
            },
            user_id=admin.id,
            request_id=request_id
        )
        log_performance(
            operation="update_click_commission",
            duration_ms=(time.time() - start_time) * 1000,
            additional_data={"click_id": click_id}
        )
        return ResponseBase(
            message="Commission rate updated successfully",
            data={
                "click": ClickRead.model_validate(result.click).model_dump(mode="json"),
                "new_amount": result.new_amount,
                "transaction": (
                    TransactionRead.model_validate(result.transaction).model_dump(mode="json")
                    if result.transaction else None
                ),
            },
        )
    except StorefrontError as e:
        logger.warning("Commission override rejected", click_id=click_id, error=e.message, request_id=request_id)
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Commission override failed", click_id=click_id, error=str(e), request_id=request_id, exc_info=True)
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update commission rate"
        )

@router.get(
    "/transactions",
    response_model=ResponseBase,
    summary="List ledger transactions"
)
async def get_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    user_id: Optional[int] = Query(None, alias="userId"),
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    pagination: dict = Depends(get_pagination_params),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> ResponseBase:
    items, total = list_transactions(
        db,
        status=status_filter,
        user_id=user_id,
        transaction_type=transaction_type,
        page=pagination["page"],
        limit=pagination["limit"],
    )
    return ResponseBase(
        message="Transactions retrieved successfully",
        data={
            "transactions": [TransactionRead.model_validate(t).model_dump(mode="json") for t in items],
            "pagination": Pagination.build(pagination["page"], pagination["limit"], total).model_dump(),
        },
    )

@router.post(
    "/transactions/create-for-click",
    response_model=ResponseBase,
    status_code=status.HTTP_201_CREATED,
    summary="Create missing commission for a click"
)
async def create_for_click(
    body: TransactionForClick,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> ResponseBase:
    request_id = request.headers.get("X-Request-ID", "unknown")
    try:
        transaction = create_transaction_for_click(db, body.click_id)
    except StorefrontError as e:
        logger.warning("Commission backfill rejected", click_id=body.click_id, error=e.message, request_id=request_id)
        raise http_error(e)

    log_business_event(
        event_type="commission_transaction_created",
        details={
            "transaction_id": transaction.id,
            "agent_id": transaction.user_id,
            "amount": transaction.amount,
            "click_id": body.click_id,
            "manual": True,
        },
        user_id=admin.id,
        request_id=request_id
    )
    return ResponseBase(
        message="Transaction created successfully",
        data=TransactionRead.model_validate(transaction).model_dump(mode="json"),
    )

@router.put(
    "/transactions/{transaction_id}",
    response_model=ResponseBase,
    summary="Approve or fail a pending transaction",
    description="Only pending transactions may change; completing an earnings entry credits the agent's balance"
)
async def set_transaction_status(
    transaction_id: int,
    update: TransactionStatusUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> ResponseBase:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    try:
        transaction = update_transaction_status(db, transaction_id, update.status, update.notes)
    except StorefrontError as e:
        logger.warning(
            "Transaction status change rejected",
            transaction_id=transaction_id,
            requested_status=update.status.value,
            error=e.message,
            request_id=request_id
        )
        raise http_error(e)

    log_business_event(
        event_type="transaction_status_updated",
        details={
            "transaction_id": transaction.id,
            "status": transaction.status.value,
            "agent_id": transaction.user_id,
            "amount": transaction.amount,
        },
        user_id=admin.id,
        request_id=request_id
    )
    log_performance(
        operation="update_transaction_status",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"transaction_id": transaction.id}
    )
    return ResponseBase(
        message=f"Transaction marked {transaction.status.value}",
        data=TransactionRead.model_validate(transaction).model_dump(mode="json"),
    )
