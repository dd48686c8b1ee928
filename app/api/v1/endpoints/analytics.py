"""
Click analytics endpoints: public click tracking and the agent's own click history.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.orm import Session
import time
from app.api.deps import get_db, get_optional_user, require_role, get_pagination_params
from app.api.errors import http_error
from app.exceptions import StorefrontError
from app.models.db import User
from app.models.db.enums import UserRole
from app.models.schemas import ResponseBase, ClickTrack, ClickRead, ClickWithCommissionRead, Pagination
from app.services.commission_engine import ClickInput, ClickWithCommission, list_clicks, track_click
from app.utils import get_logger, log_business_event, log_performance

router = APIRouter()
logger = get_logger(__name__)

def serialize_click(row: ClickWithCommission) -> dict:
    data = ClickRead.model_validate(row.click).model_dump(mode="json")
    return ClickWithCommissionRead(
        **data,
        commission_status=row.commission_status,
        commission_amount=row.commission_amount,
        transaction_id=row.transaction_id,
    ).model_dump(mode="json")

@router.post(
    "/track-click",
    response_model=ResponseBase,
    status_code=status.HTTP_201_CREATED,
    summary="Track product click",
    description="Record a 'View on store' click from a guest or signed-in user and open any pending commission"
)
async def track_product_click(
    click_data: ClickTrack,
    request: Request,
    principal: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
) -> ResponseBase:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    logger.info(
        "Click tracking started",
        asin=click_data.asin,
        input_category=click_data.category,
        has_referral_code=bool(click_data.referral_code),
        user_id=principal.id if principal else None,
        request_id=request_id
    )

    try:
        tracked = track_click(
            db,
            ClickInput(
                asin=click_data.asin,
                product_name=click_data.product_name,
                category=click_data.category,
                price=click_data.price,
                image_url=click_data.image_url,
                product_url=click_data.product_url,
                referral_code=click_data.referral_code,
            ),
            principal,
        )

        log_business_event(
            event_type="click_tracked",
            details={
                "click_id": tracked.click.id,
                "asin": tracked.click.asin,
                "category": tracked.click.category,
                "matched_by": tracked.resolution.matched_by.value,
                "commission_rate": tracked.click.commission_rate,
                "agent_id": tracked.click.agent_id,
                "attribution_source": tracked.attribution.source if tracked.attribution else None,
            },
            user_id=principal.id if principal else None,
            request_id=request_id
        )
        if tracked.transaction is not None:
            log_business_event(
                event_type="commission_transaction_created",
                details={
                    "transaction_id": tracked.transaction.id,
                    "agent_id": tracked.transaction.user_id,
                    "amount": tracked.transaction.amount,
                    "click_id": tracked.click.id,
                },
                request_id=request_id
            )

        log_performance(
            operation="track_click",
            duration_ms=(time.time() - start_time) * 1000,
            additional_data={"click_id": tracked.click.id}
        )

        data = ClickRead.model_validate(tracked.click).model_dump(mode="json")
        data["transaction_id"] = tracked.transaction.id if tracked.transaction else None
        return ResponseBase(message="Click tracked successfully", data=data)

    except StorefrontError as e:
        logger.warning("Click tracking rejected", error=e.message, request_id=request_id)
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Click tracking failed",
            error=str(e),
            asin=click_data.asin,
            request_id=request_id,
            exc_info=True
        )
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to track click"
        )

@router.get(
    "/my-clicks",
    response_model=ResponseBase,
    summary="My attributed clicks",
    description="Clicks credited to the calling agent, with the commission status of each"
)
async def my_clicks(
    request: Request,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    commission_status: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    pagination: dict = Depends(get_pagination_params),
    current_user: User = Depends(require_role([UserRole.AGENT, UserRole.ADMIN])),
    db: Session = Depends(get_db)
) -> ResponseBase:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    try:
        rows, total = list_clicks(
            db,
            agent_id=current_user.id,
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
        operation="my_clicks",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"agent_id": current_user.id, "returned": len(rows), "request_id": request_id}
    )
    return ResponseBase(
        message="Agent clicks retrieved successfully",
        data={
            "clicks": [serialize_click(r) for r in rows],
            "pagination": Pagination.build(pagination["page"], pagination["limit"], total).model_dump(),
        },
    )
