"""Commission API endpoints: calculator preview and ledger reads."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.auth.dependencies import get_current_user
from commissiondesk.db import get_db
from commissiondesk.models import UserProfile
from commissiondesk.schemas.commission import (
    CommissionEntryListResponse,
    CommissionEntryResponse,
    CommissionPreviewRequest,
    CommissionPreviewResponse,
    CommissionSummaryResponse,
)
from commissiondesk.services.calculator import (
    aggregate_line_items,
    calculate_commission,
    calculate_shared_commission,
)
from commissiondesk.services.reporting import get_commission_summary, list_commission_entries
from commissiondesk.utils.money import round_currency

router = APIRouter(prefix="/commissions", tags=["Commissions"])


def _resolve_user_filter(current_user: UserProfile, user_id: Optional[int]) -> Optional[int]:
    """Members only ever see their own rows."""
    if current_user.is_manager:
        return user_id

    if user_id is not None and user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return current_user.id


@router.post("/preview", response_model=CommissionPreviewResponse)
async def preview_commission(
    data: CommissionPreviewRequest,
    current_user: UserProfile = Depends(get_current_user),
):
    """
    Commission preview for an itemized sale form.

    Never fails on incomplete input: missing or malformed amounts count as 0.
    """
    items = aggregate_line_items(
        sale_price=data.sale_price,
        vehicle_type=data.vehicle_type,
        accessories=data.accessories,
        warranties=data.warranties,
        maintenance=data.maintenance,
        spiffs=data.spiffs,
    )
    breakdown = calculate_commission(items)

    return CommissionPreviewResponse(
        line_items=items,
        breakdown=breakdown,
        your_share=round_currency(calculate_shared_commission(breakdown.total, data.is_shared_sale)),
    )


@router.get("/entries", response_model=CommissionEntryListResponse)
async def get_entries(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
    user_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
):
    """Ledger rows, most recent sale first."""
    entries = await list_commission_entries(
        db,
        user_id=_resolve_user_filter(current_user, user_id),
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )

    return CommissionEntryListResponse(
        items=[CommissionEntryResponse.model_validate(entry) for entry in entries],
        total=len(entries),
    )


@router.get("/summary", response_model=CommissionSummaryResponse)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
    user_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    include_pending: bool = Query(False),
):
    """Commission totals for one salesperson (the caller by default)."""
    target_id = _resolve_user_filter(current_user, user_id) or current_user.id

    return await get_commission_summary(
        db,
        user_id=target_id,
        start_date=start_date,
        end_date=end_date,
        include_pending=include_pending,
    )
