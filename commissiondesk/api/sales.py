"""Sale API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.auth.dependencies import get_current_user
from commissiondesk.db import get_db
from commissiondesk.models import UserProfile
from commissiondesk.schemas.sale import (
    SaleCreate,
    SaleDeleteResponse,
    SaleResponse,
    SaleUpdate,
    SaleWriteResponse,
    StockCheckResponse,
)
from commissiondesk.services.double_claim import check_for_double_claim, validate_shared_sale
from commissiondesk.services.sales import (
    SaleError,
    SaleOperationResult,
    create_sale,
    delete_sale,
    get_sale,
    update_sale,
)
from commissiondesk.utils.audit import get_client_ip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["Sales"])


def _http_error(error: SaleError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


def _write_response(result: SaleOperationResult) -> SaleWriteResponse:
    return SaleWriteResponse(
        sale=SaleResponse.model_validate(result.sale),
        breakdown=result.breakdown,
        commission_entries=result.ledger.entries_written,
        commission_warning=result.warning,
    )


@router.get("/check-stock/{stock_number}", response_model=StockCheckResponse)
async def check_stock_number(
    stock_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
    exclude_sale_id: Optional[int] = Query(None),
    is_shared_sale: bool = Query(False),
    sales_partner_id: Optional[int] = Query(None),
):
    """
    Check whether another salesperson already claimed a stock number.

    With is_shared_sale / sales_partner_id, also reports whether the claim
    would be a valid shared sale with the original claimant.
    """
    check = await check_for_double_claim(db, stock_number, current_user.id, exclude_sale_id)
    validation = validate_shared_sale(is_shared_sale, sales_partner_id, check.conflicting_sale)

    conflicting = check.conflicting_sale
    return StockCheckResponse(
        stock_number=check.stock_number,
        has_conflict=check.has_conflict,
        warning=check.warning,
        conflicting_sale_id=conflicting.id if conflicting else None,
        claimed_by_id=conflicting.salesperson_id if conflicting else None,
        claimed_by_name=(
            conflicting.salesperson.full_name
            if conflicting and conflicting.salesperson
            else None
        ),
        shared_sale_valid=validation.is_valid,
        message=validation.message,
    )


@router.post("", response_model=SaleWriteResponse, status_code=status.HTTP_201_CREATED)
async def submit_sale(
    request: Request,
    data: SaleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
):
    """
    Record a sale for the current user and write its commission rows.

    A 201 with commission_warning set means the sale was saved but its
    commission rows were not.
    """
    try:
        result = await create_sale(db, data, current_user, ip_address=get_client_ip(request))
    except SaleError as e:
        raise _http_error(e)

    return _write_response(result)


@router.get("/{sale_id}", response_model=SaleResponse)
async def read_sale(
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
):
    """Get one sale."""
    try:
        sale = await get_sale(db, sale_id, current_user)
    except SaleError as e:
        raise _http_error(e)

    return SaleResponse.model_validate(sale)


@router.put("/{sale_id}", response_model=SaleWriteResponse)
async def edit_sale(
    request: Request,
    sale_id: int,
    data: SaleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
):
    """Edit a sale; its commission rows are rebuilt from the new values."""
    try:
        result = await update_sale(db, sale_id, data, current_user, ip_address=get_client_ip(request))
    except SaleError as e:
        raise _http_error(e)

    return _write_response(result)


@router.delete("/{sale_id}", response_model=SaleDeleteResponse)
async def remove_sale(
    request: Request,
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
):
    """Delete a sale and its commission rows."""
    try:
        result = await delete_sale(db, sale_id, current_user, ip_address=get_client_ip(request))
    except SaleError as e:
        raise _http_error(e)

    if not result.deleted:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.error or "Failed to delete sale",
        )

    return SaleDeleteResponse(
        success=True,
        sale_id=sale_id,
        commission_entries_removed=result.ledger.entries_deleted,
    )
