"""
Commission reporting reads.

Everything here reads the commissions table only; the denormalized sale
fields on each row make joins back to sales unnecessary.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.models import (
    CommissionEntry,
    SaleStatus,
    UserProfile,
    VehicleType,
)
from commissiondesk.schemas.commission import (
    CommissionSummaryResponse,
    LeaderboardRow,
)
from commissiondesk.services.ledger import SqlCommissionStore
from commissiondesk.utils.money import round_currency

logger = logging.getLogger(__name__)


def _date_filters(query, start_date: Optional[date], end_date: Optional[date]):
    if start_date:
        query = query.where(CommissionEntry.sale_date >= start_date)
    if end_date:
        query = query.where(CommissionEntry.sale_date <= end_date)
    return query


async def list_commission_entries(
    db: AsyncSession,
    user_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[CommissionEntry]:
    """Ledger rows, most recent sale first. user_id=None lists every salesperson."""
    store = SqlCommissionStore(db)
    return await store.list_entries(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )


async def get_commission_summary(
    db: AsyncSession,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_pending: bool = False,
) -> CommissionSummaryResponse:
    """
    Commission totals for one salesperson.

    Only completed sales count unless include_pending is set; drafts have
    ledger rows but are not yet earned.
    """
    query = select(
        func.coalesce(func.sum(CommissionEntry.amount), Decimal("0")).label("total_commissions"),
        func.count(func.distinct(CommissionEntry.sale_id)).label("total_sales"),
        func.count(func.distinct(
            case((CommissionEntry.sales_partner_id.is_not(None), CommissionEntry.sale_id))
        )).label("shared_sales"),
        func.count(func.distinct(
            case((CommissionEntry.vehicle_type == VehicleType.NEW, CommissionEntry.sale_id))
        )).label("new_cars_sold"),
        func.count(func.distinct(
            case((CommissionEntry.vehicle_type == VehicleType.USED, CommissionEntry.sale_id))
        )).label("used_cars_sold"),
    ).where(CommissionEntry.user_id == user_id)

    if not include_pending:
        query = query.where(CommissionEntry.status == SaleStatus.COMPLETED)

    query = _date_filters(query, start_date, end_date)

    row = (await db.execute(query)).one()

    return CommissionSummaryResponse(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        total_commissions=round_currency(Decimal(row.total_commissions or 0)),
        total_sales=row.total_sales or 0,
        shared_sales=row.shared_sales or 0,
        new_cars_sold=row.new_cars_sold or 0,
        used_cars_sold=row.used_cars_sold or 0,
    )


async def get_team_leaderboard(
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_pending: bool = False,
    limit: Optional[int] = None,
) -> List[LeaderboardRow]:
    """Salespeople ranked by commission earned in the period."""
    total = func.coalesce(func.sum(CommissionEntry.amount), Decimal("0")).label("total_commissions")
    sales_count = func.count(func.distinct(CommissionEntry.sale_id)).label("sales_count")

    query = (
        select(CommissionEntry.user_id, UserProfile.full_name, total, sales_count)
        .join(UserProfile, UserProfile.id == CommissionEntry.user_id, isouter=True)
        .group_by(CommissionEntry.user_id, UserProfile.full_name)
        .order_by(total.desc(), CommissionEntry.user_id)
    )

    if not include_pending:
        query = query.where(CommissionEntry.status == SaleStatus.COMPLETED)

    query = _date_filters(query, start_date, end_date)

    if limit:
        query = query.limit(limit)

    result = await db.execute(query)

    rows = []
    for rank, row in enumerate(result.all(), start=1):
        earned = round_currency(Decimal(row.total_commissions or 0))
        count = row.sales_count or 0
        rows.append(
            LeaderboardRow(
                rank=rank,
                user_id=row.user_id,
                full_name=row.full_name,
                total_commissions=earned,
                sales_count=count,
                avg_commission=round_currency(earned / count) if count else Decimal("0.00"),
            )
        )

    logger.debug(f"Leaderboard built with {len(rows)} salespeople")
    return rows
