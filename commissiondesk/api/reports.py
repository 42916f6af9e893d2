"""Manager reporting endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.auth.dependencies import require_manager
from commissiondesk.db import get_db
from commissiondesk.models import UserProfile
from commissiondesk.schemas.commission import LeaderboardResponse
from commissiondesk.services.reporting import get_team_leaderboard

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(require_manager),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    include_pending: bool = Query(False),
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Team comparison by commission earned."""
    rows = await get_team_leaderboard(
        db,
        start_date=start_date,
        end_date=end_date,
        include_pending=include_pending,
        limit=limit,
    )
    return LeaderboardResponse(start_date=start_date, end_date=end_date, rows=rows)
