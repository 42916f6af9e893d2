"""
Double-claim detection for stock numbers.

A stock number identifies one physical vehicle. If another salesperson has
already recorded it, the second claim is either a data-entry mistake or a
shared sale that should be recorded with the original claimant as partner.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from commissiondesk.models import Sale, normalize_stock_number

logger = logging.getLogger(__name__)


@dataclass
class DoubleClaimCheck:
    stock_number: str
    has_conflict: bool
    warning: Optional[str] = None
    conflicting_sale: Optional[Sale] = None


@dataclass
class SharedSaleValidation:
    is_valid: bool
    message: Optional[str] = None


async def find_stock_number_claims(
    db: AsyncSession,
    stock_number: str,
    exclude_sale_id: Optional[int] = None,
) -> List[Sale]:
    """All sales recorded under a stock number, with their salesperson loaded."""
    query = (
        select(Sale)
        .options(selectinload(Sale.salesperson))
        .where(Sale.stock_number == normalize_stock_number(stock_number))
    )
    if exclude_sale_id is not None:
        query = query.where(Sale.id != exclude_sale_id)

    result = await db.execute(query.order_by(Sale.created_at))
    return list(result.scalars().all())


async def check_for_double_claim(
    db: AsyncSession,
    stock_number: str,
    current_user_id: int,
    exclude_sale_id: Optional[int] = None,
) -> DoubleClaimCheck:
    """
    Look for another salesperson's claim on the same stock number.

    Claims by current_user_id are not conflicts (the user is editing or
    re-entering their own sale).
    """
    normalized = normalize_stock_number(stock_number)
    claims = await find_stock_number_claims(db, normalized, exclude_sale_id)

    conflicting = [sale for sale in claims if sale.salesperson_id != current_user_id]
    if not conflicting:
        return DoubleClaimCheck(stock_number=normalized, has_conflict=False)

    sale = conflicting[0]
    claimant = sale.salesperson.full_name if sale.salesperson else "another salesperson"
    logger.info(f"Stock number {normalized} already claimed by user {sale.salesperson_id} (sale {sale.id})")

    return DoubleClaimCheck(
        stock_number=normalized,
        has_conflict=True,
        warning=(
            f"Stock number {normalized} is already claimed by {claimant} "
            f"for customer {sale.customer_name}. Please verify this is a legitimate "
            f"shared sale or check the stock number."
        ),
        conflicting_sale=sale,
    )


def validate_shared_sale(
    is_shared_sale: bool,
    sales_partner_id: Optional[int],
    conflicting_sale: Optional[Sale],
) -> SharedSaleValidation:
    """A conflicting claim is only acceptable as a shared sale with the original claimant."""
    if conflicting_sale is None:
        return SharedSaleValidation(is_valid=True)

    if not is_shared_sale:
        return SharedSaleValidation(
            is_valid=False,
            message=(
                "This stock number is already claimed. If you shared this sale, ask to be added "
                "as sales partner on the existing sale; otherwise check the stock number."
            ),
        )

    if not sales_partner_id:
        return SharedSaleValidation(
            is_valid=False,
            message="Please select the sales partner for this shared sale.",
        )

    if sales_partner_id != conflicting_sale.salesperson_id:
        return SharedSaleValidation(
            is_valid=False,
            message="The selected sales partner does not match the original claimant of this stock number.",
        )

    # Stock numbers are unique, so the shared sale is the existing one, not a new submission
    return SharedSaleValidation(
        is_valid=True,
        message=(
            f"This vehicle is already recorded on sale #{conflicting_sale.id}. "
            f"Ask its salesperson or a manager to add you as sales partner on that sale "
            f"instead of submitting a new one."
        ),
    )
