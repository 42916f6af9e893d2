"""
Sale submit / edit / delete flows.

Each flow runs the calculator, persists the sale, then hands the total to
the commission ledger:

1. Validate attribution (shared flag, partner) and the stock number
2. Compute the commission breakdown
3. Commit the sale
4. Create or replace the ledger rows in a second commit

The sale and its ledger rows are not written in one transaction. When the
ledger step fails the sale stays saved, the failure is audited, and the
result carries a warning for the caller to surface.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.models import (
    AuditAction,
    Sale,
    UserProfile,
    normalize_stock_number,
)
from commissiondesk.schemas.commission import CommissionBreakdown
from commissiondesk.schemas.sale import SaleCreate, SaleUpdate
from commissiondesk.services.calculator import calculate_commission, line_items_from_sale
from commissiondesk.services.ledger import (
    CommissionLedger,
    LedgerErrorKind,
    LedgerResult,
    SqlCommissionStore,
)
from commissiondesk.utils.audit import log_action

logger = logging.getLogger(__name__)

LEDGER_WARNING = "Sale saved, but commission records failed. The sale needs to be re-saved or reconciled by a manager."


class SaleError(Exception):
    """Sale could not be saved. Nothing was persisted."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SaleNotFoundError(SaleError):
    status_code = 404


class SalePermissionError(SaleError):
    status_code = 403


class SaleConflictError(SaleError):
    """Stock number already claimed by another sale."""

    status_code = 409


@dataclass
class SaleOperationResult:
    """Outcome of a submit or edit where the sale itself was saved."""

    sale: Sale
    breakdown: CommissionBreakdown
    ledger: LedgerResult

    @property
    def ledger_ok(self) -> bool:
        return self.ledger.success

    @property
    def warning(self) -> Optional[str]:
        if self.ledger.success:
            return None
        return f"{LEDGER_WARNING} ({self.ledger.error})"


@dataclass
class SaleDeleteResult:
    """Outcome of a delete. On failure neither the sale nor its rows were removed."""

    deleted: bool
    sale_id: int
    ledger: LedgerResult
    error: Optional[str] = None


def can_edit_sale(sale: Sale, user: UserProfile) -> bool:
    """Managers edit anything; members edit sales they are attributed on."""
    if user.is_manager:
        return True
    return user.id in (sale.salesperson_id, sale.sales_partner_id)


def can_delete_sale(sale: Sale, user: UserProfile) -> bool:
    """Managers delete anything; members only their own sales."""
    return user.is_manager or sale.salesperson_id == user.id


async def _check_stock_number(
    db: AsyncSession,
    stock_number: str,
    exclude_sale_id: Optional[int] = None,
) -> None:
    query = select(Sale.id).where(Sale.stock_number == stock_number)
    if exclude_sale_id is not None:
        query = query.where(Sale.id != exclude_sale_id)

    existing = await db.scalar(query.limit(1))
    if existing is not None:
        raise SaleConflictError(f"Stock number {stock_number} is already recorded on sale #{existing}")


async def _check_attribution(
    db: AsyncSession,
    salesperson_id: int,
    is_shared: bool,
    partner_id: Optional[int],
) -> Optional[int]:
    """Validate the shared-sale configuration. Returns the partner id to store."""
    if not is_shared:
        return None

    if partner_id is None:
        raise SaleError("Please select a sales partner for a shared sale")

    if partner_id == salesperson_id:
        raise SaleError("A sale cannot be shared with its own salesperson")

    partner = await db.get(UserProfile, partner_id)
    if not partner or not partner.is_active:
        raise SaleError("Invalid sales partner")

    return partner_id


async def _settle_ledger(
    db: AsyncSession,
    sale: Sale,
    result: LedgerResult,
    user_id: int,
    ip_address: Optional[str],
) -> LedgerResult:
    """Commit successful ledger writes; roll back and audit failed ones."""
    sale_id = sale.id

    if result.success:
        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to commit commission rows for sale {sale_id}: {e}")
            result = LedgerResult.failure(
                LedgerErrorKind.PERSISTENCE_WRITE,
                f"Failed to commit commission records: {e}",
            )

    if not result.success:
        await db.rollback()
        logger.error(
            f"Sale {sale_id} saved without consistent commission rows "
            f"({result.error_kind.value}): {result.error}"
        )
        await log_action(
            db=db,
            user_id=user_id,
            action=AuditAction.LEDGER_FAILURE,
            target_id=sale_id,
            action_metadata={
                "error_kind": result.error_kind.value,
                "error": result.error,
            },
            ip_address=ip_address,
        )
        await db.commit()

    await db.refresh(sale)
    return result


async def create_sale(
    db: AsyncSession,
    data: SaleCreate,
    salesperson: UserProfile,
    ip_address: Optional[str] = None,
) -> SaleOperationResult:
    """
    Record a new sale for the given salesperson and write its ledger rows.

    Raises:
        SaleError: attribution or stock number problems; nothing persisted
    """
    stock_number = normalize_stock_number(data.stock_number)
    if not stock_number:
        raise SaleError("Stock number is required")

    partner_id = await _check_attribution(
        db, salesperson.id, data.is_shared_sale, data.sales_partner_id
    )
    await _check_stock_number(db, stock_number)

    values = data.model_dump(exclude={"stock_number", "sales_partner_id", "sale_date"})
    sale = Sale(
        **values,
        stock_number=stock_number,
        sales_partner_id=partner_id,
        salesperson_id=salesperson.id,
    )
    if data.sale_date:
        sale.sale_date = data.sale_date

    breakdown = calculate_commission(line_items_from_sale(sale))
    sale.commission_total = breakdown.total

    db.add(sale)
    try:
        await db.flush()
        await log_action(
            db=db,
            user_id=salesperson.id,
            action=AuditAction.CREATE_SALE,
            target_id=sale.id,
            action_metadata={
                "stock_number": stock_number,
                "commission_total": str(breakdown.total),
                "is_shared_sale": sale.is_shared_sale,
            },
            ip_address=ip_address,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise SaleConflictError(f"Stock number {stock_number} is already recorded")

    logger.info(f"Sale {sale.id} ({stock_number}) created by user {salesperson.id}, commission {breakdown.total}")

    ledger = CommissionLedger(SqlCommissionStore(db))
    result = await ledger.create(
        sale.id,
        sale.salesperson_id,
        sale.sales_partner_id,
        breakdown.total,
        sale.is_shared_sale,
    )
    result = await _settle_ledger(db, sale, result, salesperson.id, ip_address)

    return SaleOperationResult(sale=sale, breakdown=breakdown, ledger=result)


async def get_sale(db: AsyncSession, sale_id: int, current_user: UserProfile) -> Sale:
    """Load a sale the user may see."""
    sale = await db.get(Sale, sale_id)
    if not sale:
        raise SaleNotFoundError(f"Sale #{sale_id} not found")

    if not can_edit_sale(sale, current_user):
        raise SalePermissionError("Access denied")

    return sale


async def update_sale(
    db: AsyncSession,
    sale_id: int,
    data: SaleUpdate,
    current_user: UserProfile,
    ip_address: Optional[str] = None,
) -> SaleOperationResult:
    """
    Apply an edit, recompute the commission and replace the ledger rows.

    The primary salesperson never changes on edit.

    Raises:
        SaleError: not found, not permitted, or invalid; nothing persisted
    """
    sale = await get_sale(db, sale_id, current_user)

    changes = data.model_dump(exclude_unset=True)

    if "stock_number" in changes:
        changes["stock_number"] = normalize_stock_number(changes["stock_number"])
        if not changes["stock_number"]:
            raise SaleError("Stock number is required")
        if changes["stock_number"] != sale.stock_number:
            await _check_stock_number(db, changes["stock_number"], exclude_sale_id=sale.id)

    if "is_shared_sale" in changes or "sales_partner_id" in changes:
        is_shared = changes.get("is_shared_sale")
        if is_shared is None:
            is_shared = sale.is_shared_sale
        partner_id = changes.get("sales_partner_id", sale.sales_partner_id)
        changes["is_shared_sale"] = is_shared
        changes["sales_partner_id"] = await _check_attribution(
            db, sale.salesperson_id, is_shared, partner_id
        )

    # Nulls in a partial edit mean "unchanged" for required fields
    for field, value in changes.items():
        if value is None and field not in ("sales_partner_id", "spiff_comments"):
            continue
        setattr(sale, field, value)

    breakdown = calculate_commission(line_items_from_sale(sale))
    sale.commission_total = breakdown.total

    try:
        await log_action(
            db=db,
            user_id=current_user.id,
            action=AuditAction.UPDATE_SALE,
            target_id=sale.id,
            action_metadata={
                "fields": sorted(k for k in data.model_dump(exclude_unset=True)),
                "commission_total": str(breakdown.total),
            },
            ip_address=ip_address,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise SaleConflictError("Stock number is already recorded on another sale")

    logger.info(f"Sale {sale.id} updated by user {current_user.id}, commission {breakdown.total}")

    ledger = CommissionLedger(SqlCommissionStore(db))
    result = await ledger.replace(
        sale.id,
        sale.salesperson_id,
        sale.sales_partner_id,
        breakdown.total,
        sale.is_shared_sale,
    )
    result = await _settle_ledger(db, sale, result, current_user.id, ip_address)

    return SaleOperationResult(sale=sale, breakdown=breakdown, ledger=result)


async def delete_sale(
    db: AsyncSession,
    sale_id: int,
    current_user: UserProfile,
    ip_address: Optional[str] = None,
) -> SaleDeleteResult:
    """
    Delete a sale together with its ledger rows.

    Both deletes are committed together; if either fails, both are rolled
    back and no orphaned ledger rows are left behind.

    Raises:
        SaleError: not found or not permitted
    """
    sale = await db.get(Sale, sale_id)
    if not sale:
        raise SaleNotFoundError(f"Sale #{sale_id} not found")

    if not can_delete_sale(sale, current_user):
        raise SalePermissionError("Only the salesperson or a manager can delete this sale")

    stock_number = sale.stock_number

    ledger = CommissionLedger(SqlCommissionStore(db))
    result = await ledger.delete_for_sale(sale_id)
    if not result.success:
        await db.rollback()
        return SaleDeleteResult(deleted=False, sale_id=sale_id, ledger=result, error=result.error)

    try:
        await db.delete(sale)
        await log_action(
            db=db,
            user_id=current_user.id,
            action=AuditAction.DELETE_SALE,
            target_id=sale_id,
            action_metadata={
                "stock_number": stock_number,
                "commission_rows_removed": result.entries_deleted,
            },
            ip_address=ip_address,
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to delete sale {sale_id}: {e}")
        return SaleDeleteResult(
            deleted=False,
            sale_id=sale_id,
            ledger=LedgerResult.failure(LedgerErrorKind.PERSISTENCE_WRITE, str(e)),
            error=f"Failed to delete sale: {e}",
        )

    logger.info(f"Sale {sale_id} ({stock_number}) deleted by user {current_user.id}")
    return SaleDeleteResult(deleted=True, sale_id=sale_id, ledger=result)
