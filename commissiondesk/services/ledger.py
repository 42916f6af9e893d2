"""
Commission ledger management.

A sale's commission is written as one ledger row per beneficiary:
- unshared sale: one primary row carrying the full total
- shared sale: a primary row and a partner row, each round(total * 0.5, 2)

The row set for a sale is always written, replaced or removed as a unit.
Ledger operations return a LedgerResult instead of raising for expected
failures, so callers can tell "sale saved, commission failed" apart from a
failed save.

The store never commits. The caller owns the transaction, which lets
replace() delete and re-insert inside one commit.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.config import settings
from commissiondesk.models import CommissionEntry, CommissionRole, Sale, SaleStatus, VehicleType
from commissiondesk.utils.money import round_currency, to_amount

logger = logging.getLogger(__name__)


class LedgerErrorKind(str, Enum):
    """Why a ledger operation failed."""
    VALIDATION = "validation_error"            # Missing identifiers, nothing attempted
    SNAPSHOT_READ = "snapshot_read_error"      # Sale could not be read, nothing written
    PERSISTENCE_WRITE = "persistence_write_error"  # Insert or delete failed


@dataclass
class LedgerResult:
    """Outcome of a ledger operation."""

    success: bool
    error_kind: Optional[LedgerErrorKind] = None
    error: Optional[str] = None
    entries_written: int = 0
    entries_deleted: int = 0

    @classmethod
    def ok(cls, entries_written: int = 0, entries_deleted: int = 0) -> "LedgerResult":
        return cls(success=True, entries_written=entries_written, entries_deleted=entries_deleted)

    @classmethod
    def failure(cls, kind: LedgerErrorKind, error: str, entries_deleted: int = 0) -> "LedgerResult":
        return cls(success=False, error_kind=kind, error=error, entries_deleted=entries_deleted)


@dataclass
class SaleSnapshot:
    """Sale fields copied onto every ledger row."""

    sale_date: Optional[date]
    stock_number: Optional[str]
    customer_name: Optional[str]
    vehicle_type: Optional[VehicleType]
    status: Optional[SaleStatus]
    salesperson_id: Optional[int]
    sales_partner_id: Optional[int]

    def as_row_fields(self) -> dict[str, Any]:
        return {
            "sale_date": self.sale_date,
            "stock_number": self.stock_number,
            "customer_name": self.customer_name,
            "vehicle_type": self.vehicle_type,
            "status": self.status,
            "salesperson_id": self.salesperson_id,
            "sales_partner_id": self.sales_partner_id,
        }


class CommissionStore(Protocol):
    """Persistence operations the ledger needs."""

    async def read_sale_snapshot(self, sale_id: int) -> Optional[SaleSnapshot]:
        ...

    async def insert_entries(self, rows: Sequence[dict[str, Any]]) -> int:
        ...

    async def delete_entries(self, sale_id: int) -> int:
        ...

    async def list_entries(
        self,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[CommissionEntry]:
        ...


class SqlCommissionStore:
    """CommissionStore on an AsyncSession. Flushes, never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def read_sale_snapshot(self, sale_id: int) -> Optional[SaleSnapshot]:
        result = await self.db.execute(
            select(
                Sale.sale_date,
                Sale.stock_number,
                Sale.customer_name,
                Sale.vehicle_type,
                Sale.status,
                Sale.salesperson_id,
                Sale.sales_partner_id,
            ).where(Sale.id == sale_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return SaleSnapshot(**row._asdict())

    async def insert_entries(self, rows: Sequence[dict[str, Any]]) -> int:
        entries = [CommissionEntry(**row) for row in rows]
        self.db.add_all(entries)
        await self.db.flush()
        return len(entries)

    async def delete_entries(self, sale_id: int) -> int:
        result = await self.db.execute(
            delete(CommissionEntry).where(CommissionEntry.sale_id == sale_id)
        )
        return result.rowcount or 0

    async def list_entries(
        self,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[CommissionEntry]:
        query = select(CommissionEntry)

        if user_id is not None:
            query = query.where(CommissionEntry.user_id == user_id)

        if start_date:
            query = query.where(CommissionEntry.sale_date >= start_date)

        if end_date:
            query = query.where(CommissionEntry.sale_date <= end_date)

        query = query.order_by(
            CommissionEntry.sale_date.desc(),
            CommissionEntry.created_at.desc(),
            CommissionEntry.id.desc(),
        )

        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())


def build_entry_rows(
    sale_id: int,
    primary_id: int,
    partner_id: Optional[int],
    total: Any,
    is_shared: bool,
    snapshot: SaleSnapshot,
    split: Decimal = Decimal("0.5"),
) -> List[dict[str, Any]]:
    """
    Ledger rows for one sale.

    Each side of a shared sale is rounded independently, so the two rows
    may differ from the total by a cent.
    """
    amount = to_amount(total)
    base = {"sale_id": sale_id, **snapshot.as_row_fields()}

    if is_shared and partner_id:
        share = round_currency(amount * split)
        return [
            {**base, "user_id": primary_id, "role": CommissionRole.PRIMARY, "amount": share},
            {**base, "user_id": partner_id, "role": CommissionRole.PARTNER, "amount": share},
        ]

    return [
        {**base, "user_id": primary_id, "role": CommissionRole.PRIMARY, "amount": round_currency(amount)},
    ]


class CommissionLedger:
    """
    Keeps the commission rows of a sale consistent with the sale.

    Usage:
        ledger = CommissionLedger(SqlCommissionStore(db))
        result = await ledger.create(sale.id, sale.salesperson_id, None, breakdown.total, False)
    """

    def __init__(self, store: CommissionStore, split: Optional[Decimal] = None):
        self.store = store
        self.split = split if split is not None else settings.shared_sale_split

    @staticmethod
    def _validate(sale_id: Optional[int], primary_id: Optional[int]) -> Optional[LedgerResult]:
        if not sale_id or not primary_id:
            return LedgerResult.failure(
                LedgerErrorKind.VALIDATION,
                "Missing sale_id or salesperson_id",
            )
        return None

    async def create(
        self,
        sale_id: Optional[int],
        primary_id: Optional[int],
        partner_id: Optional[int],
        total: Any,
        is_shared: bool,
    ) -> LedgerResult:
        """
        Write the ledger rows for a sale.

        Reads the sale snapshot first; if that fails nothing is inserted.
        """
        invalid = self._validate(sale_id, primary_id)
        if invalid:
            return invalid

        try:
            snapshot = await self.store.read_sale_snapshot(sale_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read sale {sale_id} for commission write-through: {e}")
            return LedgerResult.failure(
                LedgerErrorKind.SNAPSHOT_READ,
                f"Failed to read sale for commission write-through: {e}",
            )

        if snapshot is None:
            logger.warning(f"Sale {sale_id} not found, no commission rows written")
            return LedgerResult.failure(
                LedgerErrorKind.SNAPSHOT_READ,
                f"Sale {sale_id} not found",
            )

        rows = build_entry_rows(
            sale_id,
            primary_id,
            partner_id,
            total,
            is_shared,
            snapshot,
            split=self.split,
        )

        try:
            written = await self.store.insert_entries(rows)
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert commission rows for sale {sale_id}: {e}")
            return LedgerResult.failure(
                LedgerErrorKind.PERSISTENCE_WRITE,
                f"Failed to create commission records: {e}",
            )

        logger.info(
            f"Commission rows written for sale {sale_id}: "
            + ", ".join(f"{row['role'].value}={row['amount']}" for row in rows)
        )
        return LedgerResult.ok(entries_written=written)

    async def replace(
        self,
        sale_id: Optional[int],
        primary_id: Optional[int],
        partner_id: Optional[int],
        total: Any,
        is_shared: bool,
    ) -> LedgerResult:
        """
        Rebuild the ledger rows of an edited sale.

        Deletes every existing row for the sale, then creates the new set.
        Shared status, partner and total may all have changed, so the rows
        are recreated rather than diffed. Repeating the call with the same
        arguments yields the same rows.
        """
        invalid = self._validate(sale_id, primary_id)
        if invalid:
            return invalid

        try:
            deleted = await self.store.delete_entries(sale_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete commission rows for sale {sale_id}: {e}")
            return LedgerResult.failure(
                LedgerErrorKind.PERSISTENCE_WRITE,
                f"Failed to delete existing commission records: {e}",
            )

        result = await self.create(sale_id, primary_id, partner_id, total, is_shared)
        result.entries_deleted = deleted
        return result

    async def delete_for_sale(self, sale_id: Optional[int]) -> LedgerResult:
        """Remove every ledger row of a sale."""
        if not sale_id:
            return LedgerResult.failure(LedgerErrorKind.VALIDATION, "Missing sale_id")

        try:
            deleted = await self.store.delete_entries(sale_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete commission rows for sale {sale_id}: {e}")
            return LedgerResult.failure(
                LedgerErrorKind.PERSISTENCE_WRITE,
                f"Failed to delete commission records: {e}",
            )

        logger.info(f"Removed {deleted} commission rows for sale {sale_id}")
        return LedgerResult.ok(entries_deleted=deleted)
