"""
Tests for commission ledger write-through.

Covers:
- Row fan-out for shared and unshared sales
- Replace idempotence and delete
- Snapshot fields copied onto rows
- Failure classification with a failing store
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from commissiondesk.models import CommissionEntry, CommissionRole, SaleStatus, VehicleType
from commissiondesk.services.ledger import (
    CommissionLedger,
    LedgerErrorKind,
    SaleSnapshot,
    SqlCommissionStore,
    build_entry_rows,
)


async def _rows(db, sale_id):
    result = await db.execute(
        select(CommissionEntry)
        .where(CommissionEntry.sale_id == sale_id)
        .order_by(CommissionEntry.role)
    )
    return list(result.scalars().all())


def _snapshot(**kwargs):
    defaults = {
        "sale_date": date(2026, 3, 14),
        "stock_number": "N1001",
        "customer_name": "Alex Kim",
        "vehicle_type": VehicleType.NEW,
        "status": SaleStatus.COMPLETED,
        "salesperson_id": 1,
        "sales_partner_id": None,
    }
    defaults.update(kwargs)
    return SaleSnapshot(**defaults)


def _failing_store(**side_effects):
    store = AsyncMock()
    store.read_sale_snapshot.return_value = _snapshot()
    store.insert_entries.return_value = 1
    store.delete_entries.return_value = 0
    for name, effect in side_effects.items():
        getattr(store, name).side_effect = effect
    return store


# ── Row building ─────────────────────────────────────────


class TestBuildEntryRows:
    def test_unshared_single_primary_row(self):
        rows = build_entry_rows(5, 1, None, Decimal("733"), False, _snapshot())
        assert len(rows) == 1
        assert rows[0]["role"] == CommissionRole.PRIMARY
        assert rows[0]["amount"] == Decimal("733.00")
        assert rows[0]["stock_number"] == "N1001"

    def test_shared_split_rounds_each_side(self):
        rows = build_entry_rows(5, 1, 2, Decimal("733.33"), True, _snapshot())
        assert [row["amount"] for row in rows] == [Decimal("366.67"), Decimal("366.67")]
        assert {row["user_id"] for row in rows} == {1, 2}

    def test_shared_flag_without_partner_is_unshared(self):
        rows = build_entry_rows(5, 1, None, Decimal("100"), True, _snapshot())
        assert len(rows) == 1
        assert rows[0]["amount"] == Decimal("100.00")


# ── Ledger against the database ──────────────────────────


class TestLedgerWrites:
    async def test_unshared_sale_one_row(self, db_session, stored_sale, salesperson):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        result = await ledger.create(stored_sale.id, salesperson.id, None, Decimal("733"), False)
        await db_session.commit()

        assert result.success
        assert result.entries_written == 1
        rows = await _rows(db_session, stored_sale.id)
        assert len(rows) == 1
        assert rows[0].role == CommissionRole.PRIMARY
        assert rows[0].amount == Decimal("733.00")
        assert rows[0].user_id == salesperson.id

    async def test_rows_carry_sale_snapshot(self, db_session, stored_sale, salesperson):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        await ledger.create(stored_sale.id, salesperson.id, None, Decimal("400"), False)
        await db_session.commit()

        row = (await _rows(db_session, stored_sale.id))[0]
        assert row.stock_number == "N1001"
        assert row.customer_name == "Alex Kim"
        assert row.sale_date == date(2026, 3, 14)
        assert row.vehicle_type == VehicleType.NEW
        assert row.status == SaleStatus.COMPLETED
        assert row.salesperson_id == salesperson.id

    async def test_shared_replace_then_delete(self, db_session, stored_sale, salesperson, partner):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        result = await ledger.replace(stored_sale.id, salesperson.id, partner.id, Decimal("1000"), True)
        await db_session.commit()

        assert result.success
        rows = await _rows(db_session, stored_sale.id)
        assert len(rows) == 2
        assert {row.role for row in rows} == {CommissionRole.PRIMARY, CommissionRole.PARTNER}
        assert all(row.amount == Decimal("500.00") for row in rows)

        deleted = await ledger.delete_for_sale(stored_sale.id)
        await db_session.commit()

        assert deleted.success
        assert deleted.entries_deleted == 2
        assert await _rows(db_session, stored_sale.id) == []

    async def test_replace_is_idempotent(self, db_session, stored_sale, salesperson, partner):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        await ledger.replace(stored_sale.id, salesperson.id, partner.id, Decimal("900"), True)
        await db_session.commit()
        second = await ledger.replace(stored_sale.id, salesperson.id, partner.id, Decimal("900"), True)
        await db_session.commit()

        assert second.entries_deleted == 2
        rows = await _rows(db_session, stored_sale.id)
        assert len(rows) == 2
        assert sorted((row.user_id, row.amount) for row in rows) == sorted(
            [(salesperson.id, Decimal("450.00")), (partner.id, Decimal("450.00"))]
        )

    async def test_replace_shared_to_unshared(self, db_session, stored_sale, salesperson, partner):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        await ledger.create(stored_sale.id, salesperson.id, partner.id, Decimal("600"), True)
        await db_session.commit()
        await ledger.replace(stored_sale.id, salesperson.id, None, Decimal("650"), False)
        await db_session.commit()

        rows = await _rows(db_session, stored_sale.id)
        assert len(rows) == 1
        assert rows[0].amount == Decimal("650.00")

    async def test_create_for_missing_sale(self, db_session, salesperson):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        result = await ledger.create(9999, salesperson.id, None, Decimal("100"), False)

        assert not result.success
        assert result.error_kind == LedgerErrorKind.SNAPSHOT_READ

    async def test_delete_without_rows(self, db_session, stored_sale):
        ledger = CommissionLedger(SqlCommissionStore(db_session))

        result = await ledger.delete_for_sale(stored_sale.id)

        assert result.success
        assert result.entries_deleted == 0


# ── Failure classification ───────────────────────────────


class TestLedgerFailures:
    @pytest.mark.parametrize("sale_id,primary_id", [(None, 1), (0, 1), (5, None)])
    async def test_missing_identifiers(self, sale_id, primary_id):
        store = _failing_store()
        ledger = CommissionLedger(store)

        for result in (
            await ledger.create(sale_id, primary_id, None, Decimal("100"), False),
            await ledger.replace(sale_id, primary_id, None, Decimal("100"), False),
        ):
            assert not result.success
            assert result.error_kind == LedgerErrorKind.VALIDATION

        store.read_sale_snapshot.assert_not_called()
        store.delete_entries.assert_not_called()
        store.insert_entries.assert_not_called()

    async def test_delete_missing_sale_id(self):
        store = _failing_store()
        result = await CommissionLedger(store).delete_for_sale(None)
        assert result.error_kind == LedgerErrorKind.VALIDATION
        store.delete_entries.assert_not_called()

    async def test_snapshot_read_error_writes_nothing(self):
        store = _failing_store(read_sale_snapshot=SQLAlchemyError("connection reset"))

        result = await CommissionLedger(store).create(5, 1, None, Decimal("100"), False)

        assert result.error_kind == LedgerErrorKind.SNAPSHOT_READ
        assert "connection reset" in result.error
        store.insert_entries.assert_not_called()

    async def test_insert_error(self):
        store = _failing_store(insert_entries=SQLAlchemyError("constraint"))

        result = await CommissionLedger(store).create(5, 1, 2, Decimal("100"), True)

        assert result.error_kind == LedgerErrorKind.PERSISTENCE_WRITE
        assert result.entries_written == 0

    async def test_replace_delete_error_skips_create(self):
        store = _failing_store(delete_entries=SQLAlchemyError("locked"))

        result = await CommissionLedger(store).replace(5, 1, None, Decimal("100"), False)

        assert result.error_kind == LedgerErrorKind.PERSISTENCE_WRITE
        store.read_sale_snapshot.assert_not_called()
        store.insert_entries.assert_not_called()

    async def test_delete_for_sale_error(self):
        store = _failing_store(delete_entries=SQLAlchemyError("locked"))

        result = await CommissionLedger(store).delete_for_sale(5)

        assert not result.success
        assert result.error_kind == LedgerErrorKind.PERSISTENCE_WRITE

    async def test_insert_receives_both_shares(self):
        store = _failing_store()
        store.insert_entries.return_value = 2

        result = await CommissionLedger(store).create(5, 1, 2, Decimal("1000"), True)

        assert result.entries_written == 2
        rows = store.insert_entries.call_args.args[0]
        assert [(row["user_id"], row["amount"]) for row in rows] == [
            (1, Decimal("500.00")),
            (2, Decimal("500.00")),
        ]
