"""
Seed test data for Commission Desk testing.

Usage:
    python scripts/seed_test_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_test_data.py

This script creates:
- Test salespeople and a manager profile (if not exist)
- Completed and pending sales, one of them shared
- Commission ledger rows for every sale (written by the sale flows)
"""

import asyncio
import os
import sys
from datetime import date, timedelta
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.db import get_db_context
from commissiondesk.models import Sale, SaleStatus, UserProfile, UserRole, VehicleType
from commissiondesk.schemas.sale import SaleCreate
from commissiondesk.services.sales import create_sale


# ===== TEST DATA =====

TEST_PROFILES = [
    {"email": "manager@example.com", "full_name": "Test Manager", "role": UserRole.MANAGER},
    {"email": "rep.one@example.com", "full_name": "Rep One", "role": UserRole.MEMBER},
    {"email": "rep.two@example.com", "full_name": "Rep Two", "role": UserRole.MEMBER},
]

TEST_SALES = [
    {
        "stock_number": "N24001",
        "customer_name": "Test Customer A",
        "vehicle_type": VehicleType.NEW,
        "sale_price": Decimal("25000"),
        "accessories_value": Decimal("1996"),
        "warranty_selling_price": Decimal("1500"),
        "warranty_cost": Decimal("600"),
        "service_price": Decimal("800"),
        "service_cost": Decimal("500"),
        "spiff_bonus": Decimal("150"),
        "status": SaleStatus.COMPLETED,
    },
    {
        "stock_number": "U24002",
        "customer_name": "Test Customer B",
        "vehicle_type": VehicleType.USED,
        "sale_price": Decimal("14500"),
        "accessories_value": Decimal("1700"),
        "status": SaleStatus.COMPLETED,
    },
    {
        "stock_number": "N24003",
        "customer_name": "Test Customer C",
        "vehicle_type": VehicleType.NEW,
        "sale_price": Decimal("38900"),
        "warranty_selling_price": Decimal("3200"),
        "warranty_cost": Decimal("1300"),
        "status": SaleStatus.COMPLETED,
        "shared": True,
    },
    {
        "stock_number": "U24004",
        "customer_name": "Test Customer D",
        "vehicle_type": VehicleType.USED,
        "sale_price": Decimal("8900"),
        "status": SaleStatus.PENDING,
    },
]


async def get_or_create_profile(db: AsyncSession, email: str, full_name: str, role: UserRole) -> UserProfile:
    """Find a profile by email or create it."""
    result = await db.execute(select(UserProfile).where(UserProfile.email == email))
    profile = result.scalar_one_or_none()

    if profile:
        print(f"Profile already exists: {email} (id={profile.id})")
        return profile

    profile = UserProfile(email=email, full_name=full_name, role=role)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    print(f"Created profile: {email} ({role.value})")
    return profile


async def create_test_sale(
    db: AsyncSession,
    salesperson: UserProfile,
    partner: UserProfile,
    days_ago: int,
    **values,
) -> None:
    """Record a sale through the normal submit flow."""
    shared = values.pop("shared", False)

    existing = await db.scalar(select(Sale.id).where(Sale.stock_number == values["stock_number"]))
    if existing:
        print(f"Sale {values['stock_number']} already exists (id={existing})")
        return

    data = SaleCreate(
        **values,
        sale_date=date.today() - timedelta(days=days_ago),
        is_shared_sale=shared,
        sales_partner_id=partner.id if shared else None,
    )
    result = await create_sale(db, data, salesperson)

    print(
        f"Created sale #{result.sale.id} {result.sale.stock_number}: "
        f"commission {result.breakdown.total}, {result.ledger.entries_written} ledger rows"
    )
    if result.warning:
        print(f"  WARNING: {result.warning}")


async def seed_all():
    """Seed all test data."""
    print("\nConnecting to database...")

    async with get_db_context() as db:
        print("\n=== Creating test data ===\n")

        profiles = [await get_or_create_profile(db, **p) for p in TEST_PROFILES]
        _, rep_one, rep_two = profiles

        print("\n--- Sales ---")
        for i, sale in enumerate(TEST_SALES):
            salesperson = rep_one if i % 2 == 0 else rep_two
            partner = rep_two if salesperson is rep_one else rep_one
            await create_test_sale(db, salesperson, partner, days_ago=i * 3, **dict(sale))

        print("\n" + "=" * 50)
        print("TEST DATA CREATED SUCCESSFULLY!")
        print("=" * 50)


if __name__ == "__main__":
    asyncio.run(seed_all())
