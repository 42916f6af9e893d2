"""
Commission ledger model.

One row per beneficiary per sale. Sale fields are copied onto each row so
reporting reads never have to join back to the sales table.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from commissiondesk.models.base import Base
from commissiondesk.models.sale import SaleStatus, VehicleType


class CommissionRole(str, Enum):
    """Beneficiary role on a sale."""
    PRIMARY = "primary"
    PARTNER = "partner"


class CommissionEntry(Base):
    """
    Ledger entry for one beneficiary's share of a sale's commission.

    The set of rows for a sale_id is owned by CommissionLedger and is
    always replaced as a whole.
    """

    __tablename__ = "commissions"

    id: Mapped[int] = mapped_column(primary_key=True)
    sale_id: Mapped[int] = mapped_column(
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id"),
        nullable=False,
        index=True,
    )
    role: Mapped[CommissionRole] = mapped_column(
        SQLAlchemyEnum(
            CommissionRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )

    # Denormalized sale snapshot
    sale_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        index=True,
    )
    stock_number: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    customer_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    vehicle_type: Mapped[Optional[VehicleType]] = mapped_column(
        SQLAlchemyEnum(
            VehicleType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )
    status: Mapped[Optional[SaleStatus]] = mapped_column(
        SQLAlchemyEnum(
            SaleStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )
    salesperson_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("user_profiles.id"),
        nullable=True,
    )
    sales_partner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("user_profiles.id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<CommissionEntry(id={self.id}, sale_id={self.sale_id}, "
            f"user_id={self.user_id}, role={self.role}, amount={self.amount})>"
        )
