"""
Sale model for recorded vehicle transactions.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commissiondesk.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from commissiondesk.models.user import UserProfile


class VehicleType(str, Enum):
    """Inventory class of the sold vehicle."""
    NEW = "new"
    USED = "used"


class SaleStatus(str, Enum):
    """Lifecycle status of a sale."""
    PENDING = "pending"      # Saved as draft
    COMPLETED = "completed"  # Submitted


def normalize_stock_number(value: str) -> str:
    """Stock numbers are compared and stored trimmed and uppercase."""
    return (value or "").strip().upper()


class Sale(Base, TimestampMixin):
    """
    One vehicle transaction and its commission-relevant line items.

    Commission ledger rows for a sale live in the commissions table and are
    managed by CommissionLedger; they are never edited through this model.
    """

    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(primary_key=True)
    stock_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )
    customer_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    sale_date: Mapped[date] = mapped_column(
        Date,
        default=date.today,
        server_default=func.current_date(),
        nullable=False,
        index=True,
    )
    vehicle_type: Mapped[VehicleType] = mapped_column(
        SQLAlchemyEnum(
            VehicleType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )

    # Line items
    sale_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    accessories_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    warranty_selling_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    warranty_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    service_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Maintenance package selling price",
    )
    service_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    spiff_bonus: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Manager-approved flat bonus",
    )
    spiff_comments: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Calculator total at last save
    commission_total: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )

    # Attribution
    salesperson_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id"),
        nullable=False,
        index=True,
    )
    is_shared_sale: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    sales_partner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("user_profiles.id"),
        nullable=True,
        index=True,
    )

    status: Mapped[SaleStatus] = mapped_column(
        SQLAlchemyEnum(
            SaleStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=SaleStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Relationships
    salesperson: Mapped["UserProfile"] = relationship(
        "UserProfile",
        foreign_keys=[salesperson_id],
    )
    sales_partner: Mapped[Optional["UserProfile"]] = relationship(
        "UserProfile",
        foreign_keys=[sales_partner_id],
    )

    def __repr__(self) -> str:
        return f"<Sale(id={self.id}, stock_number='{self.stock_number}', total={self.commission_total})>"
