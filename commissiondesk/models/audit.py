"""
Audit trail of sale writes and ledger failures.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from commissiondesk.models.base import Base


class AuditAction(str, Enum):
    """What happened to a sale."""
    CREATE_SALE = "create_sale"
    UPDATE_SALE = "update_sale"
    DELETE_SALE = "delete_sale"
    LEDGER_FAILURE = "ledger_failure"  # Sale saved, commission rows not written


class AuditLog(Base):
    """
    One audited event.

    A manager reconciling commissions looks for LEDGER_FAILURE rows: their
    target sale exists but its ledger rows may be missing or stale.
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), index=True)
    action: Mapped[AuditAction] = mapped_column(
        SQLAlchemyEnum(AuditAction, values_callable=lambda x: [e.value for e in x]),
        index=True,
    )

    # Deleted sales keep their audit rows, so no FK on the target
    target_type: Mapped[Optional[str]] = mapped_column(String(50))
    target_id: Mapped[Optional[int]] = mapped_column(Integer, index=True)

    action_metadata: Mapped[Optional[dict]] = mapped_column(JSON)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog({self.action.value} {self.target_type}#{self.target_id} by user {self.user_id})>"
