"""
Database models for Commission Desk.

All models are exported here for convenient imports:
    from commissiondesk.models import Sale, CommissionEntry, etc.
"""

from commissiondesk.models.audit import AuditAction, AuditLog
from commissiondesk.models.base import Base, TimestampMixin
from commissiondesk.models.commission import CommissionEntry, CommissionRole
from commissiondesk.models.sale import Sale, SaleStatus, VehicleType, normalize_stock_number
from commissiondesk.models.user import UserProfile, UserRole

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # User
    "UserProfile",
    "UserRole",
    # Sale
    "Sale",
    "SaleStatus",
    "VehicleType",
    "normalize_stock_number",
    # Ledger
    "CommissionEntry",
    "CommissionRole",
    # Audit
    "AuditLog",
    "AuditAction",
]
