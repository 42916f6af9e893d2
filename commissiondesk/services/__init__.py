"""Business logic services."""

from commissiondesk.services.calculator import calculate_commission
from commissiondesk.services.ledger import CommissionLedger, LedgerResult, SqlCommissionStore
from commissiondesk.services.sales import create_sale, delete_sale, update_sale

__all__ = [
    "calculate_commission",
    "CommissionLedger",
    "LedgerResult",
    "SqlCommissionStore",
    "create_sale",
    "update_sale",
    "delete_sale",
]
