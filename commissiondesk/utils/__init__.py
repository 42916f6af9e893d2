"""Utility functions."""

from commissiondesk.utils.audit import get_client_ip, log_action
from commissiondesk.utils.money import round_currency, to_amount

__all__ = [
    "get_client_ip",
    "log_action",
    "round_currency",
    "to_amount",
]
