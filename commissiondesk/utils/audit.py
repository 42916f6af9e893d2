"""
Audit trail helpers.

Rows are added to the caller's session; whoever owns the transaction
commits them together with the change they describe.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.models.audit import AuditAction, AuditLog

SALE_TARGET = "sale"


async def log_action(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    target_id: Optional[int] = None,
    action_metadata: Optional[dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    target_type: str = SALE_TARGET,
) -> AuditLog:
    """
    Record who did what to which sale.

    Args:
        user_id: acting user (for ledger failures, the user whose save failed)
        target_id: sale id
        action_metadata: JSON-serializable details (amounts as strings)
    """
    entry = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        action_metadata=action_metadata,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry


def get_client_ip(request) -> Optional[str]:
    """Client address, preferring the proxy's X-Forwarded-For / X-Real-IP headers."""
    forwarded = request.headers.get("x-forwarded-for", "")
    client_ip, _, _ = forwarded.partition(",")
    if client_ip.strip():
        return client_ip.strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else None
