"""Pydantic schemas for request/response validation."""

from commissiondesk.schemas.commission import (
    AccessoryItem,
    CommissionBreakdown,
    CommissionEntryListResponse,
    CommissionEntryResponse,
    CommissionPreviewRequest,
    CommissionPreviewResponse,
    CommissionSummaryResponse,
    LeaderboardResponse,
    LeaderboardRow,
    MaintenanceItem,
    SaleLineItems,
    SpiffItem,
    WarrantyItem,
)
from commissiondesk.schemas.sale import (
    SaleCreate,
    SaleDeleteResponse,
    SaleResponse,
    SaleUpdate,
    SaleWriteResponse,
    StockCheckResponse,
)

__all__ = [
    # Commission
    "SaleLineItems",
    "CommissionBreakdown",
    "AccessoryItem",
    "WarrantyItem",
    "MaintenanceItem",
    "SpiffItem",
    "CommissionPreviewRequest",
    "CommissionPreviewResponse",
    "CommissionEntryResponse",
    "CommissionEntryListResponse",
    "CommissionSummaryResponse",
    "LeaderboardRow",
    "LeaderboardResponse",
    # Sale
    "SaleCreate",
    "SaleUpdate",
    "SaleResponse",
    "SaleWriteResponse",
    "SaleDeleteResponse",
    "StockCheckResponse",
]
