"""
Commission schemas: calculator input/output and ledger read models.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, computed_field, field_validator

from commissiondesk.models.commission import CommissionRole
from commissiondesk.models.sale import SaleStatus, VehicleType
from commissiondesk.utils.money import ZERO, to_amount


def coerce_vehicle_type(value: Any) -> VehicleType:
    """Normalize a form vehicle type; anything not explicitly "new" is priced as used."""
    if isinstance(value, VehicleType):
        return value
    if isinstance(value, str) and value.strip().lower() == VehicleType.NEW.value:
        return VehicleType.NEW
    return VehicleType.USED


class SaleLineItems(BaseModel):
    """
    Commission-relevant values of one sale.

    Numeric fields default to 0 and never fail validation: bad values are
    coerced to 0 so a half-filled draft can still be previewed.
    """

    sale_price: Decimal = ZERO
    vehicle_type: VehicleType = VehicleType.USED
    accessories_value: Decimal = ZERO
    warranty_selling_price: Decimal = ZERO
    warranty_cost: Decimal = ZERO
    service_price: Decimal = ZERO
    service_cost: Decimal = ZERO
    spiff_amount: Decimal = ZERO

    @field_validator(
        "sale_price",
        "accessories_value",
        "warranty_selling_price",
        "warranty_cost",
        "service_price",
        "service_cost",
        "spiff_amount",
        mode="before",
    )
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return to_amount(v)

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def normalize_vehicle_type(cls, v: Any) -> VehicleType:
        return coerce_vehicle_type(v)


class CommissionBreakdown(BaseModel):
    """Per-category commission and the total (sum of all categories)."""

    sale: Decimal = ZERO
    accessories: Decimal = ZERO
    warranty: Decimal = ZERO
    service: Decimal = ZERO
    spiff: Decimal = ZERO
    total: Decimal = ZERO


# ── Itemized preview ─────────────────────────────────────


# Lenient amount for form line items
Amount = Annotated[Decimal, BeforeValidator(to_amount)]


class AccessoryItem(BaseModel):
    price: Amount = ZERO


class WarrantyItem(BaseModel):
    selling_price: Amount = ZERO
    cost: Amount = ZERO


class MaintenanceItem(BaseModel):
    price: Amount = ZERO
    cost: Amount = ZERO


class SpiffItem(BaseModel):
    amount: Amount = ZERO
    comments: Optional[str] = Field(None, max_length=500)


class CommissionPreviewRequest(BaseModel):
    """Itemized sale form, as entered before submission."""

    sale_price: Any = None
    vehicle_type: Any = None
    accessories: List[AccessoryItem] = Field(default_factory=list)
    warranties: List[WarrantyItem] = Field(default_factory=list)
    maintenance: List[MaintenanceItem] = Field(default_factory=list)
    spiffs: List[SpiffItem] = Field(default_factory=list)
    is_shared_sale: bool = False


class CommissionPreviewResponse(BaseModel):
    """Calculator output for a preview, plus the caller's share."""

    line_items: SaleLineItems
    breakdown: CommissionBreakdown
    your_share: Decimal


# ── Ledger reads ─────────────────────────────────────────


class CommissionEntryResponse(BaseModel):
    """One ledger row with its denormalized sale fields."""

    id: int
    sale_id: int
    user_id: int
    role: CommissionRole
    amount: Decimal
    sale_date: Optional[date]
    stock_number: Optional[str]
    customer_name: Optional[str]
    vehicle_type: Optional[VehicleType]
    status: Optional[SaleStatus]
    salesperson_id: Optional[int]
    sales_partner_id: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def is_shared_sale(self) -> bool:
        return self.sales_partner_id is not None


class CommissionEntryListResponse(BaseModel):
    items: List[CommissionEntryResponse]
    total: int


class CommissionSummaryResponse(BaseModel):
    """Per-user commission totals over a date range."""

    user_id: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_commissions: Decimal
    total_sales: int
    shared_sales: int
    new_cars_sold: int
    used_cars_sold: int


class LeaderboardRow(BaseModel):
    """One salesperson's standing in the team comparison."""

    rank: int
    user_id: int
    full_name: Optional[str]
    total_commissions: Decimal
    sales_count: int
    avg_commission: Decimal


class LeaderboardResponse(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rows: List[LeaderboardRow]
