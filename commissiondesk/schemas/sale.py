"""
Sale request/response schemas.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from commissiondesk.models.sale import SaleStatus, VehicleType
from commissiondesk.schemas.commission import CommissionBreakdown
from commissiondesk.utils.money import MAX_AMOUNT


class SaleCreate(BaseModel):
    """Submitted sale form. The caller becomes the primary salesperson."""

    stock_number: str = Field(..., min_length=1, max_length=50)
    customer_name: str = Field(..., min_length=1, max_length=255)
    vehicle_type: VehicleType
    sale_date: Optional[date] = None

    sale_price: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    accessories_value: Decimal = Field(Decimal("0"), ge=0, le=MAX_AMOUNT)
    warranty_selling_price: Decimal = Field(Decimal("0"), ge=0, le=MAX_AMOUNT)
    warranty_cost: Decimal = Field(Decimal("0"), ge=0, le=MAX_AMOUNT)
    service_price: Decimal = Field(Decimal("0"), ge=0, le=MAX_AMOUNT)
    service_cost: Decimal = Field(Decimal("0"), ge=0, le=MAX_AMOUNT)
    spiff_bonus: Decimal = Field(Decimal("0"), ge=0, le=MAX_AMOUNT)
    spiff_comments: Optional[str] = Field(None, max_length=2000)

    is_shared_sale: bool = False
    sales_partner_id: Optional[int] = None

    status: SaleStatus = SaleStatus.PENDING

    @model_validator(mode="after")
    def check_shared_sale(self) -> "SaleCreate":
        if self.is_shared_sale and self.sales_partner_id is None:
            raise ValueError("sales_partner_id is required for a shared sale")
        if not self.is_shared_sale:
            self.sales_partner_id = None
        return self


class SaleUpdate(BaseModel):
    """Partial sale edit. Unset fields keep their stored value."""

    stock_number: Optional[str] = Field(None, min_length=1, max_length=50)
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    vehicle_type: Optional[VehicleType] = None
    sale_date: Optional[date] = None

    sale_price: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    accessories_value: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    warranty_selling_price: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    warranty_cost: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    service_price: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    service_cost: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    spiff_bonus: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    spiff_comments: Optional[str] = Field(None, max_length=2000)

    is_shared_sale: Optional[bool] = None
    sales_partner_id: Optional[int] = None

    status: Optional[SaleStatus] = None


class SaleResponse(BaseModel):
    """Stored sale."""

    id: int
    stock_number: str
    customer_name: str
    vehicle_type: VehicleType
    sale_date: date

    sale_price: Decimal
    accessories_value: Decimal
    warranty_selling_price: Decimal
    warranty_cost: Decimal
    service_price: Decimal
    service_cost: Decimal
    spiff_bonus: Decimal
    spiff_comments: Optional[str]
    commission_total: Decimal

    salesperson_id: int
    is_shared_sale: bool
    sales_partner_id: Optional[int]
    status: SaleStatus

    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class SaleWriteResponse(BaseModel):
    """
    Result of a submit or edit.

    commission_warning is set when the sale was saved but its commission
    ledger rows could not be written; the sale then needs reconciliation.
    """

    sale: SaleResponse
    breakdown: CommissionBreakdown
    commission_entries: int = 0
    commission_warning: Optional[str] = None


class SaleDeleteResponse(BaseModel):
    success: bool
    sale_id: int
    commission_entries_removed: int = 0


class StockCheckResponse(BaseModel):
    """Double-claim check for a stock number."""

    stock_number: str
    has_conflict: bool
    warning: Optional[str] = None
    conflicting_sale_id: Optional[int] = None
    claimed_by_id: Optional[int] = None
    claimed_by_name: Optional[str] = None
    shared_sale_valid: bool = True
    message: Optional[str] = None
