"""
Tiered commission calculation for vehicle sales.

Rules:
- Sale: flat amount by sale price tier (500 / 400 / 300 / 200)
- Accessories: $100 per full increment above a threshold
  (new: increments of $998 above $998, used: increments of $850)
- Warranty and maintenance: $100 per full $900 of profit, never negative
- SPIFF: manager-approved bonus, added as-is

Every submit, edit and preview goes through calculate_commission so that
totals cannot drift between call sites.
"""

from decimal import ROUND_FLOOR, Decimal
from typing import Any, Iterable, Optional

from commissiondesk.config import settings
from commissiondesk.models.sale import VehicleType
from commissiondesk.schemas.commission import (
    AccessoryItem,
    CommissionBreakdown,
    MaintenanceItem,
    SaleLineItems,
    SpiffItem,
    WarrantyItem,
    coerce_vehicle_type,
)
from commissiondesk.utils.money import ZERO, to_amount

# Sale price tiers, highest first: (minimum price, commission)
SALE_TIERS = (
    (Decimal("30000"), Decimal("500")),
    (Decimal("20000"), Decimal("400")),
    (Decimal("10000"), Decimal("300")),
)
SALE_FLOOR_COMMISSION = Decimal("200")  # any price above 0

NEW_ACCESSORIES_STEP = Decimal("998")
USED_ACCESSORIES_STEP = Decimal("850")
PROFIT_STEP = Decimal("900")
STEP_COMMISSION = Decimal("100")


def _full_steps(value: Decimal, step: Decimal) -> Decimal:
    """Number of whole steps in value (floor division, also for negatives)."""
    return (value / step).to_integral_value(rounding=ROUND_FLOOR)


def calculate_sale_commission(sale_price: Any) -> Decimal:
    """Base commission for the vehicle itself. Tier boundaries belong to the higher tier."""
    price = to_amount(sale_price)

    for threshold, commission in SALE_TIERS:
        if price >= threshold:
            return commission
    if price > 0:
        return SALE_FLOOR_COMMISSION
    return ZERO


def calculate_accessories_commission(accessories_value: Any, vehicle_type: Any) -> Decimal:
    """
    Accessories commission.

    New vehicles only earn past the $998 break-even point; used vehicles
    earn from the first dollar.
    """
    value = to_amount(accessories_value)
    if coerce_vehicle_type(vehicle_type) == VehicleType.NEW:
        if value > NEW_ACCESSORIES_STEP:
            return _full_steps(value - NEW_ACCESSORIES_STEP, NEW_ACCESSORIES_STEP) * STEP_COMMISSION
        return ZERO

    return _full_steps(value, USED_ACCESSORIES_STEP) * STEP_COMMISSION


def calculate_profit_commission(selling_price: Any, cost: Any) -> Decimal:
    """$100 per full $900 of profit. A loss earns nothing."""
    profit = to_amount(selling_price) - to_amount(cost)
    return max(ZERO, _full_steps(profit, PROFIT_STEP) * STEP_COMMISSION)


def calculate_warranty_commission(warranty_selling_price: Any, warranty_cost: Any) -> Decimal:
    return calculate_profit_commission(warranty_selling_price, warranty_cost)


def calculate_service_commission(service_price: Any, service_cost: Any) -> Decimal:
    return calculate_profit_commission(service_price, service_cost)


def calculate_commission(items: Optional[SaleLineItems] = None, **values: Any) -> CommissionBreakdown:
    """
    Calculate the full commission breakdown of a sale.

    Accepts either a SaleLineItems instance or its fields as keyword
    arguments; missing or malformed values count as 0.

    Returns:
        CommissionBreakdown whose total is the exact sum of the categories
    """
    if items is None:
        items = SaleLineItems(**values)

    sale = calculate_sale_commission(items.sale_price)
    accessories = calculate_accessories_commission(items.accessories_value, items.vehicle_type)
    warranty = calculate_warranty_commission(items.warranty_selling_price, items.warranty_cost)
    service = calculate_service_commission(items.service_price, items.service_cost)
    spiff = items.spiff_amount

    return CommissionBreakdown(
        sale=sale,
        accessories=accessories,
        warranty=warranty,
        service=service,
        spiff=spiff,
        total=sale + accessories + warranty + service + spiff,
    )


def calculate_shared_commission(total_commission: Any, is_shared_sale: bool) -> Decimal:
    """Amount one beneficiary receives before ledger rounding."""
    total = to_amount(total_commission)
    if is_shared_sale:
        return total * settings.shared_sale_split
    return total


def aggregate_line_items(
    sale_price: Any = None,
    vehicle_type: Any = None,
    accessories: Iterable[AccessoryItem] = (),
    warranties: Iterable[WarrantyItem] = (),
    maintenance: Iterable[MaintenanceItem] = (),
    spiffs: Iterable[SpiffItem] = (),
) -> SaleLineItems:
    """
    Collapse an itemized sale form into the per-sale totals the rules use.

    Warranty and maintenance profit is computed on the summed prices and
    costs, so a loss on one item offsets profit on another.
    """
    accessories = list(accessories)
    warranties = list(warranties)
    maintenance = list(maintenance)
    spiffs = list(spiffs)

    return SaleLineItems(
        sale_price=sale_price,
        vehicle_type=vehicle_type,
        accessories_value=sum((item.price for item in accessories), ZERO),
        warranty_selling_price=sum((item.selling_price for item in warranties), ZERO),
        warranty_cost=sum((item.cost for item in warranties), ZERO),
        service_price=sum((item.price for item in maintenance), ZERO),
        service_cost=sum((item.cost for item in maintenance), ZERO),
        spiff_amount=sum((item.amount for item in spiffs), ZERO),
    )


def line_items_from_sale(sale: Any) -> SaleLineItems:
    """Read the commission inputs off a Sale row (or any object with the same fields)."""
    return SaleLineItems(
        sale_price=sale.sale_price,
        vehicle_type=sale.vehicle_type,
        accessories_value=sale.accessories_value,
        warranty_selling_price=sale.warranty_selling_price,
        warranty_cost=sale.warranty_cost,
        service_price=sale.service_price,
        service_cost=sale.service_cost,
        spiff_amount=sale.spiff_bonus,
    )
