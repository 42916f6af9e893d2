"""
Tests for tiered commission calculation.

Covers:
- Sale price tiers and their boundaries
- Accessories increments for new and used vehicles
- Warranty / maintenance profit steps and the zero floor
- Lenient parsing of form values
- Itemized form aggregation and the shared-sale split
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from commissiondesk.models import VehicleType
from commissiondesk.schemas.commission import (
    AccessoryItem,
    MaintenanceItem,
    SaleLineItems,
    SpiffItem,
    WarrantyItem,
    coerce_vehicle_type,
)
from commissiondesk.services.calculator import (
    aggregate_line_items,
    calculate_accessories_commission,
    calculate_commission,
    calculate_sale_commission,
    calculate_service_commission,
    calculate_shared_commission,
    calculate_warranty_commission,
    line_items_from_sale,
)
from commissiondesk.utils.money import round_currency, to_amount


# ── Sale price tiers ─────────────────────────────────────


class TestSaleCommission:
    @pytest.mark.parametrize(
        "price,expected",
        [
            ("30000", "500"),
            ("45000.50", "500"),
            ("29999.99", "400"),
            ("20000", "400"),
            ("19999.99", "300"),
            ("10000", "300"),
            ("9999.99", "200"),
            ("0.01", "200"),
            ("0", "0"),
        ],
    )
    def test_tiers(self, price, expected):
        assert calculate_sale_commission(Decimal(price)) == Decimal(expected)

    def test_missing_price_is_zero(self):
        assert calculate_sale_commission(None) == Decimal("0")

    def test_string_price_accepted(self):
        assert calculate_sale_commission("20000") == Decimal("400")


# ── Accessories ──────────────────────────────────────────


class TestAccessoriesCommission:
    def test_new_vehicle_break_even(self):
        """The first $998 on a new vehicle earns nothing."""
        assert calculate_accessories_commission(Decimal("998"), VehicleType.NEW) == Decimal("0")

    def test_new_vehicle_partial_increment(self):
        assert calculate_accessories_commission(Decimal("1995.99"), VehicleType.NEW) == Decimal("0")

    def test_new_vehicle_increments(self):
        assert calculate_accessories_commission(Decimal("1996"), VehicleType.NEW) == Decimal("100")
        assert calculate_accessories_commission(Decimal("2994"), VehicleType.NEW) == Decimal("200")

    def test_used_vehicle_no_threshold(self):
        assert calculate_accessories_commission(Decimal("850"), VehicleType.USED) == Decimal("100")
        assert calculate_accessories_commission(Decimal("849"), VehicleType.USED) == Decimal("0")
        assert calculate_accessories_commission(Decimal("1700"), VehicleType.USED) == Decimal("200")

    def test_unknown_vehicle_type_priced_as_used(self):
        assert calculate_accessories_commission(Decimal("850"), "demo") == Decimal("100")
        assert calculate_accessories_commission(Decimal("850"), None) == Decimal("100")

    def test_vehicle_type_string_is_case_insensitive(self):
        assert calculate_accessories_commission(Decimal("1996"), " NEW ") == Decimal("100")


# ── Warranty / maintenance profit ────────────────────────


class TestProfitCommission:
    def test_one_full_step(self):
        assert calculate_warranty_commission(Decimal("2000"), Decimal("1100")) == Decimal("100")

    def test_zero_profit(self):
        assert calculate_warranty_commission(Decimal("2000"), Decimal("2000")) == Decimal("0")

    def test_loss_never_negative(self):
        assert calculate_warranty_commission(Decimal("2000"), Decimal("2500")) == Decimal("0")

    def test_below_one_step(self):
        assert calculate_service_commission(Decimal("800"), Decimal("500")) == Decimal("0")

    def test_multiple_steps(self):
        assert calculate_service_commission(Decimal("3000"), Decimal("299")) == Decimal("300")


# ── Full breakdown ───────────────────────────────────────


class TestCalculateCommission:
    def test_reference_sale(self):
        breakdown = calculate_commission(
            sale_price=Decimal("25000"),
            vehicle_type=VehicleType.NEW,
            accessories_value=Decimal("1996"),
            warranty_selling_price=Decimal("1500"),
            warranty_cost=Decimal("600"),
            service_price=Decimal("800"),
            service_cost=Decimal("500"),
            spiff_amount=Decimal("150"),
        )

        assert breakdown.sale == Decimal("400")
        assert breakdown.accessories == Decimal("100")
        assert breakdown.warranty == Decimal("100")
        assert breakdown.service == Decimal("0")
        assert breakdown.spiff == Decimal("150")
        assert breakdown.total == Decimal("750")

    @pytest.mark.parametrize(
        "values",
        [
            {},
            {"sale_price": "31000", "vehicle_type": "used", "accessories_value": "5000"},
            {"sale_price": "12000.40", "vehicle_type": "new", "spiff_amount": "75.25"},
            {"warranty_selling_price": "4000", "warranty_cost": "100", "service_price": "2000"},
        ],
    )
    def test_total_is_sum_of_parts(self, values):
        b = calculate_commission(**values)
        assert b.total == b.sale + b.accessories + b.warranty + b.service + b.spiff

    def test_nan_price_is_zero(self):
        breakdown = calculate_commission(sale_price=float("nan"), vehicle_type="new")
        assert breakdown.sale == Decimal("0")
        assert breakdown.total == Decimal("0")

    def test_garbage_values_never_raise(self):
        breakdown = calculate_commission(
            sale_price="abc",
            accessories_value="",
            warranty_selling_price=None,
            warranty_cost="1,000",
            service_price=object(),
            spiff_amount="Infinity",
        )
        assert breakdown.total == Decimal("0")

    def test_huge_exponents_count_as_zero(self):
        breakdown = calculate_commission(
            sale_price="1e1000000",
            vehicle_type="new",
            accessories_value="1e1000000",
            warranty_selling_price="1e1000000",
            warranty_cost="1e1000000",
            service_price="1e1000000",
            service_cost="1e1000000",
            spiff_amount="1e1000000",
        )
        assert breakdown.total == Decimal("0")

    def test_largest_storable_amount_still_counts(self):
        breakdown = calculate_commission(vehicle_type="used", accessories_value="9999999999.99")
        assert breakdown.accessories == Decimal("1176470500")

    def test_negative_spiff_is_zero(self):
        assert calculate_commission(spiff_amount="-50").spiff == Decimal("0")

    def test_accepts_line_items_instance(self):
        items = SaleLineItems(sale_price="10000", vehicle_type="used")
        assert calculate_commission(items).total == Decimal("300")

    def test_reads_sale_row(self):
        sale = SimpleNamespace(
            sale_price=Decimal("20000.00"),
            vehicle_type=VehicleType.USED,
            accessories_value=Decimal("850.00"),
            warranty_selling_price=Decimal("0"),
            warranty_cost=Decimal("0"),
            service_price=Decimal("0"),
            service_cost=Decimal("0"),
            spiff_bonus=Decimal("25.00"),
        )
        breakdown = calculate_commission(line_items_from_sale(sale))
        assert breakdown.total == Decimal("525.00")


# ── Parsing helpers ──────────────────────────────────────


class TestParsing:
    def test_to_amount(self):
        assert to_amount("12.50") == Decimal("12.50")
        assert to_amount(0.1) == Decimal("0.1")
        assert to_amount(" 7 ") == Decimal("7")
        assert to_amount(None) == Decimal("0")
        assert to_amount(True) == Decimal("0")
        assert to_amount("-3") == Decimal("0")
        assert to_amount(float("inf")) == Decimal("0")
        assert to_amount("10000000000") == Decimal("0")
        assert to_amount(Decimal("1E+999999")) == Decimal("0")

    def test_round_currency_half_up(self):
        assert round_currency(Decimal("366.665")) == Decimal("366.67")
        assert round_currency(Decimal("0.005")) == Decimal("0.01")

    def test_coerce_vehicle_type(self):
        assert coerce_vehicle_type("new") == VehicleType.NEW
        assert coerce_vehicle_type(VehicleType.NEW) == VehicleType.NEW
        assert coerce_vehicle_type("certified") == VehicleType.USED


# ── Itemized form ────────────────────────────────────────


class TestAggregateLineItems:
    def test_sums_each_category(self):
        items = aggregate_line_items(
            sale_price="25000",
            vehicle_type="new",
            accessories=[AccessoryItem(price="1200"), AccessoryItem(price="796")],
            warranties=[WarrantyItem(selling_price="1500", cost="600")],
            maintenance=[MaintenanceItem(price="500", cost="300"), MaintenanceItem(price="300", cost="200")],
            spiffs=[SpiffItem(amount="100", comments="Month-end push"), SpiffItem(amount="50")],
        )

        assert items.accessories_value == Decimal("1996")
        assert items.service_price == Decimal("800")
        assert items.service_cost == Decimal("500")
        assert items.spiff_amount == Decimal("150")
        assert calculate_commission(items).total == Decimal("750")

    def test_loss_on_one_item_offsets_another(self):
        items = aggregate_line_items(
            warranties=[
                WarrantyItem(selling_price="2000", cost="1000"),
                WarrantyItem(selling_price="100", cost="300"),
            ],
        )
        assert calculate_commission(items).warranty == Decimal("0")

    def test_empty_form(self):
        items = aggregate_line_items()
        assert items.vehicle_type == VehicleType.USED
        assert calculate_commission(items).total == Decimal("0")

    def test_bad_item_amounts_count_as_zero(self):
        items = aggregate_line_items(accessories=[AccessoryItem(price="n/a"), AccessoryItem(price=None)])
        assert items.accessories_value == Decimal("0")


class TestSharedCommission:
    def test_shared_half(self):
        assert calculate_shared_commission(Decimal("1000"), True) == Decimal("500")

    def test_unshared_full(self):
        assert calculate_shared_commission(Decimal("733"), False) == Decimal("733")
