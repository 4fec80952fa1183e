"""Tests for the invoice amount rules (no database)."""

import pytest

from shopledger.core.entities import (
    Invoice,
    InvoiceModification,
    ModificationType,
    ReturnedItem,
    ReturnLine,
    Sale,
    SaleItem,
    round_money,
)
from shopledger.core.exceptions import (
    OverReturnError,
    SaleItemNotFoundError,
    ValidationError,
)
from shopledger.core.services.reconciliation import (
    ModificationDetails,
    baseline_amount,
    compute_new_amount,
    effective_amount,
    plan_return,
    replay_modifications,
    validate_details,
    validate_reason,
)


def _sale() -> Sale:
    return Sale(
        id="sale-1",
        shop_id="acme",
        customer_name="Dana",
        total_amount=2500.0,
        items=[
            SaleItem(id="it-phone", product_id="p1", product_name="Phone", quantity=2, price_at_sale=1000.0),
            SaleItem(id="it-case", product_id="p2", product_name="Case", quantity=1, price_at_sale=500.0),
        ],
    )


def _invoice(**overrides) -> Invoice:
    data = {
        "shop_id": "acme",
        "sale_id": "sale-1",
        "invoice_number": "250101-ACME-000001",
        "customer_name": "Dana",
    }
    data.update(overrides)
    return Invoice(**data)


def _modification(kind: ModificationType, amount: float, returned=None) -> InvoiceModification:
    return InvoiceModification(
        invoice_id="inv-1",
        shop_id="acme",
        modification_type=kind,
        new_amount=amount,
        reason="test",
        modified_by="clerk-1",
        returned_items=returned,
    )


class TestEffectiveAmount:
    def test_unmodified_uses_sale_total(self):
        assert effective_amount(_invoice(), 2500.0) == 2500.0

    def test_modified_uses_new_total(self):
        invoice = _invoice(is_modified=True, new_total_amount=1800.0)
        assert effective_amount(invoice, 2500.0) == 1800.0

    def test_modified_to_zero_is_respected(self):
        invoice = _invoice(is_modified=True, new_total_amount=0.0)
        assert effective_amount(invoice, 2500.0) == 0.0

    def test_modified_without_amount_falls_back(self):
        invoice = _invoice(is_modified=True, new_total_amount=None)
        assert effective_amount(invoice, 2500.0) == 2500.0

    def test_baseline_uses_sale(self):
        assert baseline_amount(_invoice(), _sale()) == 2500.0

    def test_entity_property_matches(self):
        invoice = _invoice(is_modified=True, new_total_amount=10.0, sale_total_amount=99.0)
        assert invoice.effective_amount == 10.0
        assert _invoice(sale_total_amount=99.0).effective_amount == 99.0


class TestValidation:
    def test_reason_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_reason("   ")
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_reason_is_stripped(self):
        assert validate_reason("  damaged ") == "damaged"

    def test_return_needs_items(self):
        with pytest.raises(ValidationError):
            validate_details(ModificationType.RETURN, ModificationDetails())

    def test_return_rejects_duplicate_items(self):
        details = ModificationDetails(
            items=[ReturnLine(item_id="a", quantity=1), ReturnLine(item_id="a", quantity=1)]
        )
        with pytest.raises(ValidationError):
            validate_details(ModificationType.RETURN, details)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_return_rejects_non_positive_quantity(self, quantity):
        details = ModificationDetails(items=[ReturnLine(item_id="a", quantity=quantity)])
        with pytest.raises(ValidationError):
            validate_details(ModificationType.RETURN, details)

    def test_price_needs_amount(self):
        with pytest.raises(ValidationError):
            validate_details(ModificationType.PRICE, None)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            validate_details(ModificationType.OTHER, ModificationDetails(new_amount=-1))

    def test_zero_amount_allowed(self):
        details = validate_details(ModificationType.PRICE, ModificationDetails(new_amount=0))
        assert details.new_amount == 0

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_amount_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            validate_details(ModificationType.PRICE, ModificationDetails(new_amount=amount))
        assert exc_info.value.details["field"] == "new_amount"


class TestPlanReturn:
    def test_prices_at_sale_time(self):
        value, breakdown = plan_return(_sale(), [ReturnLine(item_id="it-phone", quantity=1)])

        assert value == 1000.0
        assert breakdown == [
            ReturnedItem(
                item_id="it-phone",
                name="Phone",
                quantity=1,
                remaining_quantity=1,
                unit_price=1000.0,
            )
        ]

    def test_unknown_item(self):
        with pytest.raises(SaleItemNotFoundError):
            plan_return(_sale(), [ReturnLine(item_id="nope", quantity=1)])

    def test_over_return(self):
        with pytest.raises(OverReturnError) as exc_info:
            plan_return(_sale(), [ReturnLine(item_id="it-phone", quantity=3)])
        assert exc_info.value.details["remaining"] == 2

    def test_fully_returned_item_rejects_more(self):
        sale = _sale()
        sale.items[1].returned_quantity = 1
        with pytest.raises(OverReturnError):
            plan_return(sale, [ReturnLine(item_id="it-case", quantity=1)])


class TestComputeNewAmount:
    def test_price_replaces(self):
        assert compute_new_amount(ModificationType.PRICE, 2500.0, 400.0) == 400.0

    def test_return_subtracts(self):
        assert compute_new_amount(ModificationType.RETURN, 2500.0, returned_value=1000.0) == 1500.0

    def test_return_clamps_at_zero(self):
        assert compute_new_amount(ModificationType.RETURN, 300.0, returned_value=500.0) == 0.0

    def test_return_composes_on_price_change(self):
        after_price = compute_new_amount(ModificationType.PRICE, 2500.0, 2000.0)
        assert compute_new_amount(ModificationType.RETURN, after_price, returned_value=500.0) == 1500.0

    def test_price_is_rounded_to_cents(self):
        assert compute_new_amount(ModificationType.PRICE, 10.0, 19.999) == 20.0


class TestFractionalPrices:
    """Cent prices do not leave float residue once everything is returned."""

    def _sale(self) -> Sale:
        items = [
            SaleItem(id="it-a", product_id="p1", product_name="Sticker", quantity=1, price_at_sale=0.1),
            SaleItem(id="it-b", product_id="p2", product_name="Pin", quantity=1, price_at_sale=0.2),
        ]
        return Sale(
            id="sale-2",
            shop_id="acme",
            customer_name="Dana",
            total_amount=round_money(sum(item.line_total for item in items)),
            items=items,
        )

    def test_sale_total_is_exact(self):
        assert self._sale().total_amount == 0.3

    def test_returning_everything_reaches_zero(self):
        sale = self._sale()
        amount = sale.total_amount
        log = []
        for item_id in ("it-a", "it-b"):
            value, breakdown = plan_return(sale, [ReturnLine(item_id=item_id, quantity=1)])
            amount = compute_new_amount(ModificationType.RETURN, amount, returned_value=value)
            log.append(_modification(ModificationType.RETURN, amount, breakdown))

        assert amount == 0.0
        assert replay_modifications(sale.total_amount, log) == 0.0

    def test_partial_return_leaves_exact_remainder(self):
        value, _ = plan_return(self._sale(), [ReturnLine(item_id="it-a", quantity=1)])
        assert compute_new_amount(ModificationType.RETURN, 0.3, returned_value=value) == 0.2


class TestReplay:
    def test_no_modifications(self):
        assert replay_modifications(2500.0, []) == 2500.0

    def test_replay_matches_stored_amounts(self):
        phone_return = [ReturnedItem(item_id="it-phone", name="Phone", quantity=1, remaining_quantity=1, unit_price=1000.0)]
        case_return = [ReturnedItem(item_id="it-case", name="Case", quantity=1, remaining_quantity=0, unit_price=500.0)]
        log = [
            _modification(ModificationType.RETURN, 1500.0, phone_return),
            _modification(ModificationType.RETURN, 1000.0, case_return),
            _modification(ModificationType.PRICE, 400.0),
        ]

        assert replay_modifications(2500.0, log) == log[-1].new_amount
