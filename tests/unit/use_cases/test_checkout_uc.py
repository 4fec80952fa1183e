"""Tests for CheckoutUseCase with mocked stores."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from shopledger.application.dto.requests import CartLine, CheckoutRequest
from shopledger.application.use_cases.checkout import CheckoutResult, CheckoutUseCase
from shopledger.core.entities import (
    EntityType,
    InvoiceCreated,
    Product,
    Sale,
    SaleItem,
    TenantContext,
)
from shopledger.core.exceptions import (
    AuthorizationError,
    InvoiceCreationFailedError,
    ProductNotFoundError,
    ValidationError,
)

TENANT = TenantContext(shop_id="acme", actor_id="clerk-1")


@pytest.fixture
def products() -> dict[str, Product]:
    return {
        "phone": Product(id="phone", shop_id="acme", name="Phone", price=1000.0, stock=10),
        "case": Product(id="case", shop_id="acme", name="Case", price=500.0, stock=10),
        "foreign": Product(id="foreign", shop_id="rival", name="Cable", price=10.0, stock=5),
    }


@pytest.fixture
def shop_store(products) -> AsyncMock:
    store = AsyncMock()
    store.get_product.side_effect = lambda product_id: products.get(product_id)
    return store


@pytest.fixture
def ledger_store() -> AsyncMock:
    store = AsyncMock()
    store.create_sale.side_effect = lambda sale: sale
    return store


@pytest.fixture
def numbering() -> AsyncMock:
    service = AsyncMock()

    async def create_invoice(shop_id, sale_id, customer_name, customer_phone=None):
        return InvoiceCreated(
            id="inv-1",
            invoice_number="250101-ACME-000001",
            customer_name=customer_name,
            customer_phone=customer_phone,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
        )

    service.create_invoice.side_effect = create_invoice
    return service


@pytest.fixture
def publisher() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def use_case(shop_store, ledger_store, numbering, publisher) -> CheckoutUseCase:
    return CheckoutUseCase(
        shop_store=shop_store,
        ledger_store=ledger_store,
        numbering_service=numbering,
        publisher=publisher,
    )


def _request(*lines: tuple[str, int]) -> CheckoutRequest:
    return CheckoutRequest(
        customer_name="Dana",
        items=[CartLine(product_id=p, quantity=q) for p, q in lines],
    )


class TestCheckoutUseCase:
    async def test_prices_from_catalog(self, use_case, ledger_store):
        result = await use_case.execute(TENANT, _request(("phone", 2), ("case", 1)))

        assert result.sale.total_amount == 2500.0
        assert result.sale.employee_id == "clerk-1"
        assert [i.price_at_sale for i in result.sale.items] == [1000.0, 500.0]
        assert result.invoice.invoice_number.endswith("ACME-000001")
        ledger_store.create_sale.assert_awaited_once()

    async def test_publishes_sale_events(self, use_case, publisher):
        await use_case.execute(TENANT, _request(("phone", 1), ("case", 1)))

        events = list(publisher.publish_many.await_args.args[0])
        assert [e.entity_type for e in events] == [
            EntityType.SALES,
            EntityType.SALE_ITEMS,
            EntityType.SALE_ITEMS,
        ]

    async def test_empty_cart(self, use_case, ledger_store):
        with pytest.raises(ValidationError):
            await use_case.execute(TENANT, _request())
        ledger_store.create_sale.assert_not_awaited()

    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_non_positive_quantity(self, use_case, quantity):
        with pytest.raises(ValidationError):
            await use_case.execute(TENANT, _request(("phone", quantity)))

    async def test_unknown_product(self, use_case):
        with pytest.raises(ProductNotFoundError):
            await use_case.execute(TENANT, _request(("ghost", 1)))

    async def test_other_shops_product(self, use_case, ledger_store):
        with pytest.raises(AuthorizationError):
            await use_case.execute(TENANT, _request(("phone", 1), ("foreign", 1)))
        ledger_store.create_sale.assert_not_awaited()

    async def test_invoice_failure_keeps_sale(self, use_case, ledger_store, numbering, publisher):
        numbering.create_invoice.side_effect = InvoiceCreationFailedError(
            "sale-1", "database is locked", attempts=3
        )

        with pytest.raises(InvoiceCreationFailedError) as exc_info:
            await use_case.execute(TENANT, _request(("phone", 1)))

        ledger_store.create_sale.assert_awaited_once()
        publisher.publish_many.assert_awaited_once()
        assert exc_info.value.to_dict()["error_code"] == "INVOICE_CREATION_FAILED"
        assert exc_info.value.details["attempts"] == 3

    def test_to_response(self, use_case):
        sale = Sale(
            shop_id="acme",
            customer_name="Dana",
            total_amount=1000.0,
            items=[SaleItem(product_id="phone", product_name="Phone", quantity=1, price_at_sale=1000.0)],
        )
        invoice = InvoiceCreated(
            id="inv-1",
            invoice_number="250101-ACME-000001",
            customer_name="Dana",
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
        )

        response = use_case.to_response(CheckoutResult(sale=sale, invoice=invoice))

        assert response.sale.items[0].remaining_quantity == 1
        assert response.invoice.id == "inv-1"
