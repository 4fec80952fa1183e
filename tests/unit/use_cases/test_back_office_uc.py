"""Tests for product, expense and report use cases."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from shopledger.application.dto.requests import (
    CreateShopRequest,
    UpdateExpenseRequest,
    UpdateProductRequest,
)
from shopledger.application.use_cases.expenses import (
    DeleteExpenseUseCase,
    UpdateExpenseUseCase,
)
from shopledger.application.use_cases.products import UpdateProductUseCase
from shopledger.application.use_cases.reports import ReportsUseCase
from shopledger.application.use_cases.shops import CreateShopUseCase
from shopledger.core.entities import (
    DashboardStats,
    EntityType,
    EventType,
    Expense,
    ExpenseType,
    InventoryLine,
    Period,
    Product,
    StockStatus,
    TenantContext,
)
from shopledger.core.exceptions import (
    AuthorizationError,
    ExpenseNotFoundError,
    ProductNotFoundError,
)

TENANT = TenantContext(shop_id="acme", actor_id="clerk-1")


@pytest.fixture
def shop_store() -> AsyncMock:
    store = AsyncMock()
    store.get_product.return_value = Product(
        id="phone", shop_id="acme", name="Phone", price=1000.0, stock=10
    )
    store.update_product.side_effect = lambda product: product
    store.get_expense.return_value = Expense(
        id="power-jan",
        shop_id="acme",
        type=ExpenseType.UTILITY,
        amount=400.0,
        expense_date=date(2025, 1, 5),
    )
    store.update_expense.side_effect = lambda expense: expense
    store.create_shop.side_effect = lambda shop: shop
    return store


class TestUpdateProduct:
    async def test_applies_only_given_fields(self, shop_store):
        publisher = AsyncMock()
        use_case = UpdateProductUseCase(shop_store=shop_store, publisher=publisher)

        updated = await use_case.execute(TENANT, "phone", UpdateProductRequest(price=900.0))

        assert updated.price == 900.0
        assert updated.name == "Phone"
        assert updated.stock == 10
        event = publisher.publish.await_args.args[0]
        assert event.entity_type == EntityType.PRODUCTS
        assert event.event_type == EventType.UPDATE

    async def test_unknown_product(self, shop_store):
        shop_store.get_product.return_value = None
        use_case = UpdateProductUseCase(shop_store=shop_store, publisher=AsyncMock())

        with pytest.raises(ProductNotFoundError):
            await use_case.execute(TENANT, "ghost", UpdateProductRequest(price=1.0))

    async def test_other_shop(self, shop_store):
        use_case = UpdateProductUseCase(shop_store=shop_store, publisher=AsyncMock())

        with pytest.raises(AuthorizationError):
            await use_case.execute(
                TenantContext(shop_id="rival", actor_id="x"), "phone", UpdateProductRequest(price=1.0)
            )
        shop_store.update_product.assert_not_awaited()


class TestExpenseCorrections:
    async def test_update_announces_on_expenses(self, shop_store):
        publisher = AsyncMock()
        use_case = UpdateExpenseUseCase(shop_store=shop_store, publisher=publisher)

        updated = await use_case.execute(TENANT, "power-jan", UpdateExpenseRequest(amount=250.0))

        assert updated.amount == 250.0
        assert updated.type == ExpenseType.UTILITY
        assert updated.expense_date == date(2025, 1, 5)
        event = publisher.publish.await_args.args[0]
        assert event.entity_type == EntityType.EXPENSES
        assert event.event_type == EventType.UPDATE
        assert event.entity_id == "power-jan"

    async def test_delete_announces_on_expenses(self, shop_store):
        publisher = AsyncMock()
        use_case = DeleteExpenseUseCase(shop_store=shop_store, publisher=publisher)

        await use_case.execute(TENANT, "power-jan")

        shop_store.delete_expense.assert_awaited_once_with("power-jan")
        event = publisher.publish.await_args.args[0]
        assert event.entity_type == EntityType.EXPENSES
        assert event.event_type == EventType.DELETE
        assert event.shop_id == "acme"

    async def test_unknown_expense(self, shop_store):
        shop_store.get_expense.return_value = None
        publisher = AsyncMock()

        with pytest.raises(ExpenseNotFoundError):
            await DeleteExpenseUseCase(shop_store=shop_store, publisher=publisher).execute(
                TENANT, "ghost"
            )
        publisher.publish.assert_not_awaited()

    async def test_other_shop_cannot_touch_expense(self, shop_store):
        rival = TenantContext(shop_id="rival", actor_id="x")

        with pytest.raises(AuthorizationError):
            await UpdateExpenseUseCase(shop_store=shop_store, publisher=AsyncMock()).execute(
                rival, "power-jan", UpdateExpenseRequest(amount=1.0)
            )
        with pytest.raises(AuthorizationError):
            await DeleteExpenseUseCase(shop_store=shop_store, publisher=AsyncMock()).execute(
                rival, "power-jan"
            )
        shop_store.update_expense.assert_not_awaited()
        shop_store.delete_expense.assert_not_awaited()


class TestCreateShop:
    async def test_uses_requested_id(self, shop_store):
        shop = await CreateShopUseCase(shop_store=shop_store).execute(
            CreateShopRequest(name="Acme", id="acme")
        )
        assert shop.id == "acme"

    async def test_generates_id(self, shop_store):
        shop = await CreateShopUseCase(shop_store=shop_store).execute(CreateShopRequest(name="Acme"))
        assert shop.id


class TestReportsUseCase:
    @staticmethod
    def _registry(**projections) -> MagicMock:
        registry = MagicMock()
        registry.__getitem__.side_effect = lambda name: projections[name]
        return registry

    async def test_dashboard_includes_profit(self):
        dashboard = AsyncMock()
        dashboard.get.return_value = DashboardStats(
            products=2, sales=1500.0, staff=1, expenses_total=400.0, expenses_stock=300.0
        )
        use_case = ReportsUseCase(self._registry(dashboard_stats=dashboard))

        response = await use_case.dashboard(TENANT, Period())

        assert response.profit == 1100.0
        dashboard.get.assert_awaited_once_with("acme", period=Period())

    async def test_inventory_counts_statuses(self):
        inventory = AsyncMock()
        inventory.get.return_value = [
            InventoryLine(product_id="a", name="A", price=1, received=5, sold=5, on_hand=0, status=StockStatus.OUT),
            InventoryLine(product_id="b", name="B", price=1, received=5, sold=1, on_hand=4, status=StockStatus.LOW),
            InventoryLine(product_id="c", name="C", price=1, received=50, sold=1, on_hand=49, status=StockStatus.IN_STOCK),
        ]
        use_case = ReportsUseCase(self._registry(inventory=inventory))

        response = await use_case.inventory(TENANT)

        assert response.out_of_stock == 1
        assert response.low_stock == 1
