"""Tests for SQLiteShopStore."""

from datetime import date

import pytest

from shopledger.core.entities import (
    Expense,
    ExpenseType,
    Period,
    Product,
    Shop,
    StaffMember,
    StaffRole,
)
from shopledger.core.exceptions import (
    ConflictError,
    ExpenseNotFoundError,
    ProductNotFoundError,
)


class TestShops:
    async def test_create_and_get(self, shop_store):
        await shop_store.create_shop(Shop(id="acme", name="Acme"))

        shop = await shop_store.get_shop("acme")

        assert shop.name == "Acme"
        assert await shop_store.get_shop("ghost") is None

    async def test_duplicate_id(self, shop_store):
        await shop_store.create_shop(Shop(id="acme", name="Acme"))

        with pytest.raises(ConflictError) as exc_info:
            await shop_store.create_shop(Shop(id="acme", name="Other"))

        assert exc_info.value.code == "DUPLICATE_SHOP"


class TestProducts:
    async def test_update_keeps_identity(self, shop_store, seeded):
        product = seeded.phone.model_copy(update={"price": 900.0, "stock": 15})

        await shop_store.update_product(product)
        fetched = await shop_store.get_product(seeded.phone.id)

        assert fetched.price == 900.0
        assert fetched.stock == 15
        assert fetched.created_at == seeded.phone.created_at

    async def test_update_unknown(self, shop_store, seeded):
        with pytest.raises(ProductNotFoundError):
            await shop_store.update_product(Product(id="ghost", shop_id=seeded.shop.id, name="X"))

    async def test_list_is_shop_scoped(self, shop_store, seeded, other_shop):
        names = [p.name for p in await shop_store.list_products(seeded.shop.id)]

        assert names == ["Case", "Phone"]


class TestExpensesAndStaff:
    async def test_expense_roundtrip_date(self, shop_store, reporting_store, seeded):
        await shop_store.create_expense(
            Expense(
                shop_id=seeded.shop.id,
                type=ExpenseType.UTILITY,
                amount=42.0,
                expense_date=date(2025, 3, 1),
            )
        )

        daily = await reporting_store.daily_expenses(seeded.shop.id, Period())
        assert daily == {date(2025, 3, 1): 42.0}

    async def test_expense_correction_and_removal(self, shop_store, reporting_store, seeded):
        expense = await shop_store.create_expense(
            Expense(
                shop_id=seeded.shop.id,
                type=ExpenseType.UTILITY,
                amount=42.0,
                expense_date=date(2025, 3, 1),
            )
        )

        await shop_store.update_expense(
            expense.model_copy(update={"amount": 30.0, "expense_date": date(2025, 3, 2)})
        )
        fetched = await shop_store.get_expense(expense.id)
        assert fetched.amount == 30.0
        assert fetched.created_at == expense.created_at
        assert await reporting_store.sum_expenses(seeded.shop.id, Period()) == 30.0

        await shop_store.delete_expense(expense.id)
        assert await shop_store.get_expense(expense.id) is None
        assert await shop_store.list_expenses(seeded.shop.id) == []
        assert await reporting_store.sum_expenses(seeded.shop.id, Period()) == 0.0

    async def test_missing_expense(self, shop_store, seeded):
        with pytest.raises(ExpenseNotFoundError):
            await shop_store.delete_expense("ghost")
        with pytest.raises(ExpenseNotFoundError):
            await shop_store.update_expense(
                Expense(
                    id="ghost",
                    shop_id=seeded.shop.id,
                    type=ExpenseType.OTHER,
                    amount=1.0,
                    expense_date=date(2025, 3, 1),
                )
            )

    async def test_staff_listing(self, shop_store, seeded):
        await shop_store.create_staff_member(
            StaffMember(shop_id=seeded.shop.id, name="Zoe", role=StaffRole.CASHIER)
        )
        await shop_store.create_staff_member(StaffMember(shop_id=seeded.shop.id, name="Adam"))

        staff = await shop_store.list_staff(seeded.shop.id)

        assert [s.name for s in staff] == ["Adam", "Zoe"]
        assert staff[1].role == StaffRole.CASHIER
