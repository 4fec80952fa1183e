"""Expense use cases.

Every write announces on the expenses topic so the dashboard and financial
read models drop their cached totals.
"""

from datetime import UTC, datetime

from shopledger.application.dto.requests import (
    RecordExpenseRequest,
    UpdateExpenseRequest,
)
from shopledger.application.dto.responses import ExpenseListResponse, ExpenseResponse
from shopledger.application.use_cases.shops import ShopUseCaseBase
from shopledger.config import get_logger
from shopledger.core.entities.catalog import Expense
from shopledger.core.entities.events import EntityType, EventType
from shopledger.core.entities.shop import TenantContext
from shopledger.core.exceptions import AuthorizationError, ExpenseNotFoundError
from shopledger.core.interfaces.shop_store import IShopStore

logger = get_logger(__name__)


def expense_to_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        id=expense.id,
        type=expense.type,
        amount=expense.amount,
        description=expense.description,
        expense_date=expense.expense_date,
        created_at=expense.created_at,
    )


async def _owned_expense(
    store: IShopStore, tenant: TenantContext, expense_id: str
) -> Expense:
    expense = await store.get_expense(expense_id)
    if expense is None:
        raise ExpenseNotFoundError(expense_id)
    if expense.shop_id != tenant.shop_id:
        raise AuthorizationError("expense", expense_id, tenant.shop_id)
    return expense


class RecordExpenseUseCase(ShopUseCaseBase):
    """Record a shop expense and notify the financial read models."""

    async def execute(
        self, tenant: TenantContext, request: RecordExpenseRequest
    ) -> Expense:
        store = await self._get_shop_store()
        expense = await store.create_expense(
            Expense(
                shop_id=tenant.shop_id,
                type=request.type,
                amount=request.amount,
                description=request.description,
                expense_date=request.expense_date or datetime.now(UTC).date(),
            )
        )
        await self._announce(expense.shop_id, EntityType.EXPENSES, expense.id)
        return expense

    def to_response(self, expense: Expense) -> ExpenseResponse:
        return expense_to_response(expense)


class UpdateExpenseUseCase(ShopUseCaseBase):
    """Correct an expense's category, amount, note or date."""

    async def execute(
        self,
        tenant: TenantContext,
        expense_id: str,
        request: UpdateExpenseRequest,
    ) -> Expense:
        store = await self._get_shop_store()
        expense = await _owned_expense(store, tenant, expense_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        updated = await store.update_expense(expense.model_copy(update=changes))

        logger.info(
            "expense_updated",
            expense_id=expense_id,
            shop_id=tenant.shop_id,
            fields=sorted(changes),
        )
        await self._announce(
            updated.shop_id, EntityType.EXPENSES, updated.id, EventType.UPDATE
        )
        return updated

    def to_response(self, expense: Expense) -> ExpenseResponse:
        return expense_to_response(expense)


class DeleteExpenseUseCase(ShopUseCaseBase):
    """Remove an expense recorded in error."""

    async def execute(self, tenant: TenantContext, expense_id: str) -> None:
        store = await self._get_shop_store()
        await _owned_expense(store, tenant, expense_id)
        await store.delete_expense(expense_id)
        await self._announce(
            tenant.shop_id, EntityType.EXPENSES, expense_id, EventType.DELETE
        )


class ListExpensesUseCase(ShopUseCaseBase):
    async def execute(self, tenant: TenantContext) -> list[Expense]:
        store = await self._get_shop_store()
        return await store.list_expenses(tenant.shop_id)

    def to_response(self, expenses: list[Expense]) -> ExpenseListResponse:
        return ExpenseListResponse(
            expenses=[expense_to_response(e) for e in expenses],
            total=len(expenses),
        )
