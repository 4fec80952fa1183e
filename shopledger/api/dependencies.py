"""
Dependency injection container for FastAPI.

Provides the acting tenant, report periods and use case instances to route
handlers.
"""

from datetime import date

from fastapi import Depends, Header, Query

from shopledger.application.services import (
    get_invoice_numbering_service,
    get_projection_registry,
    get_reconciliation_engine,
)
from shopledger.application.use_cases import (
    AddStaffMemberUseCase,
    CheckoutUseCase,
    CreateInvoiceUseCase,
    CreateProductUseCase,
    CreateShopUseCase,
    DeleteExpenseUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    ListExpensesUseCase,
    ListModificationsUseCase,
    ListProductsUseCase,
    ListStaffUseCase,
    ReconcileInvoiceUseCase,
    RecordExpenseUseCase,
    ReportsUseCase,
    UpdateExpenseUseCase,
    UpdateProductUseCase,
)
from shopledger.config import get_settings
from shopledger.core.entities.reporting import DateFilter, Period, resolve_period
from shopledger.core.entities.shop import TenantContext
from shopledger.core.exceptions import ShopNotFoundError
from shopledger.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteShopStore,
    get_ledger_store,
    get_shop_store,
)


# Store dependencies
async def get_ledger_store_dep() -> SQLiteLedgerStore:
    """Get ledger store."""
    return await get_ledger_store()


async def get_shop_store_dep() -> SQLiteShopStore:
    """Get shop store."""
    return await get_shop_store()


# Request context
async def get_tenant(
    shop_id: str = Header(..., alias="X-Shop-Id", min_length=1),
    actor_id: str = Header(..., alias="X-Actor-Id", min_length=1),
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> TenantContext:
    """
    Resolve the acting tenant from request headers.

    The shop must exist; the actor id is recorded on sales and modifications.
    """
    if await shop_store.get_shop(shop_id) is None:
        raise ShopNotFoundError(shop_id)
    return TenantContext(shop_id=shop_id, actor_id=actor_id)


def get_report_period(
    date_filter: DateFilter = Query(default=DateFilter.ALL, description="Named window"),
    start: date | None = Query(default=None, description="First day (inclusive)"),
    end: date | None = Query(default=None, description="Last day (inclusive)"),
) -> Period:
    """Reporting window from query parameters. Explicit dates win."""
    return resolve_period(
        date_filter,
        start=start,
        end=end,
        max_days=get_settings().projections.max_period_days,
    )


# Use case dependencies
def get_create_shop_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> CreateShopUseCase:
    """Get create shop use case."""
    return CreateShopUseCase(shop_store=shop_store)


def get_checkout_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
    ledger_store: SQLiteLedgerStore = Depends(get_ledger_store_dep),
) -> CheckoutUseCase:
    """Get checkout use case."""
    return CheckoutUseCase(
        shop_store=shop_store,
        ledger_store=ledger_store,
        numbering_service=get_invoice_numbering_service(),
    )


def get_create_invoice_use_case(
    ledger_store: SQLiteLedgerStore = Depends(get_ledger_store_dep),
) -> CreateInvoiceUseCase:
    """Get create invoice use case."""
    return CreateInvoiceUseCase(
        ledger_store=ledger_store,
        numbering_service=get_invoice_numbering_service(),
    )


def get_get_invoice_use_case(
    ledger_store: SQLiteLedgerStore = Depends(get_ledger_store_dep),
) -> GetInvoiceUseCase:
    return GetInvoiceUseCase(ledger_store=ledger_store)


def get_list_invoices_use_case(
    ledger_store: SQLiteLedgerStore = Depends(get_ledger_store_dep),
) -> ListInvoicesUseCase:
    return ListInvoicesUseCase(ledger_store=ledger_store)


def get_reconcile_invoice_use_case() -> ReconcileInvoiceUseCase:
    """Get reconcile invoice use case."""
    return ReconcileInvoiceUseCase(engine=get_reconciliation_engine())


def get_list_modifications_use_case(
    ledger_store: SQLiteLedgerStore = Depends(get_ledger_store_dep),
) -> ListModificationsUseCase:
    return ListModificationsUseCase(ledger_store=ledger_store)


def get_create_product_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> CreateProductUseCase:
    return CreateProductUseCase(shop_store=shop_store)


def get_update_product_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> UpdateProductUseCase:
    return UpdateProductUseCase(shop_store=shop_store)


def get_list_products_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> ListProductsUseCase:
    return ListProductsUseCase(shop_store=shop_store)


def get_record_expense_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> RecordExpenseUseCase:
    return RecordExpenseUseCase(shop_store=shop_store)


def get_update_expense_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> UpdateExpenseUseCase:
    return UpdateExpenseUseCase(shop_store=shop_store)


def get_delete_expense_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> DeleteExpenseUseCase:
    return DeleteExpenseUseCase(shop_store=shop_store)


def get_list_expenses_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> ListExpensesUseCase:
    return ListExpensesUseCase(shop_store=shop_store)


def get_add_staff_member_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> AddStaffMemberUseCase:
    return AddStaffMemberUseCase(shop_store=shop_store)


def get_list_staff_use_case(
    shop_store: SQLiteShopStore = Depends(get_shop_store_dep),
) -> ListStaffUseCase:
    return ListStaffUseCase(shop_store=shop_store)


def get_reports_use_case() -> ReportsUseCase:
    """Get reports use case backed by the shared projection registry."""
    return ReportsUseCase(registry=get_projection_registry())
