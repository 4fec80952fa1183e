"""Application use cases."""

from shopledger.application.use_cases.checkout import CheckoutResult, CheckoutUseCase
from shopledger.application.use_cases.expenses import (
    DeleteExpenseUseCase,
    ListExpensesUseCase,
    RecordExpenseUseCase,
    UpdateExpenseUseCase,
)
from shopledger.application.use_cases.invoices import (
    CreateInvoiceUseCase,
    GetInvoiceUseCase,
    InvoiceDetail,
    ListInvoicesUseCase,
)
from shopledger.application.use_cases.products import (
    CreateProductUseCase,
    ListProductsUseCase,
    UpdateProductUseCase,
)
from shopledger.application.use_cases.reconcile_invoice import (
    ListModificationsUseCase,
    ReconcileInvoiceUseCase,
)
from shopledger.application.use_cases.reports import ReportsUseCase
from shopledger.application.use_cases.shops import CreateShopUseCase
from shopledger.application.use_cases.staff import (
    AddStaffMemberUseCase,
    ListStaffUseCase,
)

__all__ = [
    # Ledger
    "CheckoutUseCase",
    "CheckoutResult",
    "CreateInvoiceUseCase",
    "GetInvoiceUseCase",
    "InvoiceDetail",
    "ListInvoicesUseCase",
    "ReconcileInvoiceUseCase",
    "ListModificationsUseCase",
    # Back office
    "CreateShopUseCase",
    "CreateProductUseCase",
    "UpdateProductUseCase",
    "ListProductsUseCase",
    "RecordExpenseUseCase",
    "UpdateExpenseUseCase",
    "DeleteExpenseUseCase",
    "ListExpensesUseCase",
    "AddStaffMemberUseCase",
    "ListStaffUseCase",
    # Reports
    "ReportsUseCase",
]
