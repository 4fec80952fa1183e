"""Expense endpoints."""

from fastapi import APIRouter, Depends, Response, status

from shopledger.api.dependencies import (
    get_delete_expense_use_case,
    get_list_expenses_use_case,
    get_record_expense_use_case,
    get_tenant,
    get_update_expense_use_case,
)
from shopledger.application.dto.requests import (
    RecordExpenseRequest,
    UpdateExpenseRequest,
)
from shopledger.application.dto.responses import (
    ErrorResponse,
    ExpenseListResponse,
    ExpenseResponse,
)
from shopledger.application.use_cases.expenses import (
    DeleteExpenseUseCase,
    ListExpensesUseCase,
    RecordExpenseUseCase,
    UpdateExpenseUseCase,
)
from shopledger.core.entities.shop import TenantContext

router = APIRouter(prefix="/api/expenses", tags=["expenses"])

_OWNED_ROW_ERRORS = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def record_expense(
    request: RecordExpenseRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: RecordExpenseUseCase = Depends(get_record_expense_use_case),
) -> ExpenseResponse:
    """Record an expense. Stock purchases feed the stock summary report."""
    result = await use_case.execute(tenant, request)
    return use_case.to_response(result)


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    tenant: TenantContext = Depends(get_tenant),
    use_case: ListExpensesUseCase = Depends(get_list_expenses_use_case),
) -> ExpenseListResponse:
    """The shop's expenses, newest first."""
    result = await use_case.execute(tenant)
    return use_case.to_response(result)


@router.patch(
    "/{expense_id}",
    response_model=ExpenseResponse,
    responses={400: {"model": ErrorResponse}, **_OWNED_ROW_ERRORS},
)
async def update_expense(
    expense_id: str,
    request: UpdateExpenseRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: UpdateExpenseUseCase = Depends(get_update_expense_use_case),
) -> ExpenseResponse:
    result = await use_case.execute(tenant, expense_id, request)
    return use_case.to_response(result)


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_OWNED_ROW_ERRORS,
)
async def delete_expense(
    expense_id: str,
    tenant: TenantContext = Depends(get_tenant),
    use_case: DeleteExpenseUseCase = Depends(get_delete_expense_use_case),
) -> Response:
    """Remove an expense recorded in error."""
    await use_case.execute(tenant, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
