"""Staff endpoints."""

from fastapi import APIRouter, Depends, status

from shopledger.api.dependencies import (
    get_add_staff_member_use_case,
    get_list_staff_use_case,
    get_tenant,
)
from shopledger.application.dto.requests import AddStaffMemberRequest
from shopledger.application.dto.responses import (
    ErrorResponse,
    StaffListResponse,
    StaffMemberResponse,
)
from shopledger.application.use_cases.staff import (
    AddStaffMemberUseCase,
    ListStaffUseCase,
)
from shopledger.core.entities.shop import TenantContext

router = APIRouter(prefix="/api/staff", tags=["staff"])


@router.post(
    "",
    response_model=StaffMemberResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def add_staff_member(
    request: AddStaffMemberRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: AddStaffMemberUseCase = Depends(get_add_staff_member_use_case),
) -> StaffMemberResponse:
    result = await use_case.execute(tenant, request)
    return use_case.to_response(result)


@router.get("", response_model=StaffListResponse)
async def list_staff(
    tenant: TenantContext = Depends(get_tenant),
    use_case: ListStaffUseCase = Depends(get_list_staff_use_case),
) -> StaffListResponse:
    result = await use_case.execute(tenant)
    return use_case.to_response(result)
