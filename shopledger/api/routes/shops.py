"""Shop (tenant) registration endpoint."""

from fastapi import APIRouter, Depends, status

from shopledger.api.dependencies import get_create_shop_use_case
from shopledger.application.dto.requests import CreateShopRequest
from shopledger.application.dto.responses import ErrorResponse, ShopResponse
from shopledger.application.use_cases.shops import CreateShopUseCase

router = APIRouter(prefix="/api/shops", tags=["shops"])


@router.post(
    "",
    response_model=ShopResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_shop(
    request: CreateShopRequest,
    use_case: CreateShopUseCase = Depends(get_create_shop_use_case),
) -> ShopResponse:
    """Register a shop. Every other endpoint is scoped to one via X-Shop-Id."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
