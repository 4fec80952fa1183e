"""Product catalog endpoints."""

from fastapi import APIRouter, Depends, status

from shopledger.api.dependencies import (
    get_create_product_use_case,
    get_list_products_use_case,
    get_tenant,
    get_update_product_use_case,
)
from shopledger.application.dto.requests import (
    CreateProductRequest,
    UpdateProductRequest,
)
from shopledger.application.dto.responses import (
    ErrorResponse,
    ProductListResponse,
    ProductResponse,
)
from shopledger.application.use_cases.products import (
    CreateProductUseCase,
    ListProductsUseCase,
    UpdateProductUseCase,
)
from shopledger.core.entities.shop import TenantContext

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_product(
    request: CreateProductRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: CreateProductUseCase = Depends(get_create_product_use_case),
) -> ProductResponse:
    result = await use_case.execute(tenant, request)
    return use_case.to_response(result)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: UpdateProductUseCase = Depends(get_update_product_use_case),
) -> ProductResponse:
    """Change a product's name, price or received stock."""
    result = await use_case.execute(tenant, product_id, request)
    return use_case.to_response(result)


@router.get("", response_model=ProductListResponse)
async def list_products(
    tenant: TenantContext = Depends(get_tenant),
    use_case: ListProductsUseCase = Depends(get_list_products_use_case),
) -> ProductListResponse:
    result = await use_case.execute(tenant)
    return use_case.to_response(result)
