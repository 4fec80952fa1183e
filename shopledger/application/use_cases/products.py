"""Product catalog use cases."""

from shopledger.application.dto.requests import (
    CreateProductRequest,
    UpdateProductRequest,
)
from shopledger.application.dto.responses import ProductListResponse, ProductResponse
from shopledger.application.use_cases.shops import ShopUseCaseBase
from shopledger.config import get_logger
from shopledger.core.entities.catalog import Product
from shopledger.core.entities.events import EntityType, EventType
from shopledger.core.entities.shop import TenantContext
from shopledger.core.exceptions import AuthorizationError, ProductNotFoundError

logger = get_logger(__name__)


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        price=product.price,
        stock=product.stock,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class CreateProductUseCase(ShopUseCaseBase):
    """Add a product to the tenant's catalog."""

    async def execute(
        self, tenant: TenantContext, request: CreateProductRequest
    ) -> Product:
        store = await self._get_shop_store()
        product = await store.create_product(
            Product(
                shop_id=tenant.shop_id,
                name=request.name,
                price=request.price,
                stock=request.stock,
            )
        )
        await self._announce(product.shop_id, EntityType.PRODUCTS, product.id)
        return product

    def to_response(self, product: Product) -> ProductResponse:
        return product_to_response(product)


class UpdateProductUseCase(ShopUseCaseBase):
    """Change a product's name, price or received stock.

    Price changes never touch past sales; each sale item keeps its own
    price_at_sale.
    """

    async def execute(
        self,
        tenant: TenantContext,
        product_id: str,
        request: UpdateProductRequest,
    ) -> Product:
        store = await self._get_shop_store()
        product = await store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.shop_id != tenant.shop_id:
            raise AuthorizationError("product", product_id, tenant.shop_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        updated = await store.update_product(product.model_copy(update=changes))

        logger.info(
            "product_updated",
            product_id=product_id,
            shop_id=tenant.shop_id,
            fields=sorted(changes),
        )
        await self._announce(
            updated.shop_id, EntityType.PRODUCTS, updated.id, EventType.UPDATE
        )
        return updated

    def to_response(self, product: Product) -> ProductResponse:
        return product_to_response(product)


class ListProductsUseCase(ShopUseCaseBase):
    async def execute(self, tenant: TenantContext) -> list[Product]:
        store = await self._get_shop_store()
        return await store.list_products(tenant.shop_id)

    def to_response(self, products: list[Product]) -> ProductListResponse:
        return ProductListResponse(
            products=[product_to_response(p) for p in products],
            total=len(products),
        )
