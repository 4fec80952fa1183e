"""Create Shop Use Case, plus the store wiring shared by back-office writers."""

from shopledger.application.dto.requests import CreateShopRequest
from shopledger.application.dto.responses import ShopResponse
from shopledger.config import get_logger
from shopledger.core.entities.events import ChangeEvent, EntityType, EventType
from shopledger.core.entities.shop import Shop
from shopledger.core.interfaces.publisher import IChangePublisher
from shopledger.core.interfaces.shop_store import IShopStore

logger = get_logger(__name__)


class ShopUseCaseBase:
    """Lazy store and publisher resolution for back-office use cases."""

    def __init__(
        self,
        shop_store: IShopStore | None = None,
        publisher: IChangePublisher | None = None,
    ):
        self._shop_store = shop_store
        self._publisher = publisher

    async def _get_shop_store(self) -> IShopStore:
        if self._shop_store is None:
            from shopledger.infrastructure.storage.sqlite import get_shop_store

            self._shop_store = await get_shop_store()
        return self._shop_store

    def _get_publisher(self) -> IChangePublisher:
        if self._publisher is None:
            from shopledger.application.services import get_change_fanout

            self._publisher = get_change_fanout()
        return self._publisher

    async def _announce(
        self,
        shop_id: str,
        entity_type: EntityType,
        entity_id: str,
        event_type: EventType = EventType.INSERT,
    ) -> None:
        await self._get_publisher().publish(
            ChangeEvent(
                shop_id=shop_id,
                entity_type=entity_type,
                entity_id=entity_id,
                event_type=event_type,
            )
        )


class CreateShopUseCase(ShopUseCaseBase):
    """Register a tenant."""

    async def execute(self, request: CreateShopRequest) -> Shop:
        shop = Shop(name=request.name)
        if request.id:
            shop.id = request.id
        store = await self._get_shop_store()
        return await store.create_shop(shop)

    def to_response(self, shop: Shop) -> ShopResponse:
        return ShopResponse(id=shop.id, name=shop.name, created_at=shop.created_at)
