"""
In-process change notification fanout.

Writers publish ChangeEvents without knowing who listens. Subscribers register
for a set of entity types, optionally narrowed to one shop. A failing handler
is logged and skipped; it never reaches the writer or other handlers.
"""

import inspect
import itertools
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from shopledger.config import get_logger
from shopledger.core.entities.events import ChangeEvent, EntityType
from shopledger.core.interfaces.publisher import IChangePublisher

logger = get_logger(__name__)

ChangeHandler = Callable[[ChangeEvent], Awaitable[None] | None]


@dataclass(frozen=True)
class Subscription:
    """Handle returned by subscribe(); pass it back to unsubscribe()."""

    id: int
    entity_types: frozenset[EntityType]
    handler: ChangeHandler
    shop_id: str | None = None
    name: str = ""

    def matches(self, event: ChangeEvent) -> bool:
        if event.entity_type not in self.entity_types:
            return False
        return self.shop_id is None or self.shop_id == event.shop_id


class ChangeFanout(IChangePublisher):
    """Delivers change events to matching subscribers, in subscription order."""

    def __init__(self):
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        entity_types: Iterable[EntityType],
        handler: ChangeHandler,
        shop_id: str | None = None,
        name: str | None = None,
    ) -> Subscription:
        """Register a handler. ``shop_id=None`` listens to every shop."""
        types = frozenset(EntityType(t) for t in entity_types)
        if not types:
            raise ValueError("Subscription needs at least one entity type")

        subscription = Subscription(
            id=next(self._ids),
            entity_types=types,
            handler=handler,
            shop_id=shop_id,
            name=name or getattr(handler, "__qualname__", repr(handler)),
        )
        self._subscriptions[subscription.id] = subscription
        logger.debug(
            "change_subscription_added",
            subscription=subscription.name,
            entity_types=sorted(t.value for t in types),
            shop_id=shop_id,
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.pop(subscription.id, None)

    async def publish(self, event: ChangeEvent) -> None:
        # Snapshot so handlers may (un)subscribe while we deliver.
        for subscription in list(self._subscriptions.values()):
            if not subscription.matches(event):
                continue
            try:
                result = subscription.handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "change_handler_failed",
                    subscription=subscription.name,
                    entity_type=event.entity_type.value,
                    entity_id=event.entity_id,
                    shop_id=event.shop_id,
                    error=str(e),
                    exc_info=True,
                )
