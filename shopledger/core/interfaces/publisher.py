"""Abstract interface for publishing ledger change events."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from shopledger.core.entities.events import ChangeEvent


class IChangePublisher(ABC):
    """What a ledger writer needs to announce its changes."""

    @abstractmethod
    async def publish(self, event: ChangeEvent) -> None:
        """Deliver one event to every matching subscriber. Never raises."""
        pass

    async def publish_many(self, events: Iterable[ChangeEvent]) -> None:
        for event in events:
            await self.publish(event)
