"""Tests for the in-process change fanout."""

from unittest.mock import AsyncMock, Mock

import pytest

from shopledger.core.entities import ChangeEvent, EntityType, EventType
from shopledger.core.services.change_fanout import ChangeFanout


def _event(entity_type: EntityType = EntityType.INVOICES, shop_id: str = "acme") -> ChangeEvent:
    return ChangeEvent(
        shop_id=shop_id,
        entity_type=entity_type,
        entity_id="row-1",
        event_type=EventType.INSERT,
    )


class TestChangeFanout:
    async def test_delivers_to_matching_types(self):
        fanout = ChangeFanout()
        invoices = Mock()
        expenses = Mock()
        fanout.subscribe([EntityType.INVOICES], invoices)
        fanout.subscribe([EntityType.EXPENSES], expenses)

        await fanout.publish(_event(EntityType.INVOICES))

        invoices.assert_called_once()
        expenses.assert_not_called()

    async def test_awaits_async_handlers(self):
        fanout = ChangeFanout()
        handler = AsyncMock()
        fanout.subscribe([EntityType.SALES], handler)

        await fanout.publish(_event(EntityType.SALES))

        handler.assert_awaited_once()

    async def test_shop_filter(self):
        fanout = ChangeFanout()
        handler = Mock()
        fanout.subscribe([EntityType.SALES], handler, shop_id="acme")

        await fanout.publish(_event(EntityType.SALES, shop_id="rival"))
        handler.assert_not_called()

        await fanout.publish(_event(EntityType.SALES, shop_id="acme"))
        handler.assert_called_once()

    async def test_failing_handler_is_isolated(self):
        fanout = ChangeFanout()
        broken = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        fanout.subscribe([EntityType.INVOICES], broken, name="broken")
        fanout.subscribe([EntityType.INVOICES], healthy)

        await fanout.publish(_event())

        healthy.assert_called_once()

    async def test_unsubscribe(self):
        fanout = ChangeFanout()
        handler = Mock()
        subscription = fanout.subscribe([EntityType.INVOICES], handler)
        assert fanout.subscriber_count == 1

        fanout.unsubscribe(subscription)
        await fanout.publish(_event())

        assert fanout.subscriber_count == 0
        handler.assert_not_called()

    async def test_publish_many_preserves_order(self):
        fanout = ChangeFanout()
        seen: list[EntityType] = []
        fanout.subscribe(list(EntityType), lambda e: seen.append(e.entity_type))

        await fanout.publish_many(
            [_event(EntityType.INVOICES), _event(EntityType.INVOICE_MODIFICATIONS)]
        )

        assert seen == [EntityType.INVOICES, EntityType.INVOICE_MODIFICATIONS]

    def test_subscribe_requires_types(self):
        with pytest.raises(ValueError):
            ChangeFanout().subscribe([], Mock())
