"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from pathlib import Path

import pytest

import shopledger.infrastructure.storage.sqlite.connection as conn_module
from shopledger.application.services import reset_services
from shopledger.config import get_settings, reset_settings
from shopledger.core.entities import Product, Shop, TenantContext
from shopledger.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteReportingStore,
    SQLiteShopStore,
    close_pool,
)
from shopledger.infrastructure.storage.sqlite.migrations.migrator import (
    initialize_database,
)


@dataclass
class SeededShop:
    """A migrated shop with two products: phone (1000) and case (500)."""

    shop: Shop
    phone: Product
    case: Product
    tenant: TenantContext


@pytest.fixture
async def ledger_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Path, None]:
    """Fully migrated temporary ledger database wired into the global pool."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_POOL_SIZE", "3")
    monkeypatch.setenv("STORAGE_BUSY_TIMEOUT", "5000")
    reset_settings()
    reset_services()
    conn_module._pool = None

    db_path = get_settings().storage.db_path
    await initialize_database(db_path, create_backup_before=False)

    yield db_path

    await close_pool()
    reset_services()
    reset_settings()


@pytest.fixture
def ledger_store(ledger_db: Path) -> SQLiteLedgerStore:
    return SQLiteLedgerStore()


@pytest.fixture
def shop_store(ledger_db: Path) -> SQLiteShopStore:
    return SQLiteShopStore()


@pytest.fixture
def reporting_store(ledger_db: Path) -> SQLiteReportingStore:
    return SQLiteReportingStore()


async def seed_shop(
    shop_store: SQLiteShopStore,
    shop_id: str = "acme",
    actor_id: str = "clerk-1",
) -> SeededShop:
    shop = await shop_store.create_shop(Shop(id=shop_id, name=f"{shop_id} store"))
    phone = await shop_store.create_product(
        Product(shop_id=shop.id, name="Phone", price=1000.0, stock=10)
    )
    case = await shop_store.create_product(
        Product(shop_id=shop.id, name="Case", price=500.0, stock=10)
    )
    return SeededShop(
        shop=shop,
        phone=phone,
        case=case,
        tenant=TenantContext(shop_id=shop.id, actor_id=actor_id),
    )


@pytest.fixture
async def seeded(shop_store: SQLiteShopStore) -> SeededShop:
    return await seed_shop(shop_store)


@pytest.fixture
async def other_shop(shop_store: SQLiteShopStore) -> SeededShop:
    return await seed_shop(shop_store, shop_id="rival", actor_id="clerk-9")
