"""Tests for the schema migrator."""

from pathlib import Path

import aiosqlite
import pytest

from shopledger.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    discover_migrations,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


class TestDiscovery:
    def test_finds_initial_migration(self):
        migrations = discover_migrations()

        assert migrations[0].version == "001"
        assert migrations[0].name == "initial_ledger"
        assert len(migrations[0].checksum) == 16

    def test_rejects_bad_filename(self, tmp_path: Path):
        bad = tmp_path / "initial.sql"
        bad.write_text("SELECT 1;")

        with pytest.raises(ValueError):
            MigrationInfo.from_file(bad)


class TestInitializeDatabase:
    async def test_fresh_database_gets_all_tables(self, tmp_path: Path):
        db_path = tmp_path / "fresh.db"

        results = await initialize_database(db_path, create_backup_before=False)

        assert results and all(r.success for r in results)
        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_second_run_is_noop(self, tmp_path: Path):
        db_path = tmp_path / "twice.db"
        await initialize_database(db_path, create_backup_before=False)

        assert await initialize_database(db_path) == []
        assert list(tmp_path.glob("*.backup_*")) == []

    async def test_status(self, tmp_path: Path):
        db_path = tmp_path / "status.db"

        before = await get_migration_status(db_path)
        await initialize_database(db_path, create_backup_before=False)
        after = await get_migration_status(db_path)

        assert before["exists"] is False
        assert before["pending_migrations"] == ["001"]
        assert after["current_version"] == "001"
        assert after["pending_migrations"] == []


class TestVerify:
    async def test_clean_database_passes(self, tmp_path: Path):
        db_path = tmp_path / "verify.db"
        await initialize_database(db_path, create_backup_before=False)

        checks = await verify_schema_integrity(db_path)

        assert {c["check"] for c in checks} >= {
            "foreign_keys",
            "integrity",
            "required_tables",
            "modified_flag",
            "latest_modification_amount",
            "returned_quantity_bounds",
        }
        assert all(c["status"] == "PASS" for c in checks)

    async def test_missing_tables_fail(self, tmp_path: Path):
        db_path = tmp_path / "empty.db"
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("CREATE TABLE unrelated (id INTEGER)")
            await conn.commit()

        checks = await verify_schema_integrity(db_path)

        required = next(c for c in checks if c["check"] == "required_tables")
        assert required["status"] == "FAIL"
        assert "invoices" in required["missing"]
