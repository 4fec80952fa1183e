"""Tests for the SQLite connection helpers."""

from datetime import UTC, datetime

import aiosqlite
import pytest

from shopledger.core.exceptions import DatabaseError, LedgerConstraintError
from shopledger.infrastructure.storage.sqlite.connection import (
    from_db_timestamp,
    to_db_timestamp,
    translate_errors,
)


class TestTimestamps:
    def test_naive_value_is_utc(self):
        assert from_db_timestamp("2025-01-05T10:30:00") == datetime(2025, 1, 5, 10, 30, tzinfo=UTC)

    def test_stored_value_keeps_instant(self):
        moment = datetime(2025, 1, 5, 10, 30, tzinfo=UTC)
        assert from_db_timestamp(to_db_timestamp(moment)) == moment

    @pytest.mark.parametrize("value", ["", None])
    def test_missing_value_is_an_error(self, value):
        with pytest.raises(ValueError, match="Missing timestamp"):
            from_db_timestamp(value)


class TestTranslateErrors:
    async def test_constraint_failure(self):
        with pytest.raises(LedgerConstraintError) as exc_info:
            async with translate_errors("record_sale"):
                raise aiosqlite.IntegrityError("NOT NULL constraint failed: sales.total_amount")

        assert exc_info.value.code == "LEDGER_CONSTRAINT"
        assert exc_info.value.details["operation"] == "record_sale"

    async def test_lock_failure(self):
        with pytest.raises(DatabaseError) as exc_info:
            async with translate_errors("record_sale"):
                raise aiosqlite.OperationalError("database is locked")

        assert exc_info.value.code == "DATABASE_ERROR"

    async def test_ledger_errors_pass_through(self):
        with pytest.raises(LedgerConstraintError):
            async with translate_errors("reconcile_invoice"):
                raise LedgerConstraintError("reconcile_invoice", "already typed")
