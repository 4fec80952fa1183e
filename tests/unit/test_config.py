"""Tests for settings and logging processors."""

import pytest
from pydantic import ValidationError

from shopledger.config.logging import mask_customer_contact
from shopledger.config.settings import ProjectionSettings, Settings


class TestSettings:
    def test_groups_read_their_prefix(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "ledger"))
        monkeypatch.setenv("LEDGER_INVOICE_RETRY_ATTEMPTS", "5")

        settings = Settings()

        assert settings.storage.db_path == tmp_path / "ledger" / "shopledger.db"
        assert (tmp_path / "ledger").is_dir()
        assert settings.ledger.invoice_retry_attempts == 5

    def test_unknown_ttl_override_rejected(self):
        with pytest.raises(ValidationError):
            ProjectionSettings(ttl_overrides={"nope": 1.0})

    def test_projection_limits_from_env(self, monkeypatch):
        monkeypatch.setenv("PROJECTION_MAX_CACHED_ENTRIES", "8")
        monkeypatch.setenv("PROJECTION_MAX_PERIOD_DAYS", "366")

        settings = ProjectionSettings()

        assert settings.max_cached_entries == 8
        assert settings.max_period_days == 366
        with pytest.raises(ValidationError):
            ProjectionSettings(max_cached_entries=0)

    @pytest.mark.parametrize(
        "environment,log_format,expected",
        [
            ("development", "auto", False),
            ("production", "auto", True),
            ("production", "console", False),
            ("development", "json", True),
        ],
    )
    def test_json_logs(self, tmp_path, monkeypatch, environment, log_format, expected):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        settings = Settings(environment=environment, log_format=log_format)
        assert settings.json_logs is expected


def test_phone_numbers_are_masked():
    event = mask_customer_contact(None, "info", {"event": "x", "customer_phone": "0551234567"})
    assert event["customer_phone"] == "********67"
