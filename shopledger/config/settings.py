"""
Shop ledger settings.

Every group reads its own environment prefix (STORAGE_, LEDGER_, PROJECTION_,
API_); top-level values and a local .env file are read by ``Settings``.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECTION_NAMES = (
    "dashboard_stats",
    "recent_orders",
    "best_sellers",
    "stock_summary",
    "inventory",
    "financial",
)


class StorageSettings(BaseSettings):
    """Where the ledger lives and how connections to it behave."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "shopledger.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="SQLite busy_timeout in ms")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Invoice numbering.

    Retries apply to invoice creation only; reconciliation is never retried
    automatically.
    """

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    invoice_retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=0.1, ge=0)
    retry_multiplier: float = Field(default=2.0, ge=1)
    retry_max_delay: float = Field(default=2.0, ge=0)

    # YYMMDD-PREF-NNNNNN
    shop_prefix_length: int = Field(default=4, ge=1)
    sequence_width: int = Field(default=6, ge=1)


class ProjectionSettings(BaseSettings):
    """Cached read models."""

    model_config = SettingsConfigDict(env_prefix="PROJECTION_")

    default_ttl_seconds: float = Field(default=300.0, gt=0)
    ttl_overrides: dict[str, float] = Field(
        default_factory=lambda: {"dashboard_stats": 60.0, "recent_orders": 30.0}
    )
    low_stock_threshold: int = Field(default=10, ge=0)
    recent_orders_limit: int = Field(default=5, ge=1)
    best_sellers_limit: int = Field(default=10, ge=1)
    # Distinct parameter sets (periods, limits) cached per shop and projection
    max_cached_entries: int = Field(default=32, ge=1)
    # Longest explicit start/end range a report accepts
    max_period_days: int = Field(default=3660, ge=1)

    @field_validator("ttl_overrides")
    @classmethod
    def known_projections_only(cls, v: dict[str, float]) -> dict[str, float]:
        unknown = sorted(set(v) - set(PROJECTION_NAMES))
        if unknown:
            raise ValueError(f"unknown projections in ttl_overrides: {unknown}")
        return v

    def ttl_for(self, projection_name: str) -> float:
        return self.ttl_overrides.get(projection_name, self.default_ttl_seconds)


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Shop Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["auto", "console", "json"] = "auto"

    storage: StorageSettings = Field(default_factory=StorageSettings, validate_default=True)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    projections: ProjectionSettings = Field(default_factory=ProjectionSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage")
    @classmethod
    def ensure_data_dir(cls, v: StorageSettings) -> StorageSettings:
        v.data_dir.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def json_logs(self) -> bool:
        if self.log_format == "auto":
            return self.environment != "development"
        return self.log_format == "json"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget loaded settings so the next call re-reads the environment."""
    global _settings
    _settings = None
