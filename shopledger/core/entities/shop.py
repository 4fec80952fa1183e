"""Shop (tenant) domain entities."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def new_id() -> str:
    """Opaque identifier for ledger rows."""
    return uuid4().hex


class Shop(BaseModel):
    """Tenant boundary. Every ledger row belongs to exactly one shop."""

    id: str = Field(default_factory=new_id)
    name: str
    created_at: datetime = Field(default_factory=utcnow)


class TenantContext(BaseModel):
    """
    The acting principal for a core call.

    Passed explicitly into every operation; the core keeps no ambient session.
    """

    model_config = ConfigDict(frozen=True)

    shop_id: str = Field(..., min_length=1)
    actor_id: str = Field(..., min_length=1)
