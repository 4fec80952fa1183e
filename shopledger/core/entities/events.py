"""Change notification events."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from shopledger.core.entities.shop import utcnow


class EntityType(str, Enum):
    """Topics a ledger writer can publish on."""

    INVOICES = "invoices"
    INVOICE_MODIFICATIONS = "invoice_modifications"
    SALES = "sales"
    SALE_ITEMS = "sale_items"
    PRODUCTS = "products"
    EXPENSES = "expenses"
    STAFF = "staff"


class EventType(str, Enum):
    """Kind of row change."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEvent(BaseModel):
    """Entity X of type T changed for shop S."""

    model_config = ConfigDict(frozen=True)

    shop_id: str
    entity_type: EntityType
    entity_id: str
    event_type: EventType
    occurred_at: datetime = Field(default_factory=utcnow)
