"""
Domain exceptions for the shop ledger.

Every error carries a machine-readable code and a user-displayable message so
that the HTTP boundary can surface it without guessing.
"""

from typing import Any


class ShopLedgerError(Exception):
    """Base exception for all shop ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error_code": self.code, "message": self.message, "details": self.details}


# Validation Exceptions
class ValidationError(ShopLedgerError):
    """Input validation failed. Always correctable by the caller."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Authorization Exceptions
class AuthorizationError(ShopLedgerError):
    """Actor's shop does not own the target row."""

    def __init__(self, resource: str, resource_id: str, actor_shop_id: str):
        super().__init__(
            f"{resource.capitalize()} {resource_id} does not belong to shop {actor_shop_id}",
            code="SHOP_MISMATCH",
            details={
                "resource": resource,
                "resource_id": resource_id,
                "actor_shop_id": actor_shop_id,
            },
        )


# Not Found Exceptions
class NotFoundError(ShopLedgerError):
    """Base exception for missing ledger rows."""

    def __init__(self, resource: str, resource_id: str, code: str | None = None):
        super().__init__(
            f"{resource.capitalize()} not found: {resource_id}",
            code=code or "NOT_FOUND",
            details={"resource": resource, "resource_id": resource_id},
        )


class ShopNotFoundError(NotFoundError):
    """Shop does not exist."""

    def __init__(self, shop_id: str):
        super().__init__("shop", shop_id, code="SHOP_NOT_FOUND")


class InvoiceNotFoundError(NotFoundError):
    """Invoice does not exist."""

    def __init__(self, invoice_id: str):
        super().__init__("invoice", invoice_id, code="INVOICE_NOT_FOUND")


class SaleNotFoundError(NotFoundError):
    """Sale does not exist."""

    def __init__(self, sale_id: str):
        super().__init__("sale", sale_id, code="SALE_NOT_FOUND")


class SaleItemNotFoundError(NotFoundError):
    """Sale item does not exist on the invoice's sale."""

    def __init__(self, item_id: str, sale_id: str | None = None):
        super().__init__("sale item", item_id, code="SALE_ITEM_NOT_FOUND")
        self.details["sale_id"] = sale_id


class ProductNotFoundError(NotFoundError):
    """Product does not exist."""

    def __init__(self, product_id: str):
        super().__init__("product", product_id, code="PRODUCT_NOT_FOUND")


class ExpenseNotFoundError(NotFoundError):
    """Expense does not exist."""

    def __init__(self, expense_id: str):
        super().__init__("expense", expense_id, code="EXPENSE_NOT_FOUND")


# Conflict Exceptions
class ConflictError(ShopLedgerError):
    """Request conflicts with current ledger state. Re-fetch and retry."""

    pass


class OverReturnError(ConflictError):
    """Attempted to return more units than remain on a sale item."""

    def __init__(self, item_id: str, requested: int, remaining: int):
        super().__init__(
            f"Cannot return {requested} unit(s) of item {item_id}: "
            f"only {remaining} remaining",
            code="OVER_RETURN",
            details={
                "item_id": item_id,
                "requested": requested,
                "remaining": remaining,
            },
        )


class StaleModificationError(ConflictError):
    """Caller's view of the modification log is out of date."""

    def __init__(self, invoice_id: str, expected: str | None, actual: str | None):
        super().__init__(
            f"Invoice {invoice_id} was modified concurrently "
            f"(expected last modification {expected}, found {actual})",
            code="STALE_MODIFICATION",
            details={"invoice_id": invoice_id, "expected": expected, "actual": actual},
        )


class InsufficientStockError(ConflictError):
    """Not enough units on hand to sell."""

    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


class DuplicateInvoiceError(ConflictError):
    """Invoice number or sale already has an invoice."""

    def __init__(self, shop_id: str, reason: str):
        super().__init__(
            f"Duplicate invoice for shop {shop_id}: {reason}",
            code="DUPLICATE_INVOICE",
            details={"shop_id": shop_id, "reason": reason},
        )


class LedgerConstraintError(ConflictError):
    """A write was refused by a ledger constraint or trigger."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Ledger rejected {operation}: {error}",
            code="LEDGER_CONSTRAINT",
            details={"operation": operation, "error": error},
        )


# Storage Exceptions
class StoreError(ShopLedgerError):
    """Base exception for transient store failures."""

    recoverable: bool = False


class DatabaseError(StoreError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class InvoiceCreationFailedError(StoreError):
    """Invoice could not be created for an already-committed sale."""

    recoverable = True

    def __init__(self, sale_id: str, reason: str, attempts: int = 1):
        super().__init__(
            f"Sale {sale_id} was recorded but its invoice could not be created: {reason}",
            code="INVOICE_CREATION_FAILED",
            details={"sale_id": sale_id, "reason": reason, "attempts": attempts},
        )
        self.sale_id = sale_id


class ConfigurationError(ShopLedgerError):
    """Configuration error."""

    pass
