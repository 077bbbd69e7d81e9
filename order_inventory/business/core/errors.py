"""
Error taxonomy for the order lifecycle and inventory core.

Every error carries a machine-readable ``kind`` so the request layer can pick
a response without inspecting message text. None of these are raised after a
partial mutation has been committed: the unit of work rolls back first.
"""
from __future__ import annotations


class OrderInventoryError(Exception):
    """Base class for all errors raised by the core"""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(OrderInventoryError):
    """Bad input shape, unknown reference, or a quantity over what is allowed"""

    kind = "validation"

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.errors = errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class ProductNotFoundError(ValidationError):
    def __init__(self, product_id, field: str = "product_id"):
        message = f"Product with ID {product_id} not found"
        super().__init__(message, {field: [message]})
        self.product_id = product_id


class OrderNotFoundError(ValidationError):
    def __init__(self, order_id):
        message = f"Order with ID {order_id} not found"
        super().__init__(message, {"order_id": [message]})
        self.order_id = order_id


class StateConflictError(OrderInventoryError):
    """An invalid lifecycle transition was attempted"""

    kind = "state_conflict"

    def __init__(self, message: str, order_id=None, status: str | None = None):
        super().__init__(message)
        self.order_id = order_id
        self.status = status

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["order_id"] = self.order_id
        data["status"] = self.status
        return data


class AlreadyConfirmedError(StateConflictError):
    def __init__(self, order_id, status: str = "confirmed"):
        super().__init__("Order has already been confirmed", order_id, status)


class AlreadyCancelledError(StateConflictError):
    def __init__(self, order_id, message: str = "Order has already been cancelled"):
        super().__init__(message, order_id, "cancelled")


class InsufficientStockError(OrderInventoryError):
    """Requested quantity exceeds the product's current stock"""

    kind = "insufficient_stock"

    def __init__(self, product_id, requested: int, available: int, product_name: str | None = None):
        label = product_name or f"product {product_id}"
        super().__init__(f"Not enough stock for product: {label}. Requested: {requested}, available: {available}")
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested": self.requested,
            "available": self.available,
        })
        return data


class TransientInfrastructureError(OrderInventoryError):
    """Lock timeout, deadlock or lost connection; the whole operation is safe to retry"""

    kind = "transient"
