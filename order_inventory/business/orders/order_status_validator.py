from __future__ import annotations

from dataclasses import dataclass

from order_inventory.business.orders.order_calculations import (
    CANCELLED,
    CONFIRMED,
    PARTIALLY_CANCELLED,
    PENDING,
)


@dataclass(frozen=True)
class StatusChange:
    order_id: int
    from_status: str | None
    to_status: str

    @property
    def changed(self) -> bool:
        return self.from_status != self.to_status


class OrderStatusValidator:
    """
    Order status transition table.

    pending -> confirmed -> partially_cancelled -> cancelled, with cancelled
    reachable from every non-terminal status. cancelled is terminal.
    """

    STATUSES = {PENDING, CONFIRMED, PARTIALLY_CANCELLED, CANCELLED}

    _NEXT = {
        PENDING: {CONFIRMED, CANCELLED},
        CONFIRMED: {PARTIALLY_CANCELLED, CANCELLED},
        PARTIALLY_CANCELLED: {CANCELLED},
        CANCELLED: set(),
    }

    @classmethod
    def can_transition(cls, current_status: str, new_status: str) -> bool:
        if new_status not in cls.STATUSES:
            return False
        if current_status == new_status:
            return current_status != CANCELLED
        return new_status in cls._NEXT.get(current_status, set())

    @classmethod
    def apply(cls, order, new_status: str) -> StatusChange:
        """Set order.status after validating the move; raises ValueError on an illegal one."""
        old = order.status
        if not cls.can_transition(old, new_status):
            raise ValueError(f"Invalid status transition for order {order.id}: {old} -> {new_status}")
        order.status = new_status
        return StatusChange(order.id, old, new_status)
