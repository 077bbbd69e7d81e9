"""
Order aggregate rules as pure functions.

Everything here works on plain attribute access (quantity, cancelled_quantity,
unit_price, status) so values are always derived from current item state and
never cached on the record. The ORM models expose these as properties.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from order_inventory.business.core.money import ZERO, to_money

PENDING = "pending"
CONFIRMED = "confirmed"
PARTIALLY_CANCELLED = "partially_cancelled"
CANCELLED = "cancelled"

# Statuses in which inventory has been deducted for the active quantities
INVENTORY_COMMITTED_STATUSES = frozenset({CONFIRMED, PARTIALLY_CANCELLED})


def active_quantity(item) -> int:
    return max(0, (item.quantity or 0) - (item.cancelled_quantity or 0))


def remaining_cancellable(item) -> int:
    return active_quantity(item)


def is_item_fully_cancelled(item) -> bool:
    return (item.cancelled_quantity or 0) >= (item.quantity or 0)


def item_subtotal(item) -> Decimal:
    return to_money(active_quantity(item) * to_money(item.unit_price))


def calculate_active_total(items: Iterable) -> Decimal:
    """Sum of active_quantity * unit_price over all items"""
    total = ZERO
    for item in items:
        total += item_subtotal(item)
    return to_money(total)


def calculate_gross_total(items: Iterable) -> Decimal:
    """Sum of quantity * unit_price, ignoring cancellations"""
    total = ZERO
    for item in items:
        total += to_money((item.quantity or 0) * to_money(item.unit_price))
    return to_money(total)


def is_order_fully_cancelled(status: str, items) -> bool:
    if status == CANCELLED:
        return True
    items = list(items)
    if not items:
        return False
    return all(is_item_fully_cancelled(item) for item in items)


def is_order_partially_cancelled(status: str, items) -> bool:
    if status == PARTIALLY_CANCELLED:
        return True
    items = list(items)
    has_cancelled = any((item.cancelled_quantity or 0) > 0 for item in items)
    return has_cancelled and not is_order_fully_cancelled(status, items)


def inventory_is_committed(status: str) -> bool:
    """True when stock was deducted for this order and must be restored on cancel"""
    return status in INVENTORY_COMMITTED_STATUSES


def status_after_item_cancellation(current_status: str, items) -> str:
    """
    Status an order takes after some of its items were cancelled.

    A pending order never moves onto the confirmation track: partial
    cancellation of an unconfirmed order leaves it pending.
    """
    items = list(items)
    if is_order_fully_cancelled(current_status, items):
        return CANCELLED
    if any((item.cancelled_quantity or 0) > 0 for item in items):
        if current_status == PENDING:
            return PENDING
        return PARTIALLY_CANCELLED
    return current_status
