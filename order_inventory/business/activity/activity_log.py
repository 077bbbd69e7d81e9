"""
Activity Log

Append-only record of order and inventory events. The lifecycle engine and
the inventory ledger only ever talk to the ActivityLog interface, so a caller
can inject a different sink (tests wrap the SQL one to see exactly which
entries an operation wrote).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from order_inventory import db
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.orders.order_log import OrderLog


class ActivityLog(ABC):

    @abstractmethod
    def append_order_log(
        self,
        order_id: int,
        activity_type: str,
        details: dict | None = None,
        user_id: int | None = None,
    ) -> OrderLog:
        ...

    @abstractmethod
    def append_inventory_log(
        self,
        product_id: int,
        change_type: str,
        quantity_change: int,
        reason: str,
    ) -> InventoryLog:
        ...


class SqlActivityLog(ActivityLog):
    """
    Writes log rows into the current session.

    Rows become durable only when the caller's unit of work commits, so a
    rolled-back operation leaves no log entries behind.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def append_order_log(self, order_id, activity_type, details=None, user_id=None):
        if activity_type not in OrderLog.ACTIVITY_TYPES:
            raise ValueError(f"Unknown order activity type: {activity_type}")

        entry = OrderLog(
            order_id=order_id,
            activity_type=activity_type,
            details=details,
            user_id=user_id,
            created_at=datetime.utcnow(),
        )
        self.session.add(entry)
        return entry

    def append_inventory_log(self, product_id, change_type, quantity_change, reason):
        if change_type not in InventoryLog.CHANGE_TYPES:
            raise ValueError(f"Unknown inventory change type: {change_type}")
        if reason not in InventoryLog.REASONS:
            raise ValueError(f"Unknown inventory change reason: {reason}")

        entry = InventoryLog(
            product_id=product_id,
            change_type=change_type,
            quantity_change=abs(quantity_change),
            reason=reason,
            created_at=datetime.utcnow(),
        )
        self.session.add(entry)
        return entry
