"""
Inventory Ledger

Owns product stock levels. Every change goes through adjust_stock(), which
holds the product row lock, refuses to go below zero and appends exactly one
inventory log entry per call.
"""
from __future__ import annotations

from dataclasses import dataclass

from order_inventory.business.activity.activity_log import ActivityLog
from order_inventory.business.core.errors import InsufficientStockError
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.business.inventory.ledger")


@dataclass(frozen=True)
class StockAdjustment:
    product_id: int
    previous_quantity: int
    new_quantity: int
    change_type: str
    reason: str

    @property
    def delta(self) -> int:
        return self.new_quantity - self.previous_quantity


class InventoryLedger:
    """
    Stock ledger bound to one unit of work's product repository.
    """

    def __init__(self, products, activity_log: ActivityLog):
        self.products = products
        self.activity_log = activity_log

    @staticmethod
    def change_type_for(delta: int, reason: str) -> str:
        """
        Decreases are deductions. Increases caused by cancelling an order are
        restores; every other increase is an addition.
        """
        if delta < 0:
            return InventoryLog.CHANGE_DEDUCTION
        if reason == InventoryLog.REASON_ORDER_CANCELLED:
            return InventoryLog.CHANGE_RESTORE
        return InventoryLog.CHANGE_ADDITION

    def adjust_stock(self, product_id: int, delta: int, reason: str) -> StockAdjustment:
        """
        Apply a signed delta to a product's stock.

        Args:
            product_id: Product to adjust
            delta: Signed quantity change
            reason: One of InventoryLog.REASONS

        Returns:
            StockAdjustment with the new quantity

        Raises:
            InsufficientStockError: delta would take stock below zero (nothing is changed)
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise TypeError("delta must be an integer")
        if reason not in InventoryLog.REASONS:
            raise ValueError(f"Unknown inventory change reason: {reason}")

        # No-op if this unit of work already holds the lock
        product = self.products.lock_for_update(product_id)
        current = product.stock_quantity or 0

        if delta < 0 and abs(delta) > current:
            logger.warning(f"Rejected stock deduction of {abs(delta)} for product {product_id}: only {current} available")
            raise InsufficientStockError(product.id, abs(delta), current, product.name)

        if not self.products.apply_stock_delta(product.id, delta):
            logger.warning(f"Stock for product {product_id} changed under a deduction of {abs(delta)}: now {product.stock_quantity}")
            raise InsufficientStockError(product.id, abs(delta), product.stock_quantity, product.name)

        change_type = self.change_type_for(delta, reason)
        self.activity_log.append_inventory_log(product.id, change_type, abs(delta), reason)

        logger.debug(f"Product {product_id} stock {product.stock_quantity - delta} -> {product.stock_quantity} ({change_type}, {reason})")
        return StockAdjustment(
            product_id=product.id,
            previous_quantity=product.stock_quantity - delta,
            new_quantity=product.stock_quantity,
            change_type=change_type,
            reason=reason,
        )
