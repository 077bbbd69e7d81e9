"""
OrderLifecycleEngine - create, confirm and cancel orders

Responsibilities:
- Run every lifecycle command as one unit of work (all-or-nothing)
- Lock the order row, then product rows in ascending id order
- Keep item cancellation counts, order totals and product stock consistent
- Append order and inventory activity entries for every applied change

State machine:
    pending -> confirmed -> partially_cancelled -> cancelled
    pending -> cancelled (no stock was ever deducted)
    cancelled is terminal
"""
from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from order_inventory.business.activity.activity_log import ActivityLog, SqlActivityLog
from order_inventory.business.core.errors import (
    AlreadyCancelledError,
    AlreadyConfirmedError,
    InsufficientStockError,
    TransientInfrastructureError,
    ValidationError,
)
from order_inventory.business.core.money import ZERO, to_money
from order_inventory.business.core.unit_of_work import UnitOfWork, run_in_unit_of_work
from order_inventory.business.inventory.inventory_ledger import InventoryLedger
from order_inventory.business.orders import order_calculations as calc
from order_inventory.business.orders.order_number import (
    DEFAULT_PREFIX,
    generate_order_number,
    generate_unique_order_number,
)
from order_inventory.business.orders.order_status_validator import OrderStatusValidator
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.orders.order import Order
from order_inventory.data.orders.order_item import OrderItem
from order_inventory.data.orders.order_log import OrderLog
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.business.orders.lifecycle")

# Optional sign and ASCII digits only
_WHOLE_NUMBER = re.compile(r"-?[0-9]+", re.ASCII)


@dataclass
class CancellationResult:
    """Outcome of cancel_order_items()"""
    order: Order
    cancelled_items: list[dict] = field(default_factory=list)

    @property
    def nothing_cancelled(self) -> bool:
        return not self.cancelled_items

    @property
    def fully_cancelled(self) -> bool:
        return self.order.status == Order.STATUS_CANCELLED

    @property
    def message(self) -> str:
        if self.nothing_cancelled:
            return "No items were cancelled"
        if self.fully_cancelled:
            return "All items cancelled and order marked as cancelled"
        return "Items partially cancelled"


def _parse_quantity(raw) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _WHOLE_NUMBER.fullmatch(raw.strip()):
        return int(raw.strip())
    return None


def _normalize_lines(lines, id_key: str, field_name: str, empty_message: str) -> list[tuple[int, int]]:
    """
    Validate the shape of [{<id_key>: int, "quantity": int >= 1}, ...].

    Returns (id, quantity) tuples in request order; raises ValidationError
    listing every bad line.
    """
    if not lines or not isinstance(lines, (list, tuple)):
        raise ValidationError.for_field(field_name, empty_message)

    parsed = []
    errors = []
    for index, line in enumerate(lines):
        if not isinstance(line, dict):
            errors.append(f"Line {index + 1} must be an object with {id_key} and quantity")
            continue

        ref = _parse_quantity(line.get(id_key))
        if ref is None:
            errors.append(f"A valid {id_key} is required for line {index + 1}")
            continue

        quantity = _parse_quantity(line.get("quantity"))
        if quantity is None:
            errors.append(f"Quantity must be a whole number for {id_key} {ref}")
            continue
        if quantity < 1:
            errors.append(f"Quantity must be at least 1 for {id_key} {ref}")
            continue

        parsed.append((ref, quantity))

    if errors:
        raise ValidationError(errors[0], {field_name: errors})
    return parsed


def _sum_by_key(pairs) -> "OrderedDict[int, int]":
    totals: OrderedDict[int, int] = OrderedDict()
    for key, quantity in pairs:
        totals[key] = totals.get(key, 0) + quantity
    return totals


def _money_str(value) -> str:
    return str(to_money(value))


class OrderLifecycleEngine:
    """
    Orchestrates order lifecycle commands over the Order aggregate and the
    Inventory Ledger.

    Args:
        activity_log: ActivityLog sink (defaults to SqlActivityLog)
        unit_of_work_factory: callable returning a UnitOfWork
        order_number_prefix: prefix for generated order numbers
        order_number_generator: callable(prefix) -> candidate order number
        transient_retries: re-runs allowed after a TransientInfrastructureError
    """

    def __init__(
        self,
        activity_log: ActivityLog | None = None,
        *,
        unit_of_work_factory=UnitOfWork,
        order_number_prefix: str = DEFAULT_PREFIX,
        order_number_generator=generate_order_number,
        transient_retries: int = 0,
    ):
        self.activity_log = activity_log or SqlActivityLog()
        self.unit_of_work_factory = unit_of_work_factory
        self.order_number_prefix = order_number_prefix
        self.order_number_generator = order_number_generator
        self.transient_retries = transient_retries

    @classmethod
    def from_config(cls, config, activity_log: ActivityLog | None = None) -> "OrderLifecycleEngine":
        return cls(
            activity_log,
            order_number_prefix=config.get('ORDER_NUMBER_PREFIX', DEFAULT_PREFIX),
            transient_retries=config.get('LIFECYCLE_TRANSIENT_RETRIES', 0),
        )

    def _run(self, operation, description: str):
        return run_in_unit_of_work(
            operation,
            retries=self.transient_retries,
            unit_of_work_factory=self.unit_of_work_factory,
            description=description,
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_order(self, product_quantities, user_id: int | None = None) -> Order:
        """
        Create a pending order with one item per requested line.

        Stock is checked but not deducted; confirm_order() is authoritative.

        Args:
            product_quantities: [{"product_id": int, "quantity": int}, ...]
            user_id: Optional actor recorded on the activity entry

        Returns:
            The persisted Order

        Raises:
            ValidationError: empty request, bad quantity, unknown product, or
                more requested than current stock
        """
        lines = _normalize_lines(
            product_quantities,
            id_key="product_id",
            field_name="products",
            empty_message="At least one product is required to create an order",
        )

        def operation(uow):
            products = {}
            for product_id, _ in lines:
                if product_id in products:
                    continue
                product = uow.products.get(product_id)
                if product is None:
                    raise ValidationError.for_field("products", f"Product with ID {product_id} not found")
                products[product_id] = product

            # Optimistic check only; nothing is locked or reserved here
            errors = []
            for product_id, requested in _sum_by_key(lines).items():
                product = products[product_id]
                if not product.has_stock_for(requested):
                    errors.append(
                        f"Not enough stock for product: {product.name}. "
                        f"Requested: {requested}, available: {product.stock_quantity}"
                    )
            if errors:
                logger.warning(f"Order creation rejected: {errors}")
                raise ValidationError(errors[0], {"products": errors})

            order = Order(
                order_number=generate_unique_order_number(
                    uow.orders.order_number_exists,
                    prefix=self.order_number_prefix,
                    generator=self.order_number_generator,
                ),
                status=Order.STATUS_PENDING,
                total_amount=ZERO,
            )
            for product_id, quantity in lines:
                order.order_items.append(OrderItem(
                    product_id=product_id,
                    quantity=quantity,
                    cancelled_quantity=0,
                    unit_price=to_money(products[product_id].price),
                ))
            order.total_amount = calc.calculate_active_total(order.order_items)

            uow.orders.add(order)
            try:
                uow.flush()
            except IntegrityError as e:
                # Another transaction took the same order number after the existence check
                logger.warning(f"Order number {order.order_number} collided on insert")
                raise TransientInfrastructureError(f"Order number {order.order_number} already taken") from e

            self.activity_log.append_order_log(
                order.id,
                OrderLog.ACTIVITY_CREATED,
                {
                    'total_amount': _money_str(order.total_amount),
                    'items_count': len(lines),
                },
                user_id,
            )
            logger.info(f"Created order {order.order_number} with {len(lines)} item(s), total {order.total_amount}")
            return order

        return self._run(operation, "create order")

    # ------------------------------------------------------------------
    # Confirm
    # ------------------------------------------------------------------

    def confirm_order(self, order_id: int, user_id: int | None = None) -> Order:
        """
        Confirm a pending order and deduct stock for every active item.

        Raises:
            OrderNotFoundError: unknown order
            AlreadyCancelledError: order is cancelled
            AlreadyConfirmedError: order is past pending
            InsufficientStockError: a product no longer has enough stock (nothing is deducted)
        """
        def operation(uow):
            order = uow.orders.get_for_update(order_id)

            if order.is_cancelled:
                logger.warning(f"Confirm rejected: order {order.order_number} is cancelled")
                raise AlreadyCancelledError(order.id, "Cannot confirm a cancelled order")
            if not order.is_pending:
                logger.warning(f"Confirm rejected: order {order.order_number} is {order.status}")
                raise AlreadyConfirmedError(order.id, order.status)

            active_items = [item for item in order.order_items if calc.active_quantity(item) > 0]
            required = _sum_by_key((item.product_id, calc.active_quantity(item)) for item in active_items)

            locked = uow.products.lock_many(required.keys())

            # Re-validate under lock before touching any row
            for product_id in sorted(required):
                product = locked[product_id]
                if not product.has_stock_for(required[product_id]):
                    logger.warning(
                        f"Confirm of order {order.order_number} rejected: product {product_id} "
                        f"has {product.stock_quantity}, needs {required[product_id]}"
                    )
                    raise InsufficientStockError(product.id, required[product_id], product.stock_quantity, product.name)

            ledger = InventoryLedger(uow.products, self.activity_log)
            for item in sorted(active_items, key=lambda i: (i.product_id, i.id)):
                ledger.adjust_stock(item.product_id, -calc.active_quantity(item), InventoryLog.REASON_ORDER_CONFIRMED)

            OrderStatusValidator.apply(order, Order.STATUS_CONFIRMED)

            self.activity_log.append_order_log(
                order.id,
                OrderLog.ACTIVITY_CONFIRMED,
                {'total_amount': _money_str(order.total_amount)},
                user_id,
            )
            logger.info(f"Confirmed order {order.order_number}, total {order.total_amount}")
            return order

        return self._run(operation, f"confirm order {order_id}")

    # ------------------------------------------------------------------
    # Cancel (whole order)
    # ------------------------------------------------------------------

    def cancel_order(self, order_id: int, user_id: int | None = None) -> Order:
        """
        Cancel every remaining unit of an order.

        Confirmed and partially cancelled orders get their active quantities
        restored to stock; pending orders never deducted anything.

        Raises:
            OrderNotFoundError: unknown order
            AlreadyCancelledError: order is already cancelled
        """
        def operation(uow):
            order = uow.orders.get_for_update(order_id)

            if order.is_cancelled:
                logger.warning(f"Cancel rejected: order {order.order_number} is already cancelled")
                raise AlreadyCancelledError(order.id)

            previous_status = order.status
            previous_total = to_money(order.total_amount)
            restore = calc.inventory_is_committed(previous_status)

            if restore:
                active_items = [item for item in order.order_items if calc.active_quantity(item) > 0]
                uow.products.lock_many(item.product_id for item in active_items)
                ledger = InventoryLedger(uow.products, self.activity_log)
                for item in sorted(active_items, key=lambda i: (i.product_id, i.id)):
                    ledger.adjust_stock(item.product_id, calc.active_quantity(item), InventoryLog.REASON_ORDER_CANCELLED)

            for item in order.order_items:
                item.cancelled_quantity = item.quantity

            OrderStatusValidator.apply(order, Order.STATUS_CANCELLED)
            order.total_amount = ZERO

            self.activity_log.append_order_log(
                order.id,
                OrderLog.ACTIVITY_CANCELLED,
                {
                    'previous_status': previous_status,
                    'previous_total': _money_str(previous_total),
                    'new_total': _money_str(ZERO),
                    'inventory_restored': restore,
                },
                user_id,
            )
            logger.info(f"Cancelled order {order.order_number} (was {previous_status}, total {previous_total})")
            return order

        return self._run(operation, f"cancel order {order_id}")

    # ------------------------------------------------------------------
    # Cancel items (partial)
    # ------------------------------------------------------------------

    def cancel_order_items(self, order_id: int, items, user_id: int | None = None) -> CancellationResult:
        """
        Cancel some units of some items.

        Every line is validated before anything changes. Lines for items that
        are already fully cancelled are skipped; if nothing is left to cancel
        the order is returned unchanged with no activity entry.

        Args:
            order_id: Order to modify
            items: [{"order_item_id": int, "quantity": int}, ...]
            user_id: Optional actor recorded on the activity entry

        Raises:
            OrderNotFoundError: unknown order
            AlreadyCancelledError: order is already cancelled
            ValidationError: item not on this order, or more requested than remains
        """
        lines = _normalize_lines(
            items,
            id_key="order_item_id",
            field_name="items",
            empty_message="You must specify at least one item to cancel",
        )

        def operation(uow):
            order = uow.orders.get_for_update(order_id)

            if order.is_cancelled:
                logger.warning(f"Cancel items rejected: order {order.order_number} is already cancelled")
                raise AlreadyCancelledError(order.id, "Order has already been fully cancelled")

            items_by_id = {item.id: item for item in order.order_items}
            requested = _sum_by_key(lines)

            errors = []
            for item_id, quantity in requested.items():
                item = items_by_id.get(item_id)
                if item is None:
                    errors.append(f"Order item with ID {item_id} not found in this order")
                    continue
                remaining = calc.remaining_cancellable(item)
                if remaining > 0 and quantity > remaining:
                    errors.append(
                        f"Cannot cancel {quantity} units for item {item_id}. Maximum cancellable: {remaining}"
                    )
            if errors:
                logger.warning(f"Cancel items on order {order.order_number} rejected: {errors}")
                raise ValidationError("Validation error during cancellation", {"items": errors})

            plan = []
            for item_id, quantity in requested.items():
                item = items_by_id[item_id]
                quantity_to_cancel = min(quantity, calc.remaining_cancellable(item))
                if quantity_to_cancel > 0:
                    plan.append((item, quantity_to_cancel))

            if not plan:
                logger.info(f"Cancel items on order {order.order_number}: nothing left to cancel")
                return CancellationResult(order)

            previous_total = to_money(order.total_amount)
            restore = calc.inventory_is_committed(order.status)

            ledger = None
            if restore:
                uow.products.lock_many(item.product_id for item, _ in plan)
                ledger = InventoryLedger(uow.products, self.activity_log)

            cancelled_items = []
            for item, quantity_to_cancel in sorted(plan, key=lambda p: (p[0].product_id, p[0].id)):
                item.cancelled_quantity = (item.cancelled_quantity or 0) + quantity_to_cancel
                if ledger is not None:
                    ledger.adjust_stock(item.product_id, quantity_to_cancel, InventoryLog.REASON_ORDER_CANCELLED)
                cancelled_items.append({
                    'item_id': item.id,
                    'product_id': item.product_id,
                    'product_name': item.product.name if item.product else None,
                    'quantity_cancelled': quantity_to_cancel,
                    'remaining_active': calc.active_quantity(item),
                })

            new_total: Decimal = calc.calculate_active_total(order.order_items)
            order.total_amount = new_total

            new_status = calc.status_after_item_cancellation(order.status, order.order_items)
            if new_status != order.status:
                OrderStatusValidator.apply(order, new_status)

            activity = (
                OrderLog.ACTIVITY_CANCELLED
                if new_status == Order.STATUS_CANCELLED
                else OrderLog.ACTIVITY_PARTIALLY_CANCELLED
            )
            self.activity_log.append_order_log(
                order.id,
                activity,
                {
                    'items_cancelled': cancelled_items,
                    'previous_total': _money_str(previous_total),
                    'new_total': _money_str(new_total),
                    'inventory_restored': restore,
                },
                user_id,
            )
            logger.info(
                f"Cancelled {sum(line['quantity_cancelled'] for line in cancelled_items)} unit(s) on order "
                f"{order.order_number}; status {new_status}, total {previous_total} -> {new_total}"
            )
            return CancellationResult(order, cancelled_items)

        return self._run(operation, f"cancel items on order {order_id}")
