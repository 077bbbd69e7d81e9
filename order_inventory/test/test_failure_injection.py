"""
A failure anywhere inside a lifecycle operation leaves no partial effects
"""
from decimal import Decimal

import pytest

from order_inventory import db
from order_inventory.business.orders.order_lifecycle_engine import OrderLifecycleEngine
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.orders.order import Order
from order_inventory.data.orders.order_log import OrderLog
from order_inventory.test.conftest import RecordingActivityLog, place_order, stock_of


class LogSinkDown(RuntimeError):
    pass


class FailingOrderLog(RecordingActivityLog):
    """Inventory entries go through; the order entry at the end fails"""

    def append_order_log(self, order_id, activity_type, details=None, user_id=None):
        raise LogSinkDown(f"cannot record {activity_type}")


class FailingAfterFirstInventoryEntry(RecordingActivityLog):

    def append_inventory_log(self, product_id, change_type, quantity_change, reason):
        if self.inventory_entries:
            raise LogSinkDown("inventory log unavailable")
        return super().append_inventory_log(product_id, change_type, quantity_change, reason)


def snapshot(order_id, product_ids):
    db.session.expire_all()
    order = db.session.get(Order, order_id)
    return (
        order.status,
        order.total_amount,
        [i.cancelled_quantity for i in order.order_items],
        [stock_of(pid) for pid in product_ids],
        InventoryLog.query.count(),
        OrderLog.query.count(),
    )


@pytest.fixture
def confirmed_order(engine, make_product):
    first = make_product('First', '10.00', stock=10)
    second = make_product('Second', '5.00', stock=10)
    order = place_order(engine, (first, 2), (second, 3))
    engine.confirm_order(order.id)
    return order.id, [first.id, second.id]


def test_confirm_rolls_back_when_final_log_fails(activity_log, make_product):
    first = make_product('First', stock=10)
    second = make_product('Second', stock=10)
    order = place_order(OrderLifecycleEngine(activity_log), (first, 2), (second, 3))
    before = snapshot(order.id, [first.id, second.id])

    with pytest.raises(LogSinkDown):
        OrderLifecycleEngine(FailingOrderLog()).confirm_order(order.id)

    assert snapshot(order.id, [first.id, second.id]) == before
    assert before[0] == Order.STATUS_PENDING
    assert before[3] == [10, 10]


def test_confirm_rolls_back_midway_through_deductions(activity_log, make_product):
    first = make_product('First', stock=10)
    second = make_product('Second', stock=10)
    order = place_order(OrderLifecycleEngine(activity_log), (first, 2), (second, 3))
    before = snapshot(order.id, [first.id, second.id])

    with pytest.raises(LogSinkDown):
        OrderLifecycleEngine(FailingAfterFirstInventoryEntry()).confirm_order(order.id)

    assert snapshot(order.id, [first.id, second.id]) == before


def test_cancel_rolls_back_when_log_fails(confirmed_order):
    order_id, product_ids = confirmed_order
    before = snapshot(order_id, product_ids)

    with pytest.raises(LogSinkDown):
        OrderLifecycleEngine(FailingOrderLog()).cancel_order(order_id)

    after = snapshot(order_id, product_ids)
    assert after == before
    assert after[0] == Order.STATUS_CONFIRMED
    assert after[1] == Decimal('35.00')
    assert after[3] == [8, 7]


def test_cancel_items_rolls_back_when_log_fails(confirmed_order):
    order_id, product_ids = confirmed_order
    item_ids = [i.id for i in db.session.get(Order, order_id).order_items]
    before = snapshot(order_id, product_ids)

    with pytest.raises(LogSinkDown):
        OrderLifecycleEngine(FailingAfterFirstInventoryEntry()).cancel_order_items(order_id, [
            {'order_item_id': item_ids[0], 'quantity': 1},
            {'order_item_id': item_ids[1], 'quantity': 1},
        ])

    assert snapshot(order_id, product_ids) == before


def test_create_rolls_back_when_log_fails(make_product):
    product = make_product(stock=10)

    with pytest.raises(LogSinkDown):
        OrderLifecycleEngine(FailingOrderLog()).create_order([{'product_id': product.id, 'quantity': 1}])

    assert Order.query.count() == 0
    assert stock_of(product.id) == 10
