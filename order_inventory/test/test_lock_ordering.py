"""
Product rows are locked in ascending id order regardless of line order
"""
from order_inventory import db
from order_inventory.business.core.unit_of_work import UnitOfWork
from order_inventory.business.orders.order_lifecycle_engine import OrderLifecycleEngine
from order_inventory.data.orders.order import Order
from order_inventory.test.conftest import place_order


class RecordingUnitOfWorkFactory:
    def __init__(self):
        self.units = []

    def __call__(self):
        uow = UnitOfWork()
        self.units.append(uow)
        return uow


def engine_with_recorder(activity_log):
    factory = RecordingUnitOfWorkFactory()
    return OrderLifecycleEngine(activity_log, unit_of_work_factory=factory), factory


def test_confirm_locks_products_sorted(activity_log, make_product):
    products = [make_product(f'P{i}', stock=10) for i in range(4)]
    engine, factory = engine_with_recorder(activity_log)

    # Listed highest id first
    order = place_order(engine, *[(p, 1) for p in reversed(products)])
    engine.confirm_order(order.id)

    confirm_uow = factory.units[-1]
    assert confirm_uow.products.lock_order == sorted(p.id for p in products)
    # Ledger entries follow the same order
    product_ids = [entry[0] for entry in activity_log.inventory_entries]
    assert product_ids == sorted(product_ids)


def test_cancel_locks_products_sorted(activity_log, make_product):
    first, second, third = (make_product(f'P{i}', stock=10) for i in range(3))
    engine, factory = engine_with_recorder(activity_log)

    order = place_order(engine, (third, 1), (first, 1), (second, 1), (first, 2))
    engine.confirm_order(order.id)
    engine.cancel_order(order.id)

    assert factory.units[-1].products.lock_order == [first.id, second.id, third.id]


def test_cancel_items_locks_only_affected_products_sorted(activity_log, make_product):
    first, second, third = (make_product(f'P{i}', stock=10) for i in range(3))
    engine, factory = engine_with_recorder(activity_log)

    order = place_order(engine, (third, 2), (second, 2), (first, 2))
    engine.confirm_order(order.id)
    items = {i.product_id: i.id for i in db.session.get(Order, order.id).order_items}

    engine.cancel_order_items(order.id, [
        {'order_item_id': items[third.id], 'quantity': 1},
        {'order_item_id': items[first.id], 'quantity': 1},
    ])

    assert factory.units[-1].products.lock_order == [first.id, third.id]


def test_create_takes_no_product_locks(activity_log, make_product):
    product = make_product(stock=10)
    engine, factory = engine_with_recorder(activity_log)

    place_order(engine, (product, 1))

    assert factory.units[-1].products.lock_order == []
