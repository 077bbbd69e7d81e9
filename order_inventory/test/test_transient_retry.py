"""
Transient database failures roll back and re-run the whole operation
"""
import pytest
from sqlalchemy.exc import OperationalError

from order_inventory import db
from order_inventory.business.core.errors import TransientInfrastructureError
from order_inventory.business.core.unit_of_work import UnitOfWork, is_transient_db_error, run_in_unit_of_work
from order_inventory.business.orders.order_lifecycle_engine import OrderLifecycleEngine
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.orders.order import Order
from order_inventory.test.conftest import place_order, stock_of


class FlakyCommitFactory:
    """Unit of work factory whose first ``failures`` commits hit a lock timeout"""

    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        factory = self

        class FlakyUnitOfWork(UnitOfWork):
            def commit(self):
                if factory.failures > 0:
                    factory.failures -= 1
                    self.rollback()
                    raise TransientInfrastructureError("lock wait timeout exceeded")
                super().commit()

        return FlakyUnitOfWork()


def test_confirm_retries_once_and_deducts_once(activity_log, make_product):
    product = make_product(stock=10)
    order = place_order(OrderLifecycleEngine(activity_log), (product, 3))

    factory = FlakyCommitFactory(failures=1)
    engine = OrderLifecycleEngine(activity_log, unit_of_work_factory=factory, transient_retries=2)
    engine.confirm_order(order.id)

    assert factory.calls == 2
    assert stock_of(product.id) == 7
    assert InventoryLog.query.count() == 1
    assert db.session.get(Order, order.id).status == Order.STATUS_CONFIRMED


def test_gives_up_after_retries(activity_log, make_product):
    product = make_product(stock=10)
    order = place_order(OrderLifecycleEngine(activity_log), (product, 3))

    factory = FlakyCommitFactory(failures=5)
    engine = OrderLifecycleEngine(activity_log, unit_of_work_factory=factory, transient_retries=1)

    with pytest.raises(TransientInfrastructureError):
        engine.confirm_order(order.id)

    assert factory.calls == 2
    assert stock_of(product.id) == 10
    assert db.session.get(Order, order.id).status == Order.STATUS_PENDING


def test_operational_error_is_mapped_to_transient(app):
    def operation(uow):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with pytest.raises(TransientInfrastructureError):
        run_in_unit_of_work(operation)


def test_non_transient_errors_are_not_retried(app):
    calls = []

    def operation(uow):
        calls.append(1)
        raise KeyError("boom")

    with pytest.raises(KeyError):
        run_in_unit_of_work(operation, retries=3)
    assert calls == [1]


def test_is_transient_db_error():
    assert is_transient_db_error(OperationalError("SELECT 1", {}, Exception("deadlock")))
    assert not is_transient_db_error(ValueError("nope"))
