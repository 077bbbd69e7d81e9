"""
Pytest configuration and fixtures for the order and inventory core
"""
import pytest
from sqlalchemy import func

from order_inventory import create_app
from order_inventory import db as _db
from order_inventory.business.activity.activity_log import ActivityLog, SqlActivityLog
from order_inventory.business.core.money import to_money
from order_inventory.business.orders.order_lifecycle_engine import OrderLifecycleEngine
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.inventory.product import Product
from order_inventory.data.orders.order import Order


TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'RATELIMIT_ENABLED': False,
    'LIFECYCLE_TRANSIENT_RETRIES': 0,
}


class RecordingActivityLog(ActivityLog):
    """Writes through to the SQL log and remembers what each call asked for"""

    def __init__(self):
        self._sql = SqlActivityLog()
        self.order_entries = []
        self.inventory_entries = []

    def append_order_log(self, order_id, activity_type, details=None, user_id=None):
        self.order_entries.append((order_id, activity_type, details, user_id))
        return self._sql.append_order_log(order_id, activity_type, details, user_id)

    def append_inventory_log(self, product_id, change_type, quantity_change, reason):
        self.inventory_entries.append((product_id, change_type, quantity_change, reason))
        return self._sql.append_inventory_log(product_id, change_type, quantity_change, reason)


class InvariantChecker:
    """
    Re-reads every order and product from the database and asserts the
    aggregate invariants. ``before()`` records stock levels so ``check()``
    can reconcile each product's change with the inventory log rows written
    in between.
    """

    def __init__(self):
        self.cancelled_seen = {}
        self.checks = 0
        self._stock_before = None
        self._last_log_id = 0

    def before(self):
        _db.session.expire_all()
        self._stock_before = {p.id: p.stock_quantity for p in Product.query}
        self._last_log_id = _db.session.query(func.max(InventoryLog.id)).scalar() or 0

    def check(self):
        _db.session.expire_all()
        self.checks += 1

        for order in Order.query.order_by(Order.id):
            assert order.total_amount == order.calculate_active_total(), order
            assert order.is_fully_cancelled == order.is_cancelled, order
            if order.is_cancelled:
                assert order.total_amount == 0
            if order.status == Order.STATUS_PARTIALLY_CANCELLED:
                assert order.is_partially_cancelled
            if order.status == Order.STATUS_CONFIRMED:
                assert not order.is_partially_cancelled

            for item in order.order_items:
                assert 0 <= item.cancelled_quantity <= item.quantity, item
                assert item.cancelled_quantity >= self.cancelled_seen.get(item.id, 0), item
                self.cancelled_seen[item.id] = item.cancelled_quantity

        new_logs = InventoryLog.query.filter(InventoryLog.id > self._last_log_id).all()
        for product in Product.query:
            assert product.stock_quantity >= 0, product
            if self._stock_before is not None and product.id in self._stock_before:
                logged = sum(log.signed_change for log in new_logs if log.product_id == product.id)
                assert product.stock_quantity - self._stock_before[product.id] == logged, product
        self._stock_before = None


class InvariantCheckingEngine(OrderLifecycleEngine):

    def __init__(self, *args, invariants, **kwargs):
        super().__init__(*args, **kwargs)
        self.invariants = invariants

    def _run(self, operation, description):
        self.invariants.before()
        try:
            return super()._run(operation, description)
        finally:
            self.invariants.check()


@pytest.fixture(scope='function')
def app():
    """Create Flask application with a fresh in-memory schema"""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def activity_log(app):
    return RecordingActivityLog()


@pytest.fixture(scope='function')
def invariants(app):
    return InvariantChecker()


@pytest.fixture(scope='function')
def engine(activity_log, invariants):
    """Lifecycle engine that re-checks every order and product around each operation"""
    return InvariantCheckingEngine(activity_log, invariants=invariants)


@pytest.fixture(scope='function')
def make_product(app):
    """Insert a product directly, bypassing the ledger (no initial log entry)"""
    def _make(name='Widget', price='10.00', stock=10):
        product = Product(name=name, price=to_money(price), stock_quantity=stock)
        _db.session.add(product)
        _db.session.commit()
        return product
    return _make


def stock_of(product_id):
    """Current committed stock for a product"""
    _db.session.expire_all()
    return _db.session.get(Product, product_id).stock_quantity


def place_order(engine, *lines):
    """place_order(engine, (product, qty), ...) -> Order"""
    return engine.create_order([{'product_id': p.id, 'quantity': q} for p, q in lines])
