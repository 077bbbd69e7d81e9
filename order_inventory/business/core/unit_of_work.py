"""
Unit of Work

The atomic boundary for one lifecycle or catalog operation. Reads, row locks
and writes all happen on the same session transaction; leaving the block
commits, and any exception rolls back everything done inside it.
"""
from __future__ import annotations

from sqlalchemy.exc import DBAPIError, OperationalError

from order_inventory import db
from order_inventory.business.core.errors import TransientInfrastructureError
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.business.core.unit_of_work")


def is_transient_db_error(exc: BaseException) -> bool:
    """Lock timeouts, deadlocks and dropped connections"""
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


class UnitOfWork:
    """
    Explicit begin/commit/rollback around the Flask-SQLAlchemy session.

    Usage:
        with UnitOfWork() as uow:
            product = uow.products.lock_for_update(product_id)
            ...
    """

    def __init__(self, session=None):
        # Resolve the scoped_session proxy to the real Session for this app context
        self.session = session if session is not None else db.session()
        self.products = None
        self.orders = None
        self._active = False

    def __enter__(self) -> "UnitOfWork":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rollback()
            if is_transient_db_error(exc):
                logger.error(f"Transient database failure, rolled back: {exc}")
                raise TransientInfrastructureError(f"Database temporarily unavailable: {exc}") from exc
            return False
        self.commit()
        return False

    def begin(self) -> None:
        from order_inventory.business.inventory.product_repository import ProductRepository
        from order_inventory.business.orders.order_repository import OrderRepository

        if not self.session.in_transaction():
            self.session.begin()
        self.products = ProductRepository(self.session)
        self.orders = OrderRepository(self.session)
        self._active = True

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        if not self._active:
            raise RuntimeError("commit() called outside an active unit of work")
        try:
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            if is_transient_db_error(e):
                logger.error(f"Transient database failure on commit: {e}")
                raise TransientInfrastructureError(f"Database temporarily unavailable: {e}") from e
            raise
        finally:
            self._active = False

    def rollback(self) -> None:
        self.session.rollback()
        self._active = False


def run_in_unit_of_work(operation, *, retries: int = 0, unit_of_work_factory=UnitOfWork, description: str = "operation"):
    """
    Run ``operation(uow)`` inside a fresh unit of work and return its result.

    The whole operation is re-run up to ``retries`` times when it fails with
    TransientInfrastructureError; every attempt starts from committed state.
    """
    attempt = 0
    while True:
        try:
            with unit_of_work_factory() as uow:
                return operation(uow)
        except TransientInfrastructureError:
            if attempt >= retries:
                logger.error(f"{description} failed after {attempt + 1} attempt(s)")
                raise
            attempt += 1
            logger.warning(f"{description} hit a transient failure, retrying ({attempt}/{retries})")
