from __future__ import annotations

from sqlalchemy import select

from order_inventory.business.core.errors import OrderNotFoundError
from order_inventory.data.orders.order import Order


class OrderRepository:
    """Order access inside one unit of work"""

    def __init__(self, session):
        self.session = session

    def add(self, order: Order) -> Order:
        self.session.add(order)
        return order

    def get_for_update(self, order_id: int) -> Order:
        """
        Lock the order row before reading its status so a racing confirm or
        cancel on the same order waits for this transaction to finish.
        """
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        order = self.session.execute(stmt).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def order_number_exists(self, order_number: str) -> bool:
        stmt = select(Order.id).where(Order.order_number == order_number)
        return self.session.execute(stmt).first() is not None
