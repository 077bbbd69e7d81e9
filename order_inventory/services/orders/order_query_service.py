"""
Read-only order queries for the API layer
"""
from sqlalchemy.orm import selectinload

from order_inventory import db
from order_inventory.business.core.errors import OrderNotFoundError
from order_inventory.data.orders.order import Order
from order_inventory.data.orders.order_item import OrderItem
from order_inventory.data.orders.order_log import OrderLog


class OrderQueryService:

    @staticmethod
    def list_orders():
        """All orders with their items, newest first"""
        return (
            Order.query
            .options(selectinload(Order.order_items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def get_order(order_id):
        order = (
            Order.query
            .options(selectinload(Order.order_items).selectinload(OrderItem.product))
            .filter(Order.id == order_id)
            .first()
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def get_order_activity(order_id):
        """
        Returns:
            (order, logs) with logs newest first
        """
        order = db.session.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        logs = (
            OrderLog.query
            .filter(OrderLog.order_id == order_id)
            .order_by(OrderLog.created_at.desc(), OrderLog.id.desc())
            .all()
        )
        return order, logs
