from order_inventory.data.orders.order import Order
from order_inventory.data.orders.order_item import OrderItem
from order_inventory.data.orders.order_log import OrderLog

__all__ = ['Order', 'OrderItem', 'OrderLog']
