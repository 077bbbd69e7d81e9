from order_inventory.data.inventory.product import Product
from order_inventory.data.inventory.inventory_log import InventoryLog

__all__ = ['Product', 'InventoryLog']
