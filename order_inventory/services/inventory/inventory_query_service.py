"""
Read-only product and inventory log queries for the API layer
"""
from order_inventory import db
from order_inventory.business.core.errors import ProductNotFoundError
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.inventory.product import Product


class InventoryQueryService:

    @staticmethod
    def list_products():
        return Product.query.order_by(Product.id.asc()).all()

    @staticmethod
    def get_product(product_id):
        product = db.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    @staticmethod
    def get_inventory_logs(product_id):
        """
        Returns:
            (product, logs) with logs newest first
        """
        product = InventoryQueryService.get_product(product_id)
        logs = (
            InventoryLog.query
            .filter(InventoryLog.product_id == product_id)
            .order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())
            .all()
        )
        return product, logs

    @staticmethod
    def low_stock(threshold):
        """Products with stock strictly below threshold, lowest first"""
        return (
            Product.query
            .filter(Product.stock_quantity < threshold)
            .order_by(Product.stock_quantity.asc(), Product.id.asc())
            .all()
        )
