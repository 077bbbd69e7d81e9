"""
ProductManager - Business logic for the product catalog

Responsibilities:
- Create products (recording initial stock in the inventory log)
- Update descriptive fields and price
- Set absolute stock levels through the Inventory Ledger
- Delete products that no order refers to
"""
from __future__ import annotations

from order_inventory.business.activity.activity_log import ActivityLog, SqlActivityLog
from order_inventory.business.core.errors import ValidationError
from order_inventory.business.core.money import to_money
from order_inventory.business.core.unit_of_work import UnitOfWork, run_in_unit_of_work
from order_inventory.business.inventory.inventory_ledger import InventoryLedger
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.data.inventory.product import Product
from order_inventory.data.orders.order_item import OrderItem
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.business.inventory.product_manager")

# Reasons a caller may give for a manual stock change
MANUAL_STOCK_REASONS = (InventoryLog.REASON_MANUAL_UPDATE, InventoryLog.REASON_STOCK_CORRECTION)
UPDATABLE_FIELDS = ('name', 'description', 'price')


def _validate_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValidationError.for_field('name', "Product name is required")
    if len(name) > 255:
        raise ValidationError.for_field('name', "Product name cannot exceed 255 characters")
    return name.strip()


def _validate_price(price):
    try:
        amount = to_money(price)
    except ValueError:
        raise ValidationError.for_field('price', "Price must be a number")
    if amount < 0:
        raise ValidationError.for_field('price', "Price cannot be negative")
    return amount


def _validate_stock(quantity, field='stock_quantity'):
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError.for_field(field, "Stock quantity must be a whole number")
    if quantity < 0:
        raise ValidationError.for_field(field, "Stock quantity cannot be negative")
    return quantity


class ProductManager:
    """Handles product catalog operations"""

    def __init__(self, activity_log: ActivityLog | None = None, *, unit_of_work_factory=UnitOfWork, transient_retries: int = 0):
        self.activity_log = activity_log or SqlActivityLog()
        self.unit_of_work_factory = unit_of_work_factory
        self.transient_retries = transient_retries

    @classmethod
    def from_config(cls, config, activity_log: ActivityLog | None = None) -> "ProductManager":
        return cls(activity_log, transient_retries=config.get('LIFECYCLE_TRANSIENT_RETRIES', 0))

    def _run(self, operation, description):
        return run_in_unit_of_work(
            operation,
            retries=self.transient_retries,
            unit_of_work_factory=self.unit_of_work_factory,
            description=description,
        )

    def create_product(self, name, price, stock_quantity=0, description=None) -> Product:
        """
        Create a product. A positive starting stock is logged as an
        initial_stock addition.

        Raises:
            ValidationError: bad name, price or stock
        """
        name = _validate_name(name)
        price = _validate_price(price)
        stock_quantity = _validate_stock(stock_quantity)

        def operation(uow):
            product = uow.products.add(Product(
                name=name,
                description=description,
                price=price,
                stock_quantity=0,
            ))
            uow.flush()

            if stock_quantity > 0:
                ledger = InventoryLedger(uow.products, self.activity_log)
                ledger.adjust_stock(product.id, stock_quantity, InventoryLog.REASON_INITIAL_STOCK)

            logger.info(f"Created product {product.id} {product.name!r} with stock {stock_quantity}")
            return product

        return self._run(operation, "create product")

    def update_product(self, product_id, **fields) -> Product:
        """
        Update name, description and/or price.

        Existing order items keep the unit price captured when they were created.

        Raises:
            ProductNotFoundError, ValidationError
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if 'stock_quantity' in unknown:
            raise ValidationError.for_field('stock_quantity', "Use the stock endpoint to change stock levels")
        if unknown:
            raise ValidationError.for_field(sorted(unknown)[0], f"Unknown product field(s): {', '.join(sorted(unknown))}")

        changes = {}
        if 'name' in fields:
            changes['name'] = _validate_name(fields['name'])
        if 'price' in fields:
            changes['price'] = _validate_price(fields['price'])
        if 'description' in fields:
            changes['description'] = fields['description']

        def operation(uow):
            product = uow.products.get_or_raise(product_id)
            for key, value in changes.items():
                setattr(product, key, value)
            logger.info(f"Updated product {product_id}: {sorted(changes)}")
            return product

        return self._run(operation, f"update product {product_id}")

    def set_stock(self, product_id, new_quantity, reason=InventoryLog.REASON_MANUAL_UPDATE) -> Product:
        """
        Set a product's stock to an absolute level; the difference is applied
        through the ledger under the row lock.

        Raises:
            ProductNotFoundError, ValidationError
        """
        new_quantity = _validate_stock(new_quantity)
        if reason not in MANUAL_STOCK_REASONS:
            raise ValidationError.for_field(
                'reason', f"Reason must be one of: {', '.join(MANUAL_STOCK_REASONS)}"
            )

        def operation(uow):
            product = uow.products.lock_for_update(product_id)
            delta = new_quantity - (product.stock_quantity or 0)
            if delta == 0:
                logger.debug(f"Stock for product {product_id} already {new_quantity}; nothing logged")
                return product

            ledger = InventoryLedger(uow.products, self.activity_log)
            adjustment = ledger.adjust_stock(product_id, delta, reason)
            logger.info(f"Stock for product {product_id} set {adjustment.previous_quantity} -> {adjustment.new_quantity} ({reason})")
            return product

        return self._run(operation, f"set stock for product {product_id}")

    def delete_product(self, product_id) -> None:
        """
        Delete a product and, by cascade, its inventory log.

        Raises:
            ProductNotFoundError
            ValidationError: the product appears on an order
        """
        def operation(uow):
            product = uow.products.lock_for_update(product_id)
            referenced = uow.session.query(OrderItem.id).filter(OrderItem.product_id == product_id).first()
            if referenced is not None:
                raise ValidationError.for_field(
                    'product_id', f"Product {product_id} is referenced by existing orders and cannot be deleted"
                )
            uow.products.delete(product)
            logger.info(f"Deleted product {product_id}")

        self._run(operation, f"delete product {product_id}")
