"""
Database build for the order and inventory service
Creates tables and optionally seeds a demo catalog
"""

from order_inventory import db
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.build")

DEMO_PRODUCTS = [
    {'name': 'Widget', 'description': 'Standard widget', 'price': '10.00', 'stock_quantity': 100},
    {'name': 'Gadget', 'description': 'Compact gadget', 'price': '5.00', 'stock_quantity': 50},
    {'name': 'Sprocket', 'description': 'Steel sprocket, 32 teeth', 'price': '7.25', 'stock_quantity': 40},
    {'name': 'Gear Oil', 'description': '1L bottle', 'price': '12.99', 'stock_quantity': 8},
]


def insert_demo_data():
    """
    Insert demo products when the catalog is empty.
    Stock goes through the product manager so every unit is in the inventory log.

    Returns:
        int: number of products created
    """
    from order_inventory.business.inventory.product_manager import ProductManager
    from order_inventory.data.inventory.product import Product

    if db.session.query(Product.id).first() is not None:
        logger.info("Products already present; skipping demo data")
        return 0

    manager = ProductManager()
    for row in DEMO_PRODUCTS:
        manager.create_product(
            row['name'],
            row['price'],
            stock_quantity=row['stock_quantity'],
            description=row['description'],
        )
    logger.info(f"Inserted {len(DEMO_PRODUCTS)} demo products")
    return len(DEMO_PRODUCTS)


def build_database(demo_data=False):
    """
    Create all tables, then seed demo data if requested.
    Must be called inside an application context.
    """
    logger.debug("Creating database tables")
    db.create_all()
    logger.info("Database tables created")

    if demo_data:
        return insert_demo_data()
    return 0
