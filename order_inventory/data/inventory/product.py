from order_inventory import db
from order_inventory.data.core.timestamped_base import TimestampedBase


class Product(TimestampedBase):
    """Sellable product and its single stock level"""
    __tablename__ = 'products'

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    # Mutated only through InventoryLedger
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.CheckConstraint('stock_quantity >= 0', name='ck_product_stock_non_negative'),
    )

    # Relationships
    inventory_logs = db.relationship(
        'InventoryLog',
        back_populates='product',
        cascade='all, delete-orphan',
        order_by='InventoryLog.id',
    )
    order_items = db.relationship('OrderItem', back_populates='product')

    def __repr__(self):
        return f'<Product {self.id} {self.name!r} Stock:{self.stock_quantity}>'

    def has_stock_for(self, quantity):
        """Check whether current stock covers the requested quantity"""
        return (self.stock_quantity or 0) >= quantity

    def is_low_stock(self, threshold):
        return (self.stock_quantity or 0) < threshold
