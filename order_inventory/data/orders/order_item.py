from order_inventory import db
from order_inventory.data.core.timestamped_base import TimestampedBase
from order_inventory.business.orders import order_calculations


class OrderItem(TimestampedBase):
    """One product line on an order, priced at order-creation time"""
    __tablename__ = 'order_items'

    order_id = db.Column(db.Integer, db.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    cancelled_quantity = db.Column(db.Integer, nullable=False, default=0)
    # Snapshot of Product.price when the order was created
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_order_item_quantity_positive'),
        db.CheckConstraint(
            'cancelled_quantity >= 0 AND cancelled_quantity <= quantity',
            name='ck_order_item_cancelled_range',
        ),
    )

    # Relationships
    order = db.relationship('Order', back_populates='order_items')
    product = db.relationship('Product', back_populates='order_items')

    def __repr__(self):
        return f'<OrderItem {self.id} Order:{self.order_id} Product:{self.product_id} Qty:{self.quantity} Cancelled:{self.cancelled_quantity}>'

    @property
    def active_quantity(self):
        return order_calculations.active_quantity(self)

    @property
    def remaining_cancellable(self):
        return order_calculations.remaining_cancellable(self)

    @property
    def is_fully_cancelled(self):
        return order_calculations.is_item_fully_cancelled(self)

    @property
    def subtotal(self):
        return order_calculations.item_subtotal(self)

    def to_dict(self, include_audit_fields=True):
        data = super().to_dict(include_audit_fields)
        data['active_quantity'] = self.active_quantity
        data['is_fully_cancelled'] = self.is_fully_cancelled
        data['subtotal'] = self.subtotal
        return data
