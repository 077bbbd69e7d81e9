from order_inventory import db
from order_inventory.business.core.serialization_mixin import SerializationMixin
from datetime import datetime


class InventoryLog(db.Model, SerializationMixin):
    """Immutable audit row for one stock change on a product"""
    __tablename__ = 'inventory_logs'

    CHANGE_ADDITION = 'addition'
    CHANGE_DEDUCTION = 'deduction'
    CHANGE_RESTORE = 'restore'
    CHANGE_TYPES = (CHANGE_ADDITION, CHANGE_DEDUCTION, CHANGE_RESTORE)

    REASON_ORDER_CONFIRMED = 'order_confirmed'
    REASON_ORDER_CANCELLED = 'order_cancelled'
    REASON_MANUAL_UPDATE = 'manual_update'
    REASON_STOCK_CORRECTION = 'stock_correction'
    REASON_INITIAL_STOCK = 'initial_stock'
    REASONS = (
        REASON_ORDER_CONFIRMED,
        REASON_ORDER_CANCELLED,
        REASON_MANUAL_UPDATE,
        REASON_STOCK_CORRECTION,
        REASON_INITIAL_STOCK,
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey('products.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    change_type = db.Column(db.String(20), nullable=False)
    # Always a positive magnitude; direction lives in change_type
    quantity_change = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('quantity_change >= 0', name='ck_inventory_log_magnitude'),
    )

    product = db.relationship('Product', back_populates='inventory_logs')

    def __repr__(self):
        return f'<InventoryLog {self.change_type}: Product {self.product_id}, Qty {self.quantity_change} ({self.reason})>'

    @property
    def signed_change(self):
        """Quantity change with direction applied"""
        if self.change_type == self.CHANGE_DEDUCTION:
            return -self.quantity_change
        return self.quantity_change

    def to_dict(self, include_audit_fields=True):
        data = super().to_dict(include_audit_fields)
        data['signed_change'] = self.signed_change
        return data
