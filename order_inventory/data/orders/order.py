from order_inventory import db
from order_inventory.data.core.timestamped_base import TimestampedBase
from order_inventory.business.orders import order_calculations


class Order(TimestampedBase):
    """Customer order header; owns its items exclusively"""
    __tablename__ = 'orders'

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_PARTIALLY_CANCELLED = 'partially_cancelled'
    STATUS_CANCELLED = 'cancelled'
    STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_PARTIALLY_CANCELLED, STATUS_CANCELLED)

    order_number = db.Column(db.String(100), nullable=False, unique=True)
    status = db.Column(db.String(30), nullable=False, default=STATUS_PENDING)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    # Relationships
    order_items = db.relationship(
        'OrderItem',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderItem.id',
    )
    order_logs = db.relationship(
        'OrderLog',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderLog.id',
    )

    def __repr__(self):
        return f'<Order {self.order_number} {self.status} Total:{self.total_amount}>'

    # Properties
    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    @property
    def is_cancelled(self):
        return self.status == self.STATUS_CANCELLED

    @property
    def is_fully_cancelled(self):
        return order_calculations.is_order_fully_cancelled(self.status, self.order_items)

    @property
    def is_partially_cancelled(self):
        return order_calculations.is_order_partially_cancelled(self.status, self.order_items)

    def calculate_active_total(self):
        return order_calculations.calculate_active_total(self.order_items)

    def to_dict(self, include_items=True):
        data = super().to_dict()
        data['gross_total'] = order_calculations.calculate_gross_total(self.order_items)
        if include_items:
            data['order_items'] = [item.to_dict(include_audit_fields=False) for item in self.order_items]
        return data
