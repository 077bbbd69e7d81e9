from order_inventory import db
from order_inventory.business.core.serialization_mixin import SerializationMixin
from datetime import datetime


class OrderLog(db.Model, SerializationMixin):
    """Immutable activity row for an order lifecycle event"""
    __tablename__ = 'order_logs'

    ACTIVITY_CREATED = 'created'
    ACTIVITY_CONFIRMED = 'confirmed'
    ACTIVITY_CANCELLED = 'cancelled'
    ACTIVITY_PARTIALLY_CANCELLED = 'partially_cancelled'
    ACTIVITY_UPDATED = 'updated'
    ACTIVITY_TYPES = (
        ACTIVITY_CREATED,
        ACTIVITY_CONFIRMED,
        ACTIVITY_CANCELLED,
        ACTIVITY_PARTIALLY_CANCELLED,
        ACTIVITY_UPDATED,
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer,
        db.ForeignKey('orders.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    activity_type = db.Column(db.String(30), nullable=False)
    details = db.Column(db.JSON, nullable=True)
    # Actor, when the request layer knows one
    user_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    order = db.relationship('Order', back_populates='order_logs')

    def __repr__(self):
        return f'<OrderLog {self.activity_type}: Order {self.order_id}>'
