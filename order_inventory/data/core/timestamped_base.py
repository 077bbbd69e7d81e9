from order_inventory import db
from datetime import datetime
from sqlalchemy.orm import declared_attr
from order_inventory.business.core.serialization_mixin import SerializationMixin


class TimestampedBase(db.Model, SerializationMixin):
    """Abstract base class for mutable catalog and order entities"""

    __abstract__ = True

    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + 's'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
