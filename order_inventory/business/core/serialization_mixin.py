"""
Generic serialization mixin for SQLAlchemy models
Provides to_dict so the API layer never hand-maps columns.
"""

from datetime import datetime
from sqlalchemy import inspect


class SerializationMixin:
    """
    Mixin that provides dictionary conversion for SQLAlchemy models

    Models add derived values (subtotals, signed changes) on top of the
    column dictionary in their own to_dict().
    """

    def to_dict(self, include_audit_fields=True):
        """
        Convert model instance to dictionary

        Args:
            include_audit_fields (bool): Whether to include created_at/updated_at

        Returns:
            dict: Dictionary representation of the model's columns
        """
        result = {}

        mapper = inspect(self.__class__)

        for column in mapper.columns:
            if not include_audit_fields and column.key in ['created_at', 'updated_at']:
                continue

            value = getattr(self, column.key)
            if isinstance(value, datetime):
                result[column.key] = value.isoformat()
            else:
                result[column.key] = value

        return result
