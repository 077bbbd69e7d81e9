"""
Data layer: SQLAlchemy models for products, orders and the activity logs
"""
