"""
Routes package for the order and inventory service
"""

from order_inventory.logger import get_logger

logger = get_logger("order_inventory.routes")


def init_app(app):
    """Register route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    logger.debug("Route blueprints registered")
