from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from order_inventory.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "200 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(test_config=None):
    from pathlib import Path

    app = Flask(__name__)

    logger = get_logger("order_inventory")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # Prefer an explicit DATABASE_URL env var; otherwise keep the SQLite
    # database inside the project's `instance/` directory.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        base_dir = Path(__file__).parent.parent
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'order_inventory.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Order lifecycle settings
    app.config['ORDER_NUMBER_PREFIX'] = os.environ.get('ORDER_NUMBER_PREFIX', 'ORD-')
    app.config['LIFECYCLE_TRANSIENT_RETRIES'] = int(os.environ.get('LIFECYCLE_TRANSIENT_RETRIES', '2'))
    app.config['LOW_STOCK_THRESHOLD'] = int(os.environ.get('LOW_STOCK_THRESHOLD', '10'))

    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')

    if test_config:
        app.config.update(test_config)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    logger.debug(f"Database configured: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    from order_inventory.data.core.sqlite_locking import enable_immediate_transactions
    with app.app_context():
        enable_immediate_transactions(db.engine)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from order_inventory.data.inventory.product import Product
    from order_inventory.data.inventory.inventory_log import InventoryLog
    from order_inventory.data.orders.order import Order
    from order_inventory.data.orders.order_item import OrderItem
    from order_inventory.data.orders.order_log import OrderLog

    logger.debug("Models imported and registered")

    # Register blueprints
    from order_inventory.presentation.routes import init_app as init_routes
    init_routes(app)

    from order_inventory.cli import register_commands
    register_commands(app)

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        return response

    logger.info("Flask application initialization complete")

    return app
