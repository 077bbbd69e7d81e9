#!/usr/bin/env python3
#USE VENV: source venv/bin/activate
"""
Run script for the Order and Inventory service
"""

from order_inventory import create_app
from order_inventory.build import build_database
from order_inventory.logger import get_logger
import sys
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import argparse

# Run 'python generate_env.py' to create a .env file with a SECRET_KEY.

app = create_app()
logger = get_logger("order_inventory.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Order and Inventory service')
    parser.add_argument('--build-only', action='store_true',
                       help='Create database tables and exit without starting the web server')
    parser.add_argument('--demo-data', action='store_true', default=True,
                       help='Seed demo products when the catalog is empty (default: enabled)')
    parser.add_argument('--no-demo-data', action='store_false', dest='demo_data',
                       help='Do not seed demo products')

    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting Order and Inventory service...")

    with app.app_context():
        build_database(demo_data=args.demo_data)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode})")
    app.run(debug=debug_mode, host=host, port=port)
