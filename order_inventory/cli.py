"""
Flask CLI commands
"""
import click
from flask import current_app
from tabulate import tabulate

from order_inventory.logger import get_logger

logger = get_logger("order_inventory.cli")


def register_commands(app):
    @app.cli.command('init-db')
    @click.option('--demo-data', is_flag=True, help='Seed a small demo product catalog')
    def init_db(demo_data):
        """Create database tables."""
        from order_inventory.build import build_database

        created = build_database(demo_data=demo_data)
        click.echo("Database initialized.")
        if demo_data:
            click.echo(f"Demo products created: {created}")

    @app.cli.command('view-stock')
    @click.option('--low', 'threshold', type=int, default=None,
                  help='Only show products below this stock level')
    def view_stock(threshold):
        """Print current stock levels."""
        from order_inventory.services.inventory.inventory_query_service import InventoryQueryService

        if threshold is None:
            products = InventoryQueryService.list_products()
        else:
            products = InventoryQueryService.low_stock(threshold)

        if not products:
            click.echo("No products found.")
            return

        low_level = current_app.config.get('LOW_STOCK_THRESHOLD', 10)
        rows = [
            [p.id, p.name, f"{p.price:.2f}", p.stock_quantity, 'LOW' if p.is_low_stock(low_level) else '']
            for p in products
        ]
        click.echo(tabulate(rows, headers=['ID', 'Name', 'Price', 'Stock', ''], tablefmt='grid'))
