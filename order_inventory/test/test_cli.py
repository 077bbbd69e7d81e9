"""
Flask CLI commands
"""
from order_inventory.data.inventory.product import Product
from order_inventory.build import DEMO_PRODUCTS


def test_init_db_with_demo_data(runner, app):
    result = runner.invoke(args=['init-db', '--demo-data'])

    assert result.exit_code == 0
    assert 'Database initialized.' in result.output
    assert Product.query.count() == len(DEMO_PRODUCTS)

    # Seeding is skipped once the catalog has products
    result = runner.invoke(args=['init-db', '--demo-data'])
    assert 'Demo products created: 0' in result.output
    assert Product.query.count() == len(DEMO_PRODUCTS)


def test_view_stock(runner, make_product):
    make_product('Widget', '10.00', stock=100)
    make_product('Gear Oil', '12.99', stock=2)

    result = runner.invoke(args=['view-stock'])
    assert result.exit_code == 0
    assert 'Widget' in result.output
    assert 'LOW' in result.output

    result = runner.invoke(args=['view-stock', '--low', '5'])
    assert 'Gear Oil' in result.output
    assert 'Widget' not in result.output


def test_view_stock_empty(runner, app):
    result = runner.invoke(args=['view-stock'])
    assert 'No products found.' in result.output
