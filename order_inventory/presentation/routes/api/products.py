"""
Product and stock API routes
"""
from flask import current_app, request

from order_inventory.business.core.errors import ValidationError
from order_inventory.data.inventory.inventory_log import InventoryLog
from order_inventory.presentation.routes.api import api_bp, json_body, product_manager, respond
from order_inventory.services.inventory.inventory_query_service import InventoryQueryService


@api_bp.route('/products', methods=['GET'])
def list_products():
    return respond([product.to_dict() for product in InventoryQueryService.list_products()])


@api_bp.route('/products', methods=['POST'])
def create_product():
    payload = json_body()
    if 'price' not in payload:
        raise ValidationError.for_field('price', "Price is required")
    product = product_manager().create_product(
        payload.get('name'),
        payload.get('price'),
        stock_quantity=payload.get('stock_quantity', 0),
        description=payload.get('description'),
    )
    return respond(product.to_dict(), 'Product created successfully', code=201)


@api_bp.route('/products/low-stock', methods=['GET'])
def low_stock():
    threshold = request.args.get('threshold', type=int)
    if threshold is None:
        threshold = current_app.config.get('LOW_STOCK_THRESHOLD', 10)
    products = InventoryQueryService.low_stock(threshold)
    return respond([
        {'id': p.id, 'name': p.name, 'stock_quantity': p.stock_quantity}
        for p in products
    ])


@api_bp.route('/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    return respond(InventoryQueryService.get_product(product_id).to_dict())


@api_bp.route('/products/<int:product_id>', methods=['PUT', 'PATCH'])
def update_product(product_id):
    product = product_manager().update_product(product_id, **json_body())
    return respond(product.to_dict(), 'Product updated successfully')


@api_bp.route('/products/<int:product_id>', methods=['DELETE'])
def delete_product(product_id):
    product_manager().delete_product(product_id)
    return respond(message='Product deleted successfully')


@api_bp.route('/products/<int:product_id>/stock', methods=['PUT'])
def update_stock(product_id):
    payload = json_body()
    if 'stock_quantity' not in payload:
        raise ValidationError.for_field('stock_quantity', "New stock quantity is required")
    product = product_manager().set_stock(
        product_id,
        payload['stock_quantity'],
        reason=payload.get('reason') or InventoryLog.REASON_MANUAL_UPDATE,
    )
    return respond(
        {'id': product.id, 'name': product.name, 'stock_quantity': product.stock_quantity},
        'Stock updated successfully',
    )


@api_bp.route('/products/<int:product_id>/logs', methods=['GET'])
def inventory_logs(product_id):
    product, logs = InventoryQueryService.get_inventory_logs(product_id)
    return respond({
        'product': {'id': product.id, 'name': product.name, 'current_stock': product.stock_quantity},
        'logs': [log.to_dict() for log in logs],
    })
