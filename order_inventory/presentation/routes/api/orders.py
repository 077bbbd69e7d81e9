"""
Order API routes
"""
from order_inventory.presentation.routes.api import (
    actor_id,
    api_bp,
    json_body,
    lifecycle_engine,
    respond,
)
from order_inventory.services.orders.order_query_service import OrderQueryService
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.routes.api.orders")


@api_bp.route('/orders', methods=['GET'])
def list_orders():
    orders = OrderQueryService.list_orders()
    return respond([order.to_dict(include_items=False) for order in orders])


@api_bp.route('/orders', methods=['POST'])
def create_order():
    payload = json_body()
    order = lifecycle_engine().create_order(payload.get('products'), user_id=actor_id())
    return respond({'order': order.to_dict()}, 'Order created successfully', code=201)


@api_bp.route('/orders/<int:order_id>', methods=['GET'])
def get_order(order_id):
    order = OrderQueryService.get_order(order_id)
    return respond(order.to_dict())


@api_bp.route('/orders/<int:order_id>/confirm', methods=['PUT', 'POST'])
def confirm_order(order_id):
    order = lifecycle_engine().confirm_order(order_id, user_id=actor_id())
    return respond({'order': order.to_dict()}, 'Order confirmed and inventory updated')


@api_bp.route('/orders/<int:order_id>/cancel', methods=['PUT', 'POST'])
def cancel_order(order_id):
    order = lifecycle_engine().cancel_order(order_id, user_id=actor_id())
    return respond({'order': order.to_dict()}, 'Order cancelled successfully')


@api_bp.route('/orders/<int:order_id>/cancel-items', methods=['PUT', 'POST'])
def cancel_order_items(order_id):
    payload = json_body()
    result = lifecycle_engine().cancel_order_items(order_id, payload.get('items'), user_id=actor_id())
    return respond(
        {'order': result.order.to_dict(), 'items_cancelled': result.cancelled_items},
        result.message,
        status='info' if result.nothing_cancelled else 'success',
    )


@api_bp.route('/orders/<int:order_id>/activity', methods=['GET'])
def order_activity(order_id):
    order, logs = OrderQueryService.get_order_activity(order_id)
    return respond({
        'order': {
            'id': order.id,
            'order_number': order.order_number,
            'status': order.status,
            'total_amount': order.total_amount,
        },
        'logs': [log.to_dict() for log in logs],
    })
