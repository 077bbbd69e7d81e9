"""
JSON API blueprint

Thin mapping from HTTP to the lifecycle engine and product manager. Core
errors are translated to status codes by their ``kind``.
"""
from flask import Blueprint, current_app, jsonify, request

from order_inventory.business.core.errors import (
    OrderInventoryError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.routes.api")

api_bp = Blueprint('api', __name__)

STATUS_BY_KIND = {
    'validation': 422,
    'state_conflict': 409,
    'insufficient_stock': 409,
    'transient': 503,
}


def respond(data=None, message=None, status='success', code=200):
    body = {'status': status}
    if message is not None:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), code


def json_body():
    """Request JSON as a dict; a missing or unparsable body counts as empty"""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError.for_field('body', "Request body must be a JSON object")
    return payload


def actor_id():
    """Optional acting user id supplied by an upstream gateway"""
    return request.headers.get('X-User-Id', type=int)


def lifecycle_engine():
    from order_inventory.business.orders.order_lifecycle_engine import OrderLifecycleEngine
    return OrderLifecycleEngine.from_config(current_app.config)


def product_manager():
    from order_inventory.business.inventory.product_manager import ProductManager
    return ProductManager.from_config(current_app.config)


@api_bp.errorhandler(OrderInventoryError)
def handle_core_error(error):
    if isinstance(error, (OrderNotFoundError, ProductNotFoundError)):
        code = 404
    else:
        code = STATUS_BY_KIND.get(error.kind, 500)

    if code >= 500:
        logger.error(f"{request.method} {request.path} failed: {error.message}")
    else:
        logger.info(f"{request.method} {request.path} rejected ({error.kind}): {error.message}")

    body = {'status': 'error', 'message': error.message, 'error': error.to_dict()}
    if getattr(error, 'errors', None):
        body['errors'] = error.errors
    return jsonify(body), code


from . import orders, products  # noqa: E402,F401
