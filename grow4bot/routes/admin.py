from flask import Blueprint, jsonify, request
from flask_login import current_user

from grow4bot import get_services
from grow4bot.utils.decorators import admin_only
from grow4bot.utils.serializer import serialize_product, serialize_user
from grow4bot.utils.validators import (
    validate_amount_request,
    validate_ban_request,
    validate_product,
    validate_product_update,
)

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


def _bad_request(message):
    return jsonify({'status': 'error', 'message': message}), 400


@admin_bp.route('/users')
@admin_only
def list_users():
    """Список всех пользователей"""
    users = get_services().store.list_users()
    return jsonify([serialize_user(u) for u in users])


@admin_bp.route('/users/<int:user_id>/ban', methods=['PATCH'])
@admin_only
def ban_user(user_id):
    result = validate_ban_request(request.get_json(silent=True))
    if not result.ok:
        return _bad_request(result.error)

    user = get_services().ledger.set_banned(current_user.id, user_id, result.value.banned)
    return jsonify(serialize_user(user))


@admin_bp.route('/users/<int:user_id>/balance', methods=['POST'])
@admin_only
def add_balance(user_id):
    result = validate_amount_request(request.get_json(silent=True))
    if not result.ok:
        return _bad_request(result.error)

    balance = get_services().ledger.admin_add_balance(current_user.id, user_id, result.value.amount)
    return jsonify({'balance': balance})


@admin_bp.route('/products')
@admin_only
def list_products():
    """Товары вместе со строками склада"""
    products = get_services().catalog.list_products()
    return jsonify([serialize_product(p, include_stock=True) for p in products])


@admin_bp.route('/products', methods=['POST'])
@admin_only
def create_product():
    result = validate_product(request.get_json(silent=True))
    if not result.ok:
        return _bad_request(result.error)

    product = get_services().catalog.create_product(result.value)
    return jsonify(serialize_product(product, include_stock=True)), 201


@admin_bp.route('/products/<int:product_id>', methods=['PATCH'])
@admin_only
def update_product(product_id):
    result = validate_product_update(request.get_json(silent=True))
    if not result.ok:
        return _bad_request(result.error)

    product = get_services().catalog.update_product(product_id, result.value)
    return jsonify(serialize_product(product, include_stock=True))


@admin_bp.route('/products/<int:product_id>', methods=['DELETE'])
@admin_only
def delete_product(product_id):
    get_services().catalog.delete_product(product_id)
    return jsonify({'message': 'Product deleted'})
