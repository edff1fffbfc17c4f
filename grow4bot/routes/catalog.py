from flask import Blueprint, jsonify
from flask_login import current_user

from grow4bot import get_services
from grow4bot.utils.decorators import active_user_required
from grow4bot.utils.serializer import serialize_product, serialize_purchase

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api/products')


@catalog_bp.route('', methods=['GET'])
def list_products():
    """Список товаров, новые первыми"""
    include_stock = current_user.is_authenticated and current_user.is_admin
    products = get_services().catalog.list_products()
    return jsonify([serialize_product(p, include_stock=include_stock) for p in products])


@catalog_bp.route('/<int:product_id>/purchase', methods=['POST'])
@active_user_required
def purchase(product_id):
    """Покупка одной единицы товара с баланса"""
    result = get_services().ledger.purchase(current_user.id, product_id)
    return jsonify({
        'purchase': serialize_purchase(result.purchase),
        'stockData': result.stock_data,
    })
