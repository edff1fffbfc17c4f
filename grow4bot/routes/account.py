from flask import Blueprint, jsonify, request
from flask_login import current_user

from grow4bot import get_services
from grow4bot.utils.decorators import active_user_required, auth_required
from grow4bot.utils.serializer import serialize_purchase, serialize_transaction
from grow4bot.utils.validators import validate_amount_request

account_bp = Blueprint('account', __name__, url_prefix='/api')


@account_bp.route('/purchases')
@auth_required
def purchases():
    """Покупки текущего пользователя, новые первыми"""
    items = get_services().store.list_purchases(current_user.id)
    return jsonify([serialize_purchase(p) for p in items])


@account_bp.route('/transactions')
@auth_required
def transactions():
    """Журнал транзакций текущего пользователя, новые первыми"""
    items = get_services().store.list_transactions(current_user.id)
    return jsonify([serialize_transaction(t) for t in items])


@account_bp.route('/wallet/topup', methods=['POST'])
@active_user_required
def topup():
    result = validate_amount_request(request.get_json(silent=True))
    if not result.ok:
        return jsonify({'status': 'error', 'message': result.error}), 400

    balance = get_services().ledger.top_up(current_user.id, result.value.amount)
    return jsonify({'balance': balance})
