from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, logout_user

from grow4bot import get_services
from grow4bot.services.auth_service import clear_auth_cookie, get_token, set_auth_cookie
from grow4bot.utils.serializer import serialize_user
from grow4bot.utils.validators import validate_credentials

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _credentials_or_error():
    result = validate_credentials(
        request.get_json(silent=True),
        password_min_length=current_app.config['PASSWORD_MIN_LENGTH'],
    )
    if not result.ok:
        return None, (jsonify({'status': 'error', 'message': result.error}), 400)
    return result.value, None


@auth_bp.route('/register', methods=['POST'])
def register():
    """Регистрация; после успеха пользователь сразу авторизован"""
    credentials, error = _credentials_or_error()
    if error:
        return error

    user = get_services().accounts.register(credentials)
    response = jsonify(serialize_user(user))
    response.status_code = 201
    return set_auth_cookie(response, user.id)


@auth_bp.route('/login', methods=['POST'])
def login():
    credentials, error = _credentials_or_error()
    if error:
        return error

    user = get_services().accounts.authenticate(credentials)
    return set_auth_cookie(jsonify(serialize_user(user)), user.id)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    logout_user()
    return clear_auth_cookie(jsonify({'message': 'Logged out successfully'}))


@auth_bp.route('/me')
def me():
    if not current_user.is_authenticated:
        response = jsonify({'status': 'error', 'message': 'Not authenticated'})
        response.status_code = 401
        # Токен есть, а пользователя уже нет
        if get_token():
            clear_auth_cookie(response)
        return response
    return jsonify(serialize_user(current_user))
