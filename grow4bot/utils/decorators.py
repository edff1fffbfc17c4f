from functools import wraps
from flask import jsonify
from flask_login import current_user


def _error(message, status):
    return jsonify({'status': 'error', 'message': message}), status


def auth_required(f):
    """Декоратор для проверки аутентификации"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return _error('Unauthorized', 401)
        return f(*args, **kwargs)
    return decorated_function


def active_user_required(f):
    """Аутентифицированный и не забаненный пользователь (операции с балансом)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return _error('Unauthorized', 401)
        if current_user.is_banned:
            return _error('Your account has been banned', 403)
        return f(*args, **kwargs)
    return decorated_function


def admin_only(f):
    """Декоратор для роутов, доступных только администраторам"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return _error('Unauthorized', 401)
        if current_user.is_banned or not current_user.is_admin:
            return _error('Forbidden - Admin access required', 403)
        return f(*args, **kwargs)
    return decorated_function
