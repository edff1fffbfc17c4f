import jwt
import logging
from datetime import datetime
from flask import current_app, request
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from grow4bot.errors import Forbidden, Unauthorized, ValidationError

logger = logging.getLogger(__name__)


def generate_jwt_token(user_id):
    """Генерация JWT токена сессии"""
    payload = {
        'user_id': user_id,
        'exp': datetime.utcnow() + current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm='HS256')


def verify_jwt_token(token):
    """Проверка JWT токена"""
    try:
        payload = jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_token():
    """Токен из cookie или заголовка Authorization: Bearer"""
    token = request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])
    if not token:
        auth = request.headers.get('Authorization')
        if auth and auth.lower().startswith('bearer '):
            token = auth.split(' ', 1)[1].strip()
    return token


def get_user_id_from_token(token):
    """Идентификатор пользователя из токена или None"""
    if not token:
        return None
    payload = verify_jwt_token(token)
    if not payload:
        return None
    return payload.get('user_id')


def load_user_from_request(req):
    """request_loader для Flask-Login"""
    from grow4bot import get_services
    user_id = get_user_id_from_token(get_token())
    if user_id is None:
        return None
    return get_services().store.get_user(user_id)


def set_auth_cookie(response, user_id):
    config = current_app.config
    response.set_cookie(
        config['AUTH_COOKIE_NAME'],
        generate_jwt_token(user_id),
        max_age=int(config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds()),
        httponly=True,
        secure=config['AUTH_COOKIE_SECURE'],
        samesite=config['AUTH_COOKIE_SAMESITE'],
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'])
    return response


class AccountService:
    """Регистрация и вход по email/паролю"""

    def __init__(self, store, admin_email=None):
        self.store = store
        self.admin_email = (admin_email or '').strip().lower()

    def register(self, credentials):
        """credentials - Credentials после валидации"""
        if self.store.get_user_by_email(credentials.email):
            raise ValidationError('Email already registered')

        is_admin = bool(self.admin_email) and credentials.email == self.admin_email
        try:
            with self.store.unit_of_work():
                user = self.store.add_user(
                    email=credentials.email,
                    password_hash=generate_password_hash(credentials.password),
                    is_admin=is_admin,
                )
        except IntegrityError:
            # Параллельная регистрация с тем же email
            raise ValidationError('Email already registered')

        logger.info(f"Зарегистрирован пользователь {user.id} ({user.email}), admin={is_admin}")
        return user

    def authenticate(self, credentials):
        user = self.store.get_user_by_email(credentials.email)
        if not user or not check_password_hash(user.password, credentials.password):
            logger.warning(f"Неудачная попытка входа для {credentials.email}")
            raise Unauthorized('Invalid email or password')
        if user.is_banned:
            raise Forbidden('Your account has been banned')
        return user
