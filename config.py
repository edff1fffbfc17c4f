import os
from datetime import timedelta

from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

load_dotenv(os.path.join(BASE_DIR, '.env'))


class Config:
    # Основные настройки
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-here'

    # База данных
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or f"sqlite:///{os.path.join(BASE_DIR, 'instance', 'grow4bot.db')}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT настройки
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.environ.get('JWT_EXPIRES_DAYS', 7)))

    # Cookie с токеном сессии
    AUTH_COOKIE_NAME = os.environ.get('AUTH_COOKIE_NAME', 'token')
    AUTH_COOKIE_SECURE = os.environ.get('AUTH_COOKIE_SECURE', 'False').lower() == 'true'
    AUTH_COOKIE_SAMESITE = os.environ.get('AUTH_COOKIE_SAMESITE', 'Lax')

    # Учётные записи
    ADMIN_EMAIL = (os.environ.get('ADMIN_EMAIL') or 'admin@grow4bot.com').strip().lower()
    PASSWORD_MIN_LENGTH = int(os.environ.get('PASSWORD_MIN_LENGTH', 6))

    # Количество попыток покупки при конфликте записи
    PURCHASE_MAX_ATTEMPTS = int(os.environ.get('PURCHASE_MAX_ATTEMPTS', 3))

    # Настройки приложения
    APP_PORT = int(os.environ.get('APP_PORT', 5001))
    APP_HOST = os.environ.get('APP_HOST', '0.0.0.0')
    DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'

    # Настройки логирования
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE', 'logs/app.log')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret-key'
    LOG_LEVEL = 'WARNING'
    LOG_FILE = None
