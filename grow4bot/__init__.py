from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from config import Config
import logging
import os
import sys

logger = logging.getLogger(__name__)

# Инициализация расширений
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


class Services:
    """Контейнер сервисов приложения, собирается в create_app"""

    def __init__(self, store, ledger, catalog, accounts):
        self.store = store
        self.ledger = ledger
        self.catalog = catalog
        self.accounts = accounts


def configure_logging(app):
    """Настройка логирования по LOG_LEVEL / LOG_FILE"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stdout)]

    log_file = app.config.get('LOG_FILE')
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )
    logging.getLogger('grow4bot').setLevel(level)


def register_error_handlers(app):
    from grow4bot.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        return jsonify({'status': 'error', 'message': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        db.session.rollback()
        logger.exception(f"Ошибка базы данных: {error}")
        return jsonify({'status': 'error', 'message': 'Internal server error'}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception(f"Необработанная ошибка: {error}")
        return jsonify({'status': 'error', 'message': 'Internal server error'}), 500


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Инициализация расширений
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Сборка сервисов: хранилище передаётся явно
    from grow4bot.services.record_store import SQLAlchemyRecordStore
    from grow4bot.services.ledger_service import LedgerService
    from grow4bot.services.catalog_service import CatalogService
    from grow4bot.services.auth_service import AccountService

    store = SQLAlchemyRecordStore(db)
    app.extensions['grow4bot'] = Services(
        store=store,
        ledger=LedgerService(store, max_attempts=app.config['PURCHASE_MAX_ATTEMPTS']),
        catalog=CatalogService(store),
        accounts=AccountService(store, admin_email=app.config['ADMIN_EMAIL']),
    )

    # Идентификация пользователя по токену для Flask-Login
    from grow4bot.services.auth_service import load_user_from_request

    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'status': 'error', 'message': 'Unauthorized'}), 401

    # Регистрация blueprint'ов
    from grow4bot.routes.api import api_bp
    from grow4bot.routes.auth import auth_bp
    from grow4bot.routes.catalog import catalog_bp
    from grow4bot.routes.account import account_bp
    from grow4bot.routes.admin import admin_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(admin_bp)

    register_error_handlers(app)

    # Импорт моделей для корректной работы миграций
    from grow4bot.models import User, Product, StockItem, Purchase, Transaction

    logger.info("Приложение инициализировано")
    return app


def get_services():
    """Сервисы текущего приложения"""
    from flask import current_app
    return current_app.extensions['grow4bot']
