#!/usr/bin/env python3
"""
Скрипт для миграций базы данных
"""

import logging
import os
from flask_migrate import upgrade, init, migrate
from grow4bot import create_app

logger = logging.getLogger(__name__)


def run_migrations(message="Initial migration"):
    """Запуск миграций"""
    app = create_app()

    with app.app_context():
        # Создаем папку migrations если её нет
        if not os.path.exists('migrations'):
            logger.info("Инициализация миграций...")
            init()

        logger.info("Создание миграции...")
        migrate(message=message)

        logger.info("Применение миграций...")
        upgrade()

        logger.info("Миграции завершены успешно!")


if __name__ == '__main__':
    run_migrations()
