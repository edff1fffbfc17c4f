#!/usr/bin/env python3
"""
Grow4Bot - магазин цифровых товаров
Основной файл для запуска приложения
"""

import logging
import os
import sys

logger = logging.getLogger(__name__)


def main():
    """
    Основная функция запуска приложения
    """
    try:
        # Создаём папку instance для SQLite по умолчанию
        if not os.path.exists('instance'):
            os.makedirs('instance')

        from grow4bot import create_app, db
        app = create_app()

        with app.app_context():
            db.create_all()

        host = app.config['APP_HOST']
        port = app.config['APP_PORT']
        logger.info(f"Сервер запускается на http://{host}:{port}")

        app.run(
            host=host,
            port=port,
            debug=app.config['DEBUG'],
            threaded=True
        )

    except KeyboardInterrupt:
        logger.info("Приложение остановлено пользователем")
        return 0
    except Exception as e:
        logger.exception(f"Ошибка запуска приложения: {e}")
        return 1
    return 0


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
