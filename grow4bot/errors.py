class ServiceError(Exception):
    """Базовая ошибка сервисного слоя (Internal)"""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = 'Invalid input'


class OutOfStock(ValidationError):
    default_message = 'Product is out of stock'


class InsufficientBalance(ValidationError):
    default_message = 'Insufficient balance'


class Unauthorized(ServiceError):
    status_code = 401
    default_message = 'Unauthorized'


class Forbidden(ServiceError):
    status_code = 403
    default_message = 'Forbidden'


class NotFound(ServiceError):
    status_code = 404
    default_message = 'Not found'


class Conflict(ServiceError):
    """Конкурентное изменение не удалось применить за отведённые попытки"""
    status_code = 409
    default_message = 'Concurrent update conflict, please retry'
