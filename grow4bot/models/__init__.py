# Models package

# Импорт всех моделей для корректной работы миграций
from .user import User
from .product import Product, StockItem
from .purchase import Purchase
from .transaction import Transaction

__all__ = [
    'User',
    'Product',
    'StockItem',
    'Purchase',
    'Transaction'
]
