from __future__ import annotations

import datetime as _dt
import enum
import numbers
import uuid
from typing import Any, Dict


def _to_serializable(value: Any) -> Any:
    """
    Рекурсивный сериализатор JSON‑safe.
    *  str / int / float / bool / None           – как есть
    *  datetime / date / time                    – ISO‑строка
    *  uuid.UUID / enum.Enum                     – str(value)
    *  list / tuple / set                        – список с рекурсией
    *  dict                                      – dict(str(key) -> value)
    *  всё прочее                                – str(value)
    """
    if value is None or isinstance(value, (str, bool, numbers.Number)):
        return value
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, enum.Enum)):
        return str(value)
    if isinstance(value, (list, tuple, set)):
        return [_to_serializable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_serializable(v) for k, v in value.items()}
    return str(value)


def serialize_user(user) -> Dict[str, Any]:
    """Пользователь без хеша пароля"""
    return _to_serializable({
        'id': user.id,
        'email': user.email,
        'balance': user.balance,
        'isAdmin': user.is_admin,
        'isBanned': user.is_banned,
        'createdAt': user.created_at,
    })


def serialize_product(product, include_stock: bool = False) -> Dict[str, Any]:
    """Товар; строки склада отдаются только администратору"""
    stock_data = product.stock_data
    data = {
        'id': product.id,
        'name': product.name,
        'description': product.description,
        'price': product.price,
        'image': product.image,
        'category': product.category,
        'stockCount': len(stock_data),
        'createdAt': product.created_at,
    }
    if include_stock:
        data['stockData'] = stock_data
    return _to_serializable(data)


def serialize_purchase(purchase) -> Dict[str, Any]:
    return _to_serializable({
        'id': purchase.id,
        'userId': purchase.user_id,
        'productId': purchase.product_id,
        'productName': purchase.product_name,
        'price': purchase.price,
        'stockData': purchase.stock_data,
        'purchaseDate': purchase.purchase_date,
    })


def serialize_transaction(transaction) -> Dict[str, Any]:
    return _to_serializable({
        'id': transaction.id,
        'userId': transaction.user_id,
        'type': transaction.type,
        'amount': transaction.amount,
        'description': transaction.description,
        'createdAt': transaction.created_at,
    })
