"""
Разбор и проверка тел запросов.

Каждая функция validate_* принимает распарсенный JSON и возвращает
ValidationResult: либо типизированный запрос в value, либо текст ошибки
в error. Исключения здесь не бросаются, маршрут сам отвечает 400.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import math
import numbers
import re

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PRODUCT_FIELDS = ('name', 'description', 'price', 'image', 'category')


@dataclass
class ValidationResult:
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _ok(value) -> ValidationResult:
    return ValidationResult(value=value)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(error=message)


@dataclass
class Credentials:
    email: str
    password: str


@dataclass
class AmountRequest:
    amount: float


@dataclass
class BanRequest:
    banned: bool


@dataclass
class ProductRequest:
    name: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None
    category: str = 'general'
    stock_data: List[str] = field(default_factory=list)


@dataclass
class ProductUpdate:
    fields: Dict[str, Any] = field(default_factory=dict)
    stock_data: Optional[List[str]] = None


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def _is_number(value) -> bool:
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        return False
    try:
        # целое из JSON может не поместиться во float
        return math.isfinite(float(value))
    except OverflowError:
        return False


def validate_credentials(data, password_min_length: int = 6) -> ValidationResult:
    if not isinstance(data, dict):
        return _fail('Invalid input')
    email = data.get('email')
    password = data.get('password')
    if not isinstance(email, str) or not EMAIL_REGEX.match(email.strip()):
        return _fail('Invalid email address')
    if not isinstance(password, str) or len(password) < password_min_length:
        return _fail(f'Password must be at least {password_min_length} characters')
    return _ok(Credentials(email=normalize_email(email), password=password))


def validate_amount_request(data) -> ValidationResult:
    if not isinstance(data, dict):
        return _fail('Invalid amount')
    amount = data.get('amount')
    if not _is_number(amount) or amount <= 0:
        return _fail('Invalid amount')
    return _ok(AmountRequest(amount=float(amount)))


def validate_ban_request(data) -> ValidationResult:
    if not isinstance(data, dict) or not isinstance(data.get('banned'), bool):
        return _fail('Invalid banned value')
    return _ok(BanRequest(banned=data['banned']))


def _check_field(name, value) -> Optional[str]:
    """Ошибка для одного поля товара или None"""
    if name == 'name':
        if not isinstance(value, str) or not value.strip():
            return 'Name is required'
    elif name == 'price':
        if not _is_number(value) or value <= 0:
            return 'Price must be a positive number'
    elif name in ('description', 'image'):
        if value is not None and not isinstance(value, str):
            return f'Invalid {name}'
    elif name == 'category':
        if not isinstance(value, str) or not value.strip():
            return 'Invalid category'
    return None


def _check_stock(value) -> Optional[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return 'Stock data must be a list of strings'
    return None


def validate_product(data) -> ValidationResult:
    if not isinstance(data, dict):
        return _fail('Invalid input')

    for name in ('name', 'price'):
        error = _check_field(name, data.get(name))
        if error:
            return _fail(error)
    for name in ('description', 'image'):
        error = _check_field(name, data.get(name))
        if error:
            return _fail(error)
    category = data.get('category')
    if category is not None:
        error = _check_field('category', category)
        if error:
            return _fail(error)
    stock_data = data.get('stockData')
    if stock_data is not None:
        error = _check_stock(stock_data)
        if error:
            return _fail(error)

    return _ok(ProductRequest(
        name=data['name'].strip(),
        price=float(data['price']),
        description=data.get('description'),
        image=data.get('image'),
        category=category.strip() if category else 'general',
        stock_data=list(stock_data or []),
    ))


def validate_product_update(data) -> ValidationResult:
    """Частичное обновление: проверяются только переданные поля"""
    if not isinstance(data, dict):
        return _fail('Invalid input')

    fields = {}
    for name in PRODUCT_FIELDS:
        if name not in data:
            continue
        value = data[name]
        # null для name/price/category означает "не менять"
        if value is None and name in ('name', 'price', 'category'):
            continue
        error = _check_field(name, value)
        if error:
            return _fail(error)
        if name == 'price':
            value = float(value)
        elif name in ('name', 'category'):
            value = value.strip()
        fields[name] = value

    stock_data = data.get('stockData')
    if stock_data is not None:
        error = _check_stock(stock_data)
        if error:
            return _fail(error)
        stock_data = list(stock_data)

    return _ok(ProductUpdate(fields=fields, stock_data=stock_data))
