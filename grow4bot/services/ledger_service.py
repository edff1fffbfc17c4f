"""
Кошелёк и покупки.

Каждая операция выполняется одной единицей работы хранилища: склад, баланс,
покупка и запись в журнале транзакций применяются вместе либо не
применяются вовсе. Списание со склада и изменение баланса выполняются
атомарными условными запросами, поэтому параллельные покупки последней
единицы не могут продать её дважды.
"""
from collections import namedtuple
import logging
import math
import numbers

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from grow4bot.errors import (
    Conflict,
    Forbidden,
    InsufficientBalance,
    NotFound,
    OutOfStock,
    Unauthorized,
    ValidationError,
)
from grow4bot.models.transaction import ADMIN_ADD, PURCHASE, TOPUP

logger = logging.getLogger(__name__)

PurchaseResult = namedtuple('PurchaseResult', ['purchase', 'stock_data'])

# serialization_failure, deadlock_detected
CONFLICT_SQLSTATES = {'40001', '40P01'}


class WriteConflict(Exception):
    """Данные изменились между проверкой и записью"""


def is_write_conflict(error):
    """Ошибка БД, после которой операцию имеет смысл повторить"""
    if isinstance(error, StaleDataError):
        return True
    if isinstance(error, OperationalError):
        orig = getattr(error, 'orig', None)
        if getattr(orig, 'pgcode', None) in CONFLICT_SQLSTATES:
            return True
        return 'database is locked' in str(orig).lower()
    return False


def validate_amount(amount):
    """Сумма пополнения: положительное конечное число"""
    if isinstance(amount, bool) or not isinstance(amount, numbers.Real):
        raise ValidationError('Invalid amount')
    try:
        amount = float(amount)
    except OverflowError:
        raise ValidationError('Invalid amount')
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError('Invalid amount')
    return amount


class LedgerService:

    def __init__(self, store, max_attempts=3):
        self.store = store
        self.max_attempts = max(1, int(max_attempts))

    def _run(self, name, operation, *args):
        """Выполнение операции в единице работы с ограниченным числом повторов"""
        for attempt in range(1, self.max_attempts + 1):
            try:
                with self.store.unit_of_work():
                    return operation(*args)
            except WriteConflict as e:
                logger.warning(f"{name}: конфликт записи ({e}), попытка {attempt}/{self.max_attempts}")
            except (OperationalError, StaleDataError) as e:
                if not is_write_conflict(e):
                    raise
                logger.warning(f"{name}: БД занята ({e.__class__.__name__}), попытка {attempt}/{self.max_attempts}")
        logger.error(f"{name}: конфликт не разрешён за {self.max_attempts} попыток")
        raise Conflict()

    def _require_active_user(self, user_id):
        user = self.store.get_user(user_id)
        if not user:
            raise Unauthorized('User not found')
        if user.is_banned:
            logger.warning(f"Отказ: пользователь {user_id} забанен")
            raise Forbidden('Your account has been banned')
        return user

    def _require_admin(self, actor_id):
        actor = self._require_active_user(actor_id)
        if not actor.is_admin:
            raise Forbidden('Forbidden - Admin access required')
        return actor

    # ---------------------- Purchase ----------------------
    def purchase(self, user_id, product_id):
        """Покупка одной единицы товара. Возвращает PurchaseResult"""
        result = self._run('purchase', self._purchase, user_id, product_id)
        logger.info(f"Покупка: пользователь {user_id}, товар {product_id}, цена {result.purchase.price}")
        return result

    def _purchase(self, user_id, product_id):
        user = self._require_active_user(user_id)

        product = self.store.get_product(product_id)
        if not product:
            raise NotFound('Product not found')

        if not self.store.has_stock(product.id):
            logger.warning(f"Отказ в покупке: товар {product.id} закончился, пользователь {user.id}")
            raise OutOfStock()

        price = product.price
        if user.balance < price:
            logger.warning(f"Отказ в покупке: у пользователя {user.id} баланс {user.balance} меньше цены {price}")
            raise InsufficientBalance()

        stock_item = self.store.pop_stock_item(product.id)
        if stock_item is None:
            raise WriteConflict(f'stock of product {product.id} changed')

        if not self.store.debit_balance(user.id, price):
            raise WriteConflict(f'balance of user {user.id} changed')

        purchase = self.store.add_purchase(
            user_id=user.id,
            product_id=product.id,
            product_name=product.name,
            price=price,
            stock_data=stock_item,
        )
        self.store.add_transaction(user.id, PURCHASE, price, f'Purchased {product.name}')
        return PurchaseResult(purchase=purchase, stock_data=stock_item)

    # ---------------------- Balance ----------------------
    def top_up(self, user_id, amount):
        """Симулированное пополнение кошелька, возвращает новый баланс"""
        balance = self._run('top_up', self._top_up, user_id, amount)
        logger.info(f"Пополнение: пользователь {user_id}, сумма {amount}, баланс {balance}")
        return balance

    def _top_up(self, user_id, amount):
        user = self._require_active_user(user_id)
        amount = validate_amount(amount)
        if not self.store.credit_balance(user.id, amount):
            raise WriteConflict(f'user {user.id} changed during top up')
        self.store.add_transaction(user.id, TOPUP, amount, f'Topped up wallet with ${amount:.2f}')
        return self.store.current_balance(user.id)

    def admin_add_balance(self, actor_id, target_user_id, amount):
        """Начисление баланса администратором, возвращает новый баланс цели"""
        balance = self._run('admin_add_balance', self._admin_add_balance, actor_id, target_user_id, amount)
        logger.info(f"Начисление администратором {actor_id}: пользователь {target_user_id}, сумма {amount}")
        return balance

    def _admin_add_balance(self, actor_id, target_user_id, amount):
        self._require_admin(actor_id)
        target = self.store.get_user(target_user_id)
        if not target:
            raise NotFound('User not found')
        amount = validate_amount(amount)
        # Бан запрещает операции самого пользователя, но не начисления администратора
        if not self.store.credit_balance(target.id, amount, allow_banned=True):
            raise WriteConflict(f'user {target.id} changed during admin credit')
        self.store.add_transaction(target.id, ADMIN_ADD, amount, f'Admin added ${amount:.2f} to wallet')
        return self.store.current_balance(target.id)

    def set_banned(self, actor_id, target_user_id, banned):
        """Бан/разбан пользователя, история и баланс не меняются"""
        user = self._run('set_banned', self._set_banned, actor_id, target_user_id, banned)
        logger.info(f"Администратор {actor_id}: пользователь {target_user_id} banned={banned}")
        return user

    def _set_banned(self, actor_id, target_user_id, banned):
        self._require_admin(actor_id)
        if not isinstance(banned, bool):
            raise ValidationError('Invalid banned value')
        user = self.store.set_user_banned(target_user_id, banned)
        if not user:
            raise NotFound('User not found')
        return user
