"""
Хранилище записей (User, Product, Purchase, Transaction).

RecordStore описывает операции, которые нужны сервисам; сервисы получают
экземпляр хранилища при создании и не обращаются к db.session напрямую.
SQLAlchemyRecordStore реализует его поверх Flask-SQLAlchemy.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
import logging

from sqlalchemy import delete, select, update

from grow4bot.models import User, Product, StockItem, Purchase, Transaction

logger = logging.getLogger(__name__)


class RecordStore(ABC):

    @abstractmethod
    def unit_of_work(self):
        """Контекст: всё внутри либо фиксируется целиком, либо откатывается"""

    # Пользователи
    @abstractmethod
    def get_user(self, user_id): ...

    @abstractmethod
    def get_user_by_email(self, email): ...

    @abstractmethod
    def add_user(self, email, password_hash, is_admin=False): ...

    @abstractmethod
    def list_users(self): ...

    @abstractmethod
    def set_user_banned(self, user_id, banned): ...

    @abstractmethod
    def debit_balance(self, user_id, amount):
        """Атомарное списание; False если средств мало или пользователь забанен"""

    @abstractmethod
    def credit_balance(self, user_id, amount, allow_banned=False):
        """Атомарное зачисление; False если пользователя нет (или он забанен)"""

    @abstractmethod
    def current_balance(self, user_id): ...

    # Товары
    @abstractmethod
    def get_product(self, product_id): ...

    @abstractmethod
    def list_products(self): ...

    @abstractmethod
    def add_product(self, name, price, description=None, image=None, category='general', stock_data=None): ...

    @abstractmethod
    def update_product(self, product_id, fields): ...

    @abstractmethod
    def delete_product(self, product_id): ...

    @abstractmethod
    def replace_stock(self, product_id, stock_data): ...

    @abstractmethod
    def has_stock(self, product_id): ...

    @abstractmethod
    def pop_stock_item(self, product_id):
        """Атомарно забирает первую единицу склада; None если забрать нечего"""

    # Покупки и транзакции
    @abstractmethod
    def add_purchase(self, user_id, product_id, product_name, price, stock_data): ...

    @abstractmethod
    def list_purchases(self, user_id): ...

    @abstractmethod
    def add_transaction(self, user_id, type, amount, description): ...

    @abstractmethod
    def list_transactions(self, user_id): ...


class SQLAlchemyRecordStore(RecordStore):

    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    @contextmanager
    def unit_of_work(self):
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # ---------------------- Users ----------------------
    def get_user(self, user_id):
        if user_id is None:
            return None
        return self.session.get(User, user_id)

    def get_user_by_email(self, email):
        return User.query.filter_by(email=email).first()

    def add_user(self, email, password_hash, is_admin=False):
        user = User(email=email, password=password_hash, is_admin=is_admin, balance=0.0, is_banned=False)
        self.session.add(user)
        self.session.flush()
        return user

    def list_users(self):
        return User.query.order_by(User.created_at.desc(), User.id.desc()).all()

    def set_user_banned(self, user_id, banned):
        user = self.get_user(user_id)
        if not user:
            return None
        user.is_banned = bool(banned)
        self.session.flush()
        return user

    def debit_balance(self, user_id, amount):
        result = self.session.execute(
            update(User)
            .where(User.id == user_id, User.balance >= amount, User.is_banned.is_(False))
            .values(balance=User.balance - amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def credit_balance(self, user_id, amount, allow_banned=False):
        stmt = update(User).where(User.id == user_id)
        if not allow_banned:
            stmt = stmt.where(User.is_banned.is_(False))
        result = self.session.execute(
            stmt.values(balance=User.balance + amount).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def current_balance(self, user_id):
        return self.session.execute(select(User.balance).where(User.id == user_id)).scalar()

    # ---------------------- Products ----------------------
    def get_product(self, product_id):
        if product_id is None:
            return None
        return self.session.get(Product, product_id)

    def list_products(self):
        return Product.query.order_by(Product.created_at.desc(), Product.id.desc()).all()

    def add_product(self, name, price, description=None, image=None, category='general', stock_data=None):
        product = Product(
            name=name,
            price=price,
            description=description,
            image=image,
            category=category or 'general',
        )
        product.stock_items = [StockItem(payload=payload) for payload in (stock_data or [])]
        self.session.add(product)
        self.session.flush()
        return product

    def update_product(self, product_id, fields):
        product = self.get_product(product_id)
        if not product:
            return None
        for name, value in fields.items():
            setattr(product, name, value)
        self.session.flush()
        return product

    def delete_product(self, product_id):
        product = self.get_product(product_id)
        if not product:
            return False
        self.session.delete(product)
        self.session.flush()
        return True

    def replace_stock(self, product_id, stock_data):
        # Склад перезаписывается целиком, без слияния
        self.session.execute(
            delete(StockItem).where(StockItem.product_id == product_id).execution_options(synchronize_session=False)
        )
        self.session.add_all([StockItem(product_id=product_id, payload=payload) for payload in stock_data])
        self.session.flush()
        product = self.get_product(product_id)
        if product is not None:
            self.session.expire(product, ['stock_items'])
        return product

    def has_stock(self, product_id):
        return self.session.execute(
            select(StockItem.id).where(StockItem.product_id == product_id).limit(1)
        ).first() is not None

    def pop_stock_item(self, product_id):
        row = self.session.execute(
            select(StockItem.id, StockItem.payload)
            .where(StockItem.product_id == product_id)
            .order_by(StockItem.id)
            .limit(1)
            .with_for_update()
        ).first()
        if row is None:
            return None

        # Удаление по id: единицу получает только тот, чей DELETE затронул строку
        result = self.session.execute(
            delete(StockItem).where(StockItem.id == row.id).execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(f"Единица склада {row.id} товара {product_id} уже забрана параллельной покупкой")
            return None
        return row.payload

    # ---------------------- Purchases / Transactions ----------------------
    def add_purchase(self, user_id, product_id, product_name, price, stock_data):
        purchase = Purchase(
            user_id=user_id,
            product_id=product_id,
            product_name=product_name,
            price=price,
            stock_data=stock_data,
        )
        self.session.add(purchase)
        self.session.flush()
        return purchase

    def list_purchases(self, user_id):
        return (Purchase.query.filter_by(user_id=user_id)
                .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
                .all())

    def add_transaction(self, user_id, type, amount, description):
        transaction = Transaction(user_id=user_id, type=type, amount=amount, description=description)
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def list_transactions(self, user_id):
        return (Transaction.query.filter_by(user_id=user_id)
                .order_by(Transaction.created_at.desc(), Transaction.id.desc())
                .all())
