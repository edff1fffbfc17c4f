import pytest

from config import TestConfig
from grow4bot import create_app, db, get_services

ADMIN_EMAIL = 'admin@grow4bot.com'
PASSWORD = 'secret123'


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(app):
    """Новый test client, зарегистрированный (и авторизованный) под email"""
    def _register(email, password=PASSWORD):
        client = app.test_client()
        response = client.post('/api/auth/register', json={'email': email, 'password': password})
        assert response.status_code == 201, response.get_json()
        client.user = response.get_json()
        return client
    return _register


@pytest.fixture
def admin_client(register):
    return register(ADMIN_EMAIL)


@pytest.fixture
def user_client(register):
    return register('buyer@example.com')


@pytest.fixture
def create_product(admin_client):
    """Создание товара через админский API"""
    def _create(name='Steam key', price=7.5, stock=None, **extra):
        payload = {'name': name, 'price': price, 'stockData': list(stock or []), **extra}
        response = admin_client.post('/api/admin/products', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _create


@pytest.fixture
def services(app):
    """Сервисы внутри контекста приложения"""
    with app.app_context():
        yield get_services()
        db.session.remove()


@pytest.fixture
def make_user(services):
    def _make(email, balance=0.0, is_admin=False, is_banned=False):
        store = services.store
        with store.unit_of_work():
            user = store.add_user(email=email, password_hash='x', is_admin=is_admin)
            if balance:
                store.credit_balance(user.id, balance)
            if is_banned:
                store.set_user_banned(user.id, True)
        return user.id
    return _make


@pytest.fixture
def make_product(services):
    def _make(name='Steam key', price=7.5, stock=None):
        store = services.store
        with store.unit_of_work():
            product = store.add_product(name=name, price=price, stock_data=list(stock or []))
        return product.id
    return _make
