import threading

import pytest

from config import TestConfig
from grow4bot import create_app, db, get_services
from grow4bot.errors import Conflict, OutOfStock
from grow4bot.models import Purchase, StockItem

WORKERS = 6


@pytest.fixture
def file_app(tmp_path):
    class ConcurrentConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'race.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'check_same_thread': False, 'timeout': 30}}
        PURCHASE_MAX_ATTEMPTS = 5

    app = create_app(ConcurrentConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _run_concurrently(app, target, args_list):
    barrier = threading.Barrier(len(args_list))
    outcomes = []
    lock = threading.Lock()

    def worker(*args):
        with app.app_context():
            barrier.wait()
            try:
                outcome = ('ok', target(*args))
            except (OutOfStock, Conflict) as e:
                outcome = ('rejected', type(e).__name__)
            except Exception as e:
                outcome = ('error', repr(e))
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker, args=args) for args in args_list]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


def test_last_item_is_sold_exactly_once(file_app):
    with file_app.app_context():
        store = get_services().store
        with store.unit_of_work():
            user_ids = []
            for i in range(WORKERS):
                user = store.add_user(f'buyer{i}@example.com', 'x')
                store.credit_balance(user.id, 100.0)
                user_ids.append(user.id)
            product_id = store.add_product('Last key', 5.0, stock_data=['KEY-ONLY']).id

    def buy(user_id):
        return get_services().ledger.purchase(user_id, product_id).stock_data

    outcomes = _run_concurrently(file_app, buy, [(uid,) for uid in user_ids])

    assert [o for o in outcomes if o[0] == 'error'] == []
    assert [o for o in outcomes if o[0] == 'ok'] == [('ok', 'KEY-ONLY')]
    assert len([o for o in outcomes if o[0] == 'rejected']) == WORKERS - 1

    with file_app.app_context():
        store = get_services().store
        assert StockItem.query.filter_by(product_id=product_id).count() == 0
        assert Purchase.query.count() == 1
        balances = sorted(store.current_balance(uid) for uid in user_ids)
        assert balances == [pytest.approx(95.0)] + [pytest.approx(100.0)] * (WORKERS - 1)


def test_concurrent_top_ups_do_not_lose_updates(file_app):
    with file_app.app_context():
        store = get_services().store
        with store.unit_of_work():
            user_id = store.add_user('wallet@example.com', 'x').id

    def top_up(amount):
        return get_services().ledger.top_up(user_id, amount)

    outcomes = _run_concurrently(file_app, top_up, [(1.0,)] * WORKERS)

    succeeded = [o for o in outcomes if o[0] == 'ok']
    assert [o for o in outcomes if o[0] == 'error'] == []

    with file_app.app_context():
        store = get_services().store
        assert store.current_balance(user_id) == pytest.approx(float(len(succeeded)))
        assert len(store.list_transactions(user_id)) == len(succeeded)


def test_purchases_and_top_ups_on_one_wallet_stay_consistent(file_app):
    price, top_up_amount, start = 1.0, 2.0, 50.0
    with file_app.app_context():
        store = get_services().store
        with store.unit_of_work():
            user_id = store.add_user('mixed@example.com', 'x').id
            store.credit_balance(user_id, start)
            product_id = store.add_product(
                'Game key', price, stock_data=[f'KEY-{i}' for i in range(WORKERS)]
            ).id

    def operate(kind):
        ledger = get_services().ledger
        if kind == 'purchase':
            return kind, ledger.purchase(user_id, product_id).stock_data
        return kind, ledger.top_up(user_id, top_up_amount)

    kinds = ['purchase', 'top_up'] * (WORKERS // 2)
    outcomes = _run_concurrently(file_app, operate, [(kind,) for kind in kinds])

    assert [o for o in outcomes if o[0] == 'error'] == []
    bought = [o[1][1] for o in outcomes if o[0] == 'ok' and o[1][0] == 'purchase']
    topped_up = [o for o in outcomes if o[0] == 'ok' and o[1][0] == 'top_up']
    assert len(set(bought)) == len(bought)

    with file_app.app_context():
        store = get_services().store
        expected = start - len(bought) * price + len(topped_up) * top_up_amount
        assert store.current_balance(user_id) == pytest.approx(expected)
        assert StockItem.query.filter_by(product_id=product_id).count() == WORKERS - len(bought)
        assert len(store.list_purchases(user_id)) == len(bought)
        assert len(store.list_transactions(user_id)) == len(bought) + len(topped_up)
