# tests/conftest.py

import os
import tempfile

# настройки читаются при импорте nursery.config, поэтому окружение задаём раньше
_TMP = tempfile.mkdtemp(prefix="nursery-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP, 'orders.db')}"
os.environ["LOG_DIR"] = os.path.join(_TMP, "log")
os.environ["LOG_PRINT"] = "0"

import pytest

from nursery.exceptions import MerchantNotFoundError, OrderItemNotFoundError, OrderNotFoundError
from nursery.schemas.merchant import Merchant
from nursery.schemas.order import Order, OrderItem
from nursery.utils.log import Log


class StubOrderRepository:
    """
    Хранилище заказов в памяти с теми же операциями, что и OrderRepository.
    fail() заставляет выбранную операцию бросить исключение.
    """

    def __init__(self):
        self.orders = {}
        self.items = {}
        self.merchants = {}
        self.failures = {}
        self.calls = []

    # ────────────── наполнение ──────────────
    def add_order(self, id, **fields) -> Order:
        fields.setdefault("order_code", f"ORD-{id}")
        order = Order(id=id, **fields)
        self.orders[id] = order
        self.items.setdefault(id, [])
        return order

    def add_item(self, order_id, id, **fields) -> OrderItem:
        item = OrderItem(id=id, order_id=order_id, **fields)
        self.items.setdefault(order_id, []).append(item)
        return item

    def add_merchant(self, merchant_code, **fields) -> Merchant:
        merchant = Merchant(merchant_code=merchant_code, **fields)
        self.merchants[merchant_code] = merchant
        return merchant

    def fail(self, method, error, key=None):
        self.failures[method] = (error, key)

    def _check(self, method, key):
        self.calls.append((method, key))
        if method in self.failures:
            error, only_key = self.failures[method]
            if only_key is None or only_key == key:
                raise error

    # ────────────── операции ──────────────
    async def fetch_order(self, order_id):
        self._check("fetch_order", order_id)
        if order_id not in self.orders:
            raise OrderNotFoundError(order_id)
        return self.orders[order_id]

    async def fetch_children(self, parent_id):
        self._check("fetch_children", parent_id)
        return [o for o in self.orders.values() if o.parent_order_id == parent_id]

    async def fetch_items(self, order_id):
        self._check("fetch_items", order_id)
        return list(self.items.get(order_id, []))

    async def update_item_subtotal(self, item_id, value):
        self._check("update_item_subtotal", item_id)
        for order_id, items in self.items.items():
            for index, item in enumerate(items):
                if item.id == item_id:
                    items[index] = item.model_copy(update={"subtotal": value})
                    return
        raise OrderItemNotFoundError(item_id)

    async def update_order_subtotal(self, order_id, value):
        self._check("update_order_subtotal", order_id)
        if order_id not in self.orders:
            raise OrderNotFoundError(order_id)
        self.orders[order_id] = self.orders[order_id].model_copy(update={"subtotal": value})

    async def lookup_merchant(self, merchant_code):
        self._check("lookup_merchant", merchant_code)
        if merchant_code not in self.merchants:
            raise MerchantNotFoundError(merchant_code)
        return self.merchants[merchant_code]


@pytest.fixture
def repo():
    return StubOrderRepository()


@pytest.fixture
async def db():
    """Чистая sqlite-база на каждый тест."""
    from nursery.utils.database import AsyncSessionLocal, drop_db, engine, init_db

    await init_db()
    async with AsyncSessionLocal() as session:
        yield session
    await drop_db()
    # пул соединений привязан к event loop конкретного теста
    await engine.dispose()


@pytest.fixture
async def log(tmp_path):
    log = Log(log_dir=str(tmp_path / "log"), log_print=False)
    yield log
    await log.shutdown()
