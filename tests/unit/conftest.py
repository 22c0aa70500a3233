from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from kasir.catalog import Catalog
from kasir.data import default_products
from kasir.errors import PersistenceUnavailable, ValidationError
from kasir.models import CartLine, Product, SaleRecord, ShopSettings
from kasir.state import AppState

JAKARTA = ZoneInfo("Asia/Jakarta")


class MemoryStore:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.values: dict[str, object] = {}
        self.sales: list[SaleRecord] = []

    def load(self, key):
        if self.fail:
            raise PersistenceUnavailable("store offline")
        return self.values.get(key)

    def save(self, key, value) -> None:
        if self.fail:
            raise PersistenceUnavailable("store offline")
        self.values[key] = value

    def append_sale(self, record) -> None:
        if self.fail:
            raise PersistenceUnavailable("store offline")
        if any(existing.id == record.id for existing in self.sales):
            raise ValidationError(f"Sale {record.id} is already stored")
        self.sales.append(record)

    def load_sales(self):
        if self.fail:
            raise PersistenceUnavailable("store offline")
        return list(self.sales)


@pytest.fixture
def matcha_og() -> Product:
    return Product(id=1, name="Matcha OG", unit_price=15000)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def app_state(store) -> AppState:
    return AppState(
        catalog=Catalog(default_products()),
        settings=ShopSettings(shop_name="CHAFU MATCHA", tax_rate_percent=10, service_rate_percent=5),
        store=store,
    )


@pytest.fixture
def fixed_clock():
    moment = datetime(2026, 3, 14, 10, 30, 5, tzinfo=JAKARTA)
    return lambda: moment


@pytest.fixture
def failing_store() -> MemoryStore:
    return MemoryStore(fail=True)


@pytest.fixture
def make_record():
    def factory(sale_id: str, moment: datetime, total: int = 15000, lines=None, **overrides) -> SaleRecord:
        fields = dict(
            id=sale_id,
            created_at=moment.strftime("%d/%m/%Y %H:%M:%S"),
            timestamp_ms=int(moment.timestamp() * 1000),
            lines=tuple(lines or (CartLine(line_id=f"{sale_id}-0", product_id=1, display_name="Matcha OG (Regular)", unit_price=total, quantity=1, size_id="R"),)),
            subtotal=total,
            discount_amount=0,
            tax_rate_applied=0,
            service_rate_applied=0,
            tax=0,
            service=0,
            total=total,
            pay_method="Cash",
            cash_tendered=total,
            change=0,
        )
        fields.update(overrides)
        return SaleRecord(**fields)

    return factory
