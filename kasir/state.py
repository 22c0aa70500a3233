"""Explicit application state and its best-effort persistence."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from kasir.catalog import Catalog
from kasir.data import default_products, default_settings
from kasir.errors import PersistenceUnavailable, ValidationError
from kasir.log import get_logger
from kasir.models import Cart, Product, SaleRecord, ShopSettings
from kasir.sales_log import SalesLog

logger = get_logger(__name__)

CATALOG_KEY = "catalog"
SETTINGS_KEY = "settings"


class Store(Protocol):
    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, value: Any) -> None: ...

    def append_sale(self, record: SaleRecord) -> None: ...

    def load_sales(self) -> list[SaleRecord]: ...


@dataclass
class AppState:
    """Everything the cashier core operates on, owned by one running app."""

    catalog: Catalog
    settings: ShopSettings
    cart: Cart = field(default_factory=Cart)
    sales_log: SalesLog = field(default_factory=SalesLog)
    store: Store | None = None

    @classmethod
    def fresh(cls, store: Store | None = None) -> AppState:
        return cls(catalog=Catalog(default_products()), settings=default_settings(), store=store)


def load_state(store: Store) -> AppState:
    """Load persisted state, falling back to defaults piece by piece."""
    state = AppState.fresh(store)

    try:
        raw_products = store.load(CATALOG_KEY)
        if raw_products:
            state.catalog = Catalog([Product.from_dict(raw) for raw in raw_products])
    except PersistenceUnavailable as exc:
        logger.warning(f"catalog_load_failed error={exc}")
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning(f"catalog_load_invalid error={exc!r}")

    try:
        raw_settings = store.load(SETTINGS_KEY)
        if raw_settings:
            state.settings = ShopSettings.from_dict(raw_settings)
    except PersistenceUnavailable as exc:
        logger.warning(f"settings_load_failed error={exc}")
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning(f"settings_load_invalid error={exc!r}")

    try:
        state.sales_log = SalesLog(store.load_sales())
    except PersistenceUnavailable as exc:
        logger.warning(f"sales_load_failed error={exc}")

    logger.info(f"state_loaded products={len(state.catalog)} sales={len(state.sales_log)}")
    return state


def _save(state: AppState, key: str, value: Any) -> bool:
    if state.store is None:
        return False
    try:
        state.store.save(key, value)
    except PersistenceUnavailable as exc:
        logger.warning(f"persistence_save_failed key={key} error={exc}")
        return False
    return True


def persist_catalog(state: AppState) -> bool:
    return _save(state, CATALOG_KEY, state.catalog.to_list())


def persist_settings(state: AppState) -> bool:
    return _save(state, SETTINGS_KEY, state.settings.to_dict())


def persist_sale(state: AppState, record: SaleRecord) -> bool:
    if state.store is None:
        return False
    try:
        state.store.append_sale(record)
    except (PersistenceUnavailable, ValidationError) as exc:
        logger.warning(f"persistence_append_failed sale_id={record.id} error={exc}")
        return False
    return True


def update_settings(
    state: AppState,
    shop_name: str | None = None,
    tax_rate_percent: float | None = None,
    service_rate_percent: float | None = None,
) -> ShopSettings:
    """Replace shop settings; committed sales keep the rates they were sold with."""
    current = state.settings
    name = current.shop_name if shop_name is None else shop_name.strip()
    tax = current.tax_rate_percent if tax_rate_percent is None else float(tax_rate_percent)
    service = current.service_rate_percent if service_rate_percent is None else float(service_rate_percent)

    if not name:
        raise ValidationError("Shop name is required")
    for label, rate in (("Tax", tax), ("Service", service)):
        if not 0 <= rate <= 100:
            raise ValidationError(f"{label} rate must be between 0 and 100")

    state.settings = ShopSettings(shop_name=name, tax_rate_percent=tax, service_rate_percent=service)
    persist_settings(state)
    logger.info(f"settings_updated tax={tax} service={service}")
    return state.settings


def add_product(state: AppState, name: str, unit_price: int, category: str = "Signature") -> Product:
    product = state.catalog.new_product(name, unit_price, category)
    persist_catalog(state)
    logger.info(f"product_added id={product.id} price={product.unit_price}")
    return product


def edit_product(
    state: AppState,
    product_id: int,
    name: str | None = None,
    unit_price: int | None = None,
    category: str | None = None,
) -> Product:
    """Change a product's fields. Lines already in the cart keep the price they were added at."""
    current = state.catalog.get(product_id)
    product = state.catalog.upsert(
        replace(
            current,
            name=current.name if name is None else name,
            unit_price=current.unit_price if unit_price is None else int(unit_price),
            category=current.category if category is None else category,
        )
    )
    persist_catalog(state)
    logger.info(f"product_edited id={product.id} price={product.unit_price}")
    return product


def set_product_active(state: AppState, product_id: int, active: bool) -> Product:
    product = state.catalog.set_active(product_id, active)
    persist_catalog(state)
    logger.info(f"product_active id={product_id} active={active}")
    return product


def remove_product(state: AppState, product_id: int) -> None:
    state.catalog.remove(product_id)
    persist_catalog(state)
    logger.info(f"product_removed id={product_id}")
