import pytest

from kasir.catalog import ALL_CATEGORIES, Catalog
from kasir.data import default_products
from kasir.errors import ValidationError
from kasir.models import Product


def test_search_matches_active_products_case_insensitively() -> None:
    catalog = Catalog(default_products())

    names = [product.name for product in catalog.active_products("COCO")]

    assert names == ["Coconut Matcha"]
    assert len(catalog.active_products()) == 8


def test_deactivated_products_are_hidden_but_kept() -> None:
    catalog = Catalog(default_products())

    catalog.set_active(1, False)

    assert 1 not in [product.id for product in catalog.active_products()]
    assert catalog.get(1).active is False
    assert len(catalog) == 8


def test_category_filter_and_listing() -> None:
    catalog = Catalog(default_products())
    catalog.new_product("Earl Grey Latte", 16000, category="Tea")

    assert catalog.categories() == [ALL_CATEGORIES, "Signature", "Tea"]
    assert [product.name for product in catalog.active_products(category="Tea")] == ["Earl Grey Latte"]


def test_new_product_takes_next_id_and_trims_name() -> None:
    catalog = Catalog(default_products())

    product = catalog.new_product("  Hojicha  ", 17000)

    assert product.id == 9
    assert product.name == "Hojicha"


def test_upsert_replaces_by_id_and_validates() -> None:
    catalog = Catalog(default_products())

    catalog.upsert(Product(id=1, name="Matcha OG", unit_price=16000))

    assert catalog.get(1).unit_price == 16000
    with pytest.raises(ValidationError):
        catalog.upsert(Product(id=1, name=" ", unit_price=16000))
    with pytest.raises(ValidationError):
        catalog.upsert(Product(id=1, name="Matcha OG", unit_price=0))


def test_remove_and_missing_product() -> None:
    catalog = Catalog(default_products())

    catalog.remove(8)

    with pytest.raises(ValidationError):
        catalog.get(8)
    assert catalog.to_list()[-1]["id"] == 7
