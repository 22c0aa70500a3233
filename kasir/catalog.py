"""Product catalog management."""

from __future__ import annotations

from dataclasses import replace

from kasir.errors import ValidationError
from kasir.models import Product

ALL_CATEGORIES = "All"


class Catalog:
    """Ordered, editable product list. Deactivation hides a product without deleting it."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self._products: list[Product] = list(products or [])

    def __len__(self) -> int:
        return len(self._products)

    def products(self) -> list[Product]:
        return list(self._products)

    def get(self, product_id: int) -> Product:
        for product in self._products:
            if product.id == product_id:
                return product
        raise ValidationError(f"No product with id {product_id}")

    def categories(self) -> list[str]:
        seen: list[str] = []
        for product in self._products:
            if product.category not in seen:
                seen.append(product.category)
        return [ALL_CATEGORIES, *seen]

    def active_products(self, query: str = "", category: str = ALL_CATEGORIES) -> list[Product]:
        q = query.strip().lower()
        return [
            product
            for product in self._products
            if product.active
            and (category == ALL_CATEGORIES or product.category == category)
            and q in product.name.lower()
        ]

    def next_id(self) -> int:
        return max((product.id for product in self._products), default=0) + 1

    def new_product(self, name: str, unit_price: int, category: str = "Signature") -> Product:
        return self.upsert(Product(id=self.next_id(), name=name, unit_price=unit_price, category=category))

    def upsert(self, product: Product) -> Product:
        name = product.name.strip()
        if not name:
            raise ValidationError("Product name is required")
        if product.unit_price <= 0:
            raise ValidationError("Product price must be greater than 0")
        product = replace(product, name=name, category=product.category.strip() or "Signature")

        for idx, existing in enumerate(self._products):
            if existing.id == product.id:
                self._products[idx] = product
                return product
        self._products.append(product)
        return product

    def set_active(self, product_id: int, active: bool) -> Product:
        return self.upsert(replace(self.get(product_id), active=active))

    def remove(self, product_id: int) -> None:
        self._products.remove(self.get(product_id))

    def to_list(self) -> list[dict]:
        return [product.to_dict() for product in self._products]
