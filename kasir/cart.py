"""Cart ledger operations on the single active cart."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable
from uuid import uuid4

from kasir.constant import CASH, PAY_METHODS
from kasir.data import DEFAULT_SIZE_ID, SIZE_BY_ID
from kasir.errors import InvalidVariant, ValidationError
from kasir.log import get_logger
from kasir.models import Cart, CartLine, Product
from kasir.variants import ResolvedVariant, normalize_note, resolve

logger = get_logger(__name__)


def _new_line_id(cart: Cart) -> str:
    taken = {line.line_id for line in cart.lines}
    while True:
        line_id = uuid4().hex[:7]
        if line_id not in taken:
            return line_id


def _index_of(cart: Cart, line_id: str) -> int:
    for idx, line in enumerate(cart.lines):
        if line.line_id == line_id:
            return idx
    raise ValidationError(f"No cart line {line_id!r}")


def add_line(
    cart: Cart,
    product: Product,
    size_id: str,
    topping_ids: Iterable[str] = (),
    note: str | None = None,
    qty: int = 1,
) -> CartLine:
    """Add a customized product, merging into an equal existing line when there is one."""
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")
    if not product.active:
        raise ValidationError(f"{product.name} is not available")

    variant = resolve(product, size_id, topping_ids, cart.note if note is None else note)
    for idx, line in enumerate(cart.lines):
        if line.identity_key == variant.identity_key:
            merged = replace(line, quantity=line.quantity + qty)
            cart.lines[idx] = merged
            logger.info(f"cart_merge line_id={merged.line_id} qty={merged.quantity}")
            return merged

    line = _line_from_variant(_new_line_id(cart), product, variant, qty)
    cart.lines.append(line)
    logger.info(f"cart_add line_id={line.line_id} product_id={product.id} unit_price={line.unit_price} qty={qty}")
    return line


def _line_from_variant(line_id: str, product: Product, variant: ResolvedVariant, qty: int) -> CartLine:
    return CartLine(
        line_id=line_id,
        product_id=product.id,
        display_name=variant.display_name,
        unit_price=variant.unit_price,
        quantity=qty,
        size_id=variant.size_id,
        topping_ids=variant.topping_ids,
        note=variant.note,
    )


def increment(cart: Cart, line_id: str) -> CartLine:
    idx = _index_of(cart, line_id)
    line = replace(cart.lines[idx], quantity=cart.lines[idx].quantity + 1)
    cart.lines[idx] = line
    return line


def decrement(cart: Cart, line_id: str) -> CartLine:
    """Lower quantity by one; a line never drops below 1 (use remove_line)."""
    idx = _index_of(cart, line_id)
    line = cart.lines[idx]
    if line.quantity > 1:
        line = replace(line, quantity=line.quantity - 1)
        cart.lines[idx] = line
    return line


def remove_line(cart: Cart, line_id: str) -> None:
    del cart.lines[_index_of(cart, line_id)]
    logger.info(f"cart_remove line_id={line_id}")


def clear(cart: Cart) -> None:
    """Reset the cart to a fresh order: no lines and default discount, toggles, note and payment."""
    cart.lines.clear()
    cart.discount_amount = 0
    cart.include_tax = False
    cart.include_service = False
    cart.note = ""
    cart.cash_tendered = 0
    cart.pay_method = CASH


def set_discount(cart: Cart, amount: int) -> None:
    # Negative input is clamped here so the totals formula never sees it.
    cart.discount_amount = max(0, int(amount))


def set_cash_tendered(cart: Cart, amount: int) -> None:
    cart.cash_tendered = max(0, int(amount))


def set_pay_method(cart: Cart, pay_method: str) -> None:
    if pay_method not in PAY_METHODS:
        raise ValidationError(f"Unknown payment method {pay_method!r}")
    cart.pay_method = pay_method


def set_note(cart: Cart, note: str) -> None:
    cart.note = normalize_note(note)


def toggle_tax(cart: Cart) -> bool:
    cart.include_tax = not cart.include_tax
    return cart.include_tax


def toggle_service(cart: Cart) -> bool:
    cart.include_service = not cart.include_service
    return cart.include_service


@dataclass
class Customization:
    """Choices made in the variant dialog for one product, before it reaches the cart."""

    product: Product
    size_id: str = DEFAULT_SIZE_ID
    topping_ids: set[str] = field(default_factory=set)
    note: str = ""

    @classmethod
    def open(cls, product: Product, default_note: str = "") -> Customization:
        return cls(product=product, note=normalize_note(default_note))

    def select_size(self, size_id: str) -> None:
        if size_id not in SIZE_BY_ID:
            raise InvalidVariant(f"Unknown size {size_id!r}")
        self.size_id = size_id

    def toggle_topping(self, topping_id: str) -> None:
        if topping_id in self.topping_ids:
            self.topping_ids.remove(topping_id)
        else:
            self.topping_ids.add(topping_id)

    def set_note(self, note: str) -> None:
        self.note = normalize_note(note)

    def preview(self) -> ResolvedVariant:
        return resolve(self.product, self.size_id, self.topping_ids, self.note)

    def add_to(self, cart: Cart, qty: int = 1) -> CartLine:
        return add_line(cart, self.product, self.size_id, self.topping_ids, self.note, qty=qty)
