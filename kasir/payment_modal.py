"""Payment modal: choose a method, take cash, commit the sale."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from kasir import cart as cart_ops
from kasir.checkout import Checkout, CommitResult
from kasir.constant import CASH, PAY_METHODS
from kasir.errors import InsufficientPayment, PosError
from kasir.rendering import format_idr


_MAX_CASH_DIGITS = 10


def edit_cash_input(value: str, key: str, character: str | None, replace: bool = False) -> str | None:
    """Cash input after one keypress, or None when the key does not edit cash."""
    if key == "backspace":
        return value[:-1]
    if not (character and character.isdigit()):
        return None
    if replace:
        return character
    if len(value) >= _MAX_CASH_DIGITS:
        return value
    return value + character


class PaymentModal(ModalScreen[CommitResult | None]):
    """Awaiting-payment step. Dismisses with the commit result, or None when cancelled."""

    CSS = """
    PaymentModal {
        align: center middle;
        background: $background 60%;
    }

    #payment-dialog {
        width: 56;
        height: auto;
        border: round $primary;
        background: $panel;
        padding: 1 2;
    }

    #payment-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #payment-body {
        color: white;
        margin-bottom: 1;
    }

    #payment-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #payment-help {
        color: #dddddd;
    }
    """

    def __init__(self, checkout: Checkout) -> None:
        super().__init__()
        self.checkout = checkout
        self.cash_input = str(checkout.app.cart.cash_tendered or "")
        # The total is pre-filled; the first digit typed starts a fresh amount.
        self.cash_prefilled = bool(self.cash_input)
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="payment-dialog"):
            yield Static("Payment", id="payment-title")
            yield Static(id="payment-body")
            yield Static(id="payment-error")
            yield Static(
                "M/←/→ method. Digits edit cash. Enter commit. Esc back to cart.",
                id="payment-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        cart = self.checkout.app.cart

        if event.key in {"escape", "ctrl+c"}:
            self.checkout.cancel_payment()
            self.dismiss(None)
            event.stop()
            return

        if event.key in {"m", "right", "left"}:
            step = -1 if event.key == "left" else 1
            idx = PAY_METHODS.index(cart.pay_method)
            cart_ops.set_pay_method(cart, PAY_METHODS[(idx + step) % len(PAY_METHODS)])
            self.error = ""
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._commit()
            event.stop()
            return

        if cart.pay_method != CASH:
            return

        character = event.character if event.is_printable else None
        value = edit_cash_input(self.cash_input, event.key, character, replace=self.cash_prefilled)
        if value is None:
            return
        self.cash_input = value
        self.cash_prefilled = False
        cart_ops.set_cash_tendered(cart, int(self.cash_input or 0))
        self.error = ""
        self._refresh_content()
        event.stop()

    def _commit(self) -> None:
        try:
            result = self.checkout.commit()
        except InsufficientPayment as exc:
            self.error = f"Cash short by {format_idr(exc.total - exc.tendered)}."
            self._refresh_content()
            return
        except PosError as exc:
            self.error = str(exc)
            self._refresh_content()
            return
        self.dismiss(result)

    def _refresh_content(self) -> None:
        cart = self.checkout.app.cart
        totals = self.checkout.totals()
        settlement = self.checkout.settlement(totals)

        body = Text()
        for method in PAY_METHODS:
            style = "bold #0b1f0f on #5fbf72" if method == cart.pay_method else "dim"
            body.append(f" {method} ", style=style)
            body.append(" ")
        body.append(f"\n\nTotal    {format_idr(totals.total)}", style="bold")
        if cart.pay_method == CASH:
            body.append(f"\nCash     {format_idr(cart.cash_tendered)}")
        else:
            body.append(f"\nPaid     {format_idr(settlement.effective_cash)} ({cart.pay_method})")
        body.append(f"\nChange   {format_idr(settlement.change)}")

        self.query_one("#payment-body", Static).update(body)
        self.query_one("#payment-error", Static).update(self.error or "")
