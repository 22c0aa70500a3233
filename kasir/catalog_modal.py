"""Product admin modal: add, edit, activate and remove catalog products."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from kasir.entry_modal import EntryModal
from kasir.errors import PosError
from kasir.models import Product
from kasir.rendering import format_product_label
from kasir.state import AppState, add_product, edit_product, remove_product, set_product_active


class CatalogModal(ModalScreen[None]):
    """Lists every product, inactive ones included. Changes are saved as they are made."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("space", "toggle_active", "Active"),
        ("enter", "toggle_active", "Active"),
        ("a", "add_product", "Add"),
        ("e", "edit_product", "Edit"),
        ("d", "remove_product", "Remove"),
    ]

    CSS = """
    CatalogModal {
        align: center middle;
        background: $background 60%;
    }

    #catalog-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #catalog-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #catalog-body {
        color: white;
    }

    #catalog-status {
        margin-top: 1;
        color: #ffb3b3;
    }

    #catalog-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, state: AppState) -> None:
        super().__init__()
        self.state = state
        self.status = ""
        self.pending_remove: int | None = None

    def compose(self) -> ComposeResult:
        with Container(id="catalog-dialog"):
            yield Static("Products", id="catalog-title")
            yield Static(id="catalog-body")
            yield Static(id="catalog-status")
            yield Static(
                "j/k move. Space active on/off. A add. E edit. D twice remove. Esc close.",
                id="catalog-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def action_move_cursor(self, delta: int) -> None:
        products = self.state.catalog.products()
        if not products:
            return
        self.cursor_index = (self.cursor_index + delta) % len(products)
        self.pending_remove = None
        self._refresh_content()

    def action_toggle_active(self) -> None:
        product = self._current()
        if product is None:
            return
        self._apply(lambda: set_product_active(self.state, product.id, not product.active))

    def action_add_product(self) -> None:
        self._prompt_fields(None)

    def action_edit_product(self) -> None:
        product = self._current()
        if product is not None:
            self._prompt_fields(product)

    def action_remove_product(self) -> None:
        product = self._current()
        if product is None:
            return
        if self.pending_remove != product.id:
            self.pending_remove = product.id
            self.status = f"Press D again to remove {product.name}."
            self._refresh_content()
            return
        self.pending_remove = None
        self._apply(lambda: remove_product(self.state, product.id))

    def _current(self) -> Product | None:
        products = self.state.catalog.products()
        if not products:
            return None
        return products[min(self.cursor_index, len(products) - 1)]

    def _apply(self, operation) -> None:
        try:
            operation()
        except PosError as exc:
            self.status = str(exc)
        else:
            self.status = ""
        self._refresh_content()

    def _prompt_fields(self, product: Product | None) -> None:
        """Ask for name, then price, then category; the change is applied after the last answer."""
        title = "New product" if product is None else f"Edit {product.name}"

        def ask_category(name: str, unit_price: int) -> None:
            def done(category: str | None) -> None:
                if category is None:
                    return
                if product is None:
                    self._apply(lambda: add_product(self.state, name, unit_price, category or "Signature"))
                else:
                    self._apply(lambda: edit_product(self.state, product.id, name, unit_price, category or product.category))

            initial = "Signature" if product is None else product.category
            self.app.push_screen(
                EntryModal(title, "Category", initial=initial, numeric=False, max_length=24, allow_empty=True),
                done,
            )

        def ask_price(name: str | None) -> None:
            if name is None:
                return

            def got_price(price: str | None) -> None:
                if price is None:
                    return
                try:
                    unit_price = int(float(price))
                except ValueError:
                    self.status = f"Price {price!r} is not a number."
                    self._refresh_content()
                    return
                ask_category(name, unit_price)

            initial = "" if product is None else str(product.unit_price)
            self.app.push_screen(EntryModal(title, "Price in rupiah", initial=initial), got_price)

        initial_name = "" if product is None else product.name
        self.app.push_screen(
            EntryModal(title, "Product name", initial=initial_name, numeric=False, max_length=40),
            ask_price,
        )

    def _refresh_content(self) -> None:
        products = self.state.catalog.products()
        if self.cursor_index >= len(products):
            self.cursor_index = max(0, len(products) - 1)

        body = Text()
        if not products:
            body.append("(no products)", style="dim")
        for idx, product in enumerate(products):
            if idx:
                body.append("\n")
            body.append("➤ " if idx == self.cursor_index else "  ")
            body.append("[x] " if product.active else "[ ] ", style="bold" if product.active else "dim")
            label = format_product_label(product)
            if not product.active:
                label.stylize("dim")
            body.append_text(label)

        self.query_one("#catalog-body", Static).update(body)
        self.query_one("#catalog-status", Static).update(self.status)
