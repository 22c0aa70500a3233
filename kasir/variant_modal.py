"""Variant customization modal: size, toppings and note for one product."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from kasir.cart import Customization
from kasir.data import SIZE_OPTIONS, TOPPINGS
from kasir.errors import PosError
from kasir.models import Cart, CartLine, Product
from kasir.rendering import format_idr, format_product_label


class VariantModal(ModalScreen[CartLine | None]):
    """Centered modal to pick a size, toggle toppings and set a note before adding."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "toggle_current", "Toggle"),
        ("a", "add_to_cart", "Add"),
    ]

    CSS = """
    VariantModal {
        align: center middle;
        background: $background 60%;
    }

    #variant-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #variant-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #variant-body {
        margin-bottom: 1;
        color: white;
    }

    #variant-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)
    _SIZE_KIND = "size"
    _TOPPING_KIND = "topping"
    _NOTE_KIND = "note"
    _ADD_KIND = "add"

    def __init__(self, product: Product, cart: Cart, on_change: Callable[[], None]) -> None:
        super().__init__()
        self.cart = cart
        self.on_change = on_change
        self.customization = Customization.open(product, default_note=cart.note)
        self.typing_note = False
        self.note_input_value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="variant-dialog"):
            yield Static("Customize", id="variant-title")
            yield Static(id="variant-body")
            yield Static(id="variant-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event) -> None:
        if not self.typing_note:
            return

        if event.key == "escape":
            self.typing_note = False
            self.note_input_value = ""
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self.customization.set_note(self.note_input_value)
            self.typing_note = False
            self.note_input_value = ""
            self._refresh_content()
            event.stop()
            return

        if event.key == "backspace":
            if self.note_input_value:
                self.note_input_value = self.note_input_value[:-1]
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            self.note_input_value += event.character
            self._refresh_content()
            event.stop()
            return

        # Ignore all non-text keys while typing.
        event.stop()

    def action_close(self) -> None:
        if self.typing_note:
            self.typing_note = False
            self.note_input_value = ""
            self._refresh_content()
            return
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if self.typing_note:
            return
        rows = self._rows()
        self.cursor_index = (self.cursor_index + delta) % len(rows)
        self._refresh_content()

    def action_toggle_current(self) -> None:
        if self.typing_note:
            return
        row_kind, row_value = self._rows()[self.cursor_index]

        if row_kind == self._SIZE_KIND:
            self.customization.select_size(row_value)
        elif row_kind == self._TOPPING_KIND:
            self.customization.toggle_topping(row_value)
        elif row_kind == self._NOTE_KIND:
            self.typing_note = True
            self.note_input_value = self.customization.note
        else:
            self.action_add_to_cart()
            return
        self._refresh_content()

    def action_add_to_cart(self) -> None:
        if self.typing_note:
            return
        try:
            line = self.customization.add_to(self.cart)
        except PosError as exc:
            self.error = str(exc)
            self._refresh_content()
            return
        self.on_change()
        self.dismiss(line)

    def _rows(self) -> list[tuple[str, str]]:
        rows: list[tuple[str, str]] = []
        rows.extend((self._SIZE_KIND, size.id) for size in SIZE_OPTIONS)
        rows.extend((self._TOPPING_KIND, topping.id) for topping in TOPPINGS)
        rows.append((self._NOTE_KIND, "Note"))
        rows.append((self._ADD_KIND, "Add to cart"))
        return rows

    def _row_text(self, row_kind: str, row_value: str, pointer: str) -> tuple[str, str]:
        choice = self.customization
        if row_kind == self._SIZE_KIND:
            size = next(s for s in SIZE_OPTIONS if s.id == row_value)
            mark = "(o)" if choice.size_id == size.id else "( )"
            delta = f" +{format_idr(size.price_delta)}" if size.price_delta else ""
            return (f"{pointer}{mark} {size.name}{delta}", "bold white" if choice.size_id == size.id else "white")
        if row_kind == self._TOPPING_KIND:
            topping = next(t for t in TOPPINGS if t.id == row_value)
            is_checked = topping.id in choice.topping_ids
            mark = "[x]" if is_checked else "[ ]"
            return (f"{pointer}{mark} {topping.name} +{format_idr(topping.price)}", "bold white" if is_checked else "white")
        if row_kind == self._NOTE_KIND:
            if self.typing_note:
                return (f"{pointer}Note: {self.note_input_value}|", "bold white")
            return (f"{pointer}Note: {choice.note or '-'}", "white")
        return (f"{pointer}>> Add to cart", "bold #5fbf72")

    def _refresh_content(self) -> None:
        body = self.query_one("#variant-body", Static)
        help_text = self.query_one("#variant-help", Static)

        content = Text(style="white")
        content.append_text(format_product_label(self.customization.product))
        preview = self.customization.preview()
        content.append(f"\n{preview.display_name}  {format_idr(preview.unit_price)}", style="bold")

        rows = self._rows()
        if self.cursor_index >= len(rows):
            self.cursor_index = len(rows) - 1

        content.append("\n")
        for idx, (row_kind, row_value) in enumerate(rows):
            pointer = "➤ " if idx == self.cursor_index else "  "
            line, style = self._row_text(row_kind, row_value, pointer)
            content.append(f"\n{line}", style=style)

        if self.error:
            content.append(f"\n\n{self.error}", style="#ffb3b3")

        if self.typing_note:
            help_text.update("Type note, Enter confirm, Esc cancel typing")
        else:
            help_text.update("J/K/↑/↓ move, Enter select/toggle, A add, Esc/q close")
        body.update(content)
