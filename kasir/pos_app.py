"""Main Textual cashier app."""

from __future__ import annotations

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from kasir import cart as cart_ops
from kasir.catalog import ALL_CATEGORIES
from kasir.catalog_modal import CatalogModal
from kasir.checkout import Checkout, CommitResult
from kasir.config import EXPORT_DIR
from kasir.entry_modal import EntryModal
from kasir.errors import PosError
from kasir.export import export_sales_csv
from kasir.history import HistoryClient
from kasir.log import get_logger
from kasir.models import CartLine, Product
from kasir.notify import Notifier
from kasir.payment_modal import PaymentModal
from kasir.printer import check_printer_dependencies, print_receipt
from kasir.rendering import badge_style, format_cart_line, format_idr, format_product_label, format_totals
from kasir.state import AppState, update_settings
from kasir.summary_modal import SummaryModal
from kasir.variant_modal import VariantModal

logger = get_logger(__name__)


class KasirApp(App):
    """A Textual cashier terminal: search products, build the cart, take payment."""

    TITLE = "Kasir"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #cart-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-totals {
        height: auto;
        padding: 1 1 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    query = reactive("")
    category = reactive(ALL_CATEGORIES)
    selected_index = reactive(0)
    line_selected_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "customize_selected", "Customize"),
        ("backspace", "backspace_query", "Delete query char"),
        Binding("ctrl+d", "print_draft", "Print draft", priority=True),
        Binding("ctrl+e", "export_csv", "Export CSV", priority=True),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, state: AppState, notifier: Notifier | None = None, history: HistoryClient | None = None) -> None:
        super().__init__()
        self.state = state
        self.checkout = Checkout(state, on_receipt=print_receipt, notifier=notifier)
        self.history = history
        self.system_status = ""

    @property
    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="cart-pane"):
                yield Static("Cart", classes="pane-title")
                yield Static("(no items yet)", id="cart-list")
                yield Static(id="cart-totals")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        self.sub_title = self.state.settings.shop_name
        _, msg = check_printer_dependencies()
        self.system_status = msg
        logger.info(f"on_mount printer_status={msg!r}")
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if self._modal_open:
            return

        if self.input_state == "active":
            if event.is_printable and event.character and event.key not in {"tab", "enter"}:
                self.query += event.character
                self.selected_index = 0
                self._refresh_search()
                event.stop()
            return

        handlers = {
            "s": self._enter_search,
            "slash": self._enter_search,
            "j": lambda: self._move_line_selection(1),
            "k": lambda: self._move_line_selection(-1),
            "plus": lambda: self._change_selected_line(cart_ops.increment),
            "equals_sign": lambda: self._change_selected_line(cart_ops.increment),
            "minus": lambda: self._change_selected_line(cart_ops.decrement),
            "d": self._delete_selected_line,
            "x": self._toggle_tax,
            "v": self._toggle_service,
            "o": self._prompt_discount,
            "n": self._prompt_note,
            "c": self._clear_cart,
            "p": self._open_payment,
            "h": self._open_summary,
            "m": self._open_catalog,
            "f": self._cycle_category,
            "t": lambda: self._prompt_rate("tax"),
            "r": lambda: self._prompt_rate("service"),
        }
        handler = handlers.get(event.key)
        if handler is None:
            return
        handler()
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if self._modal_open or self.input_state == "normal":
            return
        self.input_state = "normal"
        self.query = ""
        self.selected_index = 0
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if self._modal_open or self.input_state != "active":
            return
        results = self._filtered_results()
        if not results:
            self.selected_index = 0
            self._refresh_results(results)
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_customize_selected(self) -> None:
        if self._modal_open or self.input_state != "active":
            return
        results = self._filtered_results()
        if not results:
            return
        product = results[self.selected_index]
        self.push_screen(VariantModal(product, self.state.cart, on_change=self._refresh_cart), self._after_customize)

    def action_backspace_query(self) -> None:
        if self._modal_open or self.input_state != "active" or not self.query:
            return
        self.query = self.query[:-1]
        self.selected_index = 0
        self._refresh_search()

    def action_print_draft(self) -> None:
        if self._modal_open:
            return
        if self.state.cart.is_empty:
            self._set_status("Nothing to print")
            return
        error = self.checkout.print_draft()
        self._set_status(f"Draft print failed: {error}" if error else "Draft printed")

    def action_export_csv(self) -> None:
        if self._modal_open:
            return
        try:
            path = export_sales_csv(self.state.sales_log, EXPORT_DIR)
        except OSError as exc:
            logger.warning(f"export_failed error={exc!r}")
            self._set_status(f"Export failed: {exc}")
            return
        logger.info(f"export_ok path={path} rows={len(self.state.sales_log)}")
        self._set_status(f"Exported {len(self.state.sales_log)} sales to {path}")

    def _enter_search(self) -> None:
        self.input_state = "active"
        self.query = ""
        self.selected_index = 0
        self._refresh_search()

    def _after_customize(self, line: CartLine | None) -> None:
        if line is None:
            return
        self.line_selected_index = next(
            (idx for idx, row in enumerate(self.state.cart.lines) if row.line_id == line.line_id), None
        )
        self._set_status(f"Added {line.display_name}")
        self._refresh_cart()

    def _selected_line(self) -> CartLine | None:
        lines = self.state.cart.lines
        if self.line_selected_index is None or not (0 <= self.line_selected_index < len(lines)):
            return None
        return lines[self.line_selected_index]

    def _move_line_selection(self, delta: int) -> None:
        lines = self.state.cart.lines
        if not lines:
            return
        if self.line_selected_index is None:
            self.line_selected_index = 0 if delta > 0 else len(lines) - 1
        else:
            self.line_selected_index = (self.line_selected_index + delta) % len(lines)
        self._refresh_cart()

    def _change_selected_line(self, operation) -> None:
        line = self._selected_line()
        if line is None:
            return
        operation(self.state.cart, line.line_id)
        self._refresh_cart()

    def _delete_selected_line(self) -> None:
        line = self._selected_line()
        if line is None:
            return
        idx = self.line_selected_index
        cart_ops.remove_line(self.state.cart, line.line_id)
        remaining = len(self.state.cart.lines)
        self.line_selected_index = None if not remaining else min(idx, remaining - 1)
        self._refresh_cart()

    def _toggle_tax(self) -> None:
        enabled = cart_ops.toggle_tax(self.state.cart)
        self._set_status(f"Tax {'on' if enabled else 'off'} ({self.state.settings.tax_rate_percent:g}%)")
        self._refresh_cart()

    def _toggle_service(self) -> None:
        enabled = cart_ops.toggle_service(self.state.cart)
        self._set_status(f"Service {'on' if enabled else 'off'} ({self.state.settings.service_rate_percent:g}%)")
        self._refresh_cart()

    def _clear_cart(self) -> None:
        cart_ops.clear(self.state.cart)
        self.line_selected_index = None
        self._set_status("Cart cleared")
        self._refresh_cart()

    def _cycle_category(self) -> None:
        categories = self.state.catalog.categories()
        idx = categories.index(self.category) if self.category in categories else 0
        self.category = categories[(idx + 1) % len(categories)]
        self.selected_index = 0
        self._refresh_search()

    def _prompt_discount(self) -> None:
        def apply(value: str | None) -> None:
            if value is None:
                return
            try:
                cart_ops.set_discount(self.state.cart, int(float(value)))
            except ValueError:
                self._set_status(f"Discount {value!r} is not a number")
                return
            self._refresh_cart()

        current = str(self.state.cart.discount_amount or "")
        self.push_screen(EntryModal("Discount", "Discount amount in rupiah", initial=current), apply)

    def _prompt_note(self) -> None:
        def apply(value: str | None) -> None:
            if value is None:
                return
            cart_ops.set_note(self.state.cart, value)
            self._set_status(f"Default note: {self.state.cart.note or '-'}")

        self.push_screen(
            EntryModal("Note", "Default note for new items", initial=self.state.cart.note, numeric=False, max_length=60, allow_empty=True),
            apply,
        )

    def _prompt_rate(self, which: str) -> None:
        settings = self.state.settings
        current = settings.tax_rate_percent if which == "tax" else settings.service_rate_percent

        def apply(value: str | None) -> None:
            if value is None:
                return
            try:
                if which == "tax":
                    update_settings(self.state, tax_rate_percent=float(value))
                else:
                    update_settings(self.state, service_rate_percent=float(value))
            except (PosError, ValueError) as exc:
                self._set_status(str(exc))
                return
            self._set_status(f"{which.title()} rate set to {float(value):g}%")
            self._refresh_cart()

        self.push_screen(EntryModal(f"{which.title()} rate", "Percent, 0 to 100", initial=f"{current:g}", max_length=6), apply)

    def _open_payment(self) -> None:
        try:
            self.checkout.open_payment()
        except PosError as exc:
            self._set_status(str(exc))
            return
        self.push_screen(PaymentModal(self.checkout), self._after_payment)

    def _after_payment(self, result: CommitResult | None) -> None:
        if result is None:
            self._set_status("Payment cancelled")
            self._refresh_cart()
            return
        record = result.record
        status = f"Saved {record.id} total {format_idr(record.total)} change {format_idr(record.change)}"
        if result.receipt_error:
            status += f" but print failed: {result.receipt_error}"
        if not result.persisted:
            status += " (not persisted)"
        self.line_selected_index = None
        self._set_status(status)
        self._refresh_cart()

    def _open_summary(self) -> None:
        self.push_screen(SummaryModal(self.state.sales_log, history=self.history, outlet=self.state.settings.shop_name))

    def _open_catalog(self) -> None:
        def after(_: None) -> None:
            if self.category not in self.state.catalog.categories():
                self.category = ALL_CATEGORIES
            self.selected_index = 0
            self._refresh_search()

        self.push_screen(CatalogModal(self.state), after)

    def _filtered_results(self) -> list[Product]:
        return self.state.catalog.active_products(self.query, self.category)

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_search_bar()

    def _refresh_all(self) -> None:
        self._refresh_cart()
        self._refresh_search()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        start = 0 if selected is None else max(0, min(selected - rows // 2, total - rows))
        return (start, start + rows)

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
            totals_widget = self.query_one("#cart-totals", Static)
        except NoMatches:
            return
        cart = self.state.cart
        totals_widget.update(format_totals(self.checkout.totals(), cart.include_tax, cart.include_service))

        if not cart.lines:
            self.line_selected_index = None
            cart_widget.update("(no items yet)")
            return
        if self.line_selected_index is not None and self.line_selected_index >= len(cart.lines):
            self.line_selected_index = len(cart.lines) - 1

        start, end = self._window_bounds(len(cart.lines), self._visible_rows(cart_widget), self.line_selected_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            lines.append("➤ " if idx == self.line_selected_index else "  ")
            lines.append_text(format_cart_line(cart.lines[idx]))
        if end < len(cart.lines):
            lines.append("\n⋮", style="dim")
        cart_widget.update(lines)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        if self.input_state == "normal":
            self._refresh_results([])
            return
        self._refresh_results(self._filtered_results())

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            bar.update(f"S search, P pay, X/V tax/service, O discount, H summary, M products.\n{status}")
            return

        text = Text()
        text.append(self.category, style=badge_style(self.category))
        text.append(f": {self.query}")
        bar.update(text)

    def _refresh_results(self, results: list[Product]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            results_widget.update("")
            return
        if not results:
            results_widget.update("No results")
            return
        if self.selected_index >= len(results):
            self.selected_index = 0

        start, end = self._window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_product_label(results[idx]))
        if end < len(results):
            lines.append("\n⋮", style="dim")
        results_widget.update(lines)
