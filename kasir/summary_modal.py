"""Sales summary modal: today's numbers, 14-day series and recent sales."""

from __future__ import annotations

from datetime import datetime

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from kasir.errors import PosError, RemoteQueryIndexRequired
from kasir.history import HistoryClient, HistoryQuery
from kasir.rendering import format_idr
from kasir.sales_log import SalesLog, outlet_zone, today_summary, trailing_series

_RECENT_ROWS = 8
_BAR_WIDTH = 20


def summary_text(sales_log: SalesLog, now_ms: int | None = None) -> Text:
    summary = today_summary(sales_log, now_ms=now_ms)
    series = trailing_series(sales_log, days=14, now_ms=now_ms)

    text = Text()
    text.append(f"Today {summary.day_key}\n", style="bold")
    text.append(f"Revenue      {format_idr(summary.revenue)}\n")
    text.append(f"Transactions {summary.transaction_count}\n")
    text.append(f"Avg order    {format_idr(summary.average_order_value)}\n")
    if summary.top_items:
        text.append("Top items    ")
        text.append(", ".join(f"{item.name} ({item.quantity})" for item in summary.top_items))
        text.append("\n")

    text.append("\nLast 14 days\n", style="bold")
    peak = max((day.revenue for day in series), default=0) or 1
    for day in series:
        bar = "█" * round(_BAR_WIDTH * day.revenue / peak)
        text.append(f"{day.day_key[5:]} {bar:<{_BAR_WIDTH}} {format_idr(day.revenue)} ({day.transaction_count})\n")

    text.append("\nRecent sales\n", style="bold")
    recent = sales_log.records()[:_RECENT_ROWS]
    if not recent:
        text.append("(no sales yet)", style="dim")
    for record in recent:
        text.append(f"{record.id}  {record.created_at}  {record.pay_method:<8} {format_idr(record.total)}\n")
    return text


def remote_history_text(client: HistoryClient, outlet: str, now: datetime | None = None) -> Text:
    """Today's sales as recorded by the remote history store, or why they could not be read."""
    now = now or datetime.now(outlet_zone())
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    text = Text()
    text.append("Remote history (today)\n", style="bold")
    try:
        page = client.fetch(HistoryQuery(outlet=outlet, start=start, end=now))
    except RemoteQueryIndexRequired as exc:
        text.append(str(exc), style="#ffd479")
        return text
    except PosError as exc:
        text.append(str(exc), style="#ffb3b3")
        return text

    revenue = sum(record.total for record in page.rows)
    text.append(f"Sales        {len(page.rows)}{'+' if page.next_cursor else ''}\n")
    text.append(f"Revenue      {format_idr(revenue)}\n")
    for record in page.rows[:_RECENT_ROWS]:
        text.append(f"{record.id}  {record.created_at}  {record.pay_method:<8} {format_idr(record.total)}\n")
    return text


class SummaryModal(ModalScreen[None]):
    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("r", "load_remote", "Remote history"),
    ]

    CSS = """
    SummaryModal {
        align: center middle;
        background: $background 60%;
    }

    #summary-dialog {
        width: 76;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }
    """

    def __init__(self, sales_log: SalesLog, history: HistoryClient | None = None, outlet: str = "") -> None:
        super().__init__()
        self.sales_log = sales_log
        self.history = history
        self.outlet = outlet

    def compose(self) -> ComposeResult:
        help_text = "Esc / q / Ctrl+C to close"
        if self.history is not None:
            help_text = "R load remote history. " + help_text
        with Container(id="summary-dialog"):
            yield Static(summary_text(self.sales_log), id="summary-body")
            yield Static(id="summary-remote")
            yield Static(help_text, id="summary-help")

    def action_close(self) -> None:
        self.dismiss()

    def action_load_remote(self) -> None:
        if self.history is None:
            return
        self.query_one("#summary-remote", Static).update(remote_history_text(self.history, self.outlet))
