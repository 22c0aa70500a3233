"""Single-value entry modal screen (amounts, rates and notes)."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


class EntryModal(ModalScreen[str | None]):
    """Prompt for one value; dismisses with the typed text or None on cancel."""

    CSS = """
    EntryModal {
        align: center middle;
        background: $background 60%;
    }

    #entry-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #entry-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #entry-prompt {
        color: white;
        margin-bottom: 1;
    }

    #entry-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #entry-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #entry-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        prompt: str,
        initial: str = "",
        numeric: bool = True,
        max_length: int = 12,
        allow_empty: bool = False,
    ) -> None:
        super().__init__()
        self.title_text = title
        self.prompt_text = prompt
        self.numeric = numeric
        self.max_length = max_length
        self.allow_empty = allow_empty
        self.value = initial
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="entry-dialog"):
            yield Static(self.title_text, id="entry-title")
            yield Static(self.prompt_text, id="entry-prompt")
            yield Static(id="entry-value")
            yield Static(id="entry-error")
            kind = "Digits only" if self.numeric else "Type text"
            yield Static(f"{kind}. Enter confirm. Backspace delete. Esc cancel.", id="entry-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if not (event.is_printable and event.character):
            return
        if self.numeric and not (event.character.isdigit() or (event.character == "." and "." not in self.value)):
            event.stop()
            return
        if len(self.value) < self.max_length:
            self.value += event.character
        self.error = ""
        self._refresh_content()
        event.stop()

    def _confirm(self) -> None:
        if not self.value.strip() and not self.allow_empty:
            self.error = "A value is required."
            self._refresh_content()
            return
        self.dismiss(self.value.strip())

    def _refresh_content(self) -> None:
        self.query_one("#entry-value", Static).update(self.value or "")
        self.query_one("#entry-error", Static).update(self.error or "")
