"""Modal dialogs for confirmations and text prompts."""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label


class ConfirmDialog(ModalScreen[bool]):
    """Yes/No question. Dismisses with True when confirmed."""

    BINDINGS = [
        ("y", "confirm", "Yes"),
        ("n", "cancel", "No"),
        ("escape", "cancel", "No"),
    ]

    def __init__(self, title: str, message: str):
        super().__init__()
        self.title_text = title
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"[bold]{self.title_text}[/bold]", classes="dialog_title")
            yield Label(self.message, classes="dialog_message")
            with Horizontal(classes="dialog_buttons"):
                yield Button("Yes", id="btn_yes", variant="error")
                yield Button("No", id="btn_no", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn_yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class PromptDialog(ModalScreen[Optional[str]]):
    """Single-line text prompt.

    Dismisses with the entered text, or None when cancelled.
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, title: str, message: str, initial_value: str = ""):
        super().__init__()
        self.title_text = title
        self.message = message
        self.initial_value = initial_value

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"[bold]{self.title_text}[/bold]", classes="dialog_title")
            yield Label(self.message, classes="dialog_message")
            yield Input(value=self.initial_value, id="prompt_input")
            with Horizontal(classes="dialog_buttons"):
                yield Button("OK", id="btn_ok", variant="primary")
                yield Button("Cancel", id="btn_cancel")

    def on_mount(self) -> None:
        self.query_one("#prompt_input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_ok":
            self.dismiss(self.query_one("#prompt_input", Input).value)
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
