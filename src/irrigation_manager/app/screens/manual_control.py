"""Manual control screen.

Shows every section with its elapsed time and lets the user start, pause
and reset the manual timer of the selected one.
"""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, DataTable, Footer, Header, Label
from textual.widgets.data_table import CellDoesNotExist

from irrigation_manager.app.db.models import Section
from irrigation_manager.app.logging_config import get_logger
from irrigation_manager.app.services.timers import TimerController
from irrigation_manager.app.state import AppState, ChangeKind, SectionListChange

logger = get_logger(__name__)


class ManualControlScreen(Screen):
    """Screen for running the manual section timers."""

    BINDINGS = [
        ("s", "start_timer", "Start"),
        ("t", "stop_timer", "Stop"),
        ("p", "pause_timer", "Pause"),
        ("r", "reset_timer", "Reset"),
        ("escape", "back", "Back"),
    ]

    def __init__(self, state: AppState, timers: TimerController):
        """Initialize the screen.

        Args:
            state: Application state
            timers: Timer controller shared with the app
        """
        super().__init__()
        self.state = state
        self.timers = timers

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        yield Header()

        with Vertical():
            yield Label("[bold]Manual Control[/bold]", id="title")
            yield Label(
                "'s' start, 't' stop (pauses a running timer, resets an idle one), "
                "'p' pause, 'r' reset",
                id="subtitle",
            )

            table = DataTable(id="timers_table", cursor_type="row")
            table.add_column("Section", key="name")
            table.add_column("Pipe", key="pipe")
            table.add_column("Elapsed", key="elapsed")
            table.add_column("Status", key="status")
            yield table

            with Horizontal(id="buttons"):
                yield Button("Start", id="btn_start", variant="success")
                yield Button("Stop", id="btn_stop", variant="error")
                yield Button("Pause", id="btn_pause")
                yield Button("Reset", id="btn_reset")
                yield Button("Back", id="btn_back")

        yield Footer()

    def on_mount(self) -> None:
        """Handle mount event."""
        logger.info("ManualControlScreen mounted")
        self.state.sections.add_listener(self._on_sections_changed)
        self._load_table()

    def on_unmount(self) -> None:
        self.state.sections.remove_listener(self._on_sections_changed)

    def _status(self, section: Section) -> str:
        return "Running" if self.timers.is_running(section.id) else "Idle"

    def _load_table(self) -> None:
        """Rebuild the table from the section list."""
        table = self.query_one("#timers_table", DataTable)
        table.clear()
        for section in self.state.sections:
            table.add_row(
                section.name,
                section.watering_type,
                section.formatted_elapsed,
                self._status(section),
                key=section.id,
            )

    def _refresh_row(self, section: Section) -> None:
        table = self.query_one("#timers_table", DataTable)
        try:
            table.update_cell(section.id, "name", section.name)
            table.update_cell(section.id, "pipe", section.watering_type)
            table.update_cell(section.id, "elapsed", section.formatted_elapsed)
            table.update_cell(section.id, "status", self._status(section))
        except CellDoesNotExist:
            self._load_table()

    def _on_sections_changed(self, change: SectionListChange) -> None:
        if change.kind == ChangeKind.REPLACE and change.section is not None:
            self._refresh_row(change.section)
        else:
            self._load_table()

    def _selected_section_id(self) -> Optional[str]:
        """Get the section id under the table cursor."""
        table = self.query_one("#timers_table", DataTable)
        rows = list(table.rows.keys())
        if table.cursor_row is not None and table.cursor_row < len(rows):
            return rows[table.cursor_row].value
        self.notify("No section selected", severity="warning")
        return None

    def _refresh_status(self, section_id: str) -> None:
        if self not in self.app.screen_stack:
            # Closed while the command ran
            return
        section = self.state.sections.get(section_id)
        if section is not None:
            self._refresh_row(section)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        button_id = event.button.id

        if button_id == "btn_start":
            self.action_start_timer()
        elif button_id == "btn_stop":
            self.action_stop_timer()
        elif button_id == "btn_pause":
            self.action_pause_timer()
        elif button_id == "btn_reset":
            self.action_reset_timer()
        elif button_id == "btn_back":
            self.action_back()

    def action_start_timer(self) -> None:
        section_id = self._selected_section_id()
        if section_id is None:
            return
        logger.info(f"Action: start_timer {section_id}")
        if self.timers.start(section_id):
            self._refresh_status(section_id)

    def action_stop_timer(self) -> None:
        section_id = self._selected_section_id()
        if section_id is not None:
            logger.info(f"Action: stop_timer {section_id}")
            self.app.run_timer_command(self.timers.stop, section_id, on_done=self._refresh_status)

    def action_pause_timer(self) -> None:
        section_id = self._selected_section_id()
        if section_id is not None:
            logger.info(f"Action: pause_timer {section_id}")
            self.app.run_timer_command(self.timers.pause, section_id, on_done=self._refresh_status)

    def action_reset_timer(self) -> None:
        section_id = self._selected_section_id()
        if section_id is not None:
            logger.info(f"Action: reset_timer {section_id}")
            self.app.run_timer_command(self.timers.reset, section_id, on_done=self._refresh_status)

    def action_back(self) -> None:
        """Go back to the sections screen."""
        logger.info("Action: back (from manual control)")
        self.app.navigate_back()
