"""Sections screen.

Lists the user's irrigation sections and holds the form used to compose a
new one, with options to edit or delete the selected section.
"""

from typing import Optional

from textual import work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label
from textual.widgets.data_table import CellDoesNotExist

from irrigation_manager.app.db.models import WEEKDAYS, Section, WateringType
from irrigation_manager.app.logging_config import get_logger
from irrigation_manager.app.services.sections import SectionDraft, SectionListManager
from irrigation_manager.app.state import AppScreen, AppState, ChangeKind, SectionListChange

logger = get_logger(__name__)

PIPES = list(WateringType)

COLUMNS = [
    ("Name", "name"),
    ("Start", "start_time"),
    ("Duration", "duration"),
    ("Days", "days"),
    ("Pipe", "pipe"),
]


def _row_values(section: Section) -> list[str]:
    return [
        section.name,
        section.start_time,
        f"{section.duration_minutes} min",
        section.selected_days or "-",
        section.watering_type,
    ]


class SectionsScreen(Screen):
    """Screen for listing, composing, editing and deleting sections."""

    BINDINGS = [
        ("ctrl+s", "add_section", "Add"),
        ("e", "edit_section", "Edit"),
        ("d", "delete_section", "Delete"),
        ("m", "manual_control", "Manual Control"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, state: AppState, manager: SectionListManager, draft: SectionDraft):
        """Initialize the screen.

        Args:
            state: Application state
            manager: Section list manager
            draft: Composition buffer for a new section
        """
        super().__init__()
        self.state = state
        self.manager = manager
        self.draft = draft

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        yield Header()

        with Vertical():
            yield Label("[bold]Irrigation Sections[/bold]", id="title")
            yield Label("Press 'e' to edit, 'd' to delete, 'm' for manual control", id="subtitle")

            table = DataTable(id="sections_table", cursor_type="row")
            for label, key in COLUMNS:
                table.add_column(label, key=key)
            yield table

            yield Label("[bold]New Section[/bold]", id="form_title")
            with Horizontal(id="form_fields"):
                yield Input(placeholder="Section name", id="input_name")
                yield Input(placeholder="Start (HH:mm)", id="input_start")
                yield Input(placeholder="Duration (min)", id="input_duration")

            with Horizontal(id="pipes"):
                for index, pipe in enumerate(PIPES):
                    yield Button(pipe.value, id=f"pipe_{index}", classes="pipe")

            with Horizontal(id="days"):
                for index, day in enumerate(WEEKDAYS):
                    yield Button(day, id=f"day_{index}", classes="day")

            with Horizontal(id="buttons"):
                yield Button("Add Section", id="btn_add", variant="primary")
                yield Button("Edit", id="btn_edit")
                yield Button("Delete", id="btn_delete")
                yield Button("Manual Control", id="btn_manual")
                yield Button("Quit", id="btn_quit")

        yield Footer()

    def on_mount(self) -> None:
        """Handle mount event."""
        logger.info("SectionsScreen mounted")
        self.state.sections.add_listener(self._on_sections_changed)
        self._load_table()
        self._sync_choices()

    def on_unmount(self) -> None:
        self.state.sections.remove_listener(self._on_sections_changed)

    def _load_table(self) -> None:
        """Rebuild the table from the section list."""
        table = self.query_one("#sections_table", DataTable)
        table.clear()
        for section in self.state.sections:
            table.add_row(*_row_values(section), key=section.id)

    def _on_sections_changed(self, change: SectionListChange) -> None:
        if change.kind == ChangeKind.REPLACE and change.section is not None:
            table = self.query_one("#sections_table", DataTable)
            try:
                for (_, column_key), value in zip(COLUMNS, _row_values(change.section)):
                    table.update_cell(change.section.id, column_key, value)
                return
            except CellDoesNotExist:
                logger.debug(f"Row {change.section.id} missing, rebuilding table")
        self._load_table()

    def _sync_choices(self) -> None:
        """Show the draft's pipe and days on their buttons."""
        for index, pipe in enumerate(PIPES):
            button = self.query_one(f"#pipe_{index}", Button)
            button.variant = "success" if self.draft.pipe == pipe.value else "default"
        for index, day in enumerate(WEEKDAYS):
            button = self.query_one(f"#day_{index}", Button)
            button.variant = "success" if self.draft.days.is_selected(day) else "default"

    def _read_form(self) -> None:
        """Copy the text fields into the draft."""
        self.draft.name = self.query_one("#input_name", Input).value
        self.draft.start_time = self.query_one("#input_start", Input).value
        self.draft.duration = self.query_one("#input_duration", Input).value

    def _clear_form(self) -> None:
        """Show the (cleared) draft in the form."""
        self.query_one("#input_name", Input).value = self.draft.name
        self.query_one("#input_start", Input).value = self.draft.start_time
        self.query_one("#input_duration", Input).value = self.draft.duration
        self._sync_choices()

    def _selected_section_id(self) -> Optional[str]:
        """Get the section id under the table cursor."""
        table = self.query_one("#sections_table", DataTable)
        rows = list(table.rows.keys())
        if table.cursor_row is not None and table.cursor_row < len(rows):
            return rows[table.cursor_row].value
        return None

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        button_id = event.button.id or ""

        if button_id.startswith("day_"):
            day = WEEKDAYS[int(button_id.removeprefix("day_"))]
            self.draft.days.toggle(day)
            self._sync_choices()
        elif button_id.startswith("pipe_"):
            self.draft.pipe = PIPES[int(button_id.removeprefix("pipe_"))].value
            self._sync_choices()
        elif button_id == "btn_add":
            self.action_add_section()
        elif button_id == "btn_edit":
            self.action_edit_section()
        elif button_id == "btn_delete":
            self.action_delete_section()
        elif button_id == "btn_manual":
            self.action_manual_control()
        elif button_id == "btn_quit":
            self.app.call_later(self.app.action_quit)

    def action_add_section(self) -> None:
        """Create a section from the form."""
        logger.info("Action: add_section")
        self._read_form()
        self._add_section()

    @work(group="sections")
    async def _add_section(self) -> None:
        try:
            section = await self.manager.add(self.state.user_id, self.draft)
        except Exception as e:
            self.app.report_error(e)
            return
        self._clear_form()
        self.notify(f"Added section '{section.name}'")

    def action_edit_section(self) -> None:
        """Edit the selected section."""
        section_id = self._selected_section_id()
        if section_id is None:
            self.notify("No section selected", severity="warning")
            return
        logger.info(f"Action: edit_section {section_id}")
        self._edit_section(section_id)

    @work(group="sections")
    async def _edit_section(self, section_id: str) -> None:
        try:
            if await self.manager.edit(self.state.user_id, section_id):
                self.notify("Section updated")
        except Exception as e:
            self.app.report_error(e)

    def action_delete_section(self) -> None:
        """Delete the selected section."""
        section_id = self._selected_section_id()
        if section_id is None:
            self.notify("No section selected", severity="warning")
            return
        logger.info(f"Action: delete_section {section_id}")
        self._delete_section(section_id)

    @work(group="sections")
    async def _delete_section(self, section_id: str) -> None:
        try:
            if await self.manager.delete(self.state.user_id, section_id):
                self.notify("Section deleted")
        except Exception as e:
            self.app.report_error(e)

    def action_manual_control(self) -> None:
        self.app.navigate_to(AppScreen.MANUAL_CONTROL)

    async def action_quit(self) -> None:
        await self.app.action_quit()
