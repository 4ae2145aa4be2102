"""Main TUI application for Irrigation Manager.

Textual-based application for managing irrigation sections and running
their manual timers against a realtime database.
"""

from typing import Awaitable, Callable, Optional

from textual import work
from textual.app import App

from irrigation_manager.app.config import AppConfig
from irrigation_manager.app.db.memory_store import MemorySectionStore
from irrigation_manager.app.db.store_client import RealtimeStoreClient, SectionStore
from irrigation_manager.app.errors import IrrigationError, describe_error
from irrigation_manager.app.interaction import TextualInteraction
from irrigation_manager.app.logging_config import get_logger
from irrigation_manager.app.services.sections import SectionDraft, SectionListManager
from irrigation_manager.app.services.timers import IntervalTrigger, TimerController, TriggerFactory
from irrigation_manager.app.state import AppScreen, AppState

logger = get_logger(__name__)


def create_store(config: AppConfig) -> SectionStore:
    """Build the section store selected in the configuration.

    Args:
        config: Application configuration

    Returns:
        Store instance

    Raises:
        ValueError: If the realtime database URL is missing
    """
    if config.store_backend == "memory":
        return MemorySectionStore()
    if not config.database_url:
        raise ValueError("database_url is not configured (see 'irrigation-app config --show')")
    return RealtimeStoreClient(
        config.database_url,
        auth_token=config.auth_token,
        timeout=config.timeout_seconds,
    )


class IrrigationApp(App):
    """Irrigation Manager user application.

    Owns the shared state, the section list manager and the timer
    controller; screens receive them on construction.
    """

    TITLE = "Irrigation Manager"
    SUB_TITLE = "Sections"

    CSS = """
    #title {
        padding: 1 1 0 1;
    }
    #subtitle {
        padding: 0 1;
        color: $text-muted;
    }
    DataTable {
        height: 1fr;
        margin: 1 1;
    }
    #form_fields, #pipes, #days, #buttons {
        height: auto;
        margin: 0 1;
    }
    #form_fields Input {
        width: 1fr;
    }
    .day {
        min-width: 6;
    }
    .dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        border: thick $primary;
        background: $surface;
    }
    ConfirmDialog, PromptDialog {
        align: center middle;
    }
    .dialog_buttons {
        height: auto;
        margin-top: 1;
    }
    """

    def __init__(
        self,
        config: AppConfig,
        store: Optional[SectionStore] = None,
        trigger_factory: TriggerFactory = IntervalTrigger,
        *args,
        **kwargs,
    ):
        """Initialize the application.

        Args:
            config: Application configuration
            store: Section store (built from the configuration when omitted)
            trigger_factory: Factory for the manual timers' periodic triggers
        """
        super().__init__(*args, **kwargs)

        self.config = config
        self.store = store if store is not None else create_store(config)

        self.state = AppState(user_id=config.user_id)
        self.draft = SectionDraft()
        self.interaction = TextualInteraction(self)

        self.manager = SectionListManager(self.store, self.state.sections, self.interaction)
        self.timers = TimerController(
            self.store,
            self.state.sections,
            self.interaction,
            user_id=config.user_id,
            interval=config.tick_interval_seconds,
            trigger_factory=trigger_factory,
            on_error=self.report_error,
        )

    def on_mount(self) -> None:
        """Handle app mount event."""
        logger.info("App mounted, pushing initial screen: SECTIONS")
        self.push_screen(self._create_screen(AppScreen.SECTIONS))
        self.load_sections()

    @work(exclusive=True, group="load")
    async def load_sections(self) -> None:
        """Load the user's sections into the shared list."""
        if not self.state.user_id:
            self.notify("No user configured; set user_id in the config file", severity="warning")
            return

        self.state.set_loading(True)
        try:
            await self.manager.load(self.state.user_id)
        except Exception as e:
            self.report_error(e)
        finally:
            self.state.set_loading(False)

    @work(group="timers")
    async def run_timer_command(
        self,
        command: Callable[[str], Awaitable[bool]],
        section_id: str,
        on_done: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Run a timer command in an app-level worker.

        The worker belongs to the app, so leaving the screen that issued the
        command does not cancel a store write halfway.

        Args:
            command: TimerController coroutine method (stop, pause or reset)
            section_id: Section the command applies to
            on_done: Called with the section id once the command finished
        """
        try:
            await command(section_id)
        except Exception as e:
            self.report_error(e)
        if on_done is not None:
            on_done(section_id)

    def report_error(self, error: BaseException) -> None:
        """Log a failed operation and show it to the user.

        Every service failure ends up here; nothing is re-raised.
        """
        message, severity = describe_error(error)
        if isinstance(error, IrrigationError):
            logger.warning(f"{type(error).__name__}: {error}")
        else:
            logger.error(f"Unexpected error: {error}", exc_info=error)
        self.state.set_error(message)
        self.notify(message, severity=severity)

    def _create_screen(self, screen: AppScreen):
        """Create a fresh screen instance.

        Args:
            screen: Screen enum value

        Returns:
            New screen instance
        """
        logger.debug(f"Creating fresh screen instance: {screen.name}")
        if screen == AppScreen.SECTIONS:
            from irrigation_manager.app.screens.sections import SectionsScreen
            return SectionsScreen(self.state, self.manager, self.draft)
        elif screen == AppScreen.MANUAL_CONTROL:
            from irrigation_manager.app.screens.manual_control import ManualControlScreen
            return ManualControlScreen(self.state, self.timers)

    def navigate_to(self, screen: AppScreen) -> None:
        """Navigate to a screen.

        Args:
            screen: Screen to navigate to
        """
        logger.info(f"Navigate to: {screen.name} (from {self.state.current_screen.name})")
        self.state.navigate_to(screen)
        self.push_screen(self._create_screen(screen))

    def navigate_back(self) -> None:
        """Navigate back to the previous screen."""
        if self.state.navigate_back():
            self.pop_screen()
        else:
            logger.warning("Cannot navigate back - no previous screen")

    async def action_quit(self) -> None:
        """Quit the application with cleanup."""
        self.timers.shutdown()
        await self.store.close()
        self.exit()
