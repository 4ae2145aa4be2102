"""User interaction needed by the section services.

Services ask for confirmation, text input and show notices through the
UserInteraction protocol, so they can run without a terminal in tests.
"""

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from textual.app import App


class UserInteraction(Protocol):
    """Dialogs the services rely on."""

    async def confirm(self, title: str, message: str) -> bool: ...

    async def prompt_text(self, title: str, message: str, initial_value: str = "") -> Optional[str]: ...

    def notify(self, title: str, message: str) -> None: ...


class TextualInteraction:
    """UserInteraction backed by Textual modal screens.

    confirm() and prompt_text() wait for the dialog to be dismissed, so
    they must be awaited from inside a worker.
    """

    def __init__(self, app: "App"):
        self.app = app

    async def confirm(self, title: str, message: str) -> bool:
        from irrigation_manager.app.screens.dialogs import ConfirmDialog

        return bool(await self.app.push_screen_wait(ConfirmDialog(title, message)))

    async def prompt_text(self, title: str, message: str, initial_value: str = "") -> Optional[str]:
        from irrigation_manager.app.screens.dialogs import PromptDialog

        return await self.app.push_screen_wait(PromptDialog(title, message, initial_value))

    def notify(self, title: str, message: str) -> None:
        self.app.notify(message, title=title)
