"""Manual per-section timers.

Each running section owns one periodic trigger. Every tick adds a second to
the section's elapsed time, publishes the updated Section into the shared
list and writes the new value to the store.

Timers are tracked in an explicit mapping from section id to trigger; a
section is Running exactly when it has an entry there.
"""

import asyncio
from dataclasses import replace
from typing import Awaitable, Callable, Optional, Protocol

from irrigation_manager.app.db.store_client import SectionStore
from irrigation_manager.app.errors import StoreError
from irrigation_manager.app.interaction import UserInteraction
from irrigation_manager.app.logging_config import get_logger
from irrigation_manager.app.state import SectionList

logger = get_logger(__name__)

TickCallback = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[BaseException], None]


class Trigger(Protocol):
    """Handle of a running periodic trigger."""

    def stop(self) -> None: ...


TriggerFactory = Callable[[float, TickCallback], Trigger]


class IntervalTrigger:
    """Calls an async callback every ``interval`` seconds on the running loop.

    Ticks are scheduled against fixed deadlines and each one runs as its own
    task, so a slow callback never pushes the next tick back. Stopping ends
    the schedule; ticks already started run to completion.
    """

    def __init__(self, interval: float, callback: TickCallback):
        self.interval = interval
        self.callback = callback
        self._loop = asyncio.get_running_loop()
        self._ticks: set[asyncio.Task] = set()
        self._task: asyncio.Task = self._loop.create_task(self._run())

    async def _run(self) -> None:
        deadline = self._loop.time()
        while True:
            deadline += self.interval
            await asyncio.sleep(max(0.0, deadline - self._loop.time()))
            tick = self._loop.create_task(self.callback())
            self._ticks.add(tick)
            tick.add_done_callback(self._tick_done)

    def _tick_done(self, tick: asyncio.Task) -> None:
        self._ticks.discard(tick)
        if tick.cancelled():
            return
        error = tick.exception()
        if error is not None:
            logger.error("Timer tick failed", exc_info=error)

    @property
    def running(self) -> bool:
        return not self._task.done()

    @property
    def pending_ticks(self) -> int:
        """Ticks started but not yet finished."""
        return len(self._ticks)

    def stop(self) -> None:
        self._task.cancel()


def _log_error(error: BaseException) -> None:
    logger.error(f"Timer error: {error}")


class TimerController:
    """Starts, pauses and resets the manual timers of one user's sections.

    Attributes:
        store: Section store elapsed times are written to
        sections: Shared observable section list
        user_id: Owner of the sections
        interval: Seconds between ticks
    """

    def __init__(
        self,
        store: SectionStore,
        sections: SectionList,
        interaction: UserInteraction,
        user_id: str,
        interval: float = 1.0,
        trigger_factory: TriggerFactory = IntervalTrigger,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.store = store
        self.sections = sections
        self.interaction = interaction
        self.user_id = user_id
        self.interval = interval
        self._trigger_factory = trigger_factory
        self._on_error = on_error or _log_error
        self._triggers: dict[str, Trigger] = {}
        # Newest unwritten elapsed time and the write lock, per section
        self._unwritten: dict[str, int] = {}
        self._write_locks: dict[str, asyncio.Lock] = {}

    def is_running(self, section_id: str) -> bool:
        return section_id in self._triggers

    @property
    def running_ids(self) -> list[str]:
        return list(self._triggers)

    def start(self, section_id: str) -> bool:
        """Start counting for a section.

        Starting a section that is already running only shows a notice.

        Returns:
            True if a new timer was started
        """
        if section_id in self._triggers:
            self.interaction.notify("Info", "The timer for this section is already running!")
            return False

        if self.sections.get(section_id) is None:
            logger.debug(f"start ignored: unknown section {section_id}")
            return False

        self._triggers[section_id] = self._trigger_factory(
            self.interval, lambda: self._tick(section_id)
        )
        logger.info(f"Timer started for section {section_id}")
        return True

    def _halt(self, section_id: str) -> bool:
        trigger = self._triggers.pop(section_id, None)
        if trigger is None:
            return False
        trigger.stop()
        return True

    async def _tick(self, section_id: str) -> None:
        if section_id not in self._triggers:
            # Paused between scheduling and delivery
            return

        updated = self.sections.update(
            section_id, lambda section: replace(section, elapsed_seconds=section.elapsed_seconds + 1)
        )
        if updated is None:
            logger.warning(f"Section {section_id} no longer listed, stopping its timer")
            self._halt(section_id)
            return

        await self._persist(section_id, updated.elapsed_seconds)

    async def _persist(self, section_id: str, elapsed_seconds: int) -> None:
        """Write a section's elapsed time, newest value last.

        Writes for one section never overlap. Callers queued behind a slow
        write collapse into one write of the newest value, and each caller
        returns once its value (or a newer one) has been written.
        """
        self._unwritten[section_id] = elapsed_seconds
        lock = self._write_locks.setdefault(section_id, asyncio.Lock())
        async with lock:
            if section_id not in self._unwritten:
                return
            value = self._unwritten.pop(section_id)
            if self.sections.get(section_id) is None:
                logger.debug(f"Skipping elapsed time write for removed section {section_id}")
                return
            await self._write(section_id, value)

    async def _write(self, section_id: str, elapsed_seconds: int) -> None:
        try:
            await self.store.update_elapsed_time(self.user_id, section_id, elapsed_seconds)
        except StoreError as e:
            logger.warning(f"Could not store elapsed time for {section_id}: {e}")
            self._on_error(e)

    async def pause(self, section_id: str) -> bool:
        """Stop a running timer and store the time reached so far.

        Returns:
            True if a running timer was paused
        """
        if not self._halt(section_id):
            logger.debug(f"pause ignored: no timer for section {section_id}")
            return False

        section = self.sections.get(section_id)
        logger.info(f"Timer paused for section {section_id}")
        if section is not None:
            await self._persist(section_id, section.elapsed_seconds)
        return True

    async def reset(self, section_id: str) -> bool:
        """Zero a section's elapsed time, stopping its timer if running.

        Returns:
            True if the section exists and was reset
        """
        self._halt(section_id)
        updated = self.sections.update(section_id, lambda section: replace(section, elapsed_seconds=0))
        if updated is None:
            logger.debug(f"reset ignored: unknown section {section_id}")
            return False

        logger.info(f"Elapsed time reset for section {section_id}")
        await self._persist(section_id, 0)
        return True

    async def stop(self, section_id: str) -> bool:
        """Pause a running timer, or reset the counter of an idle one.

        Kept for callers of the single stop button: the meaning depends
        only on whether a timer is tracked for the section.
        """
        if section_id in self._triggers:
            return await self.pause(section_id)
        return await self.reset(section_id)

    def shutdown(self) -> None:
        """Halt every timer without writing to the store."""
        for section_id in list(self._triggers):
            self._halt(section_id)
        logger.info("All timers halted")
