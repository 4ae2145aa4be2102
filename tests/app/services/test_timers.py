"""Tests for TimerController and IntervalTrigger.

Most controller tests drive ticks by hand through ManualTriggerFactory.
TestSlowStore and TestIntervalTrigger run on real time with short intervals.
"""

import asyncio

import pytest

from irrigation_manager.app.db.memory_store import MemorySectionStore
from irrigation_manager.app.services.timers import IntervalTrigger, TimerController


class SlowStore(MemorySectionStore):
    """Memory store whose elapsed-time writes take `delay` seconds."""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay
        self.elapsed_writes: list[int] = []

    async def update_elapsed_time(self, user_id, section_id, elapsed_seconds):
        await asyncio.sleep(self.delay)
        self.elapsed_writes.append(elapsed_seconds)
        await super().update_elapsed_time(user_id, section_id, elapsed_seconds)


@pytest.fixture
def controller(store, sections, interaction, trigger_factory, user_id):
    return TimerController(
        store,
        sections,
        interaction,
        user_id=user_id,
        interval=1.0,
        trigger_factory=trigger_factory,
    )


@pytest.fixture
def seeded(store, sections, user_id, section_factory):
    """Two sections listed and stored."""
    first = section_factory("s1", elapsed=0)
    second = section_factory("s2", name="Back Yard", elapsed=100)
    for section in (first, second):
        store._user(user_id)[section.id] = section.to_record()
    sections.reset([first, second])
    return sections


def elapsed_writes(store, section_id):
    return [call[3] for call in store.calls if call[0] == "elapsed" and call[2] == section_id]


class TestStart:
    """Tests for TimerController.start."""

    def test_start_creates_one_trigger(self, controller, seeded, trigger_factory):
        assert controller.start("s1") is True

        assert controller.is_running("s1")
        assert controller.running_ids == ["s1"]
        assert len(trigger_factory.created) == 1
        assert trigger_factory.last.interval == 1.0

    def test_start_unknown_section_is_noop(self, controller, seeded, trigger_factory, interaction):
        assert controller.start("missing") is False

        assert trigger_factory.created == []
        assert interaction.notices == []

    def test_start_twice_notifies_once(self, controller, seeded, trigger_factory, interaction):
        controller.start("s1")

        assert controller.start("s1") is False

        assert len(trigger_factory.created) == 1
        assert len(interaction.notices) == 1
        assert "already running" in interaction.notices[0][1]


class TestTicks:
    """Tests for tick behavior."""

    @pytest.mark.asyncio
    async def test_n_ticks_add_n_seconds(self, controller, seeded, store, trigger_factory, user_id):
        controller.start("s2")
        for _ in range(5):
            await trigger_factory.last.fire()

        assert seeded.get("s2").elapsed_seconds == 105
        assert elapsed_writes(store, "s2") == [101, 102, 103, 104, 105]
        assert store.get_record(user_id, "s2")["ElapsedTime"] == 105

    @pytest.mark.asyncio
    async def test_tick_replaces_section_object(self, controller, seeded, trigger_factory):
        before = seeded.get("s1")
        controller.start("s1")

        await trigger_factory.last.fire()

        after = seeded.get("s1")
        assert after is not before
        assert before.elapsed_seconds == 0
        assert seeded.index_of("s1") == 0

    @pytest.mark.asyncio
    async def test_timers_are_independent(self, controller, seeded, trigger_factory):
        controller.start("s1")
        controller.start("s2")
        first, second = trigger_factory.created

        await first.fire()
        await first.fire()
        await second.fire()

        assert seeded.get("s1").elapsed_seconds == 2
        assert seeded.get("s2").elapsed_seconds == 101

    @pytest.mark.asyncio
    async def test_store_failure_keeps_timer_running(self, store, sections, interaction, trigger_factory, user_id, seeded):
        errors = []
        controller = TimerController(
            store, sections, interaction, user_id=user_id,
            trigger_factory=trigger_factory, on_error=errors.append,
        )
        controller.start("s1")
        store.fail = True

        await trigger_factory.last.fire()

        assert controller.is_running("s1")
        assert sections.get("s1").elapsed_seconds == 1
        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_tick_for_removed_section_stops_timer(self, controller, seeded, trigger_factory, store):
        controller.start("s1")
        seeded.remove("s1")

        await trigger_factory.last.fire()

        assert not controller.is_running("s1")
        assert trigger_factory.last.stopped
        assert elapsed_writes(store, "s1") == []

    @pytest.mark.asyncio
    async def test_late_tick_after_pause_is_ignored(self, controller, seeded, trigger_factory):
        controller.start("s1")
        trigger = trigger_factory.last
        await trigger.fire()
        await controller.pause("s1")

        await trigger.fire()

        assert seeded.get("s1").elapsed_seconds == 1


class TestStop:
    """Tests for stop, pause and reset."""

    @pytest.mark.asyncio
    async def test_stop_while_running_pauses_and_keeps_time(self, controller, seeded, store, trigger_factory):
        controller.start("s2")
        for _ in range(3):
            await trigger_factory.last.fire()

        assert await controller.stop("s2") is True

        assert not controller.is_running("s2")
        assert trigger_factory.last.stopped
        assert seeded.get("s2").elapsed_seconds == 103
        assert elapsed_writes(store, "s2")[-1] == 103

    @pytest.mark.asyncio
    async def test_stop_while_idle_resets_to_zero(self, controller, seeded, store, user_id):
        assert await controller.stop("s2") is True

        assert seeded.get("s2").elapsed_seconds == 0
        assert elapsed_writes(store, "s2") == [0]
        assert store.get_record(user_id, "s2")["ElapsedTime"] == 0

    @pytest.mark.asyncio
    async def test_stop_unknown_section_is_noop(self, controller, seeded, store):
        assert await controller.stop("missing") is False
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_start_ticks_restart_stop_scenario(self, controller, seeded, trigger_factory, interaction):
        """start, 3 ticks, start again, stop: 3 seconds, one notice, no timer."""
        controller.start("s1")
        for _ in range(3):
            await trigger_factory.last.fire()
        controller.start("s1")
        await controller.stop("s1")

        assert seeded.get("s1").elapsed_seconds == 3
        assert len(interaction.notices) == 1
        assert not controller.is_running("s1")

    @pytest.mark.asyncio
    async def test_pause_when_idle_is_noop(self, controller, seeded, store):
        assert await controller.pause("s2") is False

        assert seeded.get("s2").elapsed_seconds == 100
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_reset_while_running_halts_and_zeroes(self, controller, seeded, trigger_factory, store):
        controller.start("s2")
        await trigger_factory.last.fire()

        assert await controller.reset("s2") is True

        assert not controller.is_running("s2")
        assert seeded.get("s2").elapsed_seconds == 0
        assert elapsed_writes(store, "s2")[-1] == 0

    @pytest.mark.asyncio
    async def test_resume_after_pause_continues_counting(self, controller, seeded, trigger_factory):
        controller.start("s1")
        await trigger_factory.last.fire()
        await controller.pause("s1")

        controller.start("s1")
        await trigger_factory.last.fire()

        assert seeded.get("s1").elapsed_seconds == 2
        assert len(trigger_factory.created) == 2

    def test_shutdown_halts_all_without_writes(self, controller, seeded, trigger_factory, store):
        controller.start("s1")
        controller.start("s2")

        controller.shutdown()

        assert controller.running_ids == []
        assert all(trigger.stopped for trigger in trigger_factory.created)
        assert store.calls == []


class TestSlowStore:
    """Timers keep counting at their own pace when store writes are slow."""

    @pytest.mark.asyncio
    async def test_slow_writes_do_not_slow_ticks(self, sections, interaction, user_id, section_factory):
        store = SlowStore(delay=0.3)
        await store.upsert_section(user_id, section_factory("s1"))
        sections.reset([section_factory("s1")])
        controller = TimerController(store, sections, interaction, user_id=user_id, interval=0.05)

        controller.start("s1")
        await asyncio.sleep(1.0)
        await controller.pause("s1")

        elapsed = sections.get("s1").elapsed_seconds
        assert elapsed >= 12
        assert store.get_record(user_id, "s1")["ElapsedTime"] == elapsed
        # Queued writes collapse instead of piling up one per tick
        assert len(store.elapsed_writes) < elapsed

    @pytest.mark.asyncio
    async def test_reset_is_not_overwritten_by_slow_tick(self, sections, interaction, user_id, section_factory, trigger_factory):
        store = SlowStore(delay=0.1)
        await store.upsert_section(user_id, section_factory("s1", elapsed=40))
        sections.reset([section_factory("s1", elapsed=40)])
        controller = TimerController(
            store, sections, interaction, user_id=user_id, trigger_factory=trigger_factory
        )
        controller.start("s1")

        tick = asyncio.create_task(trigger_factory.last.fire())
        await asyncio.sleep(0.01)
        await controller.reset("s1")
        await tick

        assert sections.get("s1").elapsed_seconds == 0
        assert store.elapsed_writes == [41, 0]
        assert store.get_record(user_id, "s1")["ElapsedTime"] == 0

    @pytest.mark.asyncio
    async def test_write_for_deleted_section_is_skipped(self, sections, interaction, user_id, section_factory, trigger_factory):
        store = SlowStore(delay=0.1)
        await store.upsert_section(user_id, section_factory("s1"))
        sections.reset([section_factory("s1")])
        controller = TimerController(
            store, sections, interaction, user_id=user_id, trigger_factory=trigger_factory
        )
        controller.start("s1")
        trigger = trigger_factory.last

        first = asyncio.create_task(trigger.fire())
        await asyncio.sleep(0.01)
        second = asyncio.create_task(trigger.fire())
        await asyncio.sleep(0.01)
        await store.delete_section(user_id, "s1")
        sections.remove("s1")
        await asyncio.gather(first, second)

        assert store.elapsed_writes == [1]
        assert store.get_record(user_id, "s1") is None


class TestIntervalTrigger:
    """Tests for the asyncio-backed trigger."""

    @pytest.mark.asyncio
    async def test_fires_until_stopped(self):
        ticks = []

        async def callback():
            ticks.append(len(ticks))

        trigger = IntervalTrigger(0.01, callback)
        await asyncio.sleep(0.1)
        trigger.stop()
        await asyncio.sleep(0.03)
        count = len(ticks)
        await asyncio.sleep(0.05)

        assert count >= 2
        assert len(ticks) == count
        assert not trigger.running

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_end_trigger(self):
        calls = []

        async def callback():
            calls.append(1)
            raise RuntimeError("boom")

        trigger = IntervalTrigger(0.01, callback)
        await asyncio.sleep(0.08)

        assert len(calls) >= 2
        assert trigger.running
        trigger.stop()

    @pytest.mark.asyncio
    async def test_slow_callback_does_not_delay_schedule(self):
        started = []

        async def callback():
            started.append(asyncio.get_running_loop().time())
            await asyncio.sleep(0.2)

        trigger = IntervalTrigger(0.02, callback)
        await asyncio.sleep(0.21)
        trigger.stop()

        assert len(started) >= 7
        assert trigger.pending_ticks > 0

        await asyncio.sleep(0.25)
        assert trigger.pending_ticks == 0
