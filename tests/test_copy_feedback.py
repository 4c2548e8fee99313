import asyncio
import unittest

from prompt_browser.clipboard import ClipboardWriteFailure
from prompt_browser.state import (
    COPY_FEEDBACK_DELAY,
    CopyFeedback,
    FeedbackState,
    asyncio_scheduler,
)


class _FakeClipboard:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.writes: list[str] = []

    async def write_text(self, text: str) -> None:
        if self.fail:
            raise ClipboardWriteFailure("clipboard unavailable")
        self.writes.append(text)


class _ManualTimer:
    def __init__(self, deadline: float, callback):
        self.deadline = deadline
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class _ManualClock:
    """Scheduler whose time only moves when the test advances it."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[_ManualTimer] = []

    def schedule(self, delay: float, callback) -> _ManualTimer:
        timer = _ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (t for t in self.timers if not t.stopped and t.deadline <= self.now),
            key=lambda t: t.deadline,
        )
        for timer in due:
            self.timers.remove(timer)
            timer.callback()

    @property
    def active(self) -> list[_ManualTimer]:
        return [t for t in self.timers if not t.stopped]


class TestCopyFeedback(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = _ManualClock()
        self.clipboard = _FakeClipboard()
        self.changes: list[str] = []
        self.feedback = CopyFeedback(
            self.clipboard,
            scheduler=self.clock.schedule,
            on_change=self.changes.append,
        )

    async def test_default_delay_is_two_seconds(self) -> None:
        self.assertEqual(COPY_FEEDBACK_DELAY, 2.0)
        self.assertEqual(self.feedback.delay, 2.0)

    async def test_successful_copy_marks_key_until_delay_elapses(self) -> None:
        ok = await self.feedback.trigger_copy("hello", "p1")

        self.assertTrue(ok)
        self.assertEqual(self.clipboard.writes, ["hello"])
        self.assertIn("p1", self.feedback.pending_keys)
        self.assertIs(self.feedback.state("p1"), FeedbackState.PENDING)

        self.clock.advance(1.5)
        self.assertTrue(self.feedback.is_pending("p1"))

        self.clock.advance(0.5)
        self.assertNotIn("p1", self.feedback.pending_keys)
        self.assertIs(self.feedback.state("p1"), FeedbackState.IDLE)
        self.assertEqual(self.clock.active, [])
        self.assertEqual(self.changes, ["p1", "p1"])

    async def test_retrigger_restarts_window(self) -> None:
        await self.feedback.trigger_copy("hello", "p1")
        self.clock.advance(1.5)
        await self.feedback.trigger_copy("hello", "p1")

        self.assertEqual(len(self.clock.active), 1)

        # The first timer would have fired here.
        self.clock.advance(0.5)
        self.assertTrue(self.feedback.is_pending("p1"))

        self.clock.advance(1.0)
        self.assertTrue(self.feedback.is_pending("p1"))

        self.clock.advance(0.5)
        self.assertFalse(self.feedback.is_pending("p1"))

    async def test_stale_timer_does_not_clear_retriggered_key(self) -> None:
        await self.feedback.trigger_copy("hello", "p1")
        stale = self.clock.timers[0]
        await self.feedback.trigger_copy("hello", "p1")

        self.assertTrue(stale.stopped)
        stale.callback()
        self.assertTrue(self.feedback.is_pending("p1"))

    async def test_card_and_detail_keys_are_independent(self) -> None:
        await self.feedback.trigger_copy("hello", "p1")
        self.clock.advance(1.0)
        await self.feedback.trigger_copy("hello", "modal-p1")

        self.assertEqual(self.feedback.pending_keys, frozenset({"p1", "modal-p1"}))

        self.clock.advance(1.0)
        self.assertEqual(self.feedback.pending_keys, frozenset({"modal-p1"}))

        self.clock.advance(1.0)
        self.assertEqual(self.feedback.pending_keys, frozenset())

    async def test_failed_copy_leaves_state_untouched(self) -> None:
        await self.feedback.trigger_copy("hello", "p2")
        self.clipboard.fail = True

        with self.assertLogs(level="ERROR") as logs:
            ok = await self.feedback.trigger_copy("hello", "p1")

        self.assertFalse(ok)
        self.assertIn("failed to copy to clipboard", logs.output[0])
        self.assertEqual(self.feedback.pending_keys, frozenset({"p2"}))
        self.assertEqual(len(self.clock.active), 1)
        self.assertEqual(self.changes, ["p2"])

    async def test_failed_retrigger_keeps_existing_timer(self) -> None:
        await self.feedback.trigger_copy("hello", "p1")
        self.clock.advance(1.0)
        self.clipboard.fail = True

        with self.assertLogs(level="ERROR"):
            await self.feedback.trigger_copy("hello", "p1")

        self.clock.advance(1.0)
        self.assertFalse(self.feedback.is_pending("p1"))

    async def test_cancel_all_stops_timers(self) -> None:
        await self.feedback.trigger_copy("a", "p1")
        await self.feedback.trigger_copy("b", "p2")

        self.feedback.cancel_all()

        self.assertEqual(self.feedback.pending_keys, frozenset())
        self.assertEqual(self.clock.active, [])


class TestAsyncioScheduler(unittest.IsolatedAsyncioTestCase):
    async def test_key_expires_on_event_loop(self) -> None:
        feedback = CopyFeedback(_FakeClipboard(), scheduler=asyncio_scheduler, delay=0.05)

        await feedback.trigger_copy("hello", "p1")
        self.assertTrue(feedback.is_pending("p1"))

        await asyncio.sleep(0.1)
        self.assertFalse(feedback.is_pending("p1"))

    async def test_stopped_timer_never_fires(self) -> None:
        fired = []
        timer = asyncio_scheduler(0.01, lambda: fired.append(True))
        timer.stop()

        await asyncio.sleep(0.05)
        self.assertEqual(fired, [])
