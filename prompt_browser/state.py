"""Browser state: heading filter, detail selection and copy feedback."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Callable, Iterable, Optional, Protocol

from .clipboard import ClipboardWriteFailure
from .dataset import PromptRecord

# Seconds a "copied" confirmation stays visible after the last copy.
COPY_FEEDBACK_DELAY = 2.0

DEFAULT_TRUNCATE_LENGTH = 120
ELLIPSIS = "..."

DETAIL_KEY_PREFIX = "modal-"


def filter_records(records: Iterable[PromptRecord], query: str) -> list[PromptRecord]:
    """Records whose heading contains `query`, ignoring case, in original order."""
    needle = query.casefold()
    if not needle:
        return list(records)
    return [record for record in records if needle in record.heading.casefold()]


def truncate(content: str, max_length: int = DEFAULT_TRUNCATE_LENGTH) -> str:
    """Shorten `content` to `max_length` code points plus an ellipsis."""
    max_length = max(max_length, 0)
    if len(content) <= max_length:
        return content
    return content[:max_length] + ELLIPSIS


def format_result_count(count: int) -> str:
    return f"{count} prompt{'' if count == 1 else 's'} found"


def card_key(record: PromptRecord) -> str:
    return record.id


def detail_key(record: PromptRecord) -> str:
    return f"{DETAIL_KEY_PREFIX}{record.id}"


class PromptFilter:
    """Current search query and the records it leaves visible."""

    def __init__(self, records: Iterable[PromptRecord]):
        self._records = tuple(records)
        self._query = ""
        self._visible: Optional[tuple[str, list[PromptRecord]]] = None

    @property
    def query(self) -> str:
        return self._query

    @query.setter
    def query(self, value: str) -> None:
        self._query = value or ""

    @property
    def visible_records(self) -> list[PromptRecord]:
        if self._visible is None or self._visible[0] != self._query:
            self._visible = (self._query, filter_records(self._records, self._query))
        return list(self._visible[1])

    @property
    def count(self) -> int:
        return len(self.visible_records)

    @property
    def is_empty(self) -> bool:
        return self.count == 0


class Selection:
    """The record shown in the detail overlay, if any."""

    def __init__(self) -> None:
        self.selected: Optional[PromptRecord] = None

    def select(self, record: PromptRecord) -> None:
        self.selected = record

    def clear(self) -> None:
        self.selected = None

    def is_open(self) -> bool:
        return self.selected is not None


class FeedbackState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"


class TimerHandle(Protocol):
    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class _CallLaterTimer:
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def stop(self) -> None:
        self._handle.cancel()


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Schedule `callback` on the running event loop (for use outside Textual)."""
    loop = asyncio.get_running_loop()
    return _CallLaterTimer(loop.call_later(delay, callback))


class CopyFeedback:
    """Tracks which feedback keys currently show a "copied" confirmation.

    Each key is either IDLE or PENDING. A successful copy moves the key to
    PENDING and (re)starts its expiry timer; when the timer fires the key goes
    back to IDLE. Every pending key owns exactly one timer, and a timer only
    ever expires the key it was scheduled for while it is still that key's
    current timer.
    """

    def __init__(
        self,
        clipboard,
        scheduler: Scheduler = asyncio_scheduler,
        delay: float = COPY_FEEDBACK_DELAY,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.clipboard = clipboard
        self.delay = delay
        self.on_change = on_change
        self._scheduler = scheduler
        self._states: dict[str, FeedbackState] = {}
        self._timers: dict[str, TimerHandle] = {}

    @property
    def pending_keys(self) -> frozenset[str]:
        return frozenset(
            key for key, state in self._states.items() if state is FeedbackState.PENDING
        )

    def state(self, key: str) -> FeedbackState:
        return self._states.get(key, FeedbackState.IDLE)

    def is_pending(self, key: str) -> bool:
        return self.state(key) is FeedbackState.PENDING

    async def trigger_copy(self, content: str, key: str) -> bool:
        """Copy `content` and flag `key` as copied.

        Returns False, leaving all keys untouched, if the clipboard rejects
        the write.
        """
        try:
            await self.clipboard.write_text(content)
        except ClipboardWriteFailure:
            logging.exception("failed to copy to clipboard (key=%s)", key)
            return False

        self._cancel_timer(key)
        self._states[key] = FeedbackState.PENDING
        self._schedule_expiry(key)
        self._notify(key)
        return True

    def cancel_all(self) -> None:
        """Stop every outstanding timer and reset all keys to IDLE."""
        keys = list(self._states)
        for key in list(self._timers):
            self._cancel_timer(key)
        self._states.clear()
        for key in keys:
            self._notify(key)

    def _schedule_expiry(self, key: str) -> None:
        handle: Optional[TimerHandle] = None

        def expire() -> None:
            if self._timers.get(key) is not handle:
                return
            del self._timers[key]
            self._states.pop(key, None)
            self._notify(key)

        handle = self._scheduler(self.delay, expire)
        self._timers[key] = handle

    def _cancel_timer(self, key: str) -> None:
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.stop()

    def _notify(self, key: str) -> None:
        if self.on_change is not None:
            self.on_change(key)
