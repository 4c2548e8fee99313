"""System clipboard capability."""

import asyncio

import pyperclip


class ClipboardWriteFailure(Exception):
    """The system clipboard rejected a write."""


class Clipboard:
    """Async wrapper around pyperclip.

    pyperclip blocks while it shells out to xclip/pbcopy, so writes run in a
    worker thread and are awaited without a timeout.
    """

    def copy(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardWriteFailure(str(e)) from e

    async def write_text(self, text: str) -> None:
        await asyncio.to_thread(self.copy, text)
