"""Textual TUI for Prompt Browser - searchable prompt cards."""

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.widgets import Header, Footer, Static, Input, Button, Label, Rule, Markdown
from textual.binding import Binding
from textual import on
from textual.screen import ModalScreen

import logging
from typing import Optional
from rich.markup import escape as escape_markup

from .clipboard import Clipboard
from .dataset import Dataset, PromptRecord
from .state import (
    CopyFeedback,
    PromptFilter,
    Selection,
    card_key,
    detail_key,
    format_result_count,
    truncate,
)


class HelpScreen(ModalScreen):
    """Simple help screen for keybinds and actions."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("q", "dismiss", "Close"),
    ]

    def compose(self) -> ComposeResult:
        help_md = """\
## Prompt Browser

- `/` Focus search
- `Esc` Clear search
- `Tab` Move between cards and buttons
- `See Details` Open the full prompt
- `Copy` Copy prompt content to the clipboard
- `c` Copy (in the detail view)
- `q` Quit
"""
        with Container(id="help-dialog"):
            yield Label("[b]Help[/]", id="help-title")
            yield Rule()
            yield Markdown(help_md)


class PromptDetailScreen(ModalScreen):
    """Detail overlay showing one prompt's full content."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("c", "copy", "Copy"),
    ]

    def __init__(self, record: PromptRecord, copied: bool = False):
        super().__init__()
        self.record = record
        self._copied = copied

    def compose(self) -> ComposeResult:
        with Container(id="detail-dialog"):
            yield Label(escape_markup(self.record.heading), id="detail-title")
            yield Rule()
            with VerticalScroll(id="detail-content"):
                yield Static(self.record.content, markup=False)
            with Horizontal(id="detail-actions"):
                yield Button(
                    self._copy_label(),
                    id="btn-copy",
                    variant="success" if self._copied else "primary",
                )
                yield Button("Close", id="btn-close", variant="default")

    def _copy_label(self) -> str:
        return "Prompt Copied!" if self._copied else "Copy Prompt"

    def set_copied(self, copied: bool) -> None:
        self._copied = copied
        button = self.query_one("#btn-copy", Button)
        button.label = self._copy_label()
        button.variant = "success" if copied else "primary"

    async def action_copy(self) -> None:
        await self.app.copy_prompt(self.record, detail_key(self.record))

    @on(Button.Pressed, "#btn-copy")
    async def on_copy(self) -> None:
        await self.action_copy()

    @on(Button.Pressed, "#btn-close")
    def on_close(self) -> None:
        self.dismiss()


class PromptCard(Vertical):
    """One prompt in the result list: heading, preview and actions."""

    DEFAULT_CSS = """
    PromptCard {
        height: auto;
        border: round $primary-darken-1;
        padding: 0 1;
        margin: 0 0 1 0;
    }

    PromptCard:focus-within {
        border: round $primary;
    }

    PromptCard .card-heading {
        text-style: bold;
        color: $primary-lighten-1;
    }

    PromptCard .card-preview {
        color: $text-muted;
        margin: 1 0;
    }

    PromptCard .card-actions {
        height: 3;
    }

    PromptCard .card-actions Button {
        margin: 0 1 0 0;
    }
    """

    def __init__(self, record: PromptRecord, copied: bool = False):
        super().__init__()
        self.record = record
        self._copied = copied

    def compose(self) -> ComposeResult:
        yield Label(escape_markup(self.record.heading), classes="card-heading")
        yield Static(truncate(self.record.content), classes="card-preview", markup=False)
        with Horizontal(classes="card-actions"):
            yield Button("See Details", classes="btn-details")
            yield Button(
                self._copy_label(),
                classes="btn-copy",
                variant="success" if self._copied else "primary",
            )

    def _copy_label(self) -> str:
        return "Copied!" if self._copied else "Copy"

    def set_copied(self, copied: bool) -> None:
        self._copied = copied
        button = self.query_one(".btn-copy", Button)
        button.label = self._copy_label()
        button.variant = "success" if copied else "primary"

    @on(Button.Pressed, ".btn-details")
    def on_details(self, event: Button.Pressed) -> None:
        event.stop()
        self.app.open_detail(self.record)

    @on(Button.Pressed, ".btn-copy")
    async def on_copy(self, event: Button.Pressed) -> None:
        event.stop()
        await self.app.copy_prompt(self.record, card_key(self.record))


class PromptBrowserApp(App):
    """Main TUI application for Prompt Browser."""

    TITLE = "Prompt Management System"
    SUB_TITLE = "Organize, search, and manage your AI prompts with ease"

    CSS = """
    Screen {
        background: $surface;
    }

    #search-container {
        height: auto;
        padding: 1;
        background: $surface-darken-1;
    }

    #search-input {
        width: 100%;
    }

    #result-count {
        height: 1;
        background: $primary-darken-3;
        color: $text-muted;
        padding: 0 1;
        text-style: italic;
        content-align: center middle;
    }

    #prompt-list {
        height: 1fr;
        padding: 1 2;
        scrollbar-gutter: stable;
    }

    #empty-state {
        height: auto;
        padding: 2;
        align: center middle;
    }

    #empty-title {
        text-style: bold;
        width: 100%;
        text-align: center;
    }

    #empty-hint {
        color: $text-muted;
        width: 100%;
        text-align: center;
    }

    /* Detail Dialog */
    #detail-dialog {
        width: 80%;
        height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #detail-title {
        text-style: bold;
        text-align: center;
        width: 100%;
        padding: 1;
        color: $primary-lighten-1;
    }

    #detail-content {
        height: 1fr;
        margin: 1 0;
    }

    #detail-actions {
        height: 3;
        align: center middle;
    }

    #detail-actions Button {
        margin: 0 1;
        min-width: 10;
    }

    /* Help Dialog */
    #help-dialog {
        width: 70%;
        height: 70%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("/", "focus_search", "Search"),
        Binding("?", "help", "Help"),
        Binding("escape", "clear_filter", "Clear"),
    ]

    def __init__(self, dataset: Dataset, clipboard=None):
        super().__init__()
        self.dataset = dataset
        self.prompt_filter = PromptFilter(dataset)
        self.selection = Selection()
        self.feedback = CopyFeedback(
            clipboard or Clipboard(),
            scheduler=self.set_timer,
            on_change=self._on_feedback_changed,
        )

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="search-container"):
            yield Input(placeholder="Search prompts by heading...", id="search-input")
        yield Static("", id="result-count")
        with VerticalScroll(id="prompt-list"):
            with Vertical(id="empty-state"):
                yield Static("No prompts found", id="empty-title")
                yield Static(
                    "Try adjusting your search terms or browse all available prompts",
                    id="empty-hint",
                )
        yield Footer()

    def on_mount(self) -> None:
        self.load_prompts()
        self.query_one("#search-input", Input).focus()

    def on_unmount(self) -> None:
        """Stop pending feedback timers when the app closes."""
        self.feedback.on_change = None
        self.feedback.cancel_all()

    @property
    def visible_records(self) -> list[PromptRecord]:
        return self.prompt_filter.visible_records

    def load_prompts(self) -> None:
        """Rebuild the card list for the current query."""
        records = self.prompt_filter.visible_records
        container = self.query_one("#prompt-list", VerticalScroll)

        for card in list(container.query(PromptCard)):
            card.remove()

        cards = [
            PromptCard(record, copied=self.feedback.is_pending(card_key(record)))
            for record in records
        ]
        if cards:
            container.mount(*cards)

        self.query_one("#empty-state").display = not records
        self.query_one("#result-count", Static).update(format_result_count(len(records)))

    def open_detail(self, record: PromptRecord) -> None:
        if self.selection.selected is record:
            return
        self.selection.select(record)
        self.push_screen(
            PromptDetailScreen(record, copied=self.feedback.is_pending(detail_key(record))),
            callback=self._on_detail_close,
        )

    def _on_detail_close(self, _result: Optional[object] = None) -> None:
        self.selection.clear()

    async def copy_prompt(self, record: PromptRecord, key: str) -> bool:
        return await self.feedback.trigger_copy(record.content, key)

    def _on_feedback_changed(self, key: str) -> None:
        copied = self.feedback.is_pending(key)
        for screen in self.screen_stack:
            if isinstance(screen, PromptDetailScreen):
                if detail_key(screen.record) == key:
                    screen.set_copied(copied)
                continue
            for card in screen.query(PromptCard):
                if card_key(card.record) == key:
                    card.set_copied(copied)

    def action_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_focus_search(self) -> None:
        if self.selection.is_open():
            return
        self.query_one("#search-input", Input).focus()

    def action_clear_filter(self) -> None:
        if self.selection.is_open():
            return
        # Input.Changed reloads the list.
        self.query_one("#search-input", Input).value = ""

    @on(Input.Changed, "#search-input")
    def on_search_changed(self, event: Input.Changed) -> None:
        self.prompt_filter.query = event.value
        self.load_prompts()


def main(dataset: Dataset) -> None:
    """Run the TUI application."""
    from textual.logging import TextualHandler

    root = logging.getLogger()
    root.handlers[:] = [TextualHandler()]

    app = PromptBrowserApp(dataset)
    app.run()
