"""Main Textual app for the autotagger config panel."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Footer, Input, Static, TextArea

from adapters.sqlite_storage import SQLiteStore
from core.config import OPTION_NAME, TaggingConfig
from core.errors import StoreFailure
from core.models import Post
from core.rules_engine import should_tag

from .constants import ACCENT, OPTION_FIELDS
from .modals import UnsavedChangesScreen
from .state import ConfigState
from .validators import check_options


class ConfigPanelApp(App):
    """Edit the tagging options and try them against sample text."""

    BINDINGS = [
        ("ctrl+s", "save_config", "Save"),
        ("ctrl+r", "reload_config", "Reload"),
        ("q", "request_quit", "Quit"),
        ("ctrl+c", "request_quit", "Quit"),
    ]

    CSS = """
    Screen {
        background: #0f1a21;
        color: #e8eef5;
    }

    #header {
        height: 5;
        padding: 1 4;
        border-bottom: solid #2a3a46;
    }

    #body {
        padding: 1 4;
    }

    #form, #tester {
        width: 1fr;
        padding: 0 2;
    }

    .form-label {
        color: #c6d2dd;
        margin-top: 1;
    }

    .status-error, .form-error {
        color: #ff6b6b;
    }

    .status-modified {
        color: #f5c26b;
    }

    .status-loaded {
        color: #7bd88f;
    }

    #tester-content {
        height: 8;
    }
    """

    def __init__(self, store: SQLiteStore, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._store = store
        self.config_state = ConfigState()
        self._loading_form = False

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal():
                yield Static(self._title_text(), id="title")
                yield Static("", id="header-status")
                yield Button("Save", id="save-btn", variant="success")
                yield Button("Reload", id="reload-btn")

        with Horizontal(id="body"):
            with Vertical(id="form"):
                yield Static("Title trigger (whole word)", classes="form-label")
                yield Input(placeholder="spoiler", id="title_trigger")
                yield Static("Content trigger (whole word)", classes="form-label")
                yield Input(placeholder="spoiler", id="content_trigger")
                yield Static("Tag slug to apply", classes="form-label")
                yield Input(placeholder="review", id="tag_slug")
                yield Static("", id="form-error", classes="form-error")
                yield Static("", id="form-warnings")
            with Vertical(id="tester"):
                yield Static("Rule tester", classes="form-label")
                yield Input(placeholder="Sample post title", id="tester-title")
                yield TextArea(id="tester-content")
                yield Button("Test", id="tester-run", variant="primary")
                yield Static("", id="tester-result")
        yield Footer()

    def on_mount(self) -> None:
        self._load_config()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save-btn":
            self.action_save_config()
        elif event.button.id == "reload-btn":
            self.action_reload_config()
        elif event.button.id == "tester-run":
            self._run_tester()

    def on_input_changed(self, event: Input.Changed) -> None:
        if self._loading_form or event.input.id not in OPTION_FIELDS:
            return
        # Changed also fires, later, for values set by _load_config.
        if self.config_state.data.get(event.input.id) == event.value:
            return
        self.config_state.data[event.input.id] = event.value
        self.config_state.dirty = True
        self._refresh_checks()
        self._refresh_header()

    def action_save_config(self) -> None:
        self._save_config()

    def action_reload_config(self) -> None:
        self._load_config()

    def action_request_quit(self) -> None:
        if self.config_state.dirty:
            self.push_screen(UnsavedChangesScreen(), self._handle_exit_choice)
        else:
            self.exit()

    def _handle_exit_choice(self, choice: str | None) -> None:
        if choice == "save":
            if self._save_config():
                self.exit()
        elif choice == "discard":
            self.exit()

    def _load_config(self) -> None:
        try:
            config = TaggingConfig.from_options(self._store.load_options(OPTION_NAME))
        except StoreFailure as exc:
            self.config_state.error = f"load failed: {exc}"
            self._refresh_header()
            return
        self.config_state.data = {
            "title_trigger": config.title_trigger,
            "content_trigger": config.content_trigger,
            "tag_slug": config.tag_slug,
        }
        self.config_state.dirty = False
        self.config_state.error = None

        self._loading_form = True
        try:
            for name in OPTION_FIELDS:
                self.query_one(f"#{name}", Input).value = self.config_state.data[name]
        finally:
            self._loading_form = False
        self._refresh_checks()
        self._refresh_header()

    def _save_config(self) -> bool:
        check = check_options(self.config_state.data)
        if check.errors:
            self.config_state.error = "; ".join(check.errors.values())
            self._refresh_header()
            return False
        try:
            self._store.save_options(OPTION_NAME, check.cleaned)
        except StoreFailure as exc:
            self.config_state.error = f"save failed: {exc}"
            self._refresh_header()
            return False
        self.config_state.error = None
        self._load_config()
        return True

    def _refresh_checks(self) -> None:
        check = check_options(self.config_state.data)
        self.query_one("#form-error", Static).update("\n".join(check.errors.values()))
        self.query_one("#form-warnings", Static).update("\n".join(check.warnings))

    def _refresh_header(self) -> None:
        status = self.query_one("#header-status", Static)
        status.remove_class("status-loaded", "status-modified", "status-error")
        if self.config_state.error:
            status.update(f"options: {self.config_state.error}")
            status.add_class("status-error")
        elif self.config_state.dirty:
            status.update("options: modified *")
            status.add_class("status-modified")
        else:
            status.update("options: loaded")
            status.add_class("status-loaded")
        self.query_one("#save-btn", Button).disabled = not self.config_state.dirty

    def _run_tester(self) -> None:
        # The tester uses the unsaved form values so edits can be tried first.
        config = TaggingConfig.from_options(check_options(self.config_state.data).cleaned)
        post = Post(
            id=0,
            title=self.query_one("#tester-title", Input).value,
            content=self.query_one("#tester-content", TextArea).text,
            type="post",
        )
        result = self.query_one("#tester-result", Static)
        if should_tag(post, config):
            result.update(f"match: would add tag '{config.effective_tag}'")
        else:
            result.update("no match")

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("AUTO", ACCENT),
            ("TAGGER > Options", "bold"),
        )
