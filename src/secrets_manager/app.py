"""Interactive picker: a full-screen list to choose one item from."""

from collections.abc import Callable

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Input, LoadingIndicator, Static

from secrets_manager.constants import APP_TITLE, PICKER_HINT
from secrets_manager.models import Choice
from secrets_manager.widgets.choice_table import ChoiceTable


class PickerApp(App[str | None]):
    """Loads choices in a background thread, then lets the user pick one.

    Exits with the chosen value, or None when cancelled.  If the loader
    raises, the app exits with None and the exception is kept on ``error``
    for the caller to re-raise.
    """

    TITLE = APP_TITLE

    CSS = """
    #search {
        dock: top;
    }
    #hint {
        dock: bottom;
        height: 1;
        color: $text-muted;
    }
    """

    loading: reactive[bool] = reactive(True)

    BINDINGS = [
        Binding("q", "cancel", "Cancel"),
        Binding("escape", "escape", show=False),
        Binding("/", "focus_search", "Search"),
        Binding("g", "jump_top", show=False),
        Binding("G", "jump_bottom", show=False),
    ]

    def __init__(self, title: str, loader: Callable[[], list[Choice]]) -> None:
        super().__init__()
        self._prompt = title
        self._loader = loader
        self._choices: list[Choice] = []
        self._filter: str = ""
        self._g_pressed: bool = False
        self.error: Exception | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(placeholder="Filter", id="search")
        yield LoadingIndicator(id="loading")
        yield ChoiceTable(id="choice-table")
        yield Static(PICKER_HINT, id="hint")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self._prompt
        self.query_one("#search", Input).display = False
        self.watch_loading(self.loading)
        self._load()

    @work(thread=True, exit_on_error=False)
    def _load(self) -> None:
        """Run the loader off the event loop."""
        try:
            choices = self._loader()
        except Exception as exc:  # re-raised by pick() once the app has exited
            self.call_from_thread(self._fail, exc)
            return
        self.call_from_thread(self._loaded, choices)

    def _loaded(self, choices: list[Choice]) -> None:
        self._choices = choices
        self.loading = False
        self._refresh_table()
        self._get_table().focus()
        if not choices:
            self.notify("Nothing to choose from", severity="warning", timeout=4)

    def _fail(self, exc: Exception) -> None:
        self.error = exc
        self.exit(None)

    def watch_loading(self, loading: bool) -> None:
        """Show or hide the loading indicator."""
        self.query_one("#loading", LoadingIndicator).display = loading
        self.query_one("#choice-table", ChoiceTable).display = not loading

    def _get_table(self) -> ChoiceTable:
        return self.query_one("#choice-table", ChoiceTable)

    def _refresh_table(self) -> None:
        """Repopulate the table, applying the current filter if any."""
        choices = (
            [c for c in self._choices if c.matches(self._filter)] if self._filter else self._choices
        )
        self._get_table().load(choices)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        self.exit(event.row_key.value)

    def on_choice_table_row_double_clicked(self, event: ChoiceTable.RowDoubleClicked) -> None:
        event.stop()
        value = self._get_table().selected_value()
        if value is not None:
            self.exit(value)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self._filter = event.value
            self._refresh_table()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search":
            self._get_table().focus()

    def action_focus_search(self) -> None:
        """Show and focus the search bar."""
        search = self.query_one("#search", Input)
        search.display = True
        search.focus()

    def action_escape(self) -> None:
        """Clear an active search; cancel the picker otherwise."""
        search = self.query_one("#search", Input)
        if not search.display:
            self.action_cancel()
            return
        if search.value:
            search.value = ""
            self._filter = ""
            self._refresh_table()
        search.display = False
        self._get_table().focus()

    def action_cancel(self) -> None:
        self.exit(None)

    def action_jump_top(self) -> None:
        """Implement vim-style gg: move to the first row on the second g press."""
        if self._g_pressed:
            self._g_pressed = False
            self._get_table().move_cursor(row=0)
        else:
            self._g_pressed = True
            self.set_timer(0.5, self._reset_g)

    def _reset_g(self) -> None:
        self._g_pressed = False

    def action_jump_bottom(self) -> None:
        """Move cursor to the last row (vim G)."""
        table = self._get_table()
        table.move_cursor(row=table.row_count - 1)


def pick(title: str, loader: Callable[[], list[Choice]]) -> str | None:
    """Run the picker and return the chosen value (None if cancelled).

    Exceptions raised by ``loader`` propagate from here.
    """
    app = PickerApp(title, loader)
    result = app.run()
    if app.error is not None:
        raise app.error
    return result
