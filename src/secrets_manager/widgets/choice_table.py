"""Choice table widget."""

from rich.text import Text
from textual.binding import Binding
from textual.events import Click
from textual.message import Message
from textual.widgets import DataTable

from secrets_manager.constants import PICKER_COLUMNS
from secrets_manager.models import Choice


class ChoiceTable(DataTable):
    """Row-cursor table for the picker; each row key is the value it returns.

    j/k (and the arrow keys) wrap around at either end.
    """

    class RowDoubleClicked(Message):
        """Posted when the user double-clicks a row."""

    BINDINGS = [
        Binding("j", "cursor_down", show=False),
        Binding("k", "cursor_up", show=False),
    ]

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.zebra_stripes = True
        self.add_columns(*PICKER_COLUMNS)

    def action_cursor_down(self) -> None:
        self._step(1)

    def action_cursor_up(self) -> None:
        self._step(-1)

    def _step(self, delta: int) -> None:
        if self.row_count:
            self.move_cursor(row=(self.cursor_row + delta) % self.row_count)

    def load(self, choices: list[Choice]) -> None:
        """Replace the rows; descriptions are shown dimmed."""
        self.clear()
        for i, choice in enumerate(choices, start=1):
            self.add_row(str(i), choice.label, Text(choice.detail, style="dim"), key=choice.value)

    def selected_value(self) -> str | None:
        """Return the value of the highlighted row, or None when empty."""
        if self.row_count == 0:
            return None
        row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        return row_key.value

    def on_click(self, event: Click) -> None:
        if event.chain == 2 and self.row_count:
            self.post_message(self.RowDoubleClicked())
