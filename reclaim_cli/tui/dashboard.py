"""
Task Dashboard.

Interactive terminal view of the task list with a details panel.

DashboardState holds the selection, sort, filter, help and command-mode
logic and knows nothing about the terminal, so it can be driven key by
key in tests. DashboardApp is the Textual shell that renders the state
and forwards key presses to it.

Keys:
    j / Down, k / Up    move (wraps around)
    g / Home, G / End   jump to first / last
    r                   refresh from the API (input waits for the fetch)
    s                   cycle sort: id, due, priority
    f                   cycle filter: all, open, completed
    ?                   toggle help (? or Enter closes)
    :q                  quit; Esc and Ctrl+C quit immediately
"""

from __future__ import annotations

from enum import Enum

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Static

from reclaim_cli.api.client import ReclaimClient
from reclaim_cli.api.models import CompletionFilter, Task, filter_by_completion
from reclaim_cli.core.exceptions import OutputError, ReclaimError
from reclaim_cli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DASHBOARD_HINT = "j/k move  g/G jump  r refresh  s sort  f filter  ? help  :q/Esc/Ctrl+C quit"

HELP_TEXT = "\n".join([
    "Dashboard key bindings",
    "",
    "Navigation",
    "  j / Down        Move down",
    "  k / Up          Move up",
    "  g / Home        Jump to first task",
    "  G / End         Jump to last task",
    "",
    "Actions",
    "  r               Refresh tasks from API",
    "  s               Cycle sort (id, due, priority)",
    "  f               Cycle filter (all, open, completed)",
    "  ?               Toggle this help",
    "",
    "Exit",
    "  :q              Vim-style quit command",
    "  Esc             Quit immediately",
    "  Ctrl+C          Quit immediately",
    "",
    "Press ? or Enter to close this panel.",
])

SORT_KEYS = ("id", "due", "priority")
FILTERS: tuple[CompletionFilter | None, ...] = (
    None,
    CompletionFilter.OPEN,
    CompletionFilter.COMPLETED,
)
PRIORITY_RANK = {"P1": 0, "P2": 1, "P3": 2, "P4": 3}
QUIT_KEYS = frozenset({"escape", "ctrl+c"})


class Action(Enum):
    NONE = "none"
    QUIT = "quit"
    REFRESH = "refresh"


def _sort_key(name: str, task: Task) -> tuple:
    if name == "due":
        return (task.due is None, task.due or "", task.id)
    if name == "priority":
        return (PRIORITY_RANK.get((task.priority or "").upper(), len(PRIORITY_RANK)), task.id)
    return (task.id,)


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def key_token(key: str, character: str | None) -> str:
    """
    Reduce a Textual key event to one token.

    Printable characters are used as typed ("G", "?", ":"); everything else
    keeps Textual's key name ("down", "enter", "backspace", "ctrl+c").
    """
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return key


class DashboardState:
    """Selection, sorting, filtering and keyboard handling for the dashboard."""

    def __init__(self, tasks: list[Task], include_all: bool = False) -> None:
        self.tasks = list(tasks)
        self.include_all = include_all
        self.sort_key = SORT_KEYS[0]
        self.completion: CompletionFilter | None = None
        self.selected: int | None = 0 if self.tasks else None
        self.show_help = False
        self.command_buffer = ""
        self.status_message: str | None = None

    # -------------------------------------------------------------------------
    # View data
    # -------------------------------------------------------------------------

    @property
    def visible_tasks(self) -> list[Task]:
        tasks = filter_by_completion(self.tasks, self.completion)
        return sorted(tasks, key=lambda task: _sort_key(self.sort_key, task))

    @property
    def selected_task(self) -> Task | None:
        visible = self.visible_tasks
        if self.selected is None or self.selected >= len(visible):
            return None
        return visible[self.selected]

    @property
    def filter_label(self) -> str:
        return self.completion.value if self.completion is not None else "all"

    def header_text(self) -> str:
        count = len(self.visible_tasks)
        scope = "all" if self.include_all else "active"
        return (
            f"Reclaim Task Dashboard  |  {count} task{_plural(count)} ({scope})"
            f"  |  sort: {self.sort_key}  |  filter: {self.filter_label}"
        )

    def list_lines(self) -> list[str]:
        visible = self.visible_tasks
        if not visible:
            return ["No tasks found for this filter."]

        lines = []
        for index, task in enumerate(visible):
            marker = ">> " if index == self.selected else "   "
            lines.append(
                f"{marker}#{task.id:<6} [{task.status or 'UNKNOWN':<10}] {task.title} "
                f"(due: {task.due or '-'})"
            )
        return lines

    def detail_lines(self) -> list[str]:
        task = self.selected_task
        if task is None:
            return ["No task selected.", "Try pressing r to refresh from the API."]

        lines = [
            f"#{task.id} {task.title}",
            f"status: {task.status or 'UNKNOWN'}",
            f"priority: {task.priority or '-'}",
            f"due: {task.due or '-'}",
        ]
        if task.notes:
            lines.append("")
            lines.append("notes:")
            lines.extend(f"  {line}" for line in task.notes.splitlines())
        return lines

    def footer_text(self) -> str:
        if self.command_buffer:
            return f"Command: {self.command_buffer}"
        return self.status_message or DASHBOARD_HINT

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def set_status(self, message: str) -> None:
        self.status_message = message

    def replace_tasks(self, tasks: list[Task]) -> None:
        """Swap in a fresh task list, keeping the selection in range."""
        self.tasks = list(tasks)
        self._clamp_selection()
        count = len(self.tasks)
        self.set_status(f"Refreshed: {count} task{_plural(count)} loaded.")

    def refresh_failed(self, error: ReclaimError) -> None:
        """Keep the old list and report the first line of the error."""
        first_line = next(iter(error.message.splitlines()), "") or "Refresh failed."
        self.set_status(f"Refresh failed: {first_line}")

    def _clamp_selection(self) -> None:
        count = len(self.visible_tasks)
        if count == 0:
            self.selected = None
        else:
            self.selected = min(self.selected or 0, count - 1)

    def select_next(self) -> None:
        count = len(self.visible_tasks)
        if count == 0:
            self.selected = None
        elif self.selected is None or self.selected + 1 >= count:
            self.selected = 0
        else:
            self.selected += 1

    def select_previous(self) -> None:
        count = len(self.visible_tasks)
        if count == 0:
            self.selected = None
        elif not self.selected:
            self.selected = count - 1
        else:
            self.selected -= 1

    def select_first(self) -> None:
        self.selected = 0 if self.visible_tasks else None

    def select_last(self) -> None:
        count = len(self.visible_tasks)
        self.selected = count - 1 if count else None

    def cycle_sort(self) -> None:
        index = SORT_KEYS.index(self.sort_key)
        self.sort_key = SORT_KEYS[(index + 1) % len(SORT_KEYS)]
        self.select_first()
        self.set_status(f"Sorted by {self.sort_key}.")

    def cycle_filter(self) -> None:
        index = FILTERS.index(self.completion)
        self.completion = FILTERS[(index + 1) % len(FILTERS)]
        self.select_first()
        self.set_status(f"Filter: {self.filter_label}.")

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def handle_key(self, key: str) -> Action:
        """Apply one key token (see key_token) and return what the app should do."""
        if key in QUIT_KEYS:
            return Action.QUIT

        if self.command_buffer:
            return self._handle_command_key(key)

        if self.show_help:
            if key in ("?", "enter"):
                self.show_help = False
            return Action.NONE

        if key == "?":
            self.show_help = True
            self.set_status("Help opened. Press ? or Enter to close.")
        elif key == ":":
            self.command_buffer = ":"
            self.set_status("Command mode: type :q to quit.")
        elif key in ("j", "down"):
            self.select_next()
        elif key in ("k", "up"):
            self.select_previous()
        elif key in ("g", "home"):
            self.select_first()
        elif key in ("G", "end"):
            self.select_last()
        elif key == "s":
            self.cycle_sort()
        elif key == "f":
            self.cycle_filter()
        elif key == "r":
            return Action.REFRESH
        return Action.NONE

    def _handle_command_key(self, key: str) -> Action:
        if key == "enter":
            command = self.command_buffer
            self.command_buffer = ""
            if command == ":q":
                return Action.QUIT
            if command == ":":
                self.set_status("Command cancelled.")
            else:
                self.set_status(f"Unknown command: {command}")
            return Action.NONE

        if key == "backspace":
            self.command_buffer = self.command_buffer[:-1]
            if not self.command_buffer:
                self.set_status(DASHBOARD_HINT)
            return Action.NONE

        if len(key) == 1:
            self.command_buffer += key
            if self.command_buffer == ":q":
                return Action.QUIT
        return Action.NONE


class Panel(VerticalScroll, can_focus=False):
    """Scrollable panel that never takes focus, so every key reaches the app."""


class DashboardApp(App):
    """Textual shell around DashboardState."""

    TITLE = "Reclaim"

    CSS = """
    Screen {
        layout: vertical;
        layers: base overlay;
    }

    #header {
        height: 1;
        padding: 0 1;
        text-style: bold;
    }

    #body {
        height: 1fr;
    }

    #task-list {
        width: 3fr;
        border: solid $primary;
        border-title-align: left;
    }

    #details {
        width: 2fr;
        border: solid $primary;
        padding: 0 1;
    }

    #footer {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }

    #help {
        layer: overlay;
        width: 60;
        height: auto;
        margin: 2 4;
        padding: 1 2;
        border: solid $accent;
        background: $panel;
        display: none;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True, show=False),
        Binding("escape", "quit", "Quit", priority=True, show=False),
    ]

    def __init__(self, client: ReclaimClient, state: DashboardState) -> None:
        super().__init__()
        self.client = client
        self.state = state

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        with Horizontal(id="body"):
            with Panel(id="task-list"):
                yield Static(id="tasks")
            with Panel(id="details"):
                yield Static(id="detail")
        yield Static(id="footer")
        yield Static(Text(HELP_TEXT), id="help")

    def on_mount(self) -> None:
        self.query_one("#task-list").border_title = "Tasks"
        self.query_one("#details").border_title = "Details"
        self.update_view()

    def update_view(self) -> None:
        state = self.state
        self.query_one("#header", Static).update(Text(state.header_text()))

        tasks = Text()
        for index, line in enumerate(state.list_lines()):
            if index:
                tasks.append("\n")
            tasks.append(line, style="reverse" if index == state.selected else "")
        self.query_one("#tasks", Static).update(tasks)

        self.query_one("#detail", Static).update(Text("\n".join(state.detail_lines())))
        self.query_one("#footer", Static).update(Text(state.footer_text()))
        self.query_one("#help", Static).display = state.show_help

        if state.selected is not None:
            self.query_one("#task-list", Panel).scroll_to(
                y=max(state.selected - 3, 0), animate=False,
            )

    async def reload_tasks(self) -> None:
        """Fetch the task list; the key handler awaits this, so input waits."""
        self.state.set_status("Refreshing...")
        self.update_view()
        try:
            tasks = await self.client.list_tasks(self.state.include_all)
        except ReclaimError as e:
            log_with_source(logger, "tui", "debug", "Dashboard refresh failed", error=e.message)
            self.state.refresh_failed(e)
        else:
            log_with_source(logger, "tui", "debug", "Dashboard refreshed", count=len(tasks))
            self.state.replace_tasks(tasks)

    async def on_key(self, event: events.Key) -> None:
        event.stop()
        action = self.state.handle_key(key_token(event.key, event.character))
        if action is Action.QUIT:
            self.exit()
            return
        if action is Action.REFRESH:
            await self.reload_tasks()
        self.update_view()


async def run_dashboard(client: ReclaimClient, include_all: bool = False) -> None:
    """
    Load the task list, then run the dashboard until the user quits.

    A failure of the initial load propagates like any other command error.

    Raises:
        ReclaimError: If the initial load fails
        OutputError: If the terminal cannot be driven
    """
    tasks = await client.list_tasks(include_all)
    log_with_source(
        logger, "tui", "info", "Starting dashboard",
        count=len(tasks), include_all=include_all,
    )

    app = DashboardApp(client, DashboardState(tasks, include_all))
    try:
        await app.run_async()
    except OSError as e:
        raise OutputError(f"Dashboard terminal error: {e}") from e
