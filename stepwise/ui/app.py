"""Pong TUI built on Textual, with Textual acting as the scheduler's host."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widget import Widget
from textual.widgets import Footer, Header, Static

from stepwise.config import Settings, get_settings
from stepwise.core import GameTool, Outcome
from stepwise.games import Canvas, PongGame
from stepwise.games import start as start_pong
from stepwise.host import AsyncioHost, Bounds, Camera, Point3d

HOME_CAMERA = Camera(eye=Point3d(0.0, -50.0, 20.0), target=Point3d(0.0, 0.0, 0.0))


class TextualHost(AsyncioHost):
    """
    Host backed by a running Textual app.

    Zero-delay timers use ``call_later`` so they run after the current
    message; longer ones use ``set_timer``.
    """

    def __init__(self, app: App, on_invalidate: Callable[[], None] | None = None):
        super().__init__(
            camera=HOME_CAMERA,
            bounds=Bounds(Point3d(-30.0, -10.0, 0.0), Point3d(30.0, 10.0, 5.0)),
            on_invalidate=on_invalidate,
        )
        self._app = app

    def start_timer(self, delay: float, callback: Callable[[], None]) -> None:
        self.timers_started += 1
        if delay <= 0:
            self._app.call_later(callback)
        else:
            self._app.set_timer(delay, callback)

    @property
    def looking_at_model(self) -> bool:
        return self.camera == HOME_CAMERA


class BoardView(Widget):
    """The playing field. Paints scenery only while the camera looks at it."""

    def __init__(self, width: int, height: int, **kwargs):
        super().__init__(**kwargs)
        self.board_width = width
        self.board_height = height
        self.game_host: TextualHost | None = None

    def render(self) -> Text:
        canvas = Canvas(self.board_width, self.board_height)
        if self.game_host is None:
            return Text(str(canvas))

        if self.game_host.looking_at_model:
            for y in range(0, self.board_height, 2):
                for x in range(0, self.board_width, 4):
                    canvas.put(x, y, "·")
        self.game_host.draw(canvas)
        return Text(str(canvas))

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self.game_host is None:
            return
        offset = event.get_content_offset(self)
        if offset is not None:
            self.game_host.move_pointer(offset.x, offset.y)


class StatusBar(Static):
    """One-line game status."""

    def show(self, message: str) -> None:
        self.update(Text(message))


class PongApp(App):
    """Main TUI Application."""

    CSS = """
    BoardView {
        border: solid cyan;
        width: auto;
        height: auto;
    }

    StatusBar {
        padding: 0 1;
        color: yellow;
    }
    """

    BINDINGS = [
        Binding("p", "start_game", "Play"),
        Binding("escape", "cancel_game", "Cancel"),
        Binding("s", "toggle_orbit", "Orbit"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self._settings = settings or get_settings()
        self.game_host: TextualHost | None = None
        self.game: PongGame | None = None
        self.tool: GameTool | None = None
        self.last_outcome: Outcome | None = None
        self._orbiting = False

    def compose(self) -> ComposeResult:
        pong = self._settings.pong
        yield Header(show_clock=True)
        yield BoardView(pong.width, pong.height, id="board")
        yield StatusBar("Press 'p' to play", id="status")
        yield Footer()

    def on_mount(self) -> None:
        """Initialize on mount."""
        self.title = "stepwise"
        self.sub_title = "Pong"

        board = self.query_one(BoardView)
        self.game_host = TextualHost(self, on_invalidate=board.refresh)
        board.game_host = self.game_host

    def _status(self, message: str) -> None:
        if self.tool is not None:
            message = f"[{self.tool.status_display}] {message}"
        self.query_one(StatusBar).show(message)

    def action_start_game(self) -> None:
        """Start a new game."""
        if self.game_host is None:
            return

        game, tool = start_pong(
            self.game_host,
            self._settings.pong,
            on_finished=self._game_finished,
            scheduler_config=self._settings.scheduler,
        )
        if not tool.started:
            self._status("A game is already running")
            return

        self.game, self.tool = game, tool
        self._status("Playing. Move the mouse over the board; escape to quit the game.")

    def action_cancel_game(self) -> None:
        """Cancel the running game."""
        if self.game_host is not None:
            self.game_host.cancel()

    def action_toggle_orbit(self) -> None:
        """Suspend or resume the game as a temporary tool would."""
        if self.game_host is None:
            return
        if self._orbiting:
            self.game_host.end_temporary_tool()
            self._status("Move the mouse over the board")
        else:
            self.game_host.begin_temporary_tool()
            self._status("Press 's' to resume")
        self._orbiting = not self._orbiting

    def _game_finished(self, game: PongGame, outcome: Outcome | None) -> None:
        self.last_outcome = outcome
        self._orbiting = False
        if outcome is None:
            self._status(f"Game over: {game.winner or 'nobody'} wins {game.score_left}:{game.score_right}")
        else:
            self._status(f"{outcome} at {game.score_left}:{game.score_right}")
        self.query_one(BoardView).refresh()

    async def action_quit(self) -> None:
        """Quit the application."""
        if self.game_host is not None:
            self.game_host.select_tool(None)
        self.exit()
