"""Pong, played one frame per scheduler step."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable

from stepwise.config import PongConfig, SchedulerConfig
from stepwise.core import GameTool, Outcome
from stepwise.core.registry import ActivationRegistry
from stepwise.host.base import Host

logger = logging.getLogger(__name__)

# Fastest the computer paddle may move per frame
CPU_SPEED = 0.6


class Canvas:
    """Character grid the game paints onto."""

    def __init__(self, width: int, height: int, fill: str = " "):
        self.width = width
        self.height = height
        self._rows = [[fill] * width for _ in range(height)]

    def put(self, x: float, y: float, text: str) -> None:
        row = int(round(y))
        if not 0 <= row < self.height:
            return
        col = int(round(x))
        for ch in text:
            if 0 <= col < self.width:
                self._rows[row][col] = ch
            col += 1

    def row(self, y: int) -> str:
        return "".join(self._rows[y])

    def __str__(self) -> str:
        return "\n".join("".join(r) for r in self._rows)


@dataclass
class PongGame:
    """Ball and paddle state for one game."""

    config: PongConfig = field(default_factory=PongConfig)
    autopilot: bool = False
    seed: int | None = None

    ball_x: float = 0.0
    ball_y: float = 0.0
    ball_dx: float = 1.0
    ball_dy: float = 0.5
    left_y: float = 0.0
    right_y: float = 0.0
    score_left: int = 0
    score_right: int = 0
    frames: int = 0

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)
        middle = (self.config.height - self.config.paddle_height) / 2
        self.left_y = middle
        self.right_y = middle
        self.reset_ball(direction=1)

    @property
    def left_x(self) -> int:
        return 1

    @property
    def right_x(self) -> int:
        return self.config.width - 2

    @property
    def winner(self) -> str | None:
        if self.score_left >= self.config.points_to_win:
            return "player"
        if self.score_right >= self.config.points_to_win:
            return "computer"
        return None

    def reset_ball(self, direction: int) -> None:
        self.ball_x = self.config.width / 2
        self.ball_y = self.config.height / 2
        self.ball_dx = float(direction)
        self.ball_dy = self._rng.choice((-0.5, -0.25, 0.25, 0.5))

    def _clamp_paddle(self, y: float) -> float:
        return max(0.0, min(float(self.config.height - self.config.paddle_height), y))

    def _track(self, paddle_y: float, speed: float | None) -> float:
        target = self.ball_y - self.config.paddle_height / 2
        if speed is None:
            return self._clamp_paddle(target)
        delta = max(-speed, min(speed, target - paddle_y))
        return self._clamp_paddle(paddle_y + delta)

    def _hits(self, paddle_y: float, y: float) -> bool:
        return paddle_y - 0.5 <= y <= paddle_y + self.config.paddle_height - 0.5

    def advance(self, pointer_y: float | None = None) -> None:
        """Move everything by one frame."""
        self.frames += 1

        if self.autopilot or pointer_y is None:
            self.left_y = self._track(self.left_y, None if self.autopilot else CPU_SPEED)
        else:
            self.left_y = self._clamp_paddle(pointer_y - self.config.paddle_height / 2)
        self.right_y = self._track(self.right_y, CPU_SPEED)

        x = self.ball_x + self.ball_dx
        y = self.ball_y + self.ball_dy

        # Top and bottom walls
        if y < 0 or y > self.config.height - 1:
            self.ball_dy = -self.ball_dy
            y = self.ball_y + self.ball_dy

        if self.ball_dx < 0 and x <= self.left_x and self._hits(self.left_y, y):
            self.ball_dx = -self.ball_dx
            self.ball_dy = max(-1.0, min(1.0, self.ball_dy + self._rng.uniform(-0.2, 0.2)))
            x = self.left_x + 1
        elif self.ball_dx > 0 and x >= self.right_x and self._hits(self.right_y, y):
            self.ball_dx = -self.ball_dx
            self.ball_dy = max(-1.0, min(1.0, self.ball_dy + self._rng.uniform(-0.2, 0.2)))
            x = self.right_x - 1

        self.ball_x, self.ball_y = x, y

        if self.ball_x < 0:
            self.score_right += 1
            logger.debug(f"Computer scores ({self.score_left}:{self.score_right})")
            self.reset_ball(direction=1)
        elif self.ball_x >= self.config.width:
            self.score_left += 1
            logger.debug(f"Player scores ({self.score_left}:{self.score_right})")
            self.reset_ball(direction=-1)

    async def play(self, tool: GameTool) -> None:
        """The scheduler task: one frame per refresh until someone wins."""
        while self.winner is None:
            if self.frames >= self.config.max_frames:
                logger.info(f"Frame limit reached at {self.score_left}:{self.score_right}")
                return
            pointer = None if self.autopilot or tool.mouse_move_count == 0 else tool.mouse_y
            self.advance(pointer)
            await tool.refresh()

    def draw(self, canvas: Canvas) -> None:
        canvas.put(self.config.width / 2 - 3, 0, f"{self.score_left} : {self.score_right}")
        for i in range(self.config.paddle_height):
            canvas.put(self.left_x, self.left_y + i, "█")
            canvas.put(self.right_x, self.right_y + i, "█")
        canvas.put(self.ball_x, self.ball_y, "●")


def start(
    host: Host,
    config: PongConfig | None = None,
    *,
    on_finished: Callable[[PongGame, Outcome | None], None] | None = None,
    autopilot: bool = False,
    seed: int | None = None,
    scheduler_config: SchedulerConfig | None = None,
    registry: ActivationRegistry | None = None,
) -> tuple[PongGame, GameTool]:
    """
    Start a game on ``host``.

    ``on_finished(game, outcome)`` runs from the terminal callback; the
    outcome is None when the game completed.
    """
    game = PongGame(config=config or PongConfig(), autopilot=autopilot, seed=seed)

    def game_over() -> None:
        logger.info(f"Game over, {game.winner or 'nobody'} wins {game.score_left}:{game.score_right}")
        if on_finished:
            on_finished(game, None)

    def game_aborted(outcome: Outcome) -> None:
        logger.warning(f"Game aborted: {outcome}")
        if on_finished:
            on_finished(game, outcome)

    tool = GameTool(
        game_over,
        game_aborted,
        game.play,
        host=host,
        identity="pong",
        registry=registry,
        config=scheduler_config,
    )
    tool.user_draw = game.draw
    return game, tool
