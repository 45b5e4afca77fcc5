from __future__ import annotations

import logging
import queue
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, List, Optional

import numpy as np

from .grid import Board, clear_lines, collides, ghost, merge
from .pieces import Piece, TetrominoType, random_kind
from .rotation import rotate
from .rules import ScoringRules
from .scheduler import DropScheduler

logger = logging.getLogger(__name__)


class Action(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    ROTATE = 2
    SOFT_DROP_START = 3
    SOFT_DROP_STOP = 4
    HARD_DROP = 5
    PAUSE = 6
    RESUME = 7
    RESET = 8
    TICK = 9


class GameState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Phase(Enum):
    FALLING = "falling"
    LANDING = "landing"
    SPAWNING = "spawning"


@dataclass
class GameConfig:
    cols: int = 10
    rows: int = 20
    spawn_x: int = 3
    spawn_y: int = 0
    soft_drop_interval_ms: int = 50
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.cols <= 0 or self.rows <= 0:
            raise ValueError(f"board must be at least 1x1, got {self.cols}x{self.rows}")
        if self.soft_drop_interval_ms <= 0:
            raise ValueError("soft_drop_interval_ms must be positive")


@dataclass(frozen=True, eq=False)
class GameSnapshot:
    """Read-only view of the engine handed to renderers and agents."""

    board: np.ndarray
    piece: Piece
    ghost: Piece
    next_piece: Piece
    score: int
    drop_interval: int
    state: GameState
    lines_cleared_total: int
    soft_dropping: bool


Listener = Callable[[GameSnapshot], None]


class TetrisGame:
    """Falling-block game engine.

    All mutation goes through the command methods (or ``apply``/``pump``),
    which must be called from a single thread. Other threads hand commands
    over with ``submit``; they are applied on the next ``pump``.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self.scheduler = DropScheduler()
        self._commands: "queue.SimpleQueue[Action]" = queue.SimpleQueue()
        self._listeners: List[Listener] = []
        self.board: Board
        self.piece: Piece
        self.next_piece: Piece
        self.reset()

    @property
    def game_over(self) -> bool:
        return self.state is GameState.GAME_OVER

    def reset(self) -> None:
        self.board = Board.empty(self.config.cols, self.config.rows)
        self.piece = self._random_piece()
        self.next_piece = self._random_piece()
        self.score = 0
        self.lines_cleared_total = 0
        self.drop_interval = self.rules.drop_interval(0)
        self.state = GameState.PLAYING
        self.phase = Phase.FALLING
        self.soft_dropping = False
        self._arm_gravity()
        logger.debug("New game: %s, next %s", self.piece.kind.name, self.next_piece.kind.name)
        self._emit()

    def pause(self) -> None:
        if self.state is not GameState.PLAYING:
            return
        self.state = GameState.PAUSED
        self.soft_dropping = False
        self.scheduler.cancel()
        self._emit()

    def resume(self) -> None:
        if self.state is not GameState.PAUSED:
            return
        self.state = GameState.PLAYING
        self._arm_gravity()
        self._emit()

    def move_left(self) -> None:
        self._move(-1)

    def move_right(self) -> None:
        self._move(1)

    def rotate(self) -> None:
        if not self._accepts_input():
            return
        rotated = rotate(self.piece, self.board)
        if rotated is not self.piece:
            self.piece = rotated
            self._emit()

    def tick(self) -> None:
        if not self._accepts_input():
            return
        below = self.piece.moved(0, 1)
        if collides(below, self.board):
            self._lock(self.piece)
        else:
            self.piece = below
        self._emit()

    def hard_drop(self) -> None:
        if not self._accepts_input():
            return
        self._lock(ghost(self.piece, self.board))
        self._emit()

    def soft_drop_start(self) -> None:
        if not self._accepts_input() or self.soft_dropping:
            return
        self.soft_dropping = True
        self.scheduler.arm(self.config.soft_drop_interval_ms, self.tick)
        self._emit()

    def soft_drop_stop(self) -> None:
        if not self.soft_dropping:
            return
        self.soft_dropping = False
        if self.state is GameState.PLAYING:
            self._arm_gravity()
        self._emit()

    def apply(self, action: Action | int) -> None:
        action = Action(action)
        handlers = {
            Action.MOVE_LEFT: self.move_left,
            Action.MOVE_RIGHT: self.move_right,
            Action.ROTATE: self.rotate,
            Action.SOFT_DROP_START: self.soft_drop_start,
            Action.SOFT_DROP_STOP: self.soft_drop_stop,
            Action.HARD_DROP: self.hard_drop,
            Action.PAUSE: self.pause,
            Action.RESUME: self.resume,
            Action.RESET: self.reset,
            Action.TICK: self.tick,
        }
        handlers[action]()

    def submit(self, action: Action | int) -> None:
        """Queue a command from any thread; it runs on the next ``pump``."""
        self._commands.put(Action(action))

    def pump(self, elapsed_ms: int = 0) -> int:
        """Apply queued commands in order, then advance the drop timer.

        Returns the number of gravity ticks fired by the timer.
        """
        while True:
            try:
                action = self._commands.get_nowait()
            except queue.Empty:
                break
            self.apply(action)
        return self.scheduler.advance(elapsed_ms)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            board=self.board.grid,
            piece=self.piece,
            ghost=ghost(self.piece, self.board),
            next_piece=self.next_piece,
            score=self.score,
            drop_interval=self.drop_interval,
            state=self.state,
            lines_cleared_total=self.lines_cleared_total,
            soft_dropping=self.soft_dropping,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.board.clone_state()
        if not self.game_over:
            for x, y in self.piece.cells():
                if self.board.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.piece.kind)
        return state

    def _random_piece(self) -> Piece:
        kind: TetrominoType = random_kind(self.rng)
        return Piece.spawn(kind, self.config.spawn_x, self.config.spawn_y)

    def _accepts_input(self) -> bool:
        return self.state is GameState.PLAYING and self.phase is Phase.FALLING

    def _move(self, dx: int) -> None:
        if not self._accepts_input():
            return
        moved = self.piece.moved(dx, 0)
        if not collides(moved, self.board):
            self.piece = moved
            self._emit()

    def _arm_gravity(self) -> None:
        self.scheduler.arm(self.drop_interval, self.tick)

    def _add_score(self, points: int) -> None:
        self.score += points
        interval = self.rules.drop_interval(self.score)
        if interval != self.drop_interval:
            logger.debug("Drop interval %d -> %d ms at score %d", self.drop_interval, interval, self.score)
        self.drop_interval = interval
        if not self.soft_dropping:
            self._arm_gravity()

    def _lock(self, piece: Piece) -> None:
        # Merge, clear, score and spawn run as one step; commands see
        # either the falling piece or its replacement, never the gap.
        self.phase = Phase.LANDING
        self.piece = piece
        # Cells still above row 0 cannot be stored on the board.
        overflow = any(y < 0 for _, y in piece.cells())
        board, lines = clear_lines(merge(piece, self.board))
        self.board = board
        logger.debug("Locked %s at (%d, %d), cleared %d line(s)", piece.kind.name, piece.x, piece.y, lines)
        if lines:
            self.lines_cleared_total += lines
            self._add_score(self.rules.score_for_lines(lines))
        if overflow:
            self._end_game("piece locked above the field")
            return
        if piece.y <= self.config.spawn_y:
            self._end_game("stack reached the spawn row")
            return

        self.phase = Phase.SPAWNING
        self.piece = self.next_piece
        self.next_piece = self._random_piece()
        if collides(self.piece, self.board):
            self._end_game("no room to spawn %s" % self.piece.kind.name)
            return
        self.phase = Phase.FALLING

    def _end_game(self, reason: str) -> None:
        self.state = GameState.GAME_OVER
        self.phase = Phase.FALLING
        self.soft_dropping = False
        self.scheduler.cancel()
        logger.info("Game over (%s): score=%d lines=%d", reason, self.score, self.lines_cleared_total)

    def _emit(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
