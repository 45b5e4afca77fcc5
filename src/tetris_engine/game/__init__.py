"""Game module for the falling-block engine.

Exports the core game engine and supporting pieces:
- Board: immutable grid value with merge / line clearing helpers
- Piece: positioned tetromino with clockwise rotation
- TetrominoType: Enum of available piece types
- ScoringRules: line-clear points and the drop-speed curve
- DropScheduler: single-timer gravity scheduler
- TetrisGame: the engine state machine and its command surface
"""

from .grid import Board, clear_lines, collides, ghost, merge, board_features
from .pieces import BASE_SHAPES, Piece, TetrominoType, rotate_cw
from .rotation import rotate, WALL_KICKS
from .rules import ScoringRules
from .scheduler import DropScheduler, Timer
from .core import Action, GameConfig, GameSnapshot, GameState, Phase, TetrisGame

__all__ = [
    "Board",
    "clear_lines",
    "collides",
    "ghost",
    "merge",
    "board_features",
    "BASE_SHAPES",
    "Piece",
    "TetrominoType",
    "rotate_cw",
    "rotate",
    "WALL_KICKS",
    "ScoringRules",
    "DropScheduler",
    "Timer",
    "Action",
    "GameConfig",
    "GameSnapshot",
    "GameState",
    "Phase",
    "TetrisGame",
]
