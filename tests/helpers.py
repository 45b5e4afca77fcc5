from __future__ import annotations

from typing import Sequence

import numpy as np

from tetris_engine.game import Board, Piece, TetrominoType


def board_from_rows(rows: Sequence[str], cols: int = 10, height: int = 20) -> Board:
    """Build a board whose bottom rows match ``rows``.

    '.' is an empty cell; a tetromino letter fills the cell with that type.
    """
    grid = np.zeros((height, cols), dtype=np.int8)
    offset = height - len(rows)
    for y, row in enumerate(rows):
        assert len(row) == cols, f"row {row!r} is not {cols} wide"
        for x, ch in enumerate(row):
            if ch != '.':
                grid[offset + y, x] = int(TetrominoType[ch])
    return Board(cols, height, grid)


def same_piece(a: Piece, b: Piece) -> bool:
    return a.kind == b.kind and a.x == b.x and a.y == b.y and np.array_equal(a.shape, b.shape)
