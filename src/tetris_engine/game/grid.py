from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from .pieces import Piece


Coordinate = Tuple[int, int]

EMPTY = 0


class Board:
    """Fixed-size grid of locked cells.

    The grid uses 0 for empty cells and the tetromino value (1..7) for filled
    cells. A Board is a value: its array is read-only and every operation that
    changes cells returns a new Board.
    """

    def __init__(self, cols: int, rows: int, grid: Optional[np.ndarray] = None) -> None:
        self.cols = int(cols)
        self.rows = int(rows)
        if grid is None:
            grid = np.zeros((self.rows, self.cols), dtype=np.int8)
        else:
            grid = np.array(grid, dtype=np.int8)
        assert grid.shape == (self.rows, self.cols)
        grid.flags.writeable = False
        self.grid = grid

    @classmethod
    def empty(cls, cols: int, rows: int) -> "Board":
        return cls(cols, rows)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.cols and 0 <= y < self.rows

    def cell(self, x: int, y: int) -> int:
        return int(self.grid[y, x])

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if x < 0 or x >= self.cols or y >= self.rows:
                return False
            # Rows above the field are open space.
            if y >= 0 and self.grid[y, x] != EMPTY:
                return False
        return True

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self.grid, other.grid)

    def __repr__(self) -> str:
        return f"Board(cols={self.cols}, rows={self.rows}, filled={int(np.count_nonzero(self.grid))})"


def collides(piece: Piece, board: Board) -> bool:
    return not board.can_place(piece.cells())


def merge(piece: Piece, board: Board) -> Board:
    """Return a copy of ``board`` with ``piece`` written into it.

    The caller is responsible for checking that the placement does not
    collide. Cells above the top row are dropped.
    """
    grid = board.clone_state()
    value = int(piece.kind)
    for x, y in piece.cells():
        if y >= 0:
            grid[y, x] = value
    return Board(board.cols, board.rows, grid)


def clear_lines(board: Board) -> Tuple[Board, int]:
    full = np.all(board.grid != EMPTY, axis=1)
    num = int(full.sum())
    if num == 0:
        return board, 0
    # Drop every full row at once and pad the top back to full height.
    kept = board.grid[~full]
    new_rows = np.zeros((num, board.cols), dtype=np.int8)
    return Board(board.cols, board.rows, np.vstack((new_rows, kept))), num


def ghost(piece: Piece, board: Board) -> Piece:
    resting = piece
    while True:
        below = resting.moved(0, 1)
        if collides(below, board):
            return resting
        resting = below


def column_heights(board: Board) -> List[int]:
    heights: List[int] = []
    for x in range(board.cols):
        filled = np.flatnonzero(board.grid[:, x])
        heights.append(board.rows - int(filled[0]) if filled.size else 0)
    return heights


def max_height(board: Board) -> int:
    # y=0 is top; find first non-empty from top
    non_empty_rows = np.where(np.any(board.grid != EMPTY, axis=1))[0]
    if non_empty_rows.size == 0:
        return 0
    return board.rows - int(non_empty_rows[0])


def count_holes(board: Board) -> int:
    holes = 0
    for x in range(board.cols):
        seen_block = False
        for cell in board.grid[:, x]:
            if cell != EMPTY:
                seen_block = True
            elif seen_block:
                holes += 1
    return holes


def bumpiness(board: Board) -> int:
    heights = column_heights(board)
    return sum(abs(heights[i] - heights[i + 1]) for i in range(len(heights) - 1))


def board_features(board: Board) -> Dict[str, float]:
    filled = int(np.count_nonzero(board.grid))
    return {
        "max_height": max_height(board),
        "holes": count_holes(board),
        "bumpiness": bumpiness(board),
        "filled_cells": filled,
        "fill_ratio": filled / float(board.rows * board.cols),
    }
