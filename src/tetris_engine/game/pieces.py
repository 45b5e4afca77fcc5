from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


def _frozen(shape: Shape) -> Shape:
    shape = np.array(shape, dtype=np.int8)
    shape.flags.writeable = False
    return shape


def rotate_cw(shape: Shape) -> Shape:
    """Transpose the matrix and reverse each row (90 degrees clockwise)."""
    return _frozen(np.rot90(shape, 1, axes=(1, 0)))


BASE_SHAPES = {
    TetrominoType.I: _frozen([[1, 1, 1, 1]]),
    TetrominoType.O: _frozen([[1, 1], [1, 1]]),
    TetrominoType.T: _frozen([[0, 1, 0], [1, 1, 1]]),
    TetrominoType.S: _frozen([[0, 1, 1], [1, 1, 0]]),
    TetrominoType.Z: _frozen([[1, 1, 0], [0, 1, 1]]),
    TetrominoType.J: _frozen([[1, 0, 0], [1, 1, 1]]),
    TetrominoType.L: _frozen([[0, 0, 1], [1, 1, 1]]),
}


@dataclass(frozen=True, eq=False)
class Piece:
    """A tetromino placed on the board.

    ``x``/``y`` locate the top-left corner of ``shape`` in board space. ``y``
    may be negative while the piece is still above the visible field.
    """

    kind: TetrominoType
    shape: Shape = field(repr=False)
    x: int = 0
    y: int = 0

    @classmethod
    def spawn(cls, kind: TetrominoType, x: int, y: int) -> "Piece":
        return cls(kind, BASE_SHAPES[kind], x, y)

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    def moved(self, dx: int, dy: int) -> "Piece":
        return Piece(self.kind, self.shape, self.x + dx, self.y + dy)

    def rotated(self) -> "Piece":
        return Piece(self.kind, rotate_cw(self.shape), self.x, self.y)

    def cells(self) -> List[Tuple[int, int]]:
        cells: List[Tuple[int, int]] = []
        for dy in range(self.height):
            for dx in range(self.width):
                if self.shape[dy, dx]:
                    cells.append((self.x + dx, self.y + dy))
        return cells


def random_kind(rng: random.Random) -> TetrominoType:
    # Uniform over the seven types with no memory of previous draws.
    return rng.choice(list(TetrominoType))
