from __future__ import annotations

from typing import Tuple

from .grid import Board, collides
from .pieces import Piece


# Horizontal offsets tried, in order, when a rotation collides in place.
WALL_KICKS: Tuple[int, ...] = (-1, 1, -2, 2)


def rotate(piece: Piece, board: Board) -> Piece:
    """Rotate ``piece`` clockwise, kicking sideways if needed.

    Returns the original piece when neither the in-place rotation nor any
    of the kick offsets fits.
    """
    rotated = piece.rotated()
    if not collides(rotated, board):
        return rotated
    for dx in WALL_KICKS:
        kicked = rotated.moved(dx, 0)
        if not collides(kicked, board):
            return kicked
    return piece
