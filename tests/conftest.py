import os
import random
import sys

import pytest

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tests.helpers import board_from_rows  # noqa: E402
from tetris_engine.game import GameConfig, TetrisGame  # noqa: E402


@pytest.fixture
def game():
    return TetrisGame(GameConfig(), rng=random.Random(1234))


__all__ = [
    "board_from_rows",
]
