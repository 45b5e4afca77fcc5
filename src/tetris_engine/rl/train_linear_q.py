from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from dataclasses import dataclass
from typing import List

import numpy as np

from tetris_engine.game import Board, GameConfig, Piece, TetrisGame, board_features, clear_lines, collides, ghost, merge
from tetris_engine.game.rotation import rotate

logger = logging.getLogger(__name__)

N_FEATURES = 7


@dataclass
class Placement:
    """A final resting spot reachable by rotating, shifting and hard-dropping."""

    rotations: int
    x: int
    landing: Piece


def _reachable_columns(piece: Piece, board: Board) -> List[int]:
    columns = [piece.x]
    for step in (-1, 1):
        shifted = piece.moved(step, 0)
        while not collides(shifted, board):
            columns.append(shifted.x)
            shifted = shifted.moved(step, 0)
    return sorted(columns)


def enumerate_placements(game: TetrisGame) -> List[Placement]:
    """List the landings ``play_placement`` can actually reach.

    Rotations go through the engine's kick logic, so a blocked turn may
    shift the piece or stop the sequence altogether.
    """
    board = game.board
    placements: List[Placement] = []
    shapes: List[np.ndarray] = []
    current = game.piece
    for r in range(4):
        if any(np.array_equal(current.shape, seen) for seen in shapes):
            break
        shapes.append(current.shape)
        for x in _reachable_columns(current, board):
            landing = ghost(current.moved(x - current.x, 0), board)
            placements.append(Placement(rotations=r, x=x, landing=landing))
        turned = rotate(current, board)
        if turned is current:
            break
        current = turned
    return placements


def extract_features(board: Board, landing: Piece) -> np.ndarray:
    before = board_features(board)
    after_board, lines = clear_lines(merge(landing, board))
    after = board_features(after_board)

    # Features: [bias, lines, lines^2, d_holes, d_bump, d_height, fill_ratio]
    return np.array([
        1.0,
        float(lines),
        float(lines * lines),
        float(after["holes"] - before["holes"]),
        float(after["bumpiness"] - before["bumpiness"]),
        float(after["max_height"] - before["max_height"]),
        float(after["fill_ratio"]),
    ], dtype=np.float32)


def play_placement(game: TetrisGame, placement: Placement) -> Piece:
    """Drive the engine's own commands toward ``placement`` and lock it.

    Returns the piece as it actually locked.
    """
    for _ in range(placement.rotations):
        game.rotate()
    for _ in range(game.config.cols):
        if game.piece.x == placement.x:
            break
        before = game.piece.x
        if game.piece.x > placement.x:
            game.move_left()
        else:
            game.move_right()
        if game.piece.x == before:
            # Blocked on the way; drop from where it stands.
            break
    locked = ghost(game.piece, game.board)
    game.hard_drop()
    return locked


def _print_progress(ep_idx: int, total: int, last_return: float, last_steps: int) -> None:
    width = 30
    filled = int(width * (ep_idx + 1) / max(1, total))
    bar = "=" * filled + "." * (width - filled)
    msg = f"\r[{bar}] {ep_idx + 1}/{total}  return={last_return:.1f}  pieces={last_steps}"
    print(msg, end="", file=sys.stdout, flush=True)


def train_linear_q(episodes: int = 200, epsilon: float = 0.1, alpha: float = 1e-3, gamma: float = 0.95,
                   seed: int = 0, max_pieces: int = 500, progress: bool = True) -> np.ndarray:
    rng = random.Random(seed)
    game = TetrisGame(GameConfig(random_seed=seed))
    w = np.zeros((N_FEATURES,), dtype=np.float32)

    for ep in range(episodes):
        game.rng.seed(seed + ep)
        game.reset()
        ep_return = 0.0
        pieces = 0

        while not game.game_over and pieces < max_pieces:
            placements = enumerate_placements(game)
            if not placements:
                break
            feats = [extract_features(game.board, p.landing) for p in placements]
            if rng.random() < epsilon:
                idx = rng.randrange(len(placements))
            else:
                idx = int(np.argmax([float(np.dot(w, phi)) for phi in feats]))
            board_before = game.board
            score_before = game.score
            locked = play_placement(game, placements[idx])
            phi_sa = extract_features(board_before, locked)
            reward = (game.score - score_before) / 100.0
            ep_return += reward
            pieces += 1

            if game.game_over:
                target = reward - 1.0
            else:
                next_placements = enumerate_placements(game)
                if not next_placements:
                    target = reward
                else:
                    q_next_max = max(float(np.dot(w, extract_features(game.board, p.landing)))
                                     for p in next_placements)
                    target = reward + gamma * q_next_max

            td_error = target - float(np.dot(w, phi_sa))
            w += alpha * td_error * phi_sa

        if progress:
            _print_progress(ep, episodes, ep_return, pieces)
        else:
            logger.info("Episode %d/%d return=%.1f pieces=%d lines=%d",
                        ep + 1, episodes, ep_return, pieces, game.lines_cleared_total)

    if progress:
        print()
    return w


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--episodes", type=int, default=200)
    p.add_argument("--epsilon", type=float, default=0.1)
    p.add_argument("--alpha", type=float, default=1e-3)
    p.add_argument("--gamma", type=float, default=0.95)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--max-pieces", type=int, default=500)
    p.add_argument("--save_path", type=str, default="models/linear_q_weights.npy")
    p.add_argument("--no-progress", action="store_true")
    args = p.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    w = train_linear_q(args.episodes, args.epsilon, args.alpha, args.gamma, args.seed,
                       max_pieces=args.max_pieces, progress=not args.no_progress)
    os.makedirs(os.path.dirname(args.save_path) or ".", exist_ok=True)
    np.save(args.save_path, w)
    print(f"Saved weights to {args.save_path}")


if __name__ == "__main__":  # pragma: no cover
    main()
