from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris_engine.game import GameConfig, ScoringRules, TetrisGame, TetrominoType, board_features


class EnvAction(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


class TetrisEnv(gym.Env):
    """Gymnasium view of the engine.

    Each step applies one command and then, every ``gravity_every`` steps,
    one gravity tick (skipped after a hard drop, which already spawned a new
    piece). Gravity is step-driven here; the engine's wall-clock scheduler is
    not used.
    """

    metadata = {"render_modes": []}

    def __init__(self, config: Optional[GameConfig] = None,
                 rules: Optional[ScoringRules] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 gravity_every: int = 1,
                 max_episode_steps: int = 5000,
                 score_scale: float = 0.01,
                 terminal_penalty: float = -1.0) -> None:
        super().__init__()
        if gravity_every < 1:
            raise ValueError("gravity_every must be >= 1")
        self.game = TetrisGame(config, rules)
        self.gravity_every = int(gravity_every)
        self.max_episode_steps = int(max_episode_steps)
        self.score_scale = float(score_scale)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            "lines": 1.0,       # reward per line cleared
            "holes": 0.1,       # penalize holes created
            "bumpiness": 0.01,  # penalize bumpiness increase
            "height": 0.02,     # penalize max height increase
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        rows, cols = self.game.config.rows, self.game.config.cols
        n_kinds = len(TetrominoType)

        # Locked cells are positive piece values, the falling piece negative.
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_kinds, high=n_kinds, shape=(rows, cols), dtype=np.int8),
                "next": spaces.Discrete(n_kinds + 1),
            }
        )
        self.action_space = spaces.Discrete(len(EnvAction))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "board": self.game.get_state().astype(np.int8),
            "next": int(self.game.next_piece.kind),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "drop_interval": self.game.drop_interval,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.reset()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        assert self.action_space.contains(action), f"invalid action {action!r}"
        action = EnvAction(int(action))

        score_before = self.game.score
        lines_before = self.game.lines_cleared_total
        features_before = board_features(self.game.board)

        if action == EnvAction.LEFT:
            self.game.move_left()
        elif action == EnvAction.RIGHT:
            self.game.move_right()
        elif action == EnvAction.ROTATE:
            self.game.rotate()
        elif action == EnvAction.SOFT_DROP:
            self.game.tick()
        elif action == EnvAction.HARD_DROP:
            self.game.hard_drop()

        self._steps += 1
        if action != EnvAction.HARD_DROP and self._steps % self.gravity_every == 0:
            self.game.tick()

        features_after = board_features(self.game.board)
        lines = self.game.lines_cleared_total - lines_before

        reward_components: Dict[str, float] = {
            "score": self.score_scale * float(self.game.score - score_before),
            "lines": self.reward_weights["lines"] * float(lines),
            "holes": -self.reward_weights["holes"] * float(
                max(0, features_after["holes"] - features_before["holes"])),
            "bumpiness": -self.reward_weights["bumpiness"] * float(
                max(0, features_after["bumpiness"] - features_before["bumpiness"])),
            "height": -self.reward_weights["height"] * float(
                max(0, features_after["max_height"] - features_before["max_height"])),
        }
        terminated = self.game.game_over
        truncated = not terminated and self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, truncated, info
