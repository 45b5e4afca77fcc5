"""Gymnasium environments for the falling-block engine."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .tetris_env import EnvAction, TetrisEnv

# Register the standard 10x20 playfield
register(
    id="Tetris-10x20-v0",
    entry_point="tetris_engine.env.tetris_env:TetrisEnv",
)

__all__ = ["EnvAction", "TetrisEnv"]
