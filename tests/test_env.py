import gymnasium as gym
import numpy as np
import pytest

import tetris_engine.env  # noqa: F401
from tetris_engine.env import EnvAction, TetrisEnv
from tetris_engine.game import Board, GameState, Piece, TetrominoType, rotate_cw


def test_registered_env_resets_into_observation_space():
    env = gym.make("Tetris-10x20-v0")
    obs, info = env.reset(seed=0)
    assert env.observation_space.contains(obs)
    assert obs["board"].shape == (20, 10)
    assert info["score"] == 0
    env.close()


def test_reset_with_seed_is_reproducible():
    env = TetrisEnv()
    first, _ = env.reset(seed=5)
    kind = env.game.piece.kind
    second, _ = env.reset(seed=5)
    assert env.game.piece.kind == kind
    assert np.array_equal(first["board"], second["board"])
    assert first["next"] == second["next"]


def test_falling_piece_is_negative_in_observation():
    env = TetrisEnv()
    env.reset(seed=1)
    env.game.piece = Piece.spawn(TetrominoType.O, 3, 0)
    obs, *_ = env.step(EnvAction.NONE)
    # One gravity tick moved the piece down a row.
    assert obs["board"][1, 3] == -int(TetrominoType.O)
    assert obs["board"][0, 3] == 0


def test_gravity_every_skips_ticks():
    env = TetrisEnv(gravity_every=3)
    env.reset(seed=1)
    env.step(EnvAction.NONE)
    env.step(EnvAction.NONE)
    assert env.game.piece.y == 0
    env.step(EnvAction.NONE)
    assert env.game.piece.y == 1


def test_hard_drop_step_does_not_tick_new_piece():
    env = TetrisEnv()
    env.reset(seed=2)
    env.step(EnvAction.HARD_DROP)
    assert env.game.piece.y == 0
    assert np.count_nonzero(env.game.board.grid) == 4


def test_repeated_hard_drops_terminate():
    env = TetrisEnv()
    env.reset(seed=3)
    terminated = False
    info = {}
    for _ in range(200):
        _, reward, terminated, truncated, info = env.step(EnvAction.HARD_DROP)
        assert not truncated
        if terminated:
            break
    assert terminated
    assert env.game.state is GameState.GAME_OVER
    assert info["reward_components"]["terminal"] == env.terminal_penalty


def test_truncation_at_max_steps():
    env = TetrisEnv(max_episode_steps=3)
    env.reset(seed=4)
    results = [env.step(EnvAction.NONE) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]


def test_line_clear_reward():
    env = TetrisEnv(reward_weights={"holes": 0.0, "bumpiness": 0.0, "height": 0.0})
    env.reset(seed=0)
    grid = np.zeros((20, 10), dtype=np.int8)
    grid[19, 1:] = int(TetrominoType.L)
    env.game.board = Board(10, 20, grid)
    env.game.piece = Piece(TetrominoType.I, rotate_cw(Piece.spawn(TetrominoType.I, 0, 0).shape), 0, 0)
    _, reward, terminated, _, info = env.step(EnvAction.HARD_DROP)
    assert not terminated
    assert info["score"] == 100
    assert info["reward_components"]["score"] == pytest.approx(1.0)
    assert info["reward_components"]["lines"] == pytest.approx(1.0)
    assert reward == pytest.approx(2.0)


def test_invalid_action_rejected():
    env = TetrisEnv()
    env.reset(seed=0)
    with pytest.raises(AssertionError):
        env.step(len(EnvAction))


def test_random_rollout_stays_in_space():
    env = gym.make("Tetris-10x20-v0", gravity_every=2)
    obs, _ = env.reset(seed=7)
    env.action_space.seed(7)
    for _ in range(300):
        obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
        assert env.observation_space.contains(obs)
        assert isinstance(reward, float)
        if terminated or truncated:
            obs, _ = env.reset()
    env.close()


def test_gravity_every_validated():
    with pytest.raises(ValueError):
        TetrisEnv(gravity_every=0)


def test_random_agent_runs():
    from tetris_engine.rl.random_agent import run_random

    assert isinstance(run_random(steps=50, seed=0), float)
