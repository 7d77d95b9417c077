from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from duckchess.config import EngineSettings


def test_defaults() -> None:
    s = EngineSettings()
    assert s.default_engine == "mixed"
    assert s.alphabeta_depth == 2
    assert s.steps_per_tick == 10000
    assert s.iterations_per_tick == 100
    assert s.max_rollout_plies == 20
    assert s.exploration == pytest.approx(math.sqrt(2))
    assert s.rollout_policy == "random"
    assert s.tick_budget_ms is None
    assert s.seed is None


def test_from_env_reads_prefixed_variables() -> None:
    s = EngineSettings.from_env(
        {
            "DUCKCHESS_DEFAULT_ENGINE": "alphabeta",
            "DUCKCHESS_ALPHABETA_DEPTH": "3",
            "DUCKCHESS_ROLLOUT_POLICY": "heuristic",
            "DUCKCHESS_SEED": "17",
            "DUCKCHESS_TICK_BUDGET_MS": "",
            "UNRELATED": "x",
        }
    )
    assert s.default_engine == "alphabeta"
    assert s.alphabeta_depth == 3
    assert s.rollout_policy == "heuristic"
    assert s.seed == 17
    assert s.tick_budget_ms is None


def test_from_env_uses_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DUCKCHESS_MCTS_ITERATIONS", "500")
    assert EngineSettings.from_env().mcts_iterations == 500


@pytest.mark.parametrize(
    "env",
    [
        {"DUCKCHESS_DEFAULT_ENGINE": "stockfish"},
        {"DUCKCHESS_ALPHABETA_DEPTH": "0"},
        {"DUCKCHESS_EXPLORATION": "-1"},
        {"DUCKCHESS_STEPS_PER_TICK": "lots"},
    ],
)
def test_invalid_values_raise(env: dict) -> None:
    with pytest.raises(ValidationError):
        EngineSettings.from_env(env)
