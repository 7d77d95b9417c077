from __future__ import annotations

import math
import os
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field


ENV_PREFIX = "DUCKCHESS_"

EngineName = Literal["alphabeta", "mcts", "mixed"]
RolloutPolicy = Literal["random", "heuristic"]


class EngineSettings(BaseModel):
    """Search defaults shared by the service, the HTTP API and the scripts."""

    default_engine: EngineName = "mixed"
    alphabeta_depth: int = Field(default=2, ge=1, le=8)
    steps_per_tick: int = Field(default=10000, ge=1)
    mcts_iterations: int = Field(default=2000, ge=1, le=1_000_000)
    iterations_per_tick: int = Field(default=100, ge=1)
    max_rollout_plies: int = Field(default=20, ge=0, le=1000)
    exploration: float = Field(default=math.sqrt(2), gt=0)
    rollout_policy: RolloutPolicy = "random"
    tick_budget_ms: Optional[int] = Field(default=None, ge=1)
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Build settings from ``DUCKCHESS_<FIELD>`` environment variables.

        Unset or empty variables keep their defaults.

        Raises:
            pydantic.ValidationError: If a variable does not validate.
        """
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                data[name] = raw
        return cls.model_validate(data)
