"""Configuration management with pydantic and YAML support."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import numpy as np
import yaml
from pydantic import BaseModel, Field

from .constants import (
    A_INITIAL,
    ALFA,
    DET_MUT_RATE,
    E_INITIAL,
    EPSILON,
    HYPER_CUBE_RATE,
    MAX_GEN,
    NORMAL_MUT_RATE,
    NS_INITIAL,
    P_CROSS,
    P_MUT,
    POP_SIZE,
    PRINT_EVERY_SEC,
    RESULTS_FILENAME,
    SEED,
    SEGMENT_RATE,
    SELECTION_RATE,
    SIGMA,
    STATS_FILENAME,
    TOURNAMENT_RATE,
    UNIFORM_MUT_RATE,
    YINF_INITIAL,
)

BlendPolicy = Literal["proportional", "sequential", "independent"]


class SeedVector(BaseModel):
    """Starting guesses the initial population is spread around."""

    A: float = A_INITIAL
    E: float = E_INITIAL
    NS: float = NS_INITIAL
    yinf: float = YINF_INITIAL

    def to_array(self) -> np.ndarray:
        return np.array([self.A, self.E, self.NS, self.yinf], dtype=np.float64)


class GAConfig(BaseModel):
    """Evolutionary search settings."""

    pop_size: int = Field(default=POP_SIZE, ge=1)
    max_gen: int = Field(default=MAX_GEN, ge=0)
    seed: int = Field(default=SEED, ge=0)

    selection_rate: float = Field(default=SELECTION_RATE, gt=0.0)
    tournament_rate: float = Field(default=TOURNAMENT_RATE, ge=0.0, le=1.0)

    p_cross: float = Field(default=P_CROSS, ge=0.0, le=1.0)
    p_mut: float = Field(default=P_MUT, ge=0.0, le=1.0)
    alfa: float = Field(default=ALFA, ge=0.0)
    epsilon: float = Field(default=EPSILON, ge=0.0)
    sigma: float = Field(default=SIGMA, ge=0.0)

    segment_weight: float = Field(default=SEGMENT_RATE, ge=0.0)
    hypercube_weight: float = Field(default=HYPER_CUBE_RATE, ge=0.0)
    uniform_mut_weight: float = Field(default=UNIFORM_MUT_RATE, ge=0.0)
    det_mut_weight: float = Field(default=DET_MUT_RATE, ge=0.0)
    normal_mut_weight: float = Field(default=NORMAL_MUT_RATE, ge=0.0)

    crossover_policy: BlendPolicy = "proportional"
    mutation_policy: BlendPolicy = "sequential"


class OutputConfig(BaseModel):
    """Artifact locations and console cadence."""

    outdir: str = "."
    results_file: str = RESULTS_FILENAME
    stats_file: str = STATS_FILENAME
    print_every_sec: float = Field(default=PRINT_EVERY_SEC, ge=0.0)

    @property
    def results_path(self) -> Path:
        return Path(self.outdir) / self.results_file

    @property
    def stats_path(self) -> Path:
        return Path(self.outdir) / self.stats_file


class ModelConfig(BaseModel):
    """Forward model settings."""

    method: Literal["LSODA", "RK23", "RK45", "BDF", "Radau"] = "LSODA"


class FitConfig(BaseModel):
    """Root configuration object."""

    seed_vector: SeedVector = Field(default_factory=SeedVector)
    model: ModelConfig = Field(default_factory=ModelConfig)
    ga: GAConfig = Field(default_factory=GAConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(path: str | Path) -> FitConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Parsed FitConfig object.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return FitConfig.model_validate(data or {})


def save_config(config: FitConfig, path: str | Path) -> None:
    """Save configuration to YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)


def default_config() -> FitConfig:
    """Return default configuration."""
    return FitConfig()


def merge_config(base: FitConfig, overrides: dict[str, Any]) -> FitConfig:
    """Merge overrides into base configuration.

    Args:
        base: Base configuration.
        overrides: Nested dictionary of override values.

    Returns:
        New, re-validated configuration with overrides applied.
    """

    def deep_merge(d1: dict, d2: dict) -> dict:
        result = d1.copy()
        for k, v in d2.items():
            if k in result and isinstance(result[k], dict) and isinstance(v, dict):
                result[k] = deep_merge(result[k], v)
            else:
                result[k] = v
        return result

    return FitConfig.model_validate(deep_merge(base.model_dump(), overrides))
