"""Core module — types, constants, evaluator, configuration, artifacts.

Only the types are re-exported here; `pyrofit.core.evaluator` depends on the
kinetics package, which itself imports `pyrofit.core.constants`.
"""

from .types import (
    Evaluated,
    Genome,
    Population,
    RunStatistics,
    UNEVALUATED,
    Unevaluated,
    sort_population,
)

__all__ = [
    "Evaluated",
    "Genome",
    "Population",
    "RunStatistics",
    "UNEVALUATED",
    "Unevaluated",
    "sort_population",
]
