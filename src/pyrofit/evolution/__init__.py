"""Evolution module — population lifecycle and the generational loop."""

from .checkpoint import Checkpoint, FileMonitor, GenerationContinue, TimedConsoleMonitor
from .engine import EvolutionEngine, FitResult, run_fit
from .initializer import initialize
from .operators import (
    DetUniformMutation,
    HypercubeCrossover,
    NormalMutation,
    OperatorBlend,
    SegmentCrossover,
    UniformMutation,
)
from .replacement import plus_replace
from .selection import select, select_fraction
from .transform import SGATransform, make_crossover, make_mutation

__all__ = [
    "Checkpoint",
    "DetUniformMutation",
    "EvolutionEngine",
    "FileMonitor",
    "FitResult",
    "GenerationContinue",
    "HypercubeCrossover",
    "NormalMutation",
    "OperatorBlend",
    "SGATransform",
    "SegmentCrossover",
    "TimedConsoleMonitor",
    "UniformMutation",
    "initialize",
    "make_crossover",
    "make_mutation",
    "plus_replace",
    "run_fit",
    "select",
    "select_fraction",
]
