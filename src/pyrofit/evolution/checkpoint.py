"""Termination and per-generation reporting.

A Checkpoint is called once after every completed generation. It computes
RunStatistics, forwards them to every monitor and answers whether the run
should continue.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, TextIO

from ..core.logging import StructuredLogger, get_logger
from ..core.types import Genome, RunStatistics


class Monitor(Protocol):
    def __call__(self, stats: RunStatistics) -> None: ...


class GenerationContinue:
    """Stop after `max_gen` completed generations."""

    def __init__(self, max_gen: int) -> None:
        if max_gen < 0:
            raise ValueError(f"max_gen must be non-negative, got {max_gen}")
        self.max_gen = max_gen

    def __call__(self, generation: int) -> bool:
        return generation < self.max_gen


class TimedConsoleMonitor:
    """Log statistics at most once every `period_s` wall-clock seconds."""

    def __init__(
        self,
        period_s: float = 10.0,
        logger: StructuredLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.period_s = period_s
        self.logger = logger or get_logger(__name__)
        self.clock = clock
        self._last: float | None = None
        self.n_emitted = 0

    def __call__(self, stats: RunStatistics) -> None:
        now = self.clock()
        if self._last is not None and now - self._last < self.period_s:
            return
        self._last = now
        self.n_emitted += 1
        self.logger.info(
            "generation",
            gen=stats.generation,
            best=stats.best,
            mean=stats.mean,
            stdev=stats.stdev,
        )


class FileMonitor:
    """Append one delimited `gen best mean stdev` row per call.

    The file is opened and truncated on construction, so an unwritable
    location fails before the search starts.
    """

    def __init__(self, path: str | Path, delimiter: str = " ") -> None:
        self.path = Path(path)
        self.delimiter = delimiter
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh: TextIO | None = open(self.path, "w")
        except OSError as e:
            raise OSError(f"Unable to write {self.path}: {e}") from e

    def __call__(self, stats: RunStatistics) -> None:
        if self._fh is None:
            raise ValueError(f"FileMonitor for {self.path} is closed")
        row = self.delimiter.join(
            [str(stats.generation), repr(stats.best), repr(stats.mean), repr(stats.stdev)]
        )
        try:
            self._fh.write(row + "\n")
            self._fh.flush()
        except OSError as e:
            raise OSError(f"Unable to write {self.path}: {e}") from e

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> FileMonitor:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Checkpoint:
    """Continuator plus monitors, updated once per generation."""

    def __init__(self, continuator: GenerationContinue, monitors: Sequence[Monitor] = ()) -> None:
        self.continuator = continuator
        self.monitors: list[Monitor] = list(monitors)
        self.history: list[RunStatistics] = []

    def add(self, monitor: Monitor) -> Checkpoint:
        self.monitors.append(monitor)
        return self

    def __call__(self, generation: int, population: Sequence[Genome]) -> bool:
        stats = RunStatistics.from_population(generation, population)
        self.history.append(stats)
        for monitor in self.monitors:
            monitor(stats)
        return self.continuator(generation)
