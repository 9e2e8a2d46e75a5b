"""Experimental thermogravimetric dataset and loader.

A dataset is an ordered sequence of (time, temperature, mass_fraction)
samples. It is immutable for the duration of a run: the column arrays are
read-only and every forward simulation is aligned to them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

import numpy as np


@dataclass(frozen=True)
class ExpRecord:
    """Single experimental sample."""

    time: float
    temperature: float
    mass_fraction: float


class ExperimentalDataset:
    """Read-only experimental TGA curve.

    Attributes:
        time: Sample times (s), non-decreasing.
        temperature: Sample temperatures (K).
        mass_fraction: Measured residual mass fraction [-].
    """

    def __init__(
        self,
        time: Sequence[float] | np.ndarray,
        temperature: Sequence[float] | np.ndarray,
        mass_fraction: Sequence[float] | np.ndarray,
    ) -> None:
        t = np.array(time, dtype=np.float64).ravel()
        temp = np.array(temperature, dtype=np.float64).ravel()
        y = np.array(mass_fraction, dtype=np.float64).ravel()

        if len(t) == 0:
            raise ValueError("Experimental dataset is empty")
        if not (len(t) == len(temp) == len(y)):
            raise ValueError(
                f"Column length mismatch: time={len(t)}, temperature={len(temp)}, "
                f"mass_fraction={len(y)}"
            )
        if not (np.all(np.isfinite(t)) and np.all(np.isfinite(temp)) and np.all(np.isfinite(y))):
            raise ValueError("Experimental dataset contains non-finite values")
        if np.any(np.diff(t) < 0):
            raise ValueError("Sample times must be non-decreasing")

        for arr in (t, temp, y):
            arr.flags.writeable = False

        self.time = t
        self.temperature = temp
        self.mass_fraction = y

    @classmethod
    def from_records(cls, records: Sequence[tuple[float, float, float]]) -> ExperimentalDataset:
        """Build from (time, temperature, mass_fraction) triples."""
        arr = np.asarray(records, dtype=np.float64)
        if arr.size == 0:
            raise ValueError("Experimental dataset is empty")
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise ValueError(f"Expected (n, 3) records, got shape {arr.shape}")
        return cls(arr[:, 0], arr[:, 1], arr[:, 2])

    def __len__(self) -> int:
        return len(self.time)

    def __getitem__(self, i: int) -> ExpRecord:
        return ExpRecord(
            time=float(self.time[i]),
            temperature=float(self.temperature[i]),
            mass_fraction=float(self.mass_fraction[i]),
        )

    def __iter__(self) -> Iterator[ExpRecord]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return (
            f"ExperimentalDataset(n={len(self)}, t=[{self.time[0]:g}, {self.time[-1]:g}], "
            f"T=[{self.temperature.min():g}, {self.temperature.max():g}])"
        )


def _is_numeric_row(line: str) -> bool:
    parts = line.replace(",", " ").split()
    try:
        [float(p) for p in parts]
    except ValueError:
        return False
    return bool(parts)


def load_dataset(path: str | Path) -> ExperimentalDataset:
    """Load a dataset from a three-column text file.

    Columns are time, temperature and mass fraction, separated by commas or
    whitespace. Lines starting with '#' are ignored, as is a single leading
    non-numeric header row.

    Args:
        path: Path to the data file.

    Returns:
        Parsed ExperimentalDataset.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path) as f:
        lines = [ln.strip() for ln in f if ln.strip() and not ln.lstrip().startswith("#")]

    if lines and not _is_numeric_row(lines[0]):
        lines = lines[1:]

    rows = []
    for lineno, line in enumerate(lines, start=1):
        parts = line.replace(",", " ").split()
        if len(parts) < 3:
            raise ValueError(f"{path}: row {lineno} has {len(parts)} columns, expected 3")
        try:
            rows.append(tuple(float(p) for p in parts[:3]))
        except ValueError as e:
            raise ValueError(f"{path}: row {lineno} is not numeric: {line!r}") from e

    if not rows:
        raise ValueError(f"Experimental dataset is empty: {path}")

    return ExperimentalDataset.from_records(rows)
