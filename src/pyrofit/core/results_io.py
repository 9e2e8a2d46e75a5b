"""Result artifact writing.

results.xy layout:
    Fitness:<f>, A:<a>, E:<e>, NS:<ns>, yinf:<y>
    Time,Temp,Exp,Model
    <t>,<T>,<exp>,<model>      (one row per sample)

The file is rendered in full, written to a temporary sibling and moved into
place, so a failed write never leaves a truncated artifact behind.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import numpy as np

from ..kinetics.dataset import ExperimentalDataset
from .types import Genome

RESULTS_HEADER = "Time,Temp,Exp,Model"


def format_summary(fitness: float, genes: np.ndarray) -> str:
    A, E, NS, yinf = (float(g) for g in genes)
    return f"Fitness:{fitness!r}, A:{A!r}, E:{E!r}, NS:{NS!r}, yinf:{yinf!r}"


def render_results(
    genome: Genome,
    dataset: ExperimentalDataset,
    trajectory: np.ndarray,
) -> str:
    """Render the results artifact text."""
    trajectory = np.asarray(trajectory, dtype=np.float64)
    if trajectory.shape != (len(dataset),):
        raise ValueError(
            f"Trajectory length {trajectory.shape} does not match dataset length {len(dataset)}"
        )

    lines = [format_summary(genome.fitness, genome.genes), RESULTS_HEADER]
    for rec, model in zip(dataset, trajectory):
        lines.append(f"{rec.time!r},{rec.temperature!r},{rec.mass_fraction!r},{float(model)!r}")
    return "\n".join(lines) + "\n"


def atomic_write_text(path: str | Path, text: str) -> Path:
    """Write `text` to `path` via a temporary file and os.replace.

    Raises:
        OSError: If the file cannot be written; the message names the path.
    """
    path = Path(path)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w") as f:
            f.write(text)
        # mkstemp creates 0600; match what open() would give under the umask
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_name, 0o666 & ~umask)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OSError(f"Unable to write {path}: {e}") from e
    return path


def save_results(
    path: str | Path,
    genome: Genome,
    dataset: ExperimentalDataset,
    trajectory: np.ndarray,
) -> Path:
    """Persist the best genome and its aligned simulated curve."""
    return atomic_write_text(path, render_results(genome, dataset, trajectory))


def load_results(path: str | Path) -> tuple[float, dict[str, float], np.ndarray]:
    """Read a results artifact back.

    Returns:
        (fitness, genes by name, table of shape (n, 4)).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")

    with open(path) as f:
        summary = f.readline().strip()
        header = f.readline().strip()
        if header != RESULTS_HEADER:
            raise ValueError(f"Unexpected results header in {path}: {header!r}")
        rows = [ln for ln in f if ln.strip()]

    fields = {}
    for item in summary.split(","):
        key, _, value = item.strip().partition(":")
        fields[key] = float(value)
    if "Fitness" not in fields:
        raise ValueError(f"Missing fitness in results summary of {path}: {summary!r}")
    fitness = fields.pop("Fitness")

    table = np.array([[float(v) for v in ln.split(",")] for ln in rows], dtype=np.float64)
    return fitness, fields, table.reshape(-1, 4)
