"""Single-step Arrhenius decomposition model.

Forward model mapping kinetic parameters to a simulated mass-fraction curve
aligned to an experimental dataset:

    dy/dt = -A * exp(-E / (R * T(t))) * max(y - yinf, 0) ** NS
    y(t0) = mass_fraction[0]

T(t) is linearly interpolated from the measured temperature program. The
integration is evaluated at the experimental sample times, so the returned
trajectory has one value per sample.

The solver is stepped explicitly so that cost stays bounded for any
parameter vector:
    - a negative or non-finite rate constant is divergence (NaN trajectory)
    - y leaving [min(yinf, 0) - 1, y0 + 1] or going non-finite is divergence
    - more than MAX_STEPS solver steps raises RuntimeError

A fresh trajectory array is allocated per call; there is no shared scratch
buffer, so calls do not interfere with each other.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable, Sequence

import numpy as np
from scipy.integrate import BDF, LSODA, RK23, RK45, Radau

from ..core.constants import N_GENES, R_GAS
from .dataset import ExperimentalDataset

# (params, dataset) -> trajectory of len(dataset)
ForwardModel = Callable[[np.ndarray, ExperimentalDataset], np.ndarray]

SOLVERS = {"LSODA": LSODA, "RK23": RK23, "RK45": RK45, "BDF": BDF, "Radau": Radau}

# LSODA switches to BDF when the rate constant makes the problem stiff, which
# keeps the cost bounded for extreme A/E pairs; RK23 is the explicit option.
DEFAULT_METHOD = "LSODA"
RTOL = 1e-6
ATOL = 1e-9
MAX_STEPS = 5000
BOUND_MARGIN = 1.0


def rate_constant(A: float, E: float, temperature: float | np.ndarray) -> float | np.ndarray:
    """Arrhenius rate constant k(T) = A * exp(-E / (R T))."""
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return A * np.exp(-E / (R_GAS * np.asarray(temperature, dtype=np.float64)))


def simulate(
    params: Sequence[float] | np.ndarray,
    dataset: ExperimentalDataset,
    method: str = DEFAULT_METHOD,
) -> np.ndarray:
    """Simulate the mass-fraction trajectory for a parameter vector.

    Args:
        params: [A, E, NS, yinf].
        dataset: Experimental dataset providing the time/temperature program
            and the initial mass fraction.
        method: Solver name, one of SOLVERS.

    Returns:
        Predicted mass fraction per sample (length len(dataset)). Entries
        after index 0 are NaN when the integration fails or diverges.

    Raises:
        ValueError: Wrong parameter count or unknown method.
        RuntimeError: The solver exceeded MAX_STEPS steps.
    """
    if len(params) != N_GENES:
        raise ValueError(f"Expected {N_GENES} parameters, got {len(params)}")
    if method not in SOLVERS:
        raise ValueError(f"Unknown integration method {method!r}; expected one of {sorted(SOLVERS)}")

    A, E, NS, yinf = (float(p) for p in params)
    t_data = dataset.time
    T_data = dataset.temperature
    n = len(dataset)

    trajectory = np.full(n, np.nan, dtype=np.float64)
    y0 = float(dataset.mass_fraction[0])
    trajectory[0] = y0

    # Repeated sample times are integrated once and mapped back
    t_eval, inverse = np.unique(t_data, return_inverse=True)
    if len(t_eval) == 1:
        trajectory[:] = y0
        return trajectory

    # k(T) is monotone in T, so the sampled temperatures bound every interpolated value
    k_data = rate_constant(A, E, T_data)
    if not (np.all(np.isfinite(k_data)) and np.all(k_data >= 0.0)):
        return trajectory
    if not (np.isfinite(NS) and np.isfinite(yinf)):
        return trajectory

    lower = min(yinf, 0.0) - BOUND_MARGIN
    upper = y0 + BOUND_MARGIN

    def rhs(t: float, y: np.ndarray) -> np.ndarray:
        k = rate_constant(A, E, np.interp(t, t_data, T_data))
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            return -k * np.maximum(y - yinf, 0.0) ** NS

    if not np.all(np.isfinite(rhs(float(t_eval[0]), np.array([y0])))):
        return trajectory

    values = np.full(len(t_eval), np.nan, dtype=np.float64)
    values[0] = y0
    filled = 1

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        solver = SOLVERS[method](
            rhs, float(t_eval[0]), [y0], float(t_eval[-1]), rtol=RTOL, atol=ATOL
        )
        n_steps = 0
        while solver.status == "running":
            if n_steps >= MAX_STEPS:
                raise RuntimeError(f"{method} integration exceeded {MAX_STEPS} steps")
            solver.step()
            n_steps += 1
            if solver.status == "failed":
                return trajectory

            y = float(solver.y[0])
            if not (np.isfinite(y) and lower <= y <= upper):
                return trajectory

            stop = int(np.searchsorted(t_eval, solver.t, side="right"))
            if stop > filled:
                values[filled:stop] = solver.dense_output()(t_eval[filled:stop])[0]
                filled = stop

    return values[inverse]


def make_model(method: str = DEFAULT_METHOD) -> ForwardModel:
    """Bind an integration method into a ForwardModel callable."""

    def model(params: np.ndarray, dataset: ExperimentalDataset) -> np.ndarray:
        return simulate(params, dataset, method=method)

    return model
