"""Real-valued variation operators and their weighted blends.

Crossover operators take two genomes and rewrite both in place (pair to
pair). Mutation operators rewrite one genome in place. Every operator
returns True when it changed genes; changed genomes go through
`Genome.set_genes`, which clears their fitness tag.

Half-widths and standard deviations are relative to each gene's magnitude,
since the genes span many orders of magnitude (A ~ 1e12, yinf ~ 0.2).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import numpy as np

from ..core.types import Genome

BLEND_POLICIES = ("proportional", "sequential", "independent")


class VariationOp(Protocol):
    def __call__(self, *genomes: Genome, rng: np.random.Generator) -> bool: ...


# ---------------------------------------------------------------------------
# Crossover
# ---------------------------------------------------------------------------


class SegmentCrossover:
    """BLX-style linear recombination with extrapolation.

    Per gene a coefficient f ~ U(-alfa, 1 + alfa) gives
    c1 = f*p1 + (1-f)*p2 and c2 = (1-f)*p1 + f*p2.
    """

    def __init__(self, alfa: float = 10.0) -> None:
        if alfa < 0:
            raise ValueError(f"alfa must be non-negative, got {alfa}")
        self.alfa = alfa

    def __call__(self, g1: Genome, g2: Genome, rng: np.random.Generator) -> bool:
        x, y = g1.genes, g2.genes
        if np.array_equal(x, y):
            return False
        f = rng.uniform(-self.alfa, 1.0 + self.alfa, size=len(x))
        g1.set_genes(f * x + (1.0 - f) * y)
        g2.set_genes((1.0 - f) * x + f * y)
        return True


class HypercubeCrossover:
    """Uniform sampling in the parents' hyper-rectangle, widened by alfa.

    Each child gene ~ U(min - alfa*r, max + alfa*r) with r = |p1 - p2|.
    """

    def __init__(self, alfa: float = 10.0) -> None:
        if alfa < 0:
            raise ValueError(f"alfa must be non-negative, got {alfa}")
        self.alfa = alfa

    def __call__(self, g1: Genome, g2: Genome, rng: np.random.Generator) -> bool:
        x, y = g1.genes, g2.genes
        if np.array_equal(x, y):
            return False
        r = np.abs(x - y)
        lo = np.minimum(x, y) - self.alfa * r
        hi = np.maximum(x, y) + self.alfa * r
        g1.set_genes(rng.uniform(lo, hi))
        g2.set_genes(rng.uniform(lo, hi))
        return True


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


class UniformMutation:
    """Every gene g -> U(g - epsilon*|g|, g + epsilon*|g|)."""

    def __init__(self, epsilon: float = 0.1) -> None:
        if epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {epsilon}")
        self.epsilon = epsilon

    def __call__(self, genome: Genome, rng: np.random.Generator) -> bool:
        x = genome.genes
        half = self.epsilon * np.abs(x)
        genome.set_genes(rng.uniform(x - half, x + half))
        return True


class DetUniformMutation:
    """Exactly one randomly chosen gene is perturbed uniformly."""

    def __init__(self, epsilon: float = 0.1) -> None:
        if epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {epsilon}")
        self.epsilon = epsilon

    def __call__(self, genome: Genome, rng: np.random.Generator) -> bool:
        x = genome.genes.copy()
        i = int(rng.integers(0, len(x)))
        half = self.epsilon * abs(x[i])
        x[i] = rng.uniform(x[i] - half, x[i] + half)
        genome.set_genes(x)
        return True


class NormalMutation:
    """Every gene g -> g + N(0, sigma*|g|)."""

    def __init__(self, sigma: float = 0.3) -> None:
        if sigma < 0:
            raise ValueError(f"sigma must be non-negative, got {sigma}")
        self.sigma = sigma

    def __call__(self, genome: Genome, rng: np.random.Generator) -> bool:
        x = genome.genes
        genome.set_genes(x + rng.normal(0.0, self.sigma * np.abs(x)))
        return True


# ---------------------------------------------------------------------------
# Weighted blends
# ---------------------------------------------------------------------------


class OperatorBlend:
    """Ordered list of (operator, weight) pairs with an explicit dispatch policy.

    Policies:
        proportional: exactly one operator, drawn with probability
            weight / sum(weights).
        sequential: operators are visited in order and each fires with
            probability min(weight, 1); the first that fires runs alone. If
            none fires, the last operator runs, so exactly one runs per call.
        independent: each operator fires with probability min(weight, 1);
            every operator that fires runs, in declared order (zero or more).
    """

    def __init__(
        self,
        operators: Sequence[tuple[Any, float]] = (),
        policy: str = "proportional",
    ) -> None:
        if policy not in BLEND_POLICIES:
            raise ValueError(f"Unknown blend policy {policy!r}; expected one of {BLEND_POLICIES}")
        self.policy = policy
        self.operators: list[Any] = []
        self.weights: list[float] = []
        for op, weight in operators:
            self.add(op, weight)

    def add(self, op: Any, weight: float) -> OperatorBlend:
        if weight < 0:
            raise ValueError(f"Operator weight must be non-negative, got {weight}")
        self.operators.append(op)
        self.weights.append(float(weight))
        return self

    def choose(self, rng: np.random.Generator) -> list[Any]:
        """Return the operators to apply for one invocation."""
        if not self.operators:
            raise ValueError("OperatorBlend has no operators")

        if self.policy == "proportional":
            total = sum(self.weights)
            if total <= 0:
                raise ValueError("OperatorBlend weights sum to zero")
            probs = np.asarray(self.weights) / total
            return [self.operators[int(rng.choice(len(self.operators), p=probs))]]

        fired = [op for op, w in zip(self.operators, self.weights) if rng.random() < min(w, 1.0)]
        # Both coin-flip policies draw once per operator on every call
        if self.policy == "sequential":
            return fired[:1] if fired else [self.operators[-1]]
        return fired

    def __call__(self, *genomes: Genome, rng: np.random.Generator) -> bool:
        changed = False
        for op in self.choose(rng):
            changed = op(*genomes, rng=rng) or changed
        return changed

    def __len__(self) -> int:
        return len(self.operators)
