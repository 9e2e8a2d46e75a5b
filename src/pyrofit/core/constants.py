"""Core constants for pyrofit.

This module defines system-wide invariants such as:
- Genome layout (gene names and count)
- Literal seed vector for the kinetic parameters
- Default evolutionary-search rates
- Sentinel fitness for diverged forward simulations
"""

from __future__ import annotations

# Genome layout
GENE_NAMES = ("A", "E", "NS", "yinf")
N_GENES = len(GENE_NAMES)

# Literal seed vector (domain-informed starting guesses)
A_INITIAL = 5.49e12  # 1/s - pre-exponential factor
E_INITIAL = 1.70e5  # J/mol - activation energy
NS_INITIAL = 3.56  # reaction order
YINF_INITIAL = 0.231642  # asymptotic (char) mass fraction

# Physical constants (universal)
R_GAS = 8.314462618  # J/(mol·K)

# Run control
SEED = 1337
POP_SIZE = 100
MAX_GEN = 1000
PRINT_EVERY_SEC = 10.0

# Selection
SELECTION_RATE = 2.0  # parents selected = floor(rate * pop_size)
TOURNAMENT_RATE = 0.8  # probability the better of two wins

# Variation
P_CROSS = 0.8
P_MUT = 0.5
ALFA = 10.0  # BLX extrapolation coefficient
EPSILON = 0.1  # uniform mutation half-width, relative to |gene|
SIGMA = 0.3  # normal mutation std dev, relative to |gene|

# Relative operator weights
SEGMENT_RATE = 0.5
HYPER_CUBE_RATE = 0.5
UNIFORM_MUT_RATE = 0.5
DET_MUT_RATE = 0.5
NORMAL_MUT_RATE = 0.5

# Fitness assigned when the forward model diverges; must lose every comparison
SENTINEL_FITNESS = -1e300

# Default artifact names
RESULTS_FILENAME = "results.xy"
STATS_FILENAME = "stats.xy"
