"""Kinetic parameter fitting CLI.

Usage:
    python -m pyrofit.cli.run_fit data.csv --pop 100 --gen 1000
    python -m pyrofit.cli.run_fit data.csv --config fit.yaml --outdir ./results

Outputs:
    results.xy  - Best genome summary and the aligned Time,Temp,Exp,Model table
    stats.xy    - One "gen best mean stdev" row per generation
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from pydantic import ValidationError

from ..core.config import default_config, load_config, merge_config
from ..core.logging import get_logger, set_log_level
from ..kinetics.dataset import load_dataset

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_OUTPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fit Arrhenius pyrolysis kinetics [A, E, NS, yinf] to TGA data"
    )
    parser.add_argument("data", type=str, help="Experimental data file (time, temperature, mass fraction)")
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--pop", type=int, default=None, help="Population size")
    parser.add_argument("--gen", type=int, default=None, help="Number of generations")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--outdir", type=str, default=None, help="Output directory")
    parser.add_argument(
        "--mutation-policy",
        type=str,
        default=None,
        choices=["sequential", "independent", "proportional"],
        help="How the mutation sub-operators are combined",
    )
    parser.add_argument(
        "--print-every", type=float, default=None, help="Console report period (seconds)"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    ga: dict[str, Any] = {}
    output: dict[str, Any] = {}
    if args.pop is not None:
        ga["pop_size"] = args.pop
    if args.gen is not None:
        ga["max_gen"] = args.gen
    if args.seed is not None:
        ga["seed"] = args.seed
    if args.mutation_policy is not None:
        ga["mutation_policy"] = args.mutation_policy
    if args.outdir is not None:
        output["outdir"] = args.outdir
    if args.print_every is not None:
        output["print_every_sec"] = args.print_every
    return {"ga": ga, "output": output}


def main(argv: list[str] | None = None) -> int:
    """Run a kinetic fit.

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 = success, 1 = configuration/data error, 2 = output failure).
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_log_level("DEBUG")
    logger = get_logger("pyrofit.cli")

    # Import here to avoid loading scipy at module level
    from ..evolution.engine import run_fit

    try:
        base = load_config(args.config) if args.config else default_config()
        config = merge_config(base, _overrides(args))
        dataset = load_dataset(args.data)
    except (ValueError, ValidationError, FileNotFoundError) as e:
        logger.error("invalid configuration or data", error=str(e))
        return EXIT_CONFIG

    logger.info(
        "starting fit",
        data=args.data,
        n_samples=len(dataset),
        pop_size=config.ga.pop_size,
        max_gen=config.ga.max_gen,
        seed=config.ga.seed,
    )

    try:
        result = run_fit(dataset, config)
    except OSError as e:
        logger.error("output failure", error=str(e))
        return EXIT_OUTPUT

    logger.info(
        "fit complete",
        fitness=result.best.fitness,
        n_evals=result.n_evals,
        results=str(result.results_path),
        **result.best.as_dict(),
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
