"""CLI entry points.

Note: submodules are not imported at import-time so `python -m pyrofit.cli.run_fit`
runs without `runpy` warnings.
"""

from __future__ import annotations


def run_fit_main(argv: list[str] | None = None) -> int:
    """Lazy wrapper for `pyrofit.cli.run_fit.main`."""

    from .run_fit import main

    return main(argv)


__all__ = ["run_fit_main"]
