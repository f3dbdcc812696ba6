"""trento_core/physics.py

Small, stable numerical pieces shared by the grid passes.
Keep this file boring and well-tested.

- the generalized mean family M_p(a, b) used to combine two thickness fields
- the entropy-density placeholder used by the observable pass

Conventions:
- thickness: fm^-2
- every function here accepts scalars or numpy arrays
"""

from __future__ import annotations

import math
from typing import Callable

import numpy as np

# Tolerance used for every degenerate denominator and "empty cell" test.
TINY = 1e-12

MeanFn = Callable[[np.ndarray, np.ndarray], np.ndarray]


def positive_pmean(p: float, a, b):
    r"""Generalized mean for p > 0:
    $$M_p(a, b) = \left(\tfrac{1}{2}(a^p + b^p)\right)^{1/p}.$$
    """
    return (0.5 * (np.power(a, p) + np.power(b, p))) ** (1.0 / p)


def negative_pmean(p: float, a, b):
    """Generalized mean for p < 0.

    Same as the positive version, but zero whenever either input is below
    TINY (a^p diverges there).
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    empty = (a < TINY) | (b < TINY)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        m = positive_pmean(p, a, b)
    return np.where(empty, 0.0, m)


def geometric_mean(a, b):
    """Generalized mean for p == 0: sqrt(a*b)."""
    return np.sqrt(np.multiply(a, b))


def generalized_mean(p: float) -> MeanFn:
    """Pick the mean function for exponent p.

    The choice is made once; the returned callable is applied to whole
    arrays, never re-dispatched per cell.
    """
    p = float(p)
    if not math.isfinite(p):
        raise ValueError(f"Generalized-mean exponent must be finite, got p={p}.")

    if abs(p) < TINY:
        return geometric_mean
    if p > 0.0:
        return lambda a, b: positive_pmean(p, a, b)
    return lambda a, b: negative_pmean(p, a, b)


def mean_family(p: float) -> str:
    """Human-readable name of the family selected by generalized_mean(p)."""
    if abs(p) < TINY:
        return "geometric"
    return "positive-power" if p > 0.0 else "negative-power"


def entropy_density_powerlaw(t, power: float = 4.0 / 3.0):
    """Placeholder EOS: entropy density ~ t^(4/3).

    Stands in for a tabulated equation of state until one is plugged in.
    """
    return np.power(t, power)
