"""trento_core/thickness.py

Grid deposition passes of one event:
- nuclear thickness T_A, T_B from participant nucleons
- reduced thickness T_R = norm * M_p(T_A, T_B), its integral and centroid
- binary-collision density T_AB from colliding nucleon pairs

All passes write into caller-owned arrays of shape (nsteps, nsteps).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from .geometry import DepositionRule, Nucleon, Nucleus
from .grid import Grid
from .physics import TINY, MeanFn

logger = logging.getLogger(__name__)


def thickness_fn(rule: DepositionRule):
    """rule.thickness as an array function of (nucleon, X, Y).

    Rules that set `vectorized = True` get the meshgrid arrays directly;
    any other rule is evaluated one cell center at a time.
    """
    if getattr(rule, "vectorized", False):
        return rule.thickness
    return np.vectorize(rule.thickness, excluded={0}, otypes=[float])


def _add_subgrid(TX: np.ndarray, grid: Grid, bounds, values_fn) -> None:
    """Add values_fn(X, Y) onto the inclusive index rectangle `bounds`."""
    ixmin, ixmax, iymin, iymax = bounds
    if ixmax < ixmin or iymax < iymin:
        return
    X, Y = grid.cell_centers(ixmin, ixmax, iymin, iymax)
    TX[iymin:iymax + 1, ixmin:ixmax + 1] += values_fn(X, Y)


def deposit_thickness(nucleus: Nucleus, rule: DepositionRule, grid: Grid, TX: np.ndarray) -> int:
    """Fill TX with the thickness of `nucleus`; return its participant count.

    Each participant is added only to the subgrid covering its support box
    rather than looping over the whole grid per nucleon. This reduces the
    number of profile evaluations by roughly (grid area)/(support area).
    """
    TX.fill(0.0)
    npart = 0
    thickness = thickness_fn(rule)

    for nucleon in nucleus:
        if not nucleon.is_participant():
            continue
        npart += 1
        bounds = grid.index_bounds(rule.boundary(nucleon))
        _add_subgrid(TX, grid, bounds, lambda X, Y: thickness(nucleon, X, Y))

    return npart


@dataclass(frozen=True)
class ReducedThickness:
    multiplicity: float
    ixcm: float  # centroid, grid-index units
    iycm: float
    degenerate: bool = False


def reduced_thickness(
    TA: np.ndarray,
    TB: np.ndarray,
    mean: MeanFn,
    norm: float,
    grid: Grid,
    TR: np.ndarray,
) -> ReducedThickness:
    """TR = norm * mean(TA, TB); return multiplicity and centroid.

    The centroid is kept in index units; multiplying by dxy would cancel in
    every relative coordinate downstream. If nothing was deposited the
    centroid falls back to the grid center.
    """
    TR[...] = norm * mean(TA, TB)
    total = float(TR.sum())
    multiplicity = grid.dxy * grid.dxy * total

    if not total > TINY:
        logger.warning("Empty reduced-thickness field; centroid set to the grid center.")
        c = grid.center_index
        return ReducedThickness(multiplicity, ixcm=c, iycm=c, degenerate=True)

    iy, ix = np.indices(TR.shape, dtype=float)
    ixcm = float((TR * ix).sum()) / total
    iycm = float((TR * iy).sum()) / total
    return ReducedThickness(multiplicity, ixcm=ixcm, iycm=iycm)


def deposit_collision_density(
    collisions: Iterable[Tuple[Nucleon, Nucleon]],
    rule: DepositionRule,
    grid: Grid,
    TAB: np.ndarray,
) -> int:
    """Fill TAB with sum over colliding pairs of T_a(x, y) * T_b(x, y).

    A pair only contributes where both supports overlap; pairs with disjoint
    supports still count as collisions. Returns the collision count.
    """
    TAB.fill(0.0)
    ncoll = 0
    thickness = thickness_fn(rule)

    for a, b in collisions:
        ncoll += 1
        ax0, ax1, ay0, ay1 = rule.boundary(a)
        bx0, bx1, by0, by1 = rule.boundary(b)
        box = (max(ax0, bx0), min(ax1, bx1), max(ay0, by0), min(ay1, by1))
        if box[1] < box[0] or box[3] < box[2]:
            continue
        _add_subgrid(
            TAB, grid, grid.index_bounds(box),
            lambda X, Y: thickness(a, X, Y) * thickness(b, X, Y),
        )

    return ncoll
