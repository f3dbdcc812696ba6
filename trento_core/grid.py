"""trento_core/grid.py

Square transverse grid shared by every field of an event.

Grid parameters are fixed like so:
  1. step size dxy is taken from the configuration;
  2. nsteps = ceil(2*grid_max/dxy);
  3. the actual half-width is xymax = nsteps*dxy/2.
Hence if the step does not evenly divide the configured max, the actual max
is marginally larger (by at most one step).

Fields are numpy arrays of shape (nsteps, nsteps) indexed [iy, ix].
Cell (ix, iy) covers [ix*dxy - xymax, (ix+1)*dxy - xymax) along x (same for y)
and is sampled at its center.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


def clip(value: int, lo: int, hi: int) -> int:
    """Limit a value to [lo, hi]. Used to constrain grid indices."""
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


@dataclass(frozen=True)
class Grid:
    dxy: float
    nsteps: int
    xymax: float

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nsteps, self.nsteps)

    def zeros(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=float)

    def index(self, coord: float) -> int:
        """Physical coordinate -> clipped cell index (truncating toward zero)."""
        return clip(int((coord + self.xymax) / self.dxy), 0, self.nsteps - 1)

    def index_bounds(self, boundary) -> tuple[int, int, int, int]:
        """Map a support box {xmin, xmax, ymin, ymax} to inclusive index bounds."""
        xmin, xmax, ymin, ymax = boundary
        return (self.index(xmin), self.index(xmax), self.index(ymin), self.index(ymax))

    def centers(self, i0: int = 0, i1: int | None = None) -> np.ndarray:
        """Cell-center coordinates for indices i0..i1 (inclusive)."""
        if i1 is None:
            i1 = self.nsteps - 1
        return (np.arange(i0, i1 + 1, dtype=float) + 0.5) * self.dxy - self.xymax

    def cell_centers(self, ixmin: int = 0, ixmax: int | None = None,
                     iymin: int = 0, iymax: int | None = None):
        """Meshgrid (X, Y) of cell centers over an inclusive index rectangle."""
        x = self.centers(ixmin, ixmax)
        y = self.centers(iymin, iymax)
        return np.meshgrid(x, y, indexing="xy")

    def index_to_position(self, ix: float, iy: float) -> tuple[float, float]:
        """Fractional grid index -> physical (x, y) of that point."""
        return ((ix + 0.5) * self.dxy - self.xymax, (iy + 0.5) * self.dxy - self.xymax)

    @property
    def center_index(self) -> float:
        """Index coordinate of the physical origin (same along x and y)."""
        return 0.5 * (self.nsteps - 1)

    def integrate(self, field: np.ndarray) -> float:
        """Riemann-sum integral dxy^2 * sum(field)."""
        return float(self.dxy * self.dxy * np.sum(field))


def make_grid(grid_step: float, grid_max: float) -> Grid:
    if not grid_step > 0.0 or not math.isfinite(grid_step):
        raise ValueError(f"grid_step must be finite and > 0, got {grid_step}.")
    if not grid_max > 0.0 or not math.isfinite(grid_max):
        raise ValueError(f"grid_max must be finite and > 0, got {grid_max}.")

    nsteps = int(math.ceil(2.0 * grid_max / grid_step))
    return Grid(dxy=float(grid_step), nsteps=nsteps, xymax=0.5 * nsteps * grid_step)
