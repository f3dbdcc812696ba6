"""trento_core/observables.py

Harmonic observables of the reduced-thickness field about its centroid:
eccentricities ε_n, participant-plane angles Φ_n, radii R_n (n = 2..5)
and the integrated entropy.

The eccentricity harmonics are weighted averages of r^n exp(i n φ) over the
entropy profile. The naive way to get exp(i n φ) at a point is

    φ = arctan2(y, x);  re = cos(n φ);  im = sin(n φ)

which costs three transcendental calls per cell. Instead cos and sin are
written directly in x and y via the multiple-angle formulas, e.g.

    r^2 sin(2 arctan2(y, x)) = 2 r^2 sin(φ) cos(φ) = 2 x y

which also cancels the r^n weight for every n. Only r^3 and r^5 need a
square root. `naive_moments` keeps the trig version for cross-checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Union

import numpy as np

from .physics import TINY, entropy_density_powerlaw

HARMONICS = (2, 3, 4, 5)

_KINDS = {
    "ecc": "eccentricity",
    "psi": "participant_plane",
    "radius": "radius",
}


@dataclass(frozen=True)
class Observables:
    """Per-event harmonic observables keyed by harmonic order."""
    eccentricity: Dict[int, float] = field(default_factory=lambda: dict.fromkeys(HARMONICS, 0.0))
    participant_plane: Dict[int, float] = field(default_factory=lambda: dict.fromkeys(HARMONICS, 0.0))
    radius: Dict[int, float] = field(default_factory=lambda: dict.fromkeys(HARMONICS, 0.0))
    entropy: float = 0.0

    def __getitem__(self, key: Union[str, tuple]) -> float:
        """obs["ecc", 2], obs["psi", 3], obs["radius", 4] or obs["entropy"]."""
        if key == "entropy":
            return self.entropy
        msg = f"No observable {key!r}; kinds are {sorted(_KINDS)} and orders {HARMONICS}."
        if not (isinstance(key, tuple) and len(key) == 2):
            raise KeyError(msg)
        kind, n = key
        try:
            return getattr(self, _KINDS[kind])[n]
        except KeyError:
            raise KeyError(msg) from None

    def as_dict(self) -> Dict[str, float]:
        out = {}
        for n in HARMONICS:
            out[f"e{n}"] = self.eccentricity[n]
            out[f"psi{n}"] = self.participant_plane[n]
            out[f"r{n}"] = self.radius[n]
        out["entropy"] = self.entropy
        return out


def _relative_coords(shape, ixcm: float, iycm: float):
    iy, ix = np.indices(shape, dtype=float)
    return ix - ixcm, iy - iycm


def trig_free_moments(t: np.ndarray, x: np.ndarray, y: np.ndarray) -> Dict[int, tuple]:
    """Return {n: (re_n, im_n, wt_n)} with re_n = Σ t r^n cos(nφ), im_n = Σ t r^n sin(nφ)
    and wt_n = Σ t r^n, for flattened cell arrays t, x, y."""
    x2 = x * x
    x3 = x2 * x
    x4 = x2 * x2

    y2 = y * y
    y3 = y2 * y
    y4 = y2 * y2

    r2 = x2 + y2
    r = np.sqrt(r2)
    r4 = r2 * r2

    xy = x * y
    x2y2 = x2 * y2

    return {
        2: (np.sum(t * (x2 - y2)),
            np.sum(t * 2.0 * xy),
            np.sum(t * r2)),
        3: (np.sum(t * (x3 - 3.0 * x * y2)),
            np.sum(t * (3.0 * x2 * y - y3)),
            np.sum(t * r2 * r)),
        4: (np.sum(t * (x4 + y4 - 6.0 * x2y2)),
            np.sum(t * 4.0 * xy * (x2 - y2)),
            np.sum(t * r4)),
        5: (np.sum(t * x * (x4 - 10.0 * x2y2 + 5.0 * y4)),
            np.sum(t * y * (5.0 * x4 - 10.0 * x2y2 + y4)),
            np.sum(t * r4 * r)),
    }


def naive_moments(t: np.ndarray, x: np.ndarray, y: np.ndarray) -> Dict[int, tuple]:
    """Same as trig_free_moments, via arctan2/cos/sin."""
    phi = np.arctan2(y, x)
    r = np.hypot(x, y)
    out = {}
    for n in HARMONICS:
        rn = r ** n
        out[n] = (np.sum(t * rn * np.cos(n * phi)),
                  np.sum(t * rn * np.sin(n * phi)),
                  np.sum(t * rn))
    return out


def extract_observables(
    TR: np.ndarray,
    ixcm: float,
    iycm: float,
    dxy: float,
    *,
    entropy_density: Callable = entropy_density_powerlaw,
    moments: Callable = trig_free_moments,
) -> Observables:
    """Compute Observables from the reduced thickness TR about (ixcm, iycm).

    Cells with TR < TINY are treated as empty and excluded from every sum.
    """
    x, y = _relative_coords(TR.shape, ixcm, iycm)
    keep = TR >= TINY
    if not keep.any():
        return Observables()

    t = TR[keep]
    x = x[keep]
    y = y[keep]

    total = float(np.sum(t))
    entropy = dxy * dxy * float(np.sum(entropy_density(t)))

    ecc, psi, rad = {}, {}, {}
    for n, (re, im, wt) in moments(t, x, y).items():
        re, im, wt = float(re), float(im), float(wt)
        ecc[n] = np.sqrt(re * re + im * im) / max(wt, TINY)
        # n-fold symmetry: the plane angle lives in [0, 2π/n]
        psi[n] = (np.arctan2(im, re) + np.pi) / n
        rad[n] = dxy * dxy * max(wt, TINY) / max(total, TINY)

    return Observables(
        eccentricity={n: float(ecc[n]) for n in HARMONICS},
        participant_plane={n: float(psi[n]) for n in HARMONICS},
        radius={n: float(rad[n]) for n in HARMONICS},
        entropy=entropy,
    )
