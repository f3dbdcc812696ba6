"""trento_core/geometry.py

Nucleon-level inputs to the grid engine:
- Nucleon / Nucleus containers (positions + participant flags)
- per-participant Gamma fluctuation weights
- deposition rules: truncated Gaussian and generalized-Gaussian nucleon
  thickness profiles with a finite square support

Positions come from elsewhere (an MC Glauber sampler, a file, a test);
nothing here samples nucleon positions or impact parameters.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Protocol, Sequence
from scipy.special import gamma


# -------------------------
# Nucleons
# -------------------------

@dataclass(frozen=True)
class Nucleon:
    """One nucleon in the transverse plane (fm)."""
    x: float
    y: float
    participant: bool = False
    weight: float = 1.0  # fluctuation factor multiplying the profile

    def is_participant(self) -> bool:
        return self.participant


class Nucleus:
    """Ordered collection of nucleons for one event."""

    def __init__(self, nucleons: Iterable[Nucleon] = ()):
        self._nucleons = list(nucleons)

    @classmethod
    def from_arrays(
        cls,
        xy: np.ndarray,
        participant: Sequence[bool],
        weights: Optional[Sequence[float]] = None,
    ) -> "Nucleus":
        """Build from an (A, 2) position array and per-nucleon flags."""
        xy = np.asarray(xy, dtype=float).reshape(-1, 2)
        participant = np.asarray(participant, dtype=bool)
        if participant.shape != (len(xy),):
            raise ValueError(
                f"participant flags have shape {participant.shape}, expected ({len(xy)},)."
            )
        if weights is None:
            weights = np.ones(len(xy))
        weights = np.asarray(weights, dtype=float)
        if weights.shape != (len(xy),):
            raise ValueError(f"weights have shape {weights.shape}, expected ({len(xy)},).")

        return cls(
            Nucleon(float(x), float(y), bool(p), float(w))
            for (x, y), p, w in zip(xy, participant, weights)
        )

    def __iter__(self) -> Iterator[Nucleon]:
        return iter(self._nucleons)

    def __len__(self) -> int:
        return len(self._nucleons)

    def __getitem__(self, i: int) -> Nucleon:
        return self._nucleons[i]

    @property
    def npart(self) -> int:
        return sum(1 for n in self._nucleons if n.participant)

    def participants(self) -> list[Nucleon]:
        return [n for n in self._nucleons if n.participant]

    def shifted(self, dx: float, dy: float = 0.0) -> "Nucleus":
        """Translated copy, e.g. projectile at +b/2 and target at -b/2."""
        return Nucleus(replace(n, x=n.x + dx, y=n.y + dy) for n in self._nucleons)


def sample_gamma_weights(nucleus: Nucleus, k: float, *, rng: np.random.Generator) -> Nucleus:
    """Copy of `nucleus` with Gamma(k, scale=1/k) weights on its participants.

    mean = 1, variance = 1/k; spectators keep weight 1.
    """
    k = float(k)
    if not k > 0.0:
        raise ValueError(f"Gamma shape k must be > 0, got {k}.")

    out = []
    for n in nucleus:
        if n.participant:
            n = replace(n, weight=float(rng.gamma(shape=k, scale=1.0 / k)))
        out.append(n)
    return Nucleus(out)


# -------------------------
# Deposition rules
# -------------------------

class DepositionRule(Protocol):
    """What the thickness accumulator needs from a nucleon profile."""

    def boundary(self, nucleon: Nucleon) -> tuple[float, float, float, float]:
        """Support box (xmin, xmax, ymin, ymax); the profile is zero outside."""
        ...

    def thickness(self, nucleon: Nucleon, x: float, y: float) -> float:
        """Thickness at one point. Rules with `vectorized = True` also take
        numpy arrays of x, y and return an array of the same shape."""
        ...


class _TruncatedProfile:
    """Radial profile cut off at a fixed radius around each nucleon."""

    rmax: float
    vectorized = True

    def boundary(self, nucleon: Nucleon) -> tuple[float, float, float, float]:
        r = self.rmax
        return (nucleon.x - r, nucleon.x + r, nucleon.y - r, nucleon.y + r)

    def thickness(self, nucleon: Nucleon, x, y):
        dx = np.asarray(x, dtype=float) - nucleon.x
        dy = np.asarray(y, dtype=float) - nucleon.y
        dsq = dx * dx + dy * dy
        T = nucleon.weight * self._profile(dsq)
        return np.where(dsq > self.rmax * self.rmax, 0.0, T)

    def _profile(self, dsq: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class GaussianNucleonProfile(_TruncatedProfile):
    r"""Gaussian nucleon thickness
    T(d) = 1/(2π w^2) exp(-d^2 / 2w^2),
    truncated (exactly zero) beyond `truncation` widths.
    """

    def __init__(self, width: float = 0.5, *, truncation: float = 5.0):
        if not width > 0.0:
            raise ValueError(f"Nucleon width must be > 0, got {width}.")
        if not truncation > 0.0:
            raise ValueError(f"Truncation must be > 0, got {truncation}.")
        self.width = float(width)
        self.rmax = float(truncation) * self.width
        self._prefactor = 1.0 / (2.0 * np.pi * self.width ** 2)
        self._neg_one_div_two_wsq = -0.5 / self.width ** 2

    def _profile(self, dsq):
        return self._prefactor * np.exp(dsq * self._neg_one_div_two_wsq)


class GeneralizedGaussianNucleonProfile(_TruncatedProfile):
    r"""Generalized Gaussian thickness (aHydro p+Pb proton shape):
    T(b) = n/(2π r^2 Γ(2/n)) exp[-(b/r)^n].

    Normalized so ∫ d^2b T(b) = 1 before truncation.
    """

    def __init__(self, n: float = 1.85, radius: float = 0.975, *, truncation: float = 5.0):
        if not n > 0.0 or not radius > 0.0:
            raise ValueError(f"Need n > 0 and radius > 0, got n={n}, radius={radius}.")
        if not truncation > 0.0:
            raise ValueError(f"Truncation must be > 0, got {truncation}.")
        self.n = float(n)
        self.radius = float(radius)
        self.rmax = float(truncation) * self.radius
        self._norm = self.n / (2.0 * np.pi * self.radius ** 2 * gamma(2.0 / self.n))

    def _profile(self, dsq):
        b = np.sqrt(dsq)
        return self._norm * np.exp(-(b / self.radius) ** self.n)
