"""Reduced-thickness initial conditions for heavy-ion collision events.

Given two nuclei (nucleon positions + participant flags) and a nucleon
thickness profile, this package:

- deposits participant thickness T_A, T_B on a square transverse grid
- combines them into the reduced thickness T_R = norm * M_p(T_A, T_B)
- extracts multiplicity, centroid, eccentricities ε_2..ε_5,
  participant-plane angles, radii and integrated entropy

All distances are in fm unless stated otherwise.
"""

from .event import ConfigError, Event, EventConfig
from .geometry import (
    GaussianNucleonProfile,
    GeneralizedGaussianNucleonProfile,
    Nucleon,
    Nucleus,
    sample_gamma_weights,
)
from .grid import Grid, make_grid
from .observables import HARMONICS, Observables
from .physics import TINY, entropy_density_powerlaw, generalized_mean

__all__ = [
    "ConfigError",
    "Event",
    "EventConfig",
    "GaussianNucleonProfile",
    "GeneralizedGaussianNucleonProfile",
    "Grid",
    "HARMONICS",
    "Nucleon",
    "Nucleus",
    "Observables",
    "TINY",
    "entropy_density_powerlaw",
    "generalized_mean",
    "make_grid",
    "sample_gamma_weights",
]
