"""trento_core/event.py

Event-by-event reduced-thickness initial conditions.

An Event owns its grids and is reused across events:

    event = Event(EventConfig(normalization=16.0, grid_step=0.2, grid_max=10.0))
    for nucA, nucB in sampler:
        event.compute(nucA, nucB, GaussianNucleonProfile(0.5))
        ecc2 = event.observables["ecc", 2]

Each compute() resets every field and counter first, so one instance per
worker is enough when events are run in parallel.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

import numpy as np

from .geometry import DepositionRule, Nucleon, Nucleus
from .grid import Grid, make_grid
from .observables import Observables, extract_observables
from .physics import entropy_density_powerlaw, generalized_mean, mean_family
from .thickness import deposit_collision_density, deposit_thickness, reduced_thickness

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Invalid event configuration."""


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_flag(name: str, value: Any) -> bool:
    """Boolean option from a bool, 0/1 or a command-line string like "no"."""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    raise ConfigError(f"{name} must be a boolean (true/false, yes/no, 1/0), got {value!r}.")


@dataclass(frozen=True)
class EventConfig:
    normalization: float
    grid_step: float   # fm
    grid_max: float    # fm, requested half-width
    reduced_thickness: float = 0.0  # generalized-mean exponent p
    ncoll: bool = False  # also build the binary-collision density

    def __post_init__(self):
        for name in ("normalization", "grid_step", "grid_max", "reduced_thickness"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be a real number, got {value!r}.") from None
            object.__setattr__(self, name, value)
        object.__setattr__(self, "ncoll", parse_flag("ncoll", self.ncoll))

        for name in ("normalization", "grid_step", "grid_max"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0.0):
                raise ConfigError(f"{name} must be finite and > 0, got {value}.")
        if not math.isfinite(self.reduced_thickness):
            raise ConfigError(
                f"reduced_thickness (p) must be finite, got {self.reduced_thickness}."
            )

    @classmethod
    def from_mapping(cls, var_map: Mapping[str, Any]) -> "EventConfig":
        """Build from command-line style options ("grid-step" or "grid_step")."""

        def get(key, default=None, required=True):
            for k in (key, key.replace("-", "_")):
                if k in var_map:
                    return var_map[k]
            if required:
                raise ConfigError(f"Missing configuration option '{key}'.")
            return default

        return cls(
            normalization=get("normalization"),
            grid_step=get("grid-step"),
            grid_max=get("grid-max"),
            reduced_thickness=get("reduced-thickness", 0.0, required=False),
            ncoll=get("ncoll", False, required=False),
        )


class Event:
    """Thickness grids and observables of one collision event."""

    def __init__(
        self,
        config: EventConfig,
        *,
        entropy_density: Callable = entropy_density_powerlaw,
    ):
        self.config = config
        self.norm = config.normalization
        self.with_ncoll = config.ncoll
        self.entropy_density = entropy_density

        self.grid: Grid = make_grid(config.grid_step, config.grid_max)
        self._mean = generalized_mean(config.reduced_thickness)

        self.TA = self.grid.zeros()
        self.TB = self.grid.zeros()
        self.TR = self.grid.zeros()
        self.TAB = self.grid.zeros()

        logger.debug(
            "Event grid: nsteps=%d dxy=%g xymax=%g; %s mean (p=%g)",
            self.nsteps, self.dxy, self.xymax,
            mean_family(config.reduced_thickness), config.reduced_thickness,
        )
        self.reset()

    # ---- grid parameters ----

    @property
    def dxy(self) -> float:
        return self.grid.dxy

    @property
    def nsteps(self) -> int:
        return self.grid.nsteps

    @property
    def xymax(self) -> float:
        return self.grid.xymax

    # ---- per-event state ----

    def reset(self) -> None:
        """Clear every field and counter."""
        for field in (self.TA, self.TB, self.TR, self.TAB):
            field.fill(0.0)
        self._npart = 0
        self._ncoll = 0
        self._multiplicity = 0.0
        self._collision_integral = 0.0
        c = self.grid.center_index
        self._ixcm = c
        self._iycm = c
        self._observables = Observables()

    def compute(
        self,
        nucleus_a: Nucleus,
        nucleus_b: Nucleus,
        rule: DepositionRule,
        collisions: Optional[Iterable[Tuple[Nucleon, Nucleon]]] = None,
    ) -> "Event":
        """Run one event: thickness -> reduced thickness -> observables."""
        if self.with_ncoll and collisions is None:
            raise ValueError("Collision density is enabled (ncoll) but no collision pairs were given.")

        self.reset()
        self._npart = deposit_thickness(nucleus_a, rule, self.grid, self.TA)
        self._npart += deposit_thickness(nucleus_b, rule, self.grid, self.TB)

        red = reduced_thickness(self.TA, self.TB, self._mean, self.norm, self.grid, self.TR)
        self._multiplicity = red.multiplicity
        self._ixcm, self._iycm = red.ixcm, red.iycm

        if self.with_ncoll:
            self._ncoll = deposit_collision_density(collisions, rule, self.grid, self.TAB)
            self._collision_integral = self.grid.integrate(self.TAB)

        self._observables = extract_observables(
            self.TR, self._ixcm, self._iycm, self.dxy,
            entropy_density=self.entropy_density,
        )
        logger.debug(
            "Event: npart=%d ncoll=%d multiplicity=%g",
            self._npart, self._ncoll, self._multiplicity,
        )
        return self

    # ---- results ----

    @property
    def npart(self) -> int:
        return self._npart

    @property
    def ncoll(self) -> int:
        return self._ncoll

    @property
    def multiplicity(self) -> float:
        return self._multiplicity

    @property
    def collision_integral(self) -> float:
        return self._collision_integral

    @property
    def centroid(self) -> tuple[float, float]:
        """Centroid in grid-index units (ix, iy)."""
        return (self._ixcm, self._iycm)

    @property
    def center_of_mass(self) -> tuple[float, float]:
        """Centroid in fm."""
        return self.grid.index_to_position(self._ixcm, self._iycm)

    @property
    def observables(self) -> Observables:
        return self._observables

    @property
    def eccentricity(self) -> dict:
        return dict(self._observables.eccentricity)

    @property
    def reduced_thickness_grid(self) -> np.ndarray:
        return self.TR

    @property
    def thickness_grids(self) -> tuple[np.ndarray, np.ndarray]:
        return (self.TA, self.TB)
