import numpy as np
import pytest

from trento_core.geometry import GaussianNucleonProfile, Nucleon, Nucleus
from trento_core.grid import make_grid


@pytest.fixture
def grid():
    # 48 x 48 cells of 0.125 fm, xymax = 3 fm
    return make_grid(0.125, 3.0)


@pytest.fixture
def profile():
    return GaussianNucleonProfile(width=0.5)


@pytest.fixture
def random_nuclei():
    rng = np.random.default_rng(11)

    def make(A):
        xy = rng.normal(scale=1.2, size=(A, 2))
        return Nucleus.from_arrays(xy, rng.random(A) < 0.7)

    return make(20), make(20)


@pytest.fixture
def single():
    """Factory for a one-nucleon nucleus."""

    def make(x=0.0, y=0.0, participant=True, weight=1.0):
        return Nucleus([Nucleon(x, y, participant, weight)])

    return make
