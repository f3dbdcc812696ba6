import logging
import math

import numpy as np
import pytest

from trento_core.geometry import GaussianNucleonProfile, Nucleon, Nucleus
from trento_core.physics import generalized_mean
from trento_core.thickness import (
    deposit_collision_density,
    deposit_thickness,
    reduced_thickness,
)


class PointRule:
    """Zero-area support: the profile only exists at the nucleon position."""

    def boundary(self, nucleon):
        return (nucleon.x, nucleon.x, nucleon.y, nucleon.y)

    def thickness(self, nucleon, x, y):
        return np.where((x == nucleon.x) & (y == nucleon.y), 1.0, 0.0)


def test_spectators_are_skipped(grid, profile, single):
    TX = grid.zeros() + 7.0
    npart = deposit_thickness(single(participant=False), profile, grid, TX)
    assert npart == 0
    assert not TX.any()


def test_zero_area_support_spectator_leaves_grid_unchanged(grid, single):
    TX = grid.zeros()
    assert deposit_thickness(single(0.3, 0.3, participant=False), PointRule(), grid, TX) == 0
    assert not TX.any()
    # a participant with zero-area support touches a single cell
    assert deposit_thickness(single(0.3, 0.3), PointRule(), grid, TX) == 1
    assert not TX.any()


def test_disjoint_supports_are_additive(grid):
    profile = GaussianNucleonProfile(0.3, truncation=4.0)
    a = Nucleon(-1.5, 0.0, True)
    b = Nucleon(1.5, 0.5, True)
    TA, TB, TAB = grid.zeros(), grid.zeros(), grid.zeros()
    deposit_thickness(Nucleus([a]), profile, grid, TA)
    deposit_thickness(Nucleus([b]), profile, grid, TB)
    assert deposit_thickness(Nucleus([a, b]), profile, grid, TAB) == 2
    np.testing.assert_array_equal(TAB, TA + TB)
    assert not (TA * TB).any()


def test_subgrid_matches_full_grid_loop(grid, profile, random_nuclei):
    nucleus, _ = random_nuclei
    TX = grid.zeros()
    npart = deposit_thickness(nucleus, profile, grid, TX)

    X, Y = grid.cell_centers()
    full = sum(profile.thickness(n, X, Y) for n in nucleus if n.participant)
    assert npart == nucleus.npart
    np.testing.assert_allclose(TX, full, rtol=1e-12, atol=1e-300)


def test_deposit_overwrites_previous_contents(grid, profile, single):
    TX = grid.zeros()
    deposit_thickness(single(1.0, 1.0), profile, grid, TX)
    first = TX.copy()
    deposit_thickness(single(1.0, 1.0), profile, grid, TX)
    np.testing.assert_array_equal(TX, first)


def test_nucleon_off_grid_is_clipped(grid, profile, single):
    TX = grid.zeros()
    assert deposit_thickness(single(50.0, -50.0), profile, grid, TX) == 1
    assert not TX.any()


def test_reduced_thickness_multiplicity_is_riemann_sum(grid, profile, random_nuclei):
    nuc_a, nuc_b = random_nuclei
    TA, TB, TR = grid.zeros(), grid.zeros(), grid.zeros()
    deposit_thickness(nuc_a, profile, grid, TA)
    deposit_thickness(nuc_b, profile, grid, TB)

    red = reduced_thickness(TA, TB, generalized_mean(0.0), 3.0, grid, TR)
    assert red.multiplicity == grid.integrate(TR)
    np.testing.assert_allclose(TR, 3.0 * np.sqrt(TA * TB))
    assert not red.degenerate

    iy, ix = np.indices(TR.shape)
    assert red.ixcm == pytest.approx((TR * ix).sum() / TR.sum())
    assert red.iycm == pytest.approx((TR * iy).sum() / TR.sum())


def test_reduced_thickness_symmetric_centroid(grid, profile, single):
    TA, TB, TR = grid.zeros(), grid.zeros(), grid.zeros()
    deposit_thickness(single(), profile, grid, TA)
    deposit_thickness(single(), profile, grid, TB)
    red = reduced_thickness(TA, TB, generalized_mean(1.0), 1.0, grid, TR)
    assert (red.ixcm, red.iycm) == pytest.approx((grid.center_index,) * 2, abs=1e-9)
    assert red.multiplicity == pytest.approx(1.0, rel=1e-3)


def test_reduced_thickness_empty_field_falls_back(grid, profile, single, caplog):
    TA, TB, TR = grid.zeros(), grid.zeros(), grid.zeros()
    deposit_thickness(single(), profile, grid, TA)

    with caplog.at_level(logging.WARNING, logger="trento_core.thickness"):
        red = reduced_thickness(TA, TB, generalized_mean(0.0), 1.0, grid, TR)

    assert red.degenerate
    assert red.multiplicity == 0.0
    assert (red.ixcm, red.iycm) == (grid.center_index, grid.center_index)
    assert "Empty reduced-thickness field" in caplog.text


def test_collision_density_of_coincident_pair(grid):
    profile = GaussianNucleonProfile(0.5)
    a, b = Nucleon(0.0, 0.0, True), Nucleon(0.0, 0.0, True)
    TAB = grid.zeros()
    assert deposit_collision_density([(a, b)], profile, grid, TAB) == 1
    # ∫ T^2 d^2x = 1/(4π w^2)
    assert grid.integrate(TAB) == pytest.approx(1.0 / (4.0 * np.pi * 0.25), rel=1e-3)


def test_collision_density_peaks_between_pair(grid, profile):
    a, b = Nucleon(-0.5, 0.0, True), Nucleon(0.5, 0.0, True)
    TAB = grid.zeros()
    deposit_collision_density([(a, b)], profile, grid, TAB)
    iy, ix = np.unravel_index(TAB.argmax(), TAB.shape)
    x, y = grid.index_to_position(ix, iy)
    assert abs(x) <= grid.dxy and abs(y) <= grid.dxy


def test_collision_density_disjoint_pair_counts_but_adds_nothing(grid, profile):
    a, b = Nucleon(-2.9, 0.0, True), Nucleon(2.9, 0.0, True)
    TAB = grid.zeros() + 1.0
    assert deposit_collision_density([(a, b), (b, b)], profile, grid, TAB) == 2
    ref = grid.zeros()
    deposit_collision_density([(b, b)], profile, grid, ref)
    np.testing.assert_array_equal(TAB, ref)


class ScalarGaussianRule:
    """Rule that only understands one query point at a time."""

    def __init__(self, width=0.4):
        self.width = width
        self.rmax = 5.0 * width

    def boundary(self, nucleon):
        r = self.rmax
        return (nucleon.x - r, nucleon.x + r, nucleon.y - r, nucleon.y + r)

    def thickness(self, nucleon, x, y):
        dsq = (x - nucleon.x) ** 2 + (y - nucleon.y) ** 2
        if dsq > self.rmax ** 2:
            return 0.0
        return math.exp(-dsq / (2.0 * self.width ** 2)) / (2.0 * math.pi * self.width ** 2)


def test_scalar_only_rule_is_evaluated_per_cell(grid, random_nuclei):
    nucleus, _ = random_nuclei
    scalar = ScalarGaussianRule(0.4)
    TX = grid.zeros()
    assert deposit_thickness(nucleus, scalar, grid, TX) == nucleus.npart

    ref = grid.zeros()
    deposit_thickness(nucleus, GaussianNucleonProfile(0.4), grid, ref)
    np.testing.assert_allclose(TX, ref, rtol=1e-12, atol=1e-15)


def test_scalar_only_rule_collision_density(grid):
    a, b = Nucleon(-0.2, 0.0, True), Nucleon(0.2, 0.1, True)
    TAB, ref = grid.zeros(), grid.zeros()
    assert deposit_collision_density([(a, b)], ScalarGaussianRule(0.5), grid, TAB) == 1
    deposit_collision_density([(a, b)], GaussianNucleonProfile(0.5), grid, ref)
    np.testing.assert_allclose(TAB, ref, rtol=1e-12, atol=1e-15)
