"""trento_core/plotting.py

Publication-oriented matplotlib helpers for event fields.

Default choices:
- no grid
- no figure titles by default
- clean spines
- consistent fonts/sizes
"""

from __future__ import annotations

import matplotlib as mpl
import matplotlib.pyplot as plt


PUB_RC = {
    "figure.figsize": (6.5, 4.2),
    "figure.dpi": 120,
    "savefig.dpi": 300,
    "axes.grid": False,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "legend.frameon": False,
    "font.size": 12,
    "axes.titlesize": 12,
    "axes.labelsize": 12,
    "xtick.labelsize": 11,
    "ytick.labelsize": 11,
    "lines.linewidth": 2.0,
    "mathtext.fontset": "stix",
    "font.family": "DejaVu Sans",
    "image.origin": "lower",
    "image.cmap": "viridis",
}


def set_pub_style():
    mpl.rcParams.update(PUB_RC)


def add_panel_label(ax, label: str, *, x: float = 0.02, y: float = 0.98):
    ax.text(x, y, label, transform=ax.transAxes, ha="left", va="top", fontsize=12, fontweight="bold")


def plot_field(ax, field, grid, *, cmap: str = "viridis", label: str = r"$T_R$ [fm$^{-2}$]"):
    """Draw a (nsteps, nsteps) field in fm with a colorbar; returns the image."""
    extent = (-grid.xymax, grid.xymax, -grid.xymax, grid.xymax)
    im = ax.imshow(field, origin="lower", extent=extent, cmap=cmap, interpolation="nearest")
    ax.set_xlabel(r"$x$ [fm]")
    ax.set_ylabel(r"$y$ [fm]")
    ax.figure.colorbar(im, ax=ax, label=label)
    ax.grid(False)
    ax.set_title("")
    for spine in ("top", "right"):
        ax.spines[spine].set_visible(False)
    return im


def plot_reduced_thickness(event, ax=None, *, show_centroid: bool = True):
    """Reduced-thickness map of a computed Event, centroid marked with a cross."""
    if ax is None:
        _, ax = plt.subplots()
    plot_field(ax, event.reduced_thickness_grid, event.grid)
    if show_centroid:
        xcm, ycm = event.center_of_mass
        ax.plot([xcm], [ycm], marker="+", color="white", markersize=10, linestyle="none")
    add_panel_label(ax, rf"$\varepsilon_2 = {event.observables['ecc', 2]:.3f}$")
    return ax
