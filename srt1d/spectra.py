"""
Wavelength grid and spectral helpers.
"""
import warnings

import numpy as np
from scipy.constants import c
from scipy.constants import h
from scipy.constants import k as k_B
from scipy.integrate import quad


N_WL = 480
"""Number of bands in the standard grid."""

DWL_UM = 0.01
"""Standard band width (μm)."""

VIS_MAX_IDX = 50
"""Number of bands in the visible (0.2--0.7 μm) part of the standard grid."""

BAND_DEFNS_UM = {
    "vis": (0.2, 0.7),
    "nir": (0.7, 5.0),
    "solar": (0.2, 5.0),
    "PAR": (0.4, 0.7),
    "UV": (0.2, 0.4),
}


def snicar_wl():
    """Band centers (μm) of the standard 480-band grid, 0.205, 0.215, ..., 4.995."""
    return np.round(0.205 + DWL_UM * np.arange(N_WL), 3)


def snicar_wle():
    """Band edges (μm) of the standard grid, 0.2, 0.21, ..., 5.0."""
    return _edges_from_centers(snicar_wl())


def vis_nir_slices(nwl=N_WL):
    """Slices selecting the visible and near-IR bands of the standard grid."""
    if nwl != N_WL:
        warnings.warn(
            f"visible/near-IR split defined for the {N_WL}-band grid, but got {nwl} bands"
        )
    return slice(None, VIS_MAX_IDX), slice(VIS_MAX_IDX, None)


def l_wl_planck(T_K, wl_um):
    """Planck radiance.

    Parameters
    ----------
    T_K : float, ndarray
        Temperature (K).
    wl_um : float, ndarray
        Wavelength (μm).
    """
    wl = wl_um * 1e-6  # um -> m
    return (2 * h * c**2) / (wl**5 * (np.exp(h * c / (wl * k_B * T_K)) - 1))


def l_wl_planck_integ(T_K, wla_um, wlb_um):
    """Numerical integral of Planck radiance from `wla_um` to `wlb_um`.

    Parameters
    ----------
    T_K : float, ndarray
        Temperature (K).
    wla_um : float
        Integration lower bound.
    wlb_um : float
        Upper bound.
    """
    return quad(lambda wl_um: l_wl_planck(T_K, wl_um), wla_um, wlb_um)[0]


def _x_frac_in_bounds(xe, bounds):
    """Fraction in region defined by `bounds` for the bins defined by edges `xe`.
    The calculation includes fractional contributions from bands that are partially
    within the `bounds`.

    For bins of flux (W m-2 per band, not W m-2 μm-1),
    this can be used as weights to integrate over a region.

    Parameters
    ----------
    xe : array
        Edges
    bounds : 2-tuple(float)
        Bounds

    Raises
    ------
    UserWarning
        If the bounds extend outside the data range (ignored for solar).

    Returns
    -------
    array
        Weights, size ``xe.size - 1``.
    """
    xe = np.asarray(xe, dtype=float)
    x1, x2 = xe[:-1], xe[1:]  # left and right
    b1, b2 = bounds

    if (b1 < x1[0] or b2 > x2[-1]) and tuple(bounds) != BAND_DEFNS_UM["solar"]:
        warnings.warn(
            f"`bounds` ({b1:.3g}, {b2:.3g}) extend outside the data range "
            f"defined by `xe` ({x1[0]:.3g}, {x2[-1]:.3g})"
        )

    overlap = np.clip(np.minimum(x2, b2) - np.maximum(x1, b1), 0, None)

    return overlap / (x2 - x1)


def _edges_from_centers(x):
    """Estimate locations of the bin edges by extrapolating the grid spacing at the edges.

    .. warning::
       Note that the true bin edges could be different---this is just a guess!

    From specutils:
    https://github.com/astropy/specutils/blob/9ce88d6be700a06e888d9d0cdd04c0afc2ae85f8/specutils/spectra/spectral_axis.py#L46-L55
    """
    extend_left = np.r_[2 * x[0] - x[1], x]
    extend_right = np.r_[x, 2 * x[-1] - x[-2]]
    edges = (extend_left + extend_right) / 2

    return edges


def planck_band_fractions(wle, *, T_K=5778):
    """Fraction of the blackbody flux in each band defined by edges `wle` (μm),
    normalized to sum to 1 over the bands."""
    wle = np.asarray(wle, dtype=float)
    e = np.array([l_wl_planck_integ(T_K, a, b) for a, b in zip(wle[:-1], wle[1:])])
    return e / e.sum()
