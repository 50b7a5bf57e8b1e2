"""
Test srt1d.spectra
"""

import math

import numpy as np
import pytest

import srt1d as srt


@pytest.mark.parametrize("T_K", (1000, 5000, 5800, 6000))
def test_l_wl_planck_integ_T(T_K):
    from scipy.constants import sigma

    # Estimate total irradiance
    with np.errstate(over="ignore"):  # ignore overflow in `np.exp` warning
        est = math.pi * 1e-6 * srt.spectra.l_wl_planck_integ(T_K, 0, math.inf)

    # Compare to theoretical
    assert math.isclose(est, sigma * T_K**4)


@pytest.mark.parametrize(
    "xe,bounds,expected",
    [
        pytest.param(np.r_[0, 1, 2, 3], (0, 3), [1, 1, 1], id="all in"),
        pytest.param(np.r_[0, 1, 2, 3], (0.5, 2.2), [0.5, 1, 0.2], id="fractions"),
        pytest.param(np.r_[0, 1, 2, 3], (0.5, 2.0), [0.5, 1, 0], id="one out (edge in)"),
    ],
)
def test_x_frac_in_bounds(xe, bounds, expected):
    actual = srt.spectra._x_frac_in_bounds(xe, bounds)
    np.testing.assert_allclose(actual, expected)


@pytest.mark.parametrize(
    "x,expected",
    [
        pytest.param(np.r_[0.5, 1.5, 2.5], [0, 1, 2, 3], id="equal spacing"),
        pytest.param(np.r_[0.5, 1.5, 2], [0, 1, 1.75, 2.25], id="variable spacing"),
    ],
)
def test_edges_from_centers(x, expected):
    actual = srt.spectra._edges_from_centers(x)
    np.testing.assert_allclose(actual, expected)

    dx = np.diff(x)
    xcnew = (actual[:-1] + actual[1:]) / 2  # new centers
    if not all(dx == dx[0]):  # variable grid
        assert not np.all(x == xcnew)
    else:
        np.testing.assert_allclose(x, xcnew)


def test_snicar_grid():
    wl = srt.spectra.snicar_wl()
    wle = srt.spectra.snicar_wle()

    assert wl.size == srt.spectra.N_WL == 480
    assert math.isclose(wl[0], 0.205) and math.isclose(wl[-1], 4.995)
    np.testing.assert_allclose(wle[[0, -1]], [0.2, 5.0])
    np.testing.assert_allclose(np.diff(wle), srt.spectra.DWL_UM)


def test_vis_nir_slices():
    wl = srt.spectra.snicar_wl()
    vis, nir = srt.spectra.vis_nir_slices()

    assert wl[vis].size == 50 and wl[vis].max() < 0.7
    assert wl[nir].size == 430 and wl[nir].min() > 0.7


def test_planck_band_fractions():
    wle = srt.spectra.snicar_wle()
    frac = srt.spectra.planck_band_fractions(wle)

    assert frac.size == wle.size - 1
    assert math.isclose(frac.sum(), 1)
    # Sun peaks in the visible
    assert 0.4 < srt.spectra.snicar_wl()[frac.argmax()] < 0.6
