r"""
Asymmetry parameter of non-spherical ice grains.

The Mie (spherical) asymmetry parameter is replaced for non-spherical grains
using the He et al. (2017) shape correction :math:`C_g`
together with the Fu (2007) fits for the aspect-ratio dependence:

.. math::
   g = C_g \left[ g_{F07}^\prime + \frac{1 - g_{F07}^\prime}{2 \omega} \right]

with the coefficients given at 7 band centers between 0.25 and 5 μm,
interpolated onto the wavelength grid with PCHIP.
"""
from enum import IntEnum

import numpy as np
from scipy.interpolate import PchipInterpolator

__all__ = ("GrainShape", "shape_corrected_asm_prm", "G_ICE_MAX")


class GrainShape(IntEnum):
    """Ice grain shape tags."""

    sphere = 1
    spheroid = 2
    hexagonal_plate = 3
    koch_snowflake = 4


G_ICE_MAX = 0.99
"""Upper bound applied to the ice asymmetry parameter (all shapes)."""

FS_HEX = 0.788  # reference shape factor (hexagonal plate)

# default shape factor and aspect ratio (He et al. 2017, Table 1)
DEFAULT_FS = {
    GrainShape.spheroid: 0.929,
    GrainShape.hexagonal_plate: 0.788,
    GrainShape.koch_snowflake: 0.712,
}
DEFAULT_AR = {
    GrainShape.spheroid: 0.5,
    GrainShape.hexagonal_plate: 2.5,
    GrainShape.koch_snowflake: 2.5,
}

# band division points (μm) and centers
G_WL_UM = np.r_[0.25, 0.70, 1.41, 1.90, 2.50, 3.50, 4.00, 5.00]
G_WL_CENTER_UM = (G_WL_UM[1:] + G_WL_UM[:-1]) / 2

# He et al. (2017), Eq. 7
_G_B0 = np.r_[9.76029e-01, 9.67798e-01, 1.00111e00, 1.00224e00, 9.64295e-01, 9.97475e-01, 9.97475e-01]
_G_B1 = np.r_[5.21042e-01, 4.96181e-01, 1.83711e-01, 1.37082e-01, 5.50598e-02, 8.48743e-02, 8.48743e-02]
_G_B2 = np.r_[-2.66792e-04, 1.14088e-03, 2.37011e-04, -2.35905e-04, 8.40449e-04, -4.71484e-04, -4.71484e-04]

# Fu (2007), Tables 1 & 2
# spheroid (quadratic in AR)
_G_F07_C2 = np.r_[1.349959e-1, 1.115697e-1, 9.853958e-2, 5.557793e-2, -1.233493e-1, 0.0, 0.0]
_G_F07_C1 = np.r_[-3.987320e-1, -3.723287e-1, -3.924784e-1, -3.259404e-1, 4.429054e-2, -1.726586e-1, -1.726586e-1]
_G_F07_C0 = np.r_[7.938904e-1, 8.030084e-1, 8.513932e-1, 8.692241e-1, 7.085850e-1, 6.412701e-1, 6.412701e-1]
# hexagonal plate and Koch snowflake (quadratic in ln AR)
_G_F07_P2 = np.r_[3.165543e-3, 2.014810e-3, 1.780838e-3, 6.987734e-4, -1.882932e-2, -2.277872e-2, -2.277872e-2]
_G_F07_P1 = np.r_[1.140557e-1, 1.143152e-1, 1.143814e-1, 1.071238e-1, 1.353873e-1, 1.914431e-1, 1.914431e-1]
_G_F07_P0 = np.r_[5.292852e-1, 5.425909e-1, 5.601598e-1, 6.023407e-1, 6.473899e-1, 4.634944e-1, 4.634944e-1]

KOCH_DIAM_FACTOR = 0.544
"""Ratio of the Koch snowflake diameter to the equal-projected-area sphere diameter."""

HOLD_FROM_WL_UM = 4.0
"""Beyond this wavelength the corrected value at the last band below it is held constant."""


def _cg(fs, diam_um):
    """Shape correction factor at the band centers."""
    return _G_B0 * (fs / FS_HEX) ** _G_B1 * diam_um**_G_B2


def _gg_f07(shape, ar):
    """Fu (2007) aspect-ratio fit at the band centers."""
    if shape == GrainShape.spheroid:
        return _G_F07_C0 + _G_F07_C1 * ar + _G_F07_C2 * ar**2
    else:
        ln_ar = np.log(ar)
        return _G_F07_P0 + _G_F07_P1 * ln_ar + _G_F07_P2 * ln_ar**2


def _shape_corrected_layer(wl, omega_ice, rds, shape, fs, ar):
    """Corrected asymmetry parameter for one layer of non-spherical grains."""
    if fs == 0:
        fs = DEFAULT_FS[shape]
    if ar == 0:
        ar = DEFAULT_AR[shape]

    diam = 2.0 * rds
    if shape == GrainShape.koch_snowflake:
        diam /= KOCH_DIAM_FACTOR

    cg = PchipInterpolator(G_WL_CENTER_UM, _cg(fs, diam))(wl)
    gg = PchipInterpolator(G_WL_CENTER_UM, _gg_f07(shape, ar))(wl)

    g_f07 = gg + (1.0 - gg) / omega_ice / 2
    g = g_f07 * cg

    # hold the last value below 4 μm constant
    beyond = wl > HOLD_FROM_WL_UM
    if beyond.any() and not beyond.all():
        i_last = np.flatnonzero(~beyond)[-1]
        g[beyond] = g[i_last]

    return g


def shape_corrected_asm_prm(wl, g_mie, omega_ice, rds_snw, sno_shp, sno_fs=None, sno_ar=None):
    """Ice asymmetry parameter for each layer, accounting for grain shape.

    Parameters
    ----------
    wl : array_like
        Wavelength band centers (μm), size ``n_wl``.
    g_mie : array_like
        Mie asymmetry parameter of the ice grains, shape ``(n_lyr, n_wl)``.
    omega_ice : array_like
        Single-scattering albedo of the ice grains, shape ``(n_lyr, n_wl)``.
    rds_snw : array_like
        Grain effective radius (μm), size ``n_lyr``.
    sno_shp : array_like of int
        Grain shape tag (:class:`GrainShape`), size ``n_lyr``.
    sno_fs, sno_ar : array_like, optional
        Shape factor and aspect ratio. 0 (the default) means use the shape's default.

    Returns
    -------
    ndarray
        Shape ``(n_lyr, n_wl)``. Values are limited to :const:`G_ICE_MAX`.
    """
    wl = np.asarray(wl, dtype=float)
    g_mie = np.atleast_2d(np.asarray(g_mie, dtype=float))
    omega_ice = np.atleast_2d(np.asarray(omega_ice, dtype=float))
    rds_snw = np.atleast_1d(rds_snw)
    nlayers = rds_snw.size
    sno_shp = np.broadcast_to(sno_shp, (nlayers,))
    sno_fs = np.zeros(nlayers) if sno_fs is None else np.broadcast_to(sno_fs, (nlayers,))
    sno_ar = np.zeros(nlayers) if sno_ar is None else np.broadcast_to(sno_ar, (nlayers,))

    g_ice = np.array(np.broadcast_to(g_mie, (nlayers, wl.size)))
    omega_ice = np.broadcast_to(omega_ice, (nlayers, wl.size))
    for n in range(nlayers):
        shape = GrainShape(int(sno_shp[n]))
        if shape == GrainShape.sphere:
            continue
        g_ice[n] = _shape_corrected_layer(
            wl, omega_ice[n], float(rds_snw[n]), shape, float(sno_fs[n]), float(sno_ar[n])
        )

    g_ice[g_ice > G_ICE_MAX] = G_ICE_MAX

    return g_ice
