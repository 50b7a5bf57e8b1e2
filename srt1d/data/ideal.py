r"""
Idealized optical properties and incident spectra on the 480-band grid,
for use when the SNICAR lookup tables are not available.

Grain optics use the anomalous diffraction approximation (van de Hulst 1957)
for a sphere with size parameter :math:`x = 2 \pi r / \lambda`,
refractive index :math:`n + i k`:

.. math::
   Q_\text{ext} = 2 - \frac{4}{\rho} \sin \rho + \frac{4}{\rho^2} (1 - \cos \rho),
   \quad \rho = 2 x (n - 1)

.. math::
   Q_\text{abs} = 1 + \frac{2 e^{-w}}{w} + \frac{2 (e^{-w} - 1)}{w^2},
   \quad w = 4 x k

These are meant to reproduce the qualitative spectral behavior
(bright visible, dark near-IR, grain-size dependence), not the Mie tables.
"""
import math
from functools import lru_cache

import numpy as np
import xarray as xr

from ..impurities import ALG_RDS_AVAILABLE
from ..impurities import N_SPECIES
from ..impurities import RHO_ALG
from ..impurities import SIZE_BIN_BOUNDS_UM
from ..impurities import Species
from ..spectra import _edges_from_centers
from ..spectra import planck_band_fractions
from ..spectra import snicar_wl
from ..variables import _tup
from ..variables import _wl_coord_dict

__all__ = (
    "ideal_ice",
    "ideal_impurities",
    "ideal_algae",
    "ideal_irradiance",
    "k_ice_ideal",
)

RHO_ICE = 917.0  # kg m-3
N_ICE = 1.31

# (wavelength (μm), imaginary refractive index), roughly following Warren & Brandt (2008)
_K_ICE_ANCHORS = np.array(
    [
        (0.200, 1.0e-8),
        (0.250, 1.0e-9),
        (0.300, 2.0e-10),
        (0.350, 3.0e-11),
        (0.400, 2.5e-11),
        (0.450, 5.0e-11),
        (0.500, 3.0e-10),
        (0.550, 1.0e-9),
        (0.600, 2.3e-9),
        (0.650, 1.3e-8),
        (0.700, 3.0e-8),
        (0.750, 6.0e-8),
        (0.800, 1.3e-7),
        (0.850, 2.5e-7),
        (0.900, 5.0e-7),
        (0.950, 1.2e-6),
        (1.000, 1.6e-6),
        (1.030, 2.0e-6),
        (1.100, 1.1e-6),
        (1.200, 2.2e-6),
        (1.250, 1.0e-5),
        (1.300, 1.3e-5),
        (1.400, 1.0e-4),
        (1.500, 5.0e-4),
        (1.600, 3.0e-4),
        (1.700, 1.0e-4),
        (1.800, 1.5e-4),
        (1.900, 1.0e-3),
        (2.000, 1.6e-3),
        (2.100, 5.0e-4),
        (2.250, 1.0e-4),
        (2.400, 3.0e-4),
        (2.500, 8.0e-4),
        (2.800, 1.0e-1),
        (3.000, 6.0e-1),
        (3.200, 3.0e-1),
        (3.400, 3.0e-2),
        (3.600, 1.0e-2),
        (3.800, 7.0e-3),
        (4.000, 8.0e-3),
        (4.500, 3.0e-2),
        (5.000, 1.5e-2),
    ]
)

# impurity parameters
_ABSORBING_AEROSOL = {
    # MAC at 550 nm (m2 kg-1), AAE, MEC at 550 nm (m2 kg-1), extinction Angstrom exponent, g at 550 nm
    Species.bc: (7500.0, 1.0, 10000.0, 1.0, 0.35),
    Species.bc_coated: (11250.0, 1.0, 16000.0, 1.0, 0.40),
    Species.brc: (1200.0, 3.0, 3000.0, 1.2, 0.45),
    Species.brc_coated: (1800.0, 3.0, 4500.0, 1.2, 0.50),
}
_MINERAL = {
    # density (kg m-3), n, k at 550 nm, k floor, asymmetry of large particles
    "dust": (2600.0, 1.55, 3.0e-3, 1.0e-3, 0.80),
    "ash": (2400.0, 1.55, 8.0e-3, 8.0e-3, 0.78),
}

# pigment absorption bands: (center μm, width μm, peak k per unit dry cell mass fraction)
_PIGMENT_BANDS = {
    "chla": [(0.435, 0.025, 0.30), (0.675, 0.015, 0.15)],
    "chlb": [(0.465, 0.025, 0.30), (0.650, 0.015, 0.10)],
    "cara": [(0.480, 0.045, 0.25)],
    "carb": [(0.470, 0.040, 0.20)],
}
N_ALG = 1.38

# clear-sky gaseous absorption bands: (center μm, width μm, vertical optical depth)
_GAS_BANDS = [
    (0.255, 0.025, 5.0),  # O3 Hartley
    (0.760, 0.004, 0.3),  # O2 A
    (0.820, 0.015, 0.1),  # H2O
    (0.940, 0.025, 0.6),
    (1.140, 0.030, 0.6),
    (1.380, 0.050, 3.0),
    (1.870, 0.060, 4.0),
    (2.000, 0.020, 0.5),  # CO2
    (2.700, 0.150, 6.0),  # H2O + CO2
    (3.200, 0.200, 0.8),
    (4.300, 0.050, 6.0),  # CO2
]


def _wl_or_default(wl):
    return snicar_wl() if wl is None else np.asarray(wl, dtype=float)


def k_ice_ideal(wl_um):
    """Imaginary part of the ice refractive index, log-linearly interpolated."""
    wl_a, k_a = _K_ICE_ANCHORS.T
    return np.exp(np.interp(wl_um, wl_a, np.log(k_a)))


def _q_ext_ada(x, n):
    rho = 2 * x * (n - 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        q = 2 - 4 / rho * np.sin(rho) + 4 / rho**2 * (1 - np.cos(rho))
    return np.where(rho < 1e-2, rho**2 / 2, q)


def _q_abs_ada(x, k):
    w = 4 * x * k
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        q = 1 + 2 * np.exp(-w) / w + 2 * (np.exp(-w) - 1) / w**2
    # series for small w, where the above suffers from cancellation
    q_small = 2 / 3 * w - w**2 / 4 + w**3 / 15
    return np.where(w < 1e-3, q_small, q)


def _sphere_optics(wl_um, r_um, n, k, rho_p):
    """ADA single-scattering albedo and mass extinction coefficient (m2 kg-1) of spheres."""
    x = 2 * math.pi * r_um / wl_um
    q_ext = _q_ext_ada(x, n)
    q_abs = np.minimum(_q_abs_ada(x, k), q_ext)
    ss_alb = np.clip(1 - q_abs / q_ext, 0.0, 1.0)
    ext_cff_mss = 3 * q_ext / (4 * rho_p * r_um * 1e-6)
    return ss_alb, ext_cff_mss, x


def _ds_optics(wl, ss_alb, ext_cff_mss, asm_prm, *, dims=("wl",), coords=None, attrs=None):
    coords = {**_wl_coord_dict(wl), **(coords or {})}
    return xr.Dataset(
        coords=coords,
        data_vars={
            "ss_alb": (dims, ss_alb, {"long_name": "Single-scattering albedo", "units": ""}),
            "ext_cff_mss": (
                dims,
                ext_cff_mss,
                {"long_name": "Mass extinction coefficient", "units": "m2 kg-1"},
            ),
            "asm_prm": (dims, asm_prm, {"long_name": "Asymmetry parameter", "units": ""}),
        },
        attrs=attrs or {},
    )


def ideal_ice(rds, *, wl=None):
    """Idealized optical properties of spherical ice grains of effective radius `rds` (μm)."""
    wl = _wl_or_default(wl)
    ss_alb, ext_cff_mss, _ = _sphere_optics(wl, rds, N_ICE, k_ice_ideal(wl), RHO_ICE)
    # forward scattering increases with absorption
    asm_prm = 0.89 + 0.16 * (1 - ss_alb)

    return _ds_optics(wl, ss_alb, ext_cff_mss, asm_prm, attrs={"rds": rds, "source": "ideal"})


def _absorbing_aerosol_optics(wl, species):
    mac_550, aae, mec_550, eae, g_550 = _ABSORBING_AEROSOL[species]
    ext_cff_mss = mec_550 * (0.55 / wl) ** eae
    mac = mac_550 * (0.55 / wl) ** aae
    ss_alb = 1 - np.minimum(mac / ext_cff_mss, 0.99)
    asm_prm = np.clip(g_550 * (0.55 / wl) ** 0.8, 0.01, 0.7)
    return ss_alb, ext_cff_mss, asm_prm


def _mineral_optics(wl, species):
    rho_p, n, k_550, k_floor, g_inf = _MINERAL[species.kind]
    lo, hi = SIZE_BIN_BOUNDS_UM[species.size_bin]
    r = math.sqrt(lo * hi)
    k = k_floor + (k_550 - k_floor) * (0.55 / wl) ** 3 if k_550 > k_floor else np.full_like(wl, k_550)
    ss_alb, ext_cff_mss, x = _sphere_optics(wl, r, n, k, rho_p)
    asm_prm = g_inf * (1 - np.exp(-0.3 * x))
    return ss_alb, ext_cff_mss, asm_prm


def ideal_impurities(*, wl=None):
    """Idealized optical properties of the 14 impurity species.

    Returns
    -------
    xr.Dataset
        Variables with dims ``('species', 'wl')``.
    """
    wl = _wl_or_default(wl)
    shape = (N_SPECIES, wl.size)
    ss_alb = np.empty(shape)
    ext_cff_mss = np.empty(shape)
    asm_prm = np.empty(shape)
    for sp in Species:
        if sp.kind in ("bc", "brc"):
            props = _absorbing_aerosol_optics(wl, sp)
        else:
            props = _mineral_optics(wl, sp)
        ss_alb[sp.index], ext_cff_mss[sp.index], asm_prm[sp.index] = props

    return _ds_optics(
        wl,
        ss_alb,
        ext_cff_mss,
        asm_prm,
        dims=("species", "wl"),
        coords={"species": ("species", [sp.name for sp in Species])},
        attrs={"source": "ideal"},
    )


def ideal_algae(alg_rds, dcmf=(0.02, 0.02, 0.05, 0.0), *, wl=None):
    """Idealized optical properties of snow algae cells.

    Parameters
    ----------
    alg_rds : float
        Mean cell radius (μm).
    dcmf : sequence of float
        Dry cell mass fractions of chlorophyll-a, chlorophyll-b,
        photoprotective carotenoids, and photosynthetic carotenoids.
    """
    if alg_rds not in ALG_RDS_AVAILABLE:
        raise ValueError(
            f"algae radius must be one of {', '.join(str(r) for r in ALG_RDS_AVAILABLE)} μm"
        )
    wl = _wl_or_default(wl)

    k = k_ice_ideal(wl).copy()  # intracellular water
    for frac, bands in zip(dcmf, _PIGMENT_BANDS.values()):
        for wl_c, width, k_peak in bands:
            k += frac * k_peak * np.exp(-0.5 * ((wl - wl_c) / width) ** 2)

    ss_alb, ext_cff_mss, x = _sphere_optics(wl, alg_rds, N_ALG, k, RHO_ALG)
    asm_prm = 0.95 * (1 - np.exp(-0.3 * x))

    return _ds_optics(
        wl, ss_alb, ext_cff_mss, asm_prm, attrs={"alg_rds": alg_rds, "source": "ideal"}
    )


def _tau_rayleigh(wl_um):
    """Rayleigh optical depth of the standard atmosphere (vertical)."""
    return 0.00864 * wl_um ** (-(3.916 + 0.074 * wl_um + 0.050 / wl_um))


def _tau_gas(wl_um):
    tau = np.zeros_like(wl_um)
    for wl_c, width, tau_c in _GAS_BANDS:
        tau += tau_c * np.exp(-0.5 * ((wl_um - wl_c) / width) ** 2)
    return tau


@lru_cache(maxsize=8)
def _planck_band_fractions(wle):
    return planck_band_fractions(np.array(wle))


def ideal_irradiance(mu_0=0.5, *, direct_beam=True, flx_dwn_bb=1.0, wl=None):
    """Idealized clear-sky surface irradiance, split into direct and diffuse.

    A 5778 K blackbody spectrum is attenuated by Rayleigh scattering
    (half of the scattered light reaching the surface) and by Gaussian gas absorption bands,
    along the slant path ``1/mu_0``.
    The resulting flux fractions are normalized to sum to 1,
    and assigned entirely to the direct beam (``direct_beam=True``) or to diffuse.

    Parameters
    ----------
    mu_0 : float
        Cosine of the solar zenith angle.
    flx_dwn_bb : float
        Broadband incident flux (W m-2).
    """
    wl = _wl_or_default(wl)
    wle = _edges_from_centers(wl)
    m = 1 / mu_0

    t_r = np.exp(-m * _tau_rayleigh(wl))
    flx = _planck_band_fractions(tuple(wle)) * np.exp(-m * _tau_gas(wl)) * (t_r + 0.5 * (1 - t_r))
    flx_frc = flx / flx.sum()
    flx_frc[flx_frc < 1e-30] = 1e-30

    F = flx_dwn_bb * flx_frc
    zeros = np.zeros_like(F)
    F_dr0, F_df0 = (F, zeros) if direct_beam else (zeros, F)

    return xr.Dataset(
        coords=_wl_coord_dict(wl),
        data_vars={
            "flx_frc": ("wl", flx_frc, {"long_name": "Incident flux fraction", "units": ""}),
            "F_dr0": _tup("F_dr0", F_dr0),
            "F_df0": _tup("F_df0", F_df0),
        },
        attrs={"source": "ideal", "direct_beam": int(direct_beam), "mu_0": mu_0},
    )
