r"""
Combine ice, impurity and algae optical properties into bulk layer optical properties.

For each layer, with burdens :math:`L_j` (kg m-2) and
mass extinction coefficients :math:`k_j` (m2 kg-1):

.. math::
   \tau = \sum_j L_j k_j, \quad
   \omega = \frac{\sum_j \tau_j \omega_j}{\tau}, \quad
   g = \frac{\sum_j \tau_j \omega_j g_j}{\tau \omega}
"""
from collections import namedtuple

import numpy as np

from .errors import InvalidImpurityLoad
from .impurities import alg_mss_cnc
from .impurities import N_SPECIES

__all__ = (
    "LayerOpticalState",
    "layer_burdens",
    "mix_layers",
    "delta_transform",
    "cumulative_tau",
)


LayerOpticalState = namedtuple("LayerOpticalState", "tau omega g")
LayerOpticalState.__doc__ = """Bulk optical properties, each of shape ``(n_lyr, n_wl)``."""


def layer_burdens(dz, rho_snw, mss_cnc, cell_nbr_conc=None, alg_rds=None):
    """Snow, impurity, algae and ice burdens (kg m-2) for each layer.

    Raises
    ------
    InvalidImpurityLoad
        If the impurity and algae burdens exceed the snow burden in any layer.

    Returns
    -------
    dict
        ``L_snw`` (n_lyr), ``L_aer`` (n_lyr, 14), ``L_alg`` (n_lyr), ``L_ice`` (n_lyr)
    """
    dz = np.atleast_1d(np.asarray(dz, dtype=float))
    nlayers = dz.size
    L_snw = np.broadcast_to(rho_snw, (nlayers,)) * dz
    L_aer = L_snw[:, np.newaxis] * np.asarray(mss_cnc, dtype=float).reshape(nlayers, N_SPECIES) * 1e-9

    if cell_nbr_conc is None:
        L_alg = np.zeros(nlayers)
    else:
        cell_nbr_conc = np.broadcast_to(cell_nbr_conc, (nlayers,))
        alg_rds = np.broadcast_to(alg_rds, (nlayers,))
        L_alg = np.where(cell_nbr_conc > 0, L_snw * alg_mss_cnc(cell_nbr_conc, alg_rds), 0.0)

    L_ice = L_snw - L_alg - L_aer.sum(axis=1)
    bad = np.flatnonzero(L_ice < 0)
    if bad.size:
        n = bad[0]
        raise InvalidImpurityLoad(int(n), float(L_ice[n]))

    return {"L_snw": L_snw, "L_aer": L_aer, "L_alg": L_alg, "L_ice": L_ice}


def mix_layers(
    *,
    L_ice,
    L_aer,
    omega_ice,
    ext_cff_mss_ice,
    g_ice,
    omega_aer,
    ext_cff_mss_aer,
    g_aer,
    L_alg=None,
    omega_alg=None,
    ext_cff_mss_alg=None,
    g_alg=None,
):
    """Mix the constituents of each layer.

    Parameters
    ----------
    L_ice : array_like
        Ice burden (kg m-2), size ``n_lyr``.
    L_aer : array_like
        Impurity burdens (kg m-2), shape ``(n_lyr, 14)``.
    omega_ice, ext_cff_mss_ice, g_ice : array_like
        Ice optical properties, shape ``(n_lyr, n_wl)``.
    omega_aer, ext_cff_mss_aer, g_aer : array_like
        Impurity optical properties, shape ``(14, n_wl)``.
    L_alg : array_like, optional
        Algae burden (kg m-2), size ``n_lyr``.
    omega_alg, ext_cff_mss_alg, g_alg : array_like, optional
        Algae optical properties, shape ``(n_lyr, n_wl)``.
        Only used in layers with nonzero algae burden.

    Returns
    -------
    LayerOpticalState
    """
    L_ice = np.asarray(L_ice, dtype=float)
    L_aer = np.asarray(L_aer, dtype=float)
    omega_ice = np.asarray(omega_ice, dtype=float)
    nlayers, nwl = omega_ice.shape
    ext_cff_mss_ice = np.broadcast_to(ext_cff_mss_ice, (nlayers, nwl))
    g_ice = np.broadcast_to(g_ice, (nlayers, nwl))
    omega_aer = np.broadcast_to(omega_aer, (N_SPECIES, nwl))
    ext_cff_mss_aer = np.broadcast_to(ext_cff_mss_aer, (N_SPECIES, nwl))
    g_aer = np.broadcast_to(g_aer, (N_SPECIES, nwl))
    if L_alg is None:
        L_alg = np.zeros(nlayers)

    tau = np.empty((nlayers, nwl))
    omega = np.empty_like(tau)
    g = np.empty_like(tau)
    for n in range(nlayers):
        # impurity contributions
        tau_aer = L_aer[n][:, np.newaxis] * ext_cff_mss_aer  # (14, n_wl)
        tau_sum = tau_aer.sum(axis=0)
        omega_sum = (tau_aer * omega_aer).sum(axis=0)
        g_sum = (tau_aer * omega_aer * g_aer).sum(axis=0)

        # algae
        if L_alg[n] > 0:
            tau_alg = L_alg[n] * np.asarray(ext_cff_mss_alg)[n]
            w_alg = np.asarray(omega_alg)[n]
            tau_sum = tau_sum + tau_alg
            omega_sum = omega_sum + tau_alg * w_alg
            g_sum = g_sum + tau_alg * w_alg * np.asarray(g_alg)[n]

        # ice
        tau_ice = L_ice[n] * ext_cff_mss_ice[n]
        tau[n] = tau_sum + tau_ice
        omega[n] = (omega_sum + omega_ice[n] * tau_ice) / tau[n]
        g[n] = (g_sum + g_ice[n] * omega_ice[n] * tau_ice) / (tau[n] * omega[n])

    return LayerOpticalState(tau, omega, g)


def delta_transform(state):
    r"""Delta-Eddington scaling of the forward-scattering peak (Joseph et al. 1976).

    .. math::
       g^* = \frac{g}{1 + g}, \quad
       \omega^* = \frac{(1 - g^2) \omega}{1 - \omega g^2}, \quad
       \tau^* = (1 - \omega g^2) \tau
    """
    tau, omega, g = state
    f = omega * g**2
    return LayerOpticalState(
        tau=(1 - f) * tau,
        omega=(1 - g**2) * omega / (1 - f),
        g=g / (1 + g),
    )


def cumulative_tau(tau_star):
    """Optical depth above the top of each layer, shape ``(n_lyr, n_wl)``.
    The first layer has 0."""
    tau_star = np.asarray(tau_star)
    tau_clm = np.zeros_like(tau_star)
    tau_clm[1:] = np.cumsum(tau_star[:-1], axis=0)
    return tau_clm
