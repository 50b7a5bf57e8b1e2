"""
Multi-layer two-stream solution of Toon et al. (1989),
as used in SNICAR (Flanner et al. 2007, 2021).

All quantities are arrays of shape ``(n_lyr, n_wl)`` (layers top to bottom)
unless noted otherwise. Incident fluxes are in-band (W m-2 per band).
"""
import math
import warnings

import numpy as np

from ..errors import FluxConsistencyWarning
from ..errors import SingularBoundaryConditionWarning
from ..mixing import cumulative_tau
from .common import TRIDIAG_SOLVERS

SINGULAR_TOL = 0.01
r"""Threshold on :math:`|\lambda^2 - 1/\mu_0^2|` for the near-singularity warning."""


def _particular_solution(omega_star, tau_top, coeffs, lam, mu_0, Fs):
    r"""Direct-beam particular solution :math:`C^\pm` (Eqs. 23--24) at optical depth `tau_top`."""
    g1, g2, g3, g4, _ = coeffs
    denom = lam**2 - 1 / mu_0**2
    src = omega_star * math.pi * Fs * np.exp(-tau_top / mu_0)
    C_pls = src * ((g1 - 1 / mu_0) * g3 + g4 * g2) / denom
    C_mns = src * ((g1 + 1 / mu_0) * g4 + g2 * g3) / denom
    return C_pls, C_mns


def _assemble_rows(e1, e2, e3, e4, C_pls_top, C_pls_btm, C_mns_top, C_mns_btm, *, F_df0, R_sfc, S_sfc):
    """Build the tridiagonal system (Eqs. 39--43), shape ``(2 n_lyr, n_wl)`` each.

    Row 0 is the upper boundary (diffuse incident from above),
    the last row is the lower boundary (surface reflection),
    and each interface between layers ``k`` and ``k+1`` contributes a pair of
    continuity rows ``2k+1`` and ``2k+2``.
    """
    nlayers, nwl = e1.shape
    A = np.zeros((2 * nlayers, nwl))
    B = np.zeros_like(A)
    D = np.zeros_like(A)
    E = np.zeros_like(A)

    # top boundary
    A[0] = 0.0
    B[0] = e1[0]
    D[0] = -e2[0]
    E[0] = F_df0 - C_mns_top[0]

    # interfaces
    k, kp1 = slice(None, -1), slice(1, None)
    dC_pls = C_pls_top[kp1] - C_pls_btm[k]
    dC_mns = C_mns_top[kp1] - C_mns_btm[k]
    A[1:-1:2] = e2[kp1] * e1[k] - e3[k] * e4[kp1]
    B[1:-1:2] = e2[k] * e2[kp1] - e4[k] * e4[kp1]
    D[1:-1:2] = e1[kp1] * e4[kp1] - e2[kp1] * e3[kp1]
    E[1:-1:2] = e2[kp1] * dC_pls + e4[kp1] * dC_mns
    A[2:-1:2] = e2[k] * e3[k] - e4[k] * e1[k]
    B[2:-1:2] = e1[k] * e1[kp1] - e3[k] * e3[kp1]
    D[2:-1:2] = e3[k] * e4[kp1] - e1[k] * e2[kp1]
    E[2:-1:2] = e3[k] * dC_pls - e1[k] * dC_mns

    # bottom boundary
    A[-1] = e1[-1] - R_sfc * e3[-1]
    B[-1] = e2[-1] - R_sfc * e4[-1]
    D[-1] = 0.0
    E[-1] = S_sfc - C_pls_btm[-1] + R_sfc * C_mns_btm[-1]

    return A, B, D, E


def solve_toon(
    *,
    tau_star,
    omega_star,
    g_star,
    mu_0,
    R_sfc,
    F_dr0,
    F_df0,
    closure="hemispheric_mean",
    method="thomas",
    check=True,
):
    """Two-stream solution for a multi-layer snowpack over a reflecting surface.

    Parameters
    ----------
    tau_star, omega_star, g_star : array_like
        (Delta-transformed) layer optical depth, single-scattering albedo and asymmetry parameter,
        shape ``(n_lyr, n_wl)``.
    mu_0 : float
        Cosine of the solar zenith angle.
    R_sfc : float or array_like
        Albedo of the underlying surface (scalar or size ``n_wl``).
    F_dr0, F_df0 : array_like
        Direct and diffuse incident flux in each band (W m-2), size ``n_wl``.
    closure : str or callable
        Two-stream closure: a key of :const:`~srt1d.solvers.AVAILABLE_CLOSURES`
        or a function returning :class:`~srt1d.solvers.TwoStreamCoeffs`.
    method : {'thomas', 'banded'}
        Tridiagonal solver.
    check : bool
        Compare the net flux with up minus down flux and warn on mismatch.

    Returns
    -------
    dict
    """
    from . import get_closure

    tau_star = np.atleast_2d(np.asarray(tau_star, dtype=float))
    omega_star = np.atleast_2d(np.asarray(omega_star, dtype=float))
    g_star = np.atleast_2d(np.asarray(g_star, dtype=float))
    nlayers, nwl = tau_star.shape
    F_dr0 = np.broadcast_to(np.asarray(F_dr0, dtype=float), (nwl,))
    F_df0 = np.broadcast_to(np.asarray(F_df0, dtype=float), (nwl,))
    R_sfc = np.broadcast_to(np.asarray(R_sfc, dtype=float), (nwl,))
    try:
        solve_tridiag = TRIDIAG_SOLVERS[method]
    except KeyError:
        raise ValueError(
            f"invalid `method` {method!r}. Valid options are: {', '.join(TRIDIAG_SOLVERS)}."
        ) from None

    gammas = closure if callable(closure) else get_closure(closure)["gammas"]
    coeffs = gammas(omega_star, g_star, mu_0)
    gamma1, gamma2, _, _, mu_one = coeffs

    Fs = F_dr0 / (mu_0 * math.pi)  # direct-beam flux parameter
    tau_clm = cumulative_tau(tau_star)
    tau_btm = tau_clm + tau_star

    # surface source from the attenuated direct beam (Eq. 37)
    S_sfc = R_sfc * mu_0 * np.exp(-tau_btm[-1] / mu_0) * math.pi * Fs

    # Eqs. 21--22
    lam = np.sqrt(np.abs(gamma1**2 - gamma2**2))
    GAMMA = gamma2 / (gamma1 + lam)

    # Eq. 44
    ex = np.exp(-lam * tau_star)
    e1 = 1 + GAMMA * ex
    e2 = 1 - GAMMA * ex
    e3 = GAMMA + ex
    e4 = GAMMA - ex

    # particular solution at layer tops and bottoms
    if F_dr0.sum() > 0:
        near_singular = np.abs(lam**2 - 1 / mu_0**2) < SINGULAR_TOL
        if near_singular.any():
            n, j = np.argwhere(near_singular)[0]
            warnings.warn(
                "The direct-beam particular solution is nearly singular "
                f"(|lambda^2 - 1/mu_0^2| < {SINGULAR_TOL}) for {near_singular.sum()} "
                f"layer/wavelength combination(s), first at layer {n}, wavelength index {j}. "
                "Results there may be inaccurate; consider perturbing `mu_0`.",
                SingularBoundaryConditionWarning,
            )
        C_pls_top, C_mns_top = _particular_solution(omega_star, tau_clm, coeffs, lam, mu_0, Fs)
        C_pls_btm, C_mns_btm = _particular_solution(omega_star, tau_btm, coeffs, lam, mu_0, Fs)
    else:
        C_pls_top = C_mns_top = C_pls_btm = C_mns_btm = np.zeros((nlayers, nwl))

    A, B, D, E = _assemble_rows(
        e1,
        e2,
        e3,
        e4,
        C_pls_top,
        C_pls_btm,
        C_mns_top,
        C_mns_btm,
        F_df0=F_df0,
        R_sfc=R_sfc,
        S_sfc=S_sfc,
    )
    Y = solve_tridiag(A, B, D, E)
    Y1, Y2 = Y[0::2], Y[1::2]

    # direct beam at the base of each layer (Eq. 50)
    direct = mu_0 * math.pi * Fs * np.exp(-tau_btm / mu_0)

    # net flux (up - down) at the base of each layer (Eq. 48)
    F_net = Y1 * (e1 - e3) + Y2 * (e2 - e4) + C_pls_btm - C_mns_btm - direct

    # mean intensity at the base of each layer (Eq. 49)
    intensity = (
        (Y1 * (e1 + e3) + Y2 * (e2 + e4) + C_pls_btm + C_mns_btm) / mu_one + direct / mu_0
    ) / (4 * math.pi)

    # upward flux at the upper boundary (Eq. 31 at tau = 0)
    F_top_pls = Y1[0] * (ex[0] + GAMMA[0]) + Y2[0] * (ex[0] - GAMMA[0]) + C_pls_top[0]

    # fluxes at the base of each layer (Eqs. 31--32 at tau = tau*)
    F_up = Y1 * (1 + GAMMA * ex) + Y2 * (1 - GAMMA * ex) + C_pls_btm
    F_down = Y1 * (GAMMA + ex) + Y2 * (GAMMA - ex) + C_mns_btm + direct

    if check and not np.allclose(F_up - F_down, F_net, rtol=1e-6, atol=1e-10):
        warnings.warn(
            "Net flux from the solution does not match up minus down flux: "
            f"max abs diff {np.abs(F_up - F_down - F_net).max():.3g}",
            FluxConsistencyWarning,
        )

    F_dwn_spc = F_dr0 + F_df0  # incident
    albedo = F_top_pls / F_dwn_spc
    F_top_net = F_top_pls - F_dwn_spc

    # absorbed flux in each layer
    F_abs = np.empty_like(F_net)
    F_abs[0] = F_net[0] - F_top_net
    F_abs[1:] = np.diff(F_net, axis=0)

    F_btm_net = -F_net[-1]

    return {
        "albedo": albedo,
        "F_up": F_up,
        "F_down": F_down,
        "F_net": F_net,
        "F_direct": direct,
        "intensity": intensity,
        "F_abs": F_abs,
        "F_top_pls": F_top_pls,
        "F_top_net": F_top_net,
        "F_btm_net": F_btm_net,
        "F_dwn_spc": F_dwn_spc,
        "tau_clm": tau_clm,
    }
