"""
Test srt1d.solvers
"""
import math
import warnings

import numpy as np
import pytest

import srt1d as srt
from srt1d.solvers import AVAILABLE_CLOSURES
from srt1d.solvers import solve_toon

CLOSURE_NAMES = list(AVAILABLE_CLOSURES)


def _column(nwl=6):
    """A 3-layer column with a spread of optical properties."""
    tau = np.outer([0.5, 2.0, 40.0], np.linspace(0.5, 1.5, nwl))
    omega = np.outer([0.9999, 0.999, 0.99], np.ones(nwl)) - np.linspace(0, 0.2, nwl)
    g = np.full_like(tau, 0.85)
    return srt.mixing.delta_transform(srt.mixing.LayerOpticalState(tau, omega, g))


def test_closures_available():
    assert set(CLOSURE_NAMES) == {"eddington", "quadrature", "hemispheric_mean"}
    for name, d in AVAILABLE_CLOSURES.items():
        assert d["name"] == name
        assert callable(d["gammas"])
        assert d["long_name"]


@pytest.mark.parametrize(
    "name,mu_one",
    [
        pytest.param("eddington", 0.5, id="Eddington"),
        pytest.param("quadrature", 1 / math.sqrt(3), id="quadrature"),
        pytest.param("hemispheric_mean", 0.5, id="hemispheric mean"),
    ],
)
def test_closure_coeffs(name, mu_one):
    gammas = srt.solvers.get_closure(name)["gammas"]
    omega = np.r_[0.5, 0.9, 0.999]
    g = np.r_[0.0, 0.5, 0.8]
    c = gammas(omega, g, 0.5)

    assert isinstance(c, srt.solvers.TwoStreamCoeffs)
    assert math.isclose(c.mu_one, mu_one)
    np.testing.assert_allclose(c.gamma3 + c.gamma4, 1)


def test_invalid_closure():
    with pytest.raises(ValueError, match="not a valid closure"):
        srt.solvers.get_closure("delta-M")


@pytest.mark.parametrize("closure", CLOSURE_NAMES)
@pytest.mark.parametrize("direct_beam", [True, False], ids=["direct", "diffuse"])
def test_energy_conservation(closure, direct_beam):
    tau, omega, g = _column()
    F = np.linspace(0.5, 1.0, tau.shape[1])
    F_dr0, F_df0 = (F, 0 * F) if direct_beam else (0 * F, F)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        sol = solve_toon(
            tau_star=tau,
            omega_star=omega,
            g_star=g,
            mu_0=0.5,
            R_sfc=0.25,
            F_dr0=F_dr0,
            F_df0=F_df0,
            closure=closure,
        )

    residual = F - (sol["F_abs"].sum(axis=0) + sol["F_btm_net"] + sol["F_top_pls"])
    assert np.abs(residual).sum() < 1e-10
    assert np.all(sol["albedo"] > 0) and np.all(sol["albedo"] < 1)
    assert np.all(sol["F_abs"] > -1e-10)


def test_thomas_vs_banded():
    tau, omega, g = _column()
    kwargs = dict(
        tau_star=tau,
        omega_star=omega,
        g_star=g,
        mu_0=0.6,
        R_sfc=0.4,
        F_dr0=np.ones(tau.shape[1]),
        F_df0=0.2 * np.ones(tau.shape[1]),
    )
    sol_t = solve_toon(**kwargs, method="thomas")
    sol_b = solve_toon(**kwargs, method="banded")

    for k in ["albedo", "F_up", "F_down", "F_net", "F_abs"]:
        np.testing.assert_allclose(sol_t[k], sol_b[k], rtol=1e-8, atol=1e-12)


def test_invalid_method():
    tau, omega, g = _column(nwl=2)
    with pytest.raises(ValueError, match="invalid `method`"):
        solve_toon(
            tau_star=tau,
            omega_star=omega,
            g_star=g,
            mu_0=0.5,
            R_sfc=0.25,
            F_dr0=[1, 1],
            F_df0=[0, 0],
            method="lu",
        )


def test_closures_agree_thin_layer():
    kwargs = dict(
        tau_star=[[0.01]],
        omega_star=[[0.9]],
        g_star=[[0.5]],
        mu_0=0.5,
        R_sfc=0.25,
        F_dr0=[1.0],
        F_df0=[0.0],
    )
    albedos = {name: solve_toon(**kwargs, closure=name)["albedo"][0] for name in CLOSURE_NAMES}
    ref = albedos["hemispheric_mean"]
    for name, albedo in albedos.items():
        assert abs(albedo - ref) / ref < 0.05, name


def test_transparent_layer_gives_surface_albedo():
    sol = solve_toon(
        tau_star=[[1e-9, 1e-9]],
        omega_star=[[0.9, 0.5]],
        g_star=[[0.5, 0.5]],
        mu_0=0.7,
        R_sfc=[0.3, 0.6],
        F_dr0=[1.0, 0.0],
        F_df0=[0.0, 1.0],
    )
    np.testing.assert_allclose(sol["albedo"], [0.3, 0.6], rtol=1e-6)


def test_callable_closure():
    gammas = srt.solvers.gammas_quadrature
    tau, omega, g = _column(nwl=3)
    kwargs = dict(
        tau_star=tau, omega_star=omega, g_star=g, mu_0=0.5, R_sfc=0.25, F_dr0=[1, 1, 1], F_df0=0
    )
    np.testing.assert_allclose(
        solve_toon(**kwargs, closure=gammas)["albedo"],
        solve_toon(**kwargs, closure="quadrature")["albedo"],
    )


def test_solution_shapes():
    tau, omega, g = _column(nwl=4)
    sol = solve_toon(
        tau_star=tau, omega_star=omega, g_star=g, mu_0=0.5, R_sfc=0.25, F_dr0=1.0, F_df0=0.0
    )
    assert sol["albedo"].shape == (4,)
    for k in ["F_up", "F_down", "F_net", "F_direct", "intensity", "F_abs", "tau_clm"]:
        assert sol[k].shape == (3, 4), k
    np.testing.assert_allclose(sol["tau_clm"][0], 0)
    np.testing.assert_allclose(sol["tau_clm"][1], tau[0])
    # direct beam decays monotonically with depth
    assert np.all(np.diff(sol["F_direct"], axis=0) <= 0)
