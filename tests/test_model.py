"""
Test srt1d.Model
"""
import math
import warnings

import numpy as np
import pytest

import srt1d as srt
from srt1d.errors import InvalidImpurityLoad
from srt1d.spectra import N_WL


def test_default_run():
    m = srt.Model().run()

    assert m.out["albedo"].shape == (N_WL,)
    assert m.out["energy_error"] < 1e-10
    # semi-infinite fine-grained clean snow is bright
    assert m.out["alb_slr"] > 0.8
    assert m.out["alb_vis"] > m.out["alb_nir"]
    assert math.isclose(m.out["flx_dwn_top_slr"], 1)


def test_semi_infinite():
    albedos = []
    for dz in [[1000.0], [2000.0]]:
        m = srt.Model(dz=dz, rho_snw=150, rds_snw=100, mu_0=0.5).run()
        albedos.append(m.out["albedo"])

    assert np.abs(albedos[0] - albedos[1]).max() < 1e-6


@pytest.mark.parametrize("closure", list(srt.solvers.AVAILABLE_CLOSURES))
def test_closures_run(closure):
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        m = srt.Model(closure, nlayers=4).run()

    assert m.out["F_abs"].shape == (4, N_WL)
    assert m.out["energy_error"] < 1e-10
    assert 0 < m.out["alb_slr"] < 1


def test_bc_darkens():
    m = srt.Model()
    alb_slr, alb_vis = [], []
    for bc in [0, 100, 1000]:
        m.update_impurities(bc=bc).run()
        alb_slr.append(m.out["alb_slr"])
        alb_vis.append(m.out["alb_vis"])

    assert np.all(np.diff(alb_slr) < 0)
    assert np.all(np.diff(alb_vis) < 0)


def test_grain_size_nir():
    rds = [50, 100, 200, 500, 1000]
    alb_nir = [srt.Model(rds_snw=r).run().out["alb_nir"] for r in rds]
    assert np.all(np.diff(alb_nir) < 0)


def test_diffuse():
    m_dr = srt.Model().run()
    m_df = srt.Model(direct_beam=False).run()

    assert np.all(m_df.copy_p()["F_dr0"] == 0)
    assert m_df.out["energy_error"] < 1e-10
    assert 0 < m_df.out["alb_slr"] < 1
    assert m_df.out["alb_slr"] != m_dr.out["alb_slr"]


@pytest.mark.parametrize("shape", [2, 3, 4], ids=["spheroid", "hexagonal plate", "Koch snowflake"])
def test_nonspherical(shape):
    m = srt.Model(sno_shp=shape).run()
    g_ice = m.out_extra["g_ice"]
    assert np.all(g_ice <= srt.grain_shape.G_ICE_MAX)
    assert m.out["energy_error"] < 1e-10


def test_algae():
    clean = srt.Model(nlayers=2).run()
    m = srt.Model(nlayers=2, cell_nbr_conc=[1e5, 0], alg_rds=10).run()

    assert m.out["alb_vis"] < clean.out["alb_vis"]
    # algae only in the top layer
    assert m.out["F_abs_vis"][0] > clean.out["F_abs_vis"][0]


def test_layered_profile():
    m = srt.Model(nlayers=5).run()
    heating_rate = m.out["heating_rate"]

    assert heating_rate.shape == (5,)
    # absorption concentrated near the surface
    assert heating_rate[0] > heating_rate[-1]
    assert math.isclose(
        m.out["abs_snw_slr"] + m.out["abs_ground_slr"] + (m.out["alb_slr"] * 1.0),
        m.out["flx_dwn_top_slr"],
        rel_tol=1e-8,
    )


def test_banded_method():
    a = srt.Model(nlayers=3).run().out["albedo"]
    b = srt.Model(nlayers=3).run(method="banded").out["albedo"]
    np.testing.assert_allclose(a, b, rtol=1e-8)


def test_to_xr():
    m = srt.Model(nlayers=3).run()
    ds = m.to_xr(info="test")

    assert ds.sizes["wl"] == N_WL
    assert ds.sizes["lyr"] == 3
    assert ds.sizes["species"] == srt.impurities.N_SPECIES
    assert ds.F_abs.dims == ("lyr", "wl")
    assert ds.attrs["closure_name"] == "hemispheric_mean"
    assert ds.attrs["info"] == "test"
    assert ds.albedo.attrs["units"] == ""
    assert "F_top_net" not in ds
    assert math.isclose(ds.depth[-1].item(), srt.cases.DEFAULT_DEPTH)


def test_to_xr_before_run():
    with pytest.raises(Exception, match="Must run"):
        srt.Model().to_xr()


def test_update_p_invalid_reverts():
    m = srt.Model()
    with pytest.warns(UserWarning, match="Reverting"):
        m.update_p(rho_snw=-1)
    assert m.copy_p()["rho_snw"][0] == 150

    with pytest.warns(UserWarning, match="not intended as an input"):
        m.update_p(snow_depth=1)


def test_update_p_layers():
    m = srt.Model()
    m.update_p(
        dz=[0.1, 1000],
        rho_snw=[100, 300],
        rds_snw=[50, 500],
        sno_shp=1,
        sno_fs=0,
        sno_ar=0,
        mss_cnc=np.zeros((2, srt.impurities.N_SPECIES)),
        cell_nbr_conc=0,
        alg_rds=10,
    )
    assert m.nlayers == 2
    m.run()
    assert m.out["F_abs"].shape == (2, N_WL)


def test_unknown_key():
    with pytest.raises(ValueError, match="not a model input"):
        srt.Model(snow_depth=1)


def test_invalid_closure():
    with pytest.raises(ValueError):
        srt.Model("two-stream")


def test_invalid_impurity_load():
    m = srt.Model().run()
    assert m.out

    m.update_impurities(dust5=2e9)
    with pytest.raises(InvalidImpurityLoad):
        m.run()

    # results of the previous run are not kept
    assert m.out == {}
    assert m.out_extra == {}
    with pytest.raises(Exception, match="Must run"):
        m.to_xr()
    with pytest.raises(Exception, match="Must run"):
        m.plot_albedo()


def test_spectral_R_sfc():
    R_sfc = np.linspace(0.1, 0.9, N_WL)
    m = srt.Model(dz=[0.01], R_sfc=R_sfc).run()
    assert m.out["energy_error"] < 1e-10

    with pytest.warns(UserWarning, match="Reverting"):
        m.update_p(R_sfc=[0.1, 0.2])


def test_no_delta():
    m = srt.Model(delta=False).run()
    m_delta = srt.Model().run()

    np.testing.assert_allclose(m.out_extra["tau_star"], m.out_extra["tau"])
    assert m.out["energy_error"] < 1e-10
    assert m.to_xr().attrs["delta"] == 0
    assert m.out["alb_slr"] != m_delta.out["alb_slr"]


def test_nlayers_from_dz():
    m = srt.Model(dz=[0.1, 1000]).run()
    assert m.nlayers == 2
    assert m.out["F_abs"].shape == (2, N_WL)

    m = srt.Model(dz=[0.05, 0.1, 1000], rds_snw=[100, 200, 500]).run()
    assert m.nlayers == 3


def test_sza():
    m_sza = srt.Model(sza=60).run()
    m_mu = srt.Model(mu_0=0.5).run()

    assert math.isclose(m_sza.copy_p()["mu_0"], 0.5)
    assert math.isclose(m_sza.to_xr().sza.item(), 60)
    np.testing.assert_allclose(m_sza.out["albedo"], m_mu.out["albedo"], rtol=1e-10)

    m = srt.Model().update_p(sza=0)
    assert m.copy_p()["mu_0"] == 1

    with pytest.warns(UserWarning, match="Reverting"):
        m.update_p(sza=90)
    assert m.copy_p()["mu_0"] == 1

    with pytest.raises(ValueError, match="solar zenith angle"):
        srt.Model(sza=-5)
