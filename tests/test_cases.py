"""
Test srt1d.cases, including a full run from SNICAR-format lookup tables
"""
import math

import numpy as np
import pytest
import xarray as xr

import srt1d as srt
from srt1d.cases import default_layer_thicknesses
from srt1d.impurities import Species
from srt1d.spectra import N_WL


@pytest.mark.parametrize("nlayers", [1, 2, 5, 20])
def test_default_layer_thicknesses(nlayers):
    dz = default_layer_thicknesses(nlayers)
    assert dz.size == nlayers
    assert math.isclose(dz.sum(), srt.cases.DEFAULT_DEPTH)
    assert np.all(np.diff(dz) > 0)


def test_default_layer_thicknesses_too_many():
    with pytest.raises(ValueError, match="do not fit"):
        default_layer_thicknesses(4, depth=0.01)


def test_default_case_complete():
    p = srt.cases.load_default_case(3)
    assert set(srt.Model.required_input_keys) <= set(p)
    assert p["mss_cnc"].shape == (3, srt.impurities.N_SPECIES)


def test_load_snicar_case(tmp_path):
    p = srt.cases.load_snicar_case(tmp_path, dz=[0.05, 1000], rds_snw=[100, 500], bc=[100, 0])
    assert p["optics"] == tmp_path.as_posix()
    np.testing.assert_allclose(p["rds_snw"], [100, 500])
    np.testing.assert_allclose(p["rho_snw"], 150)
    assert p["mss_cnc"][0, Species.bc.index] == 100
    assert p["mss_cnc"].sum() == 100


@pytest.fixture
def snicar_dir(tmp_path):
    rng = np.random.default_rng(42)

    def write(fp, data_vars):
        fp.parent.mkdir(parents=True, exist_ok=True)
        xr.Dataset({vn: ("wvl", v) for vn, v in data_vars.items()}).to_netcdf(
            fp, engine="scipy"
        )

    def optics(ext_vn="ext_cff_mss"):
        return {
            "ss_alb": rng.uniform(0.9, 0.99999, N_WL),
            ext_vn: rng.uniform(5, 50, N_WL),
            "asm_prm": rng.uniform(0.7, 0.9, N_WL),
        }

    write(srt.data.snicar_ice_file(tmp_path, 100), optics())
    for sp in Species:
        ext_vn = "ext_cff_mss_ncl" if sp.coated else "ext_cff_mss"
        write(srt.data.snicar_impurity_file(tmp_path, sp), optics(ext_vn))
    write(
        srt.data.snicar_irradiance_file(tmp_path, atm=1, direct_beam=True),
        {"flx_frc_sfc": np.full(N_WL, 1 / N_WL)},
    )

    return tmp_path


def test_snicar_run(snicar_dir):
    p = srt.cases.load_snicar_case(snicar_dir, dz=[0.1, 1000], dust1=[1000, 0])
    m = srt.Model(nlayers=2, **p).run()

    assert m.out["albedo"].shape == (N_WL,)
    assert m.out["energy_error"] < 1e-10
    assert 0 < m.out["alb_slr"] < 1
    assert m.to_xr().attrs["optics"] == snicar_dir.as_posix()


def test_snicar_run_missing_table(snicar_dir):
    p = srt.cases.load_snicar_case(snicar_dir, rds_snw=200)
    with pytest.raises(srt.errors.MissingOpticalProperty):
        srt.Model(**p)


def test_print_config(capsys):
    srt.print_config()
    captured = capsys.readouterr()
    assert "hemispheric_mean" in captured.out
