"""
Test srt1d.variables and srt1d.utils
"""
import numpy as np
import pytest

import srt1d as srt
from srt1d.variables import _dims_from_s_shape
from srt1d.variables import VMD


@pytest.mark.parametrize(
    "s_shape,expected",
    [
        pytest.param("(n_wl)", ("wl",), id="1-D"),
        pytest.param("(n_lyr, n_wl)", ("lyr", "wl"), id="2-D"),
        pytest.param("(n_lyr,n_species)", ("lyr", "species"), id="no space"),
        pytest.param("()", (), id="scalar"),
    ],
)
def test_dims_from_s_shape(s_shape, expected):
    assert _dims_from_s_shape(s_shape) == expected


def test_vmd():
    assert "albedo" in VMD
    assert VMD["albedo"].dims == ("wl",)
    assert VMD["F_abs"].dims == ("lyr", "wl")
    assert VMD["mss_cnc"].dims == ("lyr", "species")
    assert VMD["alb_slr"].dims == ()
    assert VMD["F_abs"].da_attrs()["units"] == "W m-2"

    # every model parameter has metadata
    params = VMD.params()
    for k in srt.model.SNOWPACK_DESCRIPTION_KEYS:
        assert k in params, k


def test_vmd_outputs_covered():
    m = srt.Model().run()
    duplicates = {"F_top_net", "F_dwn_spc"}
    missing = [k for k in m.out_all if k not in VMD and k not in duplicates]
    assert missing == []


@pytest.mark.parametrize(
    "s,expected",
    [
        pytest.param("W m-2", "W m$^{-2}$", id="flux"),
        pytest.param("kg m-3", "kg m$^{-3}$", id="density"),
        pytest.param("m2 kg-1", "m$^{2}$ kg$^{-1}$", id="mass ext coeff"),
        pytest.param("", "", id="dimensionless"),
    ],
)
def test_cf_units_to_tex(s, expected):
    assert srt.utils.cf_units_to_tex(s) == expected


def test_as_layer_array():
    np.testing.assert_allclose(srt.utils.as_layer_array(2, 3), [2, 2, 2])
    assert srt.utils.as_layer_array([1, 2], 2, dtype=int).dtype == int

    with pytest.raises(ValueError, match="3 layers"):
        srt.utils.as_layer_array([1, 2], 3, name="rho_snw")
