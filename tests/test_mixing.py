"""
Test srt1d.mixing and srt1d.impurities
"""
import math

import numpy as np
import pytest

import srt1d as srt
from srt1d.errors import InvalidImpurityLoad
from srt1d.impurities import N_SPECIES
from srt1d.impurities import Species
from srt1d.mixing import LayerOpticalState


def test_species_order():
    assert N_SPECIES == 14
    assert Species.bc.index == 0
    assert Species.brc_coated.index == 3
    assert Species.dust1.index == 4
    assert Species.ash5.index == 13
    assert [sp.kind for sp in Species][8:10] == ["dust", "ash"]
    assert Species.dust3.size_bin == 3
    assert Species.bc_coated.coated and not Species.bc.coated


def test_mss_cnc_table():
    mss_cnc = srt.impurities.mss_cnc_table(2, bc=[100, 0], dust2=50)
    assert mss_cnc.shape == (2, N_SPECIES)
    assert mss_cnc[0, Species.bc.index] == 100
    np.testing.assert_allclose(mss_cnc[:, Species.dust2.index], 50)
    assert mss_cnc.sum() == 200

    with pytest.raises(ValueError, match="unknown impurity species"):
        srt.impurities.mss_cnc_table(1, soot=1)


def test_alg_mass_per_cell():
    r = 10
    expected = 4 / 3 * math.pi * (r**3 + 3 * r * (0.1 * r) ** 2) * 1e-18 * 1080
    assert math.isclose(srt.impurities.alg_mass_per_cell(r), expected)


def test_layer_burdens():
    mss_cnc = srt.impurities.mss_cnc_table(2, bc=[1000, 0])
    b = srt.mixing.layer_burdens([0.1, 1.0], [200, 400], mss_cnc)

    np.testing.assert_allclose(b["L_snw"], [20, 400])
    assert math.isclose(b["L_aer"][0, 0], 20 * 1000 * 1e-9)
    np.testing.assert_allclose(b["L_ice"], [20 - 2e-5, 400])
    np.testing.assert_allclose(b["L_alg"], 0)


def test_layer_burdens_algae():
    mss_cnc = np.zeros((2, N_SPECIES))
    b = srt.mixing.layer_burdens(
        [0.1, 0.1], 300, mss_cnc, cell_nbr_conc=[1e4, 0], alg_rds=[10, 10]
    )
    L_alg = 30 * 1e4 * 1000 * srt.impurities.alg_mass_per_cell(10)
    np.testing.assert_allclose(b["L_alg"], [L_alg, 0])
    assert b["L_ice"][0] < b["L_snw"][0]


def test_invalid_impurity_load():
    # 2nd layer more than 100% impurity by mass
    mss_cnc = srt.impurities.mss_cnc_table(3, dust5=[0, 2e9, 2e9])
    with pytest.raises(InvalidImpurityLoad) as excinfo:
        srt.mixing.layer_burdens([0.1, 0.1, 0.1], 300, mss_cnc)

    assert excinfo.value.layer == 1
    assert excinfo.value.L_ice < 0
    assert isinstance(excinfo.value, ValueError)


def _ice_only(nlayers=2, nwl=3):
    rng = np.random.default_rng(0)
    omega_ice = rng.uniform(0.9, 0.999999, (nlayers, nwl))
    ext_ice = rng.uniform(5, 50, (nlayers, nwl))
    g_ice = rng.uniform(0.8, 0.9, (nlayers, nwl))
    return omega_ice, ext_ice, g_ice


def test_mix_ice_only():
    omega_ice, ext_ice, g_ice = _ice_only()
    nwl = omega_ice.shape[1]
    L_ice = np.r_[3.0, 10.0]
    state = srt.mixing.mix_layers(
        L_ice=L_ice,
        L_aer=np.zeros((2, N_SPECIES)),
        omega_ice=omega_ice,
        ext_cff_mss_ice=ext_ice,
        g_ice=g_ice,
        omega_aer=np.full((N_SPECIES, nwl), 0.5),
        ext_cff_mss_aer=np.full((N_SPECIES, nwl), 1e4),
        g_aer=np.full((N_SPECIES, nwl), 0.5),
    )

    np.testing.assert_allclose(state.tau, L_ice[:, np.newaxis] * ext_ice)
    np.testing.assert_allclose(state.omega, omega_ice)
    np.testing.assert_allclose(state.g, g_ice)


def test_mix_impurity_darkens():
    omega_ice, ext_ice, g_ice = _ice_only(nlayers=1)
    nwl = omega_ice.shape[1]
    L_aer = np.zeros((1, N_SPECIES))
    L_aer[0, Species.bc.index] = 1e-5
    kwargs = dict(
        L_ice=[10.0],
        omega_ice=omega_ice,
        ext_cff_mss_ice=ext_ice,
        g_ice=g_ice,
        omega_aer=np.full((N_SPECIES, nwl), 0.3),
        ext_cff_mss_aer=np.full((N_SPECIES, nwl), 1e4),
        g_aer=np.full((N_SPECIES, nwl), 0.4),
    )
    clean = srt.mixing.mix_layers(L_aer=np.zeros((1, N_SPECIES)), **kwargs)
    dirty = srt.mixing.mix_layers(L_aer=L_aer, **kwargs)

    assert np.all(dirty.tau > clean.tau)
    assert np.all(dirty.omega < clean.omega)
    # tau-weighted average
    tau_aer = 1e-5 * 1e4
    expected = (clean.tau * clean.omega + tau_aer * 0.3) / (clean.tau + tau_aer)
    np.testing.assert_allclose(dirty.omega, expected)


def test_delta_transform_g0_identity():
    state = LayerOpticalState(
        tau=np.array([[0.1, 1.0, 10.0]]),
        omega=np.array([[0.5, 0.9, 0.999]]),
        g=np.zeros((1, 3)),
    )
    state_star = srt.mixing.delta_transform(state)
    for a, b in zip(state, state_star):
        np.testing.assert_allclose(a, b)


def test_delta_transform():
    state = LayerOpticalState(tau=np.r_[2.0], omega=np.r_[0.9], g=np.r_[0.8])
    tau_s, omega_s, g_s = srt.mixing.delta_transform(state)

    assert math.isclose(g_s[0], 0.8 / 1.8)
    assert math.isclose(omega_s[0], (1 - 0.64) * 0.9 / (1 - 0.9 * 0.64))
    assert math.isclose(tau_s[0], (1 - 0.9 * 0.64) * 2.0)


def test_cumulative_tau():
    tau = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    np.testing.assert_allclose(srt.mixing.cumulative_tau(tau), [[0, 0], [1, 2], [4, 6]])
