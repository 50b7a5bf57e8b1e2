"""
Optical properties of snow constituents and incident irradiance spectra.

Two sources are supported:

* the SNICAR 480-band netCDF lookup tables (not distributed with srt1d),
  read with the ``load_snicar_*`` functions;
* idealized properties computed on the fly (:mod:`srt1d.data.ideal`),
  used by the default case.

Data are loaded as :class:`xarray.Dataset` for easy inspection.
"""
import os
from functools import lru_cache
from pathlib import Path

import numpy as np
import xarray as xr

from .. import DATA_BASE_DIR
from ..errors import MissingOpticalProperty
from ..impurities import ALG_RDS_AVAILABLE
from ..impurities import N_SPECIES
from ..impurities import Species
from ..spectra import N_WL
from ..spectra import snicar_wl
from ..variables import _tup
from ..variables import _wl_coord_dict
from .ideal import ideal_algae  # noqa: F401 unused import
from .ideal import ideal_ice  # noqa: F401 unused import
from .ideal import ideal_impurities  # noqa: F401 unused import
from .ideal import ideal_irradiance  # noqa: F401 unused import

DATA_DIR_STR = DATA_BASE_DIR.as_posix()

SNICAR_DIR_ENV_VAR = "SRT1D_SNICAR_DIR"
"""Environment variable that can be used to point to the SNICAR lookup tables."""

ICE_RI_DIRS = {
    1: "ice_Wrn84",  # Warren (1984)
    2: "ice_Wrn08",  # Warren and Brandt (2008)
    3: "ice_Pic16",  # Picard et al. (2016)
    4: "co2ice",  # CO2 ice, Hansen (2005)
}

DUST_STEMS = {
    1: "dust_balkanski_central",  # Saharan, Balkanski et al. (2007)
    2: "dust_skiles",  # San Juan Mountains, Colorado, Skiles et al. (2017)
    3: "dust_greenland_central",  # Polashenski et al. (2015)
    4: "dust_mars",  # Wolff et al. (2009, 2010)
}

ASH_STEMS = {
    1: "volc_ash_eyja_central",  # Eyjafjallajökull, Flanner et al. (2014)
}

_CARBON_FILES = {
    Species.bc: "mie_sot_ChC90_dns_1317.nc",
    Species.bc_coated: "miecot_slfsot_ChC90_dns_1317.nc",
    Species.brc: "brC_Kirch_BCsd.nc",
    Species.brc_coated: "brC_Kirch_BCsd_slfcot.nc",
}

ATM_STEMS = {
    1: "mlw",  # mid-latitude winter
    2: "mls",  # mid-latitude summer
    3: "saw",  # sub-Arctic winter
    4: "sas",  # sub-Arctic summer
    5: "smm",  # Summit, Greenland (sub-Arctic summer, surface pressure 796 hPa)
    6: "hmn",  # High Mountain (summer, surface pressure 556 hPa)
    7: "toa",  # top of atmosphere
}

FLX_FRC_MIN = 1e-30


def snicar_root(root=None):
    """Directory containing the SNICAR lookup tables.

    If `root` is not provided, the ``SRT1D_SNICAR_DIR`` environment variable is used,
    falling back to ``snicar/`` in the srt1d data directory.
    """
    if root is None:
        root = os.environ.get(SNICAR_DIR_ENV_VAR, DATA_BASE_DIR / "snicar")
    return Path(root)


@lru_cache(maxsize=256)
def _load_nc(fp):
    """Load netCDF file `fp` into memory (cached; don't modify the result)."""
    with xr.open_dataset(fp) as ds:
        return ds.load()


def _read_table(key, fp, variables):
    """Read 1-D `variables` from file `fp`, raising :class:`MissingOpticalProperty` if absent."""
    fp = Path(fp)
    if not fp.is_file():
        raise MissingOpticalProperty(key, fp)
    ds = _load_nc(fp)

    out = {}
    for vn in variables:
        try:
            a = np.array(ds[vn].values, dtype=float).ravel()
        except KeyError:
            raise MissingOpticalProperty(f"{key}:{vn}", fp) from None
        if a.size != N_WL:
            raise ValueError(f"{vn!r} in {fp.as_posix()} has {a.size} bands, expected {N_WL}")
        out[vn] = a

    return out


def _optics_dataset(d, ext_vn="ext_cff_mss", **attrs):
    wl = snicar_wl()
    return xr.Dataset(
        coords=_wl_coord_dict(wl),
        data_vars={
            "ss_alb": ("wl", d["ss_alb"], {"long_name": "Single-scattering albedo", "units": ""}),
            "ext_cff_mss": (
                "wl",
                d[ext_vn],
                {"long_name": "Mass extinction coefficient", "units": "m2 kg-1"},
            ),
            "asm_prm": ("wl", d["asm_prm"], {"long_name": "Asymmetry parameter", "units": ""}),
        },
        attrs=attrs,
    )


def snicar_ice_file(root, rds, *, ice_ri=3):
    try:
        stem = ICE_RI_DIRS[ice_ri]
    except KeyError:
        raise ValueError(
            f"invalid `ice_ri` {ice_ri!r}. Valid options are: {', '.join(map(str, ICE_RI_DIRS))}."
        ) from None
    return snicar_root(root) / stem / f"{stem}_{int(round(rds)):04d}.nc"


def load_snicar_ice(root, rds, *, ice_ri=3):
    """Mie optical properties of spherical ice grains with effective radius `rds` (μm).

    Parameters
    ----------
    root : path-like or None
        SNICAR data directory (see :func:`snicar_root`).
    ice_ri : int
        Ice refractive index dataset:
        1 -- Warren (1984), 2 -- Warren and Brandt (2008), 3 -- Picard et al. (2016),
        4 -- CO2 ice.
    """
    fp = snicar_ice_file(root, rds, ice_ri=ice_ri)
    d = _read_table(f"ice:{ICE_RI_DIRS[ice_ri]}:{rds}", fp, ["ss_alb", "ext_cff_mss", "asm_prm"])
    return _optics_dataset(d, rds=rds, ice_ri=ice_ri, source="snicar")


def snicar_impurity_file(root, species, *, dust_type=1, ash_type=1):
    sp = Species[species] if isinstance(species, str) else Species(species)
    lai = snicar_root(root) / "lai"
    if sp in _CARBON_FILES:
        return lai / _CARBON_FILES[sp]
    elif sp.kind == "dust":
        try:
            stem = DUST_STEMS[dust_type]
        except KeyError:
            raise ValueError(f"invalid `dust_type` {dust_type!r}") from None
    else:
        try:
            stem = ASH_STEMS[ash_type]
        except KeyError:
            raise ValueError(f"invalid `ash_type` {ash_type!r}") from None
    return lai / f"{stem}_size{sp.size_bin}.nc"


def load_snicar_impurity(root, species, *, dust_type=1, ash_type=1):
    """Optical properties of one impurity species.

    Parameters
    ----------
    species : Species or str
        For example, ``Species.bc`` or ``'dust3'``.
    dust_type : int
        1 -- Saharan, 2 -- Colorado, 3 -- Greenland, 4 -- Mars.
    """
    sp = Species[species] if isinstance(species, str) else Species(species)
    fp = snicar_impurity_file(root, sp, dust_type=dust_type, ash_type=ash_type)

    # coated species: extinction of the particle, normalized by the mass of the uncoated core
    ext_vn = "ext_cff_mss_ncl" if sp.coated else "ext_cff_mss"
    d = _read_table(f"impurity:{sp.name}", fp, ["ss_alb", ext_vn, "asm_prm"])

    return _optics_dataset(d, ext_vn=ext_vn, species=sp.name, source="snicar")


def load_snicar_impurities(root, *, dust_type=1, ash_type=1):
    """Optical properties of all 14 impurity species, dims ``('species', 'wl')``."""
    dsets = [
        load_snicar_impurity(root, sp, dust_type=dust_type, ash_type=ash_type) for sp in Species
    ]
    ds = xr.concat(dsets, dim="species", combine_attrs="drop")
    ds = ds.assign_coords(species=("species", [sp.name for sp in Species]))
    ds.attrs.update(dust_type=dust_type, ash_type=ash_type, source="snicar")
    assert ds.sizes["species"] == N_SPECIES

    return ds


def snicar_algae_file(root, alg_rds, dcmf):
    chla, chlb, cara, carb = (int(round(x * 1000)) for x in dcmf)
    fn = (
        f"alg_sph_r{int(round(alg_rds)):03d}um_"
        f"chla{chla:03d}_chlb{chlb:03d}_cara{cara:03d}_carb{carb:03d}.nc"
    )
    return snicar_root(root) / "alg_pig" / fn


def load_snicar_algae(root, alg_rds, dcmf):
    """Optical properties of snow algae.

    Parameters
    ----------
    alg_rds : float
        Mean cell radius (μm). Must be one of :const:`~srt1d.impurities.ALG_RDS_AVAILABLE`.
    dcmf : sequence of float
        Dry cell mass fractions of chlorophyll-a, chlorophyll-b,
        photoprotective carotenoids, and photosynthetic carotenoids.
    """
    if alg_rds not in ALG_RDS_AVAILABLE:
        raise ValueError(
            f"algae radius must be one of {', '.join(str(r) for r in ALG_RDS_AVAILABLE)} μm"
        )
    fp = snicar_algae_file(root, alg_rds, dcmf)
    d = _read_table(f"algae:{fp.stem}", fp, ["ss_alb", "ext_cff_mss", "asm_prm"])
    return _optics_dataset(d, alg_rds=alg_rds, source="snicar")


def snicar_irradiance_file(root, *, atm=1, direct_beam=True):
    try:
        stem = ATM_STEMS[atm]
    except KeyError:
        raise ValueError(
            f"invalid `atm` {atm!r}. Valid options are: {', '.join(map(str, ATM_STEMS))}."
        ) from None
    sky = "clr" if direct_beam else "cld"
    return snicar_root(root) / "fsds" / f"swnb_480bnd_{stem}_{sky}.nc"


def load_snicar_irradiance(root, *, atm=1, direct_beam=True, flx_dwn_bb=1.0):
    """Incident in-band flux, from the SNICAR surface (or TOA) flux fractions.

    Clear-sky spectra are used for direct-beam illumination and cloudy-sky spectra
    for diffuse illumination.
    Zero flux fractions are replaced by a small positive value.

    Parameters
    ----------
    atm : int
        Atmospheric profile: 1 -- mid-latitude winter, 2 -- mid-latitude summer,
        3 -- sub-Arctic winter, 4 -- sub-Arctic summer, 5 -- Summit, Greenland,
        6 -- high mountain, 7 -- top of atmosphere.
    flx_dwn_bb : float
        Broadband incident flux (W m-2).
    """
    fp = snicar_irradiance_file(root, atm=atm, direct_beam=direct_beam)
    vn = "flx_frc_toa" if atm == 7 else "flx_frc_sfc"
    flx_frc = _read_table(f"irradiance:{fp.stem}", fp, [vn])[vn]
    flx_frc[flx_frc == 0] = FLX_FRC_MIN

    F = flx_dwn_bb * flx_frc
    zeros = np.zeros_like(F)
    F_dr0, F_df0 = (F, zeros) if direct_beam else (zeros, F)

    return xr.Dataset(
        coords=_wl_coord_dict(snicar_wl()),
        data_vars={
            "flx_frc": ("wl", flx_frc, {"long_name": "Incident flux fraction", "units": ""}),
            "F_dr0": _tup("F_dr0", F_dr0),
            "F_df0": _tup("F_df0", F_df0),
        },
        attrs={"atm": atm, "direct_beam": int(direct_beam), "source": "snicar"},
    )
