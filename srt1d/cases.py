"""
(Complete) sets of input parameters.
"""
import numpy as np

from .impurities import N_SPECIES

DEFAULT_DEPTH = 1000.0
"""Total snow depth (m) of the default (effectively semi-infinite) snowpack."""


def default_layer_thicknesses(nlayers, *, depth=DEFAULT_DEPTH, dz_top=0.02):
    """Layer thicknesses increasing geometrically from `dz_top` to the bottom layer,
    the layers summing to `depth`.
    """
    if nlayers == 1:
        return np.array([depth])
    # thin top layers, thick (semi-infinite) bottom layer
    dz = np.geomspace(dz_top, depth / 100, nlayers - 1)
    dz_btm = depth - dz.sum()
    if dz_btm <= 0:
        raise ValueError(f"{nlayers} layers starting at {dz_top} m do not fit in {depth} m")
    return np.r_[dz, dz_btm]


def load_default_case(nlayers):
    """Semi-infinite, clean snowpack of 100 μm spherical grains with density 150 kg m-3,
    with idealized optical properties and direct-beam clear-sky irradiance
    (see :mod:`srt1d.data.ideal`).
    """
    dz = default_layer_thicknesses(nlayers)

    p = dict(
        dz=dz,
        rho_snw=np.full(nlayers, 150.0),
        rds_snw=np.full(nlayers, 100.0),
        sno_shp=np.full(nlayers, 1, dtype=int),
        sno_fs=np.zeros(nlayers),
        sno_ar=np.zeros(nlayers),
        #
        mss_cnc=np.zeros((nlayers, N_SPECIES)),
        cell_nbr_conc=np.zeros(nlayers),
        alg_rds=np.full(nlayers, 10.0),
        dcmf=(0.015, 0.005, 0.05, 0.0),
        #
        mu_0=0.5,
        R_sfc=0.25,
        flx_dwn_bb=1.0,
        direct_beam=True,
        atm=1,
        #
        optics="ideal",
        ice_ri=3,
        dust_type=1,
        ash_type=1,
    )

    return p


def load_snicar_case(root, *, dz=(DEFAULT_DEPTH,), **kwargs):
    """Like :func:`load_default_case`, but using the SNICAR lookup tables in `root`.

    Parameters
    ----------
    root : path-like or None
        SNICAR data directory (see :func:`srt1d.data.snicar_root`).
    dz : array_like
        Layer thicknesses (m).
    **kwargs
        Other parameters, scalars (applied to all layers) or per-layer sequences,
        e.g. ``rds_snw=[100, 500]``, ``atm=4``.
        Impurities can be given by species name, e.g. ``bc=[50, 0]`` (ppb).
    """
    from .data import snicar_root
    from .impurities import mss_cnc_table
    from .impurities import Species

    dz = np.atleast_1d(np.asarray(dz, dtype=float))
    nlayers = dz.size

    p = load_default_case(nlayers)
    p.update(dz=dz, optics=snicar_root(root).as_posix())

    species_cnc = {k: kwargs.pop(k) for k in list(kwargs) if k in Species.__members__}
    if species_cnc:
        p["mss_cnc"] = mss_cnc_table(nlayers, **species_cnc)

    layer_keys = ("rho_snw", "rds_snw", "sno_shp", "sno_fs", "sno_ar", "cell_nbr_conc", "alg_rds")
    for k, v in kwargs.items():
        if k in layer_keys:
            v = np.broadcast_to(v, (nlayers,)).copy()
        p[k] = v

    return p
