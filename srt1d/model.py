"""
This module contains the model class :class:`Model`, which can be used to
conveniently compute snowpack albedo and absorption profiles with different
two-stream closures with minimal boilerplate code needed.

This module also contains functions that operate on the model state,
most of which are also attached as class methods.
Functions that operate on :class:`xr.Dataset` s
created by :meth:`Model.to_xr` are in :mod:`.diagnostics`.
"""
import math
import warnings
from collections import namedtuple
from copy import deepcopy

import matplotlib.pyplot as plt
import numpy as np
import xarray as xr

from . import data
from .cases import load_default_case
from .diagnostics import summarize
from .grain_shape import GrainShape
from .grain_shape import shape_corrected_asm_prm
from .impurities import ALG_RDS_AVAILABLE
from .impurities import N_SPECIES
from .impurities import Species
from .mixing import delta_transform
from .mixing import layer_burdens
from .mixing import mix_layers
from .solvers import AVAILABLE_CLOSURES
from .solvers import get_closure
from .solvers import solve_toon
from .spectra import _edges_from_centers
from .utils import as_layer_array
from .variables import VMD

__all__ = ("Model",)


SNOWPACK_DESCRIPTION_KEYS = [
    "dz",
    "rho_snw",
    "rds_snw",
    "sno_shp",
    "sno_fs",
    "sno_ar",
    "mss_cnc",
    "cell_nbr_conc",
    "alg_rds",
    "dcmf",
]

LAYER_KEYS = ("dz", "rho_snw", "rds_snw", "sno_shp", "sno_fs", "sno_ar", "cell_nbr_conc", "alg_rds")

# class for displaying snowpack parameters (model inputs, not outputs)
SnowpackDescription = namedtuple("SnowpackDescription", " ".join(SNOWPACK_DESCRIPTION_KEYS))

# keys of the optical property arrays derived from the optics source
OPTICS_KEYS = (
    "wl",
    "omega_ice",
    "ext_cff_mss_ice",
    "g_ice_mie",
    "omega_aer",
    "ext_cff_mss_aer",
    "g_aer",
    "omega_alg",
    "ext_cff_mss_alg",
    "g_alg",
    "F_dr0",
    "F_df0",
)


class Model:
    """Snowpack spectral albedo and absorption with the Toon et al. (1989) two-stream method."""

    required_input_keys = tuple(
        SNOWPACK_DESCRIPTION_KEYS
        + [
            "mu_0",
            "R_sfc",
            "flx_dwn_bb",
            "direct_beam",
            "atm",
            "optics",  # 'ideal' or SNICAR data dir
            "ice_ri",
            "dust_type",
            "ash_type",
        ]
    )
    """Required model inputs."""

    _closures = AVAILABLE_CLOSURES

    vmd = VMD

    def __init__(
        self,
        closure="hemispheric_mean",
        nlayers=1,
        *,
        delta=True,
        **p_kwargs,
    ):
        """
        Create a model instance based on the default setup.

        Parameters
        ----------
        closure : str
            Identifier for the desired two-stream closure
            (a key of :const:`~srt1d.solvers.AVAILABLE_CLOSURES`).
        nlayers : int
            Number of snow layers in the default setup.
        delta : bool
            Whether to apply the Delta-Eddington transform to the layer optical properties.
        **p_kwargs
            Model parameter keyword arguments.
            The solar zenith angle can be given as ``sza`` (degrees) instead of ``mu_0``.
            If `dz` is given, it sets the number of layers.
            Unlike with :meth:`update_p`, invalid parameters raise an error here.
        """
        # load default case, for given nlayers
        if "dz" in p_kwargs:
            nlayers = np.atleast_1d(p_kwargs["dz"]).size
        self.nlayers = nlayers
        self.p_default = load_default_case(nlayers=self.nlayers)
        """Default parameter settings dict."""

        # base initial settings on default
        self._p = deepcopy(self.p_default)
        for k, v in p_kwargs.items():
            if k == "sza":
                self._p["mu_0"] = _mu_0_from_sza(v)
                continue
            if k not in Model.required_input_keys:
                raise ValueError(f"{k!r} is not a model input")
            self._p[k] = v

        self.delta = delta

        # assign closure
        self.assign_closure(closure)  # assigns closure info dict to self.closure

        self._check_inputs()

        # run/output variables
        self._run_count = 0

        self.out = {}
        """Solution and its spectral integrals."""

        self.out_extra = {}
        """Intermediate quantities: layer optical properties, burdens, etc."""

    @property
    def p(self):
        """Model parameters are indended to be read only (updated with :meth:`update_p`).
        Invoking this just prints a message.
        """
        print(
            "Please update parameters using `.update_p()`! Changes to `.p` will not be stored!\n"
            "Extract (copy) the parameters using `.copy_p()` or summarize using `.print_p()`."
        )

    def print_p(self):
        """Pretty print the parameters."""
        import pprint

        pp = pprint.PrettyPrinter(indent=1)
        with np.printoptions(precision=3, threshold=7):
            pp.pprint({k: v for k, v in self._p.items() if k not in OPTICS_KEYS})

    def copy_p(self):
        """Return a copy of the parameters dict."""
        return deepcopy(self._p)

    @property
    def sd(self):
        """Snowpack description."""
        p = self._p
        return SnowpackDescription(**{k: p[k] for k in SNOWPACK_DESCRIPTION_KEYS})

    def __repr__(self):
        closure_name = self.closure["name"]
        mu_0 = self._p["mu_0"]
        return f"Model(closure={closure_name!r}, nlayers={self.nlayers}, mu_0={mu_0:.4g})"

    def assign_closure(self, closure_name):
        """Using the :const:`~srt1d.solvers.AVAILABLE_CLOSURES` dict,
        assign the two-stream closure.

        Raises
        ------
        ValueError
            If `closure_name` is not valid.
        """
        self.closure = get_closure(closure_name)

        return self  # for chaining

    def update_p(self, **kwargs):
        """Update parameters, if the validation passes.

        If the layer-wise parameters change the number of layers,
        they must all be updated at once.

        Parameters
        ----------
        `**kwargs`
            Used to update the model parameters.
        """
        import traceback

        p0 = deepcopy(self._p)
        nlayers0 = self.nlayers
        try:
            for k, v in kwargs.items():
                if k == "sza":
                    self._p["mu_0"] = _mu_0_from_sza(v)
                    continue
                if k not in Model.required_input_keys:
                    warnings.warn(f"{k!r} is not intended as an input and will be ignored")
                    continue
                # else, it is intended to be an input, so try to use it
                self._p[k] = v

            # now update other parameters and validate
            self._check_inputs()  # checks self._p

        except Exception:  # ValueError or other failure in calculating new derived params
            warnings.warn(
                f"Updating parameters failed. "
                f"Full traceback:\n\n{traceback.format_exc()}\n"
                "Reverting."
            )
            self._p = p0  # undo
            self.nlayers = nlayers0

        return self  # for chaining

    def update_impurities(self, **species_cnc):
        """Set impurity concentrations (ppb) by species name, e.g. ``bc=[100, 0]``.
        Species not given are set to zero."""
        from .impurities import mss_cnc_table

        return self.update_p(mss_cnc=mss_cnc_table(self.nlayers, **species_cnc))

    def _check_inputs(self):
        """Check the snowpack description and boundary conditions,
        and (re)load the optical properties and incident flux.
        """
        p = self._p
        # check for required input all at once variables
        for key in Model.required_input_keys:
            if key not in p:
                raise Exception(f"required key {key} is not present. Set it using `update_p`.")

        # layers
        dz = np.atleast_1d(np.asarray(p["dz"], dtype=float))
        nlayers = dz.size
        for key in LAYER_KEYS:
            dtype = int if key == "sno_shp" else float
            p[key] = as_layer_array(p[key], nlayers, dtype=dtype, name=key)
        self.nlayers = nlayers

        if np.any(p["dz"] <= 0):
            raise ValueError("layer thicknesses `dz` must be positive")
        if np.any((p["rho_snw"] <= 0) | (p["rho_snw"] >= 1000)):
            raise ValueError("snow density `rho_snw` must be in (0, 1000) kg m-3")
        if np.any(p["rds_snw"] <= 0):
            raise ValueError("grain radius `rds_snw` must be positive")
        valid_shapes = [s.value for s in GrainShape]
        if not np.isin(p["sno_shp"], valid_shapes).all():
            raise ValueError(f"grain shape `sno_shp` must be one of {valid_shapes}")
        if np.any(p["sno_fs"] < 0) or np.any(p["sno_ar"] < 0):
            raise ValueError("`sno_fs` and `sno_ar` must be non-negative (0 for default)")

        # impurities
        mss_cnc = np.asarray(p["mss_cnc"], dtype=float)
        if mss_cnc.shape != (nlayers, N_SPECIES):
            raise ValueError(f"`mss_cnc` must have shape ({nlayers}, {N_SPECIES})")
        if np.any(mss_cnc < 0):
            raise ValueError("impurity concentrations `mss_cnc` must be non-negative")
        p["mss_cnc"] = mss_cnc

        cell_nbr_conc = p["cell_nbr_conc"]
        if np.any(cell_nbr_conc < 0):
            raise ValueError("algae concentration `cell_nbr_conc` must be non-negative")
        has_alg = cell_nbr_conc > 0
        if not np.isin(p["alg_rds"][has_alg], ALG_RDS_AVAILABLE).all():
            raise ValueError(f"algae radius `alg_rds` must be one of {ALG_RDS_AVAILABLE} μm")
        dcmf = np.asarray(p["dcmf"], dtype=float)
        if dcmf.shape not in [(4,), (nlayers, 4)]:
            raise ValueError("`dcmf` must have 4 values (per layer or for all)")
        if np.any((dcmf < 0) | (dcmf > 1)):
            raise ValueError("pigment mass fractions `dcmf` must be in [0, 1]")

        # boundary conditions
        mu_0 = p["mu_0"]
        if not 0 < mu_0 <= 1:
            raise ValueError("`mu_0` must be in (0, 1]")
        p["sza"] = np.rad2deg(np.arccos(mu_0))
        R_sfc = np.asarray(p["R_sfc"], dtype=float)
        if np.any((R_sfc < 0) | (R_sfc > 1)):
            raise ValueError("underlying surface albedo `R_sfc` must be in [0, 1]")
        if p["flx_dwn_bb"] <= 0:
            raise ValueError("`flx_dwn_bb` must be positive")
        if p["atm"] not in data.ATM_STEMS:
            raise ValueError(f"`atm` must be one of {list(data.ATM_STEMS)}")
        if p["ice_ri"] not in data.ICE_RI_DIRS:
            raise ValueError(f"`ice_ri` must be one of {list(data.ICE_RI_DIRS)}")
        if p["dust_type"] not in data.DUST_STEMS:
            raise ValueError(f"`dust_type` must be one of {list(data.DUST_STEMS)}")
        if p["ash_type"] not in data.ASH_STEMS:
            raise ValueError(f"`ash_type` must be one of {list(data.ASH_STEMS)}")

        # optical properties and incident flux
        p.update(_load_optics(p))
        self.nwl = p["wl"].size

        if R_sfc.ndim:
            if R_sfc.size != self.nwl:
                raise ValueError(f"spectral `R_sfc` must have {self.nwl} values")
            p["R_sfc"] = R_sfc
        else:
            p["R_sfc"] = float(R_sfc)

    def run(self, **extra_solver_kwargs):
        """Compute the layer optical properties, solve, and aggregate.

        Parameters
        ----------
        **extra_solver_kwargs
            Passed on to :func:`~srt1d.solvers.solve_toon`, e.g. ``method='banded'``.
        """
        # no partial results from a failed run
        self.out = {}
        self.out_extra = {}

        self._check_inputs()

        p = self._p

        burdens = layer_burdens(
            p["dz"], p["rho_snw"], p["mss_cnc"], p["cell_nbr_conc"], p["alg_rds"]
        )

        g_ice = shape_corrected_asm_prm(
            p["wl"],
            p["g_ice_mie"],
            p["omega_ice"],
            p["rds_snw"],
            p["sno_shp"],
            p["sno_fs"],
            p["sno_ar"],
        )

        state = mix_layers(
            L_ice=burdens["L_ice"],
            L_aer=burdens["L_aer"],
            omega_ice=p["omega_ice"],
            ext_cff_mss_ice=p["ext_cff_mss_ice"],
            g_ice=g_ice,
            omega_aer=p["omega_aer"],
            ext_cff_mss_aer=p["ext_cff_mss_aer"],
            g_aer=p["g_aer"],
            L_alg=burdens["L_alg"],
            omega_alg=p["omega_alg"],
            ext_cff_mss_alg=p["ext_cff_mss_alg"],
            g_alg=p["g_alg"],
        )
        state_star = delta_transform(state) if self.delta else state

        sol = solve_toon(
            tau_star=state_star.tau,
            omega_star=state_star.omega,
            g_star=state_star.g,
            mu_0=p["mu_0"],
            R_sfc=p["R_sfc"],
            F_dr0=p["F_dr0"],
            F_df0=p["F_df0"],
            closure=self.closure["gammas"],
            **extra_solver_kwargs,
        )
        summary = summarize(sol, F_dr0=p["F_dr0"], F_df0=p["F_df0"], L_ice=burdens["L_ice"])

        self.out = {**sol, **summary}
        self.out_extra = {
            "L_ice": burdens["L_ice"],
            "g_ice": g_ice,
            "tau": state.tau,
            "tau_star": state_star.tau,
            "omega_star": state_star.omega,
            "g_star": state_star.g,
        }

        self._run_count += 1

        return self  # for chaining

    @property
    def out_all(self):
        """Standard and extra outputs."""
        return {**self.out, **self.out_extra}

    def to_xr(self, *, info=""):
        """Construct and return an :class:`xarray.Dataset`.

        Parameters
        ----------
        info : str
            Extra information about the run/model to be stored in the dataset.
        """
        import srt1d

        if not self.out:
            raise Exception("Must run the model before creating the dataset.")
        p = self._p
        out = self.out_all
        #
        # -- grids
        wl = p["wl"]
        wle = _edges_from_centers(wl)
        dwl = np.diff(wle)
        lyr = np.arange(self.nlayers)
        depth = np.cumsum(p["dz"])

        # -- define fn to look up variable metadata and create data_vars tuple
        def tup(name, data):
            return self.vmd[name].dv_tuple(data)

        skip = {"F_top_net", "F_dwn_spc"}  # duplicates
        out_vars = {k: tup(k, v) for k, v in out.items() if k not in skip}

        dset = xr.Dataset(
            coords={
                "wl": tup("wl", wl),
                "wle": ("wle", wle, {"long_name": "Wavelength band edge", "units": "μm"}),
                "lyr": tup("lyr", lyr),
                "depth": tup("depth", depth),
                "species": tup("species", [sp.name for sp in Species]),
            },
            data_vars={
                **out_vars,
                "dwl": ("wl", dwl, {"long_name": "Wavelength band width", "units": "μm"}),
                "dz": tup("dz", p["dz"]),
                "rho_snw": tup("rho_snw", p["rho_snw"]),
                "rds_snw": tup("rds_snw", p["rds_snw"]),
                "sno_shp": tup("sno_shp", p["sno_shp"]),
                "mss_cnc": tup("mss_cnc", p["mss_cnc"]),
                "cell_nbr_conc": tup("cell_nbr_conc", p["cell_nbr_conc"]),
                "R_sfc": tup("R_sfc", np.broadcast_to(p["R_sfc"], wl.shape)),
                "F_dr0": tup("F_dr0", p["F_dr0"]),
                "F_df0": tup("F_df0", p["F_df0"]),
                "mu_0": tup("mu_0", p["mu_0"]),
                "sza": tup("sza", p["sza"]),
            },
            attrs={
                "info": info,
                "closure_name": self.closure["name"],
                "closure_long_name": self.closure["long_name"],
                "closure_short_name": self.closure["short_name"],
                "delta": int(self.delta),
                "optics": str(p["optics"]),
                "srt1d_version": getattr(srt1d, "__version__", "unknown"),
            },
        )
        dset["depth"].attrs["positive"] = "down"

        return dset

    def plot_layers(self):
        """Plot the snowpack layer properties."""
        _plot_layers(self)

    def plot_incident_spectra(self):
        """Plot the incident (direct and diffuse) flux spectra used for the upper boundary condition."""
        _plot_incident_spectra(self)

    def plot_albedo(self):
        """Plot the spectral albedo from the last run."""
        _plot_albedo(self)


def _mu_0_from_sza(sza):
    """Cosine of the solar zenith angle `sza` (degrees)."""
    if not 0 <= sza < 90:
        raise ValueError("solar zenith angle `sza` must be in [0, 90) degrees")
    return math.cos(math.radians(sza))


def _load_optics(p):
    """Load ice, impurity and algae optical properties and the incident flux
    from the source ``p['optics']``: ``'ideal'`` or the SNICAR data directory.
    """
    nlayers = p["dz"].size
    ideal = isinstance(p["optics"], str) and p["optics"] == "ideal"

    # ice, one load per distinct grain size
    ice = {}
    for rds in np.unique(p["rds_snw"]):
        if ideal:
            ice[rds] = data.ideal_ice(rds)
        else:
            ice[rds] = data.load_snicar_ice(p["optics"], rds, ice_ri=p["ice_ri"])
    ds_ice = [ice[rds] for rds in p["rds_snw"]]
    wl = ds_ice[0]["wl"].values
    nwl = wl.size

    # impurities
    if ideal:
        ds_aer = data.ideal_impurities()
    else:
        ds_aer = data.load_snicar_impurities(
            p["optics"], dust_type=p["dust_type"], ash_type=p["ash_type"]
        )

    # algae, only in layers that have them
    omega_alg = np.zeros((nlayers, nwl))
    ext_cff_mss_alg = np.zeros((nlayers, nwl))
    g_alg = np.zeros((nlayers, nwl))
    dcmf = np.broadcast_to(np.asarray(p["dcmf"], dtype=float), (nlayers, 4))
    for n in np.flatnonzero(p["cell_nbr_conc"] > 0):
        alg_rds = int(p["alg_rds"][n])
        if ideal:
            ds_alg = data.ideal_algae(alg_rds, tuple(dcmf[n]))
        else:
            ds_alg = data.load_snicar_algae(p["optics"], alg_rds, tuple(dcmf[n]))
        omega_alg[n] = ds_alg["ss_alb"].values
        ext_cff_mss_alg[n] = ds_alg["ext_cff_mss"].values
        g_alg[n] = ds_alg["asm_prm"].values

    # incident flux
    if ideal:
        ds_irr = data.ideal_irradiance(
            p["mu_0"], direct_beam=p["direct_beam"], flx_dwn_bb=p["flx_dwn_bb"]
        )
    else:
        ds_irr = data.load_snicar_irradiance(
            p["optics"], atm=p["atm"], direct_beam=p["direct_beam"], flx_dwn_bb=p["flx_dwn_bb"]
        )

    return {
        "wl": wl,
        "omega_ice": np.stack([ds["ss_alb"].values for ds in ds_ice]),
        "ext_cff_mss_ice": np.stack([ds["ext_cff_mss"].values for ds in ds_ice]),
        "g_ice_mie": np.stack([ds["asm_prm"].values for ds in ds_ice]),
        "omega_aer": ds_aer["ss_alb"].values,
        "ext_cff_mss_aer": ds_aer["ext_cff_mss"].values,
        "g_aer": ds_aer["asm_prm"].values,
        "omega_alg": omega_alg,
        "ext_cff_mss_alg": ext_cff_mss_alg,
        "g_alg": g_alg,
        "F_dr0": ds_irr["F_dr0"].values,
        "F_df0": ds_irr["F_df0"].values,
    }


def _plot_layers(m):
    """Plot density, grain size and impurity burden profiles.

    `m` must be :class:`Model`
    """
    p = m._p
    depth_btm = np.cumsum(p["dz"])
    depth_top = depth_btm - p["dz"]

    def step(x):
        # layer values as a step profile
        return np.repeat(x, 2), np.column_stack([depth_top, depth_btm]).ravel()

    fig, axs = plt.subplots(1, 3, figsize=(7, 3.5), sharey=True, num="snow-layers")

    ax1, ax2, ax3 = axs
    ax1.plot(*step(p["rho_snw"]))
    ax1.set_title("Density (kg m$^{-3}$)", fontsize=10)
    ax1.set_ylabel("Depth (m)")

    ax2.plot(*step(p["rds_snw"]))
    ax2.set_title("Grain radius (μm)", fontsize=10)

    ax3.plot(*step(p["mss_cnc"].sum(axis=1)), label="impurities")
    ax3.set_title("Impurities (ppb)", fontsize=10)

    ax1.invert_yaxis()
    for ax in axs:
        ax.grid(True)
        if p["dz"].sum() > 10 * p["dz"][0]:
            ax.set_yscale("symlog", linthresh=p["dz"][0])

    fig.tight_layout()


def _plot_incident_spectra(m):
    """Plot the incident flux spectra."""
    p = m._p
    wl = p["wl"]
    dwl = np.diff(_edges_from_centers(wl))
    F_dr = p["F_dr0"]
    F_df = p["F_df0"]

    fig, ax = plt.subplots(figsize=(7, 4))

    ax.plot(wl, F_dr / dwl, label="direct")
    ax.plot(wl, F_df / dwl, label="diffuse")
    ax.plot(wl, (F_dr + F_df) / dwl, label="total")

    ax.set(xlabel="Wavelength (μm)", ylabel="Spectral flux (W m$^{-2}$ μm$^{-1}$)")

    ax.autoscale(enable=True, axis="x", tight=True)
    ax.set_ylim(ymin=0)

    ax.legend()
    fig.tight_layout()


def _plot_albedo(m):
    """Plot spectral albedo, with the band albedos noted."""
    if not m.out:
        raise Exception("Must run the model first.")
    out = m.out
    wl = m._p["wl"]

    fig, ax = plt.subplots(figsize=(7, 4))

    ax.plot(wl, out["albedo"], lw=2)
    ax.set(xlabel="Wavelength (μm)", ylabel="Albedo")
    ax.set_ylim((0, 1))
    ax.autoscale(enable=True, axis="x", tight=True)
    ax.grid(True)

    s = "\n".join(
        f"{name}: {out[k]:.3f}"
        for name, k in [("broadband", "alb_slr"), ("visible", "alb_vis"), ("near-IR", "alb_nir")]
    )
    ax.text(0.98, 0.97, s, ha="right", va="top", transform=ax.transAxes)
    ax.set_title(m.closure["long_name"], loc="left", color="0.4", fontsize=9)

    fig.tight_layout()
