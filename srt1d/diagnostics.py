"""
Calculations/plots using the snowpack RT solutions.

:func:`summarize` aggregates a raw solver solution into band-integrated quantities.
The other functions operate on the model output dataset created by :meth:`srt1d.Model.to_xr()`.
"""
import warnings

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import xarray as xr

from .errors import EnergyImbalanceWarning
from .spectra import _edges_from_centers
from .spectra import _x_frac_in_bounds
from .spectra import BAND_DEFNS_UM
from .spectra import vis_nir_slices
from .utils import cf_units_to_tex as _cf_units_to_tex

C_ICE = 2117.0
"""Specific heat capacity of ice (J kg-1 K-1)."""

ENERGY_TOL = 1e-10
"""Tolerance on the summed absolute energy conservation residual (W m-2)."""


def summarize(sol, *, F_dr0, F_df0, L_ice):
    """Spectrally integrated quantities and the energy conservation check
    for solution `sol` from :func:`~srt1d.solvers.solve_toon`.

    Band albedos are weighted by the incident flux in each band.

    Parameters
    ----------
    sol : dict
    F_dr0, F_df0 : array_like
        Incident direct and diffuse flux in each band (W m-2).
    L_ice : array_like
        Ice burden of each layer (kg m-2), for the heating rate.

    Warns
    -----
    EnergyImbalanceWarning
        If the summed absolute residual exceeds :const:`ENERGY_TOL`.

    Returns
    -------
    dict
    """
    albedo = sol["albedo"]
    F_abs = sol["F_abs"]
    F_btm_net = sol["F_btm_net"]
    F_top_pls = sol["F_top_pls"]
    flx_dwn_spc = np.asarray(F_dr0, dtype=float) + np.asarray(F_df0, dtype=float)
    vis, nir = vis_nir_slices(albedo.size)

    def wavg(x, s):
        return (flx_dwn_spc[s] * x[s]).sum() / flx_dwn_spc[s].sum()

    # absorption in each layer
    F_abs_slr = F_abs.sum(axis=1)
    F_abs_vis = F_abs[:, vis].sum(axis=1)
    F_abs_nir = F_abs[:, nir].sum(axis=1)

    heating_rate = F_abs_slr / (np.asarray(L_ice, dtype=float) * C_ICE) * 3600  # K/s -> K/h

    # incident = absorbed + transmitted + reflected
    abs_spc = F_abs.sum(axis=0)
    energy_sum = flx_dwn_spc - (abs_spc + F_btm_net + F_top_pls)
    energy_error = np.abs(energy_sum).sum()
    if energy_error > ENERGY_TOL:
        warnings.warn(
            f"Energy conservation error of {energy_error:.4g} W m-2 "
            f"(incident {flx_dwn_spc.sum():.4g} W m-2)",
            EnergyImbalanceWarning,
        )

    return {
        "alb_slr": wavg(albedo, slice(None)),
        "alb_vis": wavg(albedo, vis),
        "alb_nir": wavg(albedo, nir),
        "abs_snw_slr": F_abs_slr.sum(),
        "abs_snw_vis": F_abs_vis.sum(),
        "abs_snw_nir": F_abs_nir.sum(),
        "abs_spc": abs_spc,
        "abs_snw_top_slr": F_abs_slr[0],
        "abs_snw_top_vis": F_abs_vis[0],
        "abs_snw_top_nir": F_abs_nir[0],
        "abs_ground_slr": F_btm_net.sum(),
        "abs_ground_vis": F_btm_net[vis].sum(),
        "abs_ground_nir": F_btm_net[nir].sum(),
        "flx_dwn_spc": flx_dwn_spc,
        "flx_dwn_top_slr": flx_dwn_spc.sum(),
        "flx_dwn_top_vis": flx_dwn_spc[vis].sum(),
        "flx_dwn_top_nir": flx_dwn_spc[nir].sum(),
        "F_abs_slr": F_abs_slr,
        "F_abs_vis": F_abs_vis,
        "F_abs_nir": F_abs_nir,
        "heating_rate": heating_rate,
        "energy_sum": energy_sum,
        "energy_error": energy_error,
    }


def band(ds, *, variables=None, band_name="solar", bounds=None):
    """Reduce spectral variables in `ds` by summing in-band fluxes
    to give the integrated flux in a given spectral band.

    `bounds` does not have to be provided if `band_name` is one of the known bands.
    If `variables` is ``None``, all variables with units W m-2 and a wavelength dimension
    are reduced.
    Spectral albedo, if present, is reduced to the incident-flux-weighted band albedo.

    Returns
    -------
    xr.Dataset
        New dataset with no wavelength dimension.
    """
    ds = ds.copy()
    if bounds is None:
        bounds = BAND_DEFNS_UM[band_name]

    try:
        wle = ds.wle.values
    except AttributeError:
        warnings.warn(
            "`wle` was not present so we are computing the wave band edges "
            "from the band centers (`wl`)."
        )
        wle = _edges_from_centers(ds.wl.values)

    # weights as a function of wavelength
    w = xr.DataArray(dims="wl", data=_x_frac_in_bounds(wle, bounds))

    if variables is None:
        vns = [
            vn
            for vn in ds.data_vars
            if "wl" in ds[vn].dims and ds[vn].attrs.get("units") == "W m-2"
        ]
    else:
        vns = list(variables)

    if "albedo" in ds.data_vars and "flx_dwn_spc" in ds.data_vars:
        da = ds["albedo"]
        F = ds["flx_dwn_spc"] * w
        ds["albedo"] = (da * F).sum(dim="wl") / F.sum(dim="wl")
        ds["albedo"].attrs.update(
            {
                "long_name": f"Albedo – {band_name}",
                "units": "",
            }
        )

    for vn in vns:
        da = ds[vn]
        ln_new = f"{da.attrs['long_name']} – {band_name}"
        units = da.attrs["units"]
        ds[vn] = (da * w).sum(dim="wl")
        ds[vn].attrs.update(
            {
                "long_name": ln_new,
                "units": units,
            }
        )

    ds.attrs.update(
        {
            "band_name": band_name,
            "band_bounds": bounds,
        }
    )

    # drop anything else still spectral
    spectral = [vn for vn in ds.data_vars if "wl" in ds[vn].dims]
    return ds.drop_vars(spectral).drop_dims("wl", errors="ignore")


def _ds_labels(dsets, ds_labels):
    if isinstance(ds_labels, str):
        labels = [ds.attrs[ds_labels] for ds in dsets]
    elif isinstance(ds_labels, list):
        labels = ds_labels[:]
    else:
        raise TypeError("`ds_labels` must be str or list of str")
    assert len(labels) == len(dsets)
    return labels


def plot_compare_albedo(dsets, *, ref=None, ds_labels="closure_short_name", ax=None):
    """Plot spectral albedo for a set of datasets.

    Parameters
    ----------
    dsets : list of xr.Dataset
        Created using :meth:`srt1d.Model.to_xr`.
    ref : int, optional
        Index of the dataset in `dsets` to use as the reference.
        If provided, a second panel shows the difference from the reference.
    ds_labels : str or list of str, optional
        If ``str``, must be a dataset attribute (that all in `dsets` have).
        If ``list``, should be same length as `dsets`.
    """
    if not isinstance(dsets, list):
        raise Exception("A list of dsets must be provided")

    labels = _ds_labels(dsets, ds_labels)

    if ref is not None:
        fig, [ax1, ax2] = plt.subplots(2, 1, figsize=(7, 5.5), sharex=True)
    elif ax is None:
        fig, ax1 = plt.subplots(figsize=(7, 4))
    else:
        ax1 = ax
        fig = ax1.get_figure()

    for label, ds in zip(labels, dsets):
        ax1.plot(ds.wl, ds.albedo, label=label)
    ax1.set(ylabel="Albedo")
    ax1.set_ylim((0, 1))

    if ref is not None:
        dsref = dsets[ref]
        for label, ds in zip(labels, dsets):
            if ds is dsref:
                continue
            ax2.plot(ds.wl, ds.albedo - dsref.albedo, label=label)
        ax2.set_title(f"Reference: {labels[ref]}", loc="left", fontsize=10)
        ax2.set(ylabel=r"$\Delta$ albedo")
        ax2.axhline(0, c="0.5", lw=1)
        axs = [ax1, ax2]
    else:
        axs = [ax1]

    for ax_ in axs:
        ax_.grid(True)
        ax_.autoscale(enable=True, axis="x", tight=True)
    axs[-1].set(xlabel="Wavelength (μm)")

    ax1.legend()
    fig.tight_layout()


def plot_compare_abs(dsets, *, band_name="solar", bounds=None, ds_labels="closure_short_name"):
    """Plot absorbed flux profiles (in the specified band) for a set of datasets."""
    if not isinstance(dsets, list):
        raise Exception("A list of dsets must be provided")

    labels = _ds_labels(dsets, ds_labels)
    dsets = [band(ds, band_name=band_name, bounds=bounds) for ds in dsets]

    fig, ax = plt.subplots(figsize=(4, 4.5))

    for label, ds in zip(labels, dsets):
        da = ds["F_abs"]
        ax.plot(da, ds.depth, ".-", label=label)

    ax.set(
        xlabel=f"{da.long_name} [{_cf_units_to_tex(da.units)}]",
        ylabel="Depth of layer bottom (m)",
    )
    ax.invert_yaxis()
    ax.grid(True)
    ax.legend()
    fig.tight_layout()


def compare_ebal(dsets, *, band_name="solar", bounds=None, ds_labels="closure_name"):
    """
    For `dsets`, assess energy balance closure by comparing
    computed snowpack and ground absorption to incoming minus outgoing
    radiation at the snow surface.

    Parameters
    ----------
    dsets : list of xr.Dataset
        Created using :meth:`~srt1d.Model.to_xr`.

    Returns
    -------
    pd.DataFrame
    """
    if not isinstance(dsets, list):
        raise Exception("A list of dsets must be provided")

    IDs = _ds_labels(dsets, ds_labels)

    # integrate over the band
    dsets = [band(ds, band_name=band_name, bounds=bounds) for ds in dsets]

    columns = [
        "incoming",
        "outgoing (reflected)",
        "ground absorbed",
        "layerwise abs sum",
        "in-out-ground",
        "residual",
    ]
    df = pd.DataFrame(index=IDs, columns=columns, dtype=float)

    for ID, ds in zip(IDs, dsets):
        incoming = float(ds["flx_dwn_spc"])
        outgoing = float(ds["F_top_pls"])
        ground_abs = float(ds["F_btm_net"])
        layer_abs_sum = float(ds["F_abs"].sum())
        df.loc[ID, columns[0]] = incoming
        df.loc[ID, columns[1]] = outgoing
        df.loc[ID, columns[2]] = ground_abs
        df.loc[ID, columns[3]] = layer_abs_sum
        df.loc[ID, columns[4]] = incoming - outgoing - ground_abs
        df.loc[ID, columns[5]] = incoming - outgoing - ground_abs - layer_abs_sum

    return df
