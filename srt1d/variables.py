"""
Variable metadata from the ``variables.yml`` file.
"""

from .utils import cf_units_to_tex


class VmdEntry:
    """Variable metadata for one variable."""

    def __init__(self, name, params, param_defaults):
        r"""
        Parameters
        ----------
        name : str
            Code variable name associated with the variable.
            Used as the ``name`` for :class:`xarray.DataArray`\s.
        params : dict
            Parameters for this variable.
        param_defaults : dict
            Default parameters (to use if `params` is missing any of the needed).
        """
        self.name = name

        # required (we want it to fail if not provided)
        self.desc = params["desc"]

        # ones that have defaults
        self.s_type = params.get("type", param_defaults["type"])
        self.long_name = params.get("ln", param_defaults["ln"])
        self.intent = params.get("intent", param_defaults["intent"])
        self.is_param = params.get("param", param_defaults["param"])
        self.s_units = str(params.get("units", param_defaults["units"]))
        self.s_units_long = params.get("units_long", param_defaults["units_long"])

        # shape and dims only apply to array_like type
        if self.s_type == "array_like":
            self.s_shape = params["shape"]
            self.dims = _dims_from_s_shape(self.s_shape)
        else:
            self.s_shape = ""
            self.dims = ()

    def da_attrs(self):
        """Return dict of attributes to use when creating an :class:`xarray.DataArray`
        for this variable.
        """
        attrs = {
            "long_name": self.long_name,
            "units": self.s_units,
        }
        if self.s_units_long:
            attrs.update(
                {
                    "units_long": self.s_units_long,
                }
            )

        return attrs

    def dv_tuple(self, data):
        """Construct an :class:`xarray.Dataset` ``data_vars`` tuple."""
        return (self.dims, data, self.da_attrs())

    def tex_label(self) -> str:
        """Axis label with TeX-style units, e.g. for plots."""
        if self.s_units:
            return f"{self.long_name} [{cf_units_to_tex(self.s_units)}]"
        return self.long_name

    def __repr__(self):
        return f"{__class__.__name__}(name={self.name}, ...)"

    def __str__(self):
        # fuller representation
        attrs = [
            "s_type",
            "long_name",
            "s_units",
            "s_units_long",
            "s_shape",
            "dims",
            "intent",
            "is_param",
        ]
        s0 = f"{self.name}\n"
        s = "\n".join(f"  {attr}: {getattr(self, attr)!r}" for attr in attrs)
        s += "\n  desc: ..."
        return s0 + s


class Vmd:
    """Container for variable metadata of multiple variables."""

    def __init__(self, vmdes):
        """
        Parameters
        ----------
        vmdes : list of VmdEntry
        """
        self.variables = {vmde.name: vmde for vmde in vmdes}

    def intent(self, intent="in"):
        """Return filtered set of variables that have the specified `intent`.

        Parameters
        ----------
        intent : str, {'in', 'out', 'none'}

        Returns
        -------
        dict
            ``name: VmdEntry``
        """
        if intent is None or intent == "all":
            return self.variables.copy()
        else:
            return {name: vmde for name, vmde in self.variables.items() if vmde.intent == intent}

    def params(self):
        """Variables that are model parameters (settable with :meth:`srt1d.Model.update_p`)."""
        return {name: vmde for name, vmde in self.variables.items() if vmde.is_param}

    def __getitem__(self, name):
        return self.variables[name]

    def __contains__(self, name):
        return name in self.variables

    def __repr__(self):
        s_vmdes = ", ".join(self.variables.keys())
        return f"{__class__.__name__}({s_vmdes})"


def _dims_from_s_shape(s_shape):
    """Detect xarray dims tuple from shape string, e.g. ``'(n_lyr, n_wl)'``.
    Helper for `VmdEntry` initialization."""
    assert s_shape[0] == "(" and s_shape[-1] == ")"
    shape_parts = [s for s in s_shape[1:-1].split(",") if s.strip()]

    dims = []
    for shape_part_raw in shape_parts:
        shape_part = shape_part_raw.strip()
        assert shape_part[:2] == "n_"
        dims.append(shape_part[2:])

    return tuple(dims)


def _vmd_from_yaml():
    """Load the variable info from the yml file."""
    from pathlib import Path

    import yaml

    p = Path(__file__).parent / "variables.yml"
    with open(p, "r", encoding="utf-8") as f:
        data = yaml.load(f, Loader=yaml.FullLoader)

    params_allowed = data["variable_params"]
    param_defaults = data["defaults"]
    variables = data["variables"]

    if any(k not in params_allowed for k in param_defaults):
        raise Exception("a param is listed as a default but not allowed")

    vmdes = []
    for name, params in variables.items():
        if any(k not in params_allowed for k in params):
            raise Exception(
                f"param(s) in `{name}` not allowed: "
                f"{', '.join(f'`{k}`' for k in set(params)-set(params_allowed))}"
            )

        vmdes.append(VmdEntry(name, params, param_defaults))

    vmd = Vmd(vmdes)

    return vmd


# Create the Vmd instance
VMD = _vmd_from_yaml()
"""
:class:`Vmd` instance with all the variables from ``variables.yml``.
"""


def _tup(name, data):
    """Shortcut function for creating an :class:`xarray.Dataset` ``data_vars`` tuple
    for variable `name` using the values of `data`
    and the standard variable metadata :const:`VMD`.
    """
    return VMD[name].dv_tuple(data)


def _wl_coord_dict(wl, *, units="μm"):
    return {"wl": (("wl"), wl, {"long_name": "Wavelength", "units": units})}
