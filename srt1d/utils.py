"""
Some utility functions, mostly for internal use.
"""


def cf_units_to_tex(s: str):
    """Convert CF-style units string to TeX-like.
    (In order to get exponents in plot labels, etc.)
    """
    import re

    if s in ("", "1"):  # dimensionless
        return s

    def expify(match):
        m = match.group(0)
        return f"$^{{{m}}}$"

    # match integer exponents (with optional negative sign) directly following a unit symbol
    s_new = re.sub(r"(?<=[a-zA-Zμ])-?\d+", expify, s)

    return s_new


def as_layer_array(x, nlayers, *, dtype=float, name="value"):
    """Broadcast scalar or sequence `x` to a 1-D array of size `nlayers`.

    Raises
    ------
    ValueError
        If `x` is a sequence with the wrong number of elements.
    """
    import numpy as np

    a = np.asarray(x, dtype=dtype)
    if a.ndim == 0:
        return np.full(nlayers, a, dtype=dtype)
    a = a.ravel()
    if a.size != nlayers:
        raise ValueError(f"`{name}` has {a.size} values but there are {nlayers} layers")
    return a
