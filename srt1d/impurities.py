"""
Light-absorbing impurity species and the snow algae cell-mass model.

The 14 aerosol-like species are kept in a fixed order so that a per-layer
concentration table ``mss_cnc`` (shape ``(n_lyr, 14)``, ppb)
lines up with the impurity optical property arrays (``(14, n_wl)``).
"""
import math
from enum import Enum

import numpy as np

__all__ = (
    "Species",
    "N_SPECIES",
    "mss_cnc_table",
    "alg_mass_per_cell",
    "alg_mss_cnc",
    "ALG_RDS_AVAILABLE",
)


class Species(Enum):
    """Impurity species, in the column order of ``mss_cnc``."""

    bc = "uncoated black carbon"
    bc_coated = "sulfate-coated black carbon"
    brc = "uncoated brown carbon"
    brc_coated = "sulfate-coated brown carbon"
    dust1 = "dust size 1 (0.05-0.5 um)"
    dust2 = "dust size 2 (0.5-1.25 um)"
    dust3 = "dust size 3 (1.25-2.5 um)"
    dust4 = "dust size 4 (2.5-5.0 um)"
    dust5 = "dust size 5 (5.0-50 um)"
    ash1 = "volcanic ash size 1 (0.05-0.5 um)"
    ash2 = "volcanic ash size 2 (0.5-1.25 um)"
    ash3 = "volcanic ash size 3 (1.25-2.5 um)"
    ash4 = "volcanic ash size 4 (2.5-5.0 um)"
    ash5 = "volcanic ash size 5 (5.0-50 um)"

    @property
    def index(self):
        """Column of this species in ``mss_cnc``."""
        return _SPECIES_ORDER.index(self)

    @property
    def kind(self):
        """``'bc'``, ``'brc'``, ``'dust'`` or ``'ash'``."""
        return self.name.rstrip("0123456789").replace("_coated", "")

    @property
    def size_bin(self):
        """Size bin (1--5) for dust/ash, else ``None``."""
        if self.name[-1].isdigit():
            return int(self.name[-1])
        return None

    @property
    def coated(self):
        return self.name.endswith("_coated")


_SPECIES_ORDER = list(Species)

N_SPECIES = len(_SPECIES_ORDER)

# Dust/ash size bin bounds (µm radius) used for the idealized optics
SIZE_BIN_BOUNDS_UM = {
    1: (0.05, 0.5),
    2: (0.5, 1.25),
    3: (1.25, 2.5),
    4: (2.5, 5.0),
    5: (5.0, 50.0),
}

ALG_RDS_AVAILABLE = (1, 2, 5, 10, 15, 20, 25, 30, 40, 50)
"""Algae cell radii (µm) that have lookup tables."""

RHO_ALG = 1080.0  # algae cell density (kg m-3)


def mss_cnc_table(nlayers, **species_cnc):
    """Build the ``(nlayers, 14)`` impurity concentration table (ppb).

    Parameters
    ----------
    nlayers : int
    **species_cnc
        Keyword arguments named after :class:`Species` members,
        e.g. ``bc=[100, 0]`` or ``dust3=500`` (scalar broadcast to all layers).

    Examples
    --------
    >>> mss_cnc_table(2, bc=[100, 0]).shape
    (2, 14)
    """
    mss_cnc = np.zeros((nlayers, N_SPECIES))
    for name, cnc in species_cnc.items():
        try:
            sp = Species[name]
        except KeyError:
            raise ValueError(
                f"unknown impurity species {name!r}. "
                f"Valid options are: {', '.join(s.name for s in Species)}."
            ) from None
        mss_cnc[:, sp.index] = np.broadcast_to(np.asarray(cnc, dtype=float), (nlayers,))

    return mss_cnc


def alg_mass_per_cell(alg_rds):
    r"""Mean mass of one algal cell (kg).

    Mean cell volume is the third moment of a Gaussian size distribution
    with mean radius :math:`r` and :math:`\sigma = 0.1 r`:

    .. math::
       \bar{V} = \frac{4}{3} \pi (r^3 + 3 r \sigma^2)

    Parameters
    ----------
    alg_rds : float or array_like
        Mean cell radius (µm).
    """
    r = np.asarray(alg_rds, dtype=float)
    sigma = 0.1 * r
    mean_vol_cell = 4 / 3 * math.pi * (r**3 + 3 * r * sigma**2)  # µm3
    return mean_vol_cell * 1e-18 * RHO_ALG


def alg_mss_cnc(cell_nbr_conc, alg_rds):
    """Algae mass mixing ratio (kg kg-1) from cell abundance (cells mL-1)."""
    return np.asarray(cell_nbr_conc, dtype=float) * 1000 * alg_mass_per_cell(alg_rds)
