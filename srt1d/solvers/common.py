"""
Common functions used by the two-stream solver and closures.
"""
from collections import namedtuple

import numpy as np
from scipy.linalg import solve_banded

TwoStreamCoeffs = namedtuple("TwoStreamCoeffs", "gamma1 gamma2 gamma3 gamma4 mu_one")
TwoStreamCoeffs.__doc__ = r"""Two-stream coefficients :math:`\gamma_{1..4}` (Toon et al. 1989, Table 1)
and the diffusivity cosine :math:`\mu_1`."""


def solve_tridiag_toon(A, B, D, E):
    r"""Solve the tridiagonal systems for all wavelengths at once.

    Row :math:`i` of the system is

    .. math::
       A_i Y_{i-1} + B_i Y_i + D_i Y_{i+1} = E_i

    Elimination proceeds upward from the last row and the unknowns
    are then recovered downward (Toon et al. 1989, Eqs. 45--47).

    Parameters
    ----------
    A, B, D, E : array_like
        Shape ``(2 n_lyr, n_wl)``. ``A[0]`` and ``D[-1]`` are not used.

    Returns
    -------
    Y : ndarray
        Shape ``(2 n_lyr, n_wl)``.
    """
    A, B, D, E = (np.asarray(a, dtype=float) for a in (A, B, D, E))
    m = B.shape[0]
    AS = np.empty_like(B)
    DS = np.empty_like(B)

    # Eq. 45
    AS[-1] = A[-1] / B[-1]
    DS[-1] = E[-1] / B[-1]

    # Eq. 46
    for i in range(m - 2, -1, -1):
        X = 1 / (B[i] - D[i] * AS[i + 1])
        AS[i] = A[i] * X
        DS[i] = (E[i] - D[i] * DS[i + 1]) * X

    # Eq. 47
    Y = np.empty_like(B)
    Y[0] = DS[0]
    for i in range(1, m):
        Y[i] = DS[i] - AS[i] * Y[i - 1]

    return Y


def solve_tridiag_banded(A, B, D, E):
    """Solve the same systems as :func:`solve_tridiag_toon`,
    wavelength by wavelength, with :func:`scipy.linalg.solve_banded`."""
    A, B, D, E = (np.asarray(a, dtype=float) for a in (A, B, D, E))
    m, nwl = B.shape
    Y = np.empty_like(B)
    ab = np.zeros((3, m))
    for j in range(nwl):
        ab[0, 1:] = D[:-1, j]
        ab[1, :] = B[:, j]
        ab[2, :-1] = A[1:, j]
        Y[:, j] = solve_banded((1, 1), ab, E[:, j])

    return Y


TRIDIAG_SOLVERS = {
    "thomas": solve_tridiag_toon,
    "banded": solve_tridiag_banded,
}
