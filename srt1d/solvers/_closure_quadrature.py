import math

from .common import TwoStreamCoeffs

short_name = "Quad"
long_name = "Quadrature"

mu_one = 1 / math.sqrt(3)


def gammas_quadrature(omega_star, g_star, mu_0):
    """Quadrature closure (Toon et al. 1989, Table 1)."""
    sqrt3 = math.sqrt(3)
    gamma1 = sqrt3 * (2 - omega_star * (1 + g_star)) / 2
    gamma2 = omega_star * sqrt3 * (1 - g_star) / 2
    gamma3 = (1 - sqrt3 * g_star * mu_0) / 2
    gamma4 = 1 - gamma3

    return TwoStreamCoeffs(gamma1, gamma2, gamma3, gamma4, mu_one)
