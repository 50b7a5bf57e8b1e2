import math

from .common import TwoStreamCoeffs

short_name = "HM"
long_name = "Hemispheric mean"

mu_one = 0.5


def gammas_hemispheric_mean(omega_star, g_star, mu_0):
    r"""Hemispheric-mean closure (Toon et al. 1989, Table 1).

    :math:`\gamma_3` is taken from the quadrature closure,
    since the hemispheric-mean closure is meant for diffuse (thermal) sources.
    """
    gamma1 = 2 - omega_star * (1 + g_star)
    gamma2 = omega_star * (1 - g_star)
    gamma3 = (1 - math.sqrt(3) * g_star * mu_0) / 2
    gamma4 = 1 - gamma3

    return TwoStreamCoeffs(gamma1, gamma2, gamma3, gamma4, mu_one)
