from .common import TwoStreamCoeffs

short_name = "Edd"
long_name = "Eddington"

mu_one = 0.5


def gammas_eddington(omega_star, g_star, mu_0):
    """Eddington closure (Toon et al. 1989, Table 1)."""
    gamma1 = (7 - omega_star * (4 + 3 * g_star)) / 4
    gamma2 = -(1 - omega_star * (4 - 3 * g_star)) / 4
    gamma3 = (2 - 3 * g_star * mu_0) / 4
    gamma4 = 1 - gamma3

    return TwoStreamCoeffs(gamma1, gamma2, gamma3, gamma4, mu_one)
