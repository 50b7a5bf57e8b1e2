"""
Exceptions and warnings raised by the snowpack RT calculations.
"""


class InvalidImpurityLoad(ValueError):
    """Impurity and algae burdens exceed the layer mass (negative ice mass)."""

    def __init__(self, layer, L_ice):
        self.layer = layer
        self.L_ice = L_ice
        super().__init__(
            f"impurity + algae burden exceeds the snow mass in layer {layer} "
            f"(ice mass would be {L_ice:.4g} kg m-2)"
        )


class MissingOpticalProperty(FileNotFoundError):
    """No optical property data for the requested lookup key."""

    def __init__(self, key, path=None):
        self.key = key
        self.path = path
        msg = f"no optical property data for {key!r}"
        if path is not None:
            msg += f" (expected file {path})"
        super().__init__(msg)


class SingularBoundaryConditionWarning(RuntimeWarning):
    r"""The direct-beam particular solution is near-singular
    (:math:`\lambda^2 \approx 1/\mu_0^2`)."""


class EnergyImbalanceWarning(RuntimeWarning):
    """Incident flux does not match absorbed + transmitted + reflected."""


class FluxConsistencyWarning(RuntimeWarning):
    """Net flux from the solution coefficients does not match up minus down flux."""
