"""
The two-stream solver and its closures.

The closures are written as functions of ``(omega_star, g_star, mu_0)``
that can be called outside the model. Each lives in a ``_closure_<name>.py`` module
and is collected into :const:`AVAILABLE_CLOSURES` when this package is imported.
"""

# note that __all__ is modified below when loading the closures
__all__ = [
    "AVAILABLE_CLOSURES",
    "CLOSURE_ARGS",
    "TwoStreamCoeffs",
    "get_closure",
    "solve_toon",
]

from .common import TwoStreamCoeffs  # noqa: E402
from .toon import solve_toon  # noqa: E402


def _get_closure_module_names():
    from pathlib import Path

    solvers_dir = Path(__file__).parent
    return sorted(p.stem for p in solvers_dir.glob("_closure_*.py"))


def _closure_id_from_module_name(s):
    return s[9:]


_closure_module_names = _get_closure_module_names()
_closure_names = [_closure_id_from_module_name(mn) for mn in _closure_module_names]
_closure_modules = dict(zip(_closure_names, _closure_module_names))

CLOSURE_ARGS = ["omega_star", "g_star", "mu_0"]
"""The positional arguments every closure function must take, in order."""


AVAILABLE_CLOSURES = {closure_name: {} for closure_name in _closure_names}
"""
Dictionary of available two-stream closures, where keys are the closure name/ID,
and values are dicts of closure info: ``short_name``, ``long_name``,
``gammas`` (the coefficient function), ``mu_one``, etc.
"""


def _construct_closure_dicts():
    """Extract info from the individual closure modules to fill `AVAILABLE_CLOSURES`."""
    import inspect
    import warnings
    from importlib import import_module

    drop_list = []
    for name, closure_dict in AVAILABLE_CLOSURES.items():
        module_name = _closure_modules[name]

        closure_dict["module_name"] = module_name
        closure_dict["name"] = name  # `name` is the primary identifier

        module = import_module(f".{module_name}", package=__name__)
        gammas = getattr(module, f"gammas_{name}")
        long_name = getattr(module, "long_name", "")
        if not long_name:
            warnings.warn(f"`long_name` not defined for closure module {module_name!r}")

        closure_dict["short_name"] = getattr(module, "short_name", name)
        closure_dict["long_name"] = long_name
        closure_dict["mu_one"] = getattr(module, "mu_one")
        closure_dict["gammas"] = gammas

        # drop closure and warn if args don't match with expected
        args = inspect.getfullargspec(gammas).args
        if args != CLOSURE_ARGS:
            warnings.warn(
                f"Arguments for closure {name!r} not compatible with the expected:\n"
                f"  {', '.join(CLOSURE_ARGS)}\n"
                f"As a result, {name!r} will not be loaded.\n"
                "Got:\n"
                f"  {', '.join(args)}"
            )
            drop_list.append(name)

    for name in drop_list:
        AVAILABLE_CLOSURES.pop(name)


_construct_closure_dicts()


def get_closure(name):
    """Closure info dict for closure `name`.

    Raises
    ------
    ValueError
        If `name` is not one of :const:`AVAILABLE_CLOSURES`.
    """
    try:
        return AVAILABLE_CLOSURES[name]
    except KeyError:
        raise ValueError(
            f"{name!r} is not a valid closure name/ID! "
            f"The valid ones are: {', '.join(AVAILABLE_CLOSURES)}."
        ) from None


# add closure functions to the solvers module namespace
for _closure_dict in AVAILABLE_CLOSURES.values():
    _gammas = _closure_dict["gammas"]
    globals().update({_gammas.__name__: _gammas})
    __all__.append(_gammas.__name__)
