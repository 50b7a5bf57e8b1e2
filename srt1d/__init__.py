"""
1-D snowpack spectral radiative transfer
"""
from pathlib import Path as _Path

# directories
BASE_DIR = _Path(__file__).parent
DATA_BASE_DIR = BASE_DIR / "data"

# include Model in pkg-level namespace
from .model import Model  # noqa: E402,F401 unused import

# include diagnostics module (not used by the model)
from . import diagnostics  # noqa: E402,F401 unused import

# set version
try:
    from . import _version

    __version__ = _version.version
except ImportError:
    # the package is probably not installed
    pass


def print_config():
    """Print info about the closures, data dirs, etc."""
    from .data import snicar_root
    from .solvers import AVAILABLE_CLOSURES

    # config summary
    sconfig = f"""
closure IDs available: {', '.join(AVAILABLE_CLOSURES.keys())}
srt1d base dir
    {BASE_DIR.as_posix():s}
looking for SNICAR lookup tables in
    {snicar_root().as_posix():s}
    """.strip()
    print(sconfig)
