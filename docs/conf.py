# Configuration file for the Sphinx documentation builder.
#
# This file only contains a selection of the most common options. For a full
# list see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html
import datetime
from importlib.metadata import version as _version


# -- Project information -----------------------------------------------------

project = "srt1d"
author = "srt1d developers"
copyright = f"2023–{datetime.datetime.now().year}, {author}"

# Get version from metadata
release = _version("srt1d")
version = ".".join(release.split(".")[:2])


# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.napoleon",
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.intersphinx",
    "sphinx.ext.autosectionlabel",
    "autoapi.extension",
    "myst_nb",
]


# -- Extension settings ------------------------------------------------------

# intersphinx
intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "xarray": ("https://docs.xarray.dev/en/stable/", None),
    "numpy": ("https://numpy.org/doc/stable", None),
    "scipy": ("https://docs.scipy.org/doc/scipy/", None),
    "pandas": ("https://pandas.pydata.org/pandas-docs/stable", None),
}

# napoleon
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_preprocess_types = True
napoleon_type_aliases = {
    "xr.Dataset": "xarray.Dataset",
    "xr.DataArray": "xarray.DataArray",
    # NumPy
    "array_like": ":term:`array_like`",
    "array-like": ":term:`array-like <array_like>`",
    "scalar": ":term:`scalar`",
    "array": ":term:`array`",
    "np.ndarray": "numpy.ndarray",
    "ndarray": "numpy.ndarray",
    # pandas
    "pd.DataFrame": "pandas.DataFrame",
}

# autoapi
autoapi_type = "python"
autoapi_dirs = ["../srt1d/"]
autoapi_add_toctree_entry = False
autoapi_root = "api"
autoapi_options = [
    "members",
    "show-module-summary",
    "imported-members",
]
autoapi_python_class_content = "both"  # include __init__ docstring as well as class
autoapi_member_order = "groupwise"

# autosectionlabel
autosectionlabel_prefix_document = True

# myst-nb: docs/examples are jupytext percent-format scripts
nb_custom_formats = {".py": ["jupytext.reads", {"fmt": "py:percent"}]}

exclude_patterns = ["_build", "conf.py", "Thumbs.db", ".DS_Store", "../srt1d/*"]


# -- Options for HTML output -------------------------------------------------

html_theme = "furo"

html_title = "srt1d"
html_last_updated_fmt = "%Y-%m-%d"
