# setup.py needed in order to have a pip editable install
from setuptools import setup

setup(
    use_scm_version={"write_to": "srt1d/_version.py", "fallback_version": "0.1.0"},
    include_package_data=True,
)  # config is in setup.cfg
