from __future__ import annotations
from setuptools import find_packages, setup


def read_file(fname):
    with open(fname, encoding="utf-8") as fd:
        return fd.read()


NAME = "fireweather-core"
DESCRIPTION = "Fine fuel moisture and probability of ignition from fire weather reference tables"
LONG_DESCRIPTION = read_file("README.md")
VERSION = "0.1.0"
LICENSE = "MIT"
INSTALL_REQUIRES = [
    "dask",
    "numpy",
    "pandas",
    "pandera",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest",
    ],
}
setup(
    name=NAME,
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    license=LICENSE,
    classifiers=[
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering",
    ],
    package_dir={"": "."},
    packages=find_packages(exclude=["docs", "tests", "tests.*"]),
    package_data={"fireweather_core": ["data/*"]},
    include_package_data=True,
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    python_requires=">=3.9",
)
