"""Configure global settings and get information about the working environment."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

# Functional Cross-Covariance (fcrcov) for Python
# ===============================================
#
# fcrcov estimates smooth cross-covariance functions between a sparsely observed
# functional variable and a scalar variable, following the approach of the R fdapace
# package (GetCrCovYZ).
#
# Raw cross-covariances are smoothed by local linear regression and the bandwidth can be
# selected automatically by generalized cross-validation.
# The estimator follows scikit-learn's interface and utilities.

import importlib as _importlib
import logging

logger = logging.getLogger(__name__)


# PEP0440 compatible formatted version, see:
# https://www.python.org/dev/peps/pep-0440/
#
# Dev branch marker is: 'X.Y.dev' or 'X.Y.devN' where N is an integer.
# 'X.Y.dev0' is the canonical version of 'X.Y.dev'

__version__ = "0.1.0.dev0"

from fcrcov.crosscov import FunctionalCrossCovariance, get_cross_cov_yz  # noqa: F401 E402
from fcrcov.functional_data_generator import CrossCovDataGenerator  # noqa: F401 E402

_submodules = [
    "crosscov",
    "exceptions",
    "interp",
    "smooth",
    "utils",
]

__all__ = _submodules + [
    "CrossCovDataGenerator",
    "FunctionalCrossCovariance",
    "get_cross_cov_yz",
]


def __dir__():
    return __all__ + ["__version__"]


def __getattr__(name):
    if name in _submodules:
        return _importlib.import_module(f"fcrcov.{name}")
    else:
        try:
            return globals()[name]
        except KeyError:
            raise AttributeError(f"Module 'fcrcov' has no attribute '{name}'")
