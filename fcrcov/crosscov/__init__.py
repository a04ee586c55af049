"""Cross-covariance between functional and scalar variables."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from fcrcov.crosscov.cross_cov_result_class import (
    CrossCovParams,
    CrossCovResult,
    DenseSamples,
    RawCrossCovariance,
    SparseSamples,
    as_functional_samples,
)
from fcrcov.crosscov.raw_cross_cov import get_raw_cross_cov, get_raw_cross_cov_dense
from fcrcov.crosscov.cross_covariance import (
    FunctionalCrossCovariance,
    estimate_cross_cov,
    get_cross_cov_yz,
    smooth_raw_cross_cov,
)

__all__ = [
    "CrossCovParams",
    "CrossCovResult",
    "DenseSamples",
    "FunctionalCrossCovariance",
    "RawCrossCovariance",
    "SparseSamples",
    "as_functional_samples",
    "estimate_cross_cov",
    "get_cross_cov_yz",
    "get_raw_cross_cov",
    "get_raw_cross_cov_dense",
    "smooth_raw_cross_cov",
]
