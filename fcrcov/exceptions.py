"""Exceptions raised by the cross-covariance estimators."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from typing import Optional

import numpy as np

__all__ = [
    "AllCandidatesFailedError",
    "CrossCovarianceError",
    "InputCardinalityError",
    "LocalFitFailure",
    "MissingRequiredInputError",
    "UnsupportedKernelError",
]


class CrossCovarianceError(Exception):
    """Base class for all errors raised by fcrcov."""


class InputCardinalityError(CrossCovarianceError, ValueError):
    """The number of covariate values does not match the number of subjects."""


class MissingRequiredInputError(CrossCovarianceError, ValueError):
    """A required input (e.g. the mean function in the sparse design) is missing."""


class UnsupportedKernelError(CrossCovarianceError, ValueError):
    """Automatic bandwidth selection was requested for a non-Gaussian kernel."""


class LocalFitFailure(CrossCovarianceError, ArithmeticError):
    """The local linear fit is degenerate at one or more output locations.

    Parameters
    ----------
    message : str
        Description of the failure.
    locations : np.ndarray, optional
        Output locations where the local design was singular or had fewer than
        two distinct support points with positive weight.
    bandwidth : float, optional
        Bandwidth used for the failed fit.
    """

    def __init__(self, message: str, locations: Optional[np.ndarray] = None, bandwidth: Optional[float] = None):
        super().__init__(message)
        self.locations = np.array([]) if locations is None else np.asarray(locations)
        self.bandwidth = bandwidth


class AllCandidatesFailedError(CrossCovarianceError, ValueError):
    """Every bandwidth candidate failed or produced a non-finite GCV score."""
