"""Raw cross-covariance between a functional variable and a scalar variable"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

import logging
import warnings
from typing import Optional

import numpy as np
from sklearn.utils.validation import check_array

from fcrcov.crosscov.cross_cov_result_class import RawCrossCovariance
from fcrcov.exceptions import InputCardinalityError, MissingRequiredInputError
from fcrcov.interp import GridFunction
from fcrcov.utils import FlattenFunctionalData

logger = logging.getLogger(__name__)


def _check_covariate(z: np.ndarray, n_samples: int) -> np.ndarray:
    z = check_array(z, ensure_2d=False, dtype=np.float64, ensure_all_finite="allow-nan")
    if z.ndim != 1:
        raise ValueError("z must be a 1D array.")
    if z.size != n_samples:
        raise InputCardinalityError(
            f"y and z are not compatible (possibly different number of subjects): got {n_samples} subjects and {z.size} values of z."
        )
    return z


def get_raw_cross_cov(
    flatten_func_data: FlattenFunctionalData,
    mu: Optional[GridFunction],
    z: np.ndarray,
    z_mean: Optional[float] = None,
) -> RawCrossCovariance:
    """
    Get the raw cross-covariance between a sparse functional variable and a scalar.

    For every observation ``y_i(t)`` of subject ``i`` the raw value is
    ``(y_i(t) - mu(t)) * (z_i - z_mean)``. Every (subject, time point) contribution is
    kept, including duplicated time points across subjects.

    Parameters
    ----------
    flatten_func_data : FlattenFunctionalData
        Flattened functional data, see :func:`fcrcov.utils.flatten_and_sort_data_matrices`.
    mu : GridFunction
        Mean function of the functional variable; it must cover every observed time point.
    z : np.ndarray of shape (n_samples,)
        Scalar variable, one value per subject. NaN marks a missing value.
    z_mean : float, optional
        Mean of `z`. If None, the mean of the non-missing values of `z` is used.

    Returns
    -------
    RawCrossCovariance
        Locations, raw values and subject ids of every contribution.

    Raises
    ------
    InputCardinalityError
        If the length of `z` differs from the number of subjects.
    MissingRequiredInputError
        If `mu` is None.
    """
    z = _check_covariate(z, flatten_func_data.n_samples)
    if mu is None:
        raise MissingRequiredInputError("The mean function mu is missing without default.")
    if not np.isfinite(z).any():
        raise ValueError("All values in z are NaN.")
    if z_mean is None:
        z_mean = float(np.nanmean(z))
    elif np.isnan(z_mean):
        raise ValueError("z_mean should not be NaN.")

    z_centered = (z - z_mean)[flatten_func_data.sid]
    mask = ~np.isnan(z_centered)
    if not mask.all():
        dropped = np.unique(flatten_func_data.sid[~mask])
        warnings.warn(f"{dropped.size} subjects with missing z are excluded from the raw cross-covariance.")
    if not mask.any():
        raise ValueError("No observation has both y and z available.")

    t = flatten_func_data.t[mask]
    mu_t = mu(t)
    if np.isnan(mu_t).any():
        raise ValueError("The mean function mu must cover all observed time points.")
    raw_cov = (flatten_func_data.y[mask] - mu_t.astype(flatten_func_data.y.dtype, copy=False)) * z_centered[mask]
    logger.debug("Raw cross-covariance built from %d observations of %d subjects.", raw_cov.size, np.unique(flatten_func_data.sid[mask]).size)
    return RawCrossCovariance(t, raw_cov.astype(flatten_func_data.y.dtype, copy=False), flatten_func_data.sid[mask])


def get_raw_cross_cov_dense(y: np.ndarray, z: np.ndarray) -> RawCrossCovariance:
    """
    Get the raw cross-covariance between a densely observed functional variable and a scalar.

    For every grid column ``j`` the raw value is the sample covariance (divisor ``n_j - 1``)
    between ``y[:, j]`` and `z` over the ``n_j`` subjects observed in that column, so a
    missing amplitude only affects its own column. Subjects with a missing `z` are
    excluded with a warning. No smoothing is needed on a common grid.

    Parameters
    ----------
    y : np.ndarray of shape (n_samples, nt)
        Amplitudes, one row per subject.
    z : np.ndarray of shape (n_samples,)
        Scalar variable, one value per subject.

    Returns
    -------
    RawCrossCovariance
        Raw cross-covariance with one value per column and no locations.

    Raises
    ------
    InputCardinalityError
        If the length of `z` differs from the number of rows of `y`.
    ValueError
        If all values of `z` are NaN or a column has fewer than two observed subjects.
    """
    y = check_array(y, ensure_2d=True, dtype=[np.float64, np.float32], ensure_all_finite="allow-nan")
    z = _check_covariate(z, y.shape[0])
    z_missing = np.isnan(z)
    if z_missing.all():
        raise ValueError("All values in z are NaN.")
    if z_missing.any():
        warnings.warn(f"{np.count_nonzero(z_missing)} subjects with missing z are excluded from the raw cross-covariance.")
        y, z = y[~z_missing], z[~z_missing]

    # pairwise complete: each column only uses the subjects observed in it
    observed = ~np.isnan(y)
    n_observed = np.count_nonzero(observed, axis=0)
    if np.any(n_observed < 2):
        raise ValueError("At least two subjects are needed to compute a sample covariance.")
    yy = y.astype(np.float64, copy=False)
    zz = np.where(observed, z[:, np.newaxis], np.nan)
    y_centered = yy - np.nanmean(yy, axis=0)
    z_centered = zz - np.nanmean(zz, axis=0)
    raw_cov = (np.nansum(y_centered * z_centered, axis=0) / (n_observed - 1)).astype(y.dtype, copy=False)
    return RawCrossCovariance(None, raw_cov)
