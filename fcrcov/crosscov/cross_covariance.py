"""Cross-covariance between a functional variable and a scalar variable."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

import logging
import warnings
from typing import List, Literal, Optional, Union

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_array, check_is_fitted

from fcrcov.crosscov.cross_cov_result_class import (
    CrossCovParams,
    CrossCovResult,
    FunctionalSamples,
    RawCrossCovariance,
    as_functional_samples,
)
from fcrcov.crosscov.raw_cross_cov import get_raw_cross_cov, get_raw_cross_cov_dense
from fcrcov.exceptions import InputCardinalityError, MissingRequiredInputError
from fcrcov.interp import GridFunction, interp1d
from fcrcov.smooth import KernelType, compute_gcv_score, select_bandwidth_gcv, smooth_scattered
from fcrcov.utils import flatten_and_sort_data_matrices

logger = logging.getLogger(__name__)

MeanFunction = Union[GridFunction, np.ndarray, List[float]]


def smooth_raw_cross_cov(
    raw_cross_cov: RawCrossCovariance,
    bandwidth: float,
    x_new: np.ndarray,
    kernel_type: KernelType = KernelType.GAUSSIAN,
) -> np.ndarray:
    """Smooth the raw cross-covariance onto `x_new` with unit weights.

    Parameters
    ----------
    raw_cross_cov : RawCrossCovariance
        Raw cross-covariance of the sparse design.
    bandwidth : float
        Smoothing bandwidth.
    x_new : np.ndarray of shape (m,)
        Strictly increasing output grid.
    kernel_type : KernelType, default=KernelType.GAUSSIAN
        Kernel used for smoothing.

    Returns
    -------
    np.ndarray of shape (m,)
        Smoothed cross-covariance.

    Raises
    ------
    LocalFitFailure
        If the local linear fit is degenerate at any output location.
    """
    if raw_cross_cov.t is None:
        raise ValueError("The raw cross-covariance of a dense design has no locations to smooth over.")
    return smooth_scattered(raw_cross_cov.t, raw_cross_cov.cov, x_new, bandwidth, kernel_type)


def _as_mean_function(mu: MeanFunction, obs_grid: np.ndarray) -> GridFunction:
    if isinstance(mu, GridFunction):
        return mu
    mu = check_array(mu, ensure_2d=False, dtype=np.float64)
    if mu.ndim != 1:
        raise ValueError("mu must be a GridFunction or a 1D array.")
    if mu.size != obs_grid.size:
        raise InputCardinalityError(
            f"The length of mu ({mu.size}) must match the number of unique observed time points ({obs_grid.size})."
        )
    return GridFunction(obs_grid.astype(np.float64, copy=False), mu)


def _check_support(support: Union[np.ndarray, List[float]]) -> np.ndarray:
    support = check_array(support, ensure_2d=False, dtype=np.float64)
    if support.ndim != 1:
        raise ValueError("support must be a 1D array.")
    if np.any(np.diff(support) <= 0):
        raise ValueError("support must be sorted with unique values.")
    return support


def estimate_cross_cov(
    params: CrossCovParams,
    samples: FunctionalSamples,
    z: Union[np.ndarray, List[float]],
    mu: Optional[MeanFunction] = None,
    z_mean: Optional[float] = None,
    support: Optional[Union[np.ndarray, List[float]]] = None,
) -> CrossCovResult:
    """Estimate the cross-covariance for already tagged observations.

    Parameters
    ----------
    params : CrossCovParams
        Bandwidth, kernel and bandwidth selection settings.
    samples : SparseSamples or DenseSamples
        Functional observations, see :func:`as_functional_samples`.
    z : array-like of shape (n_samples,)
        Scalar variable.
    mu : GridFunction or array-like, optional
        Mean function of the functional variable. Required for the sparse design.
        An array must be aligned with the sorted unique observed time points.
    z_mean : float, optional
        Mean of `z`; the mean of the non-missing values if None. Ignored for the dense design.
    support : array-like, optional
        Sorted unique output grid. Defaults to the sorted unique observed time points.

    Returns
    -------
    CrossCovResult
        Smoothed and raw cross-covariance, bandwidth and GCV score.

    See Also
    --------
    get_cross_cov_yz : Entry point taking raw lists or matrices.
    """
    z = check_array(z, ensure_2d=False, dtype=np.float64, ensure_all_finite="allow-nan")
    if z.ndim != 1:
        raise ValueError("z must be a 1D array.")
    if z.size != samples.n_samples:
        raise InputCardinalityError(
            f"y and z are not compatible (possibly different number of subjects): got {samples.n_samples} subjects and {z.size} values of z."
        )

    if samples.design == "dense":
        if mu is not None:
            raise MissingRequiredInputError("t is required to use the mean function mu with a matrix y.")
        logger.debug("Dense design with %d subjects, returning the raw cross-covariance only.", samples.n_samples)
        raw_cross_cov = get_raw_cross_cov_dense(samples.y, z)
        return CrossCovResult(None, None, raw_cross_cov, params.bandwidth, None)

    if mu is None:
        raise MissingRequiredInputError("The mean function mu is missing without default.")
    if samples.n_samples <= 3:
        warnings.warn("The number of samples is less than or equal to 3. This may lead to unreliable cross-covariance estimates.")

    flatten_func_data = flatten_and_sort_data_matrices(samples.y, samples.t)
    mu = _as_mean_function(mu, flatten_func_data.unique_tid)
    obs_grid = flatten_func_data.unique_tid.astype(np.float64, copy=False) if support is None else _check_support(support)
    raw_cross_cov = get_raw_cross_cov(flatten_func_data, mu, z, z_mean)

    if params.bandwidth is not None:
        smoothed = smooth_raw_cross_cov(raw_cross_cov, params.bandwidth, obs_grid, params.kernel_type)
        score = None
        if params.kernel_type == KernelType.GAUSSIAN:
            score = compute_gcv_score(smoothed, obs_grid, raw_cross_cov.t, raw_cross_cov.cov, params.bandwidth)
        return CrossCovResult(smoothed, obs_grid, raw_cross_cov, params.bandwidth, score)

    selection = select_bandwidth_gcv(
        raw_cross_cov.t,
        raw_cross_cov.cov,
        obs_grid,
        params.kernel_type,
        bw_candidates=params.bw_candidates,
        n_jobs=params.n_jobs,
    )
    return CrossCovResult(
        selection.fitted,
        obs_grid,
        raw_cross_cov,
        selection.bandwidth,
        selection.score,
        selection.bandwidth_candidates,
        selection.gcv_scores,
    )


def get_cross_cov_yz(
    z: Union[np.ndarray, List[float]],
    y: Union[np.ndarray, List[np.ndarray]],
    t: Optional[Union[np.ndarray, List[np.ndarray]]] = None,
    mu: Optional[MeanFunction] = None,
    bandwidth: Optional[float] = None,
    z_mean: Optional[float] = None,
    support: Optional[Union[np.ndarray, List[float]]] = None,
    kernel_type: Union[KernelType, str] = KernelType.GAUSSIAN,
    bw_candidates: Optional[np.ndarray] = None,
    n_jobs: Optional[int] = None,
) -> CrossCovResult:
    """Functional cross-covariance between a longitudinal variable Y and a scalar variable Z.

    Calculate the raw and the smoothed cross-covariance between a functional and a
    scalar variable using the bandwidth `bandwidth`, or select the bandwidth by GCV.
    If `y` is a matrix and neither `t` nor `mu` is given, the data are assumed dense
    and only the raw cross-covariance is returned.

    Parameters
    ----------
    z : array-like of shape (n_samples,)
        Scalar variable, one value per subject.
    y : list of np.ndarray or np.ndarray of shape (n_samples, nt)
        Amplitudes of the functional variable.
    t : list of np.ndarray or np.ndarray, optional
        Time points of `y`. Required for the sparse design.
    mu : GridFunction or array-like, optional
        Mean function of Y, e.g. from an FPCA fit. An array must be aligned with the
        sorted unique observed time points.
    bandwidth : float, optional
        Smoothing bandwidth. If None, it is selected by GCV (Gaussian kernel only).
    z_mean : float, optional
        Mean of `z`. If None, the mean of the non-missing values is used.
    support : array-like, optional
        Sorted unique output grid of the smoothed cross-covariance.
    kernel_type : KernelType or str, default=KernelType.GAUSSIAN
        Smoothing kernel, e.g. ``"gauss"``, ``"epan"`` or ``KernelType.EPANECHNIKOV``.
    bw_candidates : np.ndarray, optional
        Custom bandwidth candidates for GCV.
    n_jobs : int, optional
        Number of jobs used to evaluate the bandwidth candidates.

    Returns
    -------
    CrossCovResult
        Smoothed cross-covariance (None for dense data), raw cross-covariance,
        bandwidth and GCV score (None for dense data).

    Raises
    ------
    UnsupportedKernelError
        If `bandwidth` is None and the kernel is not Gaussian.
    InputCardinalityError
        If `z` and `y` have a different number of subjects.
    MissingRequiredInputError
        If `mu` is missing for sparse data.
    LocalFitFailure
        If `bandwidth` is given and the local fit is degenerate.
    AllCandidatesFailedError
        If every bandwidth candidate fails during GCV, or fewer than 3 distinct
        time points leave no candidate schedule.

    Examples
    --------
    >>> import numpy as np
    >>> y = [np.array([0.2, 0.9, 0.4, 0.7, 0.1]), np.arange(1.0, 4.0), np.arange(2.0, 5.0), np.array([4.0])]
    >>> t = [np.arange(1.0, 6.0), np.arange(1.0, 4.0), np.arange(1.0, 4.0), np.array([4.0])]
    >>> z = np.full(4, 4.0)  # constant, so the cross-covariance is zero
    >>> result = get_cross_cov_yz(z, y, t, mu=np.full(5, 4.0), bandwidth=1.0)
    >>> bool(np.allclose(result.smoothed, 0.0))
    True

    References
    ----------
    Yang, W., Müller, H.-G. and Stadtmüller, U. (2011). Functional singular component analysis.
    Journal of the Royal Statistical Society: Series B, 73(3), 303-324.
    """
    params = CrossCovParams(bandwidth, kernel_type, bw_candidates, n_jobs)
    samples = as_functional_samples(y, t)
    return estimate_cross_cov(params, samples, z, mu, z_mean, support)


class FunctionalCrossCovariance(BaseEstimator):
    """
    Cross-covariance between a functional variable and a scalar variable.

    Parameters
    ----------
    bandwidth : float, optional
        Smoothing bandwidth. If None, it is selected by GCV when fitting.
    kernel_type : KernelType or str, default=KernelType.GAUSSIAN
        Kernel used for smoothing.
    interp_kind : {"linear", "spline"}, default="linear"
        Interpolation method used by `predict`.
    bw_candidates : np.ndarray, optional
        Custom bandwidth candidates for GCV.
    n_jobs : int, optional
        Number of jobs used to evaluate the bandwidth candidates.

    Attributes
    ----------
    result_ : CrossCovResult
        Full estimation result.
    bandwidth_ : float or None
        Supplied or selected bandwidth.
    score_ : float or None
        GCV score of `bandwidth_`.
    raw_cross_cov_ : RawCrossCovariance
        Raw cross-covariance.
    grid_ : np.ndarray or None
        Output grid of the smoothed cross-covariance (None for dense data).
    smoothed_cross_cov_ : np.ndarray or None
        Smoothed cross-covariance on `grid_` (None for dense data).
    n_samples_ : int
        Number of subjects seen during fit.

    See Also
    --------
    get_cross_cov_yz : Functional interface.
    """

    def __init__(
        self,
        bandwidth: Optional[float] = None,
        kernel_type: Union[KernelType, str] = KernelType.GAUSSIAN,
        interp_kind: Literal["linear", "spline"] = "linear",
        bw_candidates: Optional[np.ndarray] = None,
        n_jobs: Optional[int] = None,
    ):
        if interp_kind not in ["linear", "spline"]:
            raise ValueError(f"interp_kind must be one of ['linear', 'spline'], got {interp_kind}")
        # validates bandwidth and kernel combination at construction
        CrossCovParams(bandwidth, kernel_type, bw_candidates, n_jobs)
        self.bandwidth = bandwidth
        self.kernel_type = kernel_type
        self.interp_kind = interp_kind
        self.bw_candidates = bw_candidates
        self.n_jobs = n_jobs

    def fit(
        self,
        y: Union[np.ndarray, List[np.ndarray]],
        z: Union[np.ndarray, List[float]],
        t: Optional[Union[np.ndarray, List[np.ndarray]]] = None,
        mu: Optional[MeanFunction] = None,
        z_mean: Optional[float] = None,
        support: Optional[Union[np.ndarray, List[float]]] = None,
    ) -> "FunctionalCrossCovariance":
        """Estimate the cross-covariance.

        Parameters
        ----------
        y : list of np.ndarray or np.ndarray of shape (n_samples, nt)
            Amplitudes of the functional variable.
        z : array-like of shape (n_samples,)
            Scalar variable.
        t : list of np.ndarray or np.ndarray, optional
            Time points of `y`.
        mu : GridFunction or array-like, optional
            Mean function of the functional variable.
        z_mean : float, optional
            Mean of `z`.
        support : array-like, optional
            Output grid of the smoothed cross-covariance.

        Returns
        -------
        FunctionalCrossCovariance
            Fitted estimator (self).
        """
        params = CrossCovParams(self.bandwidth, self.kernel_type, self.bw_candidates, self.n_jobs)
        samples = as_functional_samples(y, t)
        self.result_ = estimate_cross_cov(params, samples, z, mu, z_mean, support)
        self.bandwidth_ = self.result_.bandwidth
        self.score_ = self.result_.score
        self.raw_cross_cov_ = self.result_.raw
        self.grid_ = self.result_.grid
        self.smoothed_cross_cov_ = self.result_.smoothed
        self.n_samples_ = samples.n_samples
        return self

    def predict(self, t_new: Union[np.ndarray, List[float]]) -> np.ndarray:
        """Interpolate the smoothed cross-covariance at new time points.

        Parameters
        ----------
        t_new : array-like of shape (m,)
            Query points; points outside of `grid_` give NaN.

        Returns
        -------
        np.ndarray of shape (m,)
            Cross-covariance at `t_new`.

        Raises
        ------
        sklearn.exceptions.NotFittedError
            If the estimator is not fitted.
        ValueError
            If the estimator was fitted on dense data, which is not smoothed.
        """
        check_is_fitted(self, ["result_"])
        if self.smoothed_cross_cov_ is None:
            raise ValueError("The cross-covariance of dense data is not smoothed; use raw_cross_cov_ instead.")
        t_new = check_array(t_new, ensure_2d=False, dtype=np.float64)
        if t_new.ndim == 2:
            if t_new.shape[1] != 1:
                raise ValueError(f"t_new must have exactly 1 feature, got {t_new.shape[1]}")
            t_new = t_new.ravel()
        return interp1d(self.grid_, self.smoothed_cross_cov_.astype(np.float64, copy=False), t_new, self.interp_kind)
