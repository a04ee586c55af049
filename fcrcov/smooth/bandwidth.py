"""Bandwidth selection by generalized cross-validation for 1D local linear smoothing."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from joblib import Parallel, delayed
from sklearn.utils.validation import check_array

from fcrcov.exceptions import AllCandidatesFailedError, LocalFitFailure, UnsupportedKernelError
from fcrcov.interp import interp1d
from fcrcov.smooth.kernel import KernelType
from fcrcov.smooth.polyfit import smooth_scattered

logger = logging.getLogger(__name__)

# Gaussian kernel at 0, 1 / sqrt(2 * pi), as hard-coded in fdapace
GAUSSIAN_K0 = 0.398942
NUM_BW_CANDIDATES = 20


@dataclass(frozen=True)
class BandwidthSelectionResult:
    """Outcome of a GCV bandwidth search.

    Attributes
    ----------
    bandwidth : float
        Selected bandwidth (the largest one among the minimal scores).
    fitted : np.ndarray of shape (m,)
        Smoothed values at the output grid for `bandwidth`.
    score : float
        GCV score of `bandwidth`.
    bandwidth_candidates : np.ndarray of shape (n_candidates,)
        Candidates that were evaluated, in increasing order.
    gcv_scores : np.ndarray of shape (n_candidates,)
        GCV score of every candidate; failed candidates are +inf.
    """

    bandwidth: float
    fitted: np.ndarray
    score: float
    bandwidth_candidates: np.ndarray
    gcv_scores: np.ndarray


def get_min_bandwidth(x: np.ndarray, num_points: int = 3) -> float:
    """Smallest bandwidth such that every window on the distinct locations holds `num_points` points.

    Parameters
    ----------
    x : np.ndarray
        Locations, in any order and possibly duplicated.
    num_points : int, default=3
        Number of distinct points each window must contain.

    Returns
    -------
    float
        ``max(x[i + num_points - 1] - x[i])`` over the sorted distinct locations,
        or half of the largest gap if ``num_points == 1``.
    """
    if not isinstance(num_points, int) or num_points < 1:
        raise ValueError("num_points must be a positive integer.")
    xs = np.unique(np.asarray(x, dtype=np.float64))
    if xs.size < max(num_points, 2):
        raise ValueError(f"Not enough distinct locations ({xs.size}) to hold {num_points} points in a window.")
    if num_points == 1:
        return float(np.max(np.diff(xs)) / 2.0)
    lag = num_points - 1
    return float(np.max(xs[lag:] - xs[:-lag]))


def generate_bandwidth_candidates(x: np.ndarray) -> np.ndarray:
    """Generate the geometric bandwidth candidate schedule.

    With ``h0 = 1.5 * get_min_bandwidth(x, 3)``, ``r = max(x) - min(x)`` and
    ``q = (r / (4 * h0)) ** (1 / 9)``, the candidates are ``q**k * h0`` for
    ``k = 0, ..., 19``, sorted in increasing order.

    Parameters
    ----------
    x : np.ndarray
        Locations of the raw data.

    Returns
    -------
    np.ndarray of shape (20,)
        Sorted bandwidth candidates.

    Raises
    ------
    AllCandidatesFailedError
        If there are fewer than 3 distinct locations, so no schedule can be built.
    """
    x = np.asarray(x, dtype=np.float64)
    n_distinct = np.unique(x).size
    if n_distinct < 3:
        raise AllCandidatesFailedError(
            f"Cannot build bandwidth candidates from {n_distinct} distinct locations; at least 3 are needed."
        )
    h0 = 1.5 * get_min_bandwidth(x, 3)
    r = float(np.max(x) - np.min(x))
    q = math.pow(r / (4.0 * h0), 1.0 / 9.0)
    candidates = np.sort(h0 * q ** np.arange(NUM_BW_CANDIDATES, dtype=np.float64))
    logger.debug("Bandwidth candidates from h0=%.6g, r=%.6g, q=%.6g: %s", h0, r, q, candidates)
    return candidates


def compute_gcv_score(fitted: np.ndarray, x_new: np.ndarray, x: np.ndarray, y: np.ndarray, bandwidth: float) -> float:
    """Compute the GCV score of a curve smoothed with a Gaussian kernel.

    The residuals are taken between the raw values and the linear interpolation of the
    smoothed curve at the raw locations. With ``N`` raw values and ``r`` the range of
    the raw locations, the trace of the smoother is approximated by ``K(0) * r / h``,
    so the score is ``RSS / (1 - K(0) * r / (N * h)) ** 2``.

    Parameters
    ----------
    fitted : np.ndarray of shape (m,)
        Smoothed values on `x_new`.
    x_new : np.ndarray of shape (m,)
        Output grid of the smoothed curve.
    x : np.ndarray of shape (n,)
        Raw locations.
    y : np.ndarray of shape (n,)
        Raw values.
    bandwidth : float
        Bandwidth that produced `fitted`.

    Returns
    -------
    float
        GCV score (lower is better); +inf if a residual is not finite.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    fitted = np.asarray(fitted, dtype=np.float64)
    if not np.isfinite(fitted).all():
        return np.inf
    y_hat = interp1d(np.asarray(x_new, dtype=np.float64), fitted, x, "linear")
    residuals = y - y_hat
    if not np.isfinite(residuals).all():
        return np.inf
    cv_sum = float(np.sum(residuals**2))
    r = float(np.max(x) - np.min(x))
    denominator = math.pow(1.0 - (r * GAUSSIAN_K0) / (x.size * bandwidth), 2.0)
    return cv_sum / denominator if denominator > 0 else np.inf


def _score_candidate(x: np.ndarray, y: np.ndarray, x_new: np.ndarray, bandwidth: float, kernel_type: KernelType) -> float:
    try:
        fitted = smooth_scattered(x, y, x_new, bandwidth, kernel_type)
    except LocalFitFailure as e:
        logger.debug("Bandwidth candidate %.6g failed: %s", bandwidth, e)
        return np.inf
    return compute_gcv_score(fitted, x_new, x, y, bandwidth)


def select_bandwidth_gcv(
    x: np.ndarray,
    y: np.ndarray,
    x_new: np.ndarray,
    kernel_type: KernelType = KernelType.GAUSSIAN,
    bw_candidates: Optional[np.ndarray] = None,
    n_jobs: Optional[int] = None,
) -> BandwidthSelectionResult:
    """Select the smoothing bandwidth by generalized cross-validation.

    Every candidate is used to smooth ``(x, y)`` onto `x_new` and scored by
    :func:`compute_gcv_score`. A candidate whose local fit fails scores +inf.
    The smallest score wins; ties are broken in favour of the largest bandwidth.
    The curve is then smoothed again with the selected bandwidth.

    Parameters
    ----------
    x : np.ndarray of shape (n,)
        Raw locations, in any order.
    y : np.ndarray of shape (n,)
        Raw values.
    x_new : np.ndarray of shape (m,)
        Strictly increasing output grid.
    kernel_type : KernelType, default=KernelType.GAUSSIAN
        Must be Gaussian: the GCV trace approximation uses the Gaussian ``K(0)``.
    bw_candidates : np.ndarray, optional
        Custom candidates; generated by :func:`generate_bandwidth_candidates` if None.
    n_jobs : int, optional
        Number of jobs used to evaluate the candidates with joblib. None means 1.

    Returns
    -------
    BandwidthSelectionResult
        Selected bandwidth, smoothed curve, score and the full selection trace.

    Raises
    ------
    UnsupportedKernelError
        If `kernel_type` is not Gaussian.
    AllCandidatesFailedError
        If every candidate has an infinite score.
    """
    if kernel_type != KernelType.GAUSSIAN:
        raise UnsupportedKernelError(f"Cannot select bandwidth for non-Gaussian kernels, got {kernel_type}.")
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x_new = np.asarray(x_new, dtype=np.float64)

    if bw_candidates is None:
        candidates = generate_bandwidth_candidates(x)
    else:
        candidates = np.sort(check_array(bw_candidates, ensure_2d=False, dtype=np.float64).ravel())
        if np.any(candidates <= 0):
            raise ValueError("All bandwidth candidates must be positive.")

    scores = np.array(
        Parallel(n_jobs=n_jobs)(delayed(_score_candidate)(x, y, x_new, float(bw), kernel_type) for bw in candidates),
        dtype=np.float64,
    )
    # NaN scores can never be selected
    scores[np.isnan(scores)] = np.inf
    min_score = np.min(scores)
    if not np.isfinite(min_score):
        raise AllCandidatesFailedError("All GCV scores are non-finite. Check your data and bandwidth candidates.")

    best_bandwidth = float(np.max(candidates[scores == min_score]))
    logger.debug("Selected bandwidth %.6g with GCV score %.6g", best_bandwidth, min_score)
    fitted = smooth_scattered(x, y, x_new, best_bandwidth, kernel_type)
    return BandwidthSelectionResult(best_bandwidth, fitted, float(min_score), candidates, scores)
