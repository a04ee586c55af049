"""Local linear fitting functions for fcrcov."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from typing import Optional

import numpy as np

from fcrcov.exceptions import LocalFitFailure
from fcrcov.smooth.kernel import KernelType, calculate_kernel_value

# relative tolerance on det(X'WX) / (s0 * s2) below which the local design is treated as singular
_SINGULAR_TOL = 1e-10


def _local_linear_at(x: np.ndarray, y: np.ndarray, w: np.ndarray, x0: float, bandwidth: float, kernel_type: KernelType) -> float:
    """Return the local linear intercept at `x0`, or NaN if the local design is degenerate."""
    if kernel_type.is_compact:
        lo = np.searchsorted(x, x0 - bandwidth, side="left")
        hi = np.searchsorted(x, x0 + bandwidth, side="right")
    else:
        lo, hi = 0, x.size

    dx = x[lo:hi] - x0
    kw = w[lo:hi] * calculate_kernel_value(dx / bandwidth, kernel_type)
    active = kw > 0.0
    # x is sorted, so distinct active locations are detected from the first and last one
    if np.count_nonzero(active) < 2 or dx[active][0] == dx[active][-1]:
        return np.nan

    s0 = np.sum(kw)
    s1 = np.sum(kw * dx)
    s2 = np.sum(kw * dx * dx)
    det = s0 * s2 - s1 * s1
    if not det > _SINGULAR_TOL * s0 * s2:
        return np.nan

    t0 = np.sum(kw * y[lo:hi])
    t1 = np.sum(kw * dx * y[lo:hi])
    return (s2 * t0 - s1 * t1) / det


def polyfit1d(
    x: np.ndarray,
    y: np.ndarray,
    w: np.ndarray,
    x_new: np.ndarray,
    bandwidth: float,
    kernel_type: KernelType = KernelType.GAUSSIAN,
) -> np.ndarray:
    """Perform local linear regression on 1D data.

    At every point ``x0`` of `x_new` a weighted least squares line is fitted to
    ``(x - x0, y)`` with weights ``w * K((x - x0) / bandwidth)`` and its intercept is
    returned. Compared to a kernel weighted average this corrects the slope bias at
    the boundary of the support.

    Parameters
    ----------
    x : np.ndarray
        1D array of x-coordinates of the data points, sorted in ascending order.
    y : np.ndarray
        1D array of y-coordinates of the data points.
    w : np.ndarray
        1D array of non-negative weights for the data points.
    x_new : np.ndarray
        1D array of strictly increasing x-coordinates where the fit should be evaluated.
    bandwidth : float
        The bandwidth for the local linear regression.
    kernel_type : KernelType, optional
        The kernel type to use for weighting the data points. Default is KernelType.GAUSSIAN.

    Returns
    -------
    np.ndarray
        The fitted values at `x_new`, with the dtype of `x`.

    Raises
    ------
    LocalFitFailure
        If the local design is singular, or fewer than two distinct x-values carry positive
        kernel weight, at any point of `x_new`.
    """
    if x.ndim != 1:
        raise ValueError("x must be a 1D array.")
    if y.ndim != 1:
        raise ValueError("y must be a 1D array.")
    if w.ndim != 1:
        raise ValueError("w must be a 1D array.")
    if x.size != y.size:
        raise ValueError("y must have the same size as x.")
    if x.size != w.size:
        raise ValueError("w must have the same size as x.")
    if x_new.ndim != 1:
        raise ValueError("x_new must be a 1D array.")
    if x_new.size == 0:
        raise ValueError("x_new must not be empty.")
    if bandwidth is None or isinstance(bandwidth, bool) or not isinstance(bandwidth, (float, int, np.floating, np.integer)):
        raise TypeError("Bandwidth, bandwidth, should be a float or an integer.")
    if np.isnan(bandwidth):
        raise ValueError("Bandwidth, bandwidth, should not be NaN.")
    if bandwidth <= 0:
        raise ValueError("Bandwidth, bandwidth, should be positive.")
    if not isinstance(kernel_type, KernelType):
        raise ValueError(f"kernel must be one of {list(KernelType)}.")
    if np.isnan(x).any():
        raise ValueError("Input array x contains NaN values.")
    if np.isnan(y).any():
        raise ValueError("Input array y contains NaN values.")
    if np.isnan(w).any():
        raise ValueError("Input array w contains NaN values.")
    if np.isnan(x_new).any():
        raise ValueError("Input array x_new contains NaN values.")
    if np.any(np.diff(x) < 0):
        raise ValueError("x must be sorted in ascending order.")
    if np.any(w < 0):
        raise ValueError("All weights in w must be non-negative.")
    if np.any(np.diff(x_new) <= 0):
        raise ValueError("x_new must be strictly increasing.")

    dtype = x.dtype if x.dtype in (np.float32, np.float64) else np.float64
    # accumulate in float64, report in the input precision
    xx = x.astype(np.float64, copy=False)
    yy = y.astype(np.float64, copy=False)
    ww = w.astype(np.float64, copy=False)
    bandwidth = float(bandwidth)

    fitted = np.array([_local_linear_at(xx, yy, ww, float(x0), bandwidth, kernel_type) for x0 in x_new], dtype=np.float64)
    failed = ~np.isfinite(fitted)
    if failed.any():
        raise LocalFitFailure(
            f"Local linear fit failed at {np.count_nonzero(failed)} of {x_new.size} locations with bandwidth {bandwidth:.6g}; "
            "there are not enough distinct points in the local window, please increase the bandwidth.",
            locations=x_new[failed],
            bandwidth=bandwidth,
        )
    return fitted.astype(dtype, copy=False)


def smooth_scattered(
    x: np.ndarray,
    y: np.ndarray,
    x_new: np.ndarray,
    bandwidth: float,
    kernel_type: KernelType = KernelType.GAUSSIAN,
    w: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Smooth unordered scattered data with :func:`polyfit1d`.

    The observations are stable-sorted by location before fitting, so duplicated
    locations keep their input order and the result does not depend on how the
    scattered points were produced.

    Parameters
    ----------
    x : np.ndarray of shape (n,)
        Locations of the scattered data, in any order.
    y : np.ndarray of shape (n,)
        Values at `x`.
    x_new : np.ndarray of shape (m,)
        Strictly increasing output locations.
    bandwidth : float
        Smoothing bandwidth.
    kernel_type : KernelType, default=KernelType.GAUSSIAN
        Kernel used for the local weights.
    w : np.ndarray of shape (n,), optional
        Observation weights; unit weights if None.

    Returns
    -------
    np.ndarray of shape (m,)
        Smoothed values at `x_new`.

    Raises
    ------
    LocalFitFailure
        See :func:`polyfit1d`.
    """
    x = np.asarray(x)
    y = np.asarray(y)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same shape.")
    w = np.ones_like(x, dtype=np.float64) if w is None else np.asarray(w)
    if w.shape != x.shape:
        raise ValueError("w must have the same shape as x.")
    order = np.argsort(x, kind="stable")
    return polyfit1d(x[order], y[order], w[order], np.asarray(x_new), bandwidth, kernel_type)
