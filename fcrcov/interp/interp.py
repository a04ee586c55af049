"""Interpolation on 1D data.

This module provides linear and spline interpolation for 1D arrays and a small
grid-function container used for mean functions and smoothed curves.
"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Literal, Union

import numpy as np
from scipy.interpolate import CubicSpline
from sklearn.utils.validation import check_array


def interp1d(x: np.ndarray, y: np.ndarray, x_new: np.ndarray, method: str = "linear") -> np.ndarray:
    """Interpolate 1D data using linear or spline interpolation.

    This function is aligned with MATLAB's `interp1` function and R's `approx`:
    query points outside of ``[min(x), max(x)]`` are returned as NaN.

    Parameters
    ----------
    x : np.ndarray of shape (n,)
        1D input coordinates, in any order. Duplicates are allowed but will be
        reduced to the first occurrence internally.
    y : np.ndarray of shape (n,)
        Values at `x`. Must match `x` in length.
    x_new : np.ndarray of shape (m,)
        Query points.
    method : {"linear", "spline"}, default="linear"
        Interpolation method. The spline is a not-a-knot cubic spline, which
        reduces to a line for two points and a parabola for three points.

    Returns
    -------
    y_new : np.ndarray of shape (m,)
        Interpolated values at `x_new`. The dtype follows `x`
        (float32 stays float32, everything else is float64).

    Raises
    ------
    ValueError
        If any input is not 1D, is empty, sizes mismatch, contains NaN, or
        `method` is invalid.

    See Also
    --------
    GridFunction : Callable wrapper around a grid and its values.
    """
    if x.ndim != 1 or y.ndim != 1 or x_new.ndim != 1:
        raise ValueError("x, y, and x_new must be 1-dimensional arrays.")
    if x.size == 0 or y.size == 0 or x_new.size == 0:
        raise ValueError("x, y, and x_new must not be empty.")
    if x.size != y.size:
        raise ValueError("x must have the same size as y.")
    # NaN check
    if np.isnan(x).any():
        raise ValueError("Input array x contains NaN values.")
    if np.isnan(y).any():
        raise ValueError("Input array y contains NaN values.")
    if np.isnan(x_new).any():
        raise ValueError("Input array x_new contains NaN values.")
    if method not in ["linear", "spline"]:
        raise ValueError("Invalid method. Use 'linear' or 'spline'.")

    dtype = np.float32 if x.dtype == np.float32 else np.float64
    x_unique, idx = np.unique(x.astype(dtype, copy=False), return_index=True)
    y_unique = y[idx].astype(dtype, copy=False)
    x_new = x_new.astype(dtype, copy=False)

    if x_unique.size == 1:
        return np.where(x_new == x_unique[0], y_unique[0], np.nan).astype(dtype, copy=False)
    if method == "linear" or x_unique.size == 2:
        return np.interp(x_new, x_unique, y_unique, left=np.nan, right=np.nan).astype(dtype, copy=False)
    spline = CubicSpline(x_unique, y_unique, bc_type="not-a-knot", extrapolate=False)
    return spline(x_new).astype(dtype, copy=False)


@dataclass(frozen=True)
class GridFunction:
    """A function represented by its values on a sorted grid.

    Used for the mean function of the functional variable and for smoothed curves.
    Evaluation between grid points uses :func:`interp1d`.

    Attributes
    ----------
    grid : np.ndarray of shape (nt,)
        Strictly increasing grid locations.
    values : np.ndarray of shape (nt,)
        Function values on `grid`.
    method : {"linear", "spline"}
        Interpolation method used by ``__call__``.
    """

    grid: np.ndarray
    values: np.ndarray
    method: Literal["linear", "spline"] = "linear"

    def __post_init__(self):
        grid = check_array(self.grid, ensure_2d=False, dtype=[np.float64, np.float32])
        values = check_array(self.values, ensure_2d=False, dtype=grid.dtype)
        if grid.ndim != 1 or values.ndim != 1:
            raise ValueError("grid and values must be 1D arrays.")
        if grid.size != values.size:
            raise ValueError("grid and values must have the same length.")
        if np.any(np.diff(grid) <= 0):
            raise ValueError("grid must be strictly increasing.")
        if self.method not in ["linear", "spline"]:
            raise ValueError("Invalid method. Use 'linear' or 'spline'.")
        object.__setattr__(self, "grid", grid)
        object.__setattr__(self, "values", values)

    def __call__(self, x_new: Union[np.ndarray, float]) -> np.ndarray:
        x_new = np.atleast_1d(np.asarray(x_new, dtype=self.grid.dtype))
        return interp1d(self.grid, self.values, x_new, self.method)
