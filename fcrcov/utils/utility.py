"""Utility functions for flattening ragged functional data"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from dataclasses import dataclass
from typing import List, Union

import numpy as np


@dataclass
class FlattenFunctionalData:
    """Flattened functional dataset in 1D arrays with indexing helpers.

    Attributes
    ----------
    y : np.ndarray of shape (M,)
        Flattened responses after removing NaN.
    t : np.ndarray of shape (M,)
        Flattened time points aligned to `y`.
    sid : np.ndarray of shape (M,)
        Sample id for each observation (0-based position in the input list).
    unique_tid : np.ndarray of shape (nt,)
        Sorted unique time points (observation grid).
    unique_sid : np.ndarray of shape (n_observed,)
        Sample ids with at least one non-NaN observation.
    sid_cnt : np.ndarray of shape (n_observed,)
        Number of observations for each id in `unique_sid`.
    n_samples : int
        Number of samples in the input, including samples without observations.
    """

    y: np.ndarray
    t: np.ndarray
    sid: np.ndarray
    unique_tid: np.ndarray
    unique_sid: np.ndarray
    sid_cnt: np.ndarray
    n_samples: int


def flatten_and_sort_data_matrices(
    y: List[np.ndarray],
    t: List[np.ndarray],
    input_dtype: Union[str, np.dtype] = np.float64,
) -> FlattenFunctionalData:
    """Flatten per-sample 1D arrays into contiguous vectors and build indices.

    This function concatenates lists of responses `y` and times `t`, drops NaNs,
    and constructs the observation grid and the subject ids of every observation.

    Parameters
    ----------
    y : list of np.ndarray
        Each element is a 1D array of shape (nt_i,) with responses for sample i.
    t : list of np.ndarray
        Each element is a 1D array of shape (nt_i,) with time points for sample i.
    input_dtype : str or np.dtype, default=np.float64
        Target dtype for numeric arrays.

    Returns
    -------
    FlattenFunctionalData
        Dataclass holding the flattened arrays and the grid/subject indices.

    Raises
    ------
    ValueError
        If `y`/`t` are not lists of 1D arrays with matching lengths,
        if `t` contains NaN, or if all `y` values are NaN.

    Notes
    -----
    - NaN entries in `y` (and matching positions in `t`) are removed.
    - `unique_tid` is constructed from the de-duplicated sorted values of `t`.
    - The order of observations is preserved: subject by subject, in input order.
    """
    if not isinstance(y, list):
        raise ValueError("y must be a list of arrays.")
    if not isinstance(t, list):
        raise ValueError("t must be a list of arrays.")
    if len(y) != len(t):
        raise ValueError("The length of y and t must be the same.")
    if len(y) == 0:
        raise ValueError("y and t must contain at least one sample.")
    y = [np.asarray(yi) for yi in y]
    t = [np.asarray(ti) for ti in t]
    for yi, ti in zip(y, t):
        if yi.ndim != 1 or ti.ndim != 1:
            raise ValueError("Each element of y and t must be a 1D array.")
        if yi.size != ti.size:
            raise ValueError("Each element of y and t must have the same length.")

    yy = np.concatenate(y).astype(input_dtype, copy=False)
    tt = np.concatenate(t).astype(input_dtype, copy=False)
    if np.isnan(tt).any():
        raise ValueError("Time points t contain NaN values.")
    non_nan_mask = ~np.isnan(yy)
    if not non_nan_mask.any():
        raise ValueError("All values in y are NaN. Cannot flatten data matrices.")

    tt = tt[non_nan_mask]
    sid = np.concatenate([np.full(yi.size, i, dtype=np.int64) for i, yi in enumerate(y)])[non_nan_mask]

    unique_tid = np.unique(tt)
    unique_sid, sid_cnt = np.unique(sid, return_counts=True)

    return FlattenFunctionalData(yy[non_nan_mask], tt, sid, unique_tid, unique_sid, sid_cnt, len(y))
