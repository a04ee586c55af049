"""The classes to hold the inputs, parameters and results of cross-covariance estimation"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from dataclasses import dataclass
from typing import ClassVar, List, Literal, Optional, Union

import numpy as np
from sklearn.utils.validation import check_array

from fcrcov.exceptions import UnsupportedKernelError
from fcrcov.smooth import KernelType


@dataclass(frozen=True)
class SparseSamples:
    """Subjects observed on their own irregular time points.

    Attributes
    ----------
    y : list of np.ndarray
        Amplitudes of every subject, each of shape (nt_i,).
    t : list of np.ndarray
        Time points of every subject, aligned with `y`.
    """

    y: List[np.ndarray]
    t: List[np.ndarray]
    design: ClassVar[Literal["sparse"]] = "sparse"

    @property
    def n_samples(self) -> int:
        return len(self.y)


@dataclass(frozen=True)
class DenseSamples:
    """Subjects observed on a common grid, one row per subject.

    Attributes
    ----------
    y : np.ndarray of shape (n_samples, nt)
        Amplitude matrix.
    """

    y: np.ndarray
    design: ClassVar[Literal["dense"]] = "dense"

    @property
    def n_samples(self) -> int:
        return self.y.shape[0]


FunctionalSamples = Union[SparseSamples, DenseSamples]


def as_functional_samples(
    y: Union[np.ndarray, List[np.ndarray]], t: Optional[Union[np.ndarray, List[np.ndarray]]] = None
) -> FunctionalSamples:
    """Tag the functional observations as a sparse or dense design.

    Parameters
    ----------
    y : np.ndarray of shape (n_samples, nt) or list of np.ndarray
        A matrix is a dense design unless `t` is given; a list is always sparse.
    t : np.ndarray or list of np.ndarray, optional
        Time points. For a matrix `y` it may be a single shared grid of shape (nt,),
        a matrix of the same shape as `y`, or a list of per-subject arrays.

    Returns
    -------
    SparseSamples or DenseSamples
        The tagged observations.
    """
    if isinstance(y, (list, tuple)):
        if t is None:
            raise ValueError("t must be provided when y is a list of per-subject arrays.")
        if not isinstance(t, (list, tuple)):
            raise ValueError("t must be a list of arrays when y is a list of arrays.")
        return SparseSamples([np.asarray(yi) for yi in y], [np.asarray(ti) for ti in t])

    y = check_array(y, ensure_2d=True, dtype=[np.float64, np.float32], ensure_all_finite="allow-nan")
    if t is None:
        return DenseSamples(y)

    if isinstance(t, (list, tuple)):
        t_list = [np.asarray(ti) for ti in t]
    else:
        t = np.asarray(t)
        if t.ndim == 1:
            t_list = [t for _ in range(y.shape[0])]
        elif t.shape == y.shape:
            t_list = list(t)
        else:
            raise ValueError("t must be a 1D grid matching the columns of y or have the same shape as y.")
    return SparseSamples(list(y), t_list)


@dataclass(frozen=True)
class RawCrossCovariance:
    """Raw cross-covariance between a functional and a scalar variable.

    Attributes
    ----------
    t : np.ndarray of shape (M,), optional
        Location of every raw value (None for the dense design).
    cov : np.ndarray of shape (M,)
        Raw cross-covariance values. For the dense design, one value per grid column.
    sid : np.ndarray of shape (M,), optional
        Subject id of every raw value (None for the dense design).

    Notes
    -----
    Duplicated locations across subjects are preserved; nothing is averaged.
    """

    t: Optional[np.ndarray]
    cov: np.ndarray
    sid: Optional[np.ndarray] = None

    @property
    def design(self) -> Literal["sparse", "dense"]:
        return "dense" if self.t is None else "sparse"


class CrossCovParams:
    """
    Parameters for the cross-covariance smoother.

    Parameters
    ----------
    bandwidth : float, optional
        Bandwidth for smoothing the raw cross-covariance. If None, it is selected by GCV.
    kernel_type : KernelType or str, default=KernelType.GAUSSIAN
        Kernel used for smoothing, a ``KernelType`` or a name such as ``"gauss"`` or ``"epan"``.
    bw_candidates : np.ndarray, optional
        Custom bandwidth candidates for GCV.
    n_jobs : int, optional
        Number of jobs used to evaluate the bandwidth candidates. None means 1.

    Raises
    ------
    UnsupportedKernelError
        If the bandwidth should be selected automatically and the kernel is not Gaussian.
    """

    def __init__(
        self,
        bandwidth: Optional[float] = None,
        kernel_type: Union[KernelType, str] = KernelType.GAUSSIAN,
        bw_candidates: Optional[np.ndarray] = None,
        n_jobs: Optional[int] = None,
    ):
        if bandwidth is not None:
            if isinstance(bandwidth, bool) or not isinstance(bandwidth, (float, int, np.floating, np.integer)):
                raise TypeError("Bandwidth, bandwidth, should be a float or an integer.")
            if np.isnan(bandwidth):
                raise ValueError("Bandwidth, bandwidth, should not be NaN.")
            if bandwidth <= 0:
                raise ValueError("Bandwidth, bandwidth, should be positive.")
            bandwidth = float(bandwidth)
        kernel_type = KernelType.from_name(kernel_type)
        if bandwidth is None and kernel_type != KernelType.GAUSSIAN:
            raise UnsupportedKernelError(f"Cannot select bandwidth for non-Gaussian kernels, got {kernel_type}.")
        if n_jobs is not None and (isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs == 0):
            raise ValueError("n_jobs must be None or a non-zero integer.")

        self.bandwidth = bandwidth
        self.kernel_type = kernel_type
        self.bw_candidates = bw_candidates
        self.n_jobs = n_jobs

    def __repr__(self):
        return f"CrossCovParams(bandwidth={self.bandwidth}, kernel_type={self.kernel_type!r}, n_jobs={self.n_jobs})"


@dataclass(frozen=True)
class CrossCovResult:
    """Result of a cross-covariance estimation.

    Attributes
    ----------
    smoothed : np.ndarray of shape (m,), optional
        Smoothed cross-covariance on `grid`; None for the dense design.
    grid : np.ndarray of shape (m,), optional
        Output grid of `smoothed`; None for the dense design.
    raw : RawCrossCovariance
        Raw cross-covariance.
    bandwidth : float, optional
        Supplied or selected bandwidth.
    score : float, optional
        GCV score of `bandwidth`. None for the dense design and for supplied bandwidths
        with a non-Gaussian kernel.
    bandwidth_candidates : np.ndarray, optional
        Candidates evaluated by the GCV search, if any.
    gcv_scores : np.ndarray, optional
        Scores of `bandwidth_candidates`, if any.
    """

    smoothed: Optional[np.ndarray]
    grid: Optional[np.ndarray]
    raw: RawCrossCovariance
    bandwidth: Optional[float]
    score: Optional[float]
    bandwidth_candidates: Optional[np.ndarray] = None
    gcv_scores: Optional[np.ndarray] = None
