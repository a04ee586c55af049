"""Functional Data Generator"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from math import sqrt
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np


def _fourier_basis(k: int) -> Callable[[np.ndarray], np.ndarray]:
    def phi(t: np.ndarray) -> np.ndarray:
        return sqrt(2.0) * np.sin((k + 1) * np.pi * t)

    return phi


class CrossCovDataGenerator(object):
    """
    CrossCovDataGenerator
    =====================
    A class for generating functional data samples together with a correlated scalar variable.

    Every subject has principal component scores ``xi_k ~ N(0, eigen_values[k])`` and

    - ``y_i(t) = mean_func(t) + sum_k xi_ik * phi_k(t) + e_i(t)``,
    - ``z_i = z_mean + sum_k beta[k] * xi_ik + u_i``,

    so that the true cross-covariance is ``C(t) = sum_k beta[k] * eigen_values[k] * phi_k(t)``.

    parameters
    ----------
    t : array_like
        The time points at which the functional data is defined, a sorted 1D array of length `nt`.
    mean_func : Callable[[np.ndarray], np.ndarray]
        A callable function that takes an array of time points and returns the mean function values at those time points.
    eigen_values : sequence of float, optional, default=(1.0, 0.5)
        Variances of the principal component scores. They must be positive.
    beta : sequence of float, optional, default=(1.0, -1.0)
        Loadings of the scalar variable on the principal component scores, one per eigenvalue.
    eigen_funcs : sequence of callables, optional
        Eigenfunctions. Defaults to ``sqrt(2) * sin((k + 1) * pi * t)``.
    error_var : float, optional, default=0.1
        The variance of the error term added to the functional samples.
    z_error_var : float, optional, default=0.1
        The variance of the error term added to the scalar variable.
    z_mean : float, optional, default=0.0
        The mean of the scalar variable.
    """

    def __init__(
        self,
        t: np.ndarray,
        mean_func: Callable[[np.ndarray], np.ndarray],
        eigen_values: Sequence[float] = (1.0, 0.5),
        beta: Sequence[float] = (1.0, -1.0),
        eigen_funcs: Optional[Sequence[Callable[[np.ndarray], np.ndarray]]] = None,
        error_var: float = 0.1,
        z_error_var: float = 0.1,
        z_mean: float = 0.0,
    ):
        t = np.asarray(t, dtype=np.float64)
        if t.ndim != 1 or t.size < 2:
            raise ValueError("t must be a 1D array with at least two time points.")
        if np.any(np.diff(t) <= 0):
            raise ValueError("t must be strictly increasing.")
        eigen_values = np.asarray(eigen_values, dtype=np.float64)
        beta = np.asarray(beta, dtype=np.float64)
        if eigen_values.ndim != 1 or eigen_values.size == 0 or np.any(eigen_values <= 0):
            raise ValueError("eigen_values must be a non-empty sequence of positive values.")
        if beta.shape != eigen_values.shape:
            raise ValueError("beta must have the same length as eigen_values.")
        if eigen_funcs is None:
            eigen_funcs = [_fourier_basis(k) for k in range(eigen_values.size)]
        elif len(eigen_funcs) != eigen_values.size:
            raise ValueError("eigen_funcs must have the same length as eigen_values.")
        if error_var < 0 or z_error_var < 0:
            raise ValueError("error_var and z_error_var must be non-negative.")

        self.t: np.ndarray = t
        self.mean_func: Callable[[np.ndarray], np.ndarray] = mean_func
        self.eigen_values: np.ndarray = eigen_values
        self.beta: np.ndarray = beta
        self.eigen_funcs = list(eigen_funcs)
        self.error_var: float = error_var
        self.z_error_var: float = z_error_var
        self.z_mean: float = z_mean

    def _phi(self, t: np.ndarray) -> np.ndarray:
        return np.column_stack([phi(t) for phi in self.eigen_funcs])

    def true_cross_cov(self, t: Optional[np.ndarray] = None) -> np.ndarray:
        """Get the true cross-covariance between the functional and the scalar variable.

        Parameters
        ----------
        t : array_like, optional
            Time points; defaults to the generator grid.

        Returns
        -------
        np.ndarray
            ``sum_k beta[k] * eigen_values[k] * phi_k(t)``.
        """
        t = self.t if t is None else np.asarray(t, dtype=np.float64)
        return self._phi(t) @ (self.beta * self.eigen_values)

    def generate(self, n: int, seed: Optional[int] = None) -> Tuple[List[np.ndarray], List[np.ndarray], np.ndarray]:
        """Generate functional data samples and the scalar variable.

        Parameters
        ----------
        n : int
            The number of samples to generate.
            It must be a positive integer.
        seed : Optional[int], optional
            Random seed for reproducibility. If None, the random number generator will not be seeded.

        Returns
        -------
        y : list of array_like
            The generated functional data samples. Each element in the list corresponds to a sample and is a 1D array of shape (nt,).
        t : list of array_like
            The time points corresponding to each sample. Each element in the list is a 1D array of shape (nt,).
        z : np.ndarray of shape (n,)
            The scalar variable.
        """
        if not isinstance(n, int) or n < 1:
            raise ValueError("n must be a positive integer.")
        rng = np.random.default_rng(seed)
        nt = len(self.t)
        scores = rng.normal(size=(n, self.eigen_values.size)) * np.sqrt(self.eigen_values)
        y_mat = scores @ self._phi(self.t).T + rng.normal(0, sqrt(self.error_var), (n, nt)) + self.mean_func(self.t)
        z = self.z_mean + scores @ self.beta + rng.normal(0, sqrt(self.z_error_var), n)

        # put data into lists
        y = []
        t = []
        for i in range(n):
            y.append(y_mat[i, :])
            t.append(self.t.copy())
        return y, t, z

    @staticmethod
    def make_sparse(
        y: List[np.ndarray], t: List[np.ndarray], missing_number: int, seed: Optional[int] = None
    ) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """Remove observations from every sample to make the design sparse.

        Parameters
        ----------
        y : list of array_like
            The generated functional data samples, each of shape (nt,).
        t : list of array_like
            The time points corresponding to each sample, each of shape (nt,).
        missing_number : int
            The number of observations removed from each sample. It must be between 1 and the length of `y[0]` minus 1.
        seed : Optional[int], optional
            Random seed for reproducibility. If None, the random number generator will not be seeded.

        Returns
        -------
        y : list of array_like
            The remaining observations, each of shape (nt - missing_number,), in time order.
        t : list of array_like
            The time points of the remaining observations.
        """
        rng = np.random.default_rng(seed)
        nt = len(t[0])
        if missing_number < 1 or missing_number >= nt:
            raise ValueError("missing_number must be between 1 and the length of y[0]/t[0].")
        if any(np.isnan(y[i]).sum() > 0 for i in range(len(y))):
            raise ValueError("y contains NaN values.")

        new_y = []
        new_t = []
        for i in range(len(y)):
            kept = np.sort(rng.choice(nt, nt - missing_number, replace=False))
            new_y.append(y[i][kept])
            new_t.append(t[i][kept])
        return new_y, new_t
