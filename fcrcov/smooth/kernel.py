"""Kernel types and kernel evaluation for local regression in fcrcov."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

import math
from enum import Enum
from typing import Union

import numpy as np

# names used by the R fdapace package
_FDAPACE_KERNEL_NAMES = {
    "gauss": "GAUSSIAN",
    "rect": "RECTANGULAR",
    "epan": "EPANECHNIKOV",
    "quar": "BIWEIGHT",
}


class KernelType(Enum):
    """Enum for kernel types used in local regression."""

    GAUSSIAN = 0
    LOGISTIC = 1
    SIGMOID = 2
    # GAUSSIAN_VAR (fdapace "gausvar") is not included since it might produce negative weights that are not supported.
    RECTANGULAR = 100  # Uniform Kernel
    TRIANGULAR = 101
    EPANECHNIKOV = 102
    BIWEIGHT = 103  # Quartic Kernel
    TRIWEIGHT = 104
    TRICUBE = 105
    COSINE = 106

    def __repr__(self):
        return f"KernelType.{self.name}"

    def __str__(self):
        return self.name

    @property
    def is_compact(self) -> bool:
        """Whether the kernel vanishes outside of ``|u| <= 1``."""
        return self.value >= 100

    @classmethod
    def from_name(cls, kernel: Union["KernelType", str]) -> "KernelType":
        """Resolve a kernel from a member, a member name or an fdapace kernel name.

        Parameters
        ----------
        kernel : KernelType or str
            A ``KernelType`` member, a member name (case-insensitive, e.g. ``"epanechnikov"``)
            or one of the fdapace names ``"gauss"``, ``"rect"``, ``"epan"`` and ``"quar"``.

        Returns
        -------
        KernelType
            The resolved kernel type.

        Raises
        ------
        ValueError
            If the name does not correspond to a supported kernel.
        """
        if isinstance(kernel, cls):
            return kernel
        if not isinstance(kernel, str):
            raise ValueError(f"kernel must be one of {list(cls)} or a kernel name, got {kernel!r}.")
        name = kernel.strip()
        if name.lower() == "gausvar":
            raise ValueError("Kernel 'gausvar' is not supported since it might produce negative weights.")
        name = _FDAPACE_KERNEL_NAMES.get(name.lower(), name.upper())
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown kernel '{kernel}'. Use one of {list(_FDAPACE_KERNEL_NAMES)} or {[k.name for k in cls]}.")


def calculate_kernel_value(u: Union[float, np.ndarray], kernel_type: KernelType = KernelType.GAUSSIAN) -> Union[float, np.ndarray]:
    """Evaluate a kernel at scaled distances.

    Parameters
    ----------
    u : float or np.ndarray
        Scaled distances ``(x - x0) / bandwidth``.
    kernel_type : KernelType, default=KernelType.GAUSSIAN
        Kernel to evaluate.

    Returns
    -------
    float or np.ndarray
        Kernel values with the same shape as `u`. Compact kernels are zero for ``|u| > 1``.
    """
    if not isinstance(kernel_type, KernelType):
        raise ValueError(f"kernel must be one of {list(KernelType)}.")
    is_scalar = np.ndim(u) == 0
    u = np.asarray(u, dtype=np.float64 if is_scalar else None)
    if u.dtype not in (np.float32, np.float64):
        u = u.astype(np.float64)
    abs_u = np.abs(u)

    if kernel_type == KernelType.GAUSSIAN:
        value = np.exp(-0.5 * u * u) / math.sqrt(2.0 * math.pi)
    elif kernel_type == KernelType.LOGISTIC:
        value = 1.0 / (np.exp(abs_u) + 2.0 + np.exp(-abs_u))
    elif kernel_type == KernelType.SIGMOID:
        value = 2.0 / math.pi / (np.exp(abs_u) + np.exp(-abs_u))
    else:
        inside = abs_u <= 1.0
        if kernel_type == KernelType.RECTANGULAR:
            value = np.full_like(u, 0.5)
        elif kernel_type == KernelType.TRIANGULAR:
            value = 1.0 - abs_u
        elif kernel_type == KernelType.EPANECHNIKOV:
            value = 0.75 * (1.0 - u * u)
        elif kernel_type == KernelType.BIWEIGHT:
            value = 15.0 / 16.0 * (1.0 - u * u) ** 2
        elif kernel_type == KernelType.TRIWEIGHT:
            value = 35.0 / 32.0 * (1.0 - u * u) ** 3
        elif kernel_type == KernelType.TRICUBE:
            value = 70.0 / 81.0 * (1.0 - abs_u**3) ** 3
        else:
            # cos(pi / 2) is not exactly 0 in floating point
            inside = abs_u < 1.0
            value = math.pi / 4.0 * np.abs(np.cos(0.5 * math.pi * u))
        value = np.where(inside, value, 0.0).astype(u.dtype, copy=False)

    if is_scalar:
        return float(value)
    return value.astype(u.dtype, copy=False)
