"""Smooth utilities for fcrcov."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from fcrcov.smooth.kernel import KernelType, calculate_kernel_value
from fcrcov.smooth.polyfit import polyfit1d, smooth_scattered
from fcrcov.smooth.bandwidth import (
    BandwidthSelectionResult,
    compute_gcv_score,
    generate_bandwidth_candidates,
    get_min_bandwidth,
    select_bandwidth_gcv,
)

__all__ = [
    "BandwidthSelectionResult",
    "KernelType",
    "calculate_kernel_value",
    "compute_gcv_score",
    "generate_bandwidth_candidates",
    "get_min_bandwidth",
    "polyfit1d",
    "select_bandwidth_gcv",
    "smooth_scattered",
]
