"""Interpolation utilities for functional data analysis."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from fcrcov.interp.interp import GridFunction, interp1d

__all__ = ["GridFunction", "interp1d"]
