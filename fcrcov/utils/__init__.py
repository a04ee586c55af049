"""Utilities to help with functional data analysis."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from fcrcov.utils.utility import FlattenFunctionalData, flatten_and_sort_data_matrices

__all__ = [
    "FlattenFunctionalData",
    "flatten_and_sort_data_matrices",
]
