# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
statlinalg
==========

Dense numerical building blocks for statistical modelling, centred on a
Golub-Kahan-Reinsch Singular Value Decomposition.

Public API
~~~~~~~~~~
- Decompositions
    - `SingularValueDecomposition`, `svd`
    - `LUDecomposition`
- Rank / null-space tools (methods of `SingularValueDecomposition`)
    - `rank`, `nullity`, `range`, `nullspace`
- Linear systems
    - `SingularValueDecomposition.solve`, `LUDecomposition.solve`
    - `project_onto_range`
- Regression
    - `LinearRegression`
- Numerics
    - `pythag`, `MACHINE_EPS`, `MAX_SVD_ITERATIONS`

Everything else lives in sub-modules and is **not** considered part of the
stable interface.

Example
-------
>>> import numpy as np, statlinalg as sl
>>> A = np.random.randn(5, 3)
>>> d = sl.SingularValueDecomposition(A)
>>> np.allclose(d.reconstruct(), A)
True
"""

from importlib.metadata import version as _pkg_version

from .exceptions import (
    ConvergenceError,
    DimensionMismatchError,
    SingularMatrixError,
    StatLinalgError,
)
from .lu import LUDecomposition
from .projections import project_onto_range
from .regression import LinearRegression
from .svd import SingularValueDecomposition, normalize_signs, svd
from .utils import MACHINE_EPS, MAX_SVD_ITERATIONS, pythag

__all__ = [
    "SingularValueDecomposition",
    "svd",
    "normalize_signs",
    "LUDecomposition",
    "LinearRegression",
    "project_onto_range",
    "pythag",
    "MACHINE_EPS",
    "MAX_SVD_ITERATIONS",
    "StatLinalgError",
    "DimensionMismatchError",
    "ConvergenceError",
    "SingularMatrixError",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show statlinalg”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Library logging stays silent unless the application configures it.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
