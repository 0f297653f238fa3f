# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Projection operations
"""

from typing import Optional

import numpy as np

from .exceptions import DimensionMismatchError
from .svd import SingularValueDecomposition


def project_onto_range(
    A: np.ndarray, b: np.ndarray, threshold: Optional[float] = None
) -> np.ndarray:
    """
    Find p, the orthogonal projection of b onto the column-space of A.

    The projector is Q Q^T where the columns of Q are the orthonormal range
    basis from the SVD, so dependent columns in A need no special case.

    Returns
    -------
    p : ndarray, same shape as b, (m,) or (m, k)
    """
    b = np.asarray(b, dtype=float)
    Q = SingularValueDecomposition(A).range(threshold)
    if b.shape[0] != Q.shape[0]:
        raise DimensionMismatchError(
            f"b has {b.shape[0]} rows but A has {Q.shape[0]}"
        )
    return Q @ (Q.T @ b)
