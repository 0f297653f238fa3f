# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np

from .exceptions import DimensionMismatchError, SingularMatrixError
from .utils import as_matrix

logger = logging.getLogger(__name__)


class LUDecomposition:
    """
    LU decomposition with implicit partial pivoting of an n-by-n matrix A.

    Row i of LU comes from original row perm[i]; the strict lower triangle
    holds L (unit diagonal implied) and the upper triangle holds U.

    Unlike the SVD, a singular matrix is not regularized: an all-zero row
    or an exactly zero pivot raises SingularMatrixError.
    """

    def __init__(self, A):
        A = as_matrix(A)
        n, cols = A.shape
        if n != cols:
            raise DimensionMismatchError(
                f"LU decomposition requires a square matrix, got {A.shape}"
            )
        self.n = n
        self.A = A
        LU = A.copy()

        # Implicit scaling: pivot choice compares entries relative to the
        # largest magnitude in their row.
        row_max = np.abs(LU).max(axis=1)
        if np.any(row_max == 0.0):
            raise SingularMatrixError("Singular matrix in LU decomposition.")
        vv = 1.0 / row_max

        perm = np.arange(n)
        parity = 1.0
        swaps = 0
        for k in range(n):
            max_idx = int(np.argmax(vv[k:] * np.abs(LU[k:, k])))
            pivot_row = k + max_idx

            if pivot_row != k:
                LU[[k, pivot_row]] = LU[[pivot_row, k]]
                vv[[k, pivot_row]] = vv[[pivot_row, k]]
                perm[[k, pivot_row]] = perm[[pivot_row, k]]
                parity = -parity
                swaps += 1

            if LU[k, k] == 0.0:
                raise SingularMatrixError(
                    f"Singular matrix in LU decomposition (zero pivot in column {k})."
                )

            # Eliminate entries below the pivot, storing the multipliers
            LU[k + 1 :, k] /= LU[k, k]
            LU[k + 1 :, k + 1 :] -= np.outer(LU[k + 1 :, k], LU[k, k + 1 :])

        logger.debug(f"LU of {n}x{n} matrix with {swaps} row interchanges")
        self.LU = LU
        self.perm = perm
        self.parity = parity

    def solve(self, b) -> np.ndarray:
        """
        Solve A x = b using the stored factors.

        Parameters
        ----------
        b : (n,) or (n, k) array_like

        Returns
        -------
        x : (n,) or (n, k) ndarray
        """
        b = np.asarray(b, dtype=float)
        if b.ndim not in (1, 2) or b.shape[0] != self.n:
            raise DimensionMismatchError(
                f"b must have {self.n} rows to match the matrix A, got shape {b.shape}"
            )
        LU = self.LU
        x = b[self.perm].copy()

        # forward substitution through the unit lower triangle
        for i in range(self.n):
            x[i] -= LU[i, :i] @ x[:i]
        # back substitution through the upper triangle
        for i in reversed(range(self.n)):
            x[i] = (x[i] - LU[i, i + 1 :] @ x[i + 1 :]) / LU[i, i]
        return x

    def inverse(self) -> np.ndarray:
        return self.solve(np.eye(self.n))

    def determinant(self) -> float:
        return float(self.parity * np.prod(np.diag(self.LU)))

    def log_abs_determinant(self) -> float:
        """log|det(A)|, safe from overflow for large matrices."""
        return float(np.sum(np.log(np.abs(np.diag(self.LU)))))
