# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Singular Value Decomposition by Householder bidiagonalization followed by
implicit-shift QR iteration (Golub-Kahan-Reinsch).

For an m-by-n real matrix A the decomposition is

    A = U @ diag(W) @ V.T

with U (m, n) column-orthogonal, W (n,) non-negative and sorted in
descending order, and V (n, n) orthogonal. The object is decomposed once and
then queried for rank, nullity, range, nullspace, pseudo-inverse solves and
log-determinants. Queries never modify the decomposition: a per-call
threshold only changes what that call returns.

Non-finite input (NaN / inf) is not supported and is not checked.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from .exceptions import ConvergenceError, DimensionMismatchError
from .utils import MACHINE_EPS, MAX_SVD_ITERATIONS, as_matrix, pythag, sign

logger = logging.getLogger(__name__)


def _rotate(a: np.ndarray, p: int, q: int, c: float, s: float) -> None:
    """Apply a Givens rotation to columns p and q of a, in place."""
    y = a[:, p].copy()
    z = a[:, q].copy()
    a[:, p] = y * c + z * s
    a[:, q] = z * c - y * s


def normalize_signs(U: np.ndarray, V: np.ndarray) -> None:
    """
    Flip the sign of paired columns of U and V, in place, when more than
    half of their combined entries are negative.

    U @ diag(W) @ V.T is unchanged. Calling this twice is a no-op.
    """
    m = U.shape[0]
    n = V.shape[0]
    for k in range(V.shape[1]):
        negatives = np.count_nonzero(U[:, k] < 0.0) + np.count_nonzero(V[:, k] < 0.0)
        if negatives > (m + n) // 2:
            U[:, k] = -U[:, k]
            V[:, k] = -V[:, k]


class SingularValueDecomposition:
    """
    Singular Value Decomposition of a dense m-by-n matrix.

    Parameters
    ----------
    A : (m, n) array_like
        Matrix to decompose. It is copied; the caller's array is never
        modified.

    Attributes
    ----------
    A : (m, n) ndarray
        Read-only copy of the input.
    U : (m, n) ndarray
        Column-orthogonal left singular vectors.
    W : (n,) ndarray
        Singular values, non-negative, sorted largest first.
    V : (n, n) ndarray
        Orthogonal right singular vectors (columns).
    threshold : float
        Default cut-off below which a singular value counts as zero,
        0.5 * sqrt(m + n + 1) * W[0] * MACHINE_EPS.

    Raises
    ------
    DimensionMismatchError
        If A has no rows or no columns.
    ConvergenceError
        If the QR iteration needs more than MAX_SVD_ITERATIONS sweeps for
        any singular value.
    """

    def __init__(self, A):
        A = as_matrix(A)
        m, n = A.shape
        if m < 1 or n < 1:
            raise DimensionMismatchError(
                f"Cannot decompose an empty matrix of shape {A.shape}"
            )
        self.m = m
        self.n = n

        self.U = A.copy()
        self.V = np.zeros((n, n))
        self.W = np.zeros(n)

        anorm = self._bidiagonalize()
        self._diagonalize(anorm)
        self._reorder()

        self.threshold = 0.5 * math.sqrt(m + n + 1.0) * self.W[0] * MACHINE_EPS
        logger.debug(
            f"SVD of {m}x{n} matrix: W[0]={self.W[0]:.6g}, "
            f"W[-1]={self.W[-1]:.6g}, threshold={self.threshold:.3g}"
        )

        A.flags.writeable = False
        self.U.flags.writeable = False
        self.V.flags.writeable = False
        self.W.flags.writeable = False
        self.A = A

    # ------------------------------------------------------------------
    # Decomposition
    # ------------------------------------------------------------------

    def _bidiagonalize(self) -> float:
        """
        Householder reduction to upper-bidiagonal form.

        On return W holds the diagonal, self._rv1 the super-diagonal
        (rv1[i] sits above W[i]), and U, V hold the accumulated left and
        right transformations. Returns the norm estimate used to decide
        when an entry is negligible.
        """
        u, v, w = self.U, self.V, self.W
        m, n = self.m, self.n
        rv1 = np.zeros(n)

        g = scale = anorm = 0.0
        l = 0
        for i in range(n):
            l = i + 1
            rv1[i] = scale * g
            g = s = scale = 0.0
            # Left reflection zeroes column i below the diagonal.
            if i < m:
                scale = float(np.abs(u[i:, i]).sum())
                if scale != 0.0:
                    u[i:, i] /= scale
                    s = float(u[i:, i] @ u[i:, i])
                    f = u[i, i]
                    g = -sign(math.sqrt(s), f)
                    h = f * g - s
                    u[i, i] = f - g
                    factors = (u[i:, i] @ u[i:, l:]) / h
                    u[i:, l:] += np.outer(u[i:, i], factors)
                    u[i:, i] *= scale
            w[i] = scale * g
            g = s = scale = 0.0
            # Right reflection zeroes row i right of the super-diagonal.
            if i + 1 <= m and i + 1 != n:
                scale = float(np.abs(u[i, l:]).sum())
                if scale != 0.0:
                    u[i, l:] /= scale
                    s = float(u[i, l:] @ u[i, l:])
                    f = u[i, l]
                    g = -sign(math.sqrt(s), f)
                    h = f * g - s
                    u[i, l] = f - g
                    rv1[l:] = u[i, l:] / h
                    sums = u[l:, l:] @ u[i, l:]
                    u[l:, l:] += np.outer(sums, rv1[l:])
                    u[i, l:] *= scale
            anorm = max(anorm, abs(w[i]) + abs(rv1[i]))

        # Accumulate right-hand transformations into V.
        for i in range(n - 1, -1, -1):
            if i < n - 1:
                if g != 0.0:
                    # Double division avoids possible underflow.
                    v[l:, i] = (u[i, l:] / u[i, l]) / g
                    sums = u[i, l:] @ v[l:, l:]
                    v[l:, l:] += np.outer(v[l:, i], sums)
                v[i, l:] = 0.0
                v[l:, i] = 0.0
            v[i, i] = 1.0
            g = rv1[i]
            l = i

        # Accumulate left-hand transformations into U.
        for i in range(min(m, n) - 1, -1, -1):
            l = i + 1
            g = w[i]
            u[i, l:] = 0.0
            if g != 0.0:
                g = 1.0 / g
                factors = (u[l:, i] @ u[l:, l:]) / u[i, i] * g
                u[i:, l:] += np.outer(u[i:, i], factors)
                u[i:, i] *= g
            else:
                u[i:, i] = 0.0
            u[i, i] += 1.0

        self._rv1 = rv1
        return anorm

    def _diagonalize(self, anorm: float) -> None:
        """Implicit-shift QR iteration on the bidiagonal form."""
        w, rv1 = self.W, self._rv1
        tol = MACHINE_EPS * anorm
        total = 0

        for k in range(self.n - 1, -1, -1):
            for its in range(MAX_SVD_ITERATIONS):
                # Find the top l of the unreduced block ending at k.
                cancel = True
                l = k
                for l in range(k, -1, -1):
                    if l == 0 or abs(rv1[l]) <= tol:
                        cancel = False
                        break
                    if abs(w[l - 1]) <= tol:
                        break
                if cancel:
                    self._cancel(l, k, tol)

                z = w[k]
                if l == k:
                    # Converged; make the singular value non-negative.
                    if z < 0.0:
                        w[k] = -z
                        self.V[:, k] = -self.V[:, k]
                    total += its
                    break
                if its == MAX_SVD_ITERATIONS - 1:
                    logger.error(
                        f"SVD did not converge for singular value {k} "
                        f"after {MAX_SVD_ITERATIONS} iterations"
                    )
                    raise ConvergenceError(
                        f"No convergence in {MAX_SVD_ITERATIONS} SVD iterations "
                        f"for singular value {k}"
                    )
                self._qr_step(l, k)

        del self._rv1
        logger.debug(f"SVD diagonalization took {total} QR sweeps")

    def _cancel(self, l: int, k: int, tol: float) -> None:
        """
        Zero rv1[l] when W[l-1] is negligible, rotating the affected
        columns of U.
        """
        w, rv1, u = self.W, self._rv1, self.U
        nm = l - 1
        c = 0.0
        s = 1.0
        for i in range(l, k + 1):
            f = s * rv1[i]
            rv1[i] = c * rv1[i]
            if abs(f) <= tol:
                break
            g = w[i]
            h = pythag(f, g)
            w[i] = h
            h = 1.0 / h
            c = g * h
            s = -f * h
            _rotate(u, nm, i, c, s)

    def _qr_step(self, l: int, k: int) -> None:
        """
        One implicit QR sweep over the block l..k.

        A shift is taken from the trailing 2x2 minor and the resulting bulge
        is chased down the block with Givens rotations that update W, the
        super-diagonal, U and V together.
        """
        w, rv1, u, v = self.W, self._rv1, self.U, self.V
        x = w[l]
        nm = k - 1
        y = w[nm]
        g = rv1[nm]
        h = rv1[k]
        z = w[k]
        f = ((y - z) * (y + z) + (g - h) * (g + h)) / (2.0 * h * y)
        g = pythag(f, 1.0)
        f = ((x - z) * (x + z) + h * ((y / (f + sign(g, f))) - h)) / x

        c = s = 1.0
        for j in range(l, nm + 1):
            i = j + 1
            g = rv1[i]
            y = w[i]
            h = s * g
            g = c * g
            z = pythag(f, h)
            rv1[j] = z
            c = f / z
            s = h / z
            f = x * c + g * s
            g = g * c - x * s
            h = y * s
            y *= c
            _rotate(v, j, i, c, s)

            z = pythag(f, h)
            w[j] = z
            # Rotation can be arbitrary if z is zero.
            if z != 0.0:
                z = 1.0 / z
                c = f * z
                s = h * z
            f = c * g + s * y
            x = c * y - s * g
            _rotate(u, j, i, c, s)

        rv1[l] = 0.0
        rv1[k] = f
        w[k] = x

    def _reorder(self) -> None:
        """
        Shell-sort W into descending order, moving the columns of U and V
        with it, then fix the column signs.
        """
        u, v, w = self.U, self.V, self.W
        n = self.n

        inc = 1
        while inc <= n:
            inc = 3 * inc + 1
        while inc > 1:
            inc //= 3
            for i in range(inc, n):
                sw = w[i]
                su = u[:, i].copy()
                sv = v[:, i].copy()
                j = i
                while w[j - inc] < sw:
                    w[j] = w[j - inc]
                    u[:, j] = u[:, j - inc]
                    v[:, j] = v[:, j - inc]
                    j -= inc
                    if j < inc:
                        break
                w[j] = sw
                u[:, j] = su
                v[:, j] = sv

        normalize_signs(u, v)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def effective_threshold(self, threshold: Optional[float] = None) -> float:
        """
        Resolve the threshold a query will use.

        None or a negative value selects the default roundoff-based
        threshold; any other value is used as given.
        """
        if threshold is not None and threshold >= 0.0:
            return float(threshold)
        return self.threshold

    @property
    def inverse_condition(self) -> float:
        """Reciprocal of the condition number of A, or 0 if A is singular."""
        if self.W[0] <= 0.0 or self.W[-1] <= 0.0:
            return 0.0
        return float(self.W[-1] / self.W[0])

    @property
    def condition_number(self) -> float:
        rcond = self.inverse_condition
        return math.inf if rcond == 0.0 else 1.0 / rcond

    def rank(self, threshold: Optional[float] = None) -> int:
        """Number of singular values greater than the threshold."""
        thresh = self.effective_threshold(threshold)
        return int(np.count_nonzero(self.W > thresh))

    def nullity(self, threshold: Optional[float] = None) -> int:
        """Number of singular values at or below the threshold."""
        thresh = self.effective_threshold(threshold)
        return int(np.count_nonzero(self.W <= thresh))

    def range(self, threshold: Optional[float] = None) -> np.ndarray:
        """
        Orthonormal basis for the column space of A.

        Returns
        -------
        R : (m, rank) ndarray
        """
        thresh = self.effective_threshold(threshold)
        return self.U[:, self.W > thresh].copy()

    def nullspace(self, threshold: Optional[float] = None) -> np.ndarray:
        """
        Orthonormal basis for the nullspace of A.

        Returns
        -------
        N : (n, nullity) ndarray
            Has shape (n, 0) when A has full column rank.
        """
        thresh = self.effective_threshold(threshold)
        return self.V[:, self.W <= thresh].copy()

    def _inverse_singular_values(self, threshold: Optional[float]) -> np.ndarray:
        thresh = self.effective_threshold(threshold)
        keep = self.W > thresh
        inv_w = np.zeros(self.n)
        inv_w[keep] = 1.0 / self.W[keep]
        return inv_w

    def solve(self, b, threshold: Optional[float] = None) -> np.ndarray:
        """
        Solve A x = b through the pseudo-inverse of A.

        Singular values at or below the threshold are treated as zero, which
        gives the minimum-norm least-squares solution instead of dividing by
        a near-zero value.

        Parameters
        ----------
        b : (m,) or (m, p) array_like
            Right-hand side(s). Each column of a 2-D b is solved separately.
        threshold : float, optional
            Cut-off for singular values; None or negative uses the default.

        Returns
        -------
        x : (n,) or (n, p) ndarray

        Raises
        ------
        DimensionMismatchError
            If b does not have m rows.
        """
        b = np.asarray(b, dtype=float)
        if b.ndim not in (1, 2):
            raise DimensionMismatchError(
                f"b must be a vector or a matrix, got {b.ndim}-D"
            )
        if b.shape[0] != self.m:
            kind = "vector" if b.ndim == 1 else "matrix"
            raise DimensionMismatchError(
                f"The {kind} b must have the same number of rows as the matrix A "
                f"({b.shape[0]} != {self.m})"
            )
        inv_w = self._inverse_singular_values(threshold)
        if b.ndim == 1:
            return self.V @ (inv_w * (self.U.T @ b))
        return self.V @ (inv_w[:, None] * (self.U.T @ b))

    def pseudo_inverse(self, threshold: Optional[float] = None) -> np.ndarray:
        """Moore-Penrose pseudo-inverse of A, shape (n, m)."""
        inv_w = self._inverse_singular_values(threshold)
        return (self.V * inv_w) @ self.U.T

    def log_determinant(self) -> float:
        """
        Sum of the logs of all singular values, i.e. log|det(A)| for a
        square A. Returns -inf when any singular value is exactly zero;
        check rank() first.
        """
        with np.errstate(divide="ignore"):
            return float(np.sum(np.log(self.W)))

    def log_pseudo_determinant(self) -> float:
        """Sum of the logs of the non-zero singular values."""
        nonzero = self.W[self.W != 0.0]
        return float(np.sum(np.log(nonzero)))

    def reconstruct(self) -> np.ndarray:
        """Return U @ diag(W) @ V.T."""
        return (self.U * self.W) @ self.V.T


def svd(A) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Economy-size Singular Value Decomposition.

    For an m-by-n real matrix A this routine returns three objects:
        U : m-by-n matrix whose columns are orthonormal (when m >= n)
        s : length-n vector of singular values, sorted in descending order
        Vt: n-by-n matrix whose rows are orthonormal  (V.T)
    """
    d = SingularValueDecomposition(A)
    return d.U.copy(), d.W.copy(), d.V.T.copy()
