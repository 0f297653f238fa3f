# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import math

import numpy as np

# Unit roundoff for IEEE-754 doubles, 2**-53.
MACHINE_EPS: float = float(np.finfo(float).eps) / 2.0

# QR sweeps allowed per singular value before giving up.
MAX_SVD_ITERATIONS: int = 30


def sign(a: float, b: float) -> float:
    """Return |a| carrying the sign of b (b == 0 counts as positive)."""
    return abs(a) if b >= 0.0 else -abs(a)


def pythag(a: float, b: float) -> float:
    """
    Compute sqrt(a**2 + b**2) without destructive underflow or overflow.

    The larger magnitude is factored out before squaring, so the ratio
    being squared is never larger than one.
    """
    absa = abs(a)
    absb = abs(b)
    if absa > absb:
        return absa * math.sqrt(1.0 + (absb / absa) ** 2)
    if absb == 0.0:
        return 0.0
    return absb * math.sqrt(1.0 + (absa / absb) ** 2)


def as_matrix(A, name: str = "A") -> np.ndarray:
    """Return a float64 copy of A, which must be two dimensional."""
    A = np.array(A, dtype=float, copy=True)
    if A.ndim != 2:
        raise TypeError(f"{name} must be a 2-D array, got {A.ndim}-D")
    return A
