# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
import math

import numpy as np
import pytest

from statlinalg.exceptions import DimensionMismatchError, SingularMatrixError
from statlinalg.lu import LUDecomposition

TEST_ITERATIONS = 20
logger = logging.getLogger(__name__)


def test_solve_known_system():
    A = np.array([[25.0, 15.0, -5.0], [15.0, 18.0, 0.0], [-5.0, 0.0, 11.0]])
    b = np.array([6.0, -4.0, 27.0])

    x = LUDecomposition(A).solve(b)
    np.testing.assert_allclose(x, np.linalg.solve(A, b), rtol=1e-10)


def test_solve_random_systems():
    rng = np.random.default_rng(seed=42)
    for _ in range(TEST_ITERATIONS):
        n = int(rng.integers(2, 30))
        A = rng.standard_normal(size=(n, n))
        x_true = rng.random(n)
        b = A @ x_true

        x = LUDecomposition(A).solve(b)
        logger.debug(f"\nOurs:\n{x}\nTrue:\n{x_true}")

        # Compare residuals, which do not depend on conditioning
        res_np = np.linalg.norm(A @ np.linalg.solve(A, b) - b, ord=np.inf)
        res_lu = np.linalg.norm(A @ x - b, ord=np.inf)
        assert res_lu <= max(10.0 * res_np, 1e-10)


def test_solve_matrix_rhs():
    rng = np.random.default_rng(seed=3)
    A = rng.standard_normal(size=(6, 6))
    B = rng.standard_normal(size=(6, 3))

    X = LUDecomposition(A).solve(B)
    assert X.shape == (6, 3)
    np.testing.assert_allclose(A @ X, B, atol=1e-10)


def test_inverse_and_determinant():
    rng = np.random.default_rng(seed=7)
    A = rng.standard_normal(size=(8, 8))
    lu = LUDecomposition(A)

    np.testing.assert_allclose(lu.inverse() @ A, np.eye(8), atol=1e-10)
    assert math.isclose(lu.determinant(), np.linalg.det(A), rel_tol=1e-9)
    assert lu.log_abs_determinant() == pytest.approx(
        math.log(abs(np.linalg.det(A))), abs=1e-9
    )


def test_determinant_sign_from_row_swaps():
    A = np.array([[0.0, 1.0], [1.0, 0.0]])
    assert LUDecomposition(A).determinant() == pytest.approx(-1.0)


def test_singular_matrix_raises():
    with pytest.raises(SingularMatrixError):
        LUDecomposition(np.array([[1.0, 2.0], [0.0, 0.0]]))
    with pytest.raises(SingularMatrixError):
        LUDecomposition(np.array([[1.0, 2.0], [2.0, 4.0]]))


def test_non_square_raises():
    with pytest.raises(DimensionMismatchError):
        LUDecomposition(np.ones((3, 2)))


def test_rhs_dimension_mismatch():
    lu = LUDecomposition(np.eye(3))
    with pytest.raises(DimensionMismatchError):
        lu.solve(np.ones(2))
    with pytest.raises(DimensionMismatchError):
        lu.solve(np.ones((4, 2)))


def test_input_is_not_modified():
    A = np.array([[4.0, 3.0], [6.0, 3.0]])
    original = A.copy()
    LUDecomposition(A)
    np.testing.assert_array_equal(A, original)
