# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from statlinalg.exceptions import DimensionMismatchError
from statlinalg.projections import project_onto_range


def test_projections():
    A = np.array(
        [
            [1, 0],
            [1, 1],
            [1, 2],
        ]
    )
    b = np.array(
        [
            [6],
            [0],
            [0],
        ]
    )

    p = project_onto_range(A, b)
    np.testing.assert_allclose(
        p,
        np.array(
            [
                [5],
                [2],
                [-1],
            ]
        ),
        atol=1e-10,
        verbose=True,
    )

    # Check residuals
    res = np.linalg.norm(A @ np.linalg.lstsq(A, b, rcond=None)[0] - b, np.inf)
    res_proj = np.linalg.norm(p - b, np.inf)
    assert abs(res - res_proj) < 1e-12


def test_projection_with_dependent_columns():
    A = np.array([[1.0, 2.0], [1.0, 2.0], [0.0, 0.0]])
    b = np.array([1.0, 3.0, 4.0])

    p = project_onto_range(A, b, threshold=1e-10)
    np.testing.assert_allclose(p, [2.0, 2.0, 0.0], atol=1e-10)


def test_projection_is_idempotent():
    rng = np.random.default_rng(seed=1)
    A = rng.standard_normal(size=(10, 4))
    b = rng.standard_normal(size=10)

    p = project_onto_range(A, b)
    np.testing.assert_allclose(project_onto_range(A, p), p, atol=1e-10)


def test_projection_row_mismatch():
    with pytest.raises(DimensionMismatchError):
        project_onto_range(np.eye(3), np.ones(4))
