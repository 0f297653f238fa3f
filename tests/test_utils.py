# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import math

import numpy as np
import pytest

from statlinalg.utils import MACHINE_EPS, as_matrix, pythag, sign


def test_pythag_basic():
    assert pythag(3.0, 4.0) == pytest.approx(5.0)
    assert pythag(-3.0, 4.0) == pytest.approx(5.0)
    assert pythag(4.0, -3.0) == pytest.approx(5.0)
    assert pythag(0.0, 0.0) == 0.0
    assert pythag(0.0, -2.5) == 2.5


def test_pythag_does_not_overflow():
    big = 1e200
    # the naive formula overflows to inf here
    assert math.isinf(big * big)
    assert pythag(big, big) == pytest.approx(big * math.sqrt(2.0), rel=1e-15)


def test_pythag_does_not_underflow():
    tiny = 1e-200
    # the naive formula underflows to zero here
    assert tiny * tiny == 0.0
    assert pythag(tiny, tiny) == pytest.approx(tiny * math.sqrt(2.0), rel=1e-15)


def test_sign():
    assert sign(2.0, -1.0) == -2.0
    assert sign(-2.0, 1.0) == 2.0
    assert sign(-2.0, 0.0) == 2.0


def test_machine_eps_is_unit_roundoff():
    assert MACHINE_EPS == 2.0**-53
    assert 1.0 + 2.0 * MACHINE_EPS != 1.0


def test_as_matrix_copies():
    A = np.arange(6.0).reshape(2, 3)
    B = as_matrix(A)
    B[0, 0] = 99.0
    assert A[0, 0] == 0.0
    with pytest.raises(TypeError):
        as_matrix([1.0, 2.0])
