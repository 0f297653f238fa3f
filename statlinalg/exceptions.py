# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>


class StatLinalgError(Exception):
    """Base exception for statlinalg."""


class DimensionMismatchError(StatLinalgError, ValueError):
    """Operand shape disagrees with the decomposed matrix."""


class ConvergenceError(StatLinalgError, ArithmeticError):
    """An iterative decomposition did not converge within its iteration cap."""


class SingularMatrixError(StatLinalgError, ArithmeticError):
    """Matrix is exactly singular and cannot be factored."""
