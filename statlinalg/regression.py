# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Ordinary least squares fitted through the SVD.

The model is Y = X beta + e with e ~ N(0, sigma). Coefficients come from the
pseudo-inverse solve of the design matrix, and the parameter covariance is
built from the right singular vectors,

    Cov(beta) = sigma^2 * V diag(1 / W_k^2) V^T     (W_k above the threshold)

so X^T X is never formed or inverted.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import scipy.stats as st

from .exceptions import DimensionMismatchError
from .svd import SingularValueDecomposition

logger = logging.getLogger(__name__)

# Singular values below REGRESSION_TOLERANCE * W[0] are dropped from the fit.
REGRESSION_TOLERANCE: float = 1e-12


def _significance_code(p: float) -> str:
    if p < 1e-3:
        return "***"
    if p < 1e-2:
        return "**"
    if p < 0.05:
        return "*"
    if p < 0.1:
        return "."
    return ""


def _format_p(p: float) -> str:
    if p > 1e-4:
        return f"{p:.4f}"
    if p < 1e-15:
        return "< 1E-15"
    return f"{p:.2E}"


class LinearRegression:
    """
    Linear regression of a response vector on one or more predictors.

    Parameters
    ----------
    x : (n,) or (n, k) array_like
        Predictor values, one row per observation.
    y : (n,) array_like
        Response values.
    has_intercept : bool
        Prepend a column of ones to the design matrix. Default True.
    parameter_names : sequence of str, optional
        One name per predictor column; defaults to β1..βk.
    response_name : str, optional
        Name used in the summary report; defaults to "Y Data".

    Raises
    ------
    DimensionMismatchError
        If x and y disagree on the number of observations.
    ValueError
        If there are fewer than three observations, or not more
        observations than design columns. Note that n == p is rejected
        too, not only n < p: with zero residual degrees of freedom the
        standard error would be 0/0.
    """

    def __init__(
        self,
        x,
        y,
        has_intercept: bool = True,
        parameter_names: Optional[Sequence[str]] = None,
        response_name: Optional[str] = None,
    ):
        x = np.asarray(x, dtype=float)
        if x.ndim == 1:
            x = x[:, None]
        y = np.asarray(y, dtype=float).ravel()

        if x.ndim != 2:
            raise DimensionMismatchError(f"x must be 1-D or 2-D, got {x.ndim}-D")
        if y.shape[0] != x.shape[0]:
            raise DimensionMismatchError(
                f"The y vector must be the same length as the x matrix "
                f"({y.shape[0]} != {x.shape[0]})"
            )
        if y.shape[0] <= 2:
            raise ValueError("There must be at least three data points.")

        n_cols = x.shape[1] + (1 if has_intercept else 0)
        if y.shape[0] <= n_cols:
            raise ValueError(
                f"A regression with {n_cols} parameters requires more than "
                f"{n_cols} data points. Only {y.shape[0]} data points have been provided."
            )

        self.x = x
        self.y = y
        self.has_intercept = has_intercept
        self.response_name = response_name or "Y Data"

        names: List[str] = ["Intercept"] if has_intercept else []
        if parameter_names is not None and len(parameter_names) == x.shape[1]:
            names.extend(parameter_names)
        else:
            names.extend(f"β{i}" for i in range(1, x.shape[1] + 1))
        self.parameter_names = names

        self._fit()

    @property
    def sample_size(self) -> int:
        return self.y.shape[0]

    def _design(self, x: np.ndarray) -> np.ndarray:
        if self.has_intercept:
            return np.column_stack([np.ones(x.shape[0]), x])
        return x

    def _fit(self):
        X = self._design(self.x)
        y = self.y
        n, p = X.shape

        svd = SingularValueDecomposition(X)
        thresh = REGRESSION_TOLERANCE * svd.W[0] if REGRESSION_TOLERANCE > 0 else None
        betas = svd.solve(y, thresh)

        rank = svd.rank(thresh)
        if rank < p:
            logger.warning(
                f"Design matrix is rank deficient ({rank} < {p}); "
                f"returning the minimum-norm coefficients"
            )

        residuals = y - X @ betas
        sse = float(residuals @ residuals)
        sst = float(np.sum((y - y.mean()) ** 2))
        dof = n - p

        # Unscaled covariance from the retained singular directions only
        keep = svd.W > svd.effective_threshold(thresh)
        Vk = svd.V[:, keep]
        unscaled = (Vk / svd.W[keep] ** 2) @ Vk.T

        se = math.sqrt(sse / dof)

        self.parameters = betas
        self.residuals = residuals
        self.degrees_of_freedom = dof
        self.standard_error = se
        self.covariance = se**2 * unscaled
        self.parameter_standard_errors = np.sqrt(np.diag(unscaled)) * se
        with np.errstate(divide="ignore", invalid="ignore"):
            self.parameter_t_stats = betas / self.parameter_standard_errors
        self.parameter_p_values = 2.0 * st.t.sf(np.abs(self.parameter_t_stats), dof)
        # constant response: R-squared is undefined
        self.r_squared = 1.0 - sse / sst if sst > 0.0 else math.nan
        self.adj_r_squared = 1.0 - (1.0 - self.r_squared) * (n - 1) / dof
        self._sse = sse
        self._sst = sst

        logger.debug(
            f"Fitted {p} parameters on {n} observations: "
            f"R2={self.r_squared:.4f}, s={se:.4g}"
        )

    def _check_predictors(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.ndim == 1:
            x = x[:, None] if self.x.shape[1] == 1 else x[None, :]
        if x.shape[1] != self.x.shape[1]:
            raise DimensionMismatchError(
                f"Expected {self.x.shape[1]} predictor columns, got {x.shape[1]}"
            )
        return x

    def predict(self, x) -> np.ndarray:
        """Return the fitted mean response for each row of x."""
        x = self._check_predictors(x)
        return self._design(x) @ self.parameters

    def prediction_intervals(self, x, alpha: float = 0.1) -> np.ndarray:
        """
        Prediction intervals for new observations.

        Parameters
        ----------
        x : array_like
            Predictor values, same columns as the fitted x.
        alpha : float
            1 - coverage; 0.1 gives 90% intervals.

        Returns
        -------
        out : (rows, 3) ndarray
            Columns are lower, upper, mean.
        """
        mu = self.predict(x)
        s2 = self.standard_error**2
        dof = self.degrees_of_freedom
        scale = math.sqrt(s2 / dof + s2)
        lower = st.t.ppf(alpha / 2.0, dof, loc=mu, scale=scale)
        upper = st.t.ppf(1.0 - alpha / 2.0, dof, loc=mu, scale=scale)
        return np.column_stack([lower, upper, mu])

    def f_test(self) -> Tuple[float, float]:
        """
        F-test of the fitted model against the intercept-only model.

        Returns
        -------
        (F, p_value)
        """
        df_full = self.degrees_of_freedom
        df_restricted = self.sample_size - 1
        df_num = df_restricted - df_full
        if df_num <= 0:
            return math.nan, math.nan
        if self._sse == 0.0:
            # exact fit: F is unbounded unless the restricted model is exact too
            if self._sst > 0.0:
                return math.inf, 0.0
            return math.nan, math.nan
        F = ((self._sst - self._sse) / df_num) / (self._sse / df_full)
        return float(F), float(st.f.sf(F, df_num, df_full))

    def coefficient_table(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "Estimate": self.parameters,
                "Std. Error": self.parameter_standard_errors,
                "t value": self.parameter_t_stats,
                "Pr(>|t|)": self.parameter_p_values,
            },
            index=pd.Index(self.parameter_names, name="Parameter"),
        )

    def summary(self) -> List[str]:
        """R-style summary report, one string per line."""
        text = ["", f"Model for predicting {self.response_name}:", "Parameters:"]
        text.append(
            f"{'':<15}{'Estimate':>12}{'Std. Error':>12}{'t value':>12}{'Pr(>|t|)':>12}"
        )
        for name, row in self.coefficient_table().iterrows():
            label = name if len(name) < 15 else name[:14]
            p = row["Pr(>|t|)"]
            text.append(
                f"{label:<15}{row['Estimate']:>12.5f}{row['Std. Error']:>12.5f}"
                f"{row['t value']:>12.3f}{_format_p(p):>12} {_significance_code(p)}".rstrip()
            )
        text.append("---")
        text.append("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        text.append("")

        text.append(
            f"Residual standard error: {self.standard_error:.4f} on "
            f"{self.degrees_of_freedom} degrees of freedom"
        )
        text.append(
            f"Multiple R-squared: {self.r_squared:.4f},  "
            f"Adjusted R-squared: {self.adj_r_squared:.4f}"
        )
        F, f_p = self.f_test()
        n_slopes = len(self.parameters) - (1 if self.has_intercept else 0)
        text.append(
            f"F-statistic: {F:.1f}, on {n_slopes} and {self.degrees_of_freedom} DF, "
            f"p-value: {_format_p(f_p)}"
        )
        text.append("")

        text.append("Residuals:")
        text.append(f"{'Min':>10}{'1Q':>10}{'Median':>10}{'3Q':>10}{'Max':>10}")
        five = np.percentile(self.residuals, [0, 25, 50, 75, 100])
        text.append("".join(f"{v:>10.4f}" for v in five))
        text.append("")
        return text
