"""
Descriptive statistics over the merged country table.

Pearson correlation, an ordinary least squares line and its R², all in
closed form. Degenerate inputs (fewer than two records, zero variance) return
defined fallback values instead of NaN.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .data import HAPPINESS, INTERNET


@dataclass(frozen=True)
class RegressionModel:
    """Fitted line `happiness = slope * internet + intercept`."""

    slope: float
    intercept: float
    n: int = 0

    def predict(self, x):
        """Predicted happiness for scalar or array-like internet usage."""
        return self.slope * np.asarray(x, dtype=float) + self.intercept

    @property
    def equation(self) -> str:
        return f"y={self.slope:.3f}x{self.intercept:+.3f}"


def _xy(records: pd.DataFrame) -> tuple[np.ndarray, np.ndarray]:
    x = records[INTERNET].to_numpy(dtype=float)
    y = records[HAPPINESS].to_numpy(dtype=float)
    return x, y


def pearson_correlation(x, y) -> float:
    """
    Pearson product-moment correlation of two equal-length sequences.

    Returns 0.0 for fewer than 2 values or when either side has zero variance.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same length")
    if x.size < 2:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    sxx = float(np.dot(dx, dx))
    syy = float(np.dot(dy, dy))
    if sxx <= 0 or syy <= 0:
        return 0.0

    r = float(np.dot(dx, dy)) / np.sqrt(sxx * syy)
    return float(np.clip(r, -1.0, 1.0))


def fit_line(x, y) -> RegressionModel:
    """
    Ordinary least squares via the covariance / variance ratio.

    With fewer than 2 points or a constant x the slope is 0 and the
    intercept is the mean of y (0 for no data).
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = int(x.size)
    if n == 0:
        return RegressionModel(slope=0.0, intercept=0.0, n=0)

    x_mean = x.mean()
    y_mean = y.mean()
    sxx = float(np.sum((x - x_mean) ** 2))
    if n < 2 or sxx == 0:
        return RegressionModel(slope=0.0, intercept=float(y_mean), n=n)

    slope = float(np.sum((x - x_mean) * (y - y_mean))) / sxx
    intercept = float(y_mean - slope * x_mean)
    return RegressionModel(slope=slope, intercept=intercept, n=n)


def r_squared(x, y, model: RegressionModel) -> float:
    """Coefficient of determination `1 - SSE/SST`; 0.0 when SST is 0."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if y.size == 0:
        return 0.0
    sse = float(np.sum((y - model.predict(x)) ** 2))
    sst = float(np.sum((y - y.mean()) ** 2))
    if sst == 0:
        return 0.0
    return 1.0 - sse / sst


def correlation(records: pd.DataFrame) -> float:
    """Correlation between internet usage and happiness over all records."""
    return pearson_correlation(*_xy(records))


def fit_regression(records: pd.DataFrame) -> RegressionModel:
    """Fit happiness on internet usage over all records (recomputed each call)."""
    return fit_line(*_xy(records))


def regression_r_squared(records: pd.DataFrame, model: RegressionModel | None = None) -> float:
    if model is None:
        model = fit_regression(records)
    return r_squared(*_xy(records), model)
