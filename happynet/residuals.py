"""
Residuals from the global regression line and the "anomaly" rankings.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG
from .data import COUNTRY, HAPPINESS, INTERNET
from .stats import RegressionModel, fit_regression


def compute_residuals(records: pd.DataFrame, model: RegressionModel) -> pd.Series:
    """Observed happiness minus the line's prediction, aligned on `records.index`."""
    predicted = model.predict(records[INTERNET].to_numpy(dtype=float))
    return pd.Series(
        records[HAPPINESS].to_numpy(dtype=float) - predicted,
        index=records.index,
        name="residual",
    )


@dataclass
class ResidualRanking:
    """
    Residual table plus the orderings used for display.

    `table` keeps input order; every ordering uses a stable sort so ties
    keep the input order.
    """

    table: pd.DataFrame

    @property
    def ranked(self) -> pd.DataFrame:
        """All records by descending absolute residual."""
        return self.table.sort_values("abs_residual", ascending=False, kind="mergesort")

    def top(self, n: int = DEFAULT_CONFIG.top_n) -> pd.DataFrame:
        return self.ranked.head(n)

    def above_line(self, n: int = DEFAULT_CONFIG.n_extremes) -> pd.DataFrame:
        """The `n` largest (most positive) residuals."""
        return self.table.sort_values("residual", ascending=False, kind="mergesort").head(n)

    def below_line(self, n: int = DEFAULT_CONFIG.n_extremes) -> pd.DataFrame:
        """The `n` smallest (most negative) residuals."""
        return self.table.sort_values("residual", ascending=True, kind="mergesort").head(n)


def rank_residuals(records: pd.DataFrame, model: RegressionModel | None = None) -> ResidualRanking:
    """Compute residuals against `model` (fit over `records` when omitted)."""
    if model is None:
        model = fit_regression(records)
    residuals = compute_residuals(records, model)
    table = pd.DataFrame(
        {
            COUNTRY: records[COUNTRY].to_numpy(),
            INTERNET: records[INTERNET].to_numpy(dtype=float),
            HAPPINESS: records[HAPPINESS].to_numpy(dtype=float),
            "residual": residuals.to_numpy(),
            "abs_residual": np.abs(residuals.to_numpy()),
        },
        index=records.index,
    )
    return ResidualRanking(table=table)
