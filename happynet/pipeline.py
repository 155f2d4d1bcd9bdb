"""
End-to-end analysis pipeline.

`run_pipeline` builds a fresh `PipelineContext` on every call:

1. Merge the two tables
2. Correlation, regression line and R²
3. Spatial clustering (writes `cluster_id`)
4. Local slopes (writes `local_slope`)
5. Residual ranking
6. Plain-text interpretation

Steps 2-6 only read the merged records; steps 3 and 4 each add one column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import numpy as np
import pandas as pd

from .clustering import ClusterResult, cluster_countries
from .config import DEFAULT_CONFIG, AnalysisConfig
from .data import (
    CLUSTER_ID,
    COUNTRY,
    LOCAL_SLOPE,
    MergeResult,
    load_happiness_table,
    load_internet_table,
    merge_tables,
)
from .interpret import describe_correlation, pattern_summary
from .local_slope import compute_local_slopes, slope_range
from .residuals import ResidualRanking, rank_residuals
from .stats import RegressionModel, correlation, fit_regression, regression_r_squared


logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """All results of one pipeline run."""

    config: AnalysisConfig
    merge: MergeResult
    correlation: float = 0.0
    regression: RegressionModel = field(default_factory=lambda: RegressionModel(0.0, 0.0, 0))
    r2: float = 0.0
    clusters: ClusterResult | None = None
    residuals: ResidualRanking | None = None
    interpretation: str = ""
    pattern: str = ""

    @property
    def records(self) -> pd.DataFrame:
        return self.merge.records

    @property
    def n_records(self) -> int:
        return len(self.merge.records)


def run_pipeline(
    internet_rows: Iterable[Mapping[str, Any]] | pd.DataFrame,
    happiness_rows: Iterable[Mapping[str, Any]] | pd.DataFrame,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> PipelineContext:
    """Merge both tables and run every analysis step once."""
    merge = merge_tables(internet_rows, happiness_rows, config)
    ctx = PipelineContext(config=config, merge=merge)
    records = ctx.records

    ctx.correlation = correlation(records)
    ctx.regression = fit_regression(records)
    ctx.r2 = regression_r_squared(records, ctx.regression)
    if ctx.n_records < 2:
        logger.warning(
            "Only %d merged countries; correlation and regression fall back to 0",
            ctx.n_records,
        )

    ctx.clusters = cluster_countries(records, config.n_clusters, config.n_rounds)
    records[CLUSTER_ID] = ctx.clusters.labels
    if not ctx.clusters.computed:
        logger.warning(ctx.clusters.reason)

    records[LOCAL_SLOPE] = compute_local_slopes(
        records,
        bandwidth_km=config.bandwidth_km,
        min_neighbours=config.min_neighbours,
        det_tolerance=config.det_tolerance,
    )

    ctx.residuals = rank_residuals(records, ctx.regression)
    ctx.interpretation = describe_correlation(ctx.correlation)
    ctx.pattern = pattern_summary(ctx.residuals, config.n_extremes)

    logger.info(
        "Pipeline finished: n=%d r=%.3f R2=%.3f",
        ctx.n_records,
        ctx.correlation,
        ctx.r2,
    )
    return ctx


def load_and_run(
    internet_path: Path | str,
    happiness_path: Path | str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> PipelineContext:
    """
    Load both CSV files, then run the pipeline.

    Both loads must succeed before anything is computed; a load failure is
    logged by the loader and propagates to the caller.
    """
    internet_df = load_internet_table(internet_path)
    happiness_df = load_happiness_table(happiness_path)
    return run_pipeline(internet_df, happiness_df, config)


def _clean(value: Any) -> Any:
    """Make numpy / pandas scalars JSON-friendly (NaN -> None)."""
    if value is None or value is pd.NA:
        return None
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return None if np.isnan(value) else float(value)
    return value


def _frame_to_records(df: pd.DataFrame) -> list:
    return [
        {k: _clean(v) for k, v in row.items()}
        for row in df.to_dict(orient="records")
    ]


def summarize(ctx: PipelineContext) -> Dict[str, Any]:
    """JSON-serializable report of a pipeline run."""
    config = ctx.config
    report: Dict[str, Any] = {
        "n_countries": ctx.n_records,
        "n_dropped": ctx.merge.n_dropped,
        "drop_rate": ctx.merge.drop_rate,
        "correlation": ctx.correlation,
        "regression": {
            "slope": ctx.regression.slope,
            "intercept": ctx.regression.intercept,
            "equation": ctx.regression.equation,
        },
        "r2": ctx.r2,
        "clusters": {
            "computed": ctx.clusters.computed if ctx.clusters else False,
            "reason": ctx.clusters.reason if ctx.clusters else "",
            "summary": _frame_to_records(ctx.clusters.summary) if ctx.clusters else [],
        },
        "local_slope": slope_range(ctx.records[LOCAL_SLOPE])
        if LOCAL_SLOPE in ctx.records
        else None,
        "top_residuals": [],
        "interpretation": ctx.interpretation,
        "pattern_summary": ctx.pattern,
    }
    if ctx.residuals is not None:
        top = ctx.residuals.top(config.top_n)
        report["top_residuals"] = _frame_to_records(top[[COUNTRY, "residual"]])
    return report
