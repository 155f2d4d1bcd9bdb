"""
Offline analysis script for the internet usage vs. happiness project.

This script:
- Loads the internet usage and World Happiness Report CSVs
- Merges them on normalized country names
- Computes:
  * Pearson correlation, regression line and R²
  * k=3 spatial clusters on latitude / longitude
  * Local (distance-weighted) slopes
  * Residual "anomalies" from the global line
- Prints a short report and optionally saves it as JSON

Run with:
    python run_analysis.py --internet data/internet.csv --happiness data/whr.csv
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

import pandas as pd

from happynet.config import DEFAULT_CONFIG, DUPLICATE_POLICIES
from happynet.data import DataLoadError
from happynet.local_slope import slope_legend
from happynet.pipeline import PipelineContext, load_and_run, summarize
from happynet.utils import (
    configure_logging,
    get_default_happiness_path,
    get_default_internet_path,
    save_json,
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="run_analysis.py",
        description="Internet usage vs. happiness: correlation, clusters, local slopes, residuals.",
    )
    parser.add_argument(
        "--internet",
        type=Path,
        default=get_default_internet_path(),
        help="Internet usage CSV (default: data/internet-users-by-country-2024.csv)",
    )
    parser.add_argument(
        "--happiness",
        type=Path,
        default=get_default_happiness_path(),
        help="World Happiness Report CSV (default: data/WHR24_Data_Figure_2.1.csv)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write the report to this JSON file")
    parser.add_argument(
        "--rounds",
        type=int,
        default=DEFAULT_CONFIG.n_rounds,
        help=f"k-means rounds (default: {DEFAULT_CONFIG.n_rounds})",
    )
    parser.add_argument(
        "--bandwidth-km",
        type=float,
        default=DEFAULT_CONFIG.bandwidth_km,
        help=f"Local slope bandwidth in km (default: {DEFAULT_CONFIG.bandwidth_km:g})",
    )
    parser.add_argument(
        "--duplicates",
        choices=DUPLICATE_POLICIES,
        default=DEFAULT_CONFIG.duplicate_policy,
        help="How to handle countries listed twice in the internet table",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=DEFAULT_CONFIG.top_n,
        help=f"Number of residual anomalies to list (default: {DEFAULT_CONFIG.top_n})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def print_report(ctx: PipelineContext, top_n: int) -> None:
    """Print the results of a pipeline run."""
    print(f"Merged countries: {ctx.n_records} ({ctx.merge.n_dropped} internet rows dropped)")
    if not ctx.merge.dropped.empty:
        reasons = ctx.merge.dropped.groupby(["table", "reason"]).size()
        for (table, reason), count in reasons.items():
            print(f"  dropped {table}: {reason} x{count}")

    print("\n=== Correlation & regression ===")
    print(f"Pearson r: {ctx.correlation:.3f} (n={ctx.n_records})")
    print(f"Equation: {ctx.regression.equation}")
    print(f"R2: {ctx.r2:.3f}")

    print("\n=== Spatial clusters ===")
    if ctx.clusters.computed:
        with pd.option_context("display.float_format", "{:.2f}".format):
            print(ctx.clusters.summary.to_string(index=False))
    else:
        print(ctx.clusters.reason)

    print("\n=== Local slopes ===")
    print(slope_legend(ctx.records["local_slope"]))

    print(f"\n=== Top {top_n} residuals ===")
    for _, row in ctx.residuals.top(top_n).iterrows():
        print(f"{row['country']}: residual {row['residual']:.2f}")

    print("\n=== Interpretation ===")
    print(ctx.interpretation)
    print(ctx.pattern)


def main(argv=None) -> int:
    """Run the full analysis from the command line."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = dataclasses.replace(
            DEFAULT_CONFIG,
            n_rounds=args.rounds,
            bandwidth_km=args.bandwidth_km,
            duplicate_policy=args.duplicates,
            top_n=args.top,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    print("Loading data...")
    try:
        ctx = load_and_run(args.internet, args.happiness, config)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, DataLoadError) as e:
        print(f"Could not load input data: {e}", file=sys.stderr)
        return 1

    print_report(ctx, config.top_n)

    if args.output is not None:
        save_json(summarize(ctx), args.output)
        print(f"\nReport saved to: {args.output.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
