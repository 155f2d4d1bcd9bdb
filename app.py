"""
Streamlit application for the internet usage vs. happiness project.

Features:
- Load the two country tables from the default `data/` files or from uploads
- Adjust the clustering rounds, local slope bandwidth and duplicate policy
- Show:
  * Merge statistics and dropped rows
  * Correlation, regression line and R²
  * k=3 spatial clusters with a summary table
  * Local slope map
  * Top residual "anomalies" and a short interpretation

Run locally with:
    streamlit run app.py
"""

from __future__ import annotations

import dataclasses
from typing import Tuple

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
import streamlit as st

from happynet.config import DEFAULT_CONFIG, DUPLICATE_POLICIES, AnalysisConfig
from happynet.data import (
    CLUSTER_ID,
    COUNTRY,
    HAPPINESS,
    HAPPINESS_REQUIRED_COLUMNS,
    INTERNET,
    INTERNET_REQUIRED_COLUMNS,
    LATITUDE,
    LOCAL_SLOPE,
    LONGITUDE,
)
from happynet.interpret import happiness_color, marker_color, marker_size
from happynet.local_slope import slope_legend
from happynet.pipeline import PipelineContext, run_pipeline
from happynet.utils import get_default_happiness_path, get_default_internet_path


sns.set(style="whitegrid")


@st.cache_data
def load_default_tables() -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Load both default CSV files (cached)."""
    return (
        pd.read_csv(get_default_internet_path()),
        pd.read_csv(get_default_happiness_path()),
    )


def read_uploaded_table(uploaded_file, required: list[str]) -> Tuple[pd.DataFrame | None, str | None]:
    """Read an uploaded CSV and check that the required columns exist."""
    try:
        df = pd.read_csv(uploaded_file)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        return None, f"Could not read CSV: {e}"

    missing = [c for c in required if c not in df.columns]
    if missing:
        return None, "Uploaded CSV is missing required columns: " + ", ".join(missing)
    return df, None


def plot_regression(ctx: PipelineContext) -> None:
    """Scatter of happiness vs. internet usage with the fitted line."""
    records = ctx.records
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.scatter(records[INTERNET], records[HAPPINESS], s=20, color="#3498db")
    if len(records) >= 2:
        xs = [records[INTERNET].min(), records[INTERNET].max()]
        ax.plot(xs, ctx.regression.predict(xs), color="red", linewidth=2)
    ax.set_xlabel("Internet users (% of population)")
    ax.set_ylabel("Ladder score")
    ax.set_title(f"Happiness vs. internet usage ({ctx.regression.equation})")
    st.pyplot(fig)


def plot_countries(records: pd.DataFrame) -> None:
    """Countries in lon/lat space: fill and size = internet band, outline = happiness band."""
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.scatter(
        records[LONGITUDE],
        records[LATITUDE],
        c=[marker_color(v) for v in records[INTERNET]],
        s=[marker_size(v) ** 2 for v in records[INTERNET]],
        edgecolors=[happiness_color(v) for v in records[HAPPINESS]],
        linewidths=1.5,
    )
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Internet usage (fill, size) and happiness (outline)")
    st.pyplot(fig)


def plot_clusters(records: pd.DataFrame) -> None:
    """Cluster membership in lon/lat space."""
    df = records.dropna(subset=[CLUSTER_ID])
    fig, ax = plt.subplots(figsize=(10, 5))
    sns.scatterplot(
        data=df.assign(cluster=df[CLUSTER_ID].astype(int).astype(str)),
        x=LONGITUDE,
        y=LATITUDE,
        hue="cluster",
        palette={"0": "#e74c3c", "1": "#27ae60", "2": "#8e44ad"},
        edgecolor="#333",
        ax=ax,
    )
    ax.set_title("Spatial clusters (k-means on latitude / longitude)")
    st.pyplot(fig)


def plot_local_slopes(records: pd.DataFrame) -> None:
    """Local slope per country; grey where no slope could be computed."""
    fig, ax = plt.subplots(figsize=(10, 5))
    missing = records[records[LOCAL_SLOPE].isna()]
    present = records[records[LOCAL_SLOPE].notna()]
    ax.scatter(missing[LONGITUDE], missing[LATITUDE], color="#cccccc", s=25, label="n/a")
    if not present.empty:
        points = ax.scatter(
            present[LONGITUDE],
            present[LATITUDE],
            c=present[LOCAL_SLOPE],
            cmap="RdYlGn",
            s=25,
            edgecolor="#222",
            linewidth=0.5,
        )
        fig.colorbar(points, ax=ax, label="Local slope")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.legend(loc="lower left")
    st.pyplot(fig)


def sidebar_config() -> AnalysisConfig:
    """Collect analysis parameters from the sidebar."""
    st.sidebar.header("Analysis parameters")
    n_rounds = st.sidebar.slider(
        "k-means rounds", min_value=1, max_value=20, value=DEFAULT_CONFIG.n_rounds
    )
    bandwidth = st.sidebar.slider(
        "Local slope bandwidth (km)",
        min_value=500,
        max_value=6000,
        value=int(DEFAULT_CONFIG.bandwidth_km),
        step=100,
    )
    duplicates = st.sidebar.selectbox(
        "Duplicate countries in internet table",
        options=list(DUPLICATE_POLICIES),
        index=DUPLICATE_POLICIES.index(DEFAULT_CONFIG.duplicate_policy),
    )
    return dataclasses.replace(
        DEFAULT_CONFIG,
        n_rounds=n_rounds,
        bandwidth_km=float(bandwidth),
        duplicate_policy=duplicates,
    )


def main() -> None:
    st.set_page_config(
        page_title="Internet Usage & Happiness",
        layout="wide",
    )

    st.title("Internet Usage and Happiness by Country")
    st.markdown(
        """
This app joins internet usage (% of population online) with World Happiness
Report ladder scores and looks at how the two relate.

- **Left sidebar**: choose data source and analysis parameters.
- **Main area**: statistics, clusters, local slopes and anomalies.
"""
    )

    st.sidebar.header("Data source")
    use_upload = st.sidebar.radio(
        "Choose data source:", options=["Default files", "Upload CSVs"]
    ) == "Upload CSVs"

    if use_upload:
        internet_file = st.sidebar.file_uploader("Internet usage CSV", type=["csv"])
        happiness_file = st.sidebar.file_uploader("Happiness CSV", type=["csv"])
        if internet_file is None or happiness_file is None:
            st.info("Upload both CSV files to run the analysis.")
            st.stop()
        internet_df, err = read_uploaded_table(internet_file, INTERNET_REQUIRED_COLUMNS)
        if err:
            st.error(err)
            st.stop()
        happiness_df, err = read_uploaded_table(happiness_file, HAPPINESS_REQUIRED_COLUMNS)
        if err:
            st.error(err)
            st.stop()
    else:
        missing_files = [
            p for p in (get_default_internet_path(), get_default_happiness_path()) if not p.exists()
        ]
        if missing_files:
            st.error(
                "Data files are missing: "
                + ", ".join(str(p) for p in missing_files)
                + ". Place them under `data/` or upload them from the sidebar."
            )
            st.stop()
        internet_df, happiness_df = load_default_tables()

    config = sidebar_config()
    ctx = run_pipeline(internet_df, happiness_df, config)
    records = ctx.records

    st.caption(f"Merged countries: {ctx.n_records}")
    if not ctx.merge.dropped.empty:
        with st.expander(f"Dropped rows ({len(ctx.merge.dropped)})"):
            st.dataframe(ctx.merge.dropped, use_container_width=True)

    if ctx.n_records == 0:
        st.warning("No countries matched between the two tables.")
        st.stop()

    col_stats, col_scatter = st.columns([1, 2])
    with col_stats:
        st.subheader("Correlation & regression")
        st.metric("Pearson r", f"{ctx.correlation:.3f}")
        st.metric("R²", f"{ctx.r2:.3f}")
        st.write(f"**Equation:** {ctx.regression.equation}")
        st.write(ctx.interpretation)
        st.caption(ctx.pattern)
    with col_scatter:
        plot_regression(ctx)

    st.markdown("---")
    st.subheader("Countries")
    plot_countries(records)

    st.markdown("---")
    col_clusters, col_summary = st.columns([2, 1])
    with col_summary:
        st.subheader("Cluster summary")
        if ctx.clusters.computed:
            st.dataframe(ctx.clusters.summary.round(2), use_container_width=True)
        else:
            st.warning(ctx.clusters.reason)
    with col_clusters:
        st.subheader("Spatial clusters")
        if ctx.clusters.computed:
            plot_clusters(records)

    st.markdown("---")
    st.subheader("Local slopes")
    st.caption(slope_legend(records[LOCAL_SLOPE]))
    plot_local_slopes(records)

    st.markdown("---")
    st.subheader(f"Top {config.top_n} residuals")
    top = ctx.residuals.top(config.top_n)[[COUNTRY, "residual"]]
    st.dataframe(top.round(2), use_container_width=True)


if __name__ == "__main__":
    main()
