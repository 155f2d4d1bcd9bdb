"""
Very simple spatial k-means on raw latitude / longitude.

Centroids start at the first `n_clusters` records (input order) and the
assign / update loop runs a fixed number of rounds with no convergence
check, so results are reproducible but not guaranteed to be converged.
Distances are squared Euclidean in degree space (no geodesic correction).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG
from .data import CLUSTER_ID, HAPPINESS, INTERNET, LATITUDE, LONGITUDE


SUMMARY_COLUMNS = ["cluster", "count", "mean_internet", "mean_happiness"]


@dataclass
class ClusterResult:
    """Cluster labels, final centroids and the per-cluster summary table."""

    labels: pd.Series
    centroids: np.ndarray
    summary: pd.DataFrame
    computed: bool = True
    reason: str = ""
    n_rounds: int = DEFAULT_CONFIG.n_rounds


def _coordinate_mask(records: pd.DataFrame) -> np.ndarray:
    coords = records[[LATITUDE, LONGITUDE]].to_numpy(dtype=float)
    return np.isfinite(coords).all(axis=1)


def assign_to_centroids(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid per point; ties go to the lowest index."""
    diff = points[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    dist_sq = np.sum(diff * diff, axis=2)
    return np.argmin(dist_sq, axis=1)


def kmeans_fixed_rounds(
    points: np.ndarray, n_clusters: int, n_rounds: int
) -> tuple[np.ndarray, np.ndarray]:
    """
    Run `n_rounds` of assignment + centroid update.

    Returns (labels, centroids). Labels are those of the last assignment
    step; centroids are after the last update. A centroid with no members
    in a round keeps its previous position.
    """
    centroids = points[:n_clusters].astype(float).copy()
    labels = np.full(len(points), -1, dtype=int)

    for _ in range(n_rounds):
        labels = assign_to_centroids(points, centroids)
        for k in range(n_clusters):
            members = points[labels == k]
            if len(members) > 0:
                centroids[k] = members.mean(axis=0)

    return labels, centroids


def summarize_clusters(records: pd.DataFrame, labels: pd.Series, n_clusters: int) -> pd.DataFrame:
    """Count, mean internet usage and mean happiness per cluster, in index order."""
    rows = []
    for k in range(n_clusters):
        members = records[(labels == k).fillna(False).to_numpy(dtype=bool)]
        count = len(members)
        rows.append(
            {
                "cluster": k,
                "count": count,
                "mean_internet": float(members[INTERNET].mean()) if count else np.nan,
                "mean_happiness": float(members[HAPPINESS].mean()) if count else np.nan,
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def cluster_countries(
    records: pd.DataFrame,
    n_clusters: int = DEFAULT_CONFIG.n_clusters,
    n_rounds: int = DEFAULT_CONFIG.n_rounds,
) -> ClusterResult:
    """
    Cluster coordinate-bearing records into `n_clusters` spatial groups.

    Needs at least `n_clusters` records with finite coordinates; otherwise
    an explicit not-computed result is returned (all labels missing, empty
    summary). Records without coordinates always get a missing label.
    """
    if n_clusters < 1:
        raise ValueError("n_clusters must be at least 1")
    if n_rounds < 1:
        raise ValueError("n_rounds must be at least 1")

    labels = pd.Series(pd.NA, index=records.index, dtype="Int64", name=CLUSTER_ID)
    mask = _coordinate_mask(records) if len(records) else np.zeros(0, dtype=bool)
    n_points = int(mask.sum())

    if n_points < n_clusters:
        return ClusterResult(
            labels=labels,
            centroids=np.empty((0, 2)),
            summary=pd.DataFrame(columns=SUMMARY_COLUMNS),
            computed=False,
            reason=(
                "Not enough location data to form clusters "
                f"(need at least {n_clusters}, have {n_points})."
            ),
            n_rounds=n_rounds,
        )

    points = records.loc[mask, [LATITUDE, LONGITUDE]].to_numpy(dtype=float)
    point_labels, centroids = kmeans_fixed_rounds(points, n_clusters, n_rounds)
    labels.loc[mask] = point_labels

    return ClusterResult(
        labels=labels,
        centroids=centroids,
        summary=summarize_clusters(records, labels, n_clusters),
        n_rounds=n_rounds,
    )
