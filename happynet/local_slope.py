"""
Tiny geographically weighted regression: one local slope per country.

For each record, neighbours within a fixed great-circle bandwidth (itself
included) get a Gaussian weight `exp(-(d^2 / bandwidth^2))` and a weighted
least squares line of happiness on internet usage is solved from the 2x2
normal equations. Only the slope is kept.

The estimator computes the full pairwise distance matrix and loops over
every record, i.e. O(n^2) time and memory. That is fine for a table of a
few hundred countries and does not scale beyond that.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from sklearn.metrics.pairwise import haversine_distances

from .config import DEFAULT_CONFIG, EARTH_RADIUS_KM
from .data import HAPPINESS, INTERNET, LATITUDE, LOCAL_SLOPE, LONGITUDE


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two (lat, lon) points in degrees."""
    lat1, lon1, lat2, lon2 = np.radians([lat1, lon1, lat2, lon2])
    a = (
        np.sin((lat2 - lat1) / 2) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
    )
    return float(2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(a)))


def distance_matrix_km(lat, lon) -> np.ndarray:
    """Pairwise great-circle distances (km) for arrays of degrees."""
    coords = np.radians(np.column_stack([np.asarray(lat, float), np.asarray(lon, float)]))
    if len(coords) == 0:
        return np.empty((0, 0))
    return haversine_distances(coords) * EARTH_RADIUS_KM


def weighted_slope(
    x: np.ndarray, y: np.ndarray, w: np.ndarray, det_tolerance: float = DEFAULT_CONFIG.det_tolerance
) -> float | None:
    """
    Slope of the weighted least squares line y ~ a + b*x.

    Returns None when the normal-equations determinant is below
    `det_tolerance` in absolute value (e.g. all x identical).
    """
    s11 = np.sum(w)
    s12 = np.sum(w * x)
    s22 = np.sum(w * x * x)
    t1 = np.sum(w * y)
    t2 = np.sum(w * x * y)

    det = s11 * s22 - s12 * s12
    if abs(det) < det_tolerance:
        return None
    return float((t2 * s11 - t1 * s12) / det)


def compute_local_slopes(
    records: pd.DataFrame,
    bandwidth_km: float = DEFAULT_CONFIG.bandwidth_km,
    min_neighbours: int = DEFAULT_CONFIG.min_neighbours,
    det_tolerance: float = DEFAULT_CONFIG.det_tolerance,
) -> pd.Series:
    """
    Local slope per record, aligned on `records.index`.

    NaN marks "no slope": fewer than `min_neighbours` records within
    `bandwidth_km`, an ill-conditioned neighbourhood, or missing coordinates.
    """
    if bandwidth_km <= 0:
        raise ValueError("bandwidth_km must be positive")

    slopes = pd.Series(np.nan, index=records.index, dtype=float, name=LOCAL_SLOPE)
    if records.empty:
        return slopes

    coords = records[[LATITUDE, LONGITUDE]].to_numpy(dtype=float)
    valid = np.isfinite(coords).all(axis=1)
    if not valid.any():
        return slopes

    x = records[INTERNET].to_numpy(dtype=float)[valid]
    y = records[HAPPINESS].to_numpy(dtype=float)[valid]
    dist = distance_matrix_km(coords[valid, 0], coords[valid, 1])

    values = np.full(len(x), np.nan)
    for i in range(len(x)):
        near = dist[i] <= bandwidth_km
        if near.sum() < min_neighbours:
            continue
        d = dist[i, near]
        w = np.exp(-(d * d) / (bandwidth_km * bandwidth_km))
        slope = weighted_slope(x[near], y[near], w, det_tolerance)
        if slope is not None:
            values[i] = slope

    slopes.loc[valid] = values
    return slopes


def slope_range(slopes: pd.Series) -> dict:
    """Min / max / count of computed local slopes (None when there are none)."""
    computed = slopes.dropna()
    if computed.empty:
        return {"min": None, "max": None, "n_computed": 0}
    return {
        "min": float(computed.min()),
        "max": float(computed.max()),
        "n_computed": int(computed.size),
    }


def slope_legend(slopes: pd.Series) -> str:
    """Legend text such as `Local slope min 0.012 | max 0.034`."""
    rng = slope_range(slopes)

    def fmt(v):
        return "n/a" if v is None else f"{v:.3f}"

    return f"Local slope min {fmt(rng['min'])} | max {fmt(rng['max'])}"
