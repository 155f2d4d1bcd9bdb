"""
Plain-text interpretation of the results, plus the colour / size bands used
when drawing countries.

Everything here is a deterministic lookup or string template.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from .config import DEFAULT_CONFIG
from .data import COUNTRY
from .residuals import ResidualRanking


# (upper bound on |r|, label); anything above the last bound is "very strong"
STRENGTH_BANDS = [
    (0.2, "very weak"),
    (0.4, "weak"),
    (0.6, "moderate"),
    (0.8, "strong"),
]


def correlation_strength(r: float) -> str:
    """Describe |r| in words."""
    abs_r = abs(r)
    for bound, label in STRENGTH_BANDS:
        if abs_r < bound:
            return label
    return "very strong"


def correlation_direction(r: float) -> str:
    return "positive" if r >= 0 else "negative"


def describe_correlation(r: float) -> str:
    """One-paragraph reading of the correlation coefficient."""
    strength = correlation_strength(r)
    direction = correlation_direction(r)
    tendency = "to go with higher" if r >= 0 else "NOT to go with higher"
    return (
        f"Pearson correlation = {r:.3f} ({strength} {direction}). "
        f"Higher internet use tends {tendency} happiness on average. "
        "This does NOT prove cause (spurious correlation risk)."
    )


def _names(df: pd.DataFrame) -> List[str]:
    return df[COUNTRY].astype(str).tolist()


def pattern_summary(ranking: ResidualRanking, n: int = DEFAULT_CONFIG.n_extremes) -> str:
    """Countries furthest above and below the global line."""
    above = ", ".join(_names(ranking.above_line(n)))
    below = ", ".join(_names(ranking.below_line(n)))
    return f"Countries above line (examples): {above} | Below line: {below}"


def happiness_color(score: float | None) -> str:
    """Hex colour for a ladder score, red (low) to green (high)."""
    if score is None or pd.isna(score) or score == 0:
        return "#2c3e50"
    if score >= 7.0:
        return "#27ae60"
    if score >= 6.5:
        return "#2ecc71"
    if score >= 6.0:
        return "#f39c12"
    if score >= 5.5:
        return "#e67e22"
    if score >= 4.5:
        return "#e74c3c"
    return "#c0392b"


def marker_size(pct: float | None) -> int:
    """Marker radius in pixels for an internet usage percentage."""
    if pct is None or pd.isna(pct) or pct == 0:
        return 4
    if pct >= 90:
        return 12
    if pct >= 70:
        return 10
    if pct >= 50:
        return 8
    if pct >= 30:
        return 6
    return 4


def marker_color(pct: float | None) -> str:
    """Hex fill colour for an internet usage percentage, orange (low) to purple (high)."""
    if pct is None or pd.isna(pct) or pct == 0:
        return "#95a5a6"
    if pct >= 90:
        return "#8e44ad"
    if pct >= 70:
        return "#3498db"
    if pct >= 50:
        return "#16a085"
    if pct >= 30:
        return "#f1c40f"
    return "#e67e22"
