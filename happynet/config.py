"""
Analysis configuration for the internet usage vs. happiness project.

All tunable constants of the pipeline live in one dataclass so that the
command-line script, the Streamlit app and the tests share the same defaults.
Use `dataclasses.replace(DEFAULT_CONFIG, ...)` to override individual values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


# Manual fixes for names that differ between the two source tables
COUNTRY_ALIASES: Dict[str, str] = {
    "DR Congo": "Congo (Kinshasa)",
    "Republic of the Congo": "Congo (Brazzaville)",
    "Hong Kong": "Hong Kong S.A.R. of China",
}

DUPLICATE_POLICIES = ("first", "last", "keep")

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class AnalysisConfig:
    """Central configuration for the analysis pipeline."""

    # Row merger
    aliases: Dict[str, str] = field(default_factory=lambda: dict(COUNTRY_ALIASES))
    duplicate_policy: str = "first"

    # Spatial clustering (fixed round count, no convergence check)
    n_clusters: int = 3
    n_rounds: int = 5

    # Local slope estimator
    bandwidth_km: float = 2500.0
    min_neighbours: int = 5
    det_tolerance: float = 1e-9

    # Residual ranking
    top_n: int = 10
    n_extremes: int = 3

    def __post_init__(self):
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(
                f"Unknown duplicate policy {self.duplicate_policy!r}; "
                f"expected one of {', '.join(DUPLICATE_POLICIES)}"
            )
        if self.n_clusters < 1:
            raise ValueError("n_clusters must be at least 1")
        if self.n_rounds < 1:
            raise ValueError("n_rounds must be at least 1")
        if self.bandwidth_km <= 0:
            raise ValueError("bandwidth_km must be positive")


DEFAULT_CONFIG = AnalysisConfig()
