"""
Utility package for the internet usage vs. happiness project.

This package exposes reusable components for:
- Loading and merging the two country tables (`happynet.data`)
- Correlation / regression statistics (`happynet.stats`)
- Spatial clustering and local slopes (`happynet.clustering`, `happynet.local_slope`)
- Residual rankings and text interpretation (`happynet.residuals`, `happynet.interpret`)
- The end-to-end pipeline (`happynet.pipeline`)
- Configuration, paths and persistence helpers (`happynet.config`, `happynet.utils`)
"""

from . import (  # noqa: F401
    clustering,
    config,
    data,
    interpret,
    local_slope,
    pipeline,
    residuals,
    stats,
    utils,
)
