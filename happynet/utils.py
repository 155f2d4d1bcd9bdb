"""
Utility functions for file locations, report persistence and logging setup.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any


# Project root is the parent of this `happynet` package directory
ROOT_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = ROOT_DIR / "data"

INTERNET_CSV_NAME = "internet-users-by-country-2024.csv"
HAPPINESS_CSV_NAME = "WHR24_Data_Figure_2.1.csv"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_default_internet_path() -> Path:
    """Return the default path to the internet usage CSV."""
    return DATA_DIR / INTERNET_CSV_NAME


def get_default_happiness_path() -> Path:
    """Return the default path to the World Happiness Report CSV."""
    return DATA_DIR / HAPPINESS_CSV_NAME


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def save_json(data: Any, path: Path | str) -> None:
    """Save a Python object as JSON (UTF-8, pretty-printed)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_json(path: Path | str) -> Any:
    """Load JSON data into a Python object."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)
