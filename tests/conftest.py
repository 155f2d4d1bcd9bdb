from __future__ import annotations

import pandas as pd
import pytest

from happynet.data import COUNTRY, HAPPINESS, INTERNET, LATITUDE, LONGITUDE


# country, latitude, longitude, internet %, ladder score
WORLD = [
    ("Denmark", 56.0, 10.0, 98.8, 7.58),
    ("Ethiopia", 9.1, 40.5, 19.4, 3.86),
    ("Brazil", -14.2, -51.9, 84.2, 6.27),
    ("Germany", 51.2, 10.4, 91.6, 6.72),
    ("France", 46.2, 2.2, 85.3, 6.61),
    ("Netherlands", 52.1, 5.3, 97.0, 7.32),
    ("Poland", 51.9, 19.1, 86.9, 6.44),
    ("Kenya", -0.02, 37.9, 40.8, 4.47),
    ("DR Congo", -4.0, 21.8, 27.2, 3.30),
    ("Tanzania", -6.4, 34.9, 31.6, 3.68),
    ("Uganda", 1.4, 32.3, 10.3, 4.37),
    ("Argentina", -38.4, -63.6, 88.4, 6.19),
    ("Chile", -35.7, -71.5, 90.2, 6.36),
    ("Colombia", 4.6, -74.3, 75.7, 5.70),
    ("Peru", -9.2, -75.0, 74.7, 5.84),
]

EUROPE = ["Denmark", "Germany", "France", "Netherlands", "Poland"]
AFRICA = ["Ethiopia", "Kenya", "Congo (Kinshasa)", "Tanzania", "Uganda"]
AMERICAS = ["Brazil", "Argentina", "Chile", "Colombia", "Peru"]


@pytest.fixture
def internet_rows():
    """Raw internet usage rows as parsed from CSV (strings), with some junk."""
    rows = [
        {
            "Country": name,
            "PctOfPopulationUsingInternet": str(pct),
            "Latitude": str(lat),
            "Longitude": str(lon),
        }
        for name, lat, lon, pct, _ in WORLD
    ]
    rows += [
        {"Country": "Atlantis", "PctOfPopulationUsingInternet": "50", "Latitude": "0", "Longitude": "0"},
        {"Country": "Iceland", "PctOfPopulationUsingInternet": "", "Latitude": "65", "Longitude": "-19"},
        {"Country": "Norway", "PctOfPopulationUsingInternet": "99", "Latitude": "n/a", "Longitude": "8.5"},
        {"Country": "  ", "PctOfPopulationUsingInternet": "70", "Latitude": "1", "Longitude": "1"},
    ]
    return rows


@pytest.fixture
def happiness_rows():
    """Happiness rows; DR Congo appears under its report name."""
    rows = []
    for name, _, _, _, score in WORLD:
        if name == "DR Congo":
            name = "Congo (Kinshasa)"
        rows.append({"Country": name, "Ladder score": str(score)})
    rows += [
        {"Country": "Finland", "Ladder score": "7.74"},
        {"Country": "Norway", "Ladder score": "7.30"},
        {"Country": "Nowhere", "Ladder score": "not a number"},
    ]
    return rows


def make_records(rows) -> pd.DataFrame:
    """Merged-record frame from (country, internet, happiness, lat, lon) tuples."""
    return pd.DataFrame(rows, columns=[COUNTRY, INTERNET, HAPPINESS, LATITUDE, LONGITUDE])


@pytest.fixture
def two_records() -> pd.DataFrame:
    return make_records([("A", 90.0, 8.0, 0.0, 0.0), ("B", 10.0, 4.0, 0.0, 1.0)])


@pytest.fixture
def world_records() -> pd.DataFrame:
    return make_records(
        [
            ("Congo (Kinshasa)" if name == "DR Congo" else name, pct, score, lat, lon)
            for name, lat, lon, pct, score in WORLD
        ]
    )


@pytest.fixture
def records_factory():
    return make_records


@pytest.fixture
def regions():
    return {"europe": EUROPE, "africa": AFRICA, "americas": AMERICAS}
