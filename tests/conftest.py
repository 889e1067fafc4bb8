from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from core.config import AppConfig
from infrastructure.sources.csv_source import InMemoryRawTableSource

DATES = ["1/22/20", "1/23/20", "1/24/20"]


def us_wide(rows, dates=DATES, population=None) -> pd.DataFrame:
    """rows: (city, state, values per date)"""
    records = []
    for i, (city, state, values) in enumerate(rows):
        rec = {
            "UID": 84001000 + i,
            "iso2": "US",
            "iso3": "USA",
            "code3": 840,
            "FIPS": 1000.0 + i,
            "Admin2": city,
            "Province_State": state,
            "Country_Region": "US",
            "Lat": 32.5,
            "Long_": -86.6,
            "Combined_Key": f"{city}, {state}, US",
        }
        if population is not None:
            rec["Population"] = population[i]
        rec.update(dict(zip(dates, values)))
        records.append(rec)
    return pd.DataFrame(records)


def global_wide(rows, dates=DATES) -> pd.DataFrame:
    """rows: (province or None, country, values per date)"""
    records = []
    for state, country, values in rows:
        rec = {
            "Province/State": state if state is not None else np.nan,
            "Country/Region": country,
            "Lat": 10.0,
            "Long": 20.0,
        }
        rec.update(dict(zip(dates, values)))
        records.append(rec)
    return pd.DataFrame(records)


def lookup_table(rows) -> pd.DataFrame:
    """rows: (admin2 or None, province or None, country, population)"""
    records = []
    for i, (admin2, state, country, population) in enumerate(rows):
        records.append(
            {
                "UID": i + 1,
                "iso2": "XX",
                "iso3": "XXX",
                "code3": 999,
                "FIPS": np.nan,
                "Admin2": admin2 if admin2 is not None else np.nan,
                "Province_State": state if state is not None else np.nan,
                "Country_Region": country,
                "Lat": 0.0,
                "Long_": 0.0,
                "Combined_Key": country,
                "Population": population,
            }
        )
    return pd.DataFrame(records)


@pytest.fixture
def cfg() -> AppConfig:
    return AppConfig()


@pytest.fixture
def us_cases_wide() -> pd.DataFrame:
    return us_wide(
        [
            ("A1", "Alpha", [3, 5, 9]),
            ("B1", "Beta", [1, 4, 6]),
            ("B2", "Beta", [0, 0, 2]),
        ]
    )


@pytest.fixture
def us_deaths_wide() -> pd.DataFrame:
    return us_wide(
        [
            ("A1", "Alpha", [0, 1, 2]),
            ("B1", "Beta", [0, 0, 3]),
            ("B2", "Beta", [0, 0, 0]),
        ],
        population=[1000, 2000, 500],
    )


@pytest.fixture
def global_cases_wide() -> pd.DataFrame:
    return global_wide(
        [
            (None, "Freedonia", [0, 10, 20]),
            ("Northland", "Sylvania", [5, 6, 7]),
            ("Southland", "Sylvania", [1, 2, 3]),
            (None, "Tinyland", [1, 1, 2]),
        ]
    )


@pytest.fixture
def global_deaths_wide() -> pd.DataFrame:
    return global_wide(
        [
            (None, "Freedonia", [0, 1, 2]),
            ("Northland", "Sylvania", [0, 0, 1]),
            ("Southland", "Sylvania", [0, 0, 0]),
            (None, "Tinyland", [0, 0, 0]),
        ]
    )


@pytest.fixture
def lookup() -> pd.DataFrame:
    return lookup_table(
        [
            (None, None, "Freedonia", 1_000_000),
            (None, "Northland", "Sylvania", 300_000),
            (None, "Southland", "Sylvania", 200_000),
            (None, None, "Freedonia", 999),
            (None, "Alpha", "US", 1000),
            ("A1", "Alpha", "US", 1000),
        ]
    )


@pytest.fixture
def source(us_cases_wide, us_deaths_wide, global_cases_wide, global_deaths_wide, lookup):
    return InMemoryRawTableSource(
        us_cases_df=us_cases_wide,
        us_deaths_df=us_deaths_wide,
        global_cases_df=global_cases_wide,
        global_deaths_df=global_deaths_wide,
        population_lookup_df=lookup,
    )
