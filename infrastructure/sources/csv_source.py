from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from core.config import AppConfig
from domain.repositories import RawTableSource

logger = logging.getLogger(__name__)


class CsvRawTableSource(RawTableSource):
    """Читає п'ять таблиць JHU CSSE (URL або локальний шлях) через pandas."""

    def __init__(self, cfg: AppConfig) -> None:
        self._cfg = cfg

    def _read(self, name: str) -> pd.DataFrame:
        path = self._cfg.source_paths[name]
        logger.info("Reading %s from %s", name, path)
        df = pd.read_csv(path)
        logger.debug("%s: %d rows x %d columns", name, len(df), len(df.columns))
        return df

    def us_cases(self) -> pd.DataFrame:
        return self._read("us_cases")

    def us_deaths(self) -> pd.DataFrame:
        return self._read("us_deaths")

    def global_cases(self) -> pd.DataFrame:
        return self._read("global_cases")

    def global_deaths(self) -> pd.DataFrame:
        return self._read("global_deaths")

    def population_lookup(self) -> pd.DataFrame:
        return self._read("population_lookup")


@dataclass(frozen=True)
class InMemoryRawTableSource(RawTableSource):
    us_cases_df: pd.DataFrame
    us_deaths_df: pd.DataFrame
    global_cases_df: pd.DataFrame
    global_deaths_df: pd.DataFrame
    population_lookup_df: pd.DataFrame

    def us_cases(self) -> pd.DataFrame:
        return self.us_cases_df.copy()

    def us_deaths(self) -> pd.DataFrame:
        return self.us_deaths_df.copy()

    def global_cases(self) -> pd.DataFrame:
        return self.global_cases_df.copy()

    def global_deaths(self) -> pd.DataFrame:
        return self.global_deaths_df.copy()

    def population_lookup(self) -> pd.DataFrame:
        return self.population_lookup_df.copy()
