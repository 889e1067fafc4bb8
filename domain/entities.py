from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import pandas as pd


@dataclass(frozen=True)
class ParseReport:
    table: str
    input_rows: int
    dropped_dates: int = 0
    dropped_values: int = 0
    # repeated (identity, date) rows, first kept
    duplicate_rows: int = 0
    # rows present on one side of the cases/deaths join only
    unmatched_rows: int = 0

    @property
    def dropped_rows(self) -> int:
        return self.dropped_dates + self.dropped_values + self.duplicate_rows


@dataclass(frozen=True)
class PipelineReport:
    parse_reports: Dict[str, ParseReport]
    non_reportable_rows: Dict[str, int]
    # US and Global records with a null population
    missing_population_rows: int
    lookup_duplicates: int
    # record-level dips of both tables, `table` column says which
    cumulative_dips: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def dropped_rows(self) -> int:
        return sum(r.dropped_rows for r in self.parse_reports.values())


@dataclass(frozen=True)
class RateFit:
    intercept: float
    slope: float
    n_obs: int


@dataclass(frozen=True)
class RateEvaluation:
    rmse: float
    r2: float
    # input rows + predicted_deaths_per_thousand + residual
    predictions: pd.DataFrame
