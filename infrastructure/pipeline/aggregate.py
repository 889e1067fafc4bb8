from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from core.config import AppConfig

logger = logging.getLogger(__name__)


def per_capita(count: pd.Series, population: pd.Series, scale: float) -> pd.Series:
    """count * scale / population; null where population is null or <= 0."""
    pop = pd.to_numeric(population, errors="coerce").astype(float)
    pop = pop.where(pop > 0)
    return count.astype(float) * scale / pop


def filter_reportable(records: pd.DataFrame, cfg: AppConfig) -> Tuple[pd.DataFrame, int, int]:
    """
    Прибирає рядки з null у cases/deaths (наслідок outer join) та рядки з
    cases <= 0 (до початку спалаху). Повертає (таблиця, null_rows, non_onset_rows).
    """
    cases = records[cfg.cases_col]
    null_metric = cases.isna() | records[cfg.deaths_col].isna()
    non_onset = ~null_metric & (cases <= 0)

    out = records[~(null_metric | non_onset)].reset_index(drop=True)
    return out, int(null_metric.sum()), int(non_onset.sum())


def _sum_by(frame: pd.DataFrame, keys: list[str], cfg: AppConfig) -> pd.DataFrame:
    metrics = [cfg.cases_col, cfg.deaths_col, cfg.population_col]
    # min_count=1: a group with no known population stays null instead of 0
    return (
        frame.groupby(keys, sort=True)[metrics]
        .sum(min_count=1)
        .reset_index()
    )


def _with_per_million(df: pd.DataFrame, cfg: AppConfig) -> pd.DataFrame:
    df[cfg.cases_pm_col] = per_capita(df[cfg.cases_col], df[cfg.population_col], cfg.per_million)
    df[cfg.deaths_pm_col] = per_capita(df[cfg.deaths_col], df[cfg.population_col], cfg.per_million)
    return df


def by_state_day(records: pd.DataFrame, cfg: AppConfig) -> pd.DataFrame:
    df = _sum_by(records, [cfg.state_col, cfg.country_col, cfg.date_col], cfg)
    return _with_per_million(df, cfg)


def by_country_day(state_day: pd.DataFrame, cfg: AppConfig) -> pd.DataFrame:
    # rates are recomputed from re-summed counts, never averaged
    df = _sum_by(state_day, [cfg.country_col, cfg.date_col], cfg)
    return _with_per_million(df, cfg)


def state_summary(state_day: pd.DataFrame, cfg: AppConfig) -> pd.DataFrame:
    """Один рядок на штат: максимум накопичених значень (= останнє значення)."""
    metrics = [cfg.cases_col, cfg.deaths_col, cfg.population_col]
    df = state_day.groupby(cfg.state_col, sort=True)[metrics].max().reset_index()

    df[cfg.cases_pt_col] = per_capita(df[cfg.cases_col], df[cfg.population_col], cfg.per_thousand)
    df[cfg.deaths_pt_col] = per_capita(df[cfg.deaths_col], df[cfg.population_col], cfg.per_thousand)

    df = df[(df[cfg.cases_col] > 0) & (df[cfg.population_col] > 0)]
    return df.reset_index(drop=True)


def find_cumulative_dips(
    frame: pd.DataFrame,
    group_cols: Sequence[str],
    value_cols: Sequence[str],
    cfg: AppConfig,
) -> pd.DataFrame:
    """
    Рядки, де накопичене значення менше за попередню дату в межах групи.

    Такі падіння (корекції звітності) лише фіксуються, не виправляються.
    """
    keys = list(group_cols)
    df = frame.sort_values(keys + [cfg.date_col], kind="stable")

    parts = []
    for col in value_cols:
        prev = df.groupby(keys, sort=False)[col].shift(1) if keys else df[col].shift(1)
        mask = (df[col] < prev).to_numpy()
        if not mask.any():
            continue
        part = df.loc[mask, keys + [cfg.date_col]].copy()
        part["metric"] = col
        part["previous"] = prev[mask].to_numpy()
        part["value"] = df.loc[mask, col].to_numpy()
        part["drop"] = part["previous"] - part["value"]
        parts.append(part)

    columns = keys + [cfg.date_col, "metric", "previous", "value", "drop"]
    if not parts:
        return pd.DataFrame(columns=columns)

    dips = pd.concat(parts, ignore_index=True)[columns]
    logger.warning(
        "%d non-monotonic cumulative values found (max drop %s); kept as reported",
        len(dips), np.nanmax(dips["drop"].to_numpy(dtype=float)),
    )
    return dips
