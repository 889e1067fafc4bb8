from __future__ import annotations

import pandas as pd

from core.config import AppConfig


def rank_states_uc(
    cfg: AppConfig,
    summary: pd.DataFrame,
    metric: str | None = None,
    n: int | None = None,
    largest: bool = True,
) -> pd.DataFrame:
    metric = metric or cfg.deaths_pt_col
    n = int(n if n is not None else cfg.top_n)
    if metric not in summary.columns:
        raise KeyError(f"Unknown metric: {metric}")

    data = summary.dropna(subset=[metric])
    if largest:
        ranked = data.nlargest(n, metric)
    else:
        ranked = data.nsmallest(n, metric)
    return ranked.reset_index(drop=True)


def state_series_uc(cfg: AppConfig, state_day: pd.DataFrame, state: str) -> pd.DataFrame:
    df = state_day[state_day[cfg.state_col] == state]
    return df.sort_values(cfg.date_col).reset_index(drop=True)
