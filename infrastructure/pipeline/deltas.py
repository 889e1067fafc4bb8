from __future__ import annotations

from typing import Sequence

import pandas as pd

from core.config import AppConfig


def add_daily_deltas(
    frame: pd.DataFrame,
    group_cols: Sequence[str],
    cfg: AppConfig,
) -> pd.DataFrame:
    """
    new_cases / new_deaths = значення мінус попереднє в межах групи.

    Таблиця сортується за групою і датою. Перший рядок кожної групи не має
    попередника, тому його дельта = NaN (не 0): N рядків, G груп -> G пропусків.
    Порожній `group_cols` означає один ряд на всю таблицю.
    """
    keys = list(group_cols)
    df = frame.sort_values(keys + [cfg.date_col], kind="stable").reset_index(drop=True)

    values = [cfg.cases_col, cfg.deaths_col]
    if keys:
        diffs = df.groupby(keys, sort=False)[values].diff()
    else:
        diffs = df[values].diff()

    df[cfg.new_cases_col] = diffs[cfg.cases_col]
    df[cfg.new_deaths_col] = diffs[cfg.deaths_col]
    return df
