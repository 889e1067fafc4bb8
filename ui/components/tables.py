from __future__ import annotations

import pandas as pd
import streamlit as st

from core.config import AppConfig


COL_LABELS = {
    "province_state": "Штат / провінція",
    "country_region": "Країна",
    "date": "Дата",
    "cases": "Випадки",
    "deaths": "Смерті",
    "population": "Населення",
    "new_cases": "Нові випадки",
    "new_deaths": "Нові смерті",
    "cases_per_million": "Випадки на 1 млн",
    "deaths_per_million": "Смерті на 1 млн",
    "cases_per_thousand": "Випадки на 1000",
    "deaths_per_thousand": "Смерті на 1000",
    "predicted_deaths_per_thousand": "Прогноз смертей на 1000",
    "residual": "Залишок",
}


def render_table(df: pd.DataFrame, max_rows: int | None = None) -> None:
    if df is None or len(df) == 0:
        st.info("Немає даних для відображення.")
        return

    view = df.tail(max_rows) if max_rows else df
    view = view.rename(columns=COL_LABELS)
    st.dataframe(view, width='stretch')


def render_rankings(cfg: AppConfig, top: pd.DataFrame, bottom: pd.DataFrame) -> None:
    cols = [cfg.state_col, cfg.cases_pt_col, cfg.deaths_pt_col]
    left, right = st.columns(2)
    with left:
        st.markdown("**Найвища смертність на 1000**")
        render_table(top[cols])
    with right:
        st.markdown("**Найнижча смертність на 1000**")
        render_table(bottom[cols])
