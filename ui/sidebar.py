from __future__ import annotations

import pandas as pd
import streamlit as st

from core.config import CFG, SOURCE_ORDER
from infrastructure.sources.csv_source import CsvRawTableSource, InMemoryRawTableSource


SOURCE_LABELS = {
    "us_cases": "Випадки США",
    "us_deaths": "Смерті США",
    "global_cases": "Випадки (світ)",
    "global_deaths": "Смерті (світ)",
    "population_lookup": "Довідник населення",
}


def _upload_source() -> InMemoryRawTableSource | None:
    frames = {}
    for name in SOURCE_ORDER:
        f = st.sidebar.file_uploader(SOURCE_LABELS[name], type=["csv"], key=f"upload_{name}")
        if f is not None:
            frames[name] = pd.read_csv(f)

    if len(frames) < len(SOURCE_ORDER):
        st.sidebar.info("Потрібні всі п'ять файлів.")
        return None

    return InMemoryRawTableSource(
        us_cases_df=frames["us_cases"],
        us_deaths_df=frames["us_deaths"],
        global_cases_df=frames["global_cases"],
        global_deaths_df=frames["global_deaths"],
        population_lookup_df=frames["population_lookup"],
    )


def render_sidebar() -> None:
    st.sidebar.markdown("### Джерело даних")

    kind = st.sidebar.radio(
        "Звідки брати таблиці",
        ["remote", "upload"],
        format_func=lambda k: "JHU CSSE (GitHub)" if k == "remote" else "Завантажити CSV",
        key="ui_source_kind",
    )
    st.session_state["source_kind"] = kind

    if kind == "remote":
        source = CsvRawTableSource(CFG)
    else:
        source = _upload_source()
    st.session_state["source"] = source

    st.sidebar.markdown("---")
    if st.sidebar.button("Запустити аналіз", type="primary", width='stretch', disabled=source is None):
        st.session_state["run_trigger"] = True
        st.session_state["last_output"] = None
