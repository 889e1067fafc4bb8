from __future__ import annotations

import streamlit as st

from core.config import CFG
from core.errors import SchemaError
from use_cases.explore_states import rank_states_uc, state_series_uc
from use_cases.run_pipeline import PipelineOutput, run_pipeline_uc
from ui.components.charts import render_rate_scatter, render_residuals, render_series_tabs
from ui.components.metrics import render_model_metrics, render_report
from ui.components.tables import render_rankings, render_table


def _run() -> PipelineOutput | None:
    source = st.session_state.get("source")
    if source is None:
        return None

    try:
        with st.spinner("Виконується обробка даних..."):
            return run_pipeline_uc(CFG, source)
    except SchemaError as e:
        st.error(f"Некоректна структура таблиці: {e}")
        if e.missing_fields:
            st.markdown("**Відсутні обовʼязкові поля:**")
            st.code(", ".join(e.missing_fields))
        st.stop()
    except OSError as e:
        st.error(f"Не вдалося завантажити дані: {e}")
        st.stop()


def render_analysis_page() -> None:
    st.title("COVID-19: смертність відносно захворюваності")

    out = st.session_state.get("last_output")
    if out is None:
        if not st.session_state.get("run_trigger", False):
            st.info("Оберіть джерело даних і натисніть «Запустити аналіз».")
            return
        out = _run()
        # скидаємо тригер, щоб rerun не перераховував конвеєр
        st.session_state["run_trigger"] = False
        if out is None:
            return
        st.session_state["last_output"] = out

    meta = out.meta
    st.markdown(
        f"""
    **Період:** {meta["date_range_start"]} — {meta["date_range_end"]}
    **Одиниць США:** {meta["us_units"]}, **регіонів світу:** {meta["global_units"]}, **штатів у зведенні:** {meta["states"]}
    """
    )

    st.subheader("Якість даних")
    render_report(out.report)

    st.subheader("США загалом")
    render_series_tabs(out.us_totals, CFG, "США")

    st.subheader("Окремий штат")
    states = sorted(out.us_by_state_day[CFG.state_col].unique().tolist())
    if states:
        state = st.selectbox("Штат", states, key="ui_state")
        st.session_state["selected_state"] = state
        series = state_series_uc(CFG, out.us_by_state_day, state)
        render_series_tabs(series, CFG, state)

    st.subheader("Рейтинг штатів")
    top = rank_states_uc(CFG, out.state_summary, largest=True)
    bottom = rank_states_uc(CFG, out.state_summary, largest=False)
    render_rankings(CFG, top, bottom)

    st.subheader("Регресія")
    render_model_metrics(out.rate_fit, out.rate_evaluation, out.model_error)
    render_rate_scatter(out.state_summary, out.rate_fit, CFG)
    render_residuals(out.state_summary, CFG)

    with st.expander("Зведення по штатах"):
        render_table(out.state_summary)
    with st.expander("Світ: країни по днях"):
        render_table(out.global_by_country_day, max_rows=500)
