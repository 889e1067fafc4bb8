from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from core.config import AppConfig
from domain.entities import RateFit


def _series_chart(
    df: pd.DataFrame,
    cfg: AppConfig,
    title: str,
    cumulative: bool,
) -> None:
    fig = go.Figure()
    if cumulative:
        cols = [(cfg.cases_col, "Випадки"), (cfg.deaths_col, "Смерті")]
        y_title = "Накопичена кількість (log)"
    else:
        cols = [(cfg.new_cases_col, "Нові випадки"), (cfg.new_deaths_col, "Нові смерті")]
        y_title = "Кількість за день"

    for col, name in cols:
        fig.add_trace(
            go.Scatter(
                x=df[cfg.date_col],
                y=df[col],
                mode="lines",
                name=name,
            )
        )

    fig.update_layout(
        title=title,
        xaxis_title="Дата",
        yaxis_title=y_title,
        hovermode="x unified",
    )
    if cumulative:
        fig.update_yaxes(type="log")
    fig.update_xaxes(rangeslider=dict(visible=True))
    st.plotly_chart(fig, config={"responsive": True})


def render_series_tabs(df: pd.DataFrame, cfg: AppConfig, label: str) -> None:
    if df is None or len(df) == 0:
        st.info("Немає даних для графіка.")
        return

    t1, t2 = st.tabs(["Накопичені", "За день"])
    with t1:
        _series_chart(df, cfg, f"COVID-19: {label}", cumulative=True)
    with t2:
        _series_chart(df, cfg, f"COVID-19 за день: {label}", cumulative=False)


def render_rate_scatter(summary: pd.DataFrame, fit: RateFit | None, cfg: AppConfig) -> None:
    x = summary[cfg.cases_pt_col]
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=x,
            y=summary[cfg.deaths_pt_col],
            mode="markers",
            name="Штати",
            text=summary[cfg.state_col],
        )
    )

    if fit is not None and len(summary) > 0:
        xs = np.linspace(float(x.min()), float(x.max()), 50)
        fig.add_trace(
            go.Scatter(
                x=xs,
                y=fit.intercept + fit.slope * xs,
                mode="lines",
                name="OLS",
            )
        )

    fig.update_layout(
        title="Смерті vs випадки на 1000 населення",
        xaxis_title="Випадки на 1000",
        yaxis_title="Смерті на 1000",
    )
    st.plotly_chart(fig, config={"responsive": True})


def render_residuals(summary: pd.DataFrame, cfg: AppConfig) -> None:
    data = summary.dropna(subset=[cfg.residual_col])
    if len(data) == 0:
        st.info("Немає залишків для відображення.")
        return

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=data[cfg.pred_col],
            y=data[cfg.residual_col],
            mode="markers",
            name="Залишки",
            text=data[cfg.state_col],
        )
    )
    fig.add_hline(y=0.0, line_dash="dash")
    fig.update_layout(
        title="Залишки регресії",
        xaxis_title="Прогноз смертей на 1000",
        yaxis_title="Факт − прогноз",
    )
    st.plotly_chart(fig, config={"responsive": True})
