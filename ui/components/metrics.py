from __future__ import annotations

from typing import Any, Optional

import math
import streamlit as st

from domain.entities import PipelineReport, RateEvaluation, RateFit


def _safe_float(v: Any, default: float = 0.0) -> float:
    try:
        x = float(v)
        if math.isnan(x) or math.isinf(x):
            return default
        return x
    except (TypeError, ValueError):
        return default


def _fmt(v: Any, digits: int = 4) -> str:
    x = _safe_float(v, float("nan"))
    if math.isnan(x):
        return "—"
    return f"{x:.{digits}f}"


_CSS = """
<style>
.metrics-wrap {
  border: 1px solid rgba(49, 51, 63, 0.16);
  border-radius: 18px;
  padding: 14px 14px;
  background: rgba(255,255,255,0.03);
}
.metrics-title {
  font-weight: 800;
  font-size: 14px;
  margin: 0 0 10px 0;
  opacity: 0.95;
}
.metric-body {
  display: grid;
  grid-template-columns: repeat(4, minmax(0, 1fr));
  gap: 10px;
}
.kpi {
  border-radius: 12px;
  padding: 10px 10px;
  border: 1px solid rgba(49, 51, 63, 0.10);
  background: rgba(255, 255, 255, 0.03);
}
.kpi-label {
  font-size: 12px;
  opacity: 0.75;
  margin-bottom: 4px;
  white-space: nowrap;
  overflow: hidden;
  text-overflow: ellipsis;
}
.kpi-value {
  font-weight: 900;
  font-size: 18px;
  letter-spacing: -0.2px;
}
@media (max-width: 900px) {
  .metric-body { grid-template-columns: repeat(2, minmax(0, 1fr)); }
}
</style>
"""


def _kpi(label: str, value: str) -> str:
    return f"""
<div class="kpi">
  <div class="kpi-label">{label}</div>
  <div class="kpi-value">{value}</div>
</div>
"""


def render_model_metrics(
    fit: Optional[RateFit],
    evaluation: Optional[RateEvaluation],
    model_error: Optional[str] = None,
) -> None:
    if fit is None or evaluation is None:
        st.warning(f"Регресію не побудовано: {model_error or 'немає даних'}")
        return

    st.markdown(_CSS, unsafe_allow_html=True)
    cards = [
        '<div class="metrics-wrap">',
        f'<div class="metrics-title">OLS: смерті ~ випадки на 1000 (штатів: {fit.n_obs})</div>',
        '<div class="metric-body">',
        _kpi("Intercept", _fmt(fit.intercept)),
        _kpi("Slope", _fmt(fit.slope)),
        _kpi("RMSE", _fmt(evaluation.rmse)),
        _kpi("R²", _fmt(evaluation.r2, 3)),
        "</div></div>",
    ]
    st.markdown("\n".join(cards), unsafe_allow_html=True)


def render_report(report: PipelineReport) -> None:
    st.markdown(_CSS, unsafe_allow_html=True)

    parse = report.parse_reports
    cards = [
        '<div class="metrics-wrap">',
        '<div class="metrics-title">Якість даних</div>',
        '<div class="metric-body">',
        _kpi("Відкинуто (парсинг)", str(report.dropped_rows)),
        _kpi("Без пари в join", str(sum(r.unmatched_rows for r in parse.values()))),
        _kpi("Без населення", str(report.missing_population_rows)),
        _kpi("Падіння накопичених", str(len(report.cumulative_dips))),
        "</div></div>",
    ]
    st.markdown("\n".join(cards), unsafe_allow_html=True)

    if len(report.cumulative_dips) > 0:
        with st.expander("Немонотонні накопичені значення (корекції звітності)"):
            st.dataframe(report.cumulative_dips, width='stretch')
