from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from core.config import AppConfig
from core.errors import ModelFitError
from domain.entities import PipelineReport, RateEvaluation, RateFit
from domain.repositories import RawTableSource
from infrastructure.pipeline.aggregate import (
    by_country_day,
    by_state_day,
    filter_reportable,
    find_cumulative_dips,
    state_summary,
)
from infrastructure.pipeline.combine import combine_global, combine_us
from infrastructure.pipeline.deltas import add_daily_deltas
from infrastructure.pipeline.enrich import ensure_population
from infrastructure.pipeline.reshape import melt_wide_table
from use_cases.fit_rate_model import fit_rate_model_uc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutput:
    us_records: pd.DataFrame
    global_records: pd.DataFrame
    us_by_state_day: pd.DataFrame
    us_totals: pd.DataFrame
    global_by_country_day: pd.DataFrame
    # state summary + predicted_deaths_per_thousand + residual
    state_summary: pd.DataFrame
    rate_fit: Optional[RateFit]
    rate_evaluation: Optional[RateEvaluation]
    model_error: Optional[str]
    report: PipelineReport
    meta: Dict[str, Any]


def _collect_dips(cfg: AppConfig, records: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    metrics = [cfg.cases_col, cfg.deaths_col]
    parts = []
    for name, frame in records.items():
        dips = find_cumulative_dips(frame, [cfg.key_col], metrics, cfg)
        if len(dips):
            parts.append(dips.assign(table=name))

    columns = ["table", cfg.key_col, cfg.date_col, "metric", "previous", "value", "drop"]
    if not parts:
        return pd.DataFrame(columns=columns)
    return pd.concat(parts, ignore_index=True)[columns]


def run_pipeline_uc(cfg: AppConfig, source: RawTableSource) -> PipelineOutput:
    # всі п'ять таблиць потрібні; помилки читання зупиняють запуск
    us_cases_wide = source.us_cases()
    us_deaths_wide = source.us_deaths()
    global_cases_wide = source.global_cases()
    global_deaths_wide = source.global_deaths()
    lookup = source.population_lookup()

    pop = cfg.us_population_col
    us_cases_long = melt_wide_table(us_cases_wide, cfg.us_id_cols, cfg.us_keep_cols, cfg.cases_col, cfg.date_col)
    us_deaths_long = melt_wide_table(
        us_deaths_wide, cfg.us_id_cols + (pop,), cfg.us_keep_cols + (pop,), cfg.deaths_col, cfg.date_col
    )
    global_cases_long = melt_wide_table(
        global_cases_wide, cfg.global_id_cols, cfg.global_keep_cols, cfg.cases_col, cfg.date_col
    )
    global_deaths_long = melt_wide_table(
        global_deaths_wide, cfg.global_id_cols, cfg.global_keep_cols, cfg.deaths_col, cfg.date_col
    )

    us_unified, us_parse = combine_us(us_cases_long, us_deaths_long, cfg)
    global_unified, global_parse = combine_global(global_cases_long, global_deaths_long, cfg)

    us_records, _ = ensure_population(us_unified, cfg)
    global_records, lookup_duplicates = ensure_population(global_unified, cfg, lookup)
    missing_population = int(us_records[cfg.population_col].isna().sum()) + int(
        global_records[cfg.population_col].isna().sum()
    )

    # per record, before onset filtering and summing can hide a dip
    dips = _collect_dips(cfg, {"us": us_records, "global": global_records})

    us_reportable, us_null, us_non_onset = filter_reportable(us_records, cfg)
    global_reportable, global_null, global_non_onset = filter_reportable(global_records, cfg)

    us_state_day = by_state_day(us_reportable, cfg)
    us_country_day = by_country_day(us_state_day, cfg)
    global_country_day = by_country_day(by_state_day(global_reportable, cfg), cfg)

    us_state_day_deltas = add_daily_deltas(us_state_day, [cfg.state_col, cfg.country_col], cfg)
    us_totals = add_daily_deltas(us_country_day, [cfg.country_col], cfg)
    global_country_day_deltas = add_daily_deltas(global_country_day, [cfg.country_col], cfg)

    summary = state_summary(us_state_day, cfg)

    rate_fit: Optional[RateFit] = None
    rate_evaluation: Optional[RateEvaluation] = None
    model_error: Optional[str] = None
    try:
        model_out = fit_rate_model_uc(cfg, summary)
        rate_fit = model_out.fit
        rate_evaluation = model_out.evaluation
        summary_out = rate_evaluation.predictions
    except ModelFitError as e:
        # tables stay valid without the model
        logger.warning("Rate model not fitted: %s", e)
        model_error = str(e)
        summary_out = summary.assign(**{cfg.pred_col: np.nan, cfg.residual_col: np.nan})

    report = PipelineReport(
        parse_reports={"us": us_parse, "global": global_parse},
        non_reportable_rows={
            "us_null_metric": us_null,
            "us_non_onset": us_non_onset,
            "global_null_metric": global_null,
            "global_non_onset": global_non_onset,
        },
        missing_population_rows=missing_population,
        lookup_duplicates=lookup_duplicates,
        cumulative_dips=dips,
    )

    dates = us_records[cfg.date_col]
    meta = {
        "us_units": int(us_records[cfg.key_col].nunique()),
        "global_units": int(global_records[cfg.key_col].nunique()),
        "states": int(len(summary_out)),
        "date_range_start": dates.min().date().isoformat() if len(dates) else None,
        "date_range_end": dates.max().date().isoformat() if len(dates) else None,
        "dropped_rows": report.dropped_rows,
    }
    logger.info(
        "Pipeline done: %d US records, %d global records, %d states",
        len(us_records), len(global_records), len(summary_out),
    )

    return PipelineOutput(
        us_records=us_records,
        global_records=global_records,
        us_by_state_day=us_state_day_deltas,
        us_totals=us_totals,
        global_by_country_day=global_country_day_deltas,
        state_summary=summary_out,
        rate_fit=rate_fit,
        rate_evaluation=rate_evaluation,
        model_error=model_error,
        report=report,
        meta=meta,
    )
