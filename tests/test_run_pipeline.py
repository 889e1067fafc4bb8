import math

import numpy as np
import pandas as pd
import pytest

from conftest import DATES, us_wide
from core.errors import SchemaError
from infrastructure.sources.csv_source import InMemoryRawTableSource
from use_cases.run_pipeline import run_pipeline_uc


def _reference_ols(x, y):
    mx, my = sum(x) / len(x), sum(y) / len(y)
    slope = sum((a - mx) * (b - my) for a, b in zip(x, y)) / sum((a - mx) ** 2 for a in x)
    return my - slope * mx, slope


def test_unified_tables(cfg, source):
    out = run_pipeline_uc(cfg, source)

    assert len(out.us_records) == 3 * len(DATES)
    assert len(out.global_records) == 4 * len(DATES)
    assert "population" in out.global_records.columns
    tiny = out.global_records[out.global_records["country_region"] == "Tinyland"]
    assert tiny["population"].isna().all()


def test_state_summary_and_model_end_to_end(cfg, source):
    out = run_pipeline_uc(cfg, source)
    summary = out.state_summary.set_index("province_state")

    # Alpha: max cases 9, deaths 2, population 1000
    assert summary.loc["Alpha", "cases_per_thousand"] == pytest.approx(9.0, rel=1e-9)
    assert summary.loc["Alpha", "deaths_per_thousand"] == pytest.approx(2.0, rel=1e-9)
    # Beta on the last day: B1 + B2 -> cases 8, deaths 3, population 2500
    assert summary.loc["Beta", "cases_per_thousand"] == pytest.approx(8 * 1e3 / 2500, rel=1e-9)
    assert summary.loc["Beta", "deaths_per_thousand"] == pytest.approx(3 * 1e3 / 2500, rel=1e-9)

    x = [9.0, 8 * 1e3 / 2500]
    y = [2.0, 3 * 1e3 / 2500]
    intercept, slope = _reference_ols(x, y)
    assert out.model_error is None
    assert out.rate_fit.intercept == pytest.approx(intercept, rel=1e-9)
    assert out.rate_fit.slope == pytest.approx(slope, rel=1e-9)
    assert out.rate_evaluation.rmse == pytest.approx(0.0, abs=1e-9)
    assert out.rate_evaluation.r2 == pytest.approx(1.0, rel=1e-9)

    assert "predicted_deaths_per_thousand" in out.state_summary.columns
    assert "residual" in out.state_summary.columns


def test_us_totals_series(cfg, source):
    out = run_pipeline_uc(cfg, source)
    totals = out.us_totals

    assert totals["country_region"].unique().tolist() == ["US"]
    assert totals["cases"].tolist() == [4, 9, 17]
    assert totals["deaths"].tolist() == [0, 1, 5]
    assert totals["population"].tolist() == [3000, 3000, 3500]
    assert np.isnan(totals["new_cases"].iloc[0])
    assert totals["new_cases"].tolist()[1:] == [5, 8]
    assert totals["new_deaths"].tolist()[1:] == [1, 4]
    assert totals["cases_per_million"].iloc[-1] == 17 * 1e6 / 3500


def test_state_day_deltas_per_state(cfg, source):
    out = run_pipeline_uc(cfg, source)
    state_day = out.us_by_state_day

    assert len(state_day) == 6
    assert state_day["new_cases"].isna().sum() == 2
    beta = state_day[state_day["province_state"] == "Beta"]
    assert beta["new_cases"].tolist()[1:] == [3, 4]


def test_global_by_country_day(cfg, source):
    out = run_pipeline_uc(cfg, source)
    g = out.global_by_country_day

    # Freedonia starts on day two (zero-case onset row filtered)
    assert len(g[g["country_region"] == "Freedonia"]) == 2
    syl = g[g["country_region"] == "Sylvania"].iloc[-1]
    assert syl["cases"] == 10
    assert syl["population"] == 500_000
    assert syl["cases_per_million"] == 10 * 1e6 / 500_000
    tiny = g[g["country_region"] == "Tinyland"]
    assert tiny["cases_per_million"].isna().all()
    assert g["new_cases"].isna().sum() == 3


def test_report_counts(cfg, source):
    out = run_pipeline_uc(cfg, source)
    report = out.report

    assert report.dropped_rows == 0
    assert report.lookup_duplicates == 1
    assert report.missing_population_rows == len(DATES)
    assert report.non_reportable_rows["us_non_onset"] == 2
    assert report.non_reportable_rows["global_non_onset"] == 1
    assert report.non_reportable_rows["us_null_metric"] == 0
    assert report.cumulative_dips.empty
    assert out.meta["date_range_start"] == "2020-01-22"
    assert out.meta["date_range_end"] == "2020-01-24"
    assert out.meta["states"] == 2


def test_non_monotonic_input_is_flagged(cfg, source, us_cases_wide):
    cases = us_cases_wide.copy()
    cases.loc[0, DATES[2]] = 4  # Alpha: 3, 5, 4
    src = InMemoryRawTableSource(
        us_cases_df=cases,
        us_deaths_df=source.us_deaths(),
        global_cases_df=source.global_cases(),
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    out = run_pipeline_uc(cfg, src)

    dips = out.report.cumulative_dips
    assert len(dips) == 1
    assert dips.iloc[0]["table"] == "us"
    assert dips.iloc[0]["composite_key"] == "A1, Alpha, US"
    # max-as-latest still reports the peak
    summary = out.state_summary.set_index("province_state")
    assert summary.loc["Alpha", "cases"] == 5


def test_county_dip_hidden_by_state_total_is_flagged(cfg, source):
    # Alpha sums to 4, 6, 7 while A1 falls from 5 to 3
    src = InMemoryRawTableSource(
        us_cases_df=us_wide([("A1", "Alpha", [3, 5, 3]), ("A2", "Alpha", [1, 1, 4])]),
        us_deaths_df=us_wide([("A1", "Alpha", [0, 0, 0]), ("A2", "Alpha", [0, 0, 0])], population=[100, 200]),
        global_cases_df=source.global_cases(),
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    out = run_pipeline_uc(cfg, src)

    assert out.us_by_state_day["cases"].tolist() == [4, 6, 7]
    dips = out.report.cumulative_dips
    assert len(dips) == 1
    row = dips.iloc[0]
    assert row["composite_key"] == "A1, Alpha, US"
    assert row["date"] == pd.Timestamp(2020, 1, 24)
    assert row["drop"] == 2


def test_global_dips_are_flagged(cfg, source, global_cases_wide):
    cases = global_cases_wide.copy()
    cases.loc[3, DATES[2]] = 0  # Tinyland: 1, 1, 0
    src = InMemoryRawTableSource(
        us_cases_df=source.us_cases(),
        us_deaths_df=source.us_deaths(),
        global_cases_df=cases,
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    out = run_pipeline_uc(cfg, src)

    dips = out.report.cumulative_dips
    assert dips["table"].tolist() == ["global"]
    assert dips["composite_key"].tolist() == ["Tinyland"]


def test_missing_population_counts_us_and_global(cfg, source, us_cases_wide):
    # C1 has cases only, so no population comes from the deaths table
    cases = pd.concat([us_cases_wide, us_wide([("C1", "Gamma", [1, 2, 3])])], ignore_index=True)
    src = InMemoryRawTableSource(
        us_cases_df=cases,
        us_deaths_df=source.us_deaths(),
        global_cases_df=source.global_cases(),
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    out = run_pipeline_uc(cfg, src)

    # Tinyland in Global, C1 in US
    assert out.report.missing_population_rows == 2 * len(DATES)


def test_model_failure_keeps_tables(cfg, source):
    src = InMemoryRawTableSource(
        us_cases_df=us_wide([("A1", "Alpha", [3, 5, 9])]),
        us_deaths_df=us_wide([("A1", "Alpha", [0, 1, 2])], population=[1000]),
        global_cases_df=source.global_cases(),
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    out = run_pipeline_uc(cfg, src)

    assert out.rate_fit is None
    assert out.rate_evaluation is None
    assert out.model_error
    assert len(out.state_summary) == 1
    assert math.isnan(out.state_summary["predicted_deaths_per_thousand"].iloc[0])
    assert len(out.us_totals) == len(DATES)


def test_schema_error_aborts(cfg, source, us_cases_wide):
    src = InMemoryRawTableSource(
        us_cases_df=us_cases_wide.drop(columns=["Combined_Key"]),
        us_deaths_df=source.us_deaths(),
        global_cases_df=source.global_cases(),
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    with pytest.raises(SchemaError) as exc:
        run_pipeline_uc(cfg, src)
    assert exc.value.missing_fields == ["Combined_Key"]


class _BrokenSource(InMemoryRawTableSource):
    def global_deaths(self) -> pd.DataFrame:
        raise OSError("connection reset")


def test_source_failure_is_fatal(cfg, source):
    src = _BrokenSource(
        us_cases_df=source.us_cases(),
        us_deaths_df=source.us_deaths(),
        global_cases_df=source.global_cases(),
        global_deaths_df=source.global_deaths(),
        population_lookup_df=source.population_lookup(),
    )
    with pytest.raises(OSError):
        run_pipeline_uc(cfg, src)
