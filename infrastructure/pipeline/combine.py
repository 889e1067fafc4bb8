from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

import pandas as pd

from core.config import CFG, AppConfig
from core.errors import ParseError
from domain.entities import ParseReport
from infrastructure.pipeline.enrich import build_composite_key

logger = logging.getLogger(__name__)


def parse_date_label(label: str, fmt: str = CFG.date_format) -> pd.Timestamp:
    try:
        return pd.to_datetime(label, format=fmt)
    except (ValueError, TypeError) as e:
        raise ParseError(f"Некоректна дата `{label}`, очікується формат {fmt}") from e


def _parse_side(
    long: pd.DataFrame,
    value_col: str,
    key_cols: Sequence[str],
    numeric_cols: Sequence[str],
    date_col: str,
    fmt: str,
) -> Tuple[pd.DataFrame, pd.DataFrame, int, int]:
    df = long.copy()
    for c in key_cols:
        df[c] = df[c].fillna("").astype(str).str.strip()

    df[date_col] = pd.to_datetime(df[date_col], format=fmt, errors="coerce")
    bad_date = df[date_col].isna()

    raw = df[value_col]
    values = pd.to_numeric(raw, errors="coerce")
    # an empty cell is a null metric, not a parse failure
    bad_value = values.isna() & raw.notna() & ~bad_date
    df[value_col] = values

    for c in numeric_cols:
        df[c] = pd.to_numeric(df[c], errors="coerce")

    on = list(key_cols) + [date_col]
    bad_keys = df.loc[bad_value, on]
    df = df[~(bad_date | bad_value)]

    # a repeated identity row would multiply the join
    dup = df.duplicated(subset=on, keep="first")
    df = df[~dup].copy()
    return df, bad_keys, int(bad_date.sum()), int(dup.sum())


def combine_cases_deaths(
    cases_long: pd.DataFrame,
    deaths_long: pd.DataFrame,
    key_cols: Sequence[str],
    renames: Dict[str, str],
    table: str,
    cfg: AppConfig,
    carry_numeric: Sequence[str] = (),
) -> Tuple[pd.DataFrame, ParseReport]:
    """
    Full outer join довгих таблиць випадків і смертей за `key_cols + [date]`.

    Рядки з нерозпізнаною датою чи числом відкидаються і рахуються у звіті.
    Повтор ключа в межах однієї таблиці відкидається (лишається перший рядок),
    тож на ключ припадає рівно один вихідний рядок.
    Ключ, присутній лише з одного боку, дає null у відсутній метриці.
    """
    date_col = cfg.date_col
    cases_col, deaths_col = cfg.cases_col, cfg.deaths_col

    cases, bad_c, dd_c, dup_c = _parse_side(
        cases_long, cases_col, key_cols, [], date_col, cfg.date_format
    )
    deaths, bad_d, dd_d, dup_d = _parse_side(
        deaths_long, deaths_col, key_cols, list(carry_numeric), date_col, cfg.date_format
    )

    on = list(key_cols) + [date_col]
    merged = cases.merge(deaths, on=on, how="outer", validate="one_to_one")

    # a key with an unparseable cell on either side is excluded, not half-joined
    bad_keys = pd.concat([bad_c, bad_d], ignore_index=True).drop_duplicates()
    if len(bad_keys):
        flagged = merged.merge(bad_keys.assign(_bad=True), on=on, how="left")["_bad"]
        merged = merged[flagged.isna().to_numpy()]

    merged = merged.rename(columns=renames)

    unmatched = int((merged[cases_col].isna() | merged[deaths_col].isna()).sum())

    report = ParseReport(
        table=table,
        input_rows=len(cases_long) + len(deaths_long),
        dropped_dates=dd_c + dd_d,
        dropped_values=len(bad_c) + len(bad_d),
        duplicate_rows=dup_c + dup_d,
        unmatched_rows=unmatched,
    )
    if report.dropped_rows:
        logger.warning(
            "%s: dropped %d rows with unparseable dates, %d with unparseable values, %d repeated",
            table, report.dropped_dates, report.dropped_values, report.duplicate_rows,
        )
    if unmatched:
        logger.warning("%s: %d rows have a null cases or deaths value", table, unmatched)

    return merged.reset_index(drop=True), report


def combine_us(
    cases_long: pd.DataFrame,
    deaths_long: pd.DataFrame,
    cfg: AppConfig,
) -> Tuple[pd.DataFrame, ParseReport]:
    merged, report = combine_cases_deaths(
        cases_long,
        deaths_long,
        key_cols=cfg.us_keep_cols,
        renames=cfg.us_renames,
        table="us",
        cfg=cfg,
        carry_numeric=[cfg.us_population_col],
    )
    merged[cfg.key_col] = build_composite_key(
        merged, [cfg.city_col, cfg.state_col, cfg.country_col], cfg.key_sep
    )
    cols = [
        cfg.city_col, cfg.state_col, cfg.country_col, cfg.date_col,
        cfg.cases_col, cfg.deaths_col, cfg.population_col, cfg.key_col,
    ]
    return merged[cols], report


def combine_global(
    cases_long: pd.DataFrame,
    deaths_long: pd.DataFrame,
    cfg: AppConfig,
) -> Tuple[pd.DataFrame, ParseReport]:
    merged, report = combine_cases_deaths(
        cases_long,
        deaths_long,
        key_cols=cfg.global_keep_cols,
        renames=cfg.global_renames,
        table="global",
        cfg=cfg,
    )
    merged[cfg.key_col] = build_composite_key(
        merged, [cfg.state_col, cfg.country_col], cfg.key_sep
    )
    cols = [
        cfg.state_col, cfg.country_col, cfg.date_col,
        cfg.cases_col, cfg.deaths_col, cfg.key_col,
    ]
    return merged[cols], report
