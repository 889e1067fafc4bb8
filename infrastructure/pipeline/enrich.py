from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import pandas as pd

from core.config import AppConfig
from core.errors import SchemaError

logger = logging.getLogger(__name__)


def build_composite_key(frame: pd.DataFrame, cols: Sequence[str], sep: str = ", ") -> pd.Series:
    """Join the non-empty parts of `cols` with `sep` (no stray separators)."""
    parts = frame[list(cols)].fillna("").astype(str)
    keys = [
        sep.join(p.strip() for p in row if p.strip())
        for row in parts.itertuples(index=False, name=None)
    ]
    return pd.Series(keys, index=frame.index, dtype=object)


def prepare_lookup(lookup: pd.DataFrame, cfg: AppConfig) -> Tuple[pd.DataFrame, int]:
    missing = [c for c in cfg.lookup_cols if c not in lookup.columns]
    if missing:
        raise SchemaError(
            message="Таблиця населення не містить обовʼязкових колонок",
            missing_fields=missing,
        )

    df = lookup
    # county rows share (state, country) with their state row
    if cfg.lookup_county_col in df.columns:
        county = df[cfg.lookup_county_col].fillna("").astype(str).str.strip()
        df = df[county == ""]

    df = df[list(cfg.lookup_cols)].rename(columns=cfg.lookup_renames).copy()
    keys = [cfg.state_col, cfg.country_col]
    for c in keys:
        df[c] = df[c].fillna("").astype(str).str.strip()
    df[cfg.population_col] = pd.to_numeric(df[cfg.population_col], errors="coerce")

    dup = df.duplicated(subset=keys, keep="first")
    duplicates = int(dup.sum())
    if duplicates:
        logger.warning("Population lookup: dropped %d duplicate region rows", duplicates)
    return df[~dup].reset_index(drop=True), duplicates


def attach_population(
    records: pd.DataFrame,
    lookup: pd.DataFrame,
    cfg: AppConfig,
) -> Tuple[pd.DataFrame, int]:
    """Left join населення за (province_state, country_region).

    Регіони без запису у довіднику залишаються з population = null.
    Повертає (таблиця, кількість дублікатів у довіднику).
    """
    table, duplicates = prepare_lookup(lookup, cfg)
    keys = [cfg.state_col, cfg.country_col]

    base = records.drop(columns=[cfg.population_col], errors="ignore").copy()
    for c in keys:
        base[c] = base[c].fillna("").astype(str).str.strip()

    out = base.merge(table, on=keys, how="left", validate="many_to_one")
    out[cfg.key_col] = build_composite_key(out, keys, cfg.key_sep)

    missing = out.loc[out[cfg.population_col].isna(), cfg.key_col].nunique()
    if missing:
        logger.warning("%d regions have no population entry; their rates stay null", missing)

    cols = list(records.columns)
    if cfg.population_col not in cols:
        cols.insert(cols.index(cfg.key_col), cfg.population_col)
    return out[cols], duplicates


def ensure_population(
    records: pd.DataFrame,
    cfg: AppConfig,
    lookup: Optional[pd.DataFrame] = None,
) -> Tuple[pd.DataFrame, int]:
    """Один інтерфейс для US (населення вже в рядках) і Global (довідник)."""
    if cfg.population_col in records.columns:
        return records.copy(), 0
    if lookup is None:
        raise SchemaError(
            message="Немає колонки населення і не передано довідник",
            missing_fields=[cfg.population_col],
        )
    return attach_population(records, lookup, cfg)
