from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from core.errors import SchemaError

logger = logging.getLogger(__name__)


def date_columns(wide: pd.DataFrame, id_cols: Sequence[str]) -> list[str]:
    ids = set(id_cols)
    return [c for c in wide.columns if c not in ids]


def melt_wide_table(
    wide: pd.DataFrame,
    id_cols: Sequence[str],
    keep_cols: Sequence[str],
    value_name: str,
    date_name: str = "date",
) -> pd.DataFrame:
    """
    Wide -> long: один рядок на (одиниця, дата).

    Усі колонки, що не оголошені в `id_cols`, вважаються датами.
    Результат містить рівно `keep_cols + [date_name, value_name]`;
    рядки згруповані за вихідним рядком, дати йдуть у порядку колонок.
    Значення клітинок не парсяться (це робить combine).
    """
    missing = [c for c in id_cols if c not in wide.columns]
    if missing:
        raise SchemaError(
            message="Відсутні обовʼязкові колонки ідентифікації",
            missing_fields=missing,
        )

    not_declared = [c for c in keep_cols if c not in id_cols]
    if not_declared:
        raise SchemaError(
            message="Колонки для збереження мають бути серед колонок ідентифікації",
            missing_fields=not_declared,
        )

    dates = date_columns(wide, id_cols)
    if not dates:
        raise SchemaError("Таблиця не містить жодної колонки з датою.")

    projected = wide[list(keep_cols) + dates].reset_index(drop=True)
    long = projected.melt(
        id_vars=list(keep_cols),
        value_vars=dates,
        var_name=date_name,
        value_name=value_name,
        ignore_index=False,
    )
    # melt emits date-major order; regroup by source row keeping date order
    long = long.sort_index(kind="stable").reset_index(drop=True)
    long[date_name] = long[date_name].astype(str)

    logger.debug(
        "Melted %s: %d rows x %d dates -> %d rows",
        value_name, len(wide), len(dates), len(long),
    )
    return long
