from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from core.config import AppConfig
from core.errors import ModelFitError, SchemaError
from domain.entities import RateEvaluation, RateFit

logger = logging.getLogger(__name__)


def _rmse(y_t: np.ndarray, y_p: np.ndarray) -> float:
    if len(y_p) == 0:
        return np.nan
    return float(np.sqrt(np.mean((y_t - y_p) ** 2)))


def _squared_correlation(y_t: np.ndarray, y_p: np.ndarray) -> float:
    # Pearson r is undefined when either side is constant
    if len(y_t) < 2 or np.std(y_t) == 0 or np.std(y_p) == 0:
        return np.nan
    r = np.corrcoef(y_t, y_p)[0, 1]
    return float(r ** 2)


class RateModel:
    """OLS: deaths_per_thousand ~ cases_per_thousand по зведеній таблиці штатів.

    Навчання і оцінка відбуваються на тих самих даних (in-sample).
    """

    def __init__(self, cfg: AppConfig) -> None:
        self._cfg = cfg
        self._model: Optional[LinearRegression] = None
        self._fit: Optional[RateFit] = None

    @property
    def coefficients(self) -> RateFit:
        if self._fit is None:
            raise ModelFitError("Модель ще не навчена.")
        return self._fit

    def _xy(self, summary: pd.DataFrame) -> Tuple[np.ndarray, np.ndarray]:
        cols = [self._cfg.cases_pt_col, self._cfg.deaths_pt_col]
        missing = [c for c in cols if c not in summary.columns]
        if missing:
            raise SchemaError("Відсутні колонки для регресії", missing_fields=missing)

        data = summary[cols].dropna()
        if len(data) < len(summary):
            logger.warning("Rate model: skipped %d rows with null rates", len(summary) - len(data))
        x = data[cols[0]].to_numpy(dtype=float)
        y = data[cols[1]].to_numpy(dtype=float)
        return x, y

    def fit(self, summary: pd.DataFrame) -> RateFit:
        x, y = self._xy(summary)
        if len(x) < 2:
            raise ModelFitError(f"Для регресії потрібно щонайменше 2 рядки, отримано {len(x)}.")
        if np.var(x) == 0:
            raise ModelFitError("Предиктор cases_per_thousand не має дисперсії.")

        model = LinearRegression()
        model.fit(x.reshape(-1, 1), y)

        self._model = model
        self._fit = RateFit(
            intercept=float(model.intercept_),
            slope=float(model.coef_[0]),
            n_obs=int(len(x)),
        )
        logger.info(
            "Rate model fitted on %d states: intercept=%.6f slope=%.6f",
            self._fit.n_obs, self._fit.intercept, self._fit.slope,
        )
        return self._fit

    def predict(self, cases_per_thousand: Union[float, np.ndarray, pd.Series]) -> Union[float, np.ndarray]:
        if self._model is None:
            raise ModelFitError("Модель ще не навчена.")
        x = np.asarray(cases_per_thousand, dtype=float)
        pred = self._model.predict(x.reshape(-1, 1))
        if x.ndim == 0:
            return float(pred[0])
        return pred

    def evaluate(self, summary: pd.DataFrame) -> RateEvaluation:
        cfg = self._cfg
        x_col, y_col = cfg.cases_pt_col, cfg.deaths_pt_col

        df = summary.copy()
        df[cfg.pred_col] = np.nan
        known_x = df[x_col].notna()
        if known_x.any():
            df.loc[known_x, cfg.pred_col] = self.predict(df.loc[known_x, x_col].to_numpy(dtype=float))
        df[cfg.residual_col] = df[y_col] - df[cfg.pred_col]

        both = df[[y_col, cfg.pred_col]].dropna()
        y_t = both[y_col].to_numpy(dtype=float)
        y_p = both[cfg.pred_col].to_numpy(dtype=float)

        return RateEvaluation(
            rmse=_rmse(y_t, y_p),
            r2=_squared_correlation(y_t, y_p),
            predictions=df,
        )
