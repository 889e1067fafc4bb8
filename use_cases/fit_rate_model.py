from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from core.config import AppConfig
from domain.entities import RateEvaluation, RateFit
from infrastructure.ml.rate_model import RateModel


@dataclass(frozen=True)
class RateModelOutput:
    model: RateModel
    fit: RateFit
    evaluation: RateEvaluation


def fit_rate_model_uc(cfg: AppConfig, summary: pd.DataFrame) -> RateModelOutput:
    model = RateModel(cfg)
    fit = model.fit(summary)
    evaluation = model.evaluate(summary)
    return RateModelOutput(model=model, fit=fit, evaluation=evaluation)
