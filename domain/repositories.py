from __future__ import annotations

from abc import ABC, abstractmethod

import pandas as pd


class RawTableSource(ABC):
    @abstractmethod
    def us_cases(self) -> pd.DataFrame:
        raise NotImplementedError

    @abstractmethod
    def us_deaths(self) -> pd.DataFrame:
        raise NotImplementedError

    @abstractmethod
    def global_cases(self) -> pd.DataFrame:
        raise NotImplementedError

    @abstractmethod
    def global_deaths(self) -> pd.DataFrame:
        raise NotImplementedError

    @abstractmethod
    def population_lookup(self) -> pd.DataFrame:
        raise NotImplementedError
