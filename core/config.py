from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


JHU_BASE_URL = (
    "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
    "csse_covid_19_data/"
)


@dataclass(frozen=True)
class AppConfig:
    # ---- Sources ----
    source_paths: Dict[str, str] = None  # type: ignore

    # ---- Raw schema ----
    us_id_cols: tuple[str, ...] = (
        "UID", "iso2", "iso3", "code3", "FIPS", "Admin2",
        "Province_State", "Country_Region", "Lat", "Long_", "Combined_Key",
    )
    us_keep_cols: tuple[str, ...] = ("Admin2", "Province_State", "Country_Region")
    us_population_col: str = "Population"

    global_id_cols: tuple[str, ...] = ("Province/State", "Country/Region", "Lat", "Long")
    global_keep_cols: tuple[str, ...] = ("Province/State", "Country/Region")

    lookup_cols: tuple[str, ...] = ("Province_State", "Country_Region", "Population")
    lookup_county_col: str = "Admin2"

    date_format: str = "%m/%d/%y"

    # ---- Unified columns ----
    city_col: str = "city"
    state_col: str = "province_state"
    country_col: str = "country_region"
    date_col: str = "date"
    cases_col: str = "cases"
    deaths_col: str = "deaths"
    population_col: str = "population"
    key_col: str = "composite_key"
    key_sep: str = ", "

    # ---- Derived ----
    new_cases_col: str = "new_cases"
    new_deaths_col: str = "new_deaths"
    cases_pm_col: str = "cases_per_million"
    deaths_pm_col: str = "deaths_per_million"
    cases_pt_col: str = "cases_per_thousand"
    deaths_pt_col: str = "deaths_per_thousand"
    pred_col: str = "predicted_deaths_per_thousand"
    residual_col: str = "residual"

    per_million: float = 1e6
    per_thousand: float = 1e3
    us_country: str = "US"
    top_n: int = 10

    def __post_init__(self) -> None:
        if self.source_paths is None:
            ts = JHU_BASE_URL + "csse_covid_19_time_series/"
            object.__setattr__(
                self,
                "source_paths",
                {
                    "us_cases": ts + "time_series_covid19_confirmed_US.csv",
                    "us_deaths": ts + "time_series_covid19_deaths_US.csv",
                    "global_cases": ts + "time_series_covid19_confirmed_global.csv",
                    "global_deaths": ts + "time_series_covid19_deaths_global.csv",
                    "population_lookup": JHU_BASE_URL + "UID_ISO_FIPS_LookUp_Table.csv",
                },
            )

    @property
    def us_renames(self) -> Dict[str, str]:
        return {
            "Admin2": self.city_col,
            "Province_State": self.state_col,
            "Country_Region": self.country_col,
            self.us_population_col: self.population_col,
        }

    @property
    def global_renames(self) -> Dict[str, str]:
        return {
            "Province/State": self.state_col,
            "Country/Region": self.country_col,
        }

    @property
    def lookup_renames(self) -> Dict[str, str]:
        return {
            "Province_State": self.state_col,
            "Country_Region": self.country_col,
            "Population": self.population_col,
        }


CFG = AppConfig()

SOURCE_ORDER = ["us_cases", "us_deaths", "global_cases", "global_deaths", "population_lookup"]
