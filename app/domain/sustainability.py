"""
app/domain/sustainability.py

Schema and domain models for the World Sustainability dataset.

Raw column names
----------------
The source CSV carries 54 columns keyed by long World-Bank-style names
(``"GDP per capita (current US$) - NY.GDP.PCAP.CD"``). They are enumerated
once here in ``RAW_COLUMNS``; every other module refers to these constants
instead of repeating the literal strings.

Normalized records
------------------
Each valid raw row becomes one :class:`NormalizedRecord` carrying the
simplified fields (Country, Year, Region, Income group and five headline
metrics) alongside every original raw value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Mapping

# ---------------------------------------------------------------------------
# Raw column names
# ---------------------------------------------------------------------------

COL_COUNTRY_NAME: Final[str] = "Country Name"
COL_COUNTRY_CODE: Final[str] = "Country Code"
COL_YEAR: Final[str] = "Year"
COL_CONTINENT: Final[str] = "Continent"
COL_UN_SDG_REGION: Final[str] = "World Regions (UN SDG Definition)"
COL_INCOME_CLASSIFICATION: Final[str] = "Income Classification (World Bank Definition)"
COL_REGIME_TYPE: Final[str] = "Regime Type (RoW Measure Definition)"
COL_CO2_PRODUCTION: Final[str] = (
    "Annual production-based emissions of carbon dioxide (CO2), measured in million tonnes"
)
COL_RENEWABLE_CONSUMPTION: Final[str] = (
    "Renewable energy consumption (% of total final energy consumption) - EG.FEC.RNEW.ZS"
)
COL_GDP_PER_CAPITA: Final[str] = "GDP per capita (current US$) - NY.GDP.PCAP.CD"
COL_LIFE_EXPECTANCY: Final[str] = "Life expectancy at birth, total (years) - SP.DYN.LE00.IN"

KEY_COLUMNS: tuple[str, ...] = (COL_COUNTRY_NAME, COL_COUNTRY_CODE, COL_YEAR)

RAW_COLUMNS: tuple[str, ...] = (
    COL_COUNTRY_NAME,
    COL_COUNTRY_CODE,
    COL_YEAR,
    "Access to electricity (% of population) - EG.ELC.ACCS.ZS",
    "Adjusted net national income per capita (annual % growth) - NY.ADJ.NNTY.PC.KD.ZG",
    "Adjusted net savings, excluding particulate emission damage (% of GNI) - NY.ADJ.SVNX.GN.ZS",
    "Adjusted savings: carbon dioxide damage (% of GNI) - NY.ADJ.DCO2.GN.ZS",
    "Adjusted savings: natural resources depletion (% of GNI) - NY.ADJ.DRES.GN.ZS",
    "Adjusted savings: net forest depletion (% of GNI) - NY.ADJ.DFOR.GN.ZS",
    "Adjusted savings: particulate emission damage (% of GNI) - NY.ADJ.DPEM.GN.ZS",
    "Automated teller machines (ATMs) (per 100,000 adults) - FB.ATM.TOTL.P5",
    "Broad money (% of GDP) - FM.LBL.BMNY.GD.ZS",
    "Children out of school (% of primary school age) - SE.PRM.UNER.ZS",
    "Compulsory education, duration (years) - SE.COM.DURS",
    "Cost of business start-up procedures, female (% of GNI per capita) - IC.REG.COST.PC.FE.ZS",
    "Cost of business start-up procedures, male (% of GNI per capita) - IC.REG.COST.PC.MA.ZS",
    "Exports of goods and services (% of GDP) - NE.EXP.GNFS.ZS",
    "Final consumption expenditure (% of GDP) - NE.CON.TOTL.ZS",
    "GDP (current US$) - NY.GDP.MKTP.CD",
    COL_GDP_PER_CAPITA,
    "General government final consumption expenditure (% of GDP) - NE.CON.GOVT.ZS",
    "Gross national expenditure (% of GDP) - NE.DAB.TOTL.ZS",
    "Gross savings (% of GDP) - NY.GNS.ICTR.ZS",
    "Imports of goods and services (% of GDP) - NE.IMP.GNFS.ZS",
    "Inflation, consumer prices (annual %) - FP.CPI.TOTL.ZG",
    "Primary completion rate, total (% of relevant age group) - SE.PRM.CMPT.ZS",
    "Proportion of seats held by women in national parliaments (%) - SG.GEN.PARL.ZS",
    "Pupil-teacher ratio, primary - SE.PRM.ENRL.TC.ZS",
    "Renewable electricity output (% of total electricity output) - EG.ELC.RNEW.ZS",
    COL_RENEWABLE_CONSUMPTION,
    "School enrollment, preprimary (% gross) - SE.PRE.ENRR",
    "School enrollment, primary (% gross) - SE.PRM.ENRR",
    "School enrollment, secondary (% gross) - SE.SEC.ENRR",
    "Trade (% of GDP) - NE.TRD.GNFS.ZS",
    "Women Business and the Law Index Score (scale 1-100) - SG.LAW.INDX",
    "Prevalence of undernourishment (%) - SN_ITK_DEFC - 2.1.1",
    "Proportion of population below international poverty line (%) - SI_POV_DAY1 - 1.1.1",
    "Proportion of population covered by at least a 2G mobile network (%) - IT_MOB_2GNTWK - 9.c.1",
    "Proportion of population covered by at least a 3G mobile network (%) - IT_MOB_3GNTWK - 9.c.1",
    "Proportion of population using basic drinking water services (%) - SP_ACS_BSRVH2O - 1.4.1",
    "Unemployment rate, male (%) - SL_TLF_UEM - 8.5.2",
    "Unemployment rate, women (%) - SL_TLF_UEM - 8.5.2",
    COL_CO2_PRODUCTION,
    COL_CONTINENT,
    "Gini index (World Bank estimate) - SI.POV.GINI",
    COL_INCOME_CLASSIFICATION,
    "Individuals using the Internet (% of population) - IT.NET.USER.ZS",
    COL_LIFE_EXPECTANCY,
    "Population, total - SP.POP.TOTL",
    COL_REGIME_TYPE,
    "Rural population (% of total population) - SP.RUR.TOTL.ZS",
    "Total natural resources rents (% of GDP) - NY.GDP.TOTL.RT.ZS",
    "Urban population (% of total population) - SP.URB.TOTL.IN.ZS",
    COL_UN_SDG_REGION,
)

SCHEMA_METRICS_COUNT: Final[int] = len(RAW_COLUMNS)
"""Number of columns in the dataset schema, reported as dataset metadata."""

# ---------------------------------------------------------------------------
# Simplified field names
# ---------------------------------------------------------------------------

FIELD_COUNTRY: Final[str] = "Country"
FIELD_YEAR: Final[str] = "Year"
FIELD_REGION: Final[str] = "Region"
FIELD_INCOME_GROUP: Final[str] = "Income group"
FIELD_CARBON_EMISSIONS: Final[str] = "Carbon emissions (metric tons per capita)"
FIELD_RENEWABLE_ENERGY: Final[str] = (
    "Renewable energy consumption (% of total final energy consumption)"
)
FIELD_GDP_PER_CAPITA: Final[str] = "GDP per capita (current US$)"
FIELD_LIFE_EXPECTANCY: Final[str] = "Life expectancy at birth, total (years)"
FIELD_FOREST_AREA: Final[str] = "Forest area (% of land area)"

HEADLINE_METRICS: tuple[str, ...] = (
    FIELD_CARBON_EMISSIONS,
    FIELD_RENEWABLE_ENERGY,
    FIELD_GDP_PER_CAPITA,
    FIELD_LIFE_EXPECTANCY,
    FIELD_FOREST_AREA,
)

SIMPLIFIED_ATTRIBUTES: dict[str, str] = {
    FIELD_COUNTRY: "country",
    FIELD_YEAR: "year",
    FIELD_REGION: "region",
    FIELD_INCOME_GROUP: "income_group",
    FIELD_CARBON_EMISSIONS: "carbon_emissions",
    FIELD_RENEWABLE_ENERGY: "renewable_energy",
    FIELD_GDP_PER_CAPITA: "gdp_per_capita",
    FIELD_LIFE_EXPECTANCY: "life_expectancy",
    FIELD_FOREST_AREA: "forest_area",
}
"""Simplified display name to ``NormalizedRecord`` attribute."""

UNKNOWN: Final[str] = "Unknown"

# ---------------------------------------------------------------------------
# Metric catalogue
# ---------------------------------------------------------------------------

METRIC_CATEGORIES: dict[str, tuple[str, ...]] = {
    "environmental": (
        "Access to electricity (% of population) - EG.ELC.ACCS.ZS",
        "Adjusted savings: carbon dioxide damage (% of GNI) - NY.ADJ.DCO2.GN.ZS",
        "Adjusted savings: natural resources depletion (% of GNI) - NY.ADJ.DRES.GN.ZS",
        "Adjusted savings: net forest depletion (% of GNI) - NY.ADJ.DFOR.GN.ZS",
        "Adjusted savings: particulate emission damage (% of GNI) - NY.ADJ.DPEM.GN.ZS",
        "Renewable electricity output (% of total electricity output) - EG.ELC.RNEW.ZS",
        COL_RENEWABLE_CONSUMPTION,
        COL_CO2_PRODUCTION,
        "Total natural resources rents (% of GDP) - NY.GDP.TOTL.RT.ZS",
        "Proportion of population using basic drinking water services (%) - SP_ACS_BSRVH2O - 1.4.1",
    ),
    "social": (
        "Children out of school (% of primary school age) - SE.PRM.UNER.ZS",
        "Compulsory education, duration (years) - SE.COM.DURS",
        "Primary completion rate, total (% of relevant age group) - SE.PRM.CMPT.ZS",
        "Proportion of seats held by women in national parliaments (%) - SG.GEN.PARL.ZS",
        "Pupil-teacher ratio, primary - SE.PRM.ENRL.TC.ZS",
        "School enrollment, preprimary (% gross) - SE.PRE.ENRR",
        "School enrollment, primary (% gross) - SE.PRM.ENRR",
        "School enrollment, secondary (% gross) - SE.SEC.ENRR",
        "Women Business and the Law Index Score (scale 1-100) - SG.LAW.INDX",
        "Prevalence of undernourishment (%) - SN_ITK_DEFC - 2.1.1",
        "Proportion of population below international poverty line (%) - SI_POV_DAY1 - 1.1.1",
        "Unemployment rate, male (%) - SL_TLF_UEM - 8.5.2",
        "Unemployment rate, women (%) - SL_TLF_UEM - 8.5.2",
        "Gini index (World Bank estimate) - SI.POV.GINI",
        "Individuals using the Internet (% of population) - IT.NET.USER.ZS",
        COL_LIFE_EXPECTANCY,
        "Population, total - SP.POP.TOTL",
        "Rural population (% of total population) - SP.RUR.TOTL.ZS",
        "Urban population (% of total population) - SP.URB.TOTL.IN.ZS",
    ),
    "economic": (
        "Adjusted net national income per capita (annual % growth) - NY.ADJ.NNTY.PC.KD.ZG",
        "Adjusted net savings, excluding particulate emission damage (% of GNI) - NY.ADJ.SVNX.GN.ZS",
        "Automated teller machines (ATMs) (per 100,000 adults) - FB.ATM.TOTL.P5",
        "Broad money (% of GDP) - FM.LBL.BMNY.GD.ZS",
        "Cost of business start-up procedures, female (% of GNI per capita) - IC.REG.COST.PC.FE.ZS",
        "Cost of business start-up procedures, male (% of GNI per capita) - IC.REG.COST.PC.MA.ZS",
        "Exports of goods and services (% of GDP) - NE.EXP.GNFS.ZS",
        "Final consumption expenditure (% of GDP) - NE.CON.TOTL.ZS",
        "GDP (current US$) - NY.GDP.MKTP.CD",
        COL_GDP_PER_CAPITA,
        "General government final consumption expenditure (% of GDP) - NE.CON.GOVT.ZS",
        "Gross national expenditure (% of GDP) - NE.DAB.TOTL.ZS",
        "Gross savings (% of GDP) - NY.GNS.ICTR.ZS",
        "Imports of goods and services (% of GDP) - NE.IMP.GNFS.ZS",
        "Inflation, consumer prices (annual %) - FP.CPI.TOTL.ZG",
        "Trade (% of GDP) - NE.TRD.GNFS.ZS",
    ),
    "technology": (
        "Proportion of population covered by at least a 2G mobile network (%) - IT_MOB_2GNTWK - 9.c.1",
        "Proportion of population covered by at least a 3G mobile network (%) - IT_MOB_3GNTWK - 9.c.1",
        "Individuals using the Internet (% of population) - IT.NET.USER.ZS",
    ),
}

FRIENDLY_METRIC_NAMES: dict[str, str] = {
    "Access to electricity (% of population) - EG.ELC.ACCS.ZS": "Access to Electricity",
    "Adjusted net national income per capita (annual % growth) - NY.ADJ.NNTY.PC.KD.ZG": (
        "Net National Income Growth"
    ),
    COL_GDP_PER_CAPITA: "GDP per Capita",
    COL_LIFE_EXPECTANCY: "Life Expectancy",
    "Renewable electricity output (% of total electricity output) - EG.ELC.RNEW.ZS": (
        "Renewable Electricity"
    ),
    COL_CO2_PRODUCTION: "CO2 Emissions",
    "Individuals using the Internet (% of population) - IT.NET.USER.ZS": "Internet Usage",
    "Proportion of seats held by women in national parliaments (%) - SG.GEN.PARL.ZS": (
        "Women in Parliament"
    ),
}


def friendly_name(field_name: str) -> str:
    """
    Return the short display label for a raw column, or the name itself.
    """

    return FRIENDLY_METRIC_NAMES.get(field_name, field_name)


def metric_options(category: str | None = None) -> list[tuple[str, str]]:
    """
    ``(field, label)`` pairs for one metric category.

    ``None`` selects the headline metrics; an unknown category yields ``[]``.
    """

    fields = HEADLINE_METRICS if category is None else METRIC_CATEGORIES.get(category, ())
    return [(field_name, friendly_name(field_name)) for field_name in fields]


def as_metric(value: Any) -> float | int | None:
    """
    Return *value* when it is a finite number, otherwise ``None``.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    """

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedRecord:
    """
    Simplified, canonically keyed view of one country-year row.

    ``raw`` keeps every original field under its original key so consumers
    can reach any of the dataset's indicators through :meth:`get`.
    """

    country: str
    year: int
    region: str
    income_group: str
    carbon_emissions: float | int | None = None
    renewable_energy: float | int | None = None
    gdp_per_capita: float | int | None = None
    life_expectancy: float | int | None = None
    forest_area: float | int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", MappingProxyType(dict(self.raw)))

    def simplified_fields(self) -> dict[str, Any]:
        """
        Return the canonical simplified fields keyed by their display names.
        """

        return {name: getattr(self, attribute) for name, attribute in SIMPLIFIED_ATTRIBUTES.items()}

    def get(self, field_name: str, default: Any = None) -> Any:
        """
        Resolve a simplified field first, then a raw column.

        Unknown names resolve to *default* instead of raising.
        """

        attribute = SIMPLIFIED_ATTRIBUTES.get(field_name)
        if attribute is not None:
            return getattr(self, attribute)
        return self.raw.get(field_name, default)

    def as_dict(self) -> dict[str, Any]:
        """
        Flat mapping with raw fields first and simplified fields overlaid.
        """

        return {**self.raw, **self.simplified_fields()}


@dataclass(frozen=True)
class ParseWarning:
    """
    One non-fatal parser issue detected during ingestion.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run ingestion summary.
    """

    rows_loaded: int
    rows_rejected: int
    warnings: list[ParseWarning] = field(default_factory=list)
