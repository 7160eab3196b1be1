import logging
from typing import Dict

import pandas as pd

from occupancy.metrics import safe_ratio

logger = logging.getLogger(__name__)

NATION_SUM_COLUMNS = [
    "inpatient_occupied",
    "covid_occupied",
    "icu_occupied",
    "inpatient_capacity",
    "icu_capacity",
    "baseline_inpatient_capacity",
    "baseline_icu_capacity",
]

MATRIX_COLUMNS = [
    "inpatient_percent",
    "covid_percent",
    "icu_percent",
    "inpatient_percent_baseline",
    "covid_percent_baseline",
    "icu_percent_baseline",
]


def nation_rollup(df: pd.DataFrame) -> pd.DataFrame:
    """
    Daily national totals. Missing values count as zero here, so one region
    not reporting lowers the total instead of blanking the whole day.

    Returns
    -------
    A data frame indexed by date (ascending) with the summed counts and
    capacities, ``non_covid_inpatient_occupied`` and national percentages
    over the summed current capacities.
    """
    nation = df[NATION_SUM_COLUMNS].fillna(0).groupby(df["date"]).sum()
    nation = nation.sort_index()
    nation["non_covid_inpatient_occupied"] = (
        nation["inpatient_occupied"] - nation["covid_occupied"]
    )
    nation["inpatient_percent"] = safe_ratio(
        nation["inpatient_occupied"], nation["inpatient_capacity"]
    )
    nation["covid_percent"] = safe_ratio(
        nation["covid_occupied"], nation["inpatient_capacity"]
    )
    nation["icu_percent"] = safe_ratio(nation["icu_occupied"], nation["icu_capacity"])
    logger.info(f"Built national rollup for {len(nation)} days")
    return nation


def to_matrix(df: pd.DataFrame, value_column: str) -> pd.DataFrame:
    """
    Pivot one column into a date by region matrix, dates ascending. Region and
    date combinations without a row become missing cells.
    """
    matrix = df.pivot(index="date", columns="region", values=value_column)
    return matrix.sort_index()


def percent_matrices(df: pd.DataFrame, columns=MATRIX_COLUMNS) -> Dict[str, pd.DataFrame]:
    return {column: to_matrix(df, column) for column in columns if column in df.columns}


def matrix_to_long(
    matrix: pd.DataFrame, value_name: str, drop_missing: bool = True
) -> pd.DataFrame:
    """
    Inverse of ``to_matrix``: melt a date by region matrix back into
    (region, date, value) rows sorted by region and date.
    """
    long_df = matrix.reset_index().melt(
        id_vars="date", var_name="region", value_name=value_name
    )
    if drop_missing:
        long_df = long_df.dropna(subset=[value_name])
    long_df = long_df[["region", "date", value_name]]
    return long_df.sort_values(["region", "date"]).reset_index(drop=True)
