import logging
from typing import Dict, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# A state reporting zero occupied ICU beds has not started reporting ICU
# figures yet, so that row cannot provide its baseline ICU capacity. The
# baseline then comes from the first later row with non-zero ICU occupancy,
# so it can be dated after the inpatient baseline. It is missing only when
# no such row exists.
ICU_ZERO_IS_NOT_REPORTING = True

BASELINE_PERCENT_COLUMNS = {
    "inpatient_percent_baseline": ("inpatient_occupied", "baseline_inpatient_capacity"),
    "covid_percent_baseline": ("covid_occupied", "baseline_inpatient_capacity"),
    "icu_percent_baseline": ("icu_occupied", "baseline_icu_capacity"),
}


class BaselineCapacity(NamedTuple):
    inpatient_capacity: float = np.nan
    icu_capacity: float = np.nan
    inpatient_date: Optional[pd.Timestamp] = None
    icu_date: Optional[pd.Timestamp] = None


def safe_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """
    Element-wise ratio where anything that is not a finite real number
    (zero or missing denominator, infinite inputs) becomes missing.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = numerator.astype(float) / denominator.astype(float)
    return ratio.where(np.isfinite(ratio))


def derive_capacity(occupied: pd.Series, percent: pd.Series) -> pd.Series:
    return safe_ratio(occupied, percent)


def add_capacities(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["inpatient_capacity"] = derive_capacity(
        df["inpatient_occupied"], df["inpatient_percent"]
    )
    df["icu_capacity"] = derive_capacity(df["icu_occupied"], df["icu_percent"])
    return df


def count_over_capacity(df: pd.DataFrame) -> pd.Series:
    """
    Number of rows per percent column reporting more than 100% occupancy.
    Those are upstream reporting errors and are left untouched.
    """
    percent_columns = ["inpatient_percent", "covid_percent", "icu_percent"]
    over_capacity = (df[percent_columns] > 1).sum()
    for column, count in over_capacity.items():
        if count:
            logger.warning(f"{count} rows report {column} above 100%")
    return over_capacity


def reconcile_covid_percent(df: pd.DataFrame) -> pd.DataFrame:
    """
    The covid table implies its own inpatient capacity, which should agree
    with the one implied by the inpatient table. The inpatient one is kept,
    and ``covid_percent`` is re-expressed over it so both percentages share
    a denominator.
    """
    df = df.copy()
    covid_capacity = derive_capacity(df["covid_occupied"], df["covid_percent"])
    disagreement = (
        (covid_capacity - df["inpatient_capacity"]).abs() / df["inpatient_capacity"]
    ).replace([np.inf, -np.inf], np.nan)
    logger.debug(
        f"Median relative disagreement between covid and inpatient "
        f"capacities: {disagreement.median():.4f}"
    )
    df["covid_percent"] = safe_ratio(df["covid_occupied"], df["inpatient_capacity"])
    return df


def _is_baseline_icu_candidate(row, icu_zero_is_not_reporting: bool) -> bool:
    if np.isnan(row.icu_capacity):
        return False
    if icu_zero_is_not_reporting and row.icu_occupied == 0:
        return False
    return True


def extract_baselines(
    df: pd.DataFrame, icu_zero_is_not_reporting: bool = ICU_ZERO_IS_NOT_REPORTING
) -> Dict[str, BaselineCapacity]:
    """
    Find every region's earliest defined inpatient and ICU capacities.

    Rows are visited once in chronological order (stable, so rows sharing a
    date keep their input order) and the first defined value per region
    wins. Inpatient and ICU baselines may come from different dates.

    Parameters
    ----------
    df
        table with ``region``, ``date``, ``inpatient_capacity``,
        ``icu_capacity`` and ``icu_occupied`` columns
    icu_zero_is_not_reporting
        skip rows with zero occupied ICU beds when looking for the ICU
        baseline. A region with no other rows gets a missing baseline.

    Returns
    -------
    A dictionary mapping region to its ``BaselineCapacity``
    """
    ordered = df.sort_values("date", kind="mergesort")
    found = {}
    for row in ordered.itertuples(index=False):
        baseline = found.setdefault(row.region, {})
        if "inpatient_capacity" not in baseline and not np.isnan(
            row.inpatient_capacity
        ):
            baseline["inpatient_capacity"] = row.inpatient_capacity
            baseline["inpatient_date"] = row.date
        if "icu_capacity" not in baseline and _is_baseline_icu_candidate(
            row, icu_zero_is_not_reporting
        ):
            baseline["icu_capacity"] = row.icu_capacity
            baseline["icu_date"] = row.date
    return {region: BaselineCapacity(**values) for region, values in found.items()}


def baseline_table(baselines: Dict[str, BaselineCapacity]) -> pd.DataFrame:
    df = pd.DataFrame.from_dict(
        {region: baseline._asdict() for region, baseline in baselines.items()},
        orient="index",
        columns=list(BaselineCapacity._fields),
    )
    df.index.name = "region"
    return df.sort_index()


def add_baselines(
    df: pd.DataFrame, baselines: Dict[str, BaselineCapacity]
) -> pd.DataFrame:
    df = df.copy()
    df["baseline_inpatient_capacity"] = df["region"].map(
        {region: baseline.inpatient_capacity for region, baseline in baselines.items()}
    ).astype(float)
    df["baseline_icu_capacity"] = df["region"].map(
        {region: baseline.icu_capacity for region, baseline in baselines.items()}
    ).astype(float)
    return df


def add_baseline_percentages(df: pd.DataFrame) -> pd.DataFrame:
    """
    Occupancy relative to the capacity each region had when it started
    reporting, rather than to a capacity that grows during the year.
    """
    df = df.copy()
    for column, (occupied, capacity) in BASELINE_PERCENT_COLUMNS.items():
        df[column] = safe_ratio(df[occupied], df[capacity])
    return df


def derive_metrics(
    df: pd.DataFrame, icu_zero_is_not_reporting: bool = ICU_ZERO_IS_NOT_REPORTING
) -> Tuple[pd.DataFrame, Dict[str, BaselineCapacity]]:
    df = add_capacities(df)
    df = reconcile_covid_percent(df)
    count_over_capacity(df)
    baselines = extract_baselines(
        df, icu_zero_is_not_reporting=icu_zero_is_not_reporting
    )
    df = add_baselines(df, baselines)
    df = add_baseline_percentages(df)
    logger.info(f"Derived capacities and baselines for {len(baselines)} regions")
    return df, baselines
