import logging
from typing import Iterable

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Alaska, Hawaii, Puerto Rico, District of Columbia and the country-wide rollup.
NON_MAINLAND_REGIONS = ("AK", "HI", "PR", "DC", "CW")


def replace_infinite_values(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """
    Infinite percentages come from a zero denominator upstream. They are
    turned into missing values so they cannot leak into any ratio.
    """
    columns = list(columns)
    df = df.copy()
    infinite = np.isinf(df[columns])
    n_infinite = int(infinite.to_numpy().sum())
    if n_infinite:
        logger.info(f"Replacing {n_infinite} infinite values with missing")
    df[columns] = df[columns].mask(infinite)
    return df


def drop_regions(
    df: pd.DataFrame, regions: Iterable[str] = NON_MAINLAND_REGIONS
) -> pd.DataFrame:
    regions = list(regions)
    excluded = df["region"].isin(regions)
    logger.info(
        f"Dropping {excluded.sum()} rows from excluded regions {regions}"
    )
    return df.loc[~excluded].reset_index(drop=True)


def missing_summary(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """
    Number of missing values per region (rows) and column.
    """
    columns = list(columns)
    return df[columns].isna().groupby(df["region"]).sum()


def clean(
    df: pd.DataFrame,
    metric_columns: Iterable[str],
    excluded_regions: Iterable[str] = NON_MAINLAND_REGIONS,
) -> pd.DataFrame:
    """
    Remove infinities and out of scope regions. Remaining missing values,
    mostly ICU figures from before a state started reporting them, are kept
    as they are and never imputed.
    """
    metric_columns = list(metric_columns)
    df = replace_infinite_values(df, metric_columns)
    df = drop_regions(df, excluded_regions)
    n_missing = int(missing_summary(df, metric_columns).to_numpy().sum())
    logger.info(f"{n_missing} missing values left after cleaning")
    return df
