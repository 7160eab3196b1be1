import logging
from typing import Dict, List

import pandas as pd

from occupancy.exc import HarmonizationError
from occupancy.ingestion import SOURCE_NAMES, Source, Sources

logger = logging.getLogger(__name__)

KEY_COLUMNS = ["region", "date"]

METRIC_COLUMNS = [
    f"{name}_{kind}" for name in SOURCE_NAMES for kind in ("occupied", "percent")
]

PERCENT_COLUMNS = [column for column in METRIC_COLUMNS if column.endswith("_percent")]

OCCUPIED_COLUMNS = [
    column for column in METRIC_COLUMNS if column.endswith("_occupied")
]


def suffix_ambiguous_columns(
    df: pd.DataFrame, source: Source, ambiguous_columns
) -> pd.DataFrame:
    """
    Every source publishes confidence interval bounds under the same
    headers, so they are tagged with the source name before joining.
    """
    return df.rename(
        columns={
            column: f"{column} {source.name}"
            for column in ambiguous_columns
            if column in df.columns
        }
    )


def _prepare_source_table(
    df: pd.DataFrame, source: Source, sources: Sources
) -> pd.DataFrame:
    required = [
        sources.region_column,
        sources.date_column,
        source.occupied_column,
        source.percent_column,
    ]
    missing = [column for column in required if column not in df.columns]
    if missing:
        raise HarmonizationError(
            f"{source.name} table is missing columns {missing}"
        )
    df = suffix_ambiguous_columns(df, source, sources.confidence_interval_columns)
    interval_columns = [
        f"{column} {source.name}"
        for column in sources.confidence_interval_columns
        if f"{column} {source.name}" in df.columns
    ]
    df = df[required + interval_columns].rename(
        columns={
            sources.region_column: "region",
            sources.date_column: "date",
            source.occupied_column: source.occupied_name,
            source.percent_column: source.percent_name,
        }
    )
    df["date"] = pd.to_datetime(df["date"])
    for column in [source.occupied_name, source.percent_name]:
        df[column] = pd.to_numeric(df[column], errors="coerce").astype(float)
    df[source.percent_name] = df[source.percent_name] / sources.percent_scale
    duplicated = df.duplicated(KEY_COLUMNS)
    if duplicated.any():
        raise HarmonizationError(
            f"{source.name} table has {duplicated.sum()} duplicated "
            f"(region, date) rows"
        )
    return df


def join_sources(frames: List[pd.DataFrame]) -> pd.DataFrame:
    """
    Left join every frame onto the first one, so a region or date that a
    later source does not report keeps its row with missing values.
    """
    joined = frames[0]
    for frame in frames[1:]:
        joined = joined.merge(frame, how="left", on=KEY_COLUMNS)
    return joined


def harmonize(tables: Dict[str, pd.DataFrame], sources: Sources) -> pd.DataFrame:
    """
    Join the raw source tables into one wide table.

    Parameters
    ----------
    tables
        raw tables keyed by source name, as returned by ``fetch_tables``
    sources
        the sources description the tables were fetched with. The first
        source anchors the join.

    Returns
    -------
    A data frame with columns ``region``, ``date`` and the six metric
    columns, sorted by region and date.
    """
    frames = [
        _prepare_source_table(tables[source.name], source, sources)
        for source in sources
    ]
    joined = join_sources(frames)
    joined = joined[KEY_COLUMNS + METRIC_COLUMNS]
    joined = joined.sort_values(KEY_COLUMNS, kind="mergesort").reset_index(drop=True)
    logger.info(
        f"Harmonized {len(sources)} sources into {len(joined)} rows "
        f"for {joined['region'].nunique()} regions"
    )
    return joined
