import logging
from typing import Dict, NamedTuple, Optional

import pandas as pd

from occupancy.aggregation import nation_rollup, percent_matrices
from occupancy.cleaning import clean
from occupancy.harmonizer import METRIC_COLUMNS, harmonize
from occupancy.ingestion import Sources, default_config_filename, fetch_tables
from occupancy.metrics import (
    ICU_ZERO_IS_NOT_REPORTING,
    BaselineCapacity,
    derive_metrics,
)

logger = logging.getLogger(__name__)


class PipelineOutput(NamedTuple):
    """
    Everything the plotting and regression code is allowed to read.

    ``covid_percent`` in ``cleaned`` is always relative to the current
    inpatient capacity; the baseline version is ``covid_percent_baseline``.
    """

    cleaned: pd.DataFrame
    nation: pd.DataFrame
    matrices: Dict[str, pd.DataFrame]
    baselines: Dict[str, BaselineCapacity]


class OccupancyPipeline:
    def __init__(
        self,
        sources: Sources,
        icu_zero_is_not_reporting: bool = ICU_ZERO_IS_NOT_REPORTING,
    ):
        self.sources = sources
        self.icu_zero_is_not_reporting = icu_zero_is_not_reporting

    @classmethod
    def from_file(
        cls, config_filename=default_config_filename, **kwargs
    ) -> "OccupancyPipeline":
        return cls(sources=Sources.from_file(config_filename), **kwargs)

    def process(self, tables: Dict[str, pd.DataFrame]) -> PipelineOutput:
        """
        Run every stage on already fetched raw tables. Each stage returns a
        new data frame; the raw tables are left untouched.
        """
        df = harmonize(tables, self.sources)
        df = clean(
            df,
            metric_columns=METRIC_COLUMNS,
            excluded_regions=self.sources.excluded_regions,
        )
        df, baselines = derive_metrics(
            df, icu_zero_is_not_reporting=self.icu_zero_is_not_reporting
        )
        return PipelineOutput(
            cleaned=df,
            nation=nation_rollup(df),
            matrices=percent_matrices(df),
            baselines=baselines,
        )

    def run(self, tables: Optional[Dict[str, pd.DataFrame]] = None) -> PipelineOutput:
        if tables is None:
            tables = fetch_tables(self.sources)
        output = self.process(tables)
        logger.info(
            f"Pipeline finished: {len(output.cleaned)} rows, "
            f"{len(output.nation)} days, {len(output.matrices)} matrices"
        )
        return output
