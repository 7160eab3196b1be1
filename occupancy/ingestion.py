import io
import logging
import re
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

import pandas as pd
import requests
import yaml

from occupancy import paths
from occupancy.cleaning import NON_MAINLAND_REGIONS
from occupancy.exc import ConfigurationError, IngestionError

logger = logging.getLogger(__name__)

default_config_filename = paths.configs_path / "defaults/sources.yaml"

SOURCE_NAMES = ("inpatient", "covid", "icu")

default_confidence_interval_columns = (
    "Count LL",
    "Count UL",
    "Percentage LL",
    "Percentage UL",
)


class Source:
    """
    One published CSV table of estimated bed occupancy.

    Parameters
    ----------
    name
        short metric name, one of ``SOURCE_NAMES``. It prefixes the
        canonical column names, e.g. ``icu_occupied``.
    url
        http(s) address of the CSV, or a path on the local filesystem
    occupied_column
        header of the occupied bed count column
    percent_column
        header of the occupancy percentage column
    """

    def __init__(
        self, name: str, url: str, occupied_column: str, percent_column: str
    ):
        self.name = name
        self.url = str(url)
        self.occupied_column = occupied_column
        self.percent_column = percent_column

    @property
    def is_remote(self) -> bool:
        return urlparse(self.url).scheme in ("http", "https")

    @property
    def occupied_name(self) -> str:
        return f"{self.name}_occupied"

    @property
    def percent_name(self) -> str:
        return f"{self.name}_percent"

    def __repr__(self):
        return f"Source({self.name!r}, {self.url!r})"


class Sources:
    def __init__(
        self,
        sources: List[Source],
        region_column: str = "state",
        date_column: str = "collection_date",
        confidence_interval_columns: Tuple[str] = default_confidence_interval_columns,
        percent_scale: float = 1.0,
        excluded_regions: Tuple[str] = NON_MAINLAND_REGIONS,
        timeout: Optional[float] = 60,
    ):
        names = [source.name for source in sources]
        if sorted(names) != sorted(SOURCE_NAMES):
            raise ConfigurationError(
                f"Sources must be exactly {SOURCE_NAMES}, got {names}"
            )
        self.sources = list(sources)
        self.region_column = region_column
        self.date_column = date_column
        self.confidence_interval_columns = tuple(confidence_interval_columns)
        self.percent_scale = percent_scale
        self.excluded_regions = tuple(excluded_regions)
        self.timeout = timeout

    @classmethod
    def from_file(cls, config_filename=default_config_filename) -> "Sources":
        with open(config_filename) as f:
            config = yaml.load(f, Loader=yaml.FullLoader)
        sources = [
            Source(name=name, **source_config)
            for name, source_config in config.pop("sources").items()
        ]
        return cls(sources=sources, **config)

    def __iter__(self):
        return iter(self.sources)

    def __len__(self):
        return len(self.sources)

    def __getitem__(self, name: str) -> Source:
        for source in self.sources:
            if source.name == name:
                return source
        raise KeyError(name)

    @property
    def names(self) -> List[str]:
        return [source.name for source in self.sources]


single_quoted_field = re.compile(r"(^|,)'([^'\r\n]*)'(?=,|\r?$)", re.MULTILINE)


def _double_quote(match) -> str:
    return match.group(1) + '"' + match.group(2).replace('"', '""') + '"'


def normalize_single_quotes(text: str) -> str:
    """
    Some publishers quote fields with single quotes, commas included, e.g.
    ``'NY',2020-08-01,'1,000'``. The csv parser takes one quote character,
    so whole single-quoted fields are rewritten with double quotes first.
    Apostrophes inside a field are left alone.
    """
    return single_quoted_field.sub(_double_quote, text)


def read_csv_text(text: str, name: str = "") -> pd.DataFrame:
    """
    Parse csv text. Counts may carry thousands separators. A row with more
    fields than the header raises instead of being shifted onto an index.
    """
    text = normalize_single_quotes(text)
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", pd.errors.ParserWarning)
            df = pd.read_csv(
                io.StringIO(text),
                sep=",",
                quotechar='"',
                thousands=",",
                index_col=False,
            )
    except (
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
        pd.errors.ParserWarning,
    ) as e:
        raise IngestionError(f"Could not parse {name} csv: {e}") from e
    return df.rename(columns=lambda column: str(column).strip())


def fetch_table(source: Source, timeout: Optional[float] = 60) -> pd.DataFrame:
    """
    Download (or read from disk) the csv described by ``source``.

    Raises
    ------
    IngestionError
        on any network, file or parsing failure. There are no retries.
    """
    if source.is_remote:
        logger.info(f"Downloading {source.name} data from {source.url}")
        try:
            response = requests.get(source.url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise IngestionError(
                f"Could not download {source.name} data from {source.url}: {e}"
            ) from e
        text = response.text
    else:
        logger.info(f"Reading {source.name} data from {source.url}")
        try:
            text = Path(source.url).read_text(encoding="utf-8")
        except OSError as e:
            raise IngestionError(
                f"Could not read {source.name} data from {source.url}: {e}"
            ) from e
    df = read_csv_text(text, name=source.name)
    logger.info(f"Loaded {len(df)} rows of {source.name} data")
    return df


def fetch_tables(sources: Sources) -> Dict[str, pd.DataFrame]:
    return {
        source.name: fetch_table(source, timeout=sources.timeout)
        for source in sources
    }
