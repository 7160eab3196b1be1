import numpy as np
import pandas as pd
import pytest

from occupancy.cleaning import (
    NON_MAINLAND_REGIONS,
    clean,
    drop_regions,
    missing_summary,
    replace_infinite_values,
)
from occupancy.harmonizer import METRIC_COLUMNS


@pytest.fixture(name="harmonized")
def make_harmonized():
    regions = ["NY", "AK", "HI", "PR", "DC", "CW", "CA"]
    df = pd.DataFrame(
        {
            "region": regions,
            "date": pd.Timestamp("2020-08-01"),
        }
    )
    for column in METRIC_COLUMNS:
        df[column] = 1.0
    df.loc[0, "icu_percent"] = np.inf
    df.loc[6, "icu_occupied"] = np.nan
    df.loc[6, "icu_percent"] = np.nan
    return df


def test__excluded_regions():
    assert set(NON_MAINLAND_REGIONS) == {"AK", "HI", "PR", "DC", "CW"}


def test__infinite_values_become_missing(harmonized):
    df = replace_infinite_values(harmonized, METRIC_COLUMNS)
    assert np.isnan(df.loc[0, "icu_percent"])
    assert not np.isinf(df[METRIC_COLUMNS].to_numpy()).any()
    assert np.isinf(harmonized.loc[0, "icu_percent"])


def test__negative_infinity_is_also_missing(harmonized):
    harmonized.loc[1, "covid_percent"] = -np.inf
    df = replace_infinite_values(harmonized, METRIC_COLUMNS)
    assert np.isnan(df.loc[1, "covid_percent"])


def test__region_exclusion_is_exhaustive(harmonized):
    df = drop_regions(harmonized)
    assert not df["region"].isin(NON_MAINLAND_REGIONS).any()
    assert list(df["region"]) == ["NY", "CA"]


def test__custom_region_exclusion(harmonized):
    df = drop_regions(harmonized, ["NY"])
    assert "NY" not in set(df["region"])
    assert len(df) == len(harmonized) - 1


def test__clean_preserves_missing_values(harmonized):
    df = clean(harmonized, METRIC_COLUMNS)
    assert list(df["region"]) == ["NY", "CA"]
    california = df.set_index("region").loc["CA"]
    assert np.isnan(california["icu_occupied"])
    assert np.isnan(california["icu_percent"])
    assert california["inpatient_occupied"] == 1.0


def test__missing_summary(harmonized):
    df = clean(harmonized, METRIC_COLUMNS)
    summary = missing_summary(df, METRIC_COLUMNS)
    assert summary.loc["NY", "icu_percent"] == 1
    assert summary.loc["CA", "icu_occupied"] == 1
    assert summary.loc["CA", "icu_percent"] == 1
    assert summary.to_numpy().sum() == 3
