from glob import glob
from os import remove

import numpy as np
import pandas as pd
import pytest

from occupancy import OccupancyPipeline, Source, Sources


@pytest.fixture(
    autouse=True,
    scope="session"
)
def remove_log_files():
    yield
    for file in glob("*.log*"):
        remove(file)


@pytest.fixture(name="sources")
def make_sources():
    return Sources(
        [
            Source(
                "inpatient",
                "inpatient.csv",
                "Inpatient Beds Occupied Estimated",
                "Percentage of Inpatient Beds Occupied Estimated",
            ),
            Source(
                "covid",
                "covid.csv",
                "Inpatient Beds Occupied by COVID-19 Patients Estimated",
                "Percentage of Inpatient Beds Occupied by COVID-19 Patients Estimated",
            ),
            Source(
                "icu",
                "icu.csv",
                "Staffed Adult ICU Beds Occupied Estimated",
                "Percentage of Staffed Adult ICU Beds Occupied Estimated",
            ),
        ]
    )


@pytest.fixture(name="make_raw_table")
def raw_table_factory():
    def make_raw_table(source, states, dates, occupied, percent):
        occupied = np.asarray(occupied, dtype=float)
        percent = np.asarray(percent, dtype=float)
        return pd.DataFrame(
            {
                "state": states,
                "collection_date": dates,
                source.occupied_column: occupied,
                "Count LL": occupied * 0.9,
                "Count UL": occupied * 1.1,
                source.percent_column: percent,
                "Percentage LL": percent * 0.9,
                "Percentage UL": percent * 1.1,
            }
        )

    return make_raw_table


@pytest.fixture(name="scenario_tables")
def make_scenario_tables(sources, make_raw_table):
    """
    One state, two days. The second ICU figure is infinite.
    """
    states = ["NY", "NY"]
    dates = ["2020-08-01", "2020-08-02"]
    return {
        "inpatient": make_raw_table(
            sources["inpatient"], states, dates, [80, 90], [0.8, 0.9]
        ),
        "covid": make_raw_table(
            sources["covid"], states, dates, [10, 15], [0.1, 0.15]
        ),
        "icu": make_raw_table(
            sources["icu"], states, dates, [5, np.inf], [0.5, np.inf]
        ),
    }


@pytest.fixture(name="synthetic_tables")
def make_synthetic_tables(sources, make_raw_table):
    """
    Three mainland states and Alaska over twenty days. New York does not
    report ICU beds during the first three days.
    """
    regions = ["NY", "CA", "TX", "AK"]
    dates = pd.date_range("2020-08-01", periods=20).strftime("%Y-%m-%d")
    rows = {"inpatient": [], "covid": [], "icu": []}
    states, days = [], []
    for i, region in enumerate(regions):
        for day, date in enumerate(dates):
            states.append(region)
            days.append(date)
            inpatient_capacity = 2000 * (i + 1) + 5 * day
            inpatient = 1000 * (i + 1) + 10 * day
            covid = 100 * (i + 1) + 3 * day + (day ** 2) % 7
            icu_capacity = 200 * (i + 1)
            icu = 50 * (i + 1) + day
            if region == "NY" and day < 3:
                icu = 0
            rows["inpatient"].append((inpatient, inpatient / inpatient_capacity))
            rows["covid"].append((covid, covid / inpatient_capacity))
            rows["icu"].append((icu, icu / icu_capacity))
    return {
        name: make_raw_table(
            sources[name],
            states,
            days,
            [occupied for occupied, _ in values],
            [percent for _, percent in values],
        )
        for name, values in rows.items()
    }


@pytest.fixture(name="synthetic_output")
def run_synthetic_pipeline(sources, synthetic_tables):
    return OccupancyPipeline(sources).process(synthetic_tables)
