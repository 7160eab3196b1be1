import numpy as np
import pandas as pd
import pytest
import yaml

from occupancy import OccupancyPipeline, paths
from occupancy.cleaning import NON_MAINLAND_REGIONS


def test__single_region_scenario(sources, scenario_tables):
    output = OccupancyPipeline(sources).process(scenario_tables)
    cleaned = output.cleaned
    assert list(cleaned["region"]) == ["NY", "NY"]
    assert cleaned["inpatient_capacity"].tolist() == pytest.approx([100, 100])
    assert cleaned.loc[0, "icu_percent"] == 0.5
    assert np.isnan(cleaned.loc[1, "icu_percent"])
    assert cleaned["covid_percent"].tolist() == pytest.approx([0.1, 0.15])
    assert cleaned["baseline_inpatient_capacity"].tolist() == pytest.approx([100, 100])
    assert output.baselines["NY"].icu_capacity == pytest.approx(10)


def test__no_infinite_values_in_output(sources, scenario_tables):
    output = OccupancyPipeline(sources).process(scenario_tables)
    numbers = output.cleaned.select_dtypes("number").to_numpy()
    assert not np.isinf(numbers).any()
    assert not np.isinf(output.nation.to_numpy()).any()


def test__excluded_regions_are_dropped(synthetic_output, synthetic_tables):
    cleaned = synthetic_output.cleaned
    assert not cleaned["region"].isin(NON_MAINLAND_REGIONS).any()
    for region in ["NY", "CA", "TX"]:
        assert (cleaned["region"] == region).sum() == 20
    assert "AK" not in synthetic_output.baselines
    assert len(synthetic_tables["inpatient"]) == 80


def test__late_icu_reporting_baseline(synthetic_output):
    baseline = synthetic_output.baselines["NY"]
    assert baseline.icu_date == pd.Timestamp("2020-08-04")
    assert baseline.icu_capacity == pytest.approx(200)
    assert baseline.inpatient_date == pd.Timestamp("2020-08-01")
    assert baseline.inpatient_capacity == pytest.approx(2000)


def test__nation_is_sum_of_regions(synthetic_output):
    cleaned = synthetic_output.cleaned
    first_day = pd.Timestamp("2020-08-01")
    nation = synthetic_output.nation.loc[first_day]
    day = cleaned[cleaned["date"] == first_day]
    assert nation["inpatient_occupied"] == day["inpatient_occupied"].sum()
    assert nation["icu_capacity"] == pytest.approx(400 + 600)
    assert nation["baseline_inpatient_capacity"] == pytest.approx(2000 + 4000 + 6000)


def test__pipeline_from_file(tmp_path, sources, scenario_tables):
    config = {
        "region_column": "state",
        "date_column": "collection_date",
        "excluded_regions": ["CA"],
        "sources": {},
    }
    for name, table in scenario_tables.items():
        filename = tmp_path / f"{name}.csv"
        table.to_csv(filename, index=False)
        config["sources"][name] = {
            "url": str(filename),
            "occupied_column": sources[name].occupied_column,
            "percent_column": sources[name].percent_column,
        }
    config_filename = tmp_path / "sources.yaml"
    with open(config_filename, "w") as f:
        yaml.dump(config, f)
    pipeline = OccupancyPipeline.from_file(config_filename)
    assert pipeline.sources.excluded_regions == ("CA",)
    output = pipeline.run()
    assert output.cleaned["inpatient_capacity"].tolist() == pytest.approx([100, 100])
    assert np.isnan(output.cleaned.loc[1, "icu_occupied"])


def test__default_pipeline_config():
    pipeline = OccupancyPipeline.from_file(paths.configs_path / "defaults/sources.yaml")
    assert pipeline.sources.names == ["inpatient", "covid", "icu"]
    assert pipeline.icu_zero_is_not_reporting
