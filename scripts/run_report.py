import argparse
import logging

from occupancy import OccupancyPipeline, paths
from occupancy.regression import fit_icu_regression
from occupancy.report import ReportWriter
from occupancy.visualization import OccupancyPlotter

logger = logging.getLogger("occupancy.run_report")

parser = argparse.ArgumentParser(
    description="Build the 2020 U.S. hospital bed occupancy report."
)
parser.add_argument(
    "--sources",
    default=paths.configs_path / "defaults/sources.yaml",
    help="yaml file describing the three source csv files",
)
parser.add_argument(
    "--results", default="results", help="folder where the report is written"
)
parser.add_argument(
    "--configs", default=None, help="configs folder (read by occupancy.paths)"
)
parser.add_argument("--no-plots", action="store_true", help="skip the figures")
parser.add_argument(
    "--no-regression", action="store_true", help="skip the ICU regression"
)
args = parser.parse_args()

pipeline = OccupancyPipeline.from_file(args.sources)
output = pipeline.run()

writer = ReportWriter(args.results)
writer.write_output(output)

if not args.no_plots:
    OccupancyPlotter(output).save_all(writer.results_path / "plots")

if not args.no_regression:
    results = fit_icu_regression(output.cleaned)
    writer.write_regression(results)
    print(results.summary())

logger.info(f"Report written to {writer.results_path}")
