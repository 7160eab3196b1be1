import logging
from pathlib import Path

from occupancy.metrics import baseline_table

logger = logging.getLogger(__name__)


class ReportWriter:
    """
    Saves the pipeline artifacts under ``results_path``:

    - cleaned.csv: one row per region and date
    - nation.csv: national daily rollup
    - baselines.csv: baseline capacities per region
    - matrices/<column>.csv: date by region percent matrices
    - regression_summary.txt: ICU regression summary, when given
    """

    def __init__(self, results_path="results"):
        self.results_path = Path(results_path)
        self.results_path.mkdir(parents=True, exist_ok=True)

    def write_output(self, output):
        output.cleaned.to_csv(self.results_path / "cleaned.csv", index=False)
        output.nation.to_csv(self.results_path / "nation.csv")
        baseline_table(output.baselines).to_csv(self.results_path / "baselines.csv")
        matrices_path = self.results_path / "matrices"
        matrices_path.mkdir(exist_ok=True)
        for column, matrix in output.matrices.items():
            matrix.to_csv(matrices_path / f"{column}.csv")
        logger.info(f"Wrote pipeline output to {self.results_path}")

    def write_regression(self, results):
        with open(self.results_path / "regression_summary.txt", "w") as f:
            f.write(results.summary().as_text())
