import logging
from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import matplotlib.ticker as mtick
import seaborn as sns

from occupancy.aggregation import MATRIX_COLUMNS

logger = logging.getLogger(__name__)

labels = {
    "inpatient_occupied": "All inpatients",
    "covid_occupied": "COVID-19 inpatients",
    "non_covid_inpatient_occupied": "Non COVID-19 inpatients",
    "icu_occupied": "ICU patients",
    "inpatient_percent": "Inpatient occupancy",
    "covid_percent": "COVID-19 occupancy",
    "icu_percent": "ICU occupancy",
    "inpatient_percent_baseline": "Inpatient occupancy (baseline capacity)",
    "covid_percent_baseline": "COVID-19 occupancy (baseline capacity)",
    "icu_percent_baseline": "ICU occupancy (baseline capacity)",
}


class OccupancyPlotter:
    """
    Line charts and heatmaps of the pipeline output.

    Parameters
    ----------
    output
        a ``PipelineOutput``. Only its ``cleaned``, ``nation`` and
        ``matrices`` members are read.
    """

    def __init__(self, output):
        self.cleaned = output.cleaned
        self.nation = output.nation
        self.matrices = output.matrices

    def _format_date_axis(self, ax):
        ax.xaxis.set_major_locator(mdates.MonthLocator())
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%b"))

    def plot_national_occupancy(self):
        "Occupied beds across the country, with baseline capacities for reference."
        fig, ax = plt.subplots(figsize=(10, 5))
        for column in [
            "inpatient_occupied",
            "covid_occupied",
            "non_covid_inpatient_occupied",
            "icu_occupied",
        ]:
            ax.plot(self.nation.index, self.nation[column], label=labels[column])
        ax.plot(
            self.nation.index,
            self.nation["baseline_inpatient_capacity"],
            linestyle="--",
            color="gray",
            label="Baseline inpatient capacity",
        )
        ax.plot(
            self.nation.index,
            self.nation["baseline_icu_capacity"],
            linestyle=":",
            color="gray",
            label="Baseline ICU capacity",
        )
        ax.set_ylabel("Beds")
        ax.set_title("National bed occupancy")
        self._format_date_axis(ax)
        ax.legend(loc="upper left", fontsize="small")
        return fig

    def plot_national_percentages(self):
        fig, ax = plt.subplots(figsize=(10, 5))
        for column in ["inpatient_percent", "covid_percent", "icu_percent"]:
            ax.plot(self.nation.index, self.nation[column], label=labels[column])
        ax.yaxis.set_major_formatter(mtick.PercentFormatter(1.0))
        ax.set_ylabel("Occupied beds")
        ax.set_title("National occupancy over current capacity")
        self._format_date_axis(ax)
        ax.legend(loc="upper left", fontsize="small")
        return fig

    def plot_region_percentages(
        self, column: str = "inpatient_percent", regions: Optional[List[str]] = None
    ):
        "One line per region; missing days are left as gaps."
        matrix = self.matrices[column]
        if regions is not None:
            matrix = matrix[regions]
        fig, ax = plt.subplots(figsize=(10, 5))
        for region in matrix.columns:
            ax.plot(matrix.index, matrix[region], linewidth=0.8, alpha=0.7)
        ax.yaxis.set_major_formatter(mtick.PercentFormatter(1.0))
        ax.set_title(labels.get(column, column) + " by region")
        self._format_date_axis(ax)
        return fig

    def plot_heatmap(self, column: str):
        "Regions on the y axis, dates on the x axis."
        data = self.matrices[column].T
        data.columns = data.columns.strftime("%Y-%m-%d")
        fig, ax = plt.subplots(figsize=(14, 10))
        sns.heatmap(
            data,
            ax=ax,
            cmap="rocket_r",
            xticklabels=max(len(data.columns) // 12, 1),
            yticklabels=True,
            cbar_kws={"format": mtick.PercentFormatter(1.0)},
        )
        ax.set_xlabel("")
        ax.set_ylabel("")
        ax.set_title(labels.get(column, column))
        return fig

    def save_all(self, save_dir) -> List[Path]:
        save_dir = Path(save_dir)
        save_dir.mkdir(parents=True, exist_ok=True)
        figures = {
            "national_occupancy": self.plot_national_occupancy,
            "national_percentages": self.plot_national_percentages,
            "region_inpatient_percent": self.plot_region_percentages,
        }
        for column in MATRIX_COLUMNS:
            if column in self.matrices:
                figures[f"heatmap_{column}"] = (
                    lambda column=column: self.plot_heatmap(column)
                )
        saved = []
        for name, plot in figures.items():
            fig = plot()
            filename = save_dir / f"{name}.png"
            fig.savefig(filename, dpi=150, bbox_inches="tight")
            plt.close(fig)
            saved.append(filename)
        logger.info(f"Saved {len(saved)} figures to {save_dir}")
        return saved
