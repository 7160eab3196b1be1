from .plotter import OccupancyPlotter
