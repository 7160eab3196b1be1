class OccupancyError(Exception):
    pass


class IngestionError(OccupancyError):
    pass


class HarmonizationError(OccupancyError):
    pass


class RegressionError(OccupancyError):
    pass


class ConfigurationError(OccupancyError):
    pass
