import logging.config
import os

import yaml

from occupancy import paths
from .exc import (
    ConfigurationError,
    HarmonizationError,
    IngestionError,
    OccupancyError,
    RegressionError,
)
from .ingestion import Source, Sources
from .pipeline import OccupancyPipeline, PipelineOutput

default_logging_config_filename = (
        paths.configs_path /
        "logging.yaml"
)

if os.path.isfile(default_logging_config_filename):
    with open(default_logging_config_filename, 'rt') as f:
        log_config = yaml.safe_load(f.read())
        logging.config.dictConfig(log_config)
else:
    print("The logging config file does not exist.")
    log_file = os.path.join("./", "occupancy.log")
    logging.basicConfig(
        filename=log_file, level=logging.DEBUG
    )
