"""TrainIQ training intelligence engine."""

from loguru import logger

__version__ = "0.1.0"

# Silent when imported as a library; setup_logger turns it back on
logger.disable("trainiq")
