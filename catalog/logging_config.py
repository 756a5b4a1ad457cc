"""Root logger setup for the API process."""

import logging

from catalog.config import LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger once, at process start."""
    logging.basicConfig(level=config.level.upper(), format=LOG_FORMAT)
    # uvicorn access lines duplicate what the services already log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
