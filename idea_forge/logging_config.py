"""Logging setup for the Idea Forge backend."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the ``idea_forge`` logger."""

    package_logger = logging.getLogger("idea_forge")
    package_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicate logs when the app
    # factory runs more than once (tests build several apps).
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger
