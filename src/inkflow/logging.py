import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO", log_file: str | None = None):
    """
    Configures the root logger for inkflow.

    Args:
        log_level: The minimum log level to output (e.g., "INFO", "DEBUG").
            Unknown names fall back to INFO.
        log_file: If provided, logs are appended to this file. Otherwise they
            go to stdout.
    """
    level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop handlers from a previous call so reconfiguring never duplicates output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if log_file:
        handler = logging.FileHandler(log_file, mode="a")
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Returns the logger for ``name`` (typically ``__name__``)."""
    return logging.getLogger(name)
