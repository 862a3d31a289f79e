"""Logging configuration for the command line tool.

Console output plus an optional append-only log file shared by every batch
in the run.
"""

import logging
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(
    log_level: int | str = logging.INFO,
    log_file: str | None = None,
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Minimum level, as a logging constant or name
        log_file: Optional path of a log file, opened in append mode
        log_format: Format string for all handlers
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            # A missing log file must not stop the run
            logging.warning(f"⚠️  Could not open log file {log_file}: {e}")
        else:
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.debug(f"Logging to file: {log_file}")

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
