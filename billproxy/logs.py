"""
Logging setup shared by the HTTP service and the CLI.
"""

import logging
import sys
from typing import IO, Optional

LOG_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}'
)


def setup_logging(log_level: str = "INFO", stream: Optional[IO[str]] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream, stdout by default
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(stream or sys.stdout)],
        force=True,
    )
