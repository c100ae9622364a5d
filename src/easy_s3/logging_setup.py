"""
The library itself only creates module level loggers,
applications using it can call configure_logging to get the log output on stdout.
"""

import logging
import sys

from easy_s3.config import settings


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or settings.log_level, handlers=[logging.StreamHandler(sys.stdout)])
