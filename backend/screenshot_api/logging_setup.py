"""
Logging configuration for the screenshot API
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO, format_string: Optional[str] = None) -> None:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: Logging level, as a number or a name such as "DEBUG"
        format_string: Log format string
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(console_handler)

    # Quiet the Playwright driver's asyncio debug output
    logging.getLogger("asyncio").setLevel(logging.WARNING)
