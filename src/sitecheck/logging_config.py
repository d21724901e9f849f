"""Logging configuration for the site checker.

Crawl progress goes to stderr so the summary printed on stdout stays
readable when piped. An optional log file gets timestamps and logger names.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

CONSOLE_FORMAT = '%(levelname)-7s %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# HTTP clients used for probes and the sitemap log every request at INFO
QUIET_LOGGERS = ('httpx', 'httpcore', 'urllib3', 'asyncio')


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """Configure logging for a site check run.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Optional log file path, parent directories are created
        format_string: Optional format used for both console and file output
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(format_string or CONSOLE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(format_string or FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
