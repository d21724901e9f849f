"""Reading and writing site check reports."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime objects."""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def save_report(report: dict, path: Union[str, Path]) -> Path:
    """Write ``report`` as indented JSON, creating parent directories.

    Args:
        report: Report dict from ReportGenerator
        path: Destination file

    Returns:
        Path the report was written to
    """
    filepath = Path(path)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, cls=DateTimeEncoder, ensure_ascii=False)
    logger.info(f"Report saved to {filepath}")
    return filepath


def load_report(path: Union[str, Path]) -> dict:
    """Load a report written by save_report.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    filepath = Path(path)
    with open(filepath, "r", encoding="utf-8") as f:
        report = json.load(f)
    logger.debug(f"Loaded report with {len(report.get('pages', {}))} pages from {filepath}")
    return report
