"""
Logging setup for formfiller runs.

Every component logs through loguru; these helpers only decide where the
lines go. A run's log doubles as the operator's to-do list for the fields
the report marks as failed.
"""

import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | {message}"
LOG_PREFIX = "formfiller"


def setup_file_logging(
    log_level: str = "DEBUG",
    console_logging: bool = True,
    logs_dir: Union[str, Path] = "logs"
) -> str:
    """
    Send loguru output to a timestamped file under `logs_dir`.

    Args:
        log_level: minimum level for the console sink (the file always gets DEBUG)
        console_logging: also log to stderr
        logs_dir: directory for log files, created when missing

    Returns:
        Path of the log file.
    """
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = logs_dir / f"{LOG_PREFIX}_{timestamp}.log"

    # Remove default loguru handler
    logger.remove()
    logger.add(
        log_filename,
        format=LOG_FORMAT,
        level="DEBUG",
        rotation=None,
        retention=None,
        encoding='utf-8'
    )
    if console_logging:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level)

    logger.info(f"📝 Logs will be saved to: {log_filename}")
    return str(log_filename)


def setup_daily_log_rotation(
    log_level: str = "DEBUG",
    logs_dir: Union[str, Path] = "logs"
) -> str:
    """
    Log to a single file rotated at midnight. Rotated files are kept 30 days.
    """
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_filename = logs_dir / f"{LOG_PREFIX}.log"

    logger.remove()
    logger.add(
        log_filename,
        format=LOG_FORMAT,
        level="DEBUG",
        rotation="00:00",  # Rotate at midnight
        retention="30 days",
        encoding='utf-8'
    )
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level)

    logger.info(f"📝 Daily log rotation configured. Logs saved to: {log_filename}")
    return str(log_filename)


def get_current_log_file(logs_dir: Union[str, Path] = "logs") -> Optional[str]:
    """
    Get the path to the most recent log file, if any.
    """
    logs_dir = Path(logs_dir)
    if not logs_dir.exists():
        return None

    log_files = list(logs_dir.glob(f"{LOG_PREFIX}_*.log"))
    if not log_files:
        rotating_log = logs_dir / f"{LOG_PREFIX}.log"
        if rotating_log.exists():
            return str(rotating_log)
        return None

    most_recent = max(log_files, key=lambda f: f.stat().st_mtime)
    return str(most_recent)


def cleanup_old_logs(days_to_keep: int = 30, logs_dir: Union[str, Path] = "logs") -> int:
    """
    Delete timestamped log files older than `days_to_keep` days.

    Returns:
        Number of files deleted.
    """
    logs_dir = Path(logs_dir)
    if not logs_dir.exists():
        return 0

    cutoff_time = time.time() - (days_to_keep * 24 * 60 * 60)
    deleted = 0
    for log_file in logs_dir.glob(f"{LOG_PREFIX}_*.log"):
        if log_file.stat().st_mtime < cutoff_time:
            try:
                log_file.unlink()
                deleted += 1
                logger.debug(f"🗑️ Deleted old log file: {log_file}")
            except OSError as e:
                logger.warning(f"Failed to delete {log_file}: {e}")
    return deleted
