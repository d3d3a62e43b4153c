"""Tests for log file setup and housekeeping."""

import os
import time

import pytest
from loguru import logger

from formfiller.logging_config import (
    cleanup_old_logs,
    get_current_log_file,
    setup_daily_log_rotation,
    setup_file_logging,
)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


def test_file_logging_writes_debug_lines(tmp_path):
    log_file = setup_file_logging(log_level="WARNING", console_logging=False, logs_dir=tmp_path / "logs")

    logger.debug("🔧 Filling 'City'")
    logger.remove()

    with open(log_file, encoding="utf-8") as f:
        content = f.read()
    assert os.path.basename(log_file).startswith("formfiller_")
    assert "🔧 Filling 'City'" in content
    assert "| DEBUG" in content


def test_daily_rotation_writes_single_file(tmp_path):
    logs_dir = tmp_path / "daily"
    log_file = setup_daily_log_rotation(log_level="ERROR", logs_dir=logs_dir)

    logger.debug("🔽 Selecting 'Mobile' in 'Phone Device Type'")
    logger.remove()

    assert log_file == str(logs_dir / "formfiller.log")
    with open(log_file, encoding="utf-8") as f:
        content = f.read()
    assert "Daily log rotation configured" in content
    assert "🔽 Selecting 'Mobile'" in content
    assert get_current_log_file(logs_dir) == log_file


def test_current_log_file(tmp_path):
    assert get_current_log_file(tmp_path / "missing") is None

    older = tmp_path / "formfiller_20240101_000000.log"
    newer = tmp_path / "formfiller_20240102_000000.log"
    older.write_text("a")
    newer.write_text("b")
    os.utime(older, (time.time() - 100, time.time() - 100))

    assert get_current_log_file(tmp_path) == str(newer)


def test_rotating_log_used_when_no_timestamped_file(tmp_path):
    rotating = tmp_path / "formfiller.log"
    rotating.write_text("x")

    assert get_current_log_file(tmp_path) == str(rotating)


def test_cleanup_old_logs(tmp_path):
    old = tmp_path / "formfiller_20200101_000000.log"
    fresh = tmp_path / "formfiller_20990101_000000.log"
    unrelated = tmp_path / "other_20200101.log"
    for path in (old, fresh, unrelated):
        path.write_text("x")
    stale = time.time() - 40 * 24 * 60 * 60
    os.utime(old, (stale, stale))
    os.utime(unrelated, (stale, stale))

    assert cleanup_old_logs(days_to_keep=30, logs_dir=tmp_path) == 1
    assert not old.exists()
    assert fresh.exists()
    assert unrelated.exists()
