"""Logging configuration with console and rotating file handlers"""
import glob
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

KEEP_SESSIONS = 5


def setup_logging(
    log_file: Optional[str] = "logs/search-lab.log",
    console_level: Optional[int] = None,
    file_level: int = logging.DEBUG,
):
    """
    Configure logging with two destinations:
    - Console: Brief logs (LOG_LEVEL env var, INFO by default)
    - File: Detailed logs (DEBUG by default) with rotation

    Rotation policy:
    - New log file per session (timestamp-based naming)
    - Keep last 5 session files (auto-cleanup on startup)
    - Auto-rotate when file reaches 10MB

    Args:
        log_file: Base path to log file, or None for console only
        console_level: Console logging level (default: from LOG_LEVEL)
        file_level: File logging level (DEBUG = verbose)

    Returns:
        Path of this session's log file, or None
    """
    if console_level is None:
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        console_level = getattr(logging, level_name, logging.INFO)

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter in handlers

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    # Console handler - brief output
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)

    session_log = None
    if log_file:
        session_log = _session_log_path(Path(log_file))

        # maxBytes=10MB, backupCount=10 (keep 10 old files)
        file_handler = RotatingFileHandler(
            session_log,
            mode='a',
            maxBytes=10*1024*1024,  # 10MB
            backupCount=10,
            encoding='utf-8'
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    # NLTK is chatty at DEBUG
    logging.getLogger("nltk").setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log or 'disabled'}"
    )
    return session_log


def _session_log_path(log_path: Path) -> Path:
    """Create logs directory, prune old sessions and return a timestamped file path."""
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Cleanup old log files - keep only the newest KEEP_SESSIONS - 1, this session makes KEEP_SESSIONS
    log_pattern = str(log_path.parent / f"{log_path.stem}_*.log")
    existing_logs = sorted(glob.glob(log_pattern), reverse=True)  # Newest first
    for old_log in existing_logs[KEEP_SESSIONS - 1:]:
        try:
            Path(old_log).unlink()
        except OSError:
            pass  # Ignore deletion errors

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return log_path.parent / f"{log_path.stem}_{timestamp}.log"
