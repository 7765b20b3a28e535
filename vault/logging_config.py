"""
Logging setup for the portal service.

Two destinations:
- Console: brief lines at the configured LOG_LEVEL
- Session file: detailed lines (DEBUG by default), one file per server start,
  rotated at 10MB; only the newest LOG_RETENTION session files are kept
"""
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Union

LOG_RETENTION = 5
MAX_LOG_BYTES = 10 * 1024 * 1024
CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'

# Chatty per-request loggers; WARNING and above still reach both handlers
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "urllib3", "google_genai")

Level = Union[int, str]


def resolve_level(level: Level, default: int = logging.INFO) -> int:
    """
    Turn a level name ("debug", "WARNING") or number into a logging level.

    Examples:
        >>> resolve_level("debug")
        10
        >>> resolve_level("loud")
        20
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else default


def prune_session_logs(log_dir: Path, stem: str, keep: int = LOG_RETENTION) -> List[Path]:
    """Delete all but the newest `keep` session files named <stem>_<timestamp>.log"""
    sessions = sorted(log_dir.glob(f"{stem}_*.log"), reverse=True)
    removed = []
    for old_log in sessions[keep:]:
        try:
            old_log.unlink()
        except FileNotFoundError:
            continue  # Another worker removed it first
        removed.append(old_log)
    return removed


def setup_logging(
    log_file: str = "logs/agreement-vault.log",
    console_level: Level = logging.INFO,
    file_level: Level = logging.DEBUG
) -> Path:
    """
    Replace root handlers with console + session file handlers.

    Args:
        log_file: Base log path; the session file is <stem>_<YYYYmmdd_HHMMSS>.log beside it
        console_level: Console level, name or number (LOG_LEVEL)
        file_level: Session file level, name or number

    Returns:
        Path of the session log file
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Leave room for the session about to start
    prune_session_logs(log_path.parent, log_path.stem, keep=LOG_RETENTION - 1)

    started = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{started}.log"

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolve_level(console_level))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    session_handler = RotatingFileHandler(
        session_log,
        maxBytes=MAX_LOG_BYTES,
        backupCount=10,
        encoding='utf-8'
    )
    session_handler.setLevel(resolve_level(file_level, default=logging.DEBUG))
    session_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers do the filtering
    root_logger.handlers = [console_handler, session_handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_handler.level)}, "
        f"file={session_log} ({logging.getLevelName(session_handler.level)})"
    )
    return session_log
