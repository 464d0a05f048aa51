import logging
import os
from logging.handlers import RotatingFileHandler

LOGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
DEFAULT_LOG_FILE = "snapshots.log"


def _resolve_level(level) -> int:
    """Accept a logging constant, a level name, or None (reads LOG_LEVEL)."""
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return logging.getLevelNamesMapping().get(level.strip().upper(), logging.INFO)
    return level


def setup_logging(name="snapshots", log_file=DEFAULT_LOG_FILE, level=None, max_bytes=5*1024*1024, backup_count=3):
    """Set up logging with a rotating file handler and a stream handler.

    Every scheduled job logs through here, so the log files under ./logs/
    are the audit trail of which keys were published and which were skipped.
    Log files go to the project's ./logs/ directory unless an absolute path
    is provided (e.g. tests using tmpdir).

    Args:
        name: The name of the logger.
        log_file: The name of the log file.
        level: Logging level or level name; defaults to $LOG_LEVEL, then INFO.
        max_bytes: The maximum size of the log file.
        backup_count: The number of backup log files.

    Returns:
        logger: The logger object.

    Example usage:
    from logging_config import setup_logging
    logger = setup_logging(__name__, log_file="warm_set_populator.log")
    """
    logger = logging.getLogger(name)
    # Clear existing handlers to avoid duplicate logs
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s %(levelname)-8s "
                                    "[%(filename)s:%(lineno)d %(funcName)s()] "
                                    "%(message)s")

    os.makedirs(LOGS_DIR, exist_ok=True)
    if os.path.isabs(log_file):
        log_path = log_file
    else:
        log_file = os.path.basename(log_file)
        log_path = os.path.join(LOGS_DIR, log_file)

    file_handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    logger.setLevel(_resolve_level(level))
    return logger
