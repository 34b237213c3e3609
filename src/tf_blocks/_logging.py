"""Logger setup for the command line tool."""

import logging
import logging.handlers
import sys
from pathlib import Path

__all__ = ["setup_logger"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "tf_blocks",
    log_file: str | None = None,
    level: str = "INFO",
    log_dir: str | Path = "logs",
    enable_rotation: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Configure ``name`` with a console handler and an optional log file.

    Console output goes to stderr so rendered HCL on stdout stays clean.
    Calling again replaces the handlers installed by a previous call.

    Args:
        name: Logger name; package modules log to children of ``tf_blocks``.
        log_file: File name inside ``log_dir``; None disables file logging.
        level: Level name for the logger and console handler.
        log_dir: Directory for ``log_file``, created if missing.
        enable_rotation: Use a size-based rotating file handler.
        max_bytes: Rotation threshold.
        backup_count: Rotated files to keep.

    Raises:
        ValueError: If ``level`` is not a logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(numeric_level)
    logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_dir) / log_file
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            if enable_rotation:
                file_handler: logging.Handler = logging.handlers.RotatingFileHandler(
                    log_path,
                    maxBytes=max_bytes,
                    backupCount=backup_count,
                    encoding="utf-8",
                )
            else:
                file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(
                f"Failed to create log file {log_path}: {e}. Logging to console only."
            )

    logger.propagate = False
    return logger
