"""Application Bootstrap (Entry Point)."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .cli import app
from .config import Settings, get_settings

# Rotation keeps at most 4 x 5MB of log history next to the library documents
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

FILE_HANDLER_NAME = "studylib.file"
CONSOLE_HANDLER_NAME = "studylib.console"

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def _load_settings() -> Optional[Settings]:
    try:
        return get_settings()
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        print(f"Warning: invalid STUDYLIB_* settings, using defaults: {e}", file=sys.stderr)
        return None


def _file_handler(log_file: Path) -> Optional[RotatingFileHandler]:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"Warning: cannot write log file {log_file}: {e}", file=sys.stderr)
        return None
    handler.set_name(FILE_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(settings: Optional[Settings] = None) -> Optional[Path]:
    """Configure the root logger for one CLI run.

    The log file sits in the library's data directory unless
    STUDYLIB_LOG_FILE says otherwise. stderr only shows warnings, except at
    STUDYLIB_LOG_LEVEL=DEBUG where it mirrors the file. Calling this again
    replaces the handlers it installed earlier instead of stacking them.

    Returns:
        The log file in use, or None when it could not be opened.
    """
    if settings is None:
        settings = _load_settings()
    if settings is None:
        log_file = Path.home() / ".studylibrary" / "studylib.log"
        log_level = "INFO"
    else:
        log_file = settings.log_file or settings.data_dir / "studylib.log"
        log_level = settings.log_level

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() in (FILE_HANDLER_NAME, CONSOLE_HANDLER_NAME):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    console_handler.setLevel(logging.DEBUG if log_level == "DEBUG" else logging.WARNING)
    root_logger.addHandler(console_handler)

    file_handler = _file_handler(log_file)
    if file_handler is not None:
        root_logger.addHandler(file_handler)
    root_logger.setLevel(getattr(logging, log_level))

    if settings is not None:
        logger.debug("Library data directory: %s", settings.data_dir)
    return log_file if file_handler is not None else None


def main() -> None:
    """Main entry point for the studylib CLI."""
    setup_logging()
    app()


if __name__ == "__main__":
    main()
