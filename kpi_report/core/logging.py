import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

from kpi_report.core.config import settings

LOG_FILE_NAME = "kpi_report.log"


def setup_logging():
    """Configure root logging: console plus a rotating file."""

    # 1. Make sure the log directory exists
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    # 2. Format: time | level | module:line | message
    log_format = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s")

    # 3. File handler - 5 MB per file, keep 5 backups
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(log_format)
    file_handler.setLevel(level)

    # 4. Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_format)
    console_handler.setLevel(level)

    # 5. Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # drop previous handlers so reloads don't print twice
    root_logger.handlers = []

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # 6. Route uvicorn's own loggers through the same handlers
    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logger = logging.getLogger(logger_name)
        logger.handlers = [file_handler, console_handler]
        logger.propagate = False

    # pdfminer is chatty at INFO about font metrics
    logging.getLogger("pdfminer").setLevel(logging.ERROR)

    logging.info("Logging initialized. Logs will be written to: %s", log_file.absolute())
