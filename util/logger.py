# util/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from config.settings import settings

logging.captureWarnings(True)

_TEXT_FMT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_DATE_FMT = "%Y-%m-%dT%H:%M:%S%z"
_NOISY_LOGGERS = ("httpx", "httpcore", "sentence_transformers", "urllib3")


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Colorize a copy so file handlers sharing the record stay plain
        lvl = record.levelname
        record.levelname = f"{self.COLORS.get(lvl, self.RESET)}{lvl}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = lvl


def init_logger(level: str | None = None) -> logging.Logger:
    """
    Idempotent logger init:
    - Console handler on stdout with colored level names.
    - Rotating file handler under settings.LOG_DIR when settings.LOG_TO_FILE is True.
    - `level` overrides settings.LOG_LEVEL.
    """
    root = logging.getLogger()
    if getattr(root, "_factcheck_inited", False):
        return logging.getLogger(settings.LOGGER_NAME)

    name = (level or settings.LOG_LEVEL or "INFO").upper()
    lvl = getattr(logging, name, logging.INFO)
    root.setLevel(lvl)

    for h in list(root.handlers):
        root.removeHandler(h)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(lvl)
    ch.setFormatter(ColoredFormatter(_TEXT_FMT, datefmt=_DATE_FMT))
    root.addHandler(ch)

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        fh.setLevel(lvl)
        fh.setFormatter(logging.Formatter(_TEXT_FMT, datefmt=_DATE_FMT))
        root.addHandler(fh)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    root._factcheck_inited = True  # type: ignore[attr-defined]
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug("logger.init level=%s file=%s", name, settings.LOG_TO_FILE)
    return logger
