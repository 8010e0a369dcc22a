"""
Logging setup for the categorizer service.

`get_logging_config()` is handed to uvicorn as `log_config`, so the API process,
uvicorn's own loggers and the pipeline stages (`[CATEGORIZE]`, `[GEMINI]`,
`[FALLBACK]`, ...) all share one set of handlers.

Environment:
    LOG_LEVEL   level for the root and `receipt_categorizer` loggers (INFO)
    LOG_DIR     when set, records are also written to LOG_DIR/receipt-categorizer.log
    LOG_COLOUR  "1"/"0" to force console colours on or off; default follows the TTY
"""
import logging
import logging.config
import os
import sys

PACKAGE_LOGGER = "receipt_categorizer"
LOG_FILE_NAME = "receipt-categorizer.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Request/response chatter from the Gemini HTTP client.
QUIET_LOGGERS = ("httpx", "httpcore")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

ANSI_RESET = "\x1b[0m"
LEVEL_STYLES = {
    logging.DEBUG: "\x1b[90m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[31;1m",
}


class ColourizedFormatter(logging.Formatter):
    """Console formatter that wraps the level name in an ANSI colour."""

    def __init__(self, fmt=None, datefmt=None, style="%", use_colour: bool | None = None):
        super().__init__(fmt, datefmt, style)
        self.use_colour = sys.stdout.isatty() if use_colour is None else use_colour

    def format(self, record: logging.LogRecord) -> str:
        style = LEVEL_STYLES.get(record.levelno) if self.use_colour else None
        if style is None:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"{style}{levelname}{ANSI_RESET}"
        try:
            return super().format(record)
        finally:
            # The file handler formats the same record afterwards.
            record.levelname = levelname


def _colour_override() -> bool | None:
    raw = os.getenv("LOG_COLOUR")
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_logging_config(level: str | None = None, log_dir: str | None = None) -> dict:
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_dir = log_dir or os.getenv("LOG_DIR")

    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "console",
        },
    }
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, LOG_FILE_NAME),
            "encoding": "utf-8",
            "formatter": "file",
        }
    handler_names = list(handlers)

    loggers: dict[str, dict] = {
        "": {"handlers": handler_names, "level": level},
        PACKAGE_LOGGER: {"level": level},
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}
    for name in UVICORN_LOGGERS:
        loggers[name] = {"handlers": handler_names, "level": "INFO", "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ColourizedFormatter,
                "fmt": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
                "use_colour": _colour_override(),
            },
            "file": {
                "format": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": handlers,
        "loggers": loggers,
    }


def setup_logging() -> None:
    logging.config.dictConfig(get_logging_config())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
