import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

LOG_FILE_PREFIX = "dirmirror"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured output.

    Produces one JSON object per log record with fields: ts, level, logger, msg.
    Exception info is included as an "exc" field when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def build_log_path(log_dir: Path, now: datetime | None = None) -> Path:
    """Return a timestamped log file path inside *log_dir*.

    The file name has the form ``dirmirror_YYYY-MM-DD_HH-MM-SS.log`` so
    each run writes its own file and names sort chronologically.
    """
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return Path(log_dir) / f"{LOG_FILE_PREFIX}_{stamp}.log"


def setup_logging(
    log_file: str | Path | None = None,
    console: bool = False,
    debug: bool = False,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure logging for a mirror run.

    Args:
        log_file: Log file path. Every record is appended here.
        console: If True, also echo records to stderr.
        debug: If True, overrides LOG_LEVEL to DEBUG.
        debug_format: "text" (default) or "json" for structured output.
        level: Level name from the config file, used when LOG_LEVEL is unset.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Default: *level*, else INFO.

    When neither a log file nor console output is requested, warnings
    still reach stderr so failures are never silent.
    """
    env_level = (os.getenv("LOG_LEVEL") or level or "INFO").upper()

    # debug parameter overrides environment
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, env_level, logging.INFO)

    handlers: list[logging.Handler] = []

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        if debug_format == "json":
            file_handler.setFormatter(JsonFormatter(datefmt=_DATEFMT))
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] %(name)s %(message)s",
                    datefmt=_DATEFMT,
                )
            )
        handlers.append(file_handler)

    if console or not log_file:
        stderr_handler = logging.StreamHandler(sys.stderr)
        if debug_format == "json":
            stderr_handler.setFormatter(JsonFormatter(datefmt=_DATEFMT))
        else:
            stderr_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] %(message)s",
                    datefmt=_DATEFMT,
                )
            )
        if not console:
            stderr_handler.setLevel(logging.WARNING)
        handlers.append(stderr_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )
