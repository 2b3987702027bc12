"""Loguru logging for the board client.

One JSON object per line. Session, node and request ids bound with
logger.contextualize() are lifted to top-level keys so a single toggle or
reply can be followed across the controller and the HTTP client.
Warnings from httpx and other stdlib loggers are routed into the same files.
"""

import json
import logging
from pathlib import Path

from loguru import logger

_configured = False

_CONTEXT_KEYS = ("session_id", "node_id", "request_id")

# Per-request INFO lines from these duplicate MESSAGE_SERVICE logs
_QUIET_LIBRARIES = ("httpx", "httpcore")


def _json_line(record) -> str:
    entry = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "where": f"{record['function']}:{record['line']}",
        "message": record["message"],
    }
    extra = record["extra"]
    entry.update({k: extra[k] for k in _CONTEXT_KEYS if extra.get(k) is not None})
    if record["exception"] is not None:
        exc_type = record["exception"].type
        entry["exception"] = exc_type.__name__ if exc_type else None
    record["extra"]["_line"] = json.dumps(entry, default=str)
    return "{extra[_line]}\n"


class _LoguruBridge(logging.Handler):
    """stdlib logging handler that re-emits records through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(
    log_file: str,
    *,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: int = 5,
    force: bool = False,
) -> None:
    """Send board logs to log_file (rotated) and errors to a sibling file.

    The errors file is named after log_file, e.g. board.log -> board.errors.log.
    Only the first call per process takes effect unless force=True.
    """
    global _configured
    if _configured and not force:
        return
    _configured = True

    path = Path(log_file)
    errors_path = path.with_name(f"{path.stem}.errors{path.suffix or '.log'}")

    logger.remove()
    logger.add(
        path,
        level=level,
        format=_json_line,
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
    )
    logger.add(
        errors_path,
        level="ERROR",
        format=_json_line,
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
    )

    logging.basicConfig(handlers=[_LoguruBridge()], level=logging.DEBUG, force=True)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"LOGGING: writing {level} logs to {path}, errors to {errors_path}")
