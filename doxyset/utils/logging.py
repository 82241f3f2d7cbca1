"""Centralized logging configuration using Loguru.

Every module logs through the single configured loguru logger:

    from doxyset.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if DOXYSET_LOG_LEVEL=DEBUG

Environment Variables:
    DOXYSET_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    DOXYSET_LOG_JSON: 0|1 (default: 0, human-readable)
    DOXYSET_LOG_FILE: path to an additional NDJSON log file (optional)
    DOXYSET_RUN_ID: correlation ID written into JSON records
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

# Remove default handler
logger.remove()

# Numeric levels used in the NDJSON records
JSON_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 35,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("DOXYSET_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("DOXYSET_LOG_JSON", "0") == "1"
_log_file = os.environ.get("DOXYSET_LOG_FILE")
_run_id = os.environ.get("DOXYSET_RUN_ID") or str(uuid.uuid4())


def _json_record(message) -> str:
    """Serialize a loguru message into a single NDJSON line."""
    record = message.record

    payload = {
        "level": JSON_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "run_id": record["extra"].get("run_id", _run_id),
    }

    for key, value in record["extra"].items():
        if key != "run_id":
            payload[key] = value if isinstance(value, (str, int, float, bool)) else str(value)

    if record["exception"]:
        payload["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }

    return json.dumps(payload)


def json_sink(message):
    """Write NDJSON records to stdout.

    Never call logger.* inside a sink - causes infinite recursion.
    """
    sys.stdout.write(_json_record(message) + "\n")
    sys.stdout.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

if _json_mode:
    logger.add(json_sink, level=_log_level, colorize=False)
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )

if _log_file:
    def _file_json_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_json_record(message) + "\n")

    logger.add(_file_json_sink, level="DEBUG")


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add a rotating human-readable log file under log_dir.

    Args:
        log_dir: Directory for the log file (usually the conversion output root)
        level: Minimum log level for file output

    Returns:
        The loguru handler id, so callers can remove the handler again.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    return logger.add(
        log_dir / "doxyset.log",
        rotation="10 MB",
        retention=3,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


__all__ = [
    "logger",
    "configure_file_logging",
]
