"""doxyset utilities package."""

from .constants import (
    CONFIG_FILE,
    ENV_PREFIX,
    ERROR_LOG_FILE,
    EXTRACTION_DIR,
    INTERMEDIATE_DIR,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import logger

__all__ = [
    "CONFIG_FILE",
    "ENV_PREFIX",
    "ERROR_LOG_FILE",
    "EXTRACTION_DIR",
    "INTERMEDIATE_DIR",
    "STATE_DIR",
    "handle_exceptions",
    "ExitCodes",
    "logger",
]
