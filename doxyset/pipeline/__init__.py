"""Pipeline execution infrastructure."""
from .structures import StageResult, TaskStatus
from .ui import console, print_header, print_status_panel, print_warning

__all__ = [
    "StageResult", "TaskStatus",
    "console", "print_header", "print_warning", "print_status_panel",
]
