"""Task scheduling and the archive compatibility check task."""

from .compat import (
    CompatibilityCheckTask,
    ResultSink,
    build_checker_command,
    leading_int,
    parse_checker_line,
    parse_checker_output,
    report_location,
)
from .scheduler import Task, TaskOutcome, TaskScheduler

__all__ = [
    "CompatibilityCheckTask",
    "ResultSink",
    "Task",
    "TaskOutcome",
    "TaskScheduler",
    "build_checker_command",
    "leading_int",
    "parse_checker_line",
    "parse_checker_output",
    "report_location",
]
