"""Console and structured run logging."""

from .console import setup_logging
from .events import JsonlRunLogger, RunEvent, event_from_outcome, utc_timestamp

__all__ = ["JsonlRunLogger", "RunEvent", "event_from_outcome", "setup_logging", "utc_timestamp"]
