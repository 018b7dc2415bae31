"""
utilities package
contains helper functions and classes
"""

from .candidates import closest_candidate, best_candidate
from .logging_config import setup_logging, get_logger, LogCapture

__all__ = [
    "closest_candidate",
    "best_candidate",
    "setup_logging",
    "get_logger",
    "LogCapture"
]
