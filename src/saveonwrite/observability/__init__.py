"""Observability - structured logging."""

from .logger import TRACE, configure_logging, get_log_level

__all__ = ["TRACE", "configure_logging", "get_log_level"]
