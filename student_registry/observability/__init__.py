"""
Student Registry - Observability Module

Logging configuration for the runtime. Modules obtain their loggers with
``logging.getLogger(__name__)``; this module only decides where and how the
records are written.

Usage:
    from student_registry.observability import setup_logging

    setup_logging(level="DEBUG", fmt="json")
"""

from .logs import JSONFormatter, get_request_id, set_request_id, setup_logging

__all__ = [
    "JSONFormatter",
    "setup_logging",
    "get_request_id",
    "set_request_id",
]
