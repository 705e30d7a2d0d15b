"""
Student Registry

A student record store with a pluggable read-through cache (in-process or
Redis) in front of SQLite, exposed as FastMCP tools.

The server lives in ``student_registry.server`` and is imported on demand so
that the cache and service layers can be used without the MCP runtime.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
