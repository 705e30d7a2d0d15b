"""
Student Registry - Server

FastMCP server exposing the cached student CRUD surface as tools.

Startup loads configuration, configures logging, initializes (and optionally
seeds) the SQLite store and creates the shared cache. Shutdown closes every
cache and disposes the database engine.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

from fastmcp import FastMCP

from .cache import close_all_caches, create_cache
from .config import load_config
from .observability import set_request_id, setup_logging
from .students import SqlStudentRepository, StudentDatabase, StudentService, seed_students
from .students.handlers import StudentHandlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def server_lifespan(server: Any) -> Any:
    """Server lifespan manager (startup/shutdown)."""
    await initialize_server()
    try:
        yield
    finally:
        await cleanup_server()


mcp = FastMCP("Student Registry", lifespan=server_lifespan)

# Global state
_database: StudentDatabase | None = None
_handlers: StudentHandlers | None = None


def _get_handlers() -> StudentHandlers:
    if _handlers is None:
        raise RuntimeError("Student registry server is not initialized")
    set_request_id()
    return _handlers


@mcp.tool()
async def list_students() -> dict[str, Any]:
    """List every student."""
    return await _get_handlers().list_students()


@mcp.tool()
async def get_student(student_id: int) -> dict[str, Any]:
    """
    Get one student by id.

    Args:
        student_id: Student identifier
    """
    return await _get_handlers().get_student(student_id=student_id)


@mcp.tool()
async def create_student(
    full_name: str,
    birth_date: date,
    average_grade: float,
    is_active: bool = True,
) -> dict[str, Any]:
    """
    Create a student. The id is assigned by the store.

    Args:
        full_name: Full name (2-100 characters)
        birth_date: Date of birth (YYYY-MM-DD)
        average_grade: Average grade (0-100)
        is_active: Whether the student is currently enrolled
    """
    return await _get_handlers().create_student(
        full_name=full_name,
        birth_date=birth_date,
        average_grade=average_grade,
        is_active=is_active,
    )


@mcp.tool()
async def update_student(
    student_id: int,
    full_name: str,
    birth_date: date,
    average_grade: float,
    is_active: bool = True,
) -> dict[str, Any]:
    """
    Overwrite every field of an existing student.

    Args:
        student_id: Student identifier
        full_name: Full name (2-100 characters)
        birth_date: Date of birth (YYYY-MM-DD)
        average_grade: Average grade (0-100)
        is_active: Whether the student is currently enrolled
    """
    return await _get_handlers().update_student(
        student_id=student_id,
        full_name=full_name,
        birth_date=birth_date,
        average_grade=average_grade,
        is_active=is_active,
    )


@mcp.tool()
async def delete_student(student_id: int) -> dict[str, Any]:
    """
    Delete a student.

    Args:
        student_id: Student identifier
    """
    return await _get_handlers().delete_student(student_id=student_id)


@mcp.tool()
async def get_cache_stats() -> dict[str, Any]:
    """Get cache statistics for the active backend."""
    return await create_cache().get_stats()


@mcp.tool()
async def check_status() -> dict[str, Any]:
    """Report server readiness and the active cache backend."""
    config = load_config()
    stats = await create_cache().get_stats()
    return {
        "status": "healthy" if _handlers is not None else "initializing",
        "environment": config.environment,
        "cache_backend": stats["backend"],
        "database": str(_database.db_path) if _database else None,
    }


async def initialize_server() -> None:
    """Initialize server resources on startup."""
    global _database, _handlers

    if _handlers is not None:
        return

    config = load_config()
    setup_logging(level=config.log_level, fmt=config.log_format)
    logger.info(f"Initializing student registry (environment={config.environment})")

    try:
        _database = StudentDatabase(db_path=config.database.path, echo=config.database.echo)
        await _database.initialize()
        if config.database.seed:
            await seed_students(_database)

        cache = create_cache(config.cache)
        stats = await cache.get_stats()
        logger.info(f"Cache initialized: backend={stats['backend']}")

        service = StudentService(
            repository=SqlStudentRepository(_database),
            cache=cache,
            logger=logging.getLogger("student_registry.students.service"),
            collection_ttl=config.cache.collection_ttl_seconds,
            record_ttl=config.cache.record_ttl_seconds,
        )
        _handlers = StudentHandlers(service)
        logger.info("Student registry initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize server: {e}", exc_info=True)
        raise


async def cleanup_server() -> None:
    """Cleanup server resources on shutdown."""
    global _database, _handlers

    logger.info("Cleaning up student registry...")

    await close_all_caches()

    if _database is not None:
        await _database.close()

    _database = None
    _handlers = None
    logger.info("Student registry shut down")


def main() -> None:
    """Run the server over stdio."""
    mcp.run()


if __name__ == "__main__":
    main()
