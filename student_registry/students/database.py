"""
Student Registry - Student Store Engine

Owns the SQLite engine behind SqlStudentRepository.

Startup order in the server: ``initialize()`` creates the ``students`` table,
then ``seed_students`` fills it if empty, then the cache and service are built.
Every repository call opens its own short session through ``get_session()``
and commits before returning, so no ORM state outlives a call and rows handed
to the service stay readable after the session closes.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models import Base

logger = logging.getLogger(__name__)


class StudentDatabase:
    """
    The authoritative student store.

    Args:
        db_path: SQLite file; parent directories are created on first use
        echo: Log every SQL statement (DATABASE_ECHO)
    """

    def __init__(self, db_path: str = "./data/students.db", echo: bool = False):
        self.db_path = Path(db_path).resolve()
        self.db_url = f"sqlite+aiosqlite:///{self.db_path}"

        self.engine: AsyncEngine = create_async_engine(
            self.db_url,
            echo=echo,
            # aiosqlite runs the connection on its own thread
            connect_args={"check_same_thread": False},
        )

        # Rows are returned to the service after commit; keep their loaded values
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        self._ready = False
        self._ready_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the students table once. Seeding and the first repository call both rely on it."""
        async with self._ready_lock:
            if self._ready:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            self._ready = True
            logger.info(f"Student store ready at {self.db_path}", extra={"db_path": str(self.db_path)})

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """One session per repository call; the table is created first if needed."""
        if not self._ready:
            await self.initialize()

        async with self.session_factory() as session:
            yield session

    async def close(self) -> None:
        """Dispose the engine at server shutdown. A later call re-creates the table check."""
        await self.engine.dispose()
        self._ready = False
        logger.info("Student store closed", extra={"db_path": str(self.db_path)})
