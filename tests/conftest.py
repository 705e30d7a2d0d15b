"""
Student Registry - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
import socket
from collections.abc import AsyncGenerator, Generator
from datetime import date

import pytest
import pytest_asyncio

from student_registry.cache.backends.memory import MemoryCacheBackend
from student_registry.students.database import StudentDatabase
from student_registry.students.models import Student
from student_registry.students.repository import StudentRepository
from student_registry.students.schemas import StudentInput
from student_registry.students.seed import SAMPLE_STUDENTS

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


def is_redis_available() -> bool:
    """Check if Redis server is available for testing."""
    try:
        with socket.create_connection(("localhost", 6379), timeout=1):
            return True
    except OSError:
        return False


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingRepository(StudentRepository):
    """
    In-memory StudentRepository that counts every call.

    Set ``fail_with`` to make every call raise that exception.
    """

    def __init__(self, next_id: int = 1):
        self.rows: dict[int, Student] = {}
        self.next_id = next_id
        self.calls: dict[str, int] = {"query_all": 0, "query_by_id": 0, "insert": 0, "update": 0, "delete": 0}
        self.fail_with: Exception | None = None

    def _record(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def add(self, data: StudentInput) -> Student:
        student = Student(student_id=self.next_id, **data.model_dump())
        self.rows[student.student_id] = student
        self.next_id += 1
        return student

    async def query_all(self) -> list[Student]:
        self._record("query_all")
        return [self.rows[k] for k in sorted(self.rows)]

    async def query_by_id(self, student_id: int) -> Student | None:
        self._record("query_by_id")
        return self.rows.get(student_id)

    async def insert(self, data: StudentInput) -> Student:
        self._record("insert")
        return self.add(data)

    async def update(self, student_id: int, data: StudentInput) -> bool:
        self._record("update")
        student = self.rows.get(student_id)
        if student is None:
            return False
        for field, value in data.model_dump().items():
            setattr(student, field, value)
        return True

    async def delete(self, student_id: int) -> bool:
        self._record("delete")
        return self.rows.pop(student_id, None) is not None


@pytest.fixture
def fake_clock() -> FakeClock:
    """A clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock: FakeClock) -> MemoryCacheBackend:
    """Memory cache driven by the fake clock."""
    return MemoryCacheBackend(max_size=100, default_ttl=600, namespace="test", clock=fake_clock)


@pytest.fixture
def repository() -> CountingRepository:
    """Counting repository pre-loaded with the ten sample students (ids 1-10)."""
    repo = CountingRepository()
    for row in SAMPLE_STUDENTS:
        repo.add(StudentInput(**row))
    return repo


@pytest.fixture
def ada_lovelace() -> dict:
    """camelCase payload as sent by the UI."""
    return {"fullName": "Ada Lovelace", "birthDate": "1815-12-10", "averageGrade": 99.0, "isActive": True}


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[StudentDatabase, None]:
    """Fresh SQLite database file per test."""
    db = StudentDatabase(db_path=str(tmp_path / "students.db"))
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for memory cache backend."""
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_MAX_SIZE", "100")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "3600")
    monkeypatch.setenv("CACHE_NAMESPACE", "test")


@pytest.fixture
def mock_env_redis(monkeypatch: pytest.MonkeyPatch, test_redis_url: str) -> None:
    """Set environment variables for Redis cache backend."""
    if not is_redis_available():
        pytest.skip("Redis not available")
    monkeypatch.setenv("CACHE_BACKEND", "redis")
    monkeypatch.setenv("REDIS_URL", test_redis_url)
    monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "5")
    monkeypatch.setenv("REDIS_SOCKET_TIMEOUT", "2")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "3600")
    monkeypatch.setenv("CACHE_NAMESPACE", "test")


@pytest.fixture
def sample_student() -> StudentInput:
    return StudentInput(full_name="Grace Hopper", birth_date=date(1906, 12, 9), average_grade=97.5, is_active=True)


@pytest.fixture(autouse=True)
def reset_registry_state() -> Generator[None, None, None]:
    """Reset cache factory and config singletons after each test to prevent state leakage."""
    yield
    from student_registry.cache.factory import reset_cache_factory
    from student_registry.config import reset_config

    reset_cache_factory()
    reset_config()
