"""
Student Registry - Cached Student Service

CRUD over the student store with read-through caching and write invalidation.

Reads check the cache first and populate it on a miss. Writes go straight to
the store and then invalidate the record key, the collection key and every
key under the ``students:`` prefix before returning, so the next read by the
same caller never observes a stale entry.

The cache is optional for correctness: any CacheError turns a read into a
miss and an invalidation step into a logged skip. Store errors propagate.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..cache.interface import CacheInterface
from ..errors import CacheError, ValidationError
from ..validation.decorators import format_validation_errors
from .models import Student
from .repository import StudentRepository
from .schemas import StudentDto, StudentInput

ENTITY = "students"
COLLECTION_KEY = f"{ENTITY}:all"
ENTITY_PATTERN = f"{ENTITY}:*"

DEFAULT_COLLECTION_TTL = 300
DEFAULT_RECORD_TTL = 600


def record_key(student_id: int) -> str:
    """Cache key of a single student."""
    return f"{ENTITY}:{student_id}"


def _project(student: Student) -> StudentDto:
    return StudentDto(
        student_id=student.student_id,
        full_name=student.full_name,
        birth_date=student.birth_date,
        average_grade=student.average_grade,
        is_active=student.is_active,
    )


class StudentService:
    """
    Student CRUD accelerated by a read-through cache.

    Args:
        repository: Authoritative student store
        cache: Any CacheInterface backend, shared across requests
        logger: Logger to report cache hits, misses and degraded cache calls
        collection_ttl: Seconds the full collection stays cached
        record_ttl: Seconds a single record stays cached
    """

    def __init__(
        self,
        repository: StudentRepository,
        cache: CacheInterface,
        logger: logging.Logger | None = None,
        collection_ttl: float = DEFAULT_COLLECTION_TTL,
        record_ttl: float = DEFAULT_RECORD_TTL,
    ):
        self._repository = repository
        self._cache = cache
        self._logger = logger or logging.getLogger(__name__)
        self.collection_ttl = collection_ttl
        self.record_ttl = record_ttl

    # ------------ Cache access (never raises CacheError) ------------

    async def _cache_get(self, key: str) -> Any | None:
        try:
            return await self._cache.get(key)
        except CacheError as e:
            self._logger.warning(
                f"Cache read failed for '{key}', falling through to the store: {e.message}",
                extra={"key": key, "error": e.message, "error_details": e.details},
            )
            return None

    async def _cache_set(self, key: str, value: Any, ttl: float) -> None:
        try:
            await self._cache.set(key, value, ttl)
        except CacheError as e:
            self._logger.warning(
                f"Cache write failed for '{key}', continuing uncached: {e.message}",
                extra={"key": key, "ttl": ttl, "error": e.message, "error_details": e.details},
            )

    async def _best_effort(self, operation: str, target: str, call: Callable[[], Awaitable[Any]]) -> None:
        try:
            await call()
        except CacheError as e:
            self._logger.warning(
                f"Cache invalidation step {operation}('{target}') failed, continuing: {e.message}",
                extra={"operation": operation, "target": target, "error": e.message, "error_details": e.details},
            )

    async def _invalidate(self, student_id: int) -> None:
        """Drop every cached view that may embed this student. Each step runs regardless of the others."""
        key = record_key(student_id)
        await self._best_effort("remove", key, lambda: self._cache.remove(key))
        await self._best_effort("remove", COLLECTION_KEY, lambda: self._cache.remove(COLLECTION_KEY))
        await self._best_effort(
            "remove_by_pattern", ENTITY_PATTERN, lambda: self._cache.remove_by_pattern(ENTITY_PATTERN)
        )
        self._logger.debug(f"Invalidated cache for student {student_id}", extra={"student_id": student_id})

    def _decode_record(self, key: str, payload: Any) -> StudentDto | None:
        try:
            return StudentDto.model_validate(payload)
        except PydanticValidationError as e:
            self._logger.warning(
                f"Discarding incompatible cached payload for '{key}'",
                extra={"key": key, "validation_errors": format_validation_errors(e)},
            )
            return None

    def _decode_collection(self, payload: Any) -> list[StudentDto] | None:
        if not isinstance(payload, list):
            self._logger.warning(
                f"Discarding incompatible cached payload for '{COLLECTION_KEY}'",
                extra={"key": COLLECTION_KEY, "payload_type": type(payload).__name__},
            )
            return None

        students = []
        for item in payload:
            student = self._decode_record(COLLECTION_KEY, item)
            if student is None:
                return None
            students.append(student)
        return students

    @staticmethod
    def _coerce_input(data: StudentInput | Mapping[str, Any]) -> StudentInput:
        if isinstance(data, StudentInput):
            return data
        try:
            return StudentInput.model_validate(dict(data))
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid student data",
                details={"validation_errors": format_validation_errors(e)},
            ) from e

    # ------------ Reads ------------

    async def list_all(self) -> list[StudentDto]:
        """Return every student, from cache when possible."""
        cached = await self._cache_get(COLLECTION_KEY)
        if cached is not None:
            students = self._decode_collection(cached)
            if students is not None:
                self._logger.info(f"Retrieved {len(students)} students from cache")
                return students

        rows = await self._repository.query_all()
        students = [_project(row) for row in rows]
        self._logger.info(f"Retrieved {len(students)} students from the store")

        await self._cache_set(COLLECTION_KEY, [s.to_payload() for s in students], self.collection_ttl)
        return students

    async def get_by_id(self, student_id: int) -> StudentDto | None:
        """Return one student, or None if it does not exist. Absent ids are never cached."""
        key = record_key(student_id)

        cached = await self._cache_get(key)
        if cached is not None:
            student = self._decode_record(key, cached)
            if student is not None:
                self._logger.info(
                    f"Retrieved student {student_id} from cache",
                    extra={"student_id": student_id},
                )
                return student

        row = await self._repository.query_by_id(student_id)
        if row is None:
            self._logger.warning(f"Student {student_id} not found", extra={"student_id": student_id})
            return None

        student = _project(row)
        await self._cache_set(key, student.to_payload(), self.record_ttl)
        return student

    # ------------ Writes ------------

    async def create(self, data: StudentInput | Mapping[str, Any]) -> StudentDto:
        """
        Persist a new student and invalidate affected cache entries.

        Raises:
            ValidationError: If ``data`` is a mapping that fails validation
            PersistenceError: If the store fails
        """
        student_input = self._coerce_input(data)

        row = await self._repository.insert(student_input)
        student = _project(row)
        self._logger.info(
            f"Created student {student.student_id}",
            extra={"student_id": student.student_id},
        )

        await self._invalidate(student.student_id)
        return student

    async def update(self, student_id: int, data: StudentInput | Mapping[str, Any]) -> StudentDto | None:
        """
        Overwrite every mutable field of a student.

        Returns:
            The updated student, or None (with no invalidation) if it does not exist
        """
        student_input = self._coerce_input(data)

        if await self._repository.query_by_id(student_id) is None:
            self._logger.warning(f"Student {student_id} not found for update", extra={"student_id": student_id})
            return None

        if not await self._repository.update(student_id, student_input):
            # Deleted between the lookup and the write
            self._logger.warning(f"Student {student_id} vanished during update", extra={"student_id": student_id})
            return None

        self._logger.info(f"Updated student {student_id}", extra={"student_id": student_id})
        await self._invalidate(student_id)

        return StudentDto(student_id=student_id, **student_input.model_dump())

    async def delete(self, student_id: int) -> bool:
        """
        Remove a student.

        Returns:
            True if removed, False (with no invalidation) if it did not exist
        """
        if not await self._repository.delete(student_id):
            self._logger.warning(f"Student {student_id} not found for delete", extra={"student_id": student_id})
            return False

        self._logger.info(f"Deleted student {student_id}", extra={"student_id": student_id})
        await self._invalidate(student_id)
        return True
