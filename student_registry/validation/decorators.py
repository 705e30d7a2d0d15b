"""
Student Registry - Validation Decorators

Provides a decorator that validates keyword arguments against a Pydantic
schema before the wrapped handler runs.
"""

import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from ..errors import ErrorCode, make_error_response

logger = logging.getLogger(__name__)


def format_validation_errors(error: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


def validate_input(schema: type[BaseModel]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to validate handler keyword arguments using a Pydantic schema.

    Positional arguments (such as ``self``) are passed through untouched; the
    keyword arguments are validated, normalized via ``model_dump()`` and handed
    to the wrapped function.

    Args:
        schema: Pydantic model class for input validation

    Returns:
        Decorated function with automatic validation

    Example:
        >>> @validate_input(StudentIdInput)
        ... async def get_student(self, student_id: int):
        ...     pass

    Error Response:
        {
            "success": False,
            "error_code": "INVALID_INPUT",
            "status_code": 400,
            "message": "Input validation failed",
            "details": {
                "validation_errors": [
                    {
                        "field": "full_name",
                        "message": "String should have at least 2 characters",
                        "type": "string_too_short"
                    }
                ],
                "function": "create_student"
            }
        }
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        def _validate(kwargs: dict[str, Any]) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
            """Return (validated kwargs, None) or (None, error response)."""
            try:
                return schema(**kwargs).model_dump(exclude_unset=False), None
            except ValidationError as e:
                validation_errors = format_validation_errors(e)
                logger.warning(
                    f"Input validation failed for {func.__name__}",
                    extra={
                        "function": func.__name__,
                        "validation_errors": validation_errors,
                        "input_kwargs": kwargs,
                    },
                )
                return None, make_error_response(
                    error_code=ErrorCode.INVALID_INPUT,
                    message="Input validation failed",
                    context={
                        "validation_errors": validation_errors,
                        "function": func.__name__,
                    },
                    status_code=400,
                )

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            validated, error_response = _validate(kwargs)
            if error_response is not None:
                return error_response
            return await func(*args, **validated)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            validated, error_response = _validate(kwargs)
            if error_response is not None:
                return error_response
            return func(*args, **validated)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
