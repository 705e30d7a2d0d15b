"""
Student Registry - Cache Value Serialization

Both backends store values as compact UTF-8 JSON text. Encoding failures are
caller errors and raise; decoding failures mean the stored payload is corrupt
or incompatible and are reported as a miss.
"""

import json
import logging
from typing import Any

from ..errors import CacheOperationError

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel type for payloads that could not be decoded."""

    def __repr__(self) -> str:
        return "<undecodable>"


UNDECODABLE = _Missing()


def to_json(key: str, value: Any) -> str:
    """Serialize a value to JSON text."""
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise CacheOperationError(
            f"Failed to serialize value for key '{key}': {e}",
            details={"key": key, "value_type": type(value).__name__, "error": str(e)},
        ) from e


def from_json(key: str, data: str | bytes) -> Any:
    """
    Deserialize JSON text.

    Returns:
        The decoded value, or UNDECODABLE if the payload is not valid UTF-8 JSON
    """
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        preview = data[:100] if isinstance(data, str | bytes) else repr(data)
        logger.warning(
            f"Failed to decode cached payload for key '{key}', treating as miss: {e}",
            extra={"key": key, "data_preview": str(preview), "error": str(e)},
        )
        return UNDECODABLE
