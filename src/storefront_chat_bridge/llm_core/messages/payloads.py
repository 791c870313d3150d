"""Structured payload parsing for tool arguments and tool results."""

from pydantic import JsonValue, TypeAdapter, ValidationError

from ..exceptions import ParseError
from ..logger import get_logger

logger = get_logger(__name__)

_STRUCTURED: TypeAdapter[JsonValue] = TypeAdapter(JsonValue)


def parse_structured(payload: str | bytes) -> JsonValue:
    """Parse a JSON document into a structured value.

    Args:
        payload: The raw JSON text.

    Returns:
        The parsed value (null, bool, number, string, list or dict).

    Raises:
        ParseError: If the payload is not valid JSON.
    """
    try:
        return _STRUCTURED.validate_json(payload)
    except ValidationError as e:
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        preview = text[:80] + "..." if len(text) > 80 else text
        msg = f"Payload is not valid structured data: {preview!r}"
        logger.error(msg)
        raise ParseError(msg, payload=text) from e


def dump_structured(value: JsonValue) -> str:
    """Serialize a structured value back to compact JSON text."""
    return _STRUCTURED.dump_json(value).decode("utf-8")
