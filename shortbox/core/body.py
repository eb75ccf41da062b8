"""
Bounded JSON Ingestion

Reads a request body under a hard byte cap and turns it into a flat JSON
object. The declared Content-Length is only a hint: the running total of
bytes actually received is what enforces the cap, so a lying or missing
header can't get an oversized body into memory.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, NamedTuple, Optional

from starlette.requests import ClientDisconnect

from shortbox.core.results import ErrorKind, ValidationResult

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 8192

JSON_CONTENT_TYPE = "application/json"


class IngestedBody(NamedTuple):
    """Decoded request payload and the number of bytes it arrived as."""
    data: Dict[str, Any]
    size: int


def _declared_length(content_length: Optional[str]) -> Optional[int]:
    """Parse a Content-Length header; anything non-numeric counts as undeclared."""
    if content_length is None:
        return None
    try:
        return int(content_length.strip())
    except ValueError:
        return None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


async def _close(stream: AsyncIterator[bytes]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


async def ingest_json_body(
    content_type: Optional[str],
    content_length: Optional[str],
    stream: AsyncIterator[bytes],
    max_bytes: int = MAX_BODY_BYTES,
) -> ValidationResult[IngestedBody]:
    """
    Read and decode a JSON object body.

    Args:
        content_type: Raw Content-Type header value
        content_length: Raw Content-Length header value
        stream: Async iterator of body chunks (e.g. request.stream())
        max_bytes: Byte cap for the body

    Returns:
        Success carrying IngestedBody, or a failure with a client-safe reason

    Note:
    - Nothing is read when the declared length is already over the cap
    - Reading stops as soon as the running total passes the cap; the
      stream is closed and no further chunk is requested
    """
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type != JSON_CONTENT_TYPE:
        return ValidationResult.failure(
            "Content-Type must be application/json.", ErrorKind.RESOURCE
        )

    declared = _declared_length(content_length)
    if declared is not None and declared > max_bytes:
        return ValidationResult.failure("Request body too large.", ErrorKind.RESOURCE)

    chunks = []
    total = 0
    try:
        async for chunk in stream:
            total += len(chunk)
            if total > max_bytes:
                await _close(stream)
                logger.info(f"Request body exceeded {max_bytes} bytes, aborted read")
                return ValidationResult.failure("Request body too large.", ErrorKind.RESOURCE)
            chunks.append(chunk)
        # A WHATWG decoder drops a leading BOM; errors are strict either way
        text = b"".join(chunks).decode("utf-8-sig")
    except (ClientDisconnect, OSError, UnicodeDecodeError):
        return ValidationResult.failure("Could not read request body.", ErrorKind.RESOURCE)

    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        # json.JSONDecodeError is a ValueError subclass; RecursionError is deep nesting
        return ValidationResult.failure("Invalid JSON payload.", ErrorKind.FORMAT)

    if not isinstance(data, dict):
        return ValidationResult.failure("JSON payload must be an object.", ErrorKind.TYPE)

    return ValidationResult.success(IngestedBody(data=data, size=total))
