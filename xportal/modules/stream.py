"""Incremental decoding of concatenated JSON module records.

``go list -m -json`` writes one JSON object per module, back to back, with no
enclosing array. Records are decoded lazily from a text stream so the whole
listing never has to be held in memory.
"""

import json
from typing import Iterator, TextIO

from ..exceptions import IntrospectionError
from ..types import ModuleRecord


DEFAULT_CHUNK_SIZE = 64 * 1024

# Longest tail a cut-off literal or number can leave after the error position (e.g. "-Infinit")
MAX_PARTIAL_TOKEN = 9


def _truncated(buffer: str, error: json.JSONDecodeError) -> bool:
    """Whether ``error`` means the record continues past the end of ``buffer``."""
    if error.msg.startswith("Unterminated string"):
        return True
    return len(buffer) - error.pos <= MAX_PARTIAL_TOKEN


def iter_module_records(stream: TextIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[ModuleRecord]:
    """
    Yield module records from a stream of concatenated JSON objects.

    Args:
        stream: Text stream positioned at the first record
        chunk_size: Number of characters read per I/O call

    Yields:
        One ModuleRecord per decoded object, in stream order

    Raises:
        IntrospectionError: If a record is malformed or not a JSON object
    """
    decoder = json.JSONDecoder()
    buffer = ""
    eof = False

    while True:
        buffer = buffer.lstrip()
        if not buffer:
            if eof:
                return
            chunk = stream.read(chunk_size)
            if not chunk:
                return
            buffer = chunk
            continue

        try:
            value, end = decoder.raw_decode(buffer)
        except json.JSONDecodeError as e:
            if eof or not _truncated(buffer, e):
                raise IntrospectionError("malformed module record", decode_error=e) from e
            chunk = stream.read(chunk_size)
            if chunk:
                buffer += chunk
            else:
                eof = True
            continue

        if not isinstance(value, dict):
            raise IntrospectionError(
                f"module record must be a JSON object, got {type(value).__name__}"
            )

        buffer = buffer[end:]
        yield ModuleRecord.from_dict(value)
