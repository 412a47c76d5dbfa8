"""Fast JSON decoding/encoding for protocol traffic."""

from typing import Any
import json

import msgspec
import orjson
from json_repair import repair_json


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


_decoder = msgspec.json.Decoder()


def decode_json(text: str | bytes, repair: bool = False) -> Any:
    """
    Decode a JSON document.

    Args:
        text: JSON text
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Decoded Python value

    Raises:
        JSONParseError: If decoding fails
    """
    raw = text.encode("utf-8") if isinstance(text, str) else text

    # msgspec first (fastest)
    try:
        return _decoder.decode(raw)
    except msgspec.DecodeError as e:
        if not repair:
            raise JSONParseError(f"Invalid JSON: {e}", e) from e

    # LLM producers sometimes emit trailing commas or truncated objects
    try:
        repaired = repair_json(raw.decode("utf-8"))
        return json.loads(repaired)
    except (ValueError, TypeError) as repair_error:
        raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error) from repair_error


def split_documents(text: str, repair: bool = False) -> list[Any]:
    """
    Split a protocol payload into message documents.

    Accepts a single JSON object, a JSON array of objects, or JSON Lines
    (one object per line, blank lines ignored).

    Raises:
        JSONParseError: If any document fails to decode
    """
    stripped = text.strip()
    if not stripped:
        return []

    try:
        decoded = decode_json(stripped)
    except JSONParseError:
        pass
    else:
        return decoded if isinstance(decoded, list) else [decoded]

    lines = [(lineno, line) for lineno, line in enumerate(stripped.splitlines(), 1) if line.strip()]

    # JSON Lines only when every line opens a document; otherwise this is one
    # (pretty-printed) document and repair applies to the whole of it
    if repair and not all(line.lstrip().startswith(("{", "[")) for _, line in lines):
        decoded = decode_json(stripped, repair=True)
        return decoded if isinstance(decoded, list) else [decoded]

    documents = []
    for lineno, line in lines:
        try:
            documents.append(decode_json(line, repair=repair))
        except JSONParseError as e:
            raise JSONParseError(f"Line {lineno}: {e}", e.original) from e
    return documents


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, etc.)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 0:
        try:
            return orjson.dumps(obj).decode("utf-8")
        except TypeError:
            # orjson rejects integers outside the 64-bit range
            pass

    return json.dumps(obj, indent=indent if indent > 0 else None)
