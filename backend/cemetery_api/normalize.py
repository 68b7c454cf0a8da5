"""camelCase normalization of inbound payloads and the JSON body reader."""
from __future__ import annotations

import json
import re
from typing import Any

from fastapi import Request

from .errors import PayloadTooLargeError

_SNAKE_SEGMENT = re.compile(r"_([a-z])")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_UNSET = object()

# Deeper documents are rejected as malformed.
MAX_JSON_DEPTH = 64


def to_camel_case(key: str) -> str:
    return _SNAKE_SEGMENT.sub(lambda match: match.group(1).upper(), key)


def to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _too_deep() -> json.JSONDecodeError:
    return json.JSONDecodeError("Payload is nested too deeply", "", 0)


def camelize_keys(value: Any, _depth: int = 0) -> Any:
    """Recursively rewrite dict keys to camelCase; values are left untouched.

    Raises json.JSONDecodeError past MAX_JSON_DEPTH levels of nesting.
    """
    if _depth > MAX_JSON_DEPTH:
        raise _too_deep()
    try:
        if isinstance(value, dict):
            return {
                (to_camel_case(key) if isinstance(key, str) else key): camelize_keys(item, _depth + 1)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [camelize_keys(item, _depth + 1) for item in value]
    except RecursionError as exc:
        raise _too_deep() from exc
    return value


def parse_json(raw: bytes) -> Any:
    """Parse a request body; an empty body is an empty object.

    Raises json.JSONDecodeError for malformed payloads, including bodies that
    are not valid UTF-8 or nest deeper than the parser can follow.
    """
    if not raw.strip():
        return {}
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise json.JSONDecodeError("Body is not valid UTF-8", "", 0) from exc
    try:
        return json.loads(text)
    except RecursionError as exc:
        raise _too_deep() from exc


def _check_size(size: int, limit: int) -> None:
    if size > limit:
        raise PayloadTooLargeError(f"Request body exceeds {limit} bytes")


async def json_body(request: Request) -> Any:
    """FastAPI dependency: parsed and normalized JSON body, cached per request."""
    cached = getattr(request.state, "json_body", _UNSET)
    if cached is not _UNSET:
        return cached
    limit = request.app.state.settings.MAX_BODY_BYTES
    declared = request.headers.get("content-length", "")
    if declared.isdigit():
        _check_size(int(declared), limit)
    raw = await request.body()
    _check_size(len(raw), limit)
    payload = camelize_keys(parse_json(raw))
    request.state.json_body = payload
    return payload


def query_params(request: Request) -> dict[str, Any]:
    """FastAPI dependency: query string with camelCase keys."""
    cached = getattr(request.state, "query", _UNSET)
    if cached is not _UNSET:
        return cached
    params = camelize_keys(dict(request.query_params))
    request.state.query = params
    return params
