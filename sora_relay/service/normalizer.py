"""Turn an upstream body into the JSON value sent back to the caller."""

import json
from dataclasses import dataclass
from typing import Any

from sora_relay.schemas import RawResponse


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class Unparsed:
    raw_text: str


@dataclass(frozen=True)
class NormalizedResponse:
    status_code: int
    body: Any


def _reject_constant(token: str) -> Any:
    # NaN/Infinity are not JSON and could not be re-serialized.
    raise ValueError(f"non-standard JSON constant {token}")


def _serializable(value: Any) -> bool:
    # Out-of-range numbers parse to inf and lone surrogates cannot be UTF-8 encoded.
    try:
        json.dumps(value, allow_nan=False, ensure_ascii=False).encode("utf-8")
    except (ValueError, UnicodeEncodeError):
        return False
    return True


def parse_body(text: str) -> Parsed | Unparsed:
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return Unparsed(text)
    if not _serializable(value):
        return Unparsed(text)
    return Parsed(value)


def normalize(text: str, status_code: int) -> NormalizedResponse:
    result = parse_body(text)
    if isinstance(result, Parsed):
        body = result.value
    else:
        body = RawResponse(raw_response=result.raw_text).model_dump()
    return NormalizedResponse(status_code=status_code, body=body)
