"""Decoding and validation of the assessment request body.

WHY: Some HTTP clients (notably Windows PowerShell) send text bodies as
UTF-16LE instead of UTF-8. Rejecting those bodies would break a whole
class of callers, so the body is decoded with an ordered list of
strategies and the first one that yields valid JSON wins.

HOW: Each DecodeStrategy turns the raw bytes into text with one codec
and parses it with json.loads, returning a DecodeAttempt instead of
raising. decode_json_body() walks DECODE_STRATEGIES in order.
validate_fields() then checks the three required fields and builds an
AssessmentRequest.

RULES:
- Only UTF-8 and UTF-16LE are attempted, in that order
- Every strategy decodes the same original bytes
- Invalid UTF-8 byte sequences become U+FFFD rather than failing
- Any JSON parse failure (including nesting too deep) falls through
- A single leading U+FEFF is ignored
- Required fields, checked in order: audioBase64, referenceText, locale
- A field is missing when it is absent or falsy; no type coercion
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any

from pronunciation_assessor.core.errors import DecodeError, InvalidContainer, MissingField

REQUIRED_FIELDS = ("audioBase64", "referenceText", "locale")

_BOM = "\ufeff"


@dataclass(frozen=True)
class DecodeAttempt:
    """Outcome of one decode strategy."""

    ok: bool
    value: Any = None
    error: str | None = None


@dataclass(frozen=True)
class DecodeStrategy:
    """Decode raw bytes with one text codec and parse the result as JSON.

    ``errors`` is the codec error handler; "replace" turns stray bytes
    into U+FFFD instead of failing the whole body.
    """

    name: str
    codec: str
    errors: str = "strict"

    def attempt(self, raw: bytes) -> DecodeAttempt:
        try:
            text = bytes(raw).decode(self.codec, self.errors)
        except UnicodeDecodeError as exc:
            return DecodeAttempt(ok=False, error=str(exc))
        if text.startswith(_BOM):
            text = text[1:]
        try:
            return DecodeAttempt(ok=True, value=json.loads(text))
        except (ValueError, RecursionError) as exc:
            return DecodeAttempt(ok=False, error=str(exc))


DECODE_STRATEGIES: tuple[DecodeStrategy, ...] = (
    DecodeStrategy(name="UTF-8", codec="utf-8", errors="replace"),
    DecodeStrategy(name="UTF-16LE", codec="utf-16-le"),
)


@dataclass(frozen=True)
class AssessmentRequest:
    """The three fields of a validated assessment request."""

    audio_base64: str
    reference_text: str
    locale: str


def decode_json_body(
    raw: bytes,
    strategies: tuple[DecodeStrategy, ...] = DECODE_STRATEGIES,
) -> Any:
    """Decode a request body with the first strategy that succeeds.

    Raises:
        DecodeError: naming every attempted encoding when none succeeds.
    """
    for strategy in strategies:
        result = strategy.attempt(raw)
        if result.ok:
            return result.value
    raise DecodeError([s.name for s in strategies])


def validate_fields(value: Any) -> AssessmentRequest:
    """Check the required fields of a decoded body.

    WHY: The decoded JSON may be anything (null, a list, an object with
    missing keys). Each missing field must produce an error that names
    it, so callers know exactly what to fix.

    HOW: Non-objects are treated as an empty object. Fields are checked
    in REQUIRED_FIELDS order and the first missing one is reported.

    RULES:
    - Absent, null, empty string, 0 and false all count as missing
    - Values are passed through as-is
    """
    body = value if isinstance(value, dict) else {}
    for name in REQUIRED_FIELDS:
        if not body.get(name):
            raise MissingField(name)
    return AssessmentRequest(
        audio_base64=body["audioBase64"],
        reference_text=body["referenceText"],
        locale=body["locale"],
    )


def read_assessment_request(raw: bytes) -> AssessmentRequest:
    """Decode and validate a raw request body."""
    return validate_fields(decode_json_body(raw))


def decode_audio_base64(text: str) -> bytes:
    """Decode the ``audioBase64`` field into container bytes.

    RULES:
    - Whitespace is ignored and missing ``=`` padding is restored
    - Both the standard (``+/``) and URL-safe (``-_``) alphabets decode
    - Any other character, or a non-string value, is a client error
    """
    if not isinstance(text, str):
        raise InvalidContainer("audioBase64 is not valid base64.")
    compact = "".join(text.split()).rstrip("=")
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, altchars=b"-_", validate=True)
    except ValueError as exc:
        raise InvalidContainer("audioBase64 is not valid base64.") from exc
