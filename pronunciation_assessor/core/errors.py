"""Typed exceptions for every way an assessment request can fail.

WHY: The HTTP layer must turn each failure into exactly one status code
and a plain message. Client mistakes (bad body, bad audio) are 400s;
missing credentials and backend outages are 500s. A single hierarchy
lets the request boundary make that decision with one ``except`` clause.

HOW: AssessmentError is the root and carries a ``status_code`` class
attribute. Subclasses only set their status and build a message; some
keep structured fields (``field``, ``actual``, ``expected``) so tests
and callers can inspect them without parsing strings.

RULES:
- Client errors (status 400): DecodeError, MissingField, InvalidContainer,
  MissingFormatChunk, MissingDataChunk, UnsupportedCodec,
  UnsupportedChannelLayout, UnsupportedBitDepth
- Server errors (status 500): ConfigurationError, BackendError
- str(exc) is the message sent to the client
- Codec errors always embed the observed value in the message
"""

from __future__ import annotations


class AssessmentError(Exception):
    """Base class for all errors surfaced by the assessment pipeline."""

    status_code = 500

    @property
    def message(self) -> str:
        return str(self)


# ---------------------------------------------------------------------------
# Request body errors
# ---------------------------------------------------------------------------


class DecodeError(AssessmentError):
    """Raised when the request body is not JSON under any accepted encoding.

    RULES:
    - Message names every encoding that was attempted
    """

    status_code = 400

    def __init__(self, encodings: list[str]) -> None:
        self.encodings = list(encodings)
        super().__init__(
            "Invalid JSON body (could not decode as {}).".format(
                " or ".join(self.encodings)
            )
        )


class MissingField(AssessmentError):
    """Raised when a required request field is absent or empty."""

    status_code = 400

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} (string) is required.")


# ---------------------------------------------------------------------------
# Container errors
# ---------------------------------------------------------------------------


class InvalidContainer(AssessmentError):
    """Raised for a buffer that is not a usable RIFF/WAVE container."""

    status_code = 400


class MissingFormatChunk(InvalidContainer):
    def __init__(self) -> None:
        super().__init__("WAV missing fmt chunk.")


class MissingDataChunk(InvalidContainer):
    def __init__(self) -> None:
        super().__init__("WAV missing data chunk.")


# ---------------------------------------------------------------------------
# Codec errors
# ---------------------------------------------------------------------------


class UnsupportedAudio(AssessmentError):
    """Raised when a parsed header violates the recognizer's input contract.

    WHY: The recognizer only accepts mono 16-bit linear PCM. We reject
    anything else instead of converting it.

    HOW: Subclasses fix the ``label`` used in the message and the
    human-readable description of the expected value.

    RULES:
    - Message format: "<label>=<actual>. Expected <expected_text>."
    """

    status_code = 400
    label = "value"
    expected_text = ""

    def __init__(self, actual: int, expected: int) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(
            "{}={}. Expected {}.".format(self.label, actual, self.expected_text or expected)
        )


class UnsupportedCodec(UnsupportedAudio):
    label = "audioFormat"
    expected_text = "PCM (1)"


class UnsupportedChannelLayout(UnsupportedAudio):
    label = "channels"
    expected_text = "mono (1)"


class UnsupportedBitDepth(UnsupportedAudio):
    label = "bitsPerSample"
    expected_text = "16"


# ---------------------------------------------------------------------------
# Server-side errors
# ---------------------------------------------------------------------------


class ConfigurationError(AssessmentError):
    """Raised when speech credentials or region are not configured."""

    status_code = 500


class BackendError(AssessmentError):
    """Raised when the recognition service or token endpoint fails.

    RULES:
    - upstream_status is the HTTP status from the upstream, if there was one
    """

    status_code = 500

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)
