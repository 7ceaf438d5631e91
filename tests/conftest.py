"""Shared test fixtures for the pronunciation_assessor test suite.

WHY: Most tests need synthetic WAV containers with precise control over
chunk order, sizes and padding, plus a recognition backend that never
touches the network. Centralizing the builders keeps every test module
working from the same byte layout.

HOW: build_chunk() and build_wav() assemble containers byte by byte.
fmt_payload() builds a ``fmt `` chunk body. FakeRecognitionService
implements the RecognitionService interface and records every call.

RULES:
- Builders apply the even-byte pad rule unless told not to
- SPEECH_* credentials are cleared before every test so a local .env
  cannot leak into results
"""

from __future__ import annotations

import base64
import json
import struct
from typing import Any, Dict, List, Optional

import pytest

from pronunciation_assessor.recognition.base import (
    PronunciationScores,
    RecognitionResult,
    RecognitionService,
)

# Half a second of a quiet ramp at 16 kHz, 16-bit mono.
SAMPLE_PCM = b"".join(struct.pack("<h", (i % 64) - 32) for i in range(8000))

CREDENTIAL_VARS = ("SPEECH_KEY", "AZURE_SPEECH_KEY", "SPEECH_REGION", "AZURE_SPEECH_REGION")


# ---------------------------------------------------------------------------
# Container builders
# ---------------------------------------------------------------------------


def fmt_payload(
    audio_format: int = 1,
    channels: int = 1,
    sample_rate: int = 16000,
    bits_per_sample: int = 16,
    extra: bytes = b"",
) -> bytes:
    """Body of a ``fmt `` chunk; ``extra`` is appended (e.g. cbSize)."""
    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align
    return struct.pack(
        "<HHIIHH",
        audio_format,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    ) + extra


def build_chunk(tag: bytes, payload: bytes, pad: bool = True, declared_size: Optional[int] = None) -> bytes:
    """One chunk: tag, little-endian size, payload, and a pad byte if odd."""
    size = len(payload) if declared_size is None else declared_size
    chunk = tag + struct.pack("<I", size) + payload
    if pad and len(payload) % 2:
        chunk += b"\x00"
    return chunk


def build_wav(*chunks: bytes, riff: bytes = b"RIFF", wave: bytes = b"WAVE") -> bytes:
    """RIFF header followed by the given pre-built chunks."""
    body = wave + b"".join(chunks)
    return riff + struct.pack("<I", len(body)) + body


def build_pcm_wav(pcm: bytes = SAMPLE_PCM, **fmt_kwargs: Any) -> bytes:
    """Canonical 44-byte-header WAV: fmt then data."""
    return build_wav(
        build_chunk(b"fmt ", fmt_payload(**fmt_kwargs)),
        build_chunk(b"data", pcm),
    )


def request_body(
    wav: Optional[bytes] = None,
    reference_text: str = "Good morning.",
    locale: str = "en-US",
    **overrides: Any,
) -> Dict[str, Any]:
    """A JSON-ready assessment request dict."""
    body = {
        "audioBase64": base64.b64encode(wav if wav is not None else build_pcm_wav()).decode("ascii"),
        "referenceText": reference_text,
        "locale": locale,
    }
    body.update(overrides)
    return {k: v for k, v in body.items() if v is not None}


def encode_body(body: Any, encoding: str = "utf-8") -> bytes:
    return json.dumps(body).encode(encoding)


# ---------------------------------------------------------------------------
# Fake recognition backend
# ---------------------------------------------------------------------------


class FakeRecognitionService(RecognitionService):
    """In-memory RecognitionService that returns a canned result."""

    def __init__(
        self,
        result: Optional[RecognitionResult] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.result = result or RecognitionResult(
            recognized_text="Good morning.",
            scores=PronunciationScores(
                accuracy=97.0,
                pronunciation=95.4,
                completeness=100.0,
                fluency=93.0,
            ),
            raw={"RecognitionStatus": "Success"},
        )
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def submit(self, pcm, sample_rate, reference_text, locale):
        self.calls.append(
            {
                "pcm": bytes(pcm),
                "sample_rate": sample_rate,
                "reference_text": reference_text,
                "locale": locale,
            }
        )
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(autouse=True)
def _clear_speech_env(monkeypatch):
    """Remove speech credentials so every test starts unconfigured."""
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def speech_env(monkeypatch):
    """Configure a fake subscription key and region."""
    monkeypatch.setenv("SPEECH_KEY", "test-key")
    monkeypatch.setenv("SPEECH_REGION", "westeurope")


@pytest.fixture
def fake_service():
    return FakeRecognitionService()


@pytest.fixture
def pcm_wav():
    """A valid 16 kHz mono 16-bit WAV holding SAMPLE_PCM."""
    return build_pcm_wav()
