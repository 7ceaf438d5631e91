"""End-to-end assessment pipeline, independent of HTTP.

WHY: The server and the CLI both need the same sequence: decode the
request, check fields, check configuration, decode base64, parse and
validate the WAV container, slice the samples, and submit them to the
recognition service. Keeping it here leaves the route handler as thin
plumbing and lets tests drive the whole flow with a fake backend.

HOW: run_assessment() takes the raw body and a zero-argument factory for
the recognition service. The factory is called only after the fields
validate, so a missing-field request reports the missing field even
when credentials are not configured. assess_audio() is the shorter path
for callers that already hold WAV bytes.

RULES:
- Step order: body decode, fields, service factory, base64, container,
  codec checks, sample extraction, recognition
- The first failing step's error propagates unchanged
- Nothing is cached between calls
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from pronunciation_assessor.core.request import (
    AssessmentRequest,
    decode_audio_base64,
    read_assessment_request,
)
from pronunciation_assessor.core.wav import ContainerHeader, load_pcm_audio
from pronunciation_assessor.recognition.base import RecognitionResult, RecognitionService

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[], RecognitionService]


@dataclass
class Assessment:
    """Result of one pipeline run: the request, the audio header, the backend result."""

    request: AssessmentRequest
    header: ContainerHeader
    result: RecognitionResult


async def assess_audio(
    wav_bytes: bytes,
    request: AssessmentRequest,
    service: RecognitionService,
) -> Assessment:
    """Validate a WAV buffer and submit its samples for assessment."""
    audio = load_pcm_audio(wav_bytes)
    header = audio.header
    logger.info(
        "Submitting %d PCM bytes at %d Hz (locale=%s)",
        header.data_size,
        header.sample_rate,
        request.locale,
    )
    result = await service.submit(
        audio.pcm, header.sample_rate, request.reference_text, request.locale
    )
    return Assessment(request=request, header=header, result=result)


async def run_assessment(body: bytes, service_factory: ServiceFactory) -> Assessment:
    """Run the full pipeline on a raw HTTP request body.

    Args:
        body: The request body bytes (UTF-8 or UTF-16LE JSON).
        service_factory: Builds the recognition service; may raise
            ConfigurationError.

    Returns:
        Assessment for the request.
    """
    request = read_assessment_request(body)
    service = service_factory()
    wav_bytes = decode_audio_base64(request.audio_base64)
    return await assess_audio(wav_bytes, request, service)
