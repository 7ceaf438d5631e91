"""Azure Speech SDK implementation of the recognition service.

WHY: Azure's pronunciation assessment scores a spoken attempt against a
reference text (accuracy, fluency, completeness, overall pronunciation,
and optionally prosody) in a single recognition pass.

HOW: The validated PCM samples are written to a push stream with an
explicit format (sample rate from the container, 16-bit, mono), so the
SDK never has to sniff a WAV header. A PronunciationAssessmentConfig is
applied to a SpeechRecognizer and one recognize_once call is made. The
SDK call blocks, so submit() runs it in a worker thread.

RULES:
- Exactly one recognition attempt per submit(), no retries
- Grading: hundred-mark scale, phoneme granularity
- Miscue detection and prosody follow SPEECH_ENABLE_MISCUE / SPEECH_ENABLE_PROSODY
- Canceled recognition raises BackendError with the cancellation details
- NoMatch is not an error: empty text and no scores
- The raw JSON result is parsed best-effort; failure leaves raw=None
- The push stream is closed on every path; the recognizer is local to
  the worker call and released when it returns
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import azure.cognitiveservices.speech as speechsdk

from pronunciation_assessor.config import (
    SPEECH_ENABLE_MISCUE,
    SPEECH_ENABLE_PROSODY,
    load_speech_credentials,
)
from pronunciation_assessor.core.errors import BackendError
from pronunciation_assessor.recognition.base import (
    PronunciationScores,
    RecognitionResult,
    RecognitionService,
)

logger = logging.getLogger(__name__)

_BITS_PER_SAMPLE = 16
_CHANNELS = 1


class AzureRecognitionService(RecognitionService):
    """Pronunciation assessment backed by Azure Cognitive Services Speech.

    RULES:
    - Use from_env() in the server; pass key/region explicitly elsewhere
    - Instances hold no per-request state and may be shared
    """

    def __init__(
        self,
        key: str,
        region: str,
        enable_miscue: bool = SPEECH_ENABLE_MISCUE,
        enable_prosody: bool = SPEECH_ENABLE_PROSODY,
    ) -> None:
        self._key = key
        self._region = region
        self._enable_miscue = enable_miscue
        self._enable_prosody = enable_prosody

    @classmethod
    def from_env(cls) -> AzureRecognitionService:
        """Build a service from SPEECH_KEY / SPEECH_REGION (ConfigurationError if unset)."""
        credentials = load_speech_credentials()
        return cls(key=credentials.key, region=credentials.region)

    async def submit(
        self,
        pcm: bytes | memoryview,
        sample_rate: int,
        reference_text: str,
        locale: str,
    ) -> RecognitionResult:
        return await asyncio.to_thread(
            self._recognize_once, bytes(pcm), sample_rate, reference_text, locale
        )

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _recognize_once(
        self,
        pcm: bytes,
        sample_rate: int,
        reference_text: str,
        locale: str,
    ) -> RecognitionResult:
        stream_format = speechsdk.audio.AudioStreamFormat(
            samples_per_second=sample_rate,
            bits_per_sample=_BITS_PER_SAMPLE,
            channels=_CHANNELS,
        )
        push_stream = speechsdk.audio.PushAudioInputStream(stream_format=stream_format)
        stream_closed = False
        try:
            push_stream.write(pcm)
            push_stream.close()
            stream_closed = True

            speech_config = speechsdk.SpeechConfig(
                subscription=self._key, region=self._region
            )
            speech_config.speech_recognition_language = locale
            audio_config = speechsdk.audio.AudioConfig(stream=push_stream)

            recognizer = speechsdk.SpeechRecognizer(
                speech_config=speech_config, audio_config=audio_config
            )
            self._assessment_config(reference_text).apply_to(recognizer)

            result = recognizer.recognize_once_async().get()
        except RuntimeError as exc:
            logger.exception("Azure Speech recognition failed")
            raise BackendError("Speech recognition failed: {}".format(exc)) from exc
        finally:
            if not stream_closed:
                push_stream.close()

        return _to_recognition_result(result)

    def _assessment_config(self, reference_text: str) -> Any:
        config = speechsdk.PronunciationAssessmentConfig(
            reference_text=reference_text,
            grading_system=speechsdk.PronunciationAssessmentGradingSystem.HundredMark,
            granularity=speechsdk.PronunciationAssessmentGranularity.Phoneme,
            enable_miscue=self._enable_miscue,
        )
        if self._enable_prosody:
            config.enable_prosody_assessment()
        return config


def _to_recognition_result(result: Any) -> RecognitionResult:
    """Convert an SDK recognition result into a RecognitionResult.

    Raises:
        BackendError: when the recognition was canceled (bad key, network
            failure, quota, unsupported locale, ...).
    """
    if result.reason == speechsdk.ResultReason.Canceled:
        details = result.cancellation_details
        message = "Speech recognition canceled: {}".format(details.reason)
        if details.error_details:
            message = "{} ({})".format(message, details.error_details)
        raise BackendError(message)

    if result.reason != speechsdk.ResultReason.RecognizedSpeech:
        logger.info("No speech recognized (reason=%s)", result.reason)
        return RecognitionResult(recognized_text=result.text or "", raw=_raw_json(result))

    assessment = speechsdk.PronunciationAssessmentResult(result)
    scores = PronunciationScores(
        accuracy=getattr(assessment, "accuracy_score", None),
        pronunciation=getattr(assessment, "pronunciation_score", None),
        completeness=getattr(assessment, "completeness_score", None),
        fluency=getattr(assessment, "fluency_score", None),
        prosody=getattr(assessment, "prosody_score", None),
    )
    return RecognitionResult(
        recognized_text=result.text or "",
        scores=scores,
        raw=_raw_json(result),
    )


def _raw_json(result: Any) -> Any:
    """Best-effort parse of the detailed JSON result; None on any problem."""
    try:
        raw = result.properties.get(speechsdk.PropertyId.SpeechServiceResponse_JsonResult)
        return json.loads(raw) if raw else None
    except (AttributeError, TypeError, ValueError):
        logger.debug("Could not parse raw recognition JSON", exc_info=True)
        return None
