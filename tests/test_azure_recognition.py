"""Tests for the Azure recognition adapter without network access.

HOW: SDK result objects are replaced with SimpleNamespace stand-ins and
PronunciationAssessmentResult is monkeypatched, so no recognizer is ever
created.
"""

import asyncio
import json
from types import SimpleNamespace

import pytest

speechsdk = pytest.importorskip("azure.cognitiveservices.speech")

from pronunciation_assessor.core.errors import BackendError, ConfigurationError  # noqa: E402
from pronunciation_assessor.recognition import azure as azure_module  # noqa: E402
from pronunciation_assessor.recognition.azure import (  # noqa: E402
    AzureRecognitionService,
    _to_recognition_result,
)
from pronunciation_assessor.recognition.base import RecognitionResult  # noqa: E402

DETAIL_JSON = {"RecognitionStatus": "Success", "DisplayText": "Good morning."}


def _result(reason, text="", raw=None, cancellation_details=None):
    properties = {}
    if raw is not None:
        properties[speechsdk.PropertyId.SpeechServiceResponse_JsonResult] = raw
    return SimpleNamespace(
        reason=reason,
        text=text,
        properties=properties,
        cancellation_details=cancellation_details,
    )


@pytest.fixture
def fake_assessment(monkeypatch):
    scores = SimpleNamespace(
        accuracy_score=97.0,
        pronunciation_score=95.4,
        completeness_score=100.0,
        fluency_score=93.0,
        prosody_score=None,
    )
    monkeypatch.setattr(speechsdk, "PronunciationAssessmentResult", lambda result: scores)
    return scores


class TestToRecognitionResult:
    def test_recognized_speech(self, fake_assessment):
        result = _to_recognition_result(
            _result(speechsdk.ResultReason.RecognizedSpeech, "Good morning.", json.dumps(DETAIL_JSON))
        )
        assert result.recognized_text == "Good morning."
        assert result.scores.accuracy == 97.0
        assert result.scores.pronunciation == 95.4
        assert result.scores.completeness == 100.0
        assert result.scores.fluency == 93.0
        assert result.scores.prosody is None
        assert result.raw == DETAIL_JSON

    def test_unparseable_raw_json_is_dropped(self, fake_assessment):
        result = _to_recognition_result(
            _result(speechsdk.ResultReason.RecognizedSpeech, "Hi", "{truncated")
        )
        assert result.raw is None
        assert result.scores.accuracy == 97.0

    def test_no_match_has_no_scores(self):
        result = _to_recognition_result(_result(speechsdk.ResultReason.NoMatch))
        assert result.recognized_text == ""
        assert result.scores.accuracy is None
        assert result.scores.fluency is None

    def test_canceled_raises_backend_error(self):
        details = SimpleNamespace(
            reason=speechsdk.CancellationReason.Error,
            error_details="WebSocket upgrade failed: Authentication error (401)",
        )
        with pytest.raises(BackendError) as excinfo:
            _to_recognition_result(
                _result(speechsdk.ResultReason.Canceled, cancellation_details=details)
            )
        assert "canceled" in str(excinfo.value)
        assert "401" in str(excinfo.value)
        assert excinfo.value.status_code == 500


class TestAzureRecognitionService:
    def test_from_env_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            AzureRecognitionService.from_env()

    def test_from_env(self, speech_env):
        service = AzureRecognitionService.from_env()
        assert service._key == "test-key"
        assert service._region == "westeurope"

    def test_submit_passes_bytes_to_worker(self, monkeypatch):
        calls = []
        expected = RecognitionResult(recognized_text="ok")

        def fake_recognize(self, pcm, sample_rate, reference_text, locale):
            calls.append((pcm, sample_rate, reference_text, locale))
            return expected

        monkeypatch.setattr(azure_module.AzureRecognitionService, "_recognize_once", fake_recognize)
        service = AzureRecognitionService("k", "westeurope")
        result = asyncio.run(service.submit(memoryview(b"\x01\x02\x03\x04"), 8000, "Hi", "en-US"))

        assert result is expected
        assert calls == [(b"\x01\x02\x03\x04", 8000, "Hi", "en-US")]
        assert isinstance(calls[0][0], bytes)
