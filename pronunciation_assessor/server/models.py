"""Pydantic response models for the HTTP API.

WHY: The endpoints need typed schemas for response serialization and
automatic OpenAPI documentation. Existing clients expect
camelCase JSON keys, while the Python side uses snake_case.

HOW: Each model declares snake_case fields with a camelCase ``alias``.
Handlers build models by field name and serialize with
``model_dump(by_alias=True)``.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- JSON keys are camelCase (via alias); populate_by_name allows snake_case construction
- The four main scores default to 0; prosodyScore defaults to null
- locale and referenceText are echoed exactly as the client sent them
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from pronunciation_assessor.core.pipeline import Assessment


def _or_zero(value: Optional[float]) -> float:
    return 0 if value is None else value


class ScoresModel(BaseModel):
    """Pronunciation sub-scores on a 0-100 scale."""

    accuracy_score: float = Field(default=0, alias="accuracyScore", description="Phoneme-level accuracy.")
    pronunciation_score: float = Field(
        default=0, alias="pronunciationScore", description="Overall pronunciation score."
    )
    completeness_score: float = Field(
        default=0, alias="completenessScore", description="Share of reference words spoken."
    )
    fluency_score: float = Field(default=0, alias="fluencyScore", description="Fluency score.")
    prosody_score: Optional[float] = Field(
        default=None,
        alias="prosodyScore",
        description="Prosody score, null unless prosody assessment is enabled.",
    )

    model_config = {"populate_by_name": True}


class AudioInfoModel(BaseModel):
    """Parsed WAV container header.

    RULES:
    - pcmBytes always equals dataSize
    """

    audio_format: int = Field(alias="audioFormat", description="WAVE format tag (1 = PCM).")
    num_channels: int = Field(alias="numChannels", description="Channel count.")
    sample_rate: int = Field(alias="sampleRate", description="Samples per second.")
    bits_per_sample: int = Field(alias="bitsPerSample", description="Bits per sample.")
    data_offset: int = Field(alias="dataOffset", description="Byte offset of the sample data.")
    data_size: int = Field(alias="dataSize", description="Byte length of the sample data.")
    pcm_bytes: int = Field(alias="pcmBytes", description="Same as dataSize.")

    model_config = {"populate_by_name": True}


class AssessmentResponse(BaseModel):
    """Successful pronunciation assessment."""

    locale: Any = Field(description="Recognition locale, echoed from the request.")
    reference_text: Any = Field(alias="referenceText", description="Echoed reference text.")
    recognized_text: str = Field(
        default="", alias="recognizedText", description="What the recognizer heard."
    )
    scores: ScoresModel = Field(description="Pronunciation sub-scores.")
    audio_info: AudioInfoModel = Field(alias="audioInfo", description="Parsed WAV header.")
    raw: Optional[Any] = Field(default=None, description="Raw backend JSON result, if available.")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "locale": "en-US",
                    "referenceText": "Good morning.",
                    "recognizedText": "Good morning.",
                    "scores": {
                        "accuracyScore": 97.0,
                        "pronunciationScore": 95.4,
                        "completenessScore": 100.0,
                        "fluencyScore": 93.0,
                        "prosodyScore": None,
                    },
                    "audioInfo": {
                        "audioFormat": 1,
                        "numChannels": 1,
                        "sampleRate": 16000,
                        "bitsPerSample": 16,
                        "dataOffset": 44,
                        "dataSize": 32000,
                        "pcmBytes": 32000,
                    },
                    "raw": None,
                }
            ]
        },
    }

    @classmethod
    def from_assessment(cls, assessment: Assessment) -> AssessmentResponse:
        """Build the response from a core Assessment.

        RULES:
        - Missing accuracy/pronunciation/completeness/fluency scores become 0
        - A missing prosody score stays None
        """
        scores = assessment.result.scores
        return cls(
            locale=assessment.request.locale,
            reference_text=assessment.request.reference_text,
            recognized_text=assessment.result.recognized_text or "",
            scores=ScoresModel(
                accuracy_score=_or_zero(scores.accuracy),
                pronunciation_score=_or_zero(scores.pronunciation),
                completeness_score=_or_zero(scores.completeness),
                fluency_score=_or_zero(scores.fluency),
                prosody_score=scores.prosody,
            ),
            audio_info=AudioInfoModel(**assessment.header.to_dict()),
            raw=assessment.result.raw,
        )


class TokenResponse(BaseModel):
    """A short-lived Azure Speech authorization token."""

    token: str = Field(description="Bearer token, valid for about 10 minutes.")
    region: str = Field(description="Azure region the token was issued for.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - error is always a human-readable message
    """

    error: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
