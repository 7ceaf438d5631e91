"""Recognition service interface and its result types.

WHY: Speech recognition and pronunciation scoring happen in an external
service. The parsing and validation pipeline should not know which SDK
does the work, and tests need to swap in a fake without network access.

HOW: RecognitionService is an ABC with one async operation, submit().
It receives the validated PCM samples and returns a RecognitionResult:
the recognized text, the pronunciation sub-scores, and the backend's raw
JSON payload when one is available.

RULES:
- submit() receives mono 16-bit little-endian PCM at ``sample_rate``
- Each call makes exactly one recognition attempt, with no retries
- Scores the backend did not produce are None (the HTTP layer decides defaults)
- Failures are raised as BackendError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class PronunciationScores:
    """Sub-scores from the backend on a 0-100 scale, or None when absent."""

    accuracy: float | None = None
    pronunciation: float | None = None
    completeness: float | None = None
    fluency: float | None = None
    prosody: float | None = None


@dataclass
class RecognitionResult:
    """Everything a single recognition attempt produced.

    Attributes:
        recognized_text: Text the recognizer heard; empty when nothing matched.
        scores: Pronunciation sub-scores.
        raw: The backend's detailed JSON result, or None if unavailable.
    """

    recognized_text: str = ""
    scores: PronunciationScores = field(default_factory=PronunciationScores)
    raw: Any = None


class RecognitionService(ABC):
    """Abstract speech recognition and pronunciation scoring backend."""

    @abstractmethod
    async def submit(
        self,
        pcm: bytes | memoryview,
        sample_rate: int,
        reference_text: str,
        locale: str,
    ) -> RecognitionResult:
        """Recognize ``pcm`` and score it against ``reference_text``.

        Args:
            pcm: Raw mono 16-bit PCM samples.
            sample_rate: Samples per second of ``pcm``.
            reference_text: The text the speaker was asked to read.
            locale: BCP-47 recognition language, e.g. "en-US".

        Returns:
            RecognitionResult for this single attempt.
        """
