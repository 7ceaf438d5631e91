"""Recognition service package: the speech backend behind the pipeline.

WHY: The pipeline only needs one capability: submit PCM audio with a
reference text and get back recognized text plus scores. Keeping that
behind an interface isolates the Azure SDK from parsing and validation.

HOW: base.py defines the RecognitionService ABC and result dataclasses.
azure.py implements it with the Azure Speech SDK. It is imported lazily
by callers so the core and its tests never load the native SDK.

RULES:
- Nothing outside recognition/azure.py imports azure.cognitiveservices
- New backends subclass RecognitionService and implement submit()
"""

from pronunciation_assessor.recognition.base import (
    PronunciationScores,
    RecognitionResult,
    RecognitionService,
)

__all__ = ["PronunciationScores", "RecognitionResult", "RecognitionService"]
