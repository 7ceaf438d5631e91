"""Pronunciation Assessor: WAV validation in front of Azure pronunciation scoring.

WHY: Learners record themselves reading a sentence; the app needs scores
for accuracy, fluency, completeness and pronunciation. The speech
backend only accepts raw mono 16-bit PCM, so every upload has to be
checked and unwrapped from its WAV container first.

HOW: Two-stage pipeline: decode the request (UTF-8 or UTF-16LE JSON),
then parse and validate the RIFF/WAVE container and slice out the exact
sample bytes. The samples go to a RecognitionService (Azure Speech in
production, a fake in tests). A FastAPI app and a CLI sit on top.

RULES:
- Audio is never transcoded; non-conforming input is rejected
- Nothing is persisted; every request stands alone
- The core (parsing, validation) never imports HTTP or SDK code
"""

__version__ = "0.1.0"
