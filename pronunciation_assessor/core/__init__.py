"""Core parsing, validation, and pipeline modules.

WHY: The core holds the parts of the service that do real work on
untrusted input: decoding the request body, walking the WAV chunk list,
and enforcing the recognizer's audio contract. None of it depends on
HTTP or on the speech SDK.

HOW: errors.py defines the exception hierarchy, request.py decodes and
validates the body, wav.py parses and slices the container, and
pipeline.py chains them in front of a RecognitionService.

RULES:
- No imports from server/ or the Azure SDK in this package
- Every failure is an AssessmentError subclass with a status code
"""
