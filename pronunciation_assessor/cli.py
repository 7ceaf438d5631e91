"""Command-line interface for assessing a local WAV file.

WHY: Checking a recording before wiring up a client is faster from the
terminal: is the file really mono 16-bit PCM, where does its data chunk
start, and what scores does it get? The CLI runs the same parser,
validator and recognition service as the HTTP endpoint.

HOW: Uses argparse to accept the WAV path, the reference text (inline or
from a file) and the locale. --inspect stops after parsing and prints
the container header. Otherwise the samples are submitted to Azure via
asyncio.run() and the response JSON (same shape as POST /api/assess) is
printed to stdout. Status messages go to stderr.

RULES:
- Positional argument: input WAV file path
- Exactly one of --reference / --reference-file, except with --inspect
- --inspect never contacts the speech service
- Exit codes: 0 success, 2 invalid input (same as the HTTP 400 cases),
  1 configuration or backend failure
- Python 3.9 compatible (no match/case, no X | Y unions in runtime code)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from pronunciation_assessor.config import LOG_FORMAT
from pronunciation_assessor.core.errors import AssessmentError, MissingField
from pronunciation_assessor.core.pipeline import assess_audio
from pronunciation_assessor.core.request import AssessmentRequest
from pronunciation_assessor.core.wav import load_pcm_audio, parse_wav
from pronunciation_assessor.recognition.base import RecognitionService
from pronunciation_assessor.server.models import AssessmentResponse, AudioInfoModel

DEFAULT_LOCALE = "en-US"

EXIT_BACKEND_ERROR = 1
EXIT_INVALID_INPUT = 2


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _default_service() -> RecognitionService:
    from pronunciation_assessor.recognition.azure import AzureRecognitionService

    return AzureRecognitionService.from_env()


def _read_reference(args: argparse.Namespace) -> str:
    if args.reference_file:
        return Path(args.reference_file).read_text(encoding="utf-8").strip()
    return args.reference or ""


def _inspect(wav_bytes: bytes) -> dict:
    """Parse and validate, returning the header plus the validation verdict."""
    header = parse_wav(wav_bytes)
    audio_info = AudioInfoModel(**header.to_dict()).model_dump(by_alias=True)
    info = {"audioInfo": audio_info, "valid": True, "error": None}
    try:
        load_pcm_audio(wav_bytes)
    except AssessmentError as exc:
        info["valid"] = False
        info["error"] = str(exc)
    return info


async def _run(
    args: argparse.Namespace,
    service_factory: Callable[[], RecognitionService],
) -> dict:
    input_path = Path(args.input_file)
    wav_bytes = input_path.read_bytes()
    _status("Read {} ({:,} bytes)".format(input_path.name, len(wav_bytes)))

    if args.inspect:
        return _inspect(wav_bytes)

    reference_text = _read_reference(args)
    if not reference_text:
        raise MissingField("referenceText")

    request = AssessmentRequest(
        audio_base64="",
        reference_text=reference_text,
        locale=args.locale,
    )
    service = service_factory()
    _status("Assessing pronunciation ({})...".format(args.locale))
    assessment = await assess_audio(wav_bytes, request, service)
    response = AssessmentResponse.from_assessment(assessment).model_dump(mode="json", by_alias=True)
    if not args.raw:
        response["raw"] = None
    return response


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: input_file (required)
    - Optional: --reference / --reference-file (mutually exclusive)
    - Optional: --locale, --inspect, --raw, --verbose
    """
    parser = argparse.ArgumentParser(
        prog="pronunciation-assess",
        description="Validate a mono 16-bit PCM WAV file and score its "
                    "pronunciation against a reference text with Azure Speech.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the WAV file to assess.",
    )

    reference = parser.add_mutually_exclusive_group()
    reference.add_argument(
        "--reference", "-r",
        default=None,
        help="The text the speaker was asked to read.",
    )
    reference.add_argument(
        "--reference-file",
        default=None,
        help="Path to a UTF-8 text file containing the reference text.",
    )

    parser.add_argument(
        "--locale",
        default=DEFAULT_LOCALE,
        help="Recognition locale (default: %(default)s).",
    )

    parser.add_argument(
        "--inspect",
        action="store_true",
        help="Only parse and validate the WAV file; print its header and exit.",
    )

    parser.add_argument(
        "--raw",
        action="store_true",
        help="Include the raw recognition JSON in the output.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(
    argv: Optional[List[str]] = None,
    service_factory: Optional[Callable[[], RecognitionService]] = None,
) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv and service_factory are for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        result = asyncio.run(_run(args, service_factory or _default_service))
    except OSError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT)
    except AssessmentError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT if e.status_code < 500 else EXIT_BACKEND_ERROR)

    print(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
