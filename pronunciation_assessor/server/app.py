"""FastAPI application with the assessment and token endpoints.

WHY: Language-learning clients need one HTTP call that takes a recorded
WAV plus the sentence the learner was asked to read and returns scores.
Clients that talk to Azure Speech directly need a way to get a token
without ever holding the subscription key.

HOW: POST /api/assess reads the raw body (so UTF-16LE bodies survive),
runs the core pipeline, and converts the Assessment into the camelCase
response model. GET|POST /api/token exchanges the subscription key for a
short-lived token. Both handlers are the single place where errors turn
into status codes: AssessmentError subclasses carry their own status,
anything else is a 500 with the exception text.

RULES:
- Every error body is {"error": "<message>"}
- Successful assessment responses declare application/json; charset=utf-8
- The recognition service and token client are FastAPI dependencies so
  tests can override them (app.dependency_overrides)
- The service factory is called only after the request fields validate
- No state is shared between requests
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import Annotated, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from pronunciation_assessor import __version__
from pronunciation_assessor.api.token_client import SpeechTokenClient
from pronunciation_assessor.config import (
    ASSESSOR_HOST,
    ASSESSOR_PORT,
    DEFAULT_TOKEN_REGION,
    LOG_FORMAT,
    LOG_LEVEL,
    load_speech_key,
    load_speech_region,
)
from pronunciation_assessor.core.errors import AssessmentError
from pronunciation_assessor.core.pipeline import ServiceFactory, run_assessment
from pronunciation_assessor.server.models import (
    AssessmentResponse,
    ErrorResponse,
    HealthResponse,
    TokenResponse,
)

logger = logging.getLogger(__name__)

TokenClientFactory = Callable[[str, str], SpeechTokenClient]


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


app = FastAPI(
    title="Pronunciation Assessor API",
    description=(
        "Pronunciation assessment for mono 16-bit PCM WAV recordings. "
        "Submit base64 audio with a reference text and locale, receive "
        "accuracy, fluency, completeness and pronunciation scores. A token "
        "endpoint issues short-lived Azure Speech tokens for direct clients."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _azure_service():
    from pronunciation_assessor.recognition.azure import AzureRecognitionService

    return AzureRecognitionService.from_env()


def get_recognition_service_factory() -> ServiceFactory:
    """Return the factory that builds the recognition service per request."""
    return _azure_service


def get_token_client_factory() -> TokenClientFactory:
    """Return the factory that builds a token client for (key, region)."""
    return SpeechTokenClient


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_response(status_code: int, message: str) -> JSONResponse:
    return UTF8JSONResponse(status_code=status_code, content={"error": message})


def _handle_error(exc: Exception, endpoint: str) -> JSONResponse:
    """Convert any exception raised by a handler into an error response."""
    if isinstance(exc, AssessmentError):
        if exc.status_code >= 500:
            logger.error("%s error: %s", endpoint, exc)
        else:
            logger.info("%s rejected: %s", endpoint, exc)
        return _error_response(exc.status_code, str(exc))

    logger.exception("%s error", endpoint)
    return _error_response(500, str(exc) or exc.__class__.__name__)


# ---------------------------------------------------------------------------
# Endpoints: Assessment
# ---------------------------------------------------------------------------


@app.post(
    "/api/assess",
    response_model=AssessmentResponse,
    tags=["assessment"],
    summary="Assess pronunciation of a WAV recording",
    description=(
        "Body: JSON {audioBase64, referenceText, locale}, UTF-8 or UTF-16LE. "
        "The audio must be a RIFF/WAVE file with mono 16-bit PCM samples; "
        "other formats are rejected, never converted."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Malformed body, missing field, or unsupported audio"},
        500: {"model": ErrorResponse, "description": "Missing configuration or recognition failure"},
    },
)
async def assess(
    request: Request,
    service_factory: Annotated[ServiceFactory, Depends(get_recognition_service_factory)],
) -> Response:
    body = await request.body()
    try:
        assessment = await run_assessment(body, service_factory)
        response = AssessmentResponse.from_assessment(assessment)
    except Exception as exc:
        return _handle_error(exc, "assess")

    return UTF8JSONResponse(content=response.model_dump(mode="json", by_alias=True))


# ---------------------------------------------------------------------------
# Endpoints: Token
# ---------------------------------------------------------------------------


@app.api_route(
    "/api/token",
    methods=["GET", "POST"],
    response_model=TokenResponse,
    tags=["token"],
    summary="Issue a short-lived Azure Speech token",
    description=(
        "Exchanges the configured subscription key for an authorization "
        "token valid for about 10 minutes. The region defaults to "
        "'{}' when SPEECH_REGION is not set.".format(DEFAULT_TOKEN_REGION)
    ),
    responses={
        500: {"model": ErrorResponse, "description": "Missing key or token service failure"},
    },
)
async def issue_token(
    client_factory: Annotated[TokenClientFactory, Depends(get_token_client_factory)],
) -> Response:
    try:
        key = load_speech_key()
        region = load_speech_region(default=DEFAULT_TOKEN_REGION)
        async with client_factory(key, region) as client:
            token = await client.issue_token()
    except Exception as exc:
        return _handle_error(exc, "token")

    return UTF8JSONResponse(content=TokenResponse(token=token, region=region).model_dump())


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the pronunciation-assessor-api console script."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    uvicorn.run(app, host=ASSESSOR_HOST, port=ASSESSOR_PORT)
