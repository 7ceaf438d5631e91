"""Configuration constants, speech credentials, and .env loading.

WHY: Centralizes every configurable value so it is easy to find,
update, and override. Deployments set credentials through environment
variables; local development keeps them in a .env file.

HOW: python-dotenv loads the .env file on import. Plain settings are
module-level constants read once. Credentials are read by functions at
call time, so a running server picks up the current environment and
tests can monkeypatch it.

RULES:
- Subscription key: SPEECH_KEY, then AZURE_SPEECH_KEY (first non-empty wins)
- Region: SPEECH_REGION, then AZURE_SPEECH_REGION
- The token endpoint falls back to DEFAULT_TOKEN_REGION; assessment does not
- Missing credentials raise ConfigurationError, never a placeholder value
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from pronunciation_assessor.core.errors import ConfigurationError

# Load .env from the project root (where the server is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Credential environment variables (checked in order)
# ---------------------------------------------------------------------------

SPEECH_KEY_VARS = ("SPEECH_KEY", "AZURE_SPEECH_KEY")
SPEECH_REGION_VARS = ("SPEECH_REGION", "AZURE_SPEECH_REGION")

DEFAULT_TOKEN_REGION = "canadacentral"
"""Region used by the token endpoint when none is configured."""

# ---------------------------------------------------------------------------
# Service defaults
# ---------------------------------------------------------------------------

SPEECH_TOKEN_URL = os.getenv(
    "SPEECH_TOKEN_URL",
    "https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken",
)
SPEECH_TOKEN_TIMEOUT = float(os.getenv("SPEECH_TOKEN_TIMEOUT", "10"))
SPEECH_ENABLE_PROSODY = os.getenv("SPEECH_ENABLE_PROSODY", "false").lower() == "true"
SPEECH_ENABLE_MISCUE = os.getenv("SPEECH_ENABLE_MISCUE", "true").lower() == "true"

ASSESSOR_HOST = os.getenv("ASSESSOR_HOST", "0.0.0.0")
ASSESSOR_PORT = int(os.getenv("ASSESSOR_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


@dataclass(frozen=True)
class SpeechCredentials:
    """Subscription key and region for the Azure Speech service."""

    key: str
    region: str


def _first_env(names: tuple[str, ...]) -> str:
    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


def load_speech_key() -> str:
    """Load the Azure Speech subscription key from the environment.

    RULES:
    - Raises ConfigurationError if both variables are missing or empty
    """
    key = _first_env(SPEECH_KEY_VARS)
    if not key:
        raise ConfigurationError(
            "Missing SPEECH_KEY in environment. "
            "Set SPEECH_KEY or AZURE_SPEECH_KEY (or add it to .env)."
        )
    return key


def load_speech_region(default: str | None = None) -> str:
    """Load the Azure Speech region, falling back to ``default`` if given."""
    region = _first_env(SPEECH_REGION_VARS) or default
    if not region:
        raise ConfigurationError(
            "Missing SPEECH_REGION in environment. "
            "Set SPEECH_REGION or AZURE_SPEECH_REGION (or add it to .env)."
        )
    return region


def load_speech_credentials() -> SpeechCredentials:
    """Load key and region for pronunciation assessment.

    WHY: Assessment must fail closed. Sending audio to a guessed region
    would hide a misconfiguration behind confusing backend errors.

    RULES:
    - No default region
    - One error naming both settings when either is missing
    """
    key = _first_env(SPEECH_KEY_VARS)
    region = _first_env(SPEECH_REGION_VARS)
    if not key or not region:
        raise ConfigurationError("Missing SPEECH_KEY or SPEECH_REGION in environment.")
    return SpeechCredentials(key=key, region=region)
