"""Async HTTP client for Azure Speech authorization tokens.

WHY: Browser and mobile clients talk to Azure Speech directly, but must
never see the subscription key. The server exchanges the key for a
short-lived (10 minute) bearer token and hands out only the token.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. SpeechTokenClient is
an async context manager: enter it to get a client with the key header
set, exit to close the connection pool. issue_token() makes one POST
with an empty body to the regional STS endpoint and returns the token
text unchanged.

RULES:
- Always use the async context manager (async with SpeechTokenClient(...) as client:)
- The key is sent as Ocp-Apim-Subscription-Key, never in the URL
- Non-2xx responses raise BackendError with the status and body
- Network errors (httpx.HTTPError) raise BackendError
- One attempt per call, no retries
"""

from __future__ import annotations

import logging

import httpx

from pronunciation_assessor.config import SPEECH_TOKEN_TIMEOUT, SPEECH_TOKEN_URL
from pronunciation_assessor.core.errors import BackendError

logger = logging.getLogger(__name__)

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"


class SpeechTokenClient:
    """Async client for the Azure Speech STS issueToken endpoint.

    RULES:
    - Use as: async with SpeechTokenClient(key, region) as client: ...
    - url_template must contain a ``{region}`` placeholder
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        key: str,
        region: str,
        url_template: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._key = key
        self._region = region
        self._url = (url_template or SPEECH_TOKEN_URL).format(region=region)
        self._timeout = timeout if timeout is not None else SPEECH_TOKEN_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def region(self) -> str:
        return self._region

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> SpeechTokenClient:
        self._client = httpx.AsyncClient(
            headers={SUBSCRIPTION_KEY_HEADER: self._key},
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "SpeechTokenClient must be used as an async context manager: "
                "async with SpeechTokenClient(key, region) as client: ..."
            )
        return self._client

    async def issue_token(self) -> str:
        """Request a new authorization token.

        Returns:
            The raw token string from the response body.

        Raises:
            BackendError: on a non-2xx response or a network failure.
        """
        client = self._ensure_client()
        try:
            resp = await client.post(self._url, content=b"")
        except httpx.HTTPError as exc:
            logger.warning("Token request to %s failed: %s", self._url, exc)
            raise BackendError("Token request failed: {}".format(exc)) from exc

        if not 200 <= resp.status_code < 300:
            raise BackendError(
                "Token request failed: {} {}".format(resp.status_code, resp.text),
                upstream_status=resp.status_code,
            )
        return resp.text
