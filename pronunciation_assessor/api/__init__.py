"""Outbound HTTP clients.

WHY: The token endpoint proxies one call to Azure's token service. That
call lives behind a small async client so the route handler never builds
URLs or headers itself.

RULES:
- All outbound HTTP goes through classes in this package
"""

from pronunciation_assessor.api.token_client import SpeechTokenClient

__all__ = ["SpeechTokenClient"]
