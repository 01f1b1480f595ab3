import re
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from .exceptions import ConfigurationError

MAX_CALLS = 3
PAGE_SIZE = 50
TOKEN_PATTERN = re.compile(r'^[a-f0-9]{64}$')


@dataclass(frozen=True)
class TinySyncConfig:
    api_token: Optional[str]
    base_url: str = 'https://api.tiny.com.br/api2'
    timeout: float = 30.0
    max_calls: int = MAX_CALLS
    page_size: int = PAGE_SIZE

    @classmethod
    def from_settings(cls) -> 'TinySyncConfig':
        """Snapshot the Tiny settings for a single invocation."""
        return cls(
            api_token=getattr(settings, 'TINY_API_TOKEN', None),
            base_url=settings.TINY_API_BASE_URL.rstrip('/'),
            timeout=float(getattr(settings, 'TINY_API_TIMEOUT', 30.0)),
        )


def validate_token(token: Optional[str]) -> str:
    """
    Fail fast on a missing or malformed token, before any API budget is spent.

    Tiny tokens are 64 lowercase hex characters.
    """
    if not token or not token.strip():
        raise ConfigurationError(
            "Tiny API token not configured. Set TINY_API_TOKEN and try again."
        )
    token = token.strip()
    if not TOKEN_PATTERN.match(token):
        raise ConfigurationError(
            "Tiny API token has an invalid format (expected 64 hex characters). "
            "Reconfigure TINY_API_TOKEN."
        )
    return token
