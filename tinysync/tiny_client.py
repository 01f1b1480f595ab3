import json
import logging
import re

import requests

from .config import TinySyncConfig, validate_token
from .exceptions import AuthenticationError, RateLimitExceeded, RemoteError, RemoteUnavailable

logger = logging.getLogger(__name__)

XML_ERROR_RE = re.compile(r'<erro(?:\s[^>]*)?>(.*?)</erro>', re.IGNORECASE | re.DOTALL)
XML_FALLBACK_MESSAGE = 'Tiny API returned an XML error (invalid token?)'


class CallBudget:
    """
    Hard cap on outbound calls for one invocation.

    The counter starts at zero and never resets; a fresh budget belongs to
    every new client. Once `max_calls` calls have been counted, `acquire`
    refuses without letting the caller reach the network.
    """

    def __init__(self, max_calls: int):
        self._max_calls = max_calls
        self._used = 0

    @property
    def used(self) -> int:
        return self._used

    @property
    def max_calls(self) -> int:
        return self._max_calls

    def acquire(self):
        if self._used >= self._max_calls:
            raise RateLimitExceeded(
                f"MAX_CALLS limit reached ({self._max_calls}): "
                "call budget exhausted; narrow filters or retry later."
            )
        self._used += 1


class TinyClient:
    def __init__(self, config: TinySyncConfig):
        self._base_url = config.base_url.rstrip('/')
        self._token = validate_token(config.api_token)
        self._timeout = config.timeout
        self._session = requests.Session()
        self._session.headers.update({'Accept': 'application/json'})
        self.budget = CallBudget(config.max_calls)

    @property
    def calls_used(self) -> int:
        return self.budget.used

    def account_info(self) -> dict:
        return self.call('info.php')

    def search(self, endpoint: str, **params) -> dict:
        """POST to one of the `*.pesquisa.php` endpoints and return `retorno`."""
        return self.call(endpoint, **params)

    def call(self, endpoint: str, **params) -> dict:
        self.budget.acquire()
        url = f"{self._base_url}/{endpoint}"
        data = {'token': self._token, 'formato': 'JSON'}
        data.update({k: v for k, v in params.items() if v is not None})

        logger.debug("Tiny call %d/%d: %s", self.budget.used, self.budget.max_calls, endpoint)
        try:
            response = self._session.post(url, data=data, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RemoteUnavailable(f"Tiny API unavailable: {exc}") from exc

        return self._classify(response)

    @staticmethod
    def _classify(response: requests.Response) -> dict:
        """
        Turn a raw Tiny response into a trusted `retorno` dict.

        Tiny reports errors in-band, so the body is inspected even when the
        transport succeeded:
          1. non-2xx status -> RemoteUnavailable
          2. legacy XML envelope -> RemoteError with the <erro> text
          3. JSON with status "Erro" or an error code -> RemoteError
             (AuthenticationError when the message is about the token)
        """
        if not 200 <= response.status_code < 300:
            raise RemoteUnavailable(
                f"Invalid token or Tiny API unavailable (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        text = response.text.strip()
        if text.startswith('<?xml'):
            logger.error("Tiny returned XML instead of JSON: %s", text[:500])
            match = XML_ERROR_RE.search(text)
            fragment = match.group(1).strip() if match else ''
            raise RemoteError(f"Tiny API error: {fragment or XML_FALLBACK_MESSAGE}")

        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise RemoteError('Invalid response from Tiny API') from exc

        retorno = payload.get('retorno') if isinstance(payload, dict) else None
        if not isinstance(retorno, dict):
            raise RemoteError('Invalid response from Tiny API: missing "retorno"')

        if retorno.get('status') == 'Erro' or retorno.get('codigo_erro'):
            message = _first_error(retorno) or 'Unknown error'
            if 'token' in message.lower():
                raise AuthenticationError(
                    f"Tiny API rejected the token: {message}. Reconfigure TINY_API_TOKEN."
                )
            raise RemoteError(f"Tiny API: {message}")

        return retorno


def _first_error(retorno: dict):
    errors = retorno.get('erros') or []
    if not errors:
        return None
    first = errors[0]
    if isinstance(first, dict):
        return first.get('erro')
    return str(first)
