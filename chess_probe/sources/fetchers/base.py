# chess_probe/chess_probe/sources/fetchers/base.py
"""
Shared HTTP plumbing for the game fetchers.

Every fetcher receives an `httpx.AsyncClient` from its caller, so the
pipeline owns the connection pool and tests can inject a client built on
`httpx.MockTransport`. Transport failures and data-shape failures both end
up as `GameNotFound`, but with messages that tell them apart.
"""
import json
import logging
from typing import Any, Dict, Optional

import httpx

from chess_probe.config import settings
from chess_probe.exceptions import FetchTimeoutError, GameNotFound

logger = logging.getLogger(settings.APP_NAME + ".Fetcher")


class BaseFetcher:
    """Base class for the source-specific fetchers."""

    #: Human readable provider name, used in error messages.
    provider: str = "remote host"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, url: str) -> str:
        """Resolves `url` into canonical PGN text."""
        raise NotImplementedError

    async def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """Issues a GET and maps every failure onto `GameNotFound`."""
        logger.debug(f"GET {url}")
        try:
            response = await self.client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(f"Timed out waiting for {self.provider} ({url}).") from e
        except httpx.HTTPError as e:
            raise GameNotFound(f"Could not reach {self.provider} ({url}): {e}") from e

        if not response.is_success:
            raise GameNotFound(
                f"HTTP {response.status_code} from {self.provider} for {url}; "
                "the game does not exist or is not public."
            )
        logger.debug(f"GET {url} -> {response.status_code}, {len(response.content)} bytes")
        return response

    async def _get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        response = await self._get(url, headers=headers)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise GameNotFound(f"Response from {self.provider} ({url}) is not valid JSON.") from e
