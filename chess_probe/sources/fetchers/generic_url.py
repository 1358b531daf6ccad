# chess_probe/chess_probe/sources/fetchers/generic_url.py
"""Fetches PGN text from an arbitrary URL."""
import logging

from chess_probe.config import settings
from chess_probe.exceptions import GameNotFound
from chess_probe.sources.fetchers.base import BaseFetcher

logger = logging.getLogger(settings.APP_NAME + ".GenericUrlFetcher")

_PLAIN_TEXT_HINT = "The URL must serve the game as plain-text PGN, not an HTML page."


class GenericUrlFetcher(BaseFetcher):
    provider = "remote host"

    async def fetch(self, url: str) -> str:
        logger.info(f"Fetching PGN from {url}.")
        try:
            response = await self._get(url, headers={"User-Agent": settings.USER_AGENT})
        except GameNotFound as e:
            raise type(e)(f"{e} {_PLAIN_TEXT_HINT}") from e
        return response.text
