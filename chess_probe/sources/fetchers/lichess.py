# chess_probe/chess_probe/sources/fetchers/lichess.py
"""
Fetches a game from lichess.org.

The export endpoint already answers with PGN, so the body is returned as-is.
"""
import logging
from urllib.parse import urlsplit

from chess_probe.config import settings
from chess_probe.exceptions import InvalidGameReference
from chess_probe.sources.fetchers.base import BaseFetcher

logger = logging.getLogger(settings.APP_NAME + ".LichessFetcher")


def extract_game_id(url: str) -> str:
    """
    Extracts the game id from a Lichess game URL.

    Accepts `/<id>`, `/<id>/black`, `/<id>#12` and `/game/export/<id>`.
    Player-specific 12-character ids are cut down to the game id.
    """
    segments = [s for s in urlsplit(url).path.split("/") if s]
    if segments[:2] == ["game", "export"]:
        segments = segments[2:]
    if not segments:
        raise InvalidGameReference(f"No game id found in Lichess URL '{url}'.")

    game_id = segments[0]
    if game_id.endswith(".pgn"):
        game_id = game_id[: -len(".pgn")]
    return game_id[: settings.LICHESS_GAME_ID_LENGTH]


def export_url(game_id: str) -> str:
    return settings.LICHESS_EXPORT_URL.format(game_id=game_id)


class LichessFetcher(BaseFetcher):
    provider = "Lichess"

    async def fetch(self, url: str) -> str:
        game_id = extract_game_id(url)
        logger.info(f"Fetching Lichess game {game_id}.")
        response = await self._get(export_url(game_id), headers={"Accept": "application/x-chess-pgn"})
        return response.text
