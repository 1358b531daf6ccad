# chess_probe/chess_probe/sources/fetchers/chesscom.py
"""
Fetches a live game from chess.com.

The public API has no "PGN by game id" endpoint, so the lookup runs in two
stages:

1. The live-game callback endpoint gives the game's date and the player
   shown at the top of the board (`ChessComGameMeta`).
2. That player's monthly archive is scanned for the game's canonical URL,
   and the matching entry's PGN is returned.

A failure in stage 1 short-circuits stage 2.
"""
import logging
import re
from typing import Any, Dict, List
from urllib.parse import urlsplit

from chess_probe.config import settings
from chess_probe.exceptions import GameNotFound, InvalidGameReference
from chess_probe.sources.fetchers.base import BaseFetcher
from chess_probe.types import ChessComGameMeta

logger = logging.getLogger(settings.APP_NAME + ".ChessComFetcher")

_PGN_DATE_PATTERN = re.compile(r"^(\d{4})\.(\d{2})")

_JSON_HEADERS: Dict[str, str] = {
    "User-Agent": settings.USER_AGENT,
    "Accept": "application/json",
}


def extract_game_id(url: str) -> str:
    """Returns the final path segment of the URL, without query string."""
    segments = [s for s in urlsplit(url).path.split("/") if s]
    if not segments:
        raise InvalidGameReference(f"No game id found in Chess.com URL '{url}'.")
    return segments[-1]


def _require(data: Any, *path: str) -> Any:
    """Walks nested JSON objects, raising `GameNotFound` on any gap."""
    node = data
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise GameNotFound(
                f"Chess.com response is missing field '{'.'.join(path)}'."
            )
        node = node[key]
    return node


def parse_game_meta(game_id: str, payload: Any) -> ChessComGameMeta:
    """Builds the first-stage result from the callback endpoint's JSON."""
    date = _require(payload, "game", "pgnHeaders", "Date")
    username = _require(payload, "players", "top", "username")
    if not isinstance(username, str) or not username:
        raise GameNotFound("Chess.com response has an empty 'players.top.username'.")

    match = _PGN_DATE_PATTERN.match(date) if isinstance(date, str) else None
    if match is None:
        raise GameNotFound(f"Chess.com game date {date!r} is not in YYYY.MM format.")

    year, month = match.groups()
    return ChessComGameMeta(game_id=game_id, username=username.lower(), year=year, month=month)


def find_game_pgn(games: List[Any], game_id: str) -> str:
    """Linear scan of an archive for the game's canonical URL."""
    wanted_url = settings.CHESS_COM_GAME_URL.format(game_id=game_id)
    for entry in games:
        if isinstance(entry, dict) and entry.get("url") == wanted_url:
            pgn = entry.get("pgn")
            if not isinstance(pgn, str) or not pgn.strip():
                raise GameNotFound(f"Chess.com archive entry for {wanted_url} has no PGN.")
            return pgn
    raise GameNotFound(f"Game {wanted_url} was not found in the player's monthly archive.")


class ChessComFetcher(BaseFetcher):
    provider = "Chess.com"

    async def lookup_game_meta(self, game_id: str) -> ChessComGameMeta:
        url = settings.CHESS_COM_CALLBACK_URL.format(game_id=game_id)
        payload = await self._get_json(url, headers=_JSON_HEADERS)
        meta = parse_game_meta(game_id, payload)
        logger.debug(f"Chess.com game {game_id}: top player '{meta.username}', {meta.year}/{meta.month}.")
        return meta

    async def find_archived_pgn(self, meta: ChessComGameMeta) -> str:
        url = settings.CHESS_COM_ARCHIVE_URL.format(
            username=meta.username, year=meta.year, month=meta.month
        )
        payload = await self._get_json(url, headers=_JSON_HEADERS)
        games = _require(payload, "games")
        if not isinstance(games, list):
            raise GameNotFound("Chess.com archive field 'games' is not a list.")
        logger.debug(f"Scanning {len(games)} archived games for {meta.game_id}.")
        return find_game_pgn(games, meta.game_id)

    async def fetch(self, url: str) -> str:
        game_id = extract_game_id(url)
        logger.info(f"Fetching Chess.com game {game_id}.")
        meta = await self.lookup_game_meta(game_id)
        return await self.find_archived_pgn(meta)
