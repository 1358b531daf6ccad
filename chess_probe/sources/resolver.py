# chess_probe/chess_probe/sources/resolver.py
"""
Maps a classified game reference onto the code that produces its PGN.
"""
import logging
from typing import Dict, Type

import httpx

from chess_probe.config import settings
from chess_probe.pgn.game_loader import GameLoader
from chess_probe.sources.classifier import classify
from chess_probe.sources.fetchers.base import BaseFetcher
from chess_probe.sources.fetchers.chesscom import ChessComFetcher
from chess_probe.sources.fetchers.generic_url import GenericUrlFetcher
from chess_probe.sources.fetchers.lichess import LichessFetcher
from chess_probe.types import CanonicalGame, GameReference, SourceKind

logger = logging.getLogger(settings.APP_NAME + ".Resolver")

FETCHERS: Dict[SourceKind, Type[BaseFetcher]] = {
    SourceKind.LICHESS: LichessFetcher,
    SourceKind.CHESS_COM: ChessComFetcher,
    SourceKind.GENERIC_URL: GenericUrlFetcher,
}


async def resolve_game(
    reference: GameReference,
    client: httpx.AsyncClient,
    loader: GameLoader,
) -> CanonicalGame:
    """Classifies the reference and returns its canonical PGN text."""
    kind = classify(reference)
    if kind is SourceKind.LOCAL_FILE:
        return loader.read_local_file(reference.raw)

    fetcher = FETCHERS[kind](client)
    pgn_text = await fetcher.fetch(reference.raw)
    logger.info(f"Fetched {len(pgn_text)} characters of PGN from {fetcher.provider}.")
    return CanonicalGame(pgn_text=pgn_text, source_kind=kind, origin=reference.raw)
